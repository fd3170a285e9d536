"""
Clustering module for tabular features

Fits k-means centroids on a training table and assigns rows of any other
table to the nearest fitted centroid.
"""

from .evaluation import ClusteringEvaluator
from .assigner import ClusterAssigner

# Algorithm imports
from .algorithms.kmeans import KMeansClustering, KMeansConfig

# Utils import
from . import utils

__all__ = [
    # Table-level assignment
    "ClusterAssigner",
    # Evaluation
    "ClusteringEvaluator",
    # Specific algorithms
    "KMeansClustering",
    "KMeansConfig",
    # Utility functions
    "utils",
]
