"""Clustering algorithm implementations"""

from .kmeans import KMeansClustering, KMeansConfig

__all__ = [
    "KMeansClustering",
    "KMeansConfig",
]
