import logging
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd

from cfp.shared.clustering.algorithms.kmeans import KMeansClustering, KMeansConfig
from cfp.shared.clustering.utils import nearest_centroid
from cfp.shared.errors import NotFittedError, require_columns

logger = logging.getLogger(__name__)


class ClusterAssigner:
    """Fits k-means centroids on a training table and assigns any table's rows to them"""

    def __init__(self, config: KMeansConfig, batch_size: int = 65536):
        """
        Initialize cluster assigner

        Args:
            config: KMeansConfig with restart count, seed and iteration limits
            batch_size: Rows per nearest-centroid distance batch
        """
        self.config = config
        self.batch_size = batch_size
        self._algorithm: Optional[KMeansClustering] = None

    def fit(self, table: pd.DataFrame, feature_columns: Sequence[str], k: Optional[int] = None) -> List[Dict[str, float]]:
        """
        Partition the training rows into k groups over `feature_columns`

        Args:
            table: Training table (already standardized)
            feature_columns: Columns the partition is computed on; never the target
            k: Number of clusters, overriding config.n_clusters when given

        Returns:
            Centroids in the order of the final iteration, each a mapping column -> value

        Raises:
            ColumnMissingError: If a feature column is absent
            ValueError: If the table has missing values in the feature columns
        """
        feature_columns = list(feature_columns)
        require_columns(table, feature_columns, "training table")

        features = table[feature_columns].to_numpy(dtype=np.float64)
        if np.isnan(features).any():
            raise ValueError("Clustering features contain missing values")

        config = self.config
        if k is not None and k != config.n_clusters:
            config = KMeansConfig(
                n_clusters=k,
                init=config.init,
                max_iter=config.max_iter,
                tol=config.tol,
                n_init=config.n_init,
                random_state=config.random_state,
            )

        self._algorithm = KMeansClustering(config, batch_size=self.batch_size).fit(features)

        centers = self._algorithm.get_cluster_centers()
        logger.info(
            f"Fitted {config.n_clusters} clusters on {len(feature_columns)} features "
            f"({config.n_init} restarts, inertia {self._algorithm.inertia:.4f})"
        )
        return [
            {col: float(value) for col, value in zip(feature_columns, center)}
            for center in centers
        ]

    def assign(
        self,
        table: pd.DataFrame,
        centroids: Sequence[Dict[str, float]],
        feature_columns: Sequence[str],
    ) -> np.ndarray:
        """
        Assign every row to the index of its nearest centroid

        Only `feature_columns` are read, so the target and any other columns are
        ignored even when present.

        Args:
            table: Table to assign (already standardized)
            centroids: Fitted centroids, each a mapping column -> value
            feature_columns: Columns used for the distance computation

        Returns:
            Integer array with one cluster index per row

        Raises:
            ColumnMissingError: If a feature column is absent from the table
            ValueError: If there are no centroids or a centroid lacks a feature column
        """
        feature_columns = list(feature_columns)
        if not centroids:
            raise ValueError("No centroids to assign rows to")
        require_columns(table, feature_columns)

        missing_in_centroids = [col for col in feature_columns if col not in centroids[0]]
        if missing_in_centroids:
            raise ValueError(f"Centroids lack feature columns: {missing_in_centroids}")

        features = table[feature_columns].to_numpy(dtype=np.float64)
        centers = np.array([[centroid[col] for col in feature_columns] for centroid in centroids], dtype=np.float64)
        return nearest_centroid(features, centers, batch_size=self.batch_size)

    def get_labels(self) -> np.ndarray:
        """Training labels from the last fit"""
        if self._algorithm is None:
            raise NotFittedError("ClusterAssigner has not been fitted yet. Call 'fit' first.")
        return self._algorithm.get_labels()

    @property
    def inertia(self) -> float:
        """Within-cluster sum of squares from the last fit"""
        if self._algorithm is None:
            raise NotFittedError("ClusterAssigner has not been fitted yet. Call 'fit' first.")
        return self._algorithm.inertia
