from typing import Optional
import numpy as np
from sklearn.cluster import KMeans
from pydantic.dataclasses import dataclass
from pydantic import Field

from cfp.shared.errors import NotFittedError
from ..utils import nearest_centroid


@dataclass(frozen=True)
class KMeansConfig:
    """Configuration for K-Means clustering"""
    n_clusters: int = Field(4, description="Number of clusters")
    init: str = Field("k-means++", description="Initialization method")
    max_iter: int = Field(300, description="Maximum number of iterations")
    tol: float = Field(1e-4, description="Tolerance for convergence")
    n_init: int = Field(10, description="Number of random restarts; the lowest-inertia run is kept")
    random_state: Optional[int] = Field(42, description="Seed for centroid initialization")

    def __post_init__(self):
        if self.n_clusters < 1:
            raise ValueError("n_clusters must be at least 1")
        if self.n_init < 1:
            raise ValueError("n_init must be at least 1")


class KMeansClustering:
    """K-Means clustering with explicit nearest-centroid prediction"""

    def __init__(self, config: KMeansConfig, batch_size: int = 65536):
        self.config = config
        self.batch_size = batch_size
        self._labels: Optional[np.ndarray] = None
        self._model = KMeans(
            n_clusters=config.n_clusters,
            init=config.init,
            max_iter=config.max_iter,
            tol=config.tol,
            n_init=config.n_init,
            random_state=config.random_state
        )

    def fit(self, features: np.ndarray) -> 'KMeansClustering':
        """Fit K-Means to the features"""
        if features.ndim != 2:
            raise ValueError("Features must be 2D array of shape (n_samples, n_features)")
        if features.shape[0] < self.config.n_clusters:
            raise ValueError(
                f"Need at least n_clusters={self.config.n_clusters} samples, got {features.shape[0]}"
            )

        self._model.fit(features)
        # training labels from the same kernel as predict
        self._labels = self.predict(features)
        return self

    @property
    def is_fitted(self) -> bool:
        return hasattr(self._model, "cluster_centers_")

    def _validate_fitted(self) -> None:
        if not self.is_fitted:
            raise NotFittedError("KMeansClustering has not been fitted yet. Call 'fit' first.")

    def predict(self, features: np.ndarray) -> np.ndarray:
        """Assign each row to its nearest fitted centroid (ties go to the lowest index)"""
        self._validate_fitted()
        if features.ndim != 2:
            raise ValueError("Features must be 2D array of shape (n_samples, n_features)")

        return nearest_centroid(features, self._model.cluster_centers_, batch_size=self.batch_size)

    def get_cluster_centers(self) -> np.ndarray:
        """Centroids of the kept run, shape (n_clusters, n_features)"""
        self._validate_fitted()
        return self._model.cluster_centers_

    @property
    def inertia(self) -> float:
        """Within-cluster sum of squared distances of the kept run"""
        self._validate_fitted()
        return float(self._model.inertia_)

    def get_labels(self) -> np.ndarray:
        """Training labels, identical to `predict` on the training features"""
        self._validate_fitted()
        return self._labels
