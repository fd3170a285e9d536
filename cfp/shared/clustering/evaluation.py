import numpy as np
from sklearn.metrics import (
    silhouette_score,
    calinski_harabasz_score,
    davies_bouldin_score,
)
from typing import Dict, Any, Optional
import warnings


class ClusteringEvaluator:
    """Evaluates clustering quality using internal metrics"""

    @staticmethod
    def evaluate(
        features: np.ndarray,
        labels: np.ndarray,
        silhouette_sample_size: Optional[int] = 10000,
        random_state: Optional[int] = 42,
    ) -> Dict[str, Any]:
        """
        Compute clustering evaluation metrics

        Args:
            features: Input features used for clustering
            labels: Cluster labels
            silhouette_sample_size: Rows sampled for the silhouette score (quadratic cost), None for all
            random_state: Seed for the silhouette sample

        Returns:
            Dictionary containing evaluation metrics
        """
        n_samples = len(labels)
        unique_labels, counts = np.unique(labels, return_counts=True)
        n_clusters = len(unique_labels)

        result = {
            "n_samples": n_samples,
            "n_clusters": n_clusters,
            "cluster_sizes": {int(label): int(count) for label, count in zip(unique_labels, counts)},
        }

        if n_clusters < 2 or n_samples <= n_clusters:
            result.update(
                {
                    "error": "Insufficient samples or clusters for evaluation",
                    "silhouette_score": None,
                    "calinski_harabasz_score": None,
                    "davies_bouldin_score": None,
                }
            )
            return result

        sample_size = None
        if silhouette_sample_size is not None and n_samples > silhouette_sample_size:
            sample_size = silhouette_sample_size

        try:
            result["silhouette_score"] = float(
                silhouette_score(features, labels, sample_size=sample_size, random_state=random_state)
            )
            result["calinski_harabasz_score"] = float(calinski_harabasz_score(features, labels))
            result["davies_bouldin_score"] = float(davies_bouldin_score(features, labels))
        except ValueError as e:
            warnings.warn(f"Error computing internal metrics: {e}")
            result.update(
                {
                    "silhouette_score": None,
                    "calinski_harabasz_score": None,
                    "davies_bouldin_score": None,
                    "error": str(e),
                }
            )

        return result
