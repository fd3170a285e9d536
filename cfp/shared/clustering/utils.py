import numpy as np
from sklearn.metrics import pairwise_distances


def nearest_centroid(features: np.ndarray, centroids: np.ndarray, batch_size: int = 65536) -> np.ndarray:
    """
    Index of the nearest centroid (Euclidean) for every row.

    Rows are processed in batches of `batch_size`; np.argmin returns the first
    minimum, so ties resolve to the lowest centroid index.
    """
    features = np.ascontiguousarray(features, dtype=np.float64)
    centroids = np.ascontiguousarray(centroids, dtype=np.float64)
    if features.shape[1] != centroids.shape[1]:
        raise ValueError(
            f"Feature dimension {features.shape[1]} does not match centroid dimension {centroids.shape[1]}"
        )

    labels = np.empty(features.shape[0], dtype=np.int64)
    for start in range(0, features.shape[0], batch_size):
        stop = start + batch_size
        distance_matrix = pairwise_distances(features[start:stop], centroids, metric="euclidean")
        labels[start:stop] = np.argmin(distance_matrix, axis=1)
    return labels
