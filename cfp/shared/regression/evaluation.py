"""Evaluation metrics for regression models"""

from typing import Dict, List, Sequence
import numpy as np
from sklearn.metrics import mean_absolute_error, mean_squared_error, r2_score

from cfp.shared.errors import ShapeMismatchError


class RegressionEvaluator:
    """Stateless regression evaluation class"""

    @staticmethod
    def get_metric_names() -> List[str]:
        """Get the names of all metrics that are computed by evaluate"""
        return ["rmsle", "rmse", "mae", "r2"]

    @staticmethod
    def _as_aligned_arrays(actual: Sequence[float], predicted: Sequence[float]):
        actual = np.asarray(actual, dtype=np.float64).ravel()
        predicted = np.asarray(predicted, dtype=np.float64).ravel()
        if actual.shape != predicted.shape:
            raise ShapeMismatchError(
                f"actual and predicted must have the same length, got {len(actual)} and {len(predicted)}"
            )
        if actual.size == 0:
            raise ValueError("Cannot evaluate an empty set of predictions")
        return actual, predicted

    @staticmethod
    def rmsle(actual: Sequence[float], predicted: Sequence[float]) -> float:
        """
        Root mean squared logarithmic error

        Negative predictions are clamped to zero before scoring.

        Args:
            actual: True values (non-negative)
            predicted: Predicted values

        Returns:
            sqrt(mean((log(1 + predicted) - log(1 + actual))^2))

        Raises:
            ShapeMismatchError: If the inputs differ in length
            ValueError: If the inputs are empty
        """
        actual, predicted = RegressionEvaluator._as_aligned_arrays(actual, predicted)
        predicted = np.maximum(predicted, 0.0)
        return float(np.sqrt(np.mean((np.log1p(predicted) - np.log1p(actual)) ** 2)))

    @staticmethod
    def evaluate(actual: Sequence[float], predicted: Sequence[float]) -> Dict[str, float]:
        """
        Compute all regression metrics

        Args:
            actual: True values
            predicted: Predicted values

        Returns:
            Dictionary with rmsle, rmse, mae and r2
        """
        actual, predicted = RegressionEvaluator._as_aligned_arrays(actual, predicted)
        return {
            "rmsle": RegressionEvaluator.rmsle(actual, predicted),
            "rmse": float(np.sqrt(mean_squared_error(actual, predicted))),
            "mae": float(mean_absolute_error(actual, predicted)),
            "r2": float(r2_score(actual, predicted)) if len(actual) > 1 else float("nan"),
        }
