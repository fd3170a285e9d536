from abc import ABC, abstractmethod
from typing import List, Optional, Union
import numpy as np
import pandas as pd
from pydantic.dataclasses import dataclass
from pydantic import Field
from sklearn.base import RegressorMixin, TransformerMixin
from sklearn.compose import ColumnTransformer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder

from cfp.shared.errors import NotFittedError, require_columns
from cfp.shared.regression.evaluation import RegressionEvaluator


@dataclass
class RegressionConfig:
    """Base configuration for regression models"""

    random_state: Optional[int] = Field(42, description="Random seed for reproducibility")
    log_target: bool = Field(False, description="Train on log1p(target) and invert predictions with expm1")
    one_hot_columns: Optional[List[str]] = Field(None, description="Numeric columns to one-hot encode")

    def __post_init__(self):
        if self.one_hot_columns is None:
            self.one_hot_columns = ["cluster"]


class RegressionModel(ABC):
    """
    Abstract base class for regression models trained on pipeline output tables.

    Contract: fit(table with target) -> model, predict(table without target) -> vector.
    Non-numeric columns and the configured one-hot columns are one-hot encoded;
    the encoder ignores categories unseen at fit time.
    """

    def __init__(self, config: RegressionConfig):
        self.config = config
        self._is_fitted = False
        self._model: Optional[Pipeline] = None
        self._feature_columns: Optional[List[str]] = None
        self._target_column: Optional[str] = None

    @abstractmethod
    def _create_estimator(self) -> RegressorMixin:
        """Create the unfitted scikit-learn compatible regressor"""
        pass

    def _create_numeric_transformer(self) -> Union[str, TransformerMixin]:
        """Transformer for numeric columns; subclasses may expand them (e.g. splines)"""
        return "passthrough"

    def _categorical_columns(self, table: pd.DataFrame) -> List[str]:
        return [
            col for col in self._feature_columns
            if col in self.config.one_hot_columns or not pd.api.types.is_numeric_dtype(table[col])
        ]

    def fit(self, table: pd.DataFrame, target_column: str) -> "RegressionModel":
        """
        Fit the model to every non-target column of `table`

        Args:
            table: Training table including the target column
            target_column: Name of the target column

        Returns:
            Self for method chaining
        """
        require_columns(table, [target_column], "training table")
        self._target_column = target_column
        self._feature_columns = [col for col in table.columns if col != target_column]
        if not self._feature_columns:
            raise ValueError("Training table has no feature columns")

        categorical = self._categorical_columns(table)
        numeric = [col for col in self._feature_columns if col not in categorical]

        transformers = []
        if numeric:
            transformers.append(("numeric", self._create_numeric_transformer(), numeric))
        if categorical:
            transformers.append(
                ("categorical", OneHotEncoder(handle_unknown="ignore", sparse_output=False), categorical)
            )

        self._model = Pipeline(
            [
                ("encode", ColumnTransformer(transformers)),
                ("regressor", self._create_estimator()),
            ]
        )

        y = table[target_column].to_numpy(dtype=np.float64)
        if self.config.log_target:
            y = np.log1p(y)

        self._model.fit(table[self._feature_columns], y)
        self._is_fitted = True
        return self

    def predict(self, table: pd.DataFrame) -> np.ndarray:
        """
        Predict the target for every row

        Args:
            table: Table with the training feature columns; a target column is ignored

        Returns:
            Predictions of shape (n_rows,)
        """
        if not self._is_fitted:
            raise NotFittedError("Model must be fitted before making predictions")
        require_columns(table, self._feature_columns)

        predictions = np.asarray(self._model.predict(table[self._feature_columns]), dtype=np.float64)
        if self.config.log_target:
            predictions = np.expm1(predictions)
        return predictions

    def score(self, table: pd.DataFrame) -> float:
        """RMSLE of the predictions on a table carrying the target"""
        require_columns(table, [self._target_column])
        return RegressionEvaluator.rmsle(table[self._target_column], self.predict(table))

    @property
    def is_fitted(self) -> bool:
        """Check if the model has been fitted"""
        return self._is_fitted

    @property
    def feature_columns(self) -> Optional[List[str]]:
        """Columns the model was trained on"""
        return self._feature_columns
