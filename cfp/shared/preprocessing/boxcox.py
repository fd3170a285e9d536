import logging
import warnings
from typing import Dict, Iterable, Optional, Set

import numpy as np
import pandas as pd
from scipy import stats, special

from cfp.shared.errors import UndefinedTransformError, require_columns
from cfp.shared.preprocessing.config import BoxCoxConfig
from cfp.shared.utils.numpy_helpers import subsample

logger = logging.getLogger(__name__)

# Smallest sample each normality test accepts
MIN_TEST_SAMPLES = {"shapiro": 3, "normaltest": 8, "kstest": 2}


class BoxCoxTransform:
    """Skew-correcting power transform with one lambda per column, learned on training data"""

    def __init__(self, config: BoxCoxConfig):
        """
        Initialize Box-Cox transform

        Args:
            config: BoxCoxConfig with test, sampling and offset settings
        """
        self.config = config

    def _rng(self) -> np.random.Generator:
        return np.random.default_rng(self.config.random_state)

    def _normality_pvalue(self, values: np.ndarray) -> float:
        """p-value of the configured normality test (small p-value means not normal)"""
        test = self.config.normality_test
        if test == "shapiro":
            return float(stats.shapiro(values).pvalue)
        elif test == "normaltest":
            return float(stats.normaltest(values).pvalue)
        elif test == "kstest":
            return float(stats.kstest(values, "norm", args=(values.mean(), values.std(ddof=1))).pvalue)
        else:
            raise ValueError(f"Unknown normality test: {test}")

    def _check_positive(self, column: str, values: np.ndarray, epsilon: float) -> None:
        shifted = values + epsilon
        if np.any(shifted <= 0):
            n_bad = int(np.sum(shifted <= 0))
            raise UndefinedTransformError(
                f"Column '{column}' has {n_bad} values <= 0 after adding epsilon={epsilon}; "
                "Box-Cox requires strictly positive input"
            )

    def select_columns(self, table: pd.DataFrame, candidate_columns: Iterable[str]) -> Set[str]:
        """
        Select the columns that fail a normality test and therefore need a transform

        Columns with fewer than two distinct values, with missing values, or with
        values that stay non-positive after the epsilon offset are never selected.

        Args:
            table: Training table
            candidate_columns: Numeric predictor columns to test

        Returns:
            Set of column names whose p-value is below the significance level
        """
        candidate_columns = list(candidate_columns)
        require_columns(table, candidate_columns, "training table")

        if self.config.columns is not None:
            require_columns(table, self.config.columns, "training table")
            logger.info(f"Box-Cox columns fixed by configuration: {self.config.columns}")
            return set(self.config.columns)

        rng = self._rng()
        min_samples = MIN_TEST_SAMPLES[self.config.normality_test]
        selected = set()

        for col in candidate_columns:
            series = table[col]
            if not pd.api.types.is_numeric_dtype(series):
                raise ValueError(f"Box-Cox candidate column '{col}' is not numeric")
            if series.isna().any():
                logger.debug(f"Skipping '{col}' for normality test: contains missing values")
                continue
            if series.nunique() < 2:
                logger.debug(f"Skipping '{col}' for normality test: fewer than two distinct values")
                continue

            values = series.to_numpy(dtype=np.float64)
            if np.any(values + self.config.epsilon <= 0):
                warnings.warn(
                    f"Column '{col}' has non-positive values; excluded from Box-Cox selection."
                )
                continue

            sample = subsample(values, self.config.test_sample_size, rng)
            if len(sample) < min_samples:
                logger.debug(f"Skipping '{col}' for normality test: only {len(sample)} values")
                continue

            p_value = self._normality_pvalue(sample)
            logger.debug(f"Normality test '{self.config.normality_test}' for '{col}': p={p_value:.4g}")
            if p_value < self.config.significance_level:
                selected.add(col)

        logger.info(f"Selected {len(selected)} of {len(candidate_columns)} columns for Box-Cox: {sorted(selected)}")
        return selected

    def fit(self, table: pd.DataFrame, selected_columns: Iterable[str]) -> Dict[str, float]:
        """
        Estimate one lambda per selected column by maximizing the Box-Cox log-likelihood

        Args:
            table: Training table
            selected_columns: Columns to fit a lambda for

        Returns:
            Mapping column name -> lambda, in table column order

        Raises:
            ColumnMissingError: If a selected column is absent
            UndefinedTransformError: If a selected column has non-positive values after the offset
            ValueError: If a selected column has missing values
        """
        selected_columns = set(selected_columns)
        require_columns(table, selected_columns, "training table")

        rng = self._rng()
        lambdas = {}
        for col in [c for c in table.columns if c in selected_columns]:
            series = table[col]
            if series.isna().any():
                raise ValueError(f"Cannot fit Box-Cox lambda for '{col}': column has missing values")

            values = series.to_numpy(dtype=np.float64)
            self._check_positive(col, values, self.config.epsilon)

            sample = subsample(values, self.config.lambda_sample_size, rng)
            lambdas[col] = float(stats.boxcox_normmax(sample + self.config.epsilon, method="mle"))
            logger.debug(f"Box-Cox lambda for '{col}': {lambdas[col]:.6f} (n={len(sample)})")

        return lambdas

    def apply(self, table: pd.DataFrame, lambdas: Dict[str, float], epsilon: Optional[float] = None) -> pd.DataFrame:
        """
        Transform every column in `lambdas` with its stored lambda

        Args:
            table: Any table (training, validation, test or scoring)
            lambdas: Fitted mapping column name -> lambda
            epsilon: Offset used at fit time; defaults to the configured epsilon

        Returns:
            New table with transformed columns; other columns unchanged

        Raises:
            ColumnMissingError: If a column in `lambdas` is absent
            UndefinedTransformError: If a value is non-positive after the offset
        """
        epsilon = self.config.epsilon if epsilon is None else epsilon
        require_columns(table, lambdas.keys())

        result = table.copy()
        for col, lmbda in lambdas.items():
            values = table[col].to_numpy(dtype=np.float64)
            self._check_positive(col, values, epsilon)
            result[col] = special.boxcox(values + epsilon, lmbda)
        return result

    def inverse(self, table: pd.DataFrame, lambdas: Dict[str, float], epsilon: Optional[float] = None) -> pd.DataFrame:
        """
        Undo `apply`: (y*lambda + 1)^(1/lambda) - epsilon, or exp(y) - epsilon for lambda == 0

        Args:
            table: Table produced by `apply`
            lambdas: The mapping passed to `apply`
            epsilon: The offset passed to `apply`

        Returns:
            New table with the original scale restored for every column in `lambdas`
        """
        epsilon = self.config.epsilon if epsilon is None else epsilon
        require_columns(table, lambdas.keys())

        result = table.copy()
        for col, lmbda in lambdas.items():
            result[col] = special.inv_boxcox(table[col].to_numpy(dtype=np.float64), lmbda) - epsilon
        return result
