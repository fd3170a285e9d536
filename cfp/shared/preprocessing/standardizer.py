import logging
from typing import Dict, Iterable, Optional

import numpy as np
import pandas as pd

from cfp.shared.errors import DegenerateScaleError, require_columns
from cfp.shared.preprocessing.config import ScalingConfig, DEFAULT_TARGET_COLUMN
from cfp.shared.preprocessing.state import ScaleStats

logger = logging.getLogger(__name__)


class Standardizer:
    """Z-score scaling with per-column mean and sample standard deviation learned on training data"""

    def __init__(self, config: ScalingConfig, target_column: str = DEFAULT_TARGET_COLUMN):
        self.config = config
        self.target_column = target_column

    def fit(self, table: pd.DataFrame, numeric_columns: Iterable[str]) -> Dict[str, ScaleStats]:
        """
        Compute mean and sample standard deviation (ddof=1) per column

        Args:
            table: Training table (after Box-Cox)
            numeric_columns: Numeric predictor columns; must not contain the target

        Returns:
            Mapping column name -> ScaleStats
        """
        numeric_columns = list(numeric_columns)
        if self.target_column in numeric_columns:
            raise ValueError(f"Target column '{self.target_column}' must not be standardized")
        require_columns(table, numeric_columns, "training table")

        stats = {}
        for col in numeric_columns:
            series = table[col]
            if not pd.api.types.is_numeric_dtype(series):
                raise ValueError(f"Column '{col}' is not numeric")
            if series.isna().any():
                raise ValueError(f"Cannot compute scale statistics for '{col}': column has missing values")

            std = float(series.std(ddof=1)) if len(series) > 1 else 0.0
            stats[col] = ScaleStats(mean=float(series.mean()), std=std)
            if std == 0.0:
                logger.warning(f"Column '{col}' has zero standard deviation in the training table")

        return stats

    def apply(self, table: pd.DataFrame, stats: Dict[str, ScaleStats]) -> pd.DataFrame:
        """
        Replace every column in `stats` with (x - mean) / std

        A zero std follows `degenerate_policy`: "raise" raises DegenerateScaleError,
        "zero" sets every scaled value of that column to 0.

        Args:
            table: Any table
            stats: Fitted scale statistics

        Returns:
            New table with scaled columns; other columns unchanged

        Raises:
            ColumnMissingError: If a column in `stats` is absent
            DegenerateScaleError: If a column has zero std under the "raise" policy
        """
        require_columns(table, stats.keys())

        degenerate = [col for col, col_stats in stats.items() if col_stats.std == 0.0]
        if degenerate and self.config.degenerate_policy == "raise":
            raise DegenerateScaleError(
                f"Columns with zero standard deviation cannot be standardized: {degenerate}"
            )

        result = table.copy()
        for col, col_stats in stats.items():
            values = table[col].to_numpy(dtype=np.float64)
            if col_stats.std == 0.0:
                result[col] = np.zeros_like(values)
            else:
                result[col] = (values - col_stats.mean) / col_stats.std
        return result

    def inverse(self, table: pd.DataFrame, stats: Dict[str, ScaleStats]) -> pd.DataFrame:
        """Undo `apply`: x * std + mean"""
        require_columns(table, stats.keys())

        result = table.copy()
        for col, col_stats in stats.items():
            result[col] = table[col].to_numpy(dtype=np.float64) * col_stats.std + col_stats.mean
        return result
