from typing import List

import numpy as np
import pandas as pd

from cfp.shared.errors import require_columns
from cfp.shared.preprocessing.config import FeatureConfig


class FeatureDeriver:
    """Stateless derived columns: exponent and square of one column plus pairwise interaction products"""

    def __init__(self, config: FeatureConfig):
        self.config = config

    @property
    def source_columns(self) -> List[str]:
        """Columns the derived features are computed from"""
        columns = [self.config.exp_column]
        for left, right in self.config.interactions:
            for col in (left, right):
                if col not in columns:
                    columns.append(col)
        return columns

    @property
    def output_columns(self) -> List[str]:
        """Names of the derived columns, in the order they are appended"""
        col = self.config.exp_column
        return [f"exp_{col}", f"{col}_sq"] + [f"{left}_x_{right}" for left, right in self.config.interactions]

    def transform(self, table: pd.DataFrame) -> pd.DataFrame:
        """
        Append derived columns to a copy of `table`

        Raises:
            ColumnMissingError: If a source column is absent
        """
        require_columns(table, self.source_columns)

        result = table.copy()
        col = self.config.exp_column
        values = table[col].to_numpy(dtype=np.float64)
        result[f"exp_{col}"] = np.exp(values)
        result[f"{col}_sq"] = values ** 2

        for left, right in self.config.interactions:
            result[f"{left}_x_{right}"] = (
                table[left].to_numpy(dtype=np.float64) * table[right].to_numpy(dtype=np.float64)
            )
        return result
