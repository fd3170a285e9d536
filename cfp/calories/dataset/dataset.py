import logging
import os
from pathlib import Path
from typing import List, Optional

import numpy as np
import pandas as pd

from cfp.shared.preprocessing.config import DEFAULT_TARGET_COLUMN

logger = logging.getLogger(__name__)

DEFAULT_ID_COLUMN = "id"


class CaloriesDataset:
    """
    Dataset class for loading a calories CSV file.

    The file holds one row per exercise session with an identifier column,
    the predictor columns and, for training files, the target column.
    The identifier is extracted into `ids` and never becomes a feature, so it
    cannot reach the feature pipeline. Non-numeric columns and the configured
    categorical columns are converted to the pandas `category` dtype.
    """

    def __init__(
        self,
        dataset_path: str,
        id_column: Optional[str] = DEFAULT_ID_COLUMN,
        target_column: str = DEFAULT_TARGET_COLUMN,
        categorical_columns: Optional[List[str]] = None,
    ):
        """
        Load a dataset from a CSV file.

        Args:
            dataset_path: Path to the CSV file
            id_column: Name of the identifier column. None generates a
                       positional identifier.
            target_column: Name of the target column, which may be absent
                           (scoring files)
            categorical_columns: Additional columns to treat as categorical

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the identifier column is missing or not unique
        """
        self.dataset_path = str(Path(dataset_path).resolve())
        if not os.path.exists(self.dataset_path):
            raise FileNotFoundError(f"Dataset file not found: {self.dataset_path}")
        if os.path.isdir(self.dataset_path):
            raise ValueError(f"Dataset path must be a file: {self.dataset_path}")

        self.id_column = id_column
        self.target_column = target_column
        self._extra_categorical = list(categorical_columns or [])

        self._load()

    def _load(self) -> None:
        """Load the CSV and separate identifiers from features."""
        table = pd.read_csv(self.dataset_path)

        if self.id_column is not None:
            if self.id_column not in table.columns:
                raise ValueError(
                    f"Dataset must have '{self.id_column}' column. Available columns: {list(table.columns)}"
                )
            if table[self.id_column].duplicated().any():
                raise ValueError(f"Identifier column '{self.id_column}' contains duplicate values")
            self.ids = table[self.id_column].reset_index(drop=True)
            table = table.drop(columns=[self.id_column])
        else:
            self.ids = pd.Series(np.arange(len(table)), name="id")

        for col in self._extra_categorical:
            if col not in table.columns:
                raise ValueError(
                    f"Categorical column '{col}' does not exist in dataset. Available columns: {list(table.columns)}"
                )

        for col in table.columns:
            if col == self.target_column:
                continue
            if col in self._extra_categorical or not pd.api.types.is_numeric_dtype(table[col]):
                table[col] = table[col].astype("category")

        self.features = table.reset_index(drop=True)
        logger.info(f"Loaded {len(self.features)} rows with {self.features.shape[1]} columns from {self.dataset_path}")

    @property
    def has_target(self) -> bool:
        """Whether the file carries the target column"""
        return self.target_column in self.features.columns

    @property
    def categorical_columns(self) -> List[str]:
        return [col for col in self.features.columns if isinstance(self.features[col].dtype, pd.CategoricalDtype)]

    @property
    def numeric_columns(self) -> List[str]:
        """Numeric predictor columns, excluding the target"""
        return [
            col
            for col in self.features.columns
            if col != self.target_column and col not in self.categorical_columns
        ]

    def get_target(self) -> pd.Series:
        """
        Get the target column.

        Raises:
            ValueError: If the dataset has no target column
        """
        if not self.has_target:
            raise ValueError(f"Dataset has no target column '{self.target_column}'")
        return self.features[self.target_column]

    def __len__(self) -> int:
        return len(self.features)

    def __repr__(self) -> str:
        return (
            f"CaloriesDataset(path='{self.dataset_path}', rows={len(self)}, "
            f"numeric={len(self.numeric_columns)}, categorical={len(self.categorical_columns)}, "
            f"has_target={self.has_target})"
        )
