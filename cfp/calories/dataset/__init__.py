from .dataset import CaloriesDataset, DEFAULT_ID_COLUMN
from .split import SplitType, SplitSpec, split_table, validate_splits

__all__ = [
    "CaloriesDataset",
    "DEFAULT_ID_COLUMN",
    "SplitType",
    "SplitSpec",
    "split_table",
    "validate_splits",
]
