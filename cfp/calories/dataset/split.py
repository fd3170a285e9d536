import logging
from enum import Enum
from typing import Dict, List

import numpy as np
import pandas as pd
from pydantic.dataclasses import dataclass

logger = logging.getLogger(__name__)


class SplitType(Enum):
    """Enumeration of supported dataset split types."""

    TRAIN = "train"
    VALID = "valid"
    TEST = "test"
    SCORE = "score"


@dataclass(frozen=True)
class SplitSpec:
    """Specification for a single split to be created."""

    name: str
    split_type: SplitType
    percentage: float
    enabled: bool = True

    def __post_init__(self):
        if not 0.0 < self.percentage <= 1.0:
            raise ValueError(f"Split percentage must be between 0.0 and 1.0, got {self.percentage}")


def validate_splits(splits: List[SplitSpec]) -> None:
    """Check that enabled splits have unique names and percentages summing to 1."""
    enabled_splits = [split for split in splits if split.enabled]
    if not enabled_splits:
        raise ValueError("At least one split must be enabled")

    total_percentage = sum(split.percentage for split in enabled_splits)
    if abs(total_percentage - 1.0) > 1e-6:
        raise ValueError(f"Split percentages must sum to 1.0, got {total_percentage}")

    split_names = [split.name for split in enabled_splits]
    if len(split_names) != len(set(split_names)):
        raise ValueError("Split names must be unique")


def split_table(table: pd.DataFrame, splits: List[SplitSpec], random_seed: int = 42) -> Dict[str, pd.DataFrame]:
    """
    Randomly partition table rows according to split specifications.

    Args:
        table: Table to split; its index is preserved in every part
        splits: Split specifications; disabled splits are skipped
        random_seed: Seed of the row permutation

    Returns:
        Dictionary mapping split name to its rows, in original row order
    """
    validate_splits(splits)
    logger.info(f"Creating splits from {len(table)} rows (seed: {random_seed})")

    positions = np.random.default_rng(random_seed).permutation(len(table))

    enabled_splits = [split for split in splits if split.enabled]
    split_data = {}
    current_idx = 0

    for i, split_spec in enumerate(enabled_splits):
        if i == len(enabled_splits) - 1:
            # last split takes the rounding remainder
            split_positions = positions[current_idx:]
        else:
            split_size = int(len(positions) * split_spec.percentage)
            split_positions = positions[current_idx : current_idx + split_size]
            current_idx += split_size

        split_data[split_spec.name] = table.iloc[np.sort(split_positions)].copy()

        percentage = (len(split_positions) / max(len(positions), 1)) * 100
        logger.info(f"Split '{split_spec.name}': {len(split_positions)} rows ({percentage:.1f}%)")

    return split_data
