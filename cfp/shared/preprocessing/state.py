import os
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Sequence

import yaml
from pydantic.dataclasses import dataclass

from cfp.shared.utils.numpy_helpers import convert_to_primitives_nested


@dataclass(frozen=True)
class ScaleStats:
    """Mean and sample standard deviation of one training column"""

    mean: float
    std: float


@dataclass(frozen=True)
class FittedState:
    """Everything learned from the training table; the only input `apply` reads besides the table"""

    boxcox_lambdas: Mapping[str, float]
    boxcox_epsilon: float
    scale_stats: Mapping[str, ScaleStats]
    cluster_centroids: Sequence[Mapping[str, float]]
    cluster_features: Sequence[str]
    target_column: str

    def __post_init__(self):
        # read-only copies: nested containers cannot change after fit
        object.__setattr__(self, "boxcox_lambdas", MappingProxyType(dict(self.boxcox_lambdas)))
        object.__setattr__(self, "scale_stats", MappingProxyType(dict(self.scale_stats)))
        object.__setattr__(
            self,
            "cluster_centroids",
            tuple(MappingProxyType(dict(centroid)) for centroid in self.cluster_centroids),
        )
        object.__setattr__(self, "cluster_features", tuple(self.cluster_features))

    @property
    def n_clusters(self) -> int:
        return len(self.cluster_centroids)

    @property
    def required_columns(self) -> List[str]:
        """Columns a table must carry for `apply`"""
        columns = list(self.boxcox_lambdas)
        for col in list(self.scale_stats) + list(self.cluster_features):
            if col not in columns:
                columns.append(col)
        return columns

    def to_dict(self) -> Dict[str, Any]:
        return convert_to_primitives_nested(
            {
                "boxcox_lambdas": dict(self.boxcox_lambdas),
                "boxcox_epsilon": self.boxcox_epsilon,
                "scale_stats": {col: {"mean": s.mean, "std": s.std} for col, s in self.scale_stats.items()},
                "cluster_centroids": [dict(centroid) for centroid in self.cluster_centroids],
                "cluster_features": list(self.cluster_features),
                "target_column": self.target_column,
            }
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FittedState":
        return cls(
            boxcox_lambdas=data.get("boxcox_lambdas", {}),
            boxcox_epsilon=data["boxcox_epsilon"],
            scale_stats={col: ScaleStats(**s) for col, s in data.get("scale_stats", {}).items()},
            cluster_centroids=data["cluster_centroids"],
            cluster_features=data["cluster_features"],
            target_column=data["target_column"],
        )

    def to_yaml(self, file_path: str) -> None:
        """
        Save the fitted state to a YAML file.

        Args:
            file_path: Path where the YAML file should be saved
        """
        directory = os.path.dirname(file_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        with open(file_path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    @classmethod
    def from_yaml(cls, file_path: str) -> "FittedState":
        """
        Load a fitted state from a YAML file.

        Raises:
            ValueError: If the file doesn't exist or has an invalid format
        """
        if not os.path.exists(file_path):
            raise ValueError(f"Fitted state file does not exist: {file_path}")

        with open(file_path, "r") as f:
            data = yaml.safe_load(f)

        try:
            return cls.from_dict(data)
        except (KeyError, TypeError) as e:
            raise ValueError(f"Error loading fitted state file {file_path}: {e}") from e
