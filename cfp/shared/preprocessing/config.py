from typing import List, Literal, Optional, Tuple
from pydantic.dataclasses import dataclass
from pydantic import Field

from cfp.shared.clustering.algorithms.kmeans import KMeansConfig

DEFAULT_TARGET_COLUMN = "Calories"
DEFAULT_CLUSTER_COLUMN = "cluster"


@dataclass(frozen=True)
class BoxCoxConfig:
    """Configuration for Box-Cox column selection and lambda estimation"""

    enabled: bool = True
    columns: Optional[List[str]] = Field(None, description="Columns to transform; skips the normality test when set")
    significance_level: float = Field(0.05, description="Columns with normality p-value below this are transformed")
    normality_test: Literal["shapiro", "normaltest", "kstest"] = "shapiro"
    test_sample_size: Optional[int] = Field(5000, description="Maximum rows fed to the normality test")
    lambda_sample_size: Optional[int] = Field(100_000, description="Maximum rows used to estimate lambda")
    epsilon: float = Field(1e-6, description="Offset added before the power transform")
    random_state: Optional[int] = Field(42, description="Seed for subsampling; None draws a fresh sample each fit")

    def __post_init__(self):
        if not 0.0 < self.significance_level < 1.0:
            raise ValueError(f"significance_level must be in (0, 1), got {self.significance_level}")
        if self.epsilon < 0:
            raise ValueError("epsilon must be non-negative")
        for name in ("test_sample_size", "lambda_sample_size"):
            value = getattr(self, name)
            if value is not None and value < 3:
                raise ValueError(f"{name} must be at least 3, got {value}")


@dataclass(frozen=True)
class ScalingConfig:
    """Configuration for z-score standardization"""

    # "raise": DegenerateScaleError on zero std, "zero": scaled value is 0
    degenerate_policy: Literal["raise", "zero"] = "raise"


@dataclass(frozen=True)
class FeatureConfig:
    """Configuration for derived columns"""

    exp_column: str = "Body_Temp"
    important_columns: Optional[List[str]] = None
    interactions: Optional[List[Tuple[str, str]]] = None

    def __post_init__(self):
        if self.important_columns is None:
            object.__setattr__(self, "important_columns", ["Duration", "Heart_Rate", "Body_Temp"])
        if self.interactions is None:
            # anchor column times each of the other important columns
            anchor, others = self.important_columns[:1], self.important_columns[1:]
            object.__setattr__(self, "interactions", [(anchor[0], other) for other in others])


@dataclass(frozen=True)
class PipelineConfig:
    """Configuration for the fit/apply feature pipeline"""

    target_column: str = DEFAULT_TARGET_COLUMN
    exclude_columns: Optional[List[str]] = None
    cluster_column: str = DEFAULT_CLUSTER_COLUMN
    cluster_columns: Optional[List[str]] = Field(None, description="Clustering features; defaults to all scaled columns")
    batch_size: int = Field(65536, description="Rows per nearest-centroid batch")

    boxcox: Optional[BoxCoxConfig] = None
    scaling: Optional[ScalingConfig] = None
    clustering: Optional[KMeansConfig] = None
    features: Optional[FeatureConfig] = None

    def __post_init__(self):
        if self.exclude_columns is None:
            object.__setattr__(self, "exclude_columns", [])
        if self.boxcox is None:
            object.__setattr__(self, "boxcox", BoxCoxConfig())
        if self.scaling is None:
            object.__setattr__(self, "scaling", ScalingConfig())
        if self.clustering is None:
            object.__setattr__(self, "clustering", KMeansConfig(n_clusters=4))
        if self.features is None:
            object.__setattr__(self, "features", FeatureConfig())

        if self.batch_size <= 0:
            raise ValueError("batch_size must be positive")
        if self.cluster_columns is not None and self.target_column in self.cluster_columns:
            raise ValueError(f"Target column '{self.target_column}' cannot be a clustering feature")

    @classmethod
    def from_dict(cls, config_dict: dict) -> "PipelineConfig":
        """Build a pipeline configuration from a plain (YAML-loaded) dictionary"""
        config_dict = dict(config_dict or {})
        boxcox_dict = config_dict.pop("boxcox", None)
        scaling_dict = config_dict.pop("scaling", None)
        clustering_dict = config_dict.pop("clustering", None)
        features_dict = config_dict.pop("features", None)

        features = None
        if features_dict is not None:
            features_dict = dict(features_dict)
            if features_dict.get("interactions") is not None:
                features_dict["interactions"] = [tuple(pair) for pair in features_dict["interactions"]]
            features = FeatureConfig(**features_dict)

        return cls(
            boxcox=BoxCoxConfig(**boxcox_dict) if boxcox_dict is not None else None,
            scaling=ScalingConfig(**scaling_dict) if scaling_dict is not None else None,
            clustering=KMeansConfig(**clustering_dict) if clustering_dict is not None else None,
            features=features,
            **config_dict,
        )
