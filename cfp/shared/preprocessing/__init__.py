"""Fit-once, apply-many feature preprocessing"""

from .config import PipelineConfig, BoxCoxConfig, ScalingConfig, FeatureConfig
from .state import FittedState, ScaleStats
from .boxcox import BoxCoxTransform
from .standardizer import Standardizer
from .features import FeatureDeriver
from .pipeline import FeaturePipeline

__all__ = [
    "PipelineConfig",
    "BoxCoxConfig",
    "ScalingConfig",
    "FeatureConfig",
    "FittedState",
    "ScaleStats",
    "BoxCoxTransform",
    "Standardizer",
    "FeatureDeriver",
    "FeaturePipeline",
]
