"""Regression models for predicting calories from pipeline output"""

from .base import RegressionModel, RegressionConfig
from .evaluation import RegressionEvaluator
from .factory import RegressionFactory
from .models import (
    LinearModel,
    LinearConfig,
    GLMModel,
    GLMConfig,
    RegularizedModel,
    RegularizedConfig,
    SplineModel,
    SplineConfig,
    XGBoostModel,
    XGBoostConfig,
)

__all__ = [
    "RegressionModel",
    "RegressionConfig",
    "RegressionEvaluator",
    "RegressionFactory",
    "LinearModel",
    "LinearConfig",
    "GLMModel",
    "GLMConfig",
    "RegularizedModel",
    "RegularizedConfig",
    "SplineModel",
    "SplineConfig",
    "XGBoostModel",
    "XGBoostConfig",
]
