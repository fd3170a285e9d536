"""Regression models package"""

from .linear import LinearModel, LinearConfig
from .glm import GLMModel, GLMConfig
from .regularized import RegularizedModel, RegularizedConfig
from .spline import SplineModel, SplineConfig
from .xgboost import XGBoostModel, XGBoostConfig

__all__ = [
    'LinearModel',
    'LinearConfig',
    'GLMModel',
    'GLMConfig',
    'RegularizedModel',
    'RegularizedConfig',
    'SplineModel',
    'SplineConfig',
    'XGBoostModel',
    'XGBoostConfig',
]
