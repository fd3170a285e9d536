from typing import Dict, Type, Union, Any
from .base import RegressionModel, RegressionConfig
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


class RegressionFactory:
    """Factory for creating regression models"""

    _models: Dict[str, Type[RegressionModel]] = {
        "linear": LinearModel,
        "ols": LinearModel,
        "glm": GLMModel,
        "tweedie": GLMModel,
        "regularized": RegularizedModel,
        "ridge": RegularizedModel,
        "spline": SplineModel,
        "gam": SplineModel,
        "xgboost": XGBoostModel,
        "xgb": XGBoostModel,
    }

    _configs: Dict[str, Type[RegressionConfig]] = {
        "linear": LinearConfig,
        "ols": LinearConfig,
        "glm": GLMConfig,
        "tweedie": GLMConfig,
        "regularized": RegularizedConfig,
        "ridge": RegularizedConfig,
        "spline": SplineConfig,
        "gam": SplineConfig,
        "xgboost": XGBoostConfig,
        "xgb": XGBoostConfig,
    }

    @classmethod
    def create(cls, model_name: str, config: Union[Dict[str, Any], RegressionConfig]) -> RegressionModel:
        """
        Create regression model instance

        Args:
            model_name: Name of the regression model
            config: Configuration dictionary or config object

        Returns:
            Configured regression model instance

        Raises:
            ValueError: If model name is unknown
        """
        model_name = model_name.lower()

        if model_name not in cls._models:
            available = list(cls._models.keys())
            raise ValueError(f"Unknown model: {model_name}. Available: {available}")

        model_class = cls._models[model_name]
        config_class = cls._configs[model_name]

        if isinstance(config, dict):
            config = config_class(**config)
        elif not isinstance(config, RegressionConfig):
            raise ValueError(f"Config must be dict or RegressionConfig, got {type(config)}")

        return model_class(config)

    @classmethod
    def get_available_models(cls) -> Dict[str, Type[RegressionModel]]:
        """Get dictionary of available models"""
        return cls._models.copy()

    @classmethod
    def get_model_config_class(cls, model_name: str) -> Type[RegressionConfig]:
        """Get configuration class for a specific model"""
        model_name = model_name.lower()

        if model_name not in cls._configs:
            available = list(cls._configs.keys())
            raise ValueError(f"Unknown model: {model_name}. Available: {available}")

        return cls._configs[model_name]

    @classmethod
    def register_model(
        cls, name: str, model_class: Type[RegressionModel], config_class: Type[RegressionConfig]
    ) -> None:
        """
        Register a new regression model

        Args:
            name: Name for the model
            model_class: Model implementation class
            config_class: Configuration class for the model
        """
        name = name.lower()
        cls._models[name] = model_class
        cls._configs[name] = config_class

    @classmethod
    def create_with_defaults(cls, model_name: str, **kwargs) -> RegressionModel:
        """Create model with default config, overriding specific parameters"""
        config_class = cls.get_model_config_class(model_name)
        config = config_class(**kwargs)
        return cls.create(model_name, config)
