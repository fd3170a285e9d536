from pydantic.dataclasses import dataclass
from pydantic import Field
from sklearn.linear_model import TweedieRegressor

from ..base import RegressionModel, RegressionConfig


@dataclass
class GLMConfig(RegressionConfig):
    """Configuration for a Tweedie generalized linear model"""
    power: float = Field(1.0, description="Tweedie power: 0 normal, 1 Poisson, 2 Gamma")
    link: str = Field("log", description="Link function: auto, identity or log")
    alpha: float = Field(0.0, description="L2 penalty strength")
    max_iter: int = Field(1000, description="Maximum solver iterations")


class GLMModel(RegressionModel):
    """Generalized linear model with a Tweedie distribution"""

    def __init__(self, config: GLMConfig):
        super().__init__(config)
        self.config: GLMConfig = config

    def _create_estimator(self) -> TweedieRegressor:
        return TweedieRegressor(
            power=self.config.power,
            link=self.config.link,
            alpha=self.config.alpha,
            max_iter=self.config.max_iter,
        )
