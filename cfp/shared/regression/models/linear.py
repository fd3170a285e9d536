from pydantic.dataclasses import dataclass
from pydantic import Field
from sklearn.linear_model import LinearRegression

from ..base import RegressionModel, RegressionConfig


@dataclass
class LinearConfig(RegressionConfig):
    """Configuration for ordinary least squares"""
    fit_intercept: bool = Field(True, description="Whether to fit an intercept")


class LinearModel(RegressionModel):
    """Ordinary least squares regression"""

    def __init__(self, config: LinearConfig):
        super().__init__(config)
        self.config: LinearConfig = config

    def _create_estimator(self) -> LinearRegression:
        return LinearRegression(fit_intercept=self.config.fit_intercept)
