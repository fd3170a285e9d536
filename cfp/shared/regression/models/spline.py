from pydantic.dataclasses import dataclass
from pydantic import Field
from sklearn.linear_model import Ridge
from sklearn.preprocessing import SplineTransformer

from ..base import RegressionModel, RegressionConfig


@dataclass
class SplineConfig(RegressionConfig):
    """Configuration for additive spline regression"""
    n_knots: int = Field(5, description="Number of knots per numeric feature")
    degree: int = Field(3, description="Polynomial degree of the spline basis")
    alpha: float = Field(1e-3, description="Ridge penalty on the spline coefficients")


class SplineModel(RegressionModel):
    """B-spline basis expansion of every numeric column followed by ridge regression"""

    def __init__(self, config: SplineConfig):
        super().__init__(config)
        self.config: SplineConfig = config

    def _create_numeric_transformer(self) -> SplineTransformer:
        # linear extrapolation keeps unseen tails finite
        return SplineTransformer(n_knots=self.config.n_knots, degree=self.config.degree, extrapolation="linear")

    def _create_estimator(self) -> Ridge:
        return Ridge(alpha=self.config.alpha)
