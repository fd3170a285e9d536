from typing import Literal, Union
from pydantic.dataclasses import dataclass
from pydantic import Field
from sklearn.linear_model import ElasticNet, Lasso, Ridge

from ..base import RegressionModel, RegressionConfig


@dataclass
class RegularizedConfig(RegressionConfig):
    """Configuration for penalized linear regression"""
    penalty: Literal["ridge", "lasso", "elasticnet"] = Field("ridge", description="Penalty type")
    alpha: float = Field(1.0, description="Penalty strength")
    l1_ratio: float = Field(0.5, description="L1 share of the elastic net penalty")
    max_iter: int = Field(10000, description="Maximum coordinate descent iterations")


class RegularizedModel(RegressionModel):
    """Ridge, lasso or elastic net regression"""

    def __init__(self, config: RegularizedConfig):
        super().__init__(config)
        self.config: RegularizedConfig = config

    def _create_estimator(self) -> Union[Ridge, Lasso, ElasticNet]:
        if self.config.penalty == "ridge":
            return Ridge(alpha=self.config.alpha, random_state=self.config.random_state)
        elif self.config.penalty == "lasso":
            return Lasso(alpha=self.config.alpha, max_iter=self.config.max_iter, random_state=self.config.random_state)
        elif self.config.penalty == "elasticnet":
            return ElasticNet(
                alpha=self.config.alpha,
                l1_ratio=self.config.l1_ratio,
                max_iter=self.config.max_iter,
                random_state=self.config.random_state,
            )
        else:
            raise ValueError(f"Unknown penalty: {self.config.penalty}")
