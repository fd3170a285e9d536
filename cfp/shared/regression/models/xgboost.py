from typing import Optional
from pydantic.dataclasses import dataclass
from pydantic import Field
import xgboost as xgb

from ..base import RegressionModel, RegressionConfig


@dataclass
class XGBoostConfig(RegressionConfig):
    """Configuration for XGBoost regressor"""
    n_estimators: int = Field(300, description="Number of boosting rounds")
    max_depth: int = Field(6, description="Maximum depth of trees")
    learning_rate: float = Field(0.1, description="Boosting learning rate")
    subsample: float = Field(1.0, description="Subsample ratio of training instances")
    colsample_bytree: float = Field(1.0, description="Subsample ratio of columns when constructing each tree")
    reg_alpha: float = Field(0.0, description="L1 regularization term on weights")
    reg_lambda: float = Field(1.0, description="L2 regularization term on weights")
    min_child_weight: float = Field(1.0, description="Minimum sum of instance weight needed in a child")
    objective: Optional[str] = Field(None, description="Learning objective, defaults to squared error")
    n_jobs: Optional[int] = Field(1, description="Number of parallel threads")


class XGBoostModel(RegressionModel):
    """Gradient boosted trees regressor"""

    def __init__(self, config: XGBoostConfig):
        super().__init__(config)
        self.config: XGBoostConfig = config

    def _create_estimator(self) -> xgb.XGBRegressor:
        return xgb.XGBRegressor(
            n_estimators=self.config.n_estimators,
            max_depth=self.config.max_depth,
            learning_rate=self.config.learning_rate,
            subsample=self.config.subsample,
            colsample_bytree=self.config.colsample_bytree,
            reg_alpha=self.config.reg_alpha,
            reg_lambda=self.config.reg_lambda,
            min_child_weight=self.config.min_child_weight,
            objective=self.config.objective or "reg:squarederror",
            n_jobs=self.config.n_jobs,
            random_state=self.config.random_state,
        )
