import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd

from cfp.shared.clustering.assigner import ClusterAssigner
from cfp.shared.errors import NotFittedError, PipelineError, require_columns, require_complete
from cfp.shared.preprocessing.boxcox import BoxCoxTransform
from cfp.shared.preprocessing.config import PipelineConfig
from cfp.shared.preprocessing.features import FeatureDeriver
from cfp.shared.preprocessing.standardizer import Standardizer
from cfp.shared.preprocessing.state import FittedState

logger = logging.getLogger(__name__)


class FeaturePipeline:
    """
    Fits Box-Cox, standardization and k-means parameters on a training table
    and replays them on any other table.

    Fit order: Box-Cox selection and lambdas -> scale statistics on the
    Box-Cox-transformed training table -> centroids on the standardized
    training table. Apply order: Box-Cox -> standardization -> derived
    columns -> cluster assignment. Only the FittedState carries information
    from training to other tables.
    """

    def __init__(self, config: Optional[PipelineConfig] = None):
        """
        Initialize feature pipeline

        Args:
            config: PipelineConfig; defaults are used when omitted
        """
        self.config = config if config is not None else PipelineConfig()
        self.boxcox = BoxCoxTransform(self.config.boxcox)
        self.standardizer = Standardizer(self.config.scaling, target_column=self.config.target_column)
        self.assigner = ClusterAssigner(self.config.clustering, batch_size=self.config.batch_size)
        self.deriver = FeatureDeriver(self.config.features)

        self._state: Optional[FittedState] = None

    @property
    def state(self) -> Optional[FittedState]:
        return self._state

    @property
    def is_fitted(self) -> bool:
        return self._state is not None

    def _validate_fitted(self):
        """Check if pipeline has been fitted"""
        if self._state is None:
            raise NotFittedError(
                "This FeaturePipeline instance is not fitted yet. "
                "Call 'fit' with the training table before using 'apply'."
            )

    def numeric_predictors(self, table: pd.DataFrame) -> List[str]:
        """Numeric columns of `table` other than the target, the excluded and the cluster column"""
        skip = {self.config.target_column, self.config.cluster_column, *self.config.exclude_columns}
        return [
            col for col in table.columns
            if col not in skip and pd.api.types.is_numeric_dtype(table[col]) and not pd.api.types.is_bool_dtype(table[col])
        ]

    def fit(self, table: pd.DataFrame) -> FittedState:
        """
        Learn every transform parameter from the training table

        Args:
            table: Training table; the only table this call reads

        Returns:
            The FittedState, also kept by the pipeline

        Raises:
            PipelineError: If the pipeline was already fitted
            DegenerateScaleError: If a predictor is constant under the "raise" policy
            UndefinedTransformError: If a Box-Cox column has non-positive values
        """
        if self._state is not None:
            raise PipelineError("FeaturePipeline is already fitted; create a new instance to refit")
        if len(table) == 0:
            raise ValueError("Cannot fit on an empty table")

        numeric_columns = self.numeric_predictors(table)
        if not numeric_columns:
            raise ValueError("Training table has no numeric predictor columns")
        logger.info(f"Fitting pipeline on {len(table)} rows, {len(numeric_columns)} numeric predictors")

        # Step 1: Box-Cox column selection and lambdas
        if self.config.boxcox.enabled:
            selected = self.boxcox.select_columns(table, numeric_columns)
            lambdas = self.boxcox.fit(table, selected)
        else:
            lambdas = {}
        transformed = self.boxcox.apply(table, lambdas, self.config.boxcox.epsilon)
        for col, lmbda in lambdas.items():
            logger.info(f"  Box-Cox '{col}': lambda={lmbda:.6f}")

        # Step 2: Scale statistics on Box-Cox output
        scale_stats = self.standardizer.fit(transformed, numeric_columns)
        scaled = self.standardizer.apply(transformed, scale_stats)

        # Step 3: Centroids on standardized output
        cluster_features = self.config.cluster_columns or numeric_columns
        missing_stats = [col for col in cluster_features if col not in scale_stats]
        if missing_stats:
            raise ValueError(f"Clustering features must be standardized numeric predictors: {missing_stats}")
        centroids = self.assigner.fit(scaled, cluster_features, self.config.clustering.n_clusters)

        sizes = np.bincount(self.assigner.get_labels(), minlength=len(centroids))
        logger.info(f"  Training cluster sizes: {sizes.tolist()}")

        self._state = FittedState(
            boxcox_lambdas=lambdas,
            boxcox_epsilon=self.config.boxcox.epsilon,
            scale_stats=scale_stats,
            cluster_centroids=centroids,
            cluster_features=list(cluster_features),
            target_column=self.config.target_column,
        )
        return self._state

    def apply(self, table: pd.DataFrame, state: Optional[FittedState] = None) -> pd.DataFrame:
        """
        Replay the fitted transforms on any table

        The target column, when present, passes through untouched and is never
        read. The input table is not modified.

        Args:
            table: Training, validation, test or scoring table
            state: FittedState to use; defaults to the state from `fit`

        Returns:
            New table: input columns (transformed in place), derived columns, cluster column

        Raises:
            NotFittedError: If no state is given and `fit` has not run
            ColumnMissingError: If a column required by the state is absent
            MissingValueError: If a column read by the transforms holds missing values
        """
        if state is None:
            self._validate_fitted()
            state = self._state

        read_columns = list(state.required_columns)
        read_columns += [col for col in self.deriver.source_columns if col not in read_columns]
        require_columns(table, read_columns)
        require_complete(table, read_columns)
        if self.config.cluster_column in table.columns:
            raise ValueError(f"Input table already has a '{self.config.cluster_column}' column")

        result = self.boxcox.apply(table, state.boxcox_lambdas, state.boxcox_epsilon)
        result = self.standardizer.apply(result, state.scale_stats)
        result = self.deriver.transform(result)
        result[self.config.cluster_column] = self.assigner.assign(
            result, state.cluster_centroids, state.cluster_features
        )
        return result

    def fit_apply(self, table: pd.DataFrame) -> pd.DataFrame:
        """Fit on `table`, then apply to it"""
        return self.apply(table, self.fit(table))

    def output_columns(self, table: pd.DataFrame) -> List[str]:
        """Columns `apply` produces for `table`"""
        return list(table.columns) + self.deriver.output_columns + [self.config.cluster_column]

    def get_transformation_info(self) -> Dict[str, Any]:
        """Get information about configured and fitted transformations"""
        info = {
            "boxcox_enabled": self.config.boxcox.enabled,
            "normality_test": self.config.boxcox.normality_test,
            "significance_level": self.config.boxcox.significance_level,
            "degenerate_policy": self.config.scaling.degenerate_policy,
            "n_clusters": self.config.clustering.n_clusters,
            "derived_columns": self.deriver.output_columns,
            "is_fitted": self.is_fitted,
        }

        if self._state is not None:
            info["fitted_state"] = self._state.to_dict()

        return info
