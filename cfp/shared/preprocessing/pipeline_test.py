import numpy as np
import pandas as pd
import pytest

from cfp.shared.errors import (
    ColumnMissingError,
    DegenerateScaleError,
    MissingValueError,
    NotFittedError,
    PipelineError,
)
from cfp.shared.clustering.algorithms.kmeans import KMeansConfig
from cfp.shared.preprocessing.config import BoxCoxConfig, PipelineConfig, ScalingConfig
from cfp.shared.preprocessing.pipeline import FeaturePipeline

NUMERIC = ["Duration", "Heart_Rate", "Body_Temp"]
DERIVED = ["exp_Body_Temp", "Body_Temp_sq", "Duration_x_Heart_Rate", "Duration_x_Body_Temp"]


def make_calories_table(n_rows: int, seed: int) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    duration = rng.gamma(shape=2.0, scale=7.0, size=n_rows) + 1.0
    heart_rate = rng.normal(95.0, 9.5, size=n_rows)
    body_temp = 41.5 - rng.gamma(shape=2.0, scale=0.4, size=n_rows)
    calories = 0.1 * duration * heart_rate * (body_temp - 36.0) / 2.0 + rng.normal(0.0, 5.0, size=n_rows)
    return pd.DataFrame(
        {
            "Duration": duration,
            "Heart_Rate": heart_rate,
            "Body_Temp": body_temp,
            "Calories": np.clip(calories, 1.0, None),
        }
    )


@pytest.fixture
def train_table():
    return make_calories_table(1000, seed=0)


@pytest.fixture
def holdout_table():
    return make_calories_table(200, seed=1)


@pytest.fixture
def fitted_pipeline(train_table):
    pipeline = FeaturePipeline(PipelineConfig(clustering=KMeansConfig(n_clusters=4)))
    pipeline.fit(train_table)
    return pipeline


class TestEndToEnd:
    def test_output_columns(self, fitted_pipeline, holdout_table):
        output = fitted_pipeline.apply(holdout_table)
        expected = NUMERIC + ["Calories"] + DERIVED + ["cluster"]
        assert list(output.columns) == expected
        assert fitted_pipeline.output_columns(holdout_table) == expected

    def test_no_missing_values(self, fitted_pipeline, holdout_table):
        output = fitted_pipeline.apply(holdout_table)
        assert not output.isna().any().any()
        assert np.isfinite(output.to_numpy(dtype=np.float64)).all()

    def test_no_raw_body_temp_scale(self, fitted_pipeline, holdout_table):
        output = fitted_pipeline.apply(holdout_table)
        raw_mean = holdout_table["Body_Temp"].mean()
        for col in ["Body_Temp", "exp_Body_Temp", "Body_Temp_sq"]:
            assert abs(output[col].mean() - raw_mean) > 10.0
        assert abs(output["Body_Temp"].mean()) < 1.0

    def test_cluster_labels_in_range(self, fitted_pipeline, holdout_table):
        clusters = fitted_pipeline.apply(holdout_table)["cluster"]
        assert clusters.between(0, 3).all()
        assert pd.api.types.is_integer_dtype(clusters)

    def test_target_passes_through(self, fitted_pipeline, holdout_table):
        output = fitted_pipeline.apply(holdout_table)
        pd.testing.assert_series_equal(output["Calories"], holdout_table["Calories"])


class TestFittedState:
    def test_state_contents(self, fitted_pipeline):
        state = fitted_pipeline.state
        assert set(state.scale_stats) == set(NUMERIC)
        assert "Calories" not in state.scale_stats
        assert "Calories" not in state.boxcox_lambdas
        assert list(state.cluster_features) == NUMERIC
        assert state.n_clusters == 4
        assert all(set(centroid) == set(NUMERIC) for centroid in state.cluster_centroids)

    def test_skewed_duration_transformed(self, fitted_pipeline):
        assert "Duration" in fitted_pipeline.state.boxcox_lambdas

    def test_state_is_frozen(self, fitted_pipeline):
        with pytest.raises(Exception):
            fitted_pipeline.state.target_column = "other"

    def test_state_containers_read_only(self, fitted_pipeline, holdout_table):
        state = fitted_pipeline.state
        before = fitted_pipeline.apply(holdout_table)

        with pytest.raises(TypeError):
            state.scale_stats["Duration"] = state.scale_stats["Heart_Rate"]
        with pytest.raises(TypeError):
            state.cluster_centroids[0]["Duration"] = 1e6
        with pytest.raises(TypeError):
            state.boxcox_lambdas["Duration"] = 1.0
        with pytest.raises(AttributeError):
            state.cluster_centroids.append(dict(state.cluster_centroids[0]))

        pd.testing.assert_frame_equal(fitted_pipeline.apply(holdout_table), before)

    def test_refit_rejected(self, fitted_pipeline, train_table):
        with pytest.raises(PipelineError):
            fitted_pipeline.fit(train_table)

    def test_fit_does_not_mutate_input(self, train_table):
        original = train_table.copy()
        FeaturePipeline().fit(train_table)
        pd.testing.assert_frame_equal(train_table, original)


class TestApplyProperties:
    def test_deterministic(self, fitted_pipeline, holdout_table):
        first = fitted_pipeline.apply(holdout_table)
        second = fitted_pipeline.apply(holdout_table)
        pd.testing.assert_frame_equal(first, second, check_exact=True)

    def test_explicit_state_matches_own_state(self, fitted_pipeline, holdout_table):
        other = FeaturePipeline(fitted_pipeline.config)
        pd.testing.assert_frame_equal(
            other.apply(holdout_table, fitted_pipeline.state), fitted_pipeline.apply(holdout_table)
        )

    def test_leakage_target_presence(self, fitted_pipeline, holdout_table):
        with_target = fitted_pipeline.apply(holdout_table)
        without_target = fitted_pipeline.apply(holdout_table.drop(columns=["Calories"]))
        pd.testing.assert_frame_equal(with_target.drop(columns=["Calories"]), without_target, check_exact=True)

    def test_leakage_target_values(self, fitted_pipeline, holdout_table):
        permuted = holdout_table.assign(Calories=holdout_table["Calories"].to_numpy()[::-1])
        pd.testing.assert_frame_equal(
            fitted_pipeline.apply(holdout_table).drop(columns=["Calories"]),
            fitted_pipeline.apply(permuted).drop(columns=["Calories"]),
            check_exact=True,
        )

    def test_fit_ignores_target_values(self, train_table):
        permuted = train_table.assign(Calories=train_table["Calories"].to_numpy()[::-1])
        first = FeaturePipeline().fit(train_table)
        second = FeaturePipeline().fit(permuted)
        assert first.to_dict() == second.to_dict()

    def test_training_standardized(self, fitted_pipeline, train_table):
        output = fitted_pipeline.apply(train_table)
        for col in NUMERIC:
            assert abs(output[col].mean()) < 1e-6
            assert abs(output[col].std(ddof=1) - 1.0) < 1e-6

    def test_training_clusters_match_fit(self, train_table):
        pipeline = FeaturePipeline()
        pipeline.fit(train_table)
        output = pipeline.apply(train_table)
        assert np.array_equal(output["cluster"].to_numpy(), pipeline.assigner.get_labels())

    def test_input_not_mutated(self, fitted_pipeline, holdout_table):
        original = holdout_table.copy()
        fitted_pipeline.apply(holdout_table)
        pd.testing.assert_frame_equal(holdout_table, original)


class TestErrors:
    def test_apply_before_fit(self, holdout_table):
        with pytest.raises(NotFittedError):
            FeaturePipeline().apply(holdout_table)

    def test_missing_column(self, fitted_pipeline, holdout_table):
        with pytest.raises(ColumnMissingError) as exc_info:
            fitted_pipeline.apply(holdout_table.drop(columns=["Heart_Rate"]))
        assert "Heart_Rate" in exc_info.value.columns

    def test_degenerate_column_fails_fit(self, train_table):
        table = train_table.assign(Age=30.0)
        with pytest.raises(DegenerateScaleError):
            FeaturePipeline().fit(table)

    def test_degenerate_zero_policy(self, train_table, holdout_table):
        pipeline = FeaturePipeline(PipelineConfig(scaling=ScalingConfig(degenerate_policy="zero")))
        pipeline.fit(train_table.assign(Age=30.0))
        output = pipeline.apply(holdout_table.assign(Age=45.0))
        assert (output["Age"] == 0.0).all()

    def test_negative_value_in_holdout(self, train_table, holdout_table):
        pipeline = FeaturePipeline(PipelineConfig(boxcox=BoxCoxConfig(columns=["Duration"])))
        pipeline.fit(train_table)
        bad = holdout_table.copy()
        bad.loc[0, "Duration"] = -5.0
        with pytest.raises(PipelineError):
            pipeline.apply(bad)

    def test_empty_training_table(self, train_table):
        with pytest.raises(ValueError):
            FeaturePipeline().fit(train_table.head(0))

    def test_missing_value_in_cluster_feature(self, fitted_pipeline, holdout_table):
        bad = holdout_table.copy()
        bad.loc[3, "Heart_Rate"] = np.nan
        with pytest.raises(MissingValueError) as exc_info:
            fitted_pipeline.apply(bad)
        assert exc_info.value.columns == ["Heart_Rate"]

    def test_missing_value_outside_cluster_features(self, train_table, holdout_table):
        pipeline = FeaturePipeline(PipelineConfig(cluster_columns=["Duration", "Heart_Rate"]))
        pipeline.fit(train_table)
        bad = holdout_table.copy()
        bad.loc[0, "Body_Temp"] = np.nan
        with pytest.raises(MissingValueError) as exc_info:
            pipeline.apply(bad)
        assert exc_info.value.columns == ["Body_Temp"]

    def test_missing_target_value_ignored(self, fitted_pipeline, holdout_table):
        partial = holdout_table.copy()
        partial.loc[0, "Calories"] = np.nan
        output = fitted_pipeline.apply(partial)
        assert not output.drop(columns=["Calories"]).isna().any().any()


class TestConfiguration:
    def test_categorical_column_passes_through(self, train_table, holdout_table):
        sexes = np.array(["male", "female"])
        train = train_table.assign(Sex=pd.Categorical(sexes[np.arange(len(train_table)) % 2]))
        holdout = holdout_table.assign(Sex=pd.Categorical(sexes[np.arange(len(holdout_table)) % 2]))
        pipeline = FeaturePipeline()
        state = pipeline.fit(train)
        assert "Sex" not in state.scale_stats
        output = pipeline.apply(holdout)
        pd.testing.assert_series_equal(output["Sex"], holdout["Sex"])

    def test_boxcox_disabled(self, train_table):
        state = FeaturePipeline(PipelineConfig(boxcox=BoxCoxConfig(enabled=False))).fit(train_table)
        assert state.boxcox_lambdas == {}

    def test_cluster_columns_subset(self, train_table, holdout_table):
        pipeline = FeaturePipeline(PipelineConfig(cluster_columns=["Duration", "Heart_Rate"]))
        state = pipeline.fit(train_table)
        assert list(state.cluster_features) == ["Duration", "Heart_Rate"]
        assert "cluster" in pipeline.apply(holdout_table).columns

    def test_target_in_cluster_columns_rejected(self):
        with pytest.raises(ValueError):
            PipelineConfig(cluster_columns=["Duration", "Calories"])

    def test_from_dict(self):
        config = PipelineConfig.from_dict(
            {
                "target_column": "Calories",
                "boxcox": {"significance_level": 0.01},
                "clustering": {"n_clusters": 6, "n_init": 3},
                "features": {"interactions": [["Heart_Rate", "Body_Temp"]]},
            }
        )
        assert config.boxcox.significance_level == 0.01
        assert config.clustering.n_clusters == 6
        assert config.features.interactions == [("Heart_Rate", "Body_Temp")]
        assert config.scaling.degenerate_policy == "raise"

    def test_transformation_info(self, fitted_pipeline):
        info = fitted_pipeline.get_transformation_info()
        assert info["is_fitted"] is True
        assert info["n_clusters"] == 4
        assert "fitted_state" in info
