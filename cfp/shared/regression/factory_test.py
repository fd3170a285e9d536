import numpy as np
import pandas as pd
import pytest

from cfp.shared.errors import ColumnMissingError, NotFittedError
from cfp.shared.regression import (
    RegressionFactory,
    LinearModel,
    LinearConfig,
    RegularizedModel,
    XGBoostModel,
)


def make_table(n_samples=200, random_state=0):
    rng = np.random.default_rng(random_state)
    x1 = rng.normal(size=n_samples)
    x2 = rng.normal(size=n_samples)
    cluster = rng.integers(0, 3, size=n_samples)
    calories = np.exp(1.0 + 0.3 * x1 - 0.2 * x2 + 0.1 * cluster)
    return pd.DataFrame({"x1": x1, "x2": x2, "cluster": cluster, "Calories": calories})


class TestRegressionFactory:
    def test_aliases_resolve(self):
        assert isinstance(RegressionFactory.create("ols", {}), LinearModel)
        assert isinstance(RegressionFactory.create("Ridge", {}), RegularizedModel)
        assert isinstance(RegressionFactory.create("xgb", {"n_estimators": 10}), XGBoostModel)

    def test_unknown_model(self):
        with pytest.raises(ValueError, match="Unknown model"):
            RegressionFactory.create("svm", {})

    def test_invalid_config_type(self):
        with pytest.raises(ValueError):
            RegressionFactory.create("linear", "not a config")

    def test_create_with_defaults(self):
        model = RegressionFactory.create_with_defaults("regularized", penalty="lasso", alpha=0.01)
        assert model.config.penalty == "lasso"
        assert model.config.one_hot_columns == ["cluster"]

    def test_register_model(self):
        RegressionFactory.register_model("my_linear", LinearModel, LinearConfig)
        try:
            assert isinstance(RegressionFactory.create("my_linear", {}), LinearModel)
        finally:
            RegressionFactory._models.pop("my_linear")
            RegressionFactory._configs.pop("my_linear")


@pytest.mark.parametrize(
    "name, params",
    [
        ("linear", {}),
        ("glm", {}),
        ("ridge", {"alpha": 0.1}),
        ("regularized", {"penalty": "elasticnet", "alpha": 0.001}),
        ("spline", {"n_knots": 4}),
        ("xgboost", {"n_estimators": 20, "max_depth": 3}),
    ],
)
def test_model_contract(name, params):
    train = make_table(random_state=0)
    score = make_table(n_samples=50, random_state=1).drop(columns=["Calories"])

    model = RegressionFactory.create(name, params)
    assert not model.is_fitted
    model.fit(train, "Calories")

    assert model.is_fitted
    assert model.feature_columns == ["x1", "x2", "cluster"]
    predictions = model.predict(score)
    assert predictions.shape == (50,)
    assert np.all(np.isfinite(predictions))


def test_log_target_keeps_predictions_positive():
    train = make_table()
    model = RegressionFactory.create("linear", {"log_target": True}).fit(train, "Calories")
    assert np.all(model.predict(train) > 0)
    assert model.score(train) < 0.05


def test_unseen_cluster_is_ignored():
    train = make_table()
    score = train.drop(columns=["Calories"]).head(5).copy()
    score["cluster"] = 7
    model = RegressionFactory.create("linear", {}).fit(train, "Calories")
    assert model.predict(score).shape == (5,)


def test_predict_before_fit():
    with pytest.raises(NotFittedError):
        RegressionFactory.create("linear", {}).predict(make_table())


def test_missing_feature_column():
    model = RegressionFactory.create("linear", {}).fit(make_table(), "Calories")
    with pytest.raises(ColumnMissingError):
        model.predict(make_table().drop(columns=["x2"]))


def test_missing_target_column():
    with pytest.raises(ColumnMissingError):
        RegressionFactory.create("linear", {}).fit(make_table().drop(columns=["Calories"]), "Calories")
