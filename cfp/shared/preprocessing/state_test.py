import pytest

from cfp.shared.preprocessing.state import FittedState, ScaleStats


def make_state():
    return FittedState(
        boxcox_lambdas={"Duration": 0.3141592653589793, "Body_Temp": 12.5},
        boxcox_epsilon=1e-6,
        scale_stats={
            "Duration": ScaleStats(mean=2.5, std=0.75),
            "Heart_Rate": ScaleStats(mean=95.1, std=9.6),
            "Body_Temp": ScaleStats(mean=1e12, std=3e11),
        },
        cluster_centroids=[
            {"Duration": -0.5, "Heart_Rate": 0.1, "Body_Temp": 0.2},
            {"Duration": 1.2, "Heart_Rate": -0.4, "Body_Temp": -0.3},
        ],
        cluster_features=["Duration", "Heart_Rate", "Body_Temp"],
        target_column="Calories",
    )


class TestFittedState:
    def test_required_columns(self):
        assert make_state().required_columns == ["Duration", "Body_Temp", "Heart_Rate"]

    def test_n_clusters(self):
        assert make_state().n_clusters == 2

    def test_containers_read_only(self):
        state = make_state()
        with pytest.raises(TypeError):
            state.boxcox_lambdas["Heart_Rate"] = 1.0
        with pytest.raises(TypeError):
            state.scale_stats["Duration"] = ScaleStats(mean=0.0, std=1.0)
        with pytest.raises(TypeError):
            state.cluster_centroids[0]["Duration"] = 99.0
        with pytest.raises(TypeError):
            state.cluster_features[0] = "Age"
        with pytest.raises(AttributeError):
            state.cluster_centroids.append({"Duration": 0.0, "Heart_Rate": 0.0, "Body_Temp": 0.0})

    def test_source_containers_copied(self):
        lambdas = {"Duration": 0.5}
        centroid = {"Duration": 1.0}
        features = ["Duration"]
        state = FittedState(
            boxcox_lambdas=lambdas,
            boxcox_epsilon=0.0,
            scale_stats={"Duration": ScaleStats(mean=0.0, std=1.0)},
            cluster_centroids=[centroid],
            cluster_features=features,
            target_column="Calories",
        )
        lambdas["Duration"] = 2.0
        centroid["Duration"] = -1.0
        features.append("Heart_Rate")
        assert state.boxcox_lambdas == {"Duration": 0.5}
        assert state.cluster_centroids[0] == {"Duration": 1.0}
        assert list(state.cluster_features) == ["Duration"]

    def test_dict_round_trip(self):
        state = make_state()
        assert FittedState.from_dict(state.to_dict()) == state

    def test_yaml_round_trip(self, tmp_path):
        state = make_state()
        path = tmp_path / "nested" / "state.yaml"
        state.to_yaml(str(path))
        loaded = FittedState.from_yaml(str(path))
        assert loaded == state
        assert loaded.boxcox_lambdas["Duration"] == state.boxcox_lambdas["Duration"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ValueError):
            FittedState.from_yaml(str(tmp_path / "absent.yaml"))

    def test_invalid_file(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("boxcox_lambdas: {}\n")
        with pytest.raises(ValueError):
            FittedState.from_yaml(str(path))
