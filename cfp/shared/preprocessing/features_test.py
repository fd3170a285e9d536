import numpy as np
import pandas as pd
import pytest

from cfp.shared.errors import ColumnMissingError
from cfp.shared.preprocessing.config import FeatureConfig
from cfp.shared.preprocessing.features import FeatureDeriver


def make_table():
    return pd.DataFrame(
        {
            "Duration": [0.5, -1.0, 2.0],
            "Heart_Rate": [1.0, 0.0, -0.5],
            "Body_Temp": [0.1, -0.2, 0.3],
        }
    )


class TestFeatureConfig:
    def test_default_interactions(self):
        config = FeatureConfig()
        assert config.interactions == [("Duration", "Heart_Rate"), ("Duration", "Body_Temp")]

    def test_explicit_interactions(self):
        config = FeatureConfig(interactions=[("Heart_Rate", "Body_Temp")])
        assert config.interactions == [("Heart_Rate", "Body_Temp")]

    def test_single_important_column(self):
        assert FeatureConfig(important_columns=["Duration"]).interactions == []


class TestFeatureDeriver:
    def test_output_columns(self):
        deriver = FeatureDeriver(FeatureConfig())
        assert deriver.output_columns == [
            "exp_Body_Temp",
            "Body_Temp_sq",
            "Duration_x_Heart_Rate",
            "Duration_x_Body_Temp",
        ]

    def test_values(self):
        table = make_table()
        result = FeatureDeriver(FeatureConfig()).transform(table)
        assert np.allclose(result["exp_Body_Temp"], np.exp(table["Body_Temp"]))
        assert np.allclose(result["Body_Temp_sq"], table["Body_Temp"] ** 2)
        assert np.allclose(result["Duration_x_Heart_Rate"], table["Duration"] * table["Heart_Rate"])
        assert np.allclose(result["Duration_x_Body_Temp"], table["Duration"] * table["Body_Temp"])

    def test_original_columns_kept_in_order(self):
        table = make_table()
        result = FeatureDeriver(FeatureConfig()).transform(table)
        assert list(result.columns[:3]) == list(table.columns)
        pd.testing.assert_frame_equal(result[table.columns], table)

    def test_deterministic(self):
        deriver = FeatureDeriver(FeatureConfig())
        pd.testing.assert_frame_equal(deriver.transform(make_table()), deriver.transform(make_table()))

    def test_missing_source_column(self):
        with pytest.raises(ColumnMissingError):
            FeatureDeriver(FeatureConfig()).transform(make_table().drop(columns=["Heart_Rate"]))
