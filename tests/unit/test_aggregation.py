"""Unit tests for attribute aggregation."""

import numpy as np
import pandas as pd
import pytest

from core.aggregation import AggregationRow, aggregate, aggregate_frame
from core.exceptions import UnknownColumn


@pytest.fixture()
def sites() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "borough": ["Camden", "Hackney", "Camden", None, "Islington", "Hackney"],
            "function": ["Park", "Park", "Play Space", "Park", "Park", "Cemetery"],
            "area_ha": [10.0, 4.5, 0.5, 2.0, 3.0, 6.0],
        }
    )


class TestAggregate:
    def test_groups_in_first_occurrence_order(self, sites):
        rows = aggregate(sites, "borough", {"n": "count"})
        keys = [row.keys["borough"] for row in rows]
        assert keys[:2] == ["Camden", "Hackney"]
        assert keys[3] == "Islington"
        assert pd.isna(keys[2])

    def test_count_and_sum(self, sites):
        rows = aggregate(sites, ["borough"], {"n": "count", "area": ("sum", "area_ha")})
        camden = rows[0]
        assert isinstance(camden, AggregationRow)
        assert camden.keys == {"borough": "Camden"}
        assert camden.values["n"] == 2
        assert camden.values["area"] == pytest.approx(10.5)

    def test_counts_sum_to_row_count(self, sites):
        for keys in (["borough"], ["function"], ["borough", "function"]):
            rows = aggregate(sites, keys, {"n": "count"})
            assert sum(row.values["n"] for row in rows) == len(sites)

    def test_multiple_keys(self, sites):
        rows = aggregate(sites, ["borough", "function"], {"n": "count"})
        assert {"borough": "Hackney", "function": "Cemetery"} in [row.keys for row in rows]
        assert len(rows) == 6

    def test_mean_reducer(self, sites):
        frame = aggregate_frame(sites, "function", {"mean_area": ("mean", "area_ha")})
        park = frame.loc[frame["function"] == "Park", "mean_area"].iloc[0]
        assert park == pytest.approx(np.mean([10.0, 4.5, 2.0, 3.0]))

    def test_works_on_geodataframe(self, greenspace):
        frame = aggregate_frame(greenspace, "name", {"n": "count"})
        assert list(frame.columns) == ["name", "n"]
        assert "geometry" not in frame.columns


class TestAggregateErrors:
    def test_unknown_group_key(self, sites):
        with pytest.raises(UnknownColumn) as excinfo:
            aggregate(sites, ["ward"], {"n": "count"})
        assert excinfo.value.columns == ["ward"]
        assert "borough" in excinfo.value.available

    def test_unknown_reducer_column(self, sites):
        with pytest.raises(UnknownColumn, match="population"):
            aggregate(sites, "borough", {"people": ("sum", "population")})

    def test_unknown_reducer(self, sites):
        with pytest.raises(ValueError, match="median"):
            aggregate(sites, "borough", {"m": ("median", "area_ha")})

    def test_malformed_reducer(self, sites):
        with pytest.raises(ValueError):
            aggregate(sites, "borough", {"m": "sum"})

    def test_input_unchanged(self, sites):
        before = sites.copy()
        aggregate(sites, "borough", {"n": "count"})
        pd.testing.assert_frame_equal(sites, before)
