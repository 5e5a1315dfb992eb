"""Unit tests for coverage classification and distance to coverage."""

import geopandas as gpd
import pytest
from shapely.geometry import Point

from core.exceptions import CRSMismatch, CRSNotProjected
from geometry_ops.coverage import (
    coverage,
    distance_to_region,
    distances_to_region,
    mean_distance_to_coverage,
    uncovered,
)
from geometry_ops.crs_alignment import AlignedPair
from utils.units import Measurement


class TestCoverage:
    def test_flags_points_outside_region(self, report_points, covering_region):
        assert coverage(report_points, covering_region) == [False, False, True, True]

    def test_centroid_is_covered_with_zero_distance(self, covering_region):
        centroid = covering_region.geometry.iloc[0].centroid
        points = gpd.GeoDataFrame(geometry=[centroid], crs=covering_region.crs)
        assert coverage(points, covering_region) == [False]
        assert distance_to_region(centroid, covering_region) == 0.0

    def test_boundary_point_is_covered(self, report_points, covering_region):
        on_edge = report_points.geometry.iloc[1]
        assert distance_to_region(on_edge, covering_region) == 0.0

    def test_multi_feature_region_is_dissolved(self, report_points, regions):
        # regions cover x 0..2000, y 0..1000
        assert coverage(report_points, regions) == [False, False, True, True]

    def test_crs_mismatch_fails(self, report_points, covering_region):
        with pytest.raises(CRSMismatch):
            coverage(report_points.to_crs(4326), covering_region)

    def test_uncovered_subset(self, report_points, covering_region):
        outside = uncovered(report_points, covering_region)
        assert outside["report_id"].tolist() == [3, 4]


class TestDistances:
    def test_distance_to_region_outside(self, covering_region):
        assert distance_to_region(Point(2500, 1000), covering_region) == pytest.approx(500.0)

    def test_distance_to_plain_geometry(self, covering_region):
        region = covering_region.geometry.iloc[0]
        assert distance_to_region(Point(-300, 1000), region) == pytest.approx(300.0)

    def test_distances_series(self, report_points, covering_region):
        distances = distances_to_region(report_points, covering_region)
        assert distances.name == "distance_m"
        assert distances.tolist() == pytest.approx([0.0, 0.0, 500.0, 1500.0])

    def test_geographic_crs_rejected(self, report_points, covering_region):
        with pytest.raises(CRSNotProjected):
            distances_to_region(report_points.to_crs(4326), covering_region.to_crs(4326))


class TestMeanDistanceToCoverage:
    def test_mean_over_uncovered_points_only(self, report_points, covering_region):
        result = mean_distance_to_coverage(report_points, covering_region)
        assert isinstance(result, Measurement)
        assert result.unit == "m"
        assert result.value == pytest.approx(1000.0)

    def test_all_covered_returns_none(self, report_points, covering_region):
        inside = report_points.iloc[:2]
        assert mean_distance_to_coverage(inside, covering_region) is None

    def test_accepts_aligned_pair(self, report_points, covering_region):
        pair = AlignedPair(report_points, covering_region)
        assert mean_distance_to_coverage(pair).value == pytest.approx(1000.0)
        assert coverage(pair) == [False, False, True, True]

    def test_empty_region_is_rejected(self, report_points):
        empty = gpd.GeoDataFrame(geometry=gpd.GeoSeries([], crs=report_points.crs))
        assert coverage(report_points, empty) == [True, True, True, True]
        with pytest.raises(ValueError, match="empty"):
            mean_distance_to_coverage(report_points, empty)

    def test_empty_region_distance_is_rejected(self, report_points):
        empty = gpd.GeoDataFrame(geometry=gpd.GeoSeries([], crs=report_points.crs))
        with pytest.raises(ValueError, match="empty"):
            distances_to_region(report_points, empty)
