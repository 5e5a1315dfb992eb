"""Shared pytest fixtures for the greenspace analysis test suite."""

import logging

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import Point, box

BNG = "EPSG:27700"
WGS84 = "EPSG:4326"


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _propagate_greenspace_logs():
    """Let caplog see records even after setup_logging() replaced handlers."""
    logger = logging.getLogger("greenspace")
    previous = logger.propagate
    logger.propagate = True
    yield
    logger.propagate = previous


# ---------------------------------------------------------------------------
# Polygon collections (British National Grid, metres)
# ---------------------------------------------------------------------------


@pytest.fixture()
def regions() -> gpd.GeoDataFrame:
    """Two adjacent 1 km x 1 km regions sharing the boundary x = 1000."""
    return gpd.GeoDataFrame(
        {
            "gss_code": ["E09000001", "E09000002"],
            "name": ["West", "East"],
        },
        geometry=[box(0, 0, 1000, 1000), box(1000, 0, 2000, 1000)],
        crs=BNG,
    )


@pytest.fixture()
def greenspace() -> gpd.GeoDataFrame:
    """Three sites: one inside West, one straddling the boundary, one outside both."""
    return gpd.GeoDataFrame(
        {
            "site_id": ["gs-1", "gs-2", "gs-3"],
            "name": ["Common", "Park", "Heath"],
        },
        geometry=[
            box(100, 100, 300, 300),        # 4 ha, West only
            box(900, 400, 1100, 600),       # 4 ha, 2 ha either side of x = 1000
            box(5000, 5000, 5100, 5100),    # outside every region
        ],
        crs=BNG,
    )


@pytest.fixture()
def population() -> pd.DataFrame:
    """Population table whose second code is miscoded."""
    return pd.DataFrame(
        {
            "code": ["E09000001", "E09000042"],
            "population": [8000, 200000],
        }
    )


# ---------------------------------------------------------------------------
# Point collections
# ---------------------------------------------------------------------------


@pytest.fixture()
def covering_region() -> gpd.GeoDataFrame:
    """A single 2 km square centred on (1000, 1000)."""
    return gpd.GeoDataFrame(geometry=[box(0, 0, 2000, 2000)], crs=BNG)


@pytest.fixture()
def report_points() -> gpd.GeoDataFrame:
    """Points inside, on the edge of, and 500 m / 1500 m outside the covering region."""
    return gpd.GeoDataFrame(
        {"report_id": [1, 2, 3, 4]},
        geometry=[
            Point(1000, 1000),
            Point(2000, 500),
            Point(2500, 1000),
            Point(1000, 3500),
        ],
        crs=BNG,
    )
