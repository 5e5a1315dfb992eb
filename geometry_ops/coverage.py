"""
Coverage and Proximity Module

Classifies points as inside or outside a covering region (for example the
union of 3 km station buffers) and measures how far uncovered points are from
that region.

Every collection-level function takes either (points, region) or a single
AlignedPair of the two.

Typical use:
    >>> uncovered_flags = coverage(reports, covered_area)
    >>> gap = mean_distance_to_coverage(reports, covered_area)
    >>> print(gap)
    1,234.56 m
"""

from typing import List, Optional, Union

import geopandas as gpd
import pandas as pd
from shapely.geometry.base import BaseGeometry

from geometry_ops.crs_alignment import AlignedPair, as_aligned_pair, linear_unit, require_projected
from geometry_ops.dissolve import dissolve_geometries
from utils.logger import get_logger
from utils.units import Measurement

logger = get_logger(__name__)

RegionLike = Union[gpd.GeoDataFrame, BaseGeometry]


def _region_geometry(region: RegionLike) -> BaseGeometry:
    if isinstance(region, gpd.GeoDataFrame):
        return dissolve_geometries(region)
    return region


def _measurable_region(region: RegionLike) -> BaseGeometry:
    region_geom = _region_geometry(region)
    if region_geom is None or region_geom.is_empty:
        raise ValueError("Covering region is empty; distances to it are undefined")
    return region_geom


def _uncovered_mask(pair: AlignedPair) -> pd.Series:
    region_geom = _region_geometry(pair.right)
    return ~pair.left.geometry.intersects(region_geom)


def coverage(points, region: gpd.GeoDataFrame = None) -> List[bool]:
    """
    Flag every point that lies outside the covering region.

    Returns:
        One boolean per point, in input order: True when the point does not
        intersect the region (uncovered), False when inside or on its boundary.
        An empty region leaves every point uncovered.

    Raises:
        CRSUndefined / CRSMismatch: If the inputs do not share one CRS
    """
    mask = _uncovered_mask(as_aligned_pair(points, region, 'coverage'))
    logger.info(f"Coverage test: {int(mask.sum())} of {len(mask)} point(s) outside the covered region")
    return mask.tolist()


def uncovered(points, region: gpd.GeoDataFrame = None) -> gpd.GeoDataFrame:
    """Return the subset of points lying outside the covering region."""
    pair = as_aligned_pair(points, region, 'coverage')
    return pair.left[_uncovered_mask(pair).to_numpy()].copy()


def distance_to_region(point: BaseGeometry, region: RegionLike) -> float:
    """
    Minimum planar distance from a point to a region.

    Zero when the point is inside the region or on its boundary. The value is
    in the linear unit of the CRS both geometries are expressed in; when the
    region is given as a collection its CRS must be projected.

    Raises:
        ValueError: If the region is empty
    """
    if isinstance(region, gpd.GeoDataFrame):
        require_projected(region, 'distance')
    return float(point.distance(_measurable_region(region)))


def distances_to_region(points, region: gpd.GeoDataFrame = None) -> pd.Series:
    """
    Distance from every point to the region, indexed like points.

    Raises:
        CRSMismatch: If the inputs do not share one CRS
        CRSNotProjected: If the shared CRS is geographic
        ValueError: If the region is empty
    """
    pair = as_aligned_pair(points, region, 'distance')
    unit = linear_unit(require_projected(pair.left, 'distance'))
    region_geom = _measurable_region(pair.right)
    return pair.left.geometry.distance(region_geom).rename(f'distance_{unit}')


def mean_distance_to_coverage(points,
                              region: gpd.GeoDataFrame = None) -> Optional[Measurement]:
    """
    Average distance from uncovered points to the covering region.

    Only points outside the region contribute. The result is tagged with the
    CRS linear unit; None is returned when every point is covered.

    Raises:
        ValueError: If the region is empty, since no distance to it exists
    """
    pair = as_aligned_pair(points, region, 'distance')
    outside = pair.left[_uncovered_mask(pair).to_numpy()]
    if outside.empty:
        logger.info("  ✓ All points covered, no coverage gap")
        return None

    distances = distances_to_region(outside, pair.right)
    result = Measurement(float(distances.mean()), linear_unit(pair.crs))

    logger.info(f"  - Mean distance to coverage for {len(outside)} uncovered point(s): {result}")
    return result
