"""
Overlay Module

Set operations between polygon collections and planar area measures.

Functions:
    intersect: Split polygons of one collection along the boundaries of another
    combine: Concatenate collections that share one CRS
    union: Dissolve a collection into one feature
    feature_areas / total_area / with_area_column: Planar areas in a chosen unit
"""

import geopandas as gpd
import pandas as pd

from core.exceptions import CRSMismatch
from geometry_ops.crs_alignment import as_aligned_pair, linear_unit, require_projected, require_same_crs
from geometry_ops.dissolve import dissolve_geometries
from utils.logger import get_logger
from utils.units import SQUARED_UNITS, Measurement, convert

logger = get_logger(__name__)

# Suffixes appended to attribute names present in both inputs of intersect()
LEFT_SUFFIX = '_1'
RIGHT_SUFFIX = '_2'


def intersect(a, b: gpd.GeoDataFrame = None) -> gpd.GeoDataFrame:
    """
    Intersect two polygon collections.

    Every overlapping pair (one feature of a, one of b) yields one output
    feature whose geometry is their intersection and whose attributes are
    those of both sources. A polygon of a crossing several polygons of b is
    split into one feature per polygon of b it overlaps. Pairs that only touch
    (shared edge or vertex) and features with no overlap produce nothing.

    Column names present in both inputs are suffixed '_1' (from a) and
    '_2' (from b). a may also be an AlignedPair, with b omitted.

    Raises:
        CRSUndefined: If either input lacks a CRS
        CRSMismatch: If the inputs are in different CRS
    """
    pair = as_aligned_pair(a, b, 'intersect')

    logger.info(f"Intersecting {len(pair.left)} feature(s) with {len(pair.right)} feature(s)...")

    if pair.left.empty or pair.right.empty:
        result = _empty_intersection(pair.left, pair.right)
    else:
        result = gpd.overlay(
            pair.left,
            pair.right,
            how='intersection',
            keep_geom_type=True,
        )

    logger.info(f"  ✓ {len(result)} intersected feature(s)")
    return result


def _empty_intersection(a: gpd.GeoDataFrame, b: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    left_cols = [c for c in a.columns if c != a.geometry.name]
    right_cols = [c for c in b.columns if c != b.geometry.name]
    shared = set(left_cols) & set(right_cols)

    columns = [f'{c}{LEFT_SUFFIX}' if c in shared else c for c in left_cols]
    columns += [f'{c}{RIGHT_SUFFIX}' if c in shared else c for c in right_cols]

    return gpd.GeoDataFrame(
        {column: [] for column in columns},
        geometry=gpd.GeoSeries([], crs=b.crs),
        crs=b.crs,
    )


def combine(*collections: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """
    Concatenate collections sharing one CRS, without dissolving.

    Attribute schemas are aligned by column name; columns missing from one
    input are null for its rows.

    Raises:
        ValueError: If no collection is given
        CRSMismatch: If the collections are in different CRS
    """
    if not collections:
        raise ValueError("combine() needs at least one collection")

    first = collections[0]
    for other in collections[1:]:
        try:
            require_same_crs(first, other, 'combine')
        except CRSMismatch:
            logger.error(f"Cannot combine collections: {first.crs} vs {other.crs}")
            raise

    combined = gpd.GeoDataFrame(
        pd.concat(collections, ignore_index=True),
        geometry=first.geometry.name,
        crs=first.crs,
    )

    logger.info(f"Combined {len(collections)} collection(s) into {len(combined)} feature(s)")
    return combined


def union(a: gpd.GeoDataFrame) -> gpd.GeoDataFrame:
    """
    Dissolve every feature of a collection into one feature.

    Per-feature attributes are dropped. The result always has exactly one row,
    so union(union(a)) equals union(a).

    Example:
        Input: 28558 greenspace polygons
        Output: 1 MultiPolygon covering all of them
    """
    logger.info(f"Dissolving {len(a)} feature(s) into a single region...")

    merged = dissolve_geometries(a)

    logger.info(f"  ✓ Union result: {merged.geom_type}")
    return gpd.GeoDataFrame(geometry=[merged], crs=a.crs)


def _area_factor(gdf: gpd.GeoDataFrame, unit: str, operation: str):
    crs = require_projected(gdf, operation)
    native_unit = SQUARED_UNITS[linear_unit(crs)]
    return native_unit, convert(1.0, native_unit, unit)


def feature_areas(gdf: gpd.GeoDataFrame, unit: str = 'm2') -> pd.Series:
    """
    Planar area of every feature, as plain floats in the requested unit.

    The Series name records the unit (e.g. 'area_ha').

    Raises:
        CRSNotProjected: If the collection is in a geographic CRS
        ValueError: If unit is not an area unit
    """
    native_unit, factor = _area_factor(gdf, unit, 'area')
    logger.debug(f"Computing areas in {native_unit}, converting to {unit} (factor {factor:g})")
    return (gdf.geometry.area * factor).rename(f'area_{unit}')


def total_area(gdf: gpd.GeoDataFrame, unit: str = 'm2') -> Measurement:
    """Summed planar area of a collection, tagged with its unit."""
    return Measurement(float(feature_areas(gdf, unit).sum()), unit)


def with_area_column(gdf: gpd.GeoDataFrame,
                     column: str = 'area_ha',
                     unit: str = 'ha') -> gpd.GeoDataFrame:
    """Return a copy of gdf with a detagged area column for aggregation."""
    result = gdf.copy()
    result[column] = feature_areas(gdf, unit).to_numpy()
    return result
