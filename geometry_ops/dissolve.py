"""
Geometry Dissolve Module

Handles dissolving collections into unified geometries and repairing
invalid geometries produced by dissolves and overlays.
"""

import geopandas as gpd
from shapely import make_valid
from shapely.geometry import GeometryCollection
from shapely.geometry.base import BaseGeometry
from shapely.ops import unary_union

from core.exceptions import MalformedGeometry, UnknownColumn
from utils.logger import get_logger

logger = get_logger(__name__)


def dissolve_geometries(gdf: gpd.GeoDataFrame) -> BaseGeometry:
    """
    Dissolve all geometries in GeoDataFrame into a single unified geometry.

    Uses shapely.ops.unary_union to merge all features, handling:
    - Multiple separate geometries → single geometry (or MultiGeometry)
    - Overlapping polygons → merged polygon without internal boundaries

    Args:
        gdf: GeoDataFrame with zero or more geometries

    Returns:
        Single Shapely geometry (may be Multi* type, empty for empty input)

    Example:
        Input: 3 separate polygons, two of them overlapping
        Output: 1 MultiPolygon with 2 parts
    """
    geometries = [geom for geom in gdf.geometry if geom is not None and not geom.is_empty]

    if not geometries:
        logger.debug("No geometries to dissolve, returning empty collection")
        return GeometryCollection()

    logger.debug(f"Dissolving {len(geometries)} geometries into single geometry...")

    dissolved = unary_union(geometries)

    logger.debug(f"  - Result: {dissolved.geom_type}")
    return repair_invalid_geometry(dissolved)


def repair_invalid_geometry(geom: BaseGeometry) -> BaseGeometry:
    """
    Repair invalid geometries using make_valid() or buffer(0) technique.

    Common issues fixed:
    - Self-intersecting polygons (bow-ties in digitised greenspace outlines)
    - Duplicate vertices
    - Invalid ring orientations

    Args:
        geom: Potentially invalid Shapely geometry

    Returns:
        Valid Shapely geometry

    Raises:
        MalformedGeometry: If neither repair strategy succeeds
    """
    if geom.is_valid:
        return geom

    logger.warning(f"Invalid geometry detected: {geom.geom_type}")

    try:
        repaired = make_valid(geom)
        logger.debug("  ✓ Geometry repaired using make_valid()")
        return repaired

    except Exception as e:
        logger.warning(f"make_valid() failed: {e}, trying buffer(0)...")

        try:
            repaired = geom.buffer(0)
            logger.debug("  ✓ Geometry repaired using buffer(0)")
            return repaired

        except Exception as e2:
            raise MalformedGeometry(f"Cannot repair invalid geometry: {e2}") from e2


def dissolve_by(gdf: gpd.GeoDataFrame, by) -> gpd.GeoDataFrame:
    """
    Dissolve features sharing the same key value(s) into one feature per key.

    Only the key column(s) and geometry are kept. Key order follows first
    occurrence in the input.

    Raises:
        UnknownColumn: If a key column is missing
    """
    keys = [by] if isinstance(by, str) else list(by)
    missing = [key for key in keys if key not in gdf.columns]
    if missing:
        raise UnknownColumn(missing, gdf.columns)

    logger.info(f"Dissolving {len(gdf)} feature(s) by {keys}...")

    dissolved = (
        gdf[keys + [gdf.geometry.name]]
        .dissolve(by=keys, sort=False, dropna=False)
        .reset_index()
    )
    dissolved[dissolved.geometry.name] = dissolved.geometry.apply(repair_invalid_geometry)

    logger.info(f"  ✓ {len(dissolved)} dissolved feature(s)")
    return dissolved
