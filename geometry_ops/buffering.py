"""
Geometry Buffering Module

Inflates every feature of a collection by a fixed planar distance expressed
in the linear unit of the collection's (projected) CRS.
"""

import math

import geopandas as gpd
from shapely.geometry.base import BaseGeometry

from core.exceptions import InvalidBufferDistance
from geometry_ops.crs_alignment import linear_unit, require_projected
from utils.logger import get_logger

logger = get_logger(__name__)

# Constants
JOIN_STYLES = ('round', 'mitre', 'bevel')
DEFAULT_RESOLUTION = 16  # segments per quarter circle


def validate_buffer_distance(distance: float) -> float:
    """
    Validate a buffer distance.

    Returns:
        The distance as float

    Raises:
        InvalidBufferDistance: If distance is negative, NaN or not numeric
    """
    try:
        distance = float(distance)
    except (TypeError, ValueError):
        raise InvalidBufferDistance(f"Buffer distance must be a number, got {distance!r}")

    if math.isnan(distance) or distance < 0:
        raise InvalidBufferDistance(f"Buffer distance must be non-negative, got {distance}")

    return distance


def buffer_geometry(geom: BaseGeometry,
                    distance: float,
                    join_style: str = 'round',
                    resolution: int = DEFAULT_RESOLUTION) -> BaseGeometry:
    """
    Buffer a single geometry by a planar distance.

    A zero distance returns the geometry unchanged, so points stay points
    rather than collapsing to empty polygons.
    """
    if distance == 0:
        return geom
    return geom.buffer(distance, quad_segs=resolution, join_style=join_style)


def buffer(gdf: gpd.GeoDataFrame,
           distance: float,
           join_style: str = 'round',
           resolution: int = None) -> gpd.GeoDataFrame:
    """
    Buffer every feature of a collection, preserving attributes.

    Args:
        gdf: Collection in a projected CRS
        distance: Non-negative buffer distance in the CRS linear unit
        join_style: Corner style for polygon/line buffers: 'round', 'mitre' or 'bevel'
        resolution: Segments per quarter circle (default 16)

    Returns:
        New GeoDataFrame with buffered geometries, same index and attributes

    Raises:
        InvalidBufferDistance: If distance is negative or NaN
        ValueError: If join_style is not supported
        CRSNotProjected: If the collection is in a geographic CRS

    Example:
        >>> stations_3km = buffer(stations, 3000)
        >>> stations_3km.geom_type.unique()
        array(['Polygon'], dtype=object)
    """
    distance = validate_buffer_distance(distance)

    if join_style not in JOIN_STYLES:
        raise ValueError(f"Unsupported join style '{join_style}'. Use one of {JOIN_STYLES}")

    if resolution is None:
        resolution = DEFAULT_RESOLUTION

    crs = require_projected(gdf, 'buffer')
    unit = linear_unit(crs)

    logger.info(f"Buffering {len(gdf)} feature(s) by {distance:g} {unit} (join style: {join_style})...")

    buffered = gdf.copy()
    buffered[gdf.geometry.name] = gdf.geometry.apply(
        lambda geom: buffer_geometry(geom, distance, join_style, resolution)
    )

    logger.info(f"  ✓ Buffered geometry types: {buffered.geom_type.unique().tolist()}")
    return buffered
