"""
CRS Alignment Module

Ensures two feature collections share one coordinate reference system before
any binary spatial operation.

Binary operations never reproject on their own. They take an AlignedPair, or
build one from two collections, and building one fails with CRSMismatch when
the caller forgot to call align() first. The check lives in the AlignedPair
constructor, so holding a pair means the CRS check has already happened.
"""

from typing import Iterator, Optional, Union

import geopandas as gpd
from pyproj import CRS
from pyproj.exceptions import CRSError

from core.exceptions import CRSMismatch, CRSNotProjected, CRSUndefined
from utils.logger import get_logger

logger = get_logger(__name__)

CRSLike = Union[int, str, CRS]

# pyproj unit names -> utils.units symbols
LINEAR_UNIT_SYMBOLS = {
    'metre': 'm',
    'meter': 'm',
    'kilometre': 'km',
    'foot': 'ft',
    'US survey foot': 'ft',
    'British foot (1936)': 'ft',
}


def to_crs_object(crs: CRSLike) -> CRS:
    """
    Normalise an EPSG integer, 'EPSG:nnnn' string, WKT string or CRS object.

    Raises:
        CRSUndefined: If crs is None or cannot be interpreted
    """
    if crs is None:
        raise CRSUndefined("No CRS given")
    try:
        return CRS.from_user_input(crs)
    except CRSError as e:
        raise CRSUndefined(f"Cannot interpret CRS definition {crs!r}: {e}") from e


def is_projected(crs: CRSLike) -> bool:
    """Return True for projected (planar, linear unit) CRS."""
    return to_crs_object(crs).is_projected


def _require_crs(gdf: gpd.GeoDataFrame, label: str) -> CRS:
    if gdf.crs is None:
        raise CRSUndefined(
            f"The {label} collection has no CRS defined. "
            f"Assign one with set_crs() before running spatial operations."
        )
    return gdf.crs


class AlignedPair:
    """
    Two collections confirmed to share one CRS.

    Construction is the check: a pair whose inputs lack a CRS or disagree on
    it cannot be built. Unpacks like a tuple: ``left, right = pair``.

    Raises:
        CRSUndefined: If either input lacks a CRS
        CRSMismatch: If the CRS differ
    """

    __slots__ = ('left', 'right')

    def __init__(self, left: gpd.GeoDataFrame, right: gpd.GeoDataFrame,
                 operation: str = 'spatial operation'):
        crs_left = _require_crs(left, 'left')
        crs_right = _require_crs(right, 'right')
        if crs_left != crs_right:
            raise CRSMismatch(crs_left, crs_right, operation)
        self.left = left
        self.right = right

    @property
    def crs(self) -> CRS:
        return self.right.crs

    def __iter__(self) -> Iterator[gpd.GeoDataFrame]:
        return iter((self.left, self.right))

    def __repr__(self) -> str:
        return f"AlignedPair({len(self.left)} x {len(self.right)} feature(s), {self.crs.to_string()})"


def as_aligned_pair(a, b: Optional[gpd.GeoDataFrame] = None,
                    operation: str = 'spatial operation') -> AlignedPair:
    """
    Accept either an AlignedPair or two collections for a binary operation.

    Two collections are validated by building the pair, without reprojecting.
    """
    if isinstance(a, AlignedPair):
        if b is not None:
            raise TypeError(f"{operation}: pass either an AlignedPair or two collections, not both")
        return a
    if b is None:
        raise TypeError(f"{operation}: a second collection is required")
    return AlignedPair(a, b, operation)


def reproject(gdf: gpd.GeoDataFrame, crs: CRSLike) -> gpd.GeoDataFrame:
    """
    Reproject a collection to an explicit target CRS.

    Returns a new GeoDataFrame; the input is returned unchanged when it is
    already in the target CRS.
    """
    source_crs = _require_crs(gdf, 'input')
    target_crs = to_crs_object(crs)

    if source_crs == target_crs:
        return gdf

    logger.info(f"  - Reprojecting {len(gdf)} feature(s): {source_crs.to_string()} → {target_crs.to_string()}")
    return gdf.to_crs(target_crs)


def align(a: gpd.GeoDataFrame, b: gpd.GeoDataFrame) -> AlignedPair:
    """
    Return (a', b) with a reprojected into b's CRS if they differ.

    Raises:
        CRSUndefined: If either input lacks a CRS
    """
    crs_a = _require_crs(a, 'left')
    crs_b = _require_crs(b, 'right')

    if crs_a == crs_b:
        logger.debug(f"CRS already aligned: {crs_b.to_string()}")
        return AlignedPair(a, b)

    return AlignedPair(reproject(a, crs_b), b)


def align_to_projected(a: gpd.GeoDataFrame, b: gpd.GeoDataFrame) -> AlignedPair:
    """
    Align a pair, preferring the projected CRS as the common target.

    If exactly one of the inputs is projected, the other is reprojected onto
    it. Otherwise the pair is aligned to b's CRS, as align() would.
    """
    crs_a = _require_crs(a, 'left')
    crs_b = _require_crs(b, 'right')

    if crs_a.is_projected and not crs_b.is_projected:
        logger.info(f"  - Normalising to projected CRS of left input ({crs_a.to_string()})")
        return AlignedPair(a, reproject(b, crs_a))

    if not crs_a.is_projected and not crs_b.is_projected:
        logger.warning(
            f"Neither input is in a projected CRS ({crs_a.to_string()}, {crs_b.to_string()}); "
            f"area, buffer and distance operations will be rejected"
        )

    return align(a, b)


def require_same_crs(a: gpd.GeoDataFrame, b: gpd.GeoDataFrame,
                     operation: str = 'spatial operation') -> AlignedPair:
    """
    Validate that two collections share one CRS, without reprojecting.

    Raises:
        CRSUndefined: If either input lacks a CRS
        CRSMismatch: If the CRS differ
    """
    return AlignedPair(a, b, operation)


def require_projected(gdf: gpd.GeoDataFrame, operation: str) -> CRS:
    """
    Validate that planar measures are meaningful for this collection.

    Raises:
        CRSUndefined: If the collection has no CRS
        CRSNotProjected: If the CRS is geographic
    """
    crs = _require_crs(gdf, 'input')
    if not crs.is_projected:
        raise CRSNotProjected(
            f"{operation} needs a projected CRS with linear units, got {crs.to_string()}. "
            f"Reproject first (for example to EPSG:27700)."
        )
    return crs


def linear_unit(crs: CRSLike) -> str:
    """
    Return the linear unit symbol of a projected CRS (e.g. 'm').

    Raises:
        CRSNotProjected: If the CRS is geographic
        ValueError: If the unit has no known symbol
    """
    crs = to_crs_object(crs)
    if not crs.is_projected:
        raise CRSNotProjected(f"{crs.to_string()} is geographic and has no linear unit")

    unit_name = crs.axis_info[0].unit_name
    try:
        return LINEAR_UNIT_SYMBOLS[unit_name]
    except KeyError:
        raise ValueError(f"Unsupported CRS linear unit: {unit_name}")
