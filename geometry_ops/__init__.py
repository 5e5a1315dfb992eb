"""
Geometry Operations Package

This package provides the spatial operations of the Greenspace Coverage Analysis tool.
Every binary operation requires both inputs in one CRS and fails with CRSMismatch
otherwise; align the inputs first.

Modules:
    crs_alignment: CRS normalisation and the validated AlignedPair
    overlay: Intersection, concatenation, union and planar areas
    buffering: Planar buffers in the CRS linear unit
    dissolve: Dissolve helpers and geometry repair
    coverage: Point coverage classification and distance to coverage

Usage:
    from geometry_ops import align_to_projected, intersect, with_area_column

    greenspace, boroughs = align_to_projected(greenspace, boroughs)
    pieces = with_area_column(intersect(greenspace, boroughs))
"""

from geometry_ops.crs_alignment import (
    AlignedPair,
    as_aligned_pair,
    align,
    align_to_projected,
    require_same_crs,
    reproject,
)
from geometry_ops.overlay import (
    intersect,
    combine,
    union,
    feature_areas,
    total_area,
    with_area_column,
)
from geometry_ops.buffering import buffer
from geometry_ops.dissolve import dissolve_by
from geometry_ops.coverage import (
    coverage,
    uncovered,
    distance_to_region,
    distances_to_region,
    mean_distance_to_coverage,
)

__all__ = [
    'AlignedPair',
    'as_aligned_pair',
    'align',
    'align_to_projected',
    'require_same_crs',
    'reproject',
    'intersect',
    'combine',
    'union',
    'feature_areas',
    'total_area',
    'with_area_column',
    'buffer',
    'dissolve_by',
    'coverage',
    'uncovered',
    'distance_to_region',
    'distances_to_region',
    'mean_distance_to_coverage',
]
