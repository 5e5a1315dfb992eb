"""
Analysis pipeline for the Greenspace Coverage Analysis tool.

Chains the loaders, CRS alignment, overlay, aggregation, join and coverage
steps into the two summaries the tool produces:

1. Greenspace by region: greenspace polygons split along region boundaries,
   area per region, optionally normalised by population.
2. Station coverage: points outside the union of station buffers and their
   mean distance to the covered area.

Functions:
    greenspace_by_region: Greenspace count and area per region
    station_coverage: Coverage gap summary for a set of points
    run_analysis: Run both summaries from a loaded configuration
"""

from typing import Dict, List, NamedTuple, Optional

import geopandas as gpd
import pandas as pd

from core.aggregation import aggregate_frame
from core.joins import JoinKeyMismatch, check_join_keys, left_join
from geometry_ops.buffering import buffer
from geometry_ops.coverage import coverage, mean_distance_to_coverage
from geometry_ops.crs_alignment import align, align_to_projected, reproject
from geometry_ops.overlay import intersect, total_area, union, with_area_column
from utils.logger import get_logger
from utils.units import Measurement
from vector_io.load_input import load_points_csv, load_vector
from vector_io.postcode_lookup import lookup_postcodes

logger = get_logger(__name__)


class GreenspaceSummary(NamedTuple):
    """Per-region greenspace table and the population key diagnostics."""

    table: pd.DataFrame
    mismatch: Optional[JoinKeyMismatch]


class CoverageSummary(NamedTuple):
    """Coverage classification of points against a buffered service area."""

    points: gpd.GeoDataFrame
    covered_area: gpd.GeoDataFrame
    uncovered_count: int
    mean_distance: Optional[Measurement]
    covered_area_size: Measurement


def greenspace_by_region(greenspace: gpd.GeoDataFrame,
                         regions: gpd.GeoDataFrame,
                         region_key: str,
                         population: Optional[pd.DataFrame] = None,
                         population_key: Optional[str] = None,
                         population_column: Optional[str] = None,
                         area_unit: str = 'ha') -> GreenspaceSummary:
    """
    Count greenspace sites and sum their area per region.

    Sites crossing a region boundary are split, so each part counts towards
    the region it lies in. Every region gets a row, in region order; regions
    without greenspace report zero sites and zero area.

    When a population table is given, it is joined on the region key and an
    area-per-1000-residents column is derived. Population rows whose key
    matches no region are reported in the mismatch, not dropped silently.

    Args:
        greenspace: Greenspace polygons
        regions: Region polygons carrying region_key
        region_key: Region identifier column (e.g. 'gss_code')
        population: Optional table with one row per region
        population_key: Key column in population (defaults to region_key)
        population_column: Population count column in population
        area_unit: Area unit for the summary (default hectares)

    Returns:
        GreenspaceSummary(table, mismatch)
    """
    logger.info("=" * 80)
    logger.info("GREENSPACE BY REGION")
    logger.info("=" * 80)

    greenspace, regions = align_to_projected(greenspace, regions)

    pieces = intersect(greenspace, regions[[region_key, regions.geometry.name]])
    area_column = f'area_{area_unit}'
    pieces = with_area_column(pieces, column=area_column, unit=area_unit)

    per_region = aggregate_frame(pieces, [region_key], {
        'site_count': 'count',
        area_column: ('sum', area_column),
    })

    # Every region gets a row; regions without greenspace hold zeros
    region_keys = pd.DataFrame(regions[region_key]).drop_duplicates().reset_index(drop=True)
    table = region_keys.merge(per_region, how='left', on=region_key, validate='one_to_one')
    table['site_count'] = table['site_count'].fillna(0).astype(int)
    table[area_column] = table[area_column].fillna(0.0)

    empty_regions = int((table['site_count'] == 0).sum())
    if empty_regions:
        logger.info(f"  - {empty_regions} region(s) contain no greenspace")

    mismatch = None
    if population is not None:
        if population_column is None:
            raise ValueError("population_column is required when a population table is given")
        population_key = population_key or region_key
        population = population.rename(columns={population_key: region_key})

        mismatch = check_join_keys(population, region_keys, region_key)
        table = left_join(table, population[[region_key, population_column]], on=region_key)
        table[f'{area_column}_per_1000'] = table[area_column] / table[population_column] * 1000

    logger.info(f"  ✓ {len(table)} region(s) summarised, total area "
                f"{total_area(pieces, area_unit)}")
    return GreenspaceSummary(table=table, mismatch=mismatch)


def station_coverage(points: gpd.GeoDataFrame,
                     stations: gpd.GeoDataFrame,
                     buffer_distance: float,
                     working_crs=27700,
                     join_style: str = 'round',
                     resolution: Optional[int] = None) -> CoverageSummary:
    """
    Classify points against the area within buffer_distance of any station.

    Stations are reprojected to the working CRS (typically from EPSG:4326 as
    returned by the postcode lookup), buffered, and dissolved into one covered
    area. Points are aligned to it before the coverage test.

    Returns:
        CoverageSummary with an 'uncovered' flag column added to the points
    """
    logger.info("=" * 80)
    logger.info("STATION COVERAGE")
    logger.info("=" * 80)

    if stations.empty:
        raise ValueError("No station locations to build the covered area from")

    stations = reproject(stations, working_crs)
    covered_area = union(buffer(stations, buffer_distance, join_style=join_style, resolution=resolution))
    pair = align(points, covered_area)
    points = pair.left

    flags = coverage(pair)
    classified = points.copy()
    classified['uncovered'] = flags

    summary = CoverageSummary(
        points=classified,
        covered_area=covered_area,
        uncovered_count=sum(flags),
        mean_distance=mean_distance_to_coverage(pair),
        covered_area_size=total_area(covered_area, 'km2'),
    )

    logger.info(f"  ✓ Covered area: {summary.covered_area_size}")
    logger.info(f"  ✓ Uncovered points: {summary.uncovered_count} of {len(points)}")
    return summary


def run_analysis(config: Dict, settings: Dict) -> Dict:
    """
    Load every configured input and run both summaries.

    Args:
        config: Configuration from config_loader.load_config()
        settings: Settings from config_loader.load_analysis_settings()

    Returns:
        Dictionary with 'greenspace' (GreenspaceSummary) and 'coverage'
        (CoverageSummary) entries for the inputs present in the configuration
    """
    inputs = config['inputs']
    results = {}

    if 'greenspace' in inputs and 'regions' in inputs:
        greenspace = load_vector(inputs['greenspace']['path'], inputs['greenspace'].get('layer'))
        regions_cfg = inputs['regions']
        regions = load_vector(regions_cfg['path'], regions_cfg.get('layer'))
        regions = reproject(regions, settings['working_crs'])

        population = None
        population_cfg = inputs.get('population')
        if population_cfg:
            population = pd.read_csv(population_cfg['path'])

        results['greenspace'] = greenspace_by_region(
            greenspace,
            regions,
            region_key=regions_cfg['key'],
            population=population,
            population_key=population_cfg.get('key') if population_cfg else None,
            population_column=population_cfg.get('column') if population_cfg else None,
            area_unit=settings['area_unit'],
        )

    if 'reports' in inputs and 'stations' in inputs:
        reports_cfg = inputs['reports']
        reports = load_points_csv(
            reports_cfg['path'], reports_cfg['x_column'], reports_cfg['y_column'], reports_cfg['crs']
        )

        stations_cfg = inputs['stations']
        postcodes: List[str] = pd.read_csv(stations_cfg['path'])[stations_cfg['postcode_column']].tolist()
        stations = lookup_postcodes(
            postcodes,
            base_url=settings['postcode_api_url'],
            timeout=settings['request_timeout'],
        )

        results['coverage'] = station_coverage(
            reports,
            stations,
            buffer_distance=settings['buffer_distance'],
            working_crs=settings['working_crs'],
            join_style=settings['buffer_join_style'],
            resolution=settings['buffer_resolution'],
        )

    return results
