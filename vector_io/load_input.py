"""
Vector Input Loading Module

Reads feature collections from shapefile bundles, multi-layer GeoPackages and
delimited text files with coordinate columns. The CRS declared by the source
is kept as-is; reprojection is the caller's decision (see geometry_ops.crs_alignment).
"""

import tempfile
import zipfile
from pathlib import Path
from typing import Dict, List, Optional, Union

import geopandas as gpd
import pandas as pd

from core.exceptions import MalformedGeometry, SourceNotFound, UnknownColumn
from geometry_ops.crs_alignment import CRSLike, to_crs_object
from utils.logger import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]

# Components a shapefile bundle cannot be read without
SHAPEFILE_REQUIRED_EXTENSIONS = ('.shp', '.shx', '.dbf')
MULTI_LAYER_EXTENSIONS = ('.gpkg', '.sqlite')


def _require_exists(file_path: Path) -> None:
    if not file_path.exists():
        raise SourceNotFound(f"Input file not found: {file_path}")


def check_shapefile_components(shp_path: PathLike) -> None:
    """
    Verify that the co-named .shp, .shx and .dbf files sit side by side.

    Raises:
        SourceNotFound: Naming every missing component
    """
    shp_path = Path(shp_path)
    siblings = {p.suffix.lower() for p in shp_path.parent.glob(f'{shp_path.stem}.*')
                if p.stem == shp_path.stem}

    missing = [ext for ext in SHAPEFILE_REQUIRED_EXTENSIONS if ext not in siblings]
    if missing:
        raise SourceNotFound(
            f"Shapefile bundle '{shp_path.stem}' is incomplete, missing component(s): "
            f"{', '.join(missing)} (expected next to {shp_path})"
        )


def list_layers(file_path: PathLike) -> List[str]:
    """
    Enumerate the layer names of a vector container.

    Raises:
        SourceNotFound: If the file doesn't exist
        MalformedGeometry: If the container cannot be opened
    """
    file_path = Path(file_path)
    _require_exists(file_path)

    try:
        layers = gpd.list_layers(file_path)
    except Exception as e:
        raise MalformedGeometry(f"Cannot open vector container {file_path}: {e}") from e

    return layers['name'].tolist()


def _read(file_path: Path, layer: Optional[str]) -> gpd.GeoDataFrame:
    try:
        if layer is None:
            return gpd.read_file(file_path)
        return gpd.read_file(file_path, layer=layer)
    except Exception as e:
        raise MalformedGeometry(f"Failed to read geospatial file {file_path}: {e}") from e


def _read_zip(file_path: Path) -> gpd.GeoDataFrame:
    logger.info("  - Detected ZIP file, extracting to read shapefile...")
    try:
        with tempfile.TemporaryDirectory() as tmpdir:
            with zipfile.ZipFile(file_path, 'r') as zip_ref:
                zip_ref.extractall(tmpdir)
            shp_files = sorted(Path(tmpdir).rglob('*.shp'))
            if not shp_files:
                raise SourceNotFound(f"No shapefile (.shp) found in ZIP archive {file_path}")
            if len(shp_files) > 1:
                logger.warning(f"  - Multiple shapefiles found in ZIP, using first: {shp_files[0].name}")
            check_shapefile_components(shp_files[0])
            # Materialise before the temporary directory disappears
            return _read(shp_files[0], None).copy()
    except zipfile.BadZipFile as e:
        raise MalformedGeometry(f"Invalid ZIP file {file_path}: {e}") from e


def load_vector(file_path: PathLike, layer: Optional[str] = None) -> gpd.GeoDataFrame:
    """
    Load a vector file into a GeoDataFrame with the CRS declared by the source.

    Supports: Shapefile (plain or zipped bundle), GeoPackage and other
    GDAL-readable formats.

    Args:
        file_path: Path to the vector file
        layer: Layer name for multi-layer containers (GeoPackage)

    Returns:
        GeoDataFrame in the source CRS

    Raises:
        SourceNotFound: If the path, a shapefile component or the layer doesn't exist
        MalformedGeometry: If the file cannot be parsed

    Example:
        >>> boroughs = load_vector('london_boundaries.gpkg', layer='boroughs')
        >>> boroughs.crs.to_epsg()
        27700
    """
    file_path = Path(file_path)
    _require_exists(file_path)

    logger.info(f"Loading features from: {file_path}" + (f" (layer '{layer}')" if layer else ""))

    suffix = file_path.suffix.lower()

    if suffix == '.zip':
        gdf = _read_zip(file_path)
    else:
        if suffix == '.shp':
            check_shapefile_components(file_path)

        if suffix in MULTI_LAYER_EXTENSIONS or layer is not None:
            available = list_layers(file_path)
            if layer is None:
                if len(available) > 1:
                    logger.warning(
                        f"  - {file_path.name} holds {len(available)} layers {available}, "
                        f"loading first: '{available[0]}'"
                    )
                layer = available[0] if available else None
            elif layer not in available:
                raise SourceNotFound(
                    f"Layer '{layer}' not found in {file_path}. Available layers: {available}"
                )

        gdf = _read(file_path, layer)

    if gdf.crs is None:
        logger.warning(
            f"  - {file_path.name} has no CRS defined; binary spatial operations "
            f"will fail until one is assigned"
        )

    metadata = describe_collection(gdf, file_path)
    logger.info(f"  - Loaded {metadata['feature_count']} feature(s)")
    logger.info(f"  - CRS: {metadata['crs']}")
    logger.debug(f"  - Geometry types: {metadata['geometry_types']}")

    return gdf


def load_points_csv(file_path: PathLike,
                    x_column: str,
                    y_column: str,
                    crs: CRSLike,
                    **read_csv_kwargs) -> gpd.GeoDataFrame:
    """
    Load a delimited text file with one row per record into a point collection.

    Args:
        file_path: Path to the delimited text file
        x_column: Column holding the x coordinate (easting / longitude)
        y_column: Column holding the y coordinate (northing / latitude)
        crs: CRS of the coordinates (text files carry no CRS metadata)
        **read_csv_kwargs: Passed through to pandas.read_csv (sep, encoding, ...)

    Returns:
        GeoDataFrame of points; the coordinate columns are kept as attributes

    Raises:
        SourceNotFound: If the file doesn't exist
        UnknownColumn: If a coordinate column is missing
        MalformedGeometry: If coordinates are missing or non-numeric
    """
    file_path = Path(file_path)
    _require_exists(file_path)
    crs = to_crs_object(crs)

    logger.info(f"Loading point records from: {file_path}")

    try:
        frame = pd.read_csv(file_path, **read_csv_kwargs)
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise MalformedGeometry(f"Failed to parse delimited file {file_path}: {e}") from e

    missing = [c for c in (x_column, y_column) if c not in frame.columns]
    if missing:
        raise UnknownColumn(missing, frame.columns)

    xs = pd.to_numeric(frame[x_column], errors='coerce')
    ys = pd.to_numeric(frame[y_column], errors='coerce')
    bad_rows = xs.isna() | ys.isna()
    if bad_rows.any():
        raise MalformedGeometry(
            f"{int(bad_rows.sum())} row(s) in {file_path.name} have missing or non-numeric "
            f"coordinates in '{x_column}'/'{y_column}' (first at row {int(bad_rows.idxmax())})"
        )

    gdf = gpd.GeoDataFrame(
        frame,
        geometry=gpd.points_from_xy(xs, ys),
        crs=crs,
    )

    logger.info(f"  - Loaded {len(gdf)} point(s) in {crs.to_string()}")
    return gdf


def describe_collection(gdf: gpd.GeoDataFrame, source: PathLike) -> Dict:
    """
    Extract metadata about a loaded collection for tracking.

    Returns:
        Dictionary with source name, feature count, CRS, geometry types and bounds
    """
    return {
        'source': Path(source).name,
        'feature_count': len(gdf),
        'crs': gdf.crs.to_string() if gdf.crs is not None else None,
        'geometry_types': gdf.geometry.geom_type.dropna().unique().tolist(),
        'bounds': gdf.total_bounds.tolist() if not gdf.empty else None,  # [minx, miny, maxx, maxy]
    }
