"""
Postcode lookup module for the Greenspace Coverage Analysis tool.

Resolves UK postcodes to point features through a postcodes.io-compatible
HTTP service. Each call resolves one postcode to zero or one feature; many
calls are concatenated into one collection in EPSG:4326.

Functions:
    normalize_postcode: Canonical spacing and case for a postcode
    lookup_postcode: Resolve one postcode to a zero-or-one row GeoDataFrame
    lookup_postcodes: Resolve many postcodes into one collection
"""

import re
from typing import Dict, Iterable, List, Optional

import geopandas as gpd
import pandas as pd
import requests
from shapely.geometry import Point

from core.exceptions import PostcodeLookupError
from utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = 'https://api.postcodes.io'
DEFAULT_TIMEOUT = 30
LOOKUP_CRS = 'EPSG:4326'

RESULT_COLUMNS = ['postcode', 'lsoa_code', 'district_code']


def normalize_postcode(postcode: str) -> str:
    """
    Upper-case a postcode and put a single space before the inward code.

    Example:
        >>> normalize_postcode(' sw1a1aa ')
        'SW1A 1AA'
    """
    compact = re.sub(r'\s+', '', str(postcode)).upper()
    if len(compact) > 3:
        return f"{compact[:-3]} {compact[-3:]}"
    return compact


def _empty_result() -> gpd.GeoDataFrame:
    return gpd.GeoDataFrame(
        {column: pd.Series([], dtype=object) for column in RESULT_COLUMNS},
        geometry=gpd.GeoSeries([], crs=LOOKUP_CRS),
        crs=LOOKUP_CRS,
    )


def _parse_result(result: Dict) -> Optional[Dict]:
    longitude = result.get('longitude')
    latitude = result.get('latitude')
    if longitude is None or latitude is None:
        # Terminated or non-geographic postcodes have no coordinates
        return None

    codes = result.get('codes') or {}
    return {
        'postcode': result.get('postcode'),
        'lsoa_code': codes.get('lsoa'),
        'district_code': codes.get('admin_district'),
        'geometry': Point(float(longitude), float(latitude)),
    }


def lookup_postcode(postcode: str,
                    session: Optional[requests.Session] = None,
                    base_url: Optional[str] = None,
                    timeout: Optional[int] = None) -> gpd.GeoDataFrame:
    """
    Resolve a single postcode to a point feature.

    Parameters:
    -----------
    postcode : str
        Postcode to resolve (spacing and case are normalised)
    session : Optional[requests.Session]
        Session to reuse across calls (defaults to the requests module)
    base_url : Optional[str]
        Service root (default: https://api.postcodes.io)
    timeout : Optional[int]
        Request timeout in seconds (default: 30)

    Returns:
    --------
    gpd.GeoDataFrame
        Zero rows if the postcode is unknown or has no coordinates, otherwise one
        row with point geometry (EPSG:4326), postcode, lsoa_code and district_code

    Raises:
    -------
    PostcodeLookupError
        On network failures and HTTP errors other than 404
    """
    http = session if session is not None else requests
    base_url = (base_url or DEFAULT_BASE_URL).rstrip('/')
    timeout = timeout or DEFAULT_TIMEOUT

    normalized = normalize_postcode(postcode)
    url = f"{base_url}/postcodes/{requests.utils.quote(normalized)}"

    try:
        response = http.get(url, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise PostcodeLookupError(f"Postcode lookup timed out for '{normalized}'") from e
    except requests.exceptions.RequestException as e:
        raise PostcodeLookupError(f"Postcode lookup failed for '{normalized}': {e}") from e

    if response.status_code == 404:
        logger.debug(f"  - Postcode not found: {normalized}")
        return _empty_result()

    try:
        response.raise_for_status()
        payload = response.json()
    except requests.exceptions.HTTPError as e:
        raise PostcodeLookupError(f"Postcode lookup failed for '{normalized}': {e}") from e
    except ValueError as e:
        raise PostcodeLookupError(f"Invalid JSON from postcode service for '{normalized}'") from e

    record = _parse_result(payload.get('result') or {})
    if record is None:
        logger.debug(f"  - Postcode has no coordinates: {normalized}")
        return _empty_result()

    return gpd.GeoDataFrame([record], geometry='geometry', crs=LOOKUP_CRS)


def lookup_postcodes(postcodes: Iterable[str],
                     session: Optional[requests.Session] = None,
                     base_url: Optional[str] = None,
                     timeout: Optional[int] = None) -> gpd.GeoDataFrame:
    """
    Resolve many postcodes, one service call each, into one collection.

    Results keep input order. Postcodes that resolve to nothing are skipped,
    logged, and listed in the returned frame's attrs['unresolved'].
    """
    postcodes = list(postcodes)
    logger.info(f"Resolving {len(postcodes)} postcode(s)...")

    owns_session = session is None
    session = session if session is not None else requests.Session()

    frames: List[gpd.GeoDataFrame] = []
    unresolved: List[str] = []
    try:
        for postcode in postcodes:
            result = lookup_postcode(postcode, session=session, base_url=base_url, timeout=timeout)
            if result.empty:
                unresolved.append(postcode)
            else:
                frames.append(result)
    finally:
        if owns_session:
            session.close()

    if frames:
        collection = gpd.GeoDataFrame(
            pd.concat(frames, ignore_index=True), geometry='geometry', crs=LOOKUP_CRS
        )
    else:
        collection = _empty_result()

    if unresolved:
        logger.warning(f"  ⚠ {len(unresolved)} postcode(s) could not be resolved: {unresolved}")
    logger.info(f"  ✓ Resolved {len(collection)} of {len(postcodes)} postcode(s)")

    collection.attrs['unresolved'] = unresolved
    return collection
