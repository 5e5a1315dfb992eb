"""
Vector Input Package

Loads feature collections for the Greenspace Coverage Analysis tool.

Modules:
    load_input: Read shapefiles, GeoPackage layers and coordinate CSV files
    postcode_lookup: Resolve postcodes to point features over HTTP
"""

from vector_io.load_input import load_vector, load_points_csv, list_layers
from vector_io.postcode_lookup import lookup_postcode, lookup_postcodes

__all__ = [
    'load_vector',
    'load_points_csv',
    'list_layers',
    'lookup_postcode',
    'lookup_postcodes',
]
