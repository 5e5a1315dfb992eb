"""
Error taxonomy for the Greenspace Coverage Analysis tool.

Loader and CRS errors are fatal to the calling step: no partially loaded or
partially reprojected collection is ever returned. Join key mismatches are not
errors; they are reported as data (see core.joins.JoinKeyMismatch).

Exceptions that describe bad input values also subclass ValueError, and
lookup-style failures subclass the matching builtin, so code written against
plain geopandas/pandas exceptions keeps catching them.
"""


class GeospatialAnalysisError(Exception):
    """Base class for all analysis errors."""


class SourceNotFound(GeospatialAnalysisError, FileNotFoundError):
    """Input path, shapefile component or container layer does not exist."""


class MalformedGeometry(GeospatialAnalysisError, ValueError):
    """A geometry or coordinate pair in the source cannot be parsed."""


class CRSUndefined(GeospatialAnalysisError, ValueError):
    """A collection has no coordinate reference system."""


class CRSMismatch(GeospatialAnalysisError, ValueError):
    """A binary spatial operation received collections in different CRS."""

    def __init__(self, left_crs, right_crs, operation: str = "spatial operation"):
        self.left_crs = left_crs
        self.right_crs = right_crs
        self.operation = operation
        super().__init__(
            f"{operation} requires inputs in the same CRS, got "
            f"{_crs_label(left_crs)} and {_crs_label(right_crs)}. "
            f"Call align() on the inputs first."
        )


class CRSNotProjected(GeospatialAnalysisError, ValueError):
    """A planar measure (area, buffer, distance) was requested in a geographic CRS."""


class InvalidBufferDistance(GeospatialAnalysisError, ValueError):
    """Buffer distance is negative or not a number."""


class UnknownColumn(GeospatialAnalysisError, KeyError):
    """A key or reducer references a column absent from the attribute table."""

    def __init__(self, columns, available):
        self.columns = list(columns)
        self.available = list(available)
        super().__init__(
            f"Unknown column(s) {self.columns}; available columns: {self.available}"
        )

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.args[0]


class AmbiguousJoinKey(GeospatialAnalysisError, ValueError):
    """The right-hand table of a join repeats a key value."""


class PostcodeLookupError(GeospatialAnalysisError):
    """The postcode lookup service failed for a reason other than 'not found'."""


def _crs_label(crs) -> str:
    if crs is None:
        return "no CRS"
    to_epsg = getattr(crs, 'to_epsg', None)
    epsg = to_epsg() if to_epsg is not None else None
    return f"EPSG:{epsg}" if epsg else str(crs)
