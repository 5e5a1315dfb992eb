"""
Unit-tagged measurements.

Areas and distances computed in a projected CRS carry the CRS linear unit.
Measurement keeps that unit attached until the value is explicitly detagged
(via .magnitude or float()) for tabular aggregation.

Example:
    >>> area = Measurement(25000.0, 'm2')
    >>> area.to('ha')
    Measurement(value=2.5, unit='ha')
    >>> float(area.to('ha'))
    2.5
"""

from dataclasses import dataclass

# Factors to the base unit of each dimension (metre, square metre)
LENGTH_UNITS = {
    'm': 1.0,
    'km': 1000.0,
    'ft': 0.3048,
    'mi': 1609.344,
}

AREA_UNITS = {
    'm2': 1.0,
    'ha': 10000.0,
    'km2': 1000000.0,
    'ft2': 0.3048 ** 2,
    'acre': 4046.8564224,
}

# Area unit obtained by squaring a linear unit
SQUARED_UNITS = {
    'm': 'm2',
    'km': 'km2',
    'ft': 'ft2',
}


def unit_dimension(unit: str) -> str:
    """Return 'length' or 'area' for a supported unit symbol."""
    if unit in LENGTH_UNITS:
        return 'length'
    if unit in AREA_UNITS:
        return 'area'
    raise ValueError(
        f"Unsupported unit '{unit}'. "
        f"Supported: {sorted(LENGTH_UNITS) + sorted(AREA_UNITS)}"
    )


def convert(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a plain number between two units of the same dimension."""
    from_dim = unit_dimension(from_unit)
    to_dim = unit_dimension(to_unit)
    if from_dim != to_dim:
        raise ValueError(f"Cannot convert {from_dim} unit '{from_unit}' to {to_dim} unit '{to_unit}'")
    if from_unit == to_unit:
        return value
    table = LENGTH_UNITS if from_dim == 'length' else AREA_UNITS
    return value * table[from_unit] / table[to_unit]


@dataclass(frozen=True)
class Measurement:
    """A numeric area or distance value tagged with its unit."""

    value: float
    unit: str

    def __post_init__(self):
        unit_dimension(self.unit)

    @property
    def magnitude(self) -> float:
        return float(self.value)

    @property
    def dimension(self) -> str:
        return unit_dimension(self.unit)

    def to(self, unit: str) -> 'Measurement':
        return Measurement(convert(self.value, self.unit, unit), unit)

    def __float__(self) -> float:
        return self.magnitude

    def _check_same_unit(self, other: 'Measurement') -> None:
        if not isinstance(other, Measurement):
            raise TypeError(f"Expected Measurement, got {type(other).__name__}")
        if other.unit != self.unit:
            raise ValueError(
                f"Unit mismatch: '{self.unit}' vs '{other.unit}'; convert with .to() first"
            )

    def __add__(self, other: 'Measurement') -> 'Measurement':
        self._check_same_unit(other)
        return Measurement(self.value + other.value, self.unit)

    def __sub__(self, other: 'Measurement') -> 'Measurement':
        self._check_same_unit(other)
        return Measurement(self.value - other.value, self.unit)

    def __lt__(self, other: 'Measurement') -> bool:
        self._check_same_unit(other)
        return self.value < other.value

    def __le__(self, other: 'Measurement') -> bool:
        self._check_same_unit(other)
        return self.value <= other.value

    def __str__(self) -> str:
        return f"{self.value:,.2f} {self.unit}"
