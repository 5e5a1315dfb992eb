"""
Attribute aggregation module for the Greenspace Coverage Analysis tool.

Groups the attribute table of a collection by one or more key columns and
reduces each group with count / sum / mean. Geometry is ignored.

Reducers are given as a mapping of output column name to either the string
'count' or a (function, column) tuple:

    >>> rows = aggregate(pieces, ['borough'], {
    ...     'n_sites': 'count',
    ...     'area_ha': ('sum', 'area_ha'),
    ... })
    >>> rows[0].keys, rows[0].values
    ({'borough': 'Camden'}, {'n_sites': 112, 'area_ha': 524.7})
"""

from typing import Dict, List, NamedTuple, Sequence, Tuple, Union

import pandas as pd

from core.exceptions import UnknownColumn
from utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_FUNCTIONS = ('sum', 'mean')

Reducer = Union[str, Tuple[str, str]]


class AggregationRow(NamedTuple):
    """Group key values and reduced values of one group."""

    keys: Dict
    values: Dict


def _normalize_keys(group_keys) -> List[str]:
    if isinstance(group_keys, str):
        return [group_keys]
    return list(group_keys)


def _parse_reducers(reducers: Dict[str, Reducer]) -> Dict[str, Tuple[str, str]]:
    """Return {output: (function, column)} with column None for count."""
    parsed = {}
    for output, reducer in reducers.items():
        if reducer == 'count':
            parsed[output] = ('count', None)
            continue

        if not (isinstance(reducer, tuple) and len(reducer) == 2):
            raise ValueError(
                f"Reducer for '{output}' must be 'count' or a (function, column) tuple, got {reducer!r}"
            )

        function, column = reducer
        if function not in SUPPORTED_FUNCTIONS:
            raise ValueError(
                f"Unsupported reducer '{function}' for '{output}'. "
                f"Use 'count' or one of {SUPPORTED_FUNCTIONS}"
            )
        parsed[output] = (function, column)
    return parsed


def aggregate_frame(collection: pd.DataFrame,
                    group_keys: Union[str, Sequence[str]],
                    reducers: Dict[str, Reducer]) -> pd.DataFrame:
    """
    Group an attribute table and reduce each group.

    Args:
        collection: DataFrame or GeoDataFrame
        group_keys: Key column name or list of names
        reducers: {output column: 'count' | (function, column)}

    Returns:
        Plain DataFrame, one row per group in order of first occurrence, with
        the key columns followed by the reduced columns. Rows with null keys
        form their own group.

    Raises:
        UnknownColumn: If a key or reducer column is missing
        ValueError: If a reducer is not supported
    """
    keys = _normalize_keys(group_keys)
    parsed = _parse_reducers(reducers)

    referenced = keys + [column for _, column in parsed.values() if column is not None]
    missing = [column for column in dict.fromkeys(referenced) if column not in collection.columns]
    if missing:
        raise UnknownColumn(missing, collection.columns)

    logger.info(f"Aggregating {len(collection)} row(s) by {keys}...")

    table = pd.DataFrame(collection[list(dict.fromkeys(referenced))])
    grouped = table.groupby(keys, sort=False, dropna=False)

    reduced = {}
    for output, (function, column) in parsed.items():
        if function == 'count':
            reduced[output] = grouped.size()
        else:
            reduced[output] = grouped[column].agg(function)

    if reduced:
        result = pd.DataFrame(reduced).reset_index()
    else:
        result = grouped.size().reset_index()[keys]

    logger.info(f"  ✓ {len(result)} group(s)")
    return result


def aggregate(collection: pd.DataFrame,
              group_keys: Union[str, Sequence[str]],
              reducers: Dict[str, Reducer]) -> List[AggregationRow]:
    """
    Group an attribute table and reduce each group into AggregationRows.

    Same semantics as aggregate_frame(); each row splits into the key tuple
    and the reduced values.
    """
    keys = _normalize_keys(group_keys)
    frame = aggregate_frame(collection, keys, reducers)
    value_columns = [c for c in frame.columns if c not in keys]

    return [
        AggregationRow(
            keys={key: record[key] for key in keys},
            values={column: record[column] for column in value_columns},
        )
        for record in frame.to_dict('records')
    ]
