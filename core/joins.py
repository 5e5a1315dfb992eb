"""
Relational join module for the Greenspace Coverage Analysis tool.

Exact-equality attribute joins between tables and collections, plus the
anti-join diagnostics that surface keys present on one side only (for
example a borough code miscoded as 'E09000042' instead of 'E09000002').

Joins never repair keys. Clean them explicitly with normalize_keys() and
re-run the join after reviewing the JoinKeyMismatch report.
"""

from typing import Dict, List, NamedTuple, Optional

import geopandas as gpd
import pandas as pd

from core.exceptions import AmbiguousJoinKey, UnknownColumn
from utils.logger import get_logger

logger = get_logger(__name__)

MATCHED_COLUMN = '_matched'


class JoinKeyMismatch(NamedTuple):
    """
    Rows of the left table whose key has no exact match on the right.

    Attributes:
        on: Key column name
        unmatched_keys: Distinct unmatched key values, in first-seen order
        rows: The unmatched left rows (original index preserved)
    """

    on: str
    unmatched_keys: List
    rows: pd.DataFrame

    def __bool__(self) -> bool:
        return bool(len(self.rows))

    def describe(self) -> str:
        if not self:
            return f"All keys in '{self.on}' matched"
        return (
            f"{len(self.rows)} row(s) with {len(self.unmatched_keys)} unmatched "
            f"'{self.on}' value(s): {self.unmatched_keys}"
        )


def _check_key(frame: pd.DataFrame, on: str) -> None:
    if on not in frame.columns:
        raise UnknownColumn([on], frame.columns)


def _attribute_table(right: pd.DataFrame) -> pd.DataFrame:
    if isinstance(right, gpd.GeoDataFrame):
        return pd.DataFrame(right.drop(columns=right.geometry.name))
    return right


def left_join(left: pd.DataFrame,
              right: pd.DataFrame,
              on: str,
              indicator: bool = False) -> pd.DataFrame:
    """
    Attach the columns of right to every row of left with an equal key.

    Every row of left is kept, in order and with its original index; right-hand
    columns are null where no key matches. Right-hand geometry is dropped, so a
    GeoDataFrame on the left stays a GeoDataFrame with its own geometry.

    Args:
        left: Table or collection to keep in full
        right: Table or collection supplying attributes; keys must be unique
        on: Key column present in both
        indicator: Add a boolean '_matched' column

    Raises:
        UnknownColumn: If 'on' is missing from either side
        AmbiguousJoinKey: If right repeats a key value
    """
    _check_key(left, on)
    _check_key(right, on)
    right = _attribute_table(right)
    # Null keys never match
    right = right[right[on].notna()]

    duplicated = right[on][right[on].duplicated()].unique().tolist()
    if duplicated:
        raise AmbiguousJoinKey(
            f"Right-hand table repeats key value(s) in '{on}': {duplicated}; "
            f"each left row must match at most one right row"
        )

    logger.info(f"Joining {len(left)} row(s) to {len(right)} row(s) on '{on}'...")

    joined = left.merge(right, how='left', on=on, indicator=indicator, validate='many_to_one')
    joined.index = left.index

    matched = joined['_merge'] == 'both' if indicator else left[on].isin(right[on])
    if indicator:
        joined = joined.drop(columns='_merge')
        joined[MATCHED_COLUMN] = matched.to_numpy()

    unmatched = int((~matched).sum())
    if unmatched:
        logger.warning(f"  ⚠ {unmatched} row(s) found no match on '{on}'")
    logger.info(f"  ✓ {len(joined) - unmatched} of {len(joined)} row(s) matched")

    return joined


def anti_join(left: pd.DataFrame, right: pd.DataFrame, on: str) -> pd.DataFrame:
    """
    Return the rows of left whose key value does not occur in right.

    Comparison is exact; null keys never match.

    Raises:
        UnknownColumn: If 'on' is missing from either side
    """
    _check_key(left, on)
    _check_key(right, on)

    right_keys = right[on].dropna()
    unmatched = ~left[on].isin(right_keys) | left[on].isna()
    return left[unmatched.to_numpy()].copy()


def check_join_keys(left: pd.DataFrame, right: pd.DataFrame, on: str) -> JoinKeyMismatch:
    """
    Report left rows that would find no partner on the right.

    The report is returned, not raised: dirty key data needs review, and the
    caller decides whether to fix it upstream or proceed.
    """
    rows = anti_join(left, right, on)
    report = JoinKeyMismatch(
        on=on,
        unmatched_keys=list(dict.fromkeys(rows[on].tolist())),
        rows=rows,
    )

    if report:
        logger.warning(f"  ⚠ Join key mismatch: {report.describe()}")
    else:
        logger.debug(report.describe())

    return report


def normalize_keys(frame: pd.DataFrame,
                   on: str,
                   replacements: Optional[Dict] = None,
                   strip: bool = True,
                   upper: bool = False) -> pd.DataFrame:
    """
    Return a copy of frame with cleaned key values.

    Args:
        frame: Table or collection to clean
        on: Key column
        replacements: Exact value substitutions applied after stripping/casing,
            e.g. {'E09000042': 'E09000002'} for a known miscode
        strip: Trim surrounding whitespace of string keys
        upper: Upper-case string keys

    Raises:
        UnknownColumn: If 'on' is missing
    """
    _check_key(frame, on)

    def clean(value):
        if isinstance(value, str):
            if strip:
                value = value.strip()
            if upper:
                value = value.upper()
        return value

    cleaned = frame.copy()
    keys = cleaned[on].map(clean)
    if replacements:
        changed = keys.isin(list(replacements))
        if changed.any():
            logger.info(f"  - Replacing {int(changed.sum())} '{on}' value(s): {replacements}")
        keys = keys.replace(replacements)

    cleaned[on] = keys
    return cleaned
