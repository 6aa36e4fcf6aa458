"""
Query pipeline for the data grid.

Pure functions that turn the full row collection plus the current search term,
per-column filters and sort spec into the visible page. The stages always run
in the same order: search -> filter -> sort -> paginate.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Generic, Sequence, TypeVar

from rich.text import Text

from grid_types import ColumnDescriptor, SortDirection, SortSpec

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class PageResult(Generic[T]):
    """Output of one pipeline run."""

    page_rows: tuple[T, ...]
    total_filtered_count: int
    page: int  # Effective page after clamping
    page_count: int
    filtered_rows: tuple[T, ...]  # Search/filter/sort output, before slicing


# =============================================================================
# Cell Values
# =============================================================================


def cell_text(column: ColumnDescriptor[T], row: T) -> str | None:
    """
    Text shown for a cell, also used for search and filter matching.

    Returns None when the accessor or formatter raised, so the cell renders
    empty and never matches a search or filter.
    """
    try:
        value = column.raw_value(row)
        if column.format is not None and value is not None:
            value = column.format(value)
    except Exception:
        logger.debug("Malformed cell in column %r", column.key, exc_info=True)
        return None

    if value is None:
        return ""
    if isinstance(value, Text):
        return value.plain
    return str(value)


def _matches(column: ColumnDescriptor[T], row: T, needle: str) -> bool:
    text = cell_text(column, row)
    return text is not None and needle in text.lower()


# =============================================================================
# Pipeline Stages
# =============================================================================


def search_rows(rows: Sequence[T], columns: Sequence[ColumnDescriptor[T]], term: str) -> list[T]:
    """Keep rows where any column's text contains the term (case-insensitive)."""
    if not term:
        return list(rows)
    needle = term.lower()
    return [row for row in rows if any(_matches(column, row, needle) for column in columns)]


def filter_rows(
    rows: Sequence[T],
    columns: Sequence[ColumnDescriptor[T]],
    filters: dict[str, str],
) -> list[T]:
    """Apply every non-empty column filter; filters are ANDed together."""
    by_key = {column.key: column for column in columns}
    active = [
        (by_key[key], value.lower())
        for key, value in filters.items()
        if value and key in by_key
    ]
    if not active:
        return list(rows)
    return [row for row in rows if all(_matches(column, row, needle) for column, needle in active)]


_MISSING = object()


def _sort_value(column: ColumnDescriptor[T], row: T) -> Any:
    try:
        value = column.raw_value(row)
    except Exception:
        logger.debug("Accessor failed while sorting column %r", column.key, exc_info=True)
        return _MISSING
    if value is None:
        return _MISSING
    if isinstance(value, float) and math.isnan(value):
        return _MISSING
    if isinstance(value, Text):
        return value.plain
    return value


def _natural_key(value: Any) -> Any:
    return value.casefold() if isinstance(value, str) else value


def sort_rows(
    rows: Sequence[T],
    column: ColumnDescriptor[T],
    direction: SortDirection = SortDirection.ASC,
) -> list[T]:
    """
    Stable sort by the column's raw value.

    Rows whose value is missing (None, NaN, or the accessor raised) go after
    all defined values in both directions, in their original order. A
    column comparator, when given, replaces natural ordering.

    Args:
        rows: Rows to sort (not modified)
        column: Column to sort by
        direction: ASC or DESC; DESC reverses comparisons, so ties keep
            their input order

    Returns:
        A new sorted list. If the column mixes non-comparable types or the
        comparator raises, the input order is returned unchanged.
    """
    keyed = [(_sort_value(column, row), row) for row in rows]
    defined = [(value, row) for value, row in keyed if value is not _MISSING]
    missing = [row for value, row in keyed if value is _MISSING]

    if column.comparator is not None:
        wrapped = cmp_to_key(column.comparator)

        def key_fn(item: tuple[Any, T]) -> Any:
            return wrapped(item[0])
    else:

        def key_fn(item: tuple[Any, T]) -> Any:
            return _natural_key(item[0])

    try:
        # reverse=True keeps equal elements in input order
        ordered = sorted(defined, key=key_fn, reverse=direction is SortDirection.DESC)
    except Exception as e:
        # Incomparable types or a comparator rejecting a value
        logger.warning("Cannot sort column %r (%s); leaving rows unsorted", column.key, e)
        return list(rows)

    return [row for _, row in ordered] + missing


def page_count(total: int, page_size: int) -> int:
    """Number of pages for a row count; an empty result still has one page."""
    return max(1, math.ceil(total / page_size))


def clamp_page(page: int, total: int, page_size: int) -> int:
    """Clamp a 1-based page number into the valid range."""
    return min(max(1, page), page_count(total, page_size))


def paginate(rows: Sequence[T], page: int, page_size: int) -> tuple[list[T], int]:
    """Slice one page out of rows. Returns (page_rows, effective_page)."""
    effective = clamp_page(page, len(rows), page_size)
    start = (effective - 1) * page_size
    return list(rows[start:start + page_size]), effective


def compute_visible_rows(
    rows: Sequence[T],
    columns: Sequence[ColumnDescriptor[T]],
    search_term: str,
    filters: dict[str, str],
    sort: SortSpec | None,
    page: int,
    page_size: int,
) -> PageResult[T]:
    """Run the full pipeline and return the visible page."""
    result = search_rows(rows, columns, search_term)
    result = filter_rows(result, columns, filters)

    if sort is not None:
        sort_column = next((column for column in columns if column.key == sort.column_key), None)
        if sort_column is not None:
            result = sort_rows(result, sort_column, sort.direction)

    page_rows, effective = paginate(result, page, page_size)
    return PageResult(
        page_rows=tuple(page_rows),
        total_filtered_count=len(result),
        page=effective,
        page_count=page_count(len(result), page_size),
        filtered_rows=tuple(result),
    )
