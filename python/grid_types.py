"""
Shared type definitions for the data grid.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, TypeVar

T = TypeVar("T")


class Direction(Enum):
    """Cardinal direction for cursor movement."""

    N = "N"  # Up (decreasing row)
    S = "S"  # Down (increasing row)
    E = "E"  # Right (increasing col)
    W = "W"  # Left (decreasing col)


class NavKey(Enum):
    """Logical keys understood by the navigation state machine."""

    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"
    HOME = "home"
    END = "end"
    ACTIVATE = "activate"


class SortDirection(Enum):
    """Direction of the single active sort."""

    ASC = "asc"
    DESC = "desc"

    @property
    def label(self) -> str:
        return "ascending" if self is SortDirection.ASC else "descending"


class Align(Enum):
    """Horizontal alignment of a column's cells."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# =============================================================================
# Column and Query State
# =============================================================================


Accessor = str | Callable[[Any], Any]
Comparator = Callable[[Any, Any], int]


@dataclass(frozen=True)
class ColumnDescriptor(Generic[T]):
    """
    How to extract, format, sort and filter one field of a row.

    The key is the join key between sort state, filter state and the rendered
    cell, so it must be unique within a grid.
    """

    key: str
    header: str
    accessor: Accessor
    sortable: bool = False
    filterable: bool = False
    align: Align = Align.LEFT
    width: int | None = None
    description: str | None = None
    format: Callable[[Any], str] | None = None
    comparator: Comparator | None = None
    interactive: bool = True  # Activating a cell in this column clicks the row

    def raw_value(self, row: T) -> Any:
        """Apply the accessor. May raise if a callable accessor is malformed."""
        if callable(self.accessor):
            return self.accessor(row)
        if isinstance(row, Mapping):
            return row.get(self.accessor)
        return getattr(row, self.accessor, None)


@dataclass(frozen=True)
class SortSpec:
    """The active sort: one column and a direction."""

    column_key: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True)
class CellPosition:
    """A cursor position within the currently rendered page."""

    row: int
    col: int


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class GridOptions:
    """Per-grid settings, fixed for the lifetime of a grid instance."""

    page_size: int = 50
    selectable: bool = False
    searchable: bool = False
    caption: str = ""
    empty_message: str = "No data available"
    announce_delay: float = 1.0  # Seconds each announcement stays live


RowIdFn = Callable[[Any], str]
