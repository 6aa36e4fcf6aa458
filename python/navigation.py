"""
Keyboard navigation state machine for the data grid.

A single (row, col) cursor over the currently rendered page. The cursor is
the source of truth for focus; renderers only reflect it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from grid_types import CellPosition, Direction, NavKey, SortDirection, SortSpec

logger = logging.getLogger(__name__)


_KEY_DIRECTIONS = {
    NavKey.UP: Direction.N,
    NavKey.DOWN: Direction.S,
    NavKey.LEFT: Direction.W,
    NavKey.RIGHT: Direction.E,
}

# Direction deltas
_DELTAS = {
    Direction.N: (-1, 0),
    Direction.S: (1, 0),
    Direction.E: (0, 1),
    Direction.W: (0, -1),
}


@dataclass(frozen=True)
class NavResult:
    """Outcome of one key event."""

    cursor: CellPosition | None
    moved: bool = False
    activated: bool = False  # ACTIVATE pressed with a focused cell


class Navigator:
    """
    Cursor over a page of `rows` x `cols` cells.

    Starts unfocused. Moves are clamped to the page and never wrap; a move
    that would leave the page is a no-op.
    """

    def __init__(self, rows: int = 0, cols: int = 0) -> None:
        self.rows = rows
        self.cols = cols
        self.cursor: CellPosition | None = None

    @property
    def has_cells(self) -> bool:
        return self.rows > 0 and self.cols > 0

    def reset(self, rows: int, cols: int) -> None:
        """New page: put the cursor on the top-left cell, if there is one."""
        self.rows, self.cols = rows, cols
        self.cursor = CellPosition(0, 0) if self.has_cells else None

    def resize(self, rows: int, cols: int) -> None:
        """Same page with new bounds: clamp an existing cursor into them."""
        self.rows, self.cols = rows, cols
        if self.cursor is None:
            return
        if not self.has_cells:
            self.cursor = None
            return
        self.cursor = CellPosition(min(self.cursor.row, rows - 1), min(self.cursor.col, cols - 1))

    def focus(self, row: int, col: int) -> bool:
        """Pointer focus on a cell. Out-of-range positions are ignored."""
        if not (0 <= row < self.rows and 0 <= col < self.cols):
            return False
        self.cursor = CellPosition(row, col)
        return True

    def handle(self, key: NavKey) -> NavResult:
        """Apply one logical key and report what happened."""
        if not self.has_cells:
            return NavResult(self.cursor)

        previous = self.cursor
        match key:
            case NavKey.HOME:
                self.cursor = CellPosition(0, 0)
            case NavKey.END:
                self.cursor = CellPosition(self.rows - 1, self.cols - 1)
            case NavKey.ACTIVATE:
                return NavResult(self.cursor, activated=self.cursor is not None)
            case _:
                if self.cursor is None:
                    # First directional key only focuses the grid
                    self.cursor = CellPosition(0, 0)
                else:
                    dr, dc = _DELTAS[_KEY_DIRECTIONS[key]]
                    row, col = self.cursor.row + dr, self.cursor.col + dc
                    if 0 <= row < self.rows and 0 <= col < self.cols:
                        self.cursor = CellPosition(row, col)

        moved = self.cursor != previous
        if moved:
            logger.debug("Cursor %s -> %s", previous, self.cursor)
        return NavResult(self.cursor, moved=moved)


def next_sort(current: SortSpec | None, column_key: str) -> SortSpec:
    """
    Sort spec after activating a column header.

    Cycles none -> asc -> desc -> asc for that column. Activating a different
    column replaces the current sort (single active sort only).
    """
    if current is None or current.column_key != column_key:
        return SortSpec(column_key, SortDirection.ASC)
    if current.direction is SortDirection.ASC:
        return SortSpec(column_key, SortDirection.DESC)
    return SortSpec(column_key, SortDirection.ASC)
