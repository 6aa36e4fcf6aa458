"""
Accessible data grid: composition of the query pipeline, selection model,
navigation state machine and announcer.

A DataGrid owns all of its state (search term, filters, sort, page, selection,
cursor). Callbacks are informational; the grid stays the source of truth for
what it renders. Renderers read immutable GridView snapshots from `view()`.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, Sequence, TypeVar

from announcer import Announcer, QueueAnnouncer
from grid_types import (
    Align,
    CellPosition,
    ColumnDescriptor,
    GridOptions,
    NavKey,
    RowIdFn,
    SortDirection,
    SortSpec,
)
from navigation import NavResult, Navigator, next_sort
from selection import SelectionModel
from table_pipeline import PageResult, cell_text, clamp_page, compute_visible_rows

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# View Snapshot
# =============================================================================


@dataclass(frozen=True)
class HeaderView:
    """One column header as a renderer needs it."""

    key: str
    header: str
    sortable: bool
    filterable: bool
    align: Align
    width: int | None
    description: str | None
    aria_sort: str | None  # "ascending" | "descending" | "none" | None (not sortable)
    filter_value: str


@dataclass(frozen=True)
class RowView:
    """One rendered body row."""

    row_id: str
    cells: tuple[str, ...]
    selected: bool


@dataclass(frozen=True)
class GridView:
    """Immutable snapshot of everything a renderer shows."""

    caption: str
    headers: tuple[HeaderView, ...]
    rows: tuple[RowView, ...]
    cursor: CellPosition | None
    selectable: bool
    searchable: bool
    search_term: str
    page: int
    page_count: int
    page_size: int
    total_rows: int
    total_filtered: int
    selected_count: int
    all_selected: bool
    loading: bool
    empty_message: str
    announcements: tuple[str, ...]
    summary: str

    @property
    def has_filters(self) -> bool:
        return any(header.filterable for header in self.headers)

    @property
    def column_count(self) -> int:
        """Rendered columns, including the selection column."""
        return len(self.headers) + (1 if self.selectable else 0)


# =============================================================================
# Grid
# =============================================================================


def _validate_columns(columns: Sequence[ColumnDescriptor[Any]]) -> None:
    if not columns:
        raise ValueError("A data grid needs at least one column")

    duplicates = [key for key, count in Counter(column.key for column in columns).items() if count > 1]
    if duplicates:
        error_msg = (
            f"Duplicate column keys: {', '.join(repr(key) for key in duplicates)}\n"
            f"  Columns: {[column.key for column in columns]}\n"
            f"  Column keys join sort state, filter state and cells, so they must be unique"
        )
        raise ValueError(error_msg)


class DataGrid(Generic[T]):
    """
    Generic accessible table over rows of type T.

    Args:
        rows: Full in-memory collection (never mutated)
        columns: Column descriptors; keys must be unique
        options: Per-grid settings
        get_row_id: Stable id for a row. Defaults to the row's `id` field,
            falling back to its position in `rows` (unsafe once rows are
            replaced, so pass an id function when rows have no id)
        announcer: Sink for screen-reader messages (QueueAnnouncer by default)
        on_row_click: Called with the row when an interactive cell is activated
        on_sort: Called with (column_key, direction) after a sort change
        on_filter: Called with (column_key, value) after a filter change
        on_selection_change: Called with the selected ids after any change
        initial_selection: Ids selected when the grid is created
    """

    def __init__(
        self,
        rows: Iterable[T],
        columns: Sequence[ColumnDescriptor[T]],
        *,
        options: GridOptions = GridOptions(),
        get_row_id: RowIdFn | None = None,
        announcer: Announcer | None = None,
        on_row_click: Callable[[T], Any] | None = None,
        on_sort: Callable[[str, SortDirection], Any] | None = None,
        on_filter: Callable[[str, str], Any] | None = None,
        on_selection_change: Callable[[frozenset[str]], Any] | None = None,
        initial_selection: Iterable[str] = (),
    ) -> None:
        _validate_columns(columns)
        if options.page_size < 1:
            raise ValueError(f"page_size must be at least 1, got {options.page_size}")

        self.columns: tuple[ColumnDescriptor[T], ...] = tuple(columns)
        self.options = options
        self.announcer: Announcer = announcer if announcer is not None else QueueAnnouncer(options.announce_delay)
        self.on_row_click = on_row_click
        self.on_sort = on_sort
        self.on_filter = on_filter
        self.on_selection_change = on_selection_change

        self._get_row_id = get_row_id
        self._warned_positional = False
        self.rows: list[T] = []
        self._positions: dict[int, int] = {}

        self.search_term = ""
        self.filters: dict[str, str] = {}
        self.sort: SortSpec | None = None
        self.page = 1
        self.loading = False
        self.selection = SelectionModel(initial_selection)
        self.navigator = Navigator()

        self._load_rows(rows)
        self._result = self._compute()
        self.navigator.resize(*self._bounds())

    # -------------------------------------------------------------------------
    # Row identity
    # -------------------------------------------------------------------------

    def _load_rows(self, rows: Iterable[T]) -> None:
        self.rows = list(rows)
        self._positions = {}
        for index, row in enumerate(self.rows):
            # A row object listed twice keeps its first position
            self._positions.setdefault(id(row), index)

    def row_id(self, row: T) -> str:
        """Stable external identifier for a row."""
        if self._get_row_id is not None:
            return self._get_row_id(row)

        value = row.get("id") if isinstance(row, Mapping) else getattr(row, "id", None)
        if value is not None and value != "":
            return str(value)

        if not self._warned_positional:
            logger.warning(
                "Rows have no 'id' and no get_row_id was given; falling back to positional ids, "
                "which attach to the wrong row once the collection is replaced and are shared "
                "by a row object that is listed more than once"
            )
            self._warned_positional = True
        return str(self._positions.get(id(row), -1))

    # -------------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------------

    def _compute(self) -> PageResult[T]:
        result = compute_visible_rows(
            self.rows,
            self.columns,
            self.search_term if self.options.searchable else "",
            self.filters,
            self.sort,
            self.page,
            self.options.page_size,
        )
        # Clamp when the filtered set shrank below the current page
        self.page = result.page
        return result

    @property
    def column_offset(self) -> int:
        return 1 if self.options.selectable else 0

    def _bounds(self) -> tuple[int, int]:
        rows = 0 if self.loading else len(self._result.page_rows)
        return rows, len(self.columns) + self.column_offset

    def _refresh(self, reset_cursor: bool) -> None:
        self._result = self._compute()
        if reset_cursor:
            self.navigator.reset(*self._bounds())
        else:
            self.navigator.resize(*self._bounds())

    @property
    def page_rows(self) -> tuple[T, ...]:
        return self._result.page_rows

    @property
    def filtered_rows(self) -> tuple[T, ...]:
        return self._result.filtered_rows

    @property
    def filtered_ids(self) -> list[str]:
        return [self.row_id(row) for row in self._result.filtered_rows]

    @property
    def total_filtered(self) -> int:
        return self._result.total_filtered_count

    @property
    def page_count(self) -> int:
        return self._result.page_count

    @property
    def cursor(self) -> CellPosition | None:
        return self.navigator.cursor

    def column(self, key: str) -> ColumnDescriptor[T]:
        for column in self.columns:
            if column.key == key:
                return column
        raise ValueError(f"Unknown column key: {key!r}\n  Known keys: {[c.key for c in self.columns]}")

    # -------------------------------------------------------------------------
    # Search and filters
    # -------------------------------------------------------------------------

    def set_search(self, term: str) -> None:
        """Set the global search term. Resets the page and the cursor."""
        if not self.options.searchable:
            raise ValueError("Search is disabled for this grid (GridOptions.searchable=False)")
        if term == self.search_term:
            return

        self.search_term = term
        self.page = 1
        self._refresh(reset_cursor=True)
        logger.debug("Search %r -> %d rows", term, self.total_filtered)
        if term:
            self.announcer.announce(f"{self.total_filtered} results found")
        else:
            self.announcer.announce(f"Search cleared, {self.total_filtered} rows")

    def set_filter(self, column_key: str, value: str) -> None:
        """Set one column's filter; an empty value removes it."""
        column = self.column(column_key)
        if not column.filterable:
            raise ValueError(f"Column {column_key!r} is not filterable")
        if self.filters.get(column_key, "") == value:
            return

        if value:
            self.filters[column_key] = value
        else:
            self.filters.pop(column_key, None)
        self.page = 1
        self._refresh(reset_cursor=True)
        logger.debug("Filter %s=%r -> %d rows", column_key, value, self.total_filtered)

        if self.on_filter is not None:
            self.on_filter(column_key, value)
        if value:
            self.announcer.announce(f"Filter on {column.header} applied, {self.total_filtered} rows match")
        else:
            self.announcer.announce(f"Filter on {column.header} cleared, {self.total_filtered} rows")

    def clear_filters(self) -> None:
        """Remove every column filter."""
        if not self.filters:
            return
        cleared = list(self.filters)
        self.filters.clear()
        self.page = 1
        self._refresh(reset_cursor=True)

        if self.on_filter is not None:
            for column_key in cleared:
                self.on_filter(column_key, "")
        self.announcer.announce(f"Filters cleared, {self.total_filtered} rows")

    # -------------------------------------------------------------------------
    # Sorting
    # -------------------------------------------------------------------------

    def activate_header(self, column_key: str) -> SortSpec | None:
        """
        Header activation: cycle the column's sort and reset any other sort.

        Non-sortable columns are ignored. Returns the sort now in effect.
        """
        column = self.column(column_key)
        if not column.sortable:
            logger.debug("Ignoring header activation on unsortable column %r", column_key)
            return self.sort

        self.sort = next_sort(self.sort, column_key)
        self._refresh(reset_cursor=False)
        logger.debug("Sort %s %s", column_key, self.sort.direction.value)

        if self.on_sort is not None:
            self.on_sort(column_key, self.sort.direction)
        self.announcer.announce(f"Table sorted by {column.header}, {self.sort.direction.label} order")
        return self.sort

    # -------------------------------------------------------------------------
    # Pagination
    # -------------------------------------------------------------------------

    def goto_page(self, page: int) -> bool:
        """Move to a page (clamped). Returns False when the page did not change."""
        target = clamp_page(page, self.total_filtered, self.options.page_size)
        if target == self.page:
            return False

        self.page = target
        self._refresh(reset_cursor=True)
        logger.debug("Page %d of %d", self.page, self.page_count)
        self.announcer.announce(
            f"Page {self.page} of {self.page_count}, showing {len(self.page_rows)} of {self.total_filtered} rows"
        )
        return True

    def next_page(self) -> bool:
        return self.goto_page(self.page + 1)

    def prev_page(self) -> bool:
        return self.goto_page(self.page - 1)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def _require_selectable(self) -> None:
        if not self.options.selectable:
            raise ValueError("Selection is disabled for this grid (GridOptions.selectable=False)")

    def _notify_selection(self) -> None:
        if self.on_selection_change is not None:
            self.on_selection_change(self.selection.selected)

    def toggle_row(self, row_id: str) -> bool:
        """Flip one row's selection. Returns the new state."""
        self._require_selectable()
        state = self.selection.toggle(row_id)
        self._notify_selection()
        return state

    def set_select_all(self, checked: bool) -> None:
        """
        The "select all" control: checking selects exactly the filtered rows
        (not hidden ones), unchecking clears the whole selection.
        """
        self._require_selectable()
        if checked:
            self.selection.select_all(self.filtered_ids)
            self.announcer.announce(f"{len(self.selection)} rows selected")
        else:
            self.selection.clear()
            self.announcer.announce("Selection cleared")
        self._notify_selection()

    def toggle_select_all(self) -> None:
        self.set_select_all(not self.selection.all_selected(self.filtered_ids))

    # -------------------------------------------------------------------------
    # Keyboard and pointer
    # -------------------------------------------------------------------------

    def handle_key(self, key: NavKey) -> NavResult:
        """Drive the cursor with one logical key; ACTIVATE dispatches on the focused cell."""
        result = self.navigator.handle(key)
        if result.activated and result.cursor is not None:
            self._activate(result.cursor)
        return result

    def focus_cell(self, row: int, col: int) -> bool:
        """Pointer focus; goes through the navigator so the cursor stays authoritative."""
        return self.navigator.focus(row, col)

    def _activate(self, position: CellPosition) -> None:
        row = self.page_rows[position.row]
        if self.options.selectable and position.col == 0:
            self.toggle_row(self.row_id(row))
            return

        column = self.columns[position.col - self.column_offset]
        if not column.interactive:
            return
        if self.on_row_click is not None:
            self.on_row_click(row)

    # -------------------------------------------------------------------------
    # External changes
    # -------------------------------------------------------------------------

    def set_rows(self, rows: Iterable[T]) -> None:
        """
        Replace the row collection.

        Page and cursor are reset since old offsets may point past the end of
        a shorter collection. The selection is left to the owner to prune.
        """
        self._load_rows(rows)
        self.page = 1
        self._refresh(reset_cursor=self.navigator.cursor is not None)

    def set_loading(self, loading: bool) -> None:
        self.loading = loading
        self._refresh(reset_cursor=False)

    def close(self) -> None:
        """Unmount: cancel pending announcements."""
        self.announcer.close()

    # -------------------------------------------------------------------------
    # Snapshot
    # -------------------------------------------------------------------------

    def _aria_sort(self, column: ColumnDescriptor[T]) -> str | None:
        if self.sort is not None and self.sort.column_key == column.key:
            return self.sort.direction.label
        return "none" if column.sortable else None

    def summary(self) -> str:
        """Screen-reader description of the whole table."""
        parts = [f"Table with {self.total_filtered} rows and {len(self.columns)} columns."]
        if self.sort is not None:
            header = self.column(self.sort.column_key).header
            parts.append(f"Sorted by {header} in {self.sort.direction.value} order.")
        if len(self.selection) > 0:
            parts.append(f"{len(self.selection)} rows selected.")
        return " ".join(parts)

    def _row_view(self, row: T) -> RowView:
        row_id = self.row_id(row)
        return RowView(
            row_id=row_id,
            # Malformed cells render empty
            cells=tuple(cell_text(column, row) or "" for column in self.columns),
            selected=self.selection.is_selected(row_id),
        )

    def view(self) -> GridView:
        headers = tuple(
            HeaderView(
                key=column.key,
                header=column.header,
                sortable=column.sortable,
                filterable=column.filterable,
                align=column.align,
                width=column.width,
                description=column.description,
                aria_sort=self._aria_sort(column),
                filter_value=self.filters.get(column.key, ""),
            )
            for column in self.columns
        )
        rows = () if self.loading else tuple(self._row_view(row) for row in self.page_rows)
        return GridView(
            caption=self.options.caption,
            headers=headers,
            rows=rows,
            cursor=self.navigator.cursor,
            selectable=self.options.selectable,
            searchable=self.options.searchable,
            search_term=self.search_term,
            page=self.page,
            page_count=self.page_count,
            page_size=self.options.page_size,
            total_rows=len(self.rows),
            total_filtered=self.total_filtered,
            selected_count=len(self.selection),
            all_selected=self.selection.all_selected(self.filtered_ids),
            loading=self.loading,
            empty_message=self.options.empty_message,
            announcements=tuple(self.announcer.messages()),
            summary=self.summary(),
        )
