"""
Test suite for the DataGrid composition: state ownership, callbacks,
selection, cursor resets and announcements.
"""

import logging

import pytest

from announcer import NullAnnouncer, QueueAnnouncer
from datagrid import DataGrid
from grid_types import CellPosition, ColumnDescriptor, GridOptions, NavKey, SortDirection, SortSpec
from sample_data import compare_instants
from test_announcer import FakeClock


def make_rows(count: int) -> list[dict]:
    teams = ["red", "blue", "green"]
    return [
        {"id": f"r{i}", "name": f"Person {i}", "score": (i * 7) % 5, "team": teams[i % 3]}
        for i in range(1, count + 1)
    ]


COLUMNS = [
    ColumnDescriptor("name", "Name", "name", sortable=True, filterable=True),
    ColumnDescriptor("score", "Score", "score", sortable=True),
    ColumnDescriptor("team", "Team", "team", filterable=True),
    ColumnDescriptor("note", "Note", lambda row: "-", interactive=False),
]


def make_grid(count: int = 7, **kwargs) -> DataGrid:
    options = kwargs.pop("options", GridOptions(page_size=5, selectable=True, searchable=True))
    kwargs.setdefault("announcer", QueueAnnouncer(clock=FakeClock()))
    return DataGrid(make_rows(count), COLUMNS, options=options, **kwargs)


def page_ids(grid: DataGrid) -> list[str]:
    return [row["id"] for row in grid.page_rows]


# =============================================================================
# Test Construction
# =============================================================================


class TestConstruction:
    """Tests for grid construction and configuration errors."""

    def test_duplicate_column_keys_rejected(self) -> None:
        """Column keys must be unique."""
        columns = [ColumnDescriptor("a", "A", "a"), ColumnDescriptor("a", "Also A", "b")]
        with pytest.raises(ValueError, match="Duplicate column keys"):
            DataGrid([], columns)

    def test_no_columns_rejected(self) -> None:
        """A grid needs at least one column."""
        with pytest.raises(ValueError):
            DataGrid([], [])

    def test_page_size_must_be_positive(self) -> None:
        """A zero page size is a configuration error."""
        with pytest.raises(ValueError, match="page_size"):
            DataGrid([], COLUMNS, options=GridOptions(page_size=0))

    def test_initial_state(self) -> None:
        """A new grid shows page 1 unsorted and unfocused."""
        grid = make_grid()
        assert grid.page == 1
        assert grid.page_count == 2
        assert grid.sort is None
        assert grid.cursor is None
        assert page_ids(grid) == ["r1", "r2", "r3", "r4", "r5"]

    def test_initial_selection(self) -> None:
        """Ids passed at construction start selected."""
        grid = make_grid(initial_selection=["r2"])
        assert grid.selection.is_selected("r2")


# =============================================================================
# Test Row Identity
# =============================================================================


class TestRowIdentity:
    """Tests for row id resolution."""

    def test_id_field(self) -> None:
        """Rows with an id field use it."""
        grid = make_grid()
        assert grid.row_id(grid.rows[0]) == "r1"

    def test_id_function(self) -> None:
        """An injected id function wins."""
        grid = make_grid(get_row_id=lambda row: row["name"].upper())
        assert grid.row_id(grid.rows[0]) == "PERSON 1"

    def test_attribute_id(self) -> None:
        """Objects expose their id attribute."""

        class Record:
            def __init__(self, id: int, name: str) -> None:
                self.id = id
                self.name = name

        grid = DataGrid([Record(7, "x")], [ColumnDescriptor("name", "Name", "name")], announcer=NullAnnouncer())
        assert grid.row_id(grid.rows[0]) == "7"

    def test_positional_fallback_warns(self, caplog: pytest.LogCaptureFixture) -> None:
        """Rows without ids fall back to their position, with a warning."""
        rows = [{"name": "a"}, {"name": "b"}]
        with caplog.at_level(logging.WARNING):
            grid = DataGrid(rows, [ColumnDescriptor("name", "Name", "name")], announcer=NullAnnouncer())
            assert [grid.row_id(row) for row in rows] == ["0", "1"]
        assert "positional ids" in caplog.text

    def test_repeated_row_object_shares_first_position(self, caplog: pytest.LogCaptureFixture) -> None:
        """A row object listed twice gets its first position, and the warning says so."""
        shared = {"name": "x"}
        rows = [shared, {"name": "y"}, shared]
        with caplog.at_level(logging.WARNING):
            grid = DataGrid(rows, [ColumnDescriptor("name", "Name", "name")], announcer=NullAnnouncer())
            assert [grid.row_id(row) for row in rows] == ["0", "1", "0"]
        assert "listed more than once" in caplog.text


# =============================================================================
# Test Search, Filter and Sort
# =============================================================================


class TestQueryState:
    """Tests for search, filter and sort state changes."""

    def test_filter_narrows_and_notifies(self) -> None:
        """set_filter applies the filter and reports it."""
        calls = []
        grid = make_grid(on_filter=lambda key, value: calls.append((key, value)))
        grid.set_filter("team", "red")
        assert page_ids(grid) == ["r3", "r6"]
        assert calls == [("team", "red")]

    def test_clearing_filter_restores_rows(self) -> None:
        """An empty value removes the filter."""
        grid = make_grid()
        grid.set_filter("team", "red")
        grid.set_filter("team", "")
        assert grid.filters == {}
        assert grid.total_filtered == 7

    def test_clear_filters(self) -> None:
        """clear_filters drops every filter and reports each one."""
        calls = []
        grid = make_grid(on_filter=lambda key, value: calls.append((key, value)))
        grid.set_filter("team", "blue")
        grid.set_filter("name", "4")
        calls.clear()

        grid.clear_filters()
        assert grid.filters == {}
        assert grid.total_filtered == 7
        assert sorted(calls) == [("name", ""), ("team", "")]
        assert grid.announcer.messages()[-1] == "Filters cleared, 7 rows"

    def test_filter_rejects_unknown_and_unfilterable(self) -> None:
        """Only known, filterable columns accept filters."""
        grid = make_grid()
        with pytest.raises(ValueError, match="Unknown column key"):
            grid.set_filter("nope", "x")
        with pytest.raises(ValueError, match="not filterable"):
            grid.set_filter("score", "1")

    def test_search_requires_searchable(self) -> None:
        """Searching a non-searchable grid is a configuration error."""
        grid = make_grid(options=GridOptions(page_size=5))
        with pytest.raises(ValueError, match="Search is disabled"):
            grid.set_search("x")

    def test_search_and_filter_combine(self) -> None:
        """Search and filters both have to match."""
        grid = make_grid()
        grid.set_search("person 1")
        grid.set_filter("team", "blue")
        assert page_ids(grid) == ["r1"]

    def test_filter_resets_page(self) -> None:
        """Changing a filter returns to page 1."""
        grid = make_grid()
        grid.next_page()
        grid.set_filter("name", "person")
        assert grid.page == 1

    def test_header_activation_cycles_sort(self) -> None:
        """Header activation goes asc, desc, asc and notifies on_sort."""
        calls = []
        grid = make_grid(on_sort=lambda key, direction: calls.append((key, direction)))
        assert grid.activate_header("score") == SortSpec("score", SortDirection.ASC)
        assert grid.activate_header("score") == SortSpec("score", SortDirection.DESC)
        assert grid.activate_header("score") == SortSpec("score", SortDirection.ASC)
        assert calls == [
            ("score", SortDirection.ASC),
            ("score", SortDirection.DESC),
            ("score", SortDirection.ASC),
        ]

    def test_sort_is_stable(self) -> None:
        """Rows with equal scores keep their original order."""
        grid = make_grid()
        grid.activate_header("score")
        # scores: r1=2 r2=4 r3=1 r4=3 r5=0 r6=2 r7=4
        assert [row["id"] for row in grid.filtered_rows] == ["r5", "r3", "r1", "r6", "r4", "r2", "r7"]

    def test_bad_comparator_value_does_not_break_sort(self) -> None:
        """A malformed timestamp leaves the rows unsorted instead of raising."""
        rows = [{"id": "a", "at": "2024-03-01T07:30:00+00:00"}, {"id": "b", "at": "not a date"}]
        columns = [ColumnDescriptor("at", "At", "at", sortable=True, comparator=compare_instants)]
        grid = DataGrid(rows, columns, announcer=NullAnnouncer())

        assert grid.activate_header("at") == SortSpec("at", SortDirection.ASC)
        assert page_ids(grid) == ["a", "b"]

    def test_unsortable_header_ignored(self) -> None:
        """Activating a non-sortable header changes nothing."""
        calls = []
        grid = make_grid(on_sort=lambda key, direction: calls.append(key))
        assert grid.activate_header("team") is None
        assert calls == []

    def test_other_column_replaces_sort(self) -> None:
        """Only one column is sorted at a time."""
        grid = make_grid()
        grid.activate_header("score")
        grid.activate_header("name")
        assert grid.sort == SortSpec("name", SortDirection.ASC)
        assert grid.view().headers[1].aria_sort == "none"


# =============================================================================
# Test Pagination
# =============================================================================


class TestPaging:
    """Tests for page navigation."""

    def test_next_and_prev(self) -> None:
        """Paging moves through the filtered rows."""
        grid = make_grid()
        assert grid.next_page()
        assert page_ids(grid) == ["r6", "r7"]
        assert grid.prev_page()
        assert grid.page == 1

    def test_paging_past_edges_is_a_no_op(self) -> None:
        """Paging beyond the first or last page reports no change."""
        grid = make_grid()
        assert not grid.prev_page()
        grid.next_page()
        assert not grid.next_page()

    def test_goto_page_clamps(self) -> None:
        """Requesting a page past the end lands on the last page."""
        grid = make_grid(count=5, options=GridOptions(page_size=2))
        assert grid.goto_page(4)
        assert grid.page == 3
        assert page_ids(grid) == ["r5"]

    def test_set_rows_resets_page(self) -> None:
        """Replacing rows returns to page 1 even if the old page no longer exists."""
        grid = make_grid(count=12)
        grid.goto_page(3)
        grid.set_rows(make_rows(3))
        assert grid.page == 1
        assert page_ids(grid) == ["r1", "r2", "r3"]


# =============================================================================
# Test Selection
# =============================================================================


class TestSelection:
    """Tests for selection through the grid."""

    def test_selection_persists_across_sort_and_page(self) -> None:
        """A selected row stays selected after sorting and paging."""
        grid = make_grid()
        grid.toggle_row("r2")
        grid.activate_header("score")
        grid.activate_header("score")
        grid.next_page()
        assert grid.selection.is_selected("r2")

    def test_select_all_is_scoped_to_filtered_rows(self) -> None:
        """With 10 rows filtered down to 3, select-all picks those 3."""
        changes = []
        grid = make_grid(count=10, on_selection_change=changes.append)
        grid.set_filter("team", "red")
        assert grid.total_filtered == 3

        grid.set_select_all(True)
        assert grid.selection.selected == frozenset({"r3", "r6", "r9"})
        assert changes[-1] == frozenset({"r3", "r6", "r9"})
        assert grid.view().all_selected

    def test_unchecking_select_all_clears(self) -> None:
        """Deactivating select-all clears the whole selection."""
        grid = make_grid()
        grid.toggle_row("r7")
        grid.set_select_all(False)
        assert len(grid.selection) == 0

    def test_toggle_select_all(self) -> None:
        """toggle_select_all flips based on the filtered rows."""
        grid = make_grid()
        grid.toggle_select_all()
        assert len(grid.selection) == 7
        grid.toggle_select_all()
        assert len(grid.selection) == 0

    def test_selection_requires_selectable(self) -> None:
        """Non-selectable grids refuse selection changes."""
        grid = make_grid(options=GridOptions(page_size=5))
        with pytest.raises(ValueError, match="Selection is disabled"):
            grid.toggle_row("r1")


# =============================================================================
# Test Keyboard Navigation
# =============================================================================


class TestKeyboard:
    """Tests for the cursor as driven through the grid."""

    def test_column_count_includes_checkbox(self) -> None:
        """End reaches the last data column past the checkbox column."""
        grid = make_grid()
        grid.handle_key(NavKey.END)
        assert grid.cursor == CellPosition(4, 4)

    def test_cursor_reset_on_page_change(self) -> None:
        """Moving to a shorter page resets the cursor into it."""
        grid = make_grid(options=GridOptions(page_size=5))
        grid.handle_key(NavKey.END)
        assert grid.cursor == CellPosition(4, 3)
        grid.next_page()
        assert grid.cursor == CellPosition(0, 0)
        assert len(grid.page_rows) == 2

    def test_cursor_reset_on_filter_and_search(self) -> None:
        """Filter and search changes reset the cursor to the top-left cell."""
        grid = make_grid()
        grid.handle_key(NavKey.END)
        grid.set_filter("name", "person")
        assert grid.cursor == CellPosition(0, 0)
        grid.handle_key(NavKey.END)
        grid.set_search("2")
        assert grid.cursor == CellPosition(0, 0)

    def test_cursor_cleared_when_filter_matches_nothing(self) -> None:
        """An empty page has no focusable cell."""
        grid = make_grid()
        grid.handle_key(NavKey.DOWN)
        grid.set_filter("name", "nobody")
        assert grid.cursor is None
        assert grid.handle_key(NavKey.ACTIVATE).activated is False

    def test_sort_keeps_cursor(self) -> None:
        """Sorting leaves the cursor where it was."""
        grid = make_grid()
        grid.handle_key(NavKey.DOWN)
        grid.handle_key(NavKey.DOWN)
        grid.activate_header("name")
        assert grid.cursor == CellPosition(1, 0)

    def test_activate_interactive_cell_clicks_row_on_current_page(self) -> None:
        """Activation passes the row from the current page."""
        clicked = []
        grid = make_grid(on_row_click=clicked.append)
        grid.next_page()
        grid.handle_key(NavKey.DOWN)
        grid.handle_key(NavKey.RIGHT)
        grid.handle_key(NavKey.RIGHT)
        grid.handle_key(NavKey.ACTIVATE)
        assert [row["id"] for row in clicked] == ["r7"]

    def test_activate_checkbox_toggles_selection(self) -> None:
        """Activation on the selection column toggles that row."""
        clicked = []
        grid = make_grid(on_row_click=clicked.append)
        grid.handle_key(NavKey.DOWN)
        grid.handle_key(NavKey.DOWN)
        grid.handle_key(NavKey.ACTIVATE)
        assert grid.selection.is_selected("r2")
        assert clicked == []

    def test_activate_non_interactive_column(self) -> None:
        """Activation on a non-interactive column does nothing."""
        clicked = []
        grid = make_grid(on_row_click=clicked.append)
        grid.focus_cell(0, 4)
        grid.handle_key(NavKey.ACTIVATE)
        assert clicked == []

    def test_pointer_focus_drives_cursor(self) -> None:
        """focus_cell moves the same cursor the keyboard uses."""
        grid = make_grid()
        assert grid.focus_cell(3, 2)
        grid.handle_key(NavKey.UP)
        assert grid.cursor == CellPosition(2, 2)

    def test_set_rows_keeps_unfocused_grid_unfocused(self) -> None:
        """Replacing rows does not focus a grid nobody interacted with."""
        grid = make_grid()
        grid.set_rows(make_rows(3))
        assert grid.cursor is None

    def test_loading_hides_rows(self) -> None:
        """While loading there is no body and no cursor."""
        grid = make_grid()
        grid.handle_key(NavKey.DOWN)
        grid.set_loading(True)
        assert grid.cursor is None
        assert grid.view().rows == ()
        grid.set_loading(False)
        assert len(grid.view().rows) == 5


# =============================================================================
# Test Announcements
# =============================================================================


class TestAnnouncements:
    """Tests for live-region messages emitted by the grid."""

    def test_sort_announcement(self) -> None:
        """Sort changes are announced with header and direction."""
        grid = make_grid()
        grid.activate_header("score")
        grid.activate_header("score")
        assert grid.announcer.messages() == [
            "Table sorted by Score, ascending order",
            "Table sorted by Score, descending order",
        ]

    def test_filter_and_page_announcements(self) -> None:
        """Filter and page changes announce the resulting counts."""
        grid = make_grid()
        grid.next_page()
        grid.set_filter("team", "blue")
        grid.set_filter("team", "")
        assert grid.announcer.messages() == [
            "Page 2 of 2, showing 2 of 7 rows",
            "Filter on Team applied, 3 rows match",
            "Filter on Team cleared, 7 rows",
        ]

    def test_search_announcement(self) -> None:
        """Search announces the number of results."""
        grid = make_grid()
        grid.set_search("person 1")
        grid.set_search("")
        assert grid.announcer.messages() == ["1 results found", "Search cleared, 7 rows"]

    def test_unchanged_state_not_announced(self) -> None:
        """No-op transitions do not spam the live region."""
        grid = make_grid()
        grid.prev_page()
        grid.set_filter("team", "")
        grid.set_search("")
        assert grid.announcer.messages() == []

    def test_announcements_expire(self) -> None:
        """Announcements disappear from the view after their delay."""
        clock = FakeClock()
        grid = make_grid(announcer=QueueAnnouncer(delay=1.0, clock=clock))
        grid.activate_header("name")
        assert grid.view().announcements == ("Table sorted by Name, ascending order",)
        clock.now = 1.5
        assert grid.view().announcements == ()

    def test_close_drops_announcements(self) -> None:
        """A closed grid announces nothing."""
        grid = make_grid()
        grid.activate_header("name")
        grid.close()
        grid.activate_header("name")
        assert grid.announcer.messages() == []


# =============================================================================
# Test View Snapshot
# =============================================================================


class TestView:
    """Tests for the renderer snapshot."""

    def test_headers_and_cells(self) -> None:
        """The view carries header metadata and cell text."""
        grid = make_grid()
        grid.activate_header("name")
        grid.set_filter("team", "red")
        view = grid.view()

        assert [h.aria_sort for h in view.headers] == ["ascending", "none", None, None]
        assert view.headers[2].filter_value == "red"
        assert view.rows[0].cells == ("Person 3", "1", "red", "-")
        assert view.column_count == 5
        assert view.has_filters

    def test_malformed_cell_renders_empty(self) -> None:
        """A raising accessor shows an empty cell."""
        columns = [ColumnDescriptor("name", "Name", "name"), ColumnDescriptor("bad", "Bad", lambda row: row["nope"])]
        grid = DataGrid([{"id": 1, "name": "x"}], columns, announcer=NullAnnouncer())
        assert grid.view().rows[0].cells == ("x", "")

    def test_summary(self) -> None:
        """The summary describes size, sort and selection."""
        grid = make_grid()
        grid.activate_header("score")
        grid.activate_header("score")
        grid.toggle_row("r1")
        assert grid.view().summary == (
            "Table with 7 rows and 4 columns. Sorted by Score in desc order. 1 rows selected."
        )

    def test_empty_dataset(self) -> None:
        """An empty collection is a normal state with one page."""
        grid = DataGrid([], COLUMNS, options=GridOptions(empty_message="Nothing yet"), announcer=NullAnnouncer())
        view = grid.view()
        assert view.rows == ()
        assert view.page_count == 1
        assert view.empty_message == "Nothing yet"
        assert not view.all_selected
