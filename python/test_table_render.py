"""
Tests for the rich and text renderers.
"""

import io

from rich.console import Console

from announcer import QueueAnnouncer
from datagrid import DataGrid
from grid_types import Align, ColumnDescriptor, GridOptions, NavKey
from table_render import checkbox, header_label, pagination_line, render_table, render_text, status_line
from test_announcer import FakeClock


ROWS = [
    {"id": "a", "name": "Ashwagandha", "price": 18.5},
    {"id": "b", "name": "Magnesium", "price": 12.0},
    {"id": "c", "name": "Vitamin D", "price": 9.25},
]

COLUMNS = [
    ColumnDescriptor("name", "Name", "name", sortable=True, filterable=True),
    ColumnDescriptor("price", "Price", "price", sortable=True, align=Align.RIGHT, format=lambda v: f"${v:.2f}"),
]


def make_grid(rows=ROWS, **options) -> DataGrid:
    options.setdefault("page_size", 2)
    return DataGrid(rows, COLUMNS, options=GridOptions(**options), announcer=QueueAnnouncer(clock=FakeClock()))


def rich_output(renderable) -> str:
    console = Console(file=io.StringIO(), width=120)
    console.print(renderable)
    return console.file.getvalue()


# =============================================================================
# Test Helpers
# =============================================================================


class TestHelpers:
    """Tests for the small formatting helpers."""

    def test_header_label_arrows(self) -> None:
        """Sortable headers carry an arrow for their sort state."""
        grid = make_grid()
        grid.activate_header("price")
        name, price = grid.view().headers
        assert header_label(name) == "Name ↕"
        assert header_label(price) == "Price ▲"

    def test_header_label_plain_for_unsortable(self) -> None:
        """Unsortable headers have no affordance."""
        grid = DataGrid(ROWS, [ColumnDescriptor("name", "Name", "name")])
        assert header_label(grid.view().headers[0]) == "Name"

    def test_checkbox(self) -> None:
        assert checkbox(True) == "[x]"
        assert checkbox(False) == "[ ]"

    def test_status_line(self) -> None:
        """The status line counts visible, filtered and selected rows."""
        grid = make_grid(selectable=True)
        grid.toggle_row("c")
        assert status_line(grid.view()) == "Showing 2 of 3 items · 1 selected"

    def test_pagination_line(self) -> None:
        """Pagination shows the page position."""
        grid = make_grid()
        grid.next_page()
        assert pagination_line(grid.view()).startswith("Page 2 of 2")


# =============================================================================
# Test Text Rendering
# =============================================================================


class TestRenderText:
    """Tests for the box-drawn text renderer."""

    def test_headers_and_formatted_cells(self) -> None:
        """Headers and formatted values appear in the output."""
        output = render_text(make_grid(caption="Supplements").view())
        assert "Supplements" in output
        assert "Name ↕" in output
        assert "Ashwagandha" in output
        assert "$18.50" in output
        assert "Page 1 of 2" in output

    def test_filter_row(self) -> None:
        """Filter values are shown under their column header."""
        grid = make_grid()
        grid.set_filter("name", "mag")
        output = render_text(grid.view())
        assert "⌕ mag" in output
        assert "Magnesium" in output
        assert "Ashwagandha" not in output

    def test_empty_message(self) -> None:
        """An empty result shows the configured message."""
        output = render_text(make_grid(rows=[], empty_message="Nothing logged").view())
        assert "Nothing logged" in output

    def test_loading_message(self) -> None:
        """Loading replaces the body."""
        grid = make_grid()
        grid.set_loading(True)
        output = render_text(grid.view())
        assert "Loading data..." in output
        assert "Ashwagandha" not in output

    def test_announcements_and_summary(self) -> None:
        """Live-region messages and the summary are rendered."""
        grid = make_grid()
        grid.activate_header("name")
        output = render_text(grid.view())
        assert "» Table sorted by Name, ascending order" in output
        assert "Table with 3 rows and 2 columns. Sorted by Name in asc order." in output

    def test_long_cells_are_truncated_to_fixed_width(self) -> None:
        """Fixed-width columns cut long text with an ellipsis."""
        columns = [ColumnDescriptor("name", "Name", "name", width=5)]
        grid = DataGrid(ROWS, columns)
        output = render_text(grid.view())
        assert "Ashw…" in output
        assert "Ashwagandha" not in output


# =============================================================================
# Test Rich Rendering
# =============================================================================


class TestRenderTable:
    """Tests for the rich renderable."""

    def test_renders_headers_and_rows(self) -> None:
        """The rich table contains headers and page rows."""
        output = rich_output(render_table(make_grid(selectable=True).view()))
        assert "Name" in output
        assert "Magnesium" in output
        assert "[ ]" in output
        assert "Vitamin D" not in output

    def test_help_is_optional(self) -> None:
        """Keyboard help is only shown on request."""
        view = make_grid().view()
        assert "Navigate cells" not in rich_output(render_table(view))
        assert "Navigate cells" in rich_output(render_table(view, show_help=True))

    def test_announcements_rendered(self) -> None:
        """Announcements appear in the live region."""
        grid = make_grid()
        grid.handle_key(NavKey.DOWN)
        grid.next_page()
        output = rich_output(render_table(grid.view()))
        assert "Page 2 of 2, showing 1 of 3 rows" in output
