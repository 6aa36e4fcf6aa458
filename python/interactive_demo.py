"""
Interactive demo for the accessible data grid.
Display a sample dataset and drive it with keyboard commands.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

import readchar, sys
from rich.console import Console, Group
from rich.live import Live
from rich.panel import Panel
from rich.text import Text

from datagrid import DataGrid
from grid_types import NavKey, SortDirection
from sample_data import DATASETS, Row
from table_render import render_table, render_text

logger = logging.getLogger(__name__)

NAV_KEYS = {
    readchar.key.UP: NavKey.UP,
    readchar.key.DOWN: NavKey.DOWN,
    readchar.key.LEFT: NavKey.LEFT,
    readchar.key.RIGHT: NavKey.RIGHT,
    readchar.key.HOME: NavKey.HOME,
    readchar.key.END: NavKey.END,
    readchar.key.ENTER: NavKey.ACTIVATE,
    readchar.key.CR: NavKey.ACTIVATE,
    readchar.key.SPACE: NavKey.ACTIVATE,
}

SUBMIT_KEYS = {readchar.key.ENTER, readchar.key.CR}
ERASE_KEYS = {readchar.key.BACKSPACE, "\x08"}


@dataclass
class TextEntry:
    """An open search or filter prompt. column_key None means global search."""

    label: str
    column_key: str | None
    buffer: list[str] = field(default_factory=list)

    @property
    def value(self) -> str:
        return "".join(self.buffer)


class InteractiveTable:
    """Interactive keyboard front end for one DataGrid."""

    def __init__(self, grid: DataGrid[Any]) -> None:
        self.grid = grid
        self.console = Console()
        self.status_message = "Ready"
        self.entry: TextEntry | None = None

    def generate_display(self) -> Panel:
        """Generate the current display with grid and status."""
        status = Text()
        if self.entry is not None:
            status.append(f"{self.entry.label}: ", style="bold yellow")
            status.append(self.entry.value + "█")
            status.append("   (Enter to apply, Esc to cancel)\n", style="dim")
        status.append("─" * 40 + "\n", style="dim")
        status.append("Status: ", style="bold")
        status.append(self.status_message)

        body = Group(render_table(self.grid.view(), show_help=True), status)
        return Panel(body, title="Accessible Data Grid", border_style="green")

    def focused_column_key(self) -> str | None:
        """Key of the data column under the cursor (None on the checkbox column)."""
        cursor = self.grid.cursor
        if cursor is None or cursor.col < self.grid.column_offset:
            return None
        return self.grid.columns[cursor.col - self.grid.column_offset].key

    def open_entry(self, column_key: str | None) -> None:
        if column_key is None:
            if not self.grid.options.searchable:
                self.status_message = "Search is not available for this table"
                return
            self.entry = TextEntry("Search", None, list(self.grid.search_term))
            return

        column = self.grid.column(column_key)
        if not column.filterable:
            self.status_message = f"✗ {column.header} cannot be filtered"
            return
        self.entry = TextEntry(f"Filter {column.header}", column_key, list(self.grid.filters.get(column_key, "")))

    def handle_entry_key(self, key: str) -> None:
        """Edit the open prompt; the grid only changes when it is committed."""
        if self.entry is None:
            return
        if key == readchar.key.ESC:
            self.entry = None
            self.status_message = "Cancelled"
        elif key in SUBMIT_KEYS:
            entry, self.entry = self.entry, None
            if entry.column_key is None:
                self.grid.set_search(entry.value)
            else:
                self.grid.set_filter(entry.column_key, entry.value)
            self.status_message = f"✓ {entry.label} = {entry.value!r}: {self.grid.total_filtered} rows"
        elif key in ERASE_KEYS:
            if self.entry.buffer:
                self.entry.buffer.pop()
        elif len(key) == 1 and key.isprintable():
            self.entry.buffer.append(key)

    def handle_key(self, key: str) -> bool:
        """Handle one key press. Returns False to quit."""
        if self.entry is not None:
            self.handle_entry_key(key)
            return True

        if key in NAV_KEYS:
            self.grid.handle_key(NAV_KEYS[key])
            return True

        match key.lower() if len(key) == 1 else key:
            case "q":
                self.status_message = "Quitting..."
                return False
            case "s":
                column_key = self.focused_column_key()
                if column_key is None:
                    self.status_message = "Move the cursor onto a column to sort it"
                else:
                    self.grid.activate_header(column_key)
            case "/":
                self.open_entry(None)
            case "f":
                column_key = self.focused_column_key()
                if column_key is None:
                    self.status_message = "Move the cursor onto a column to filter it"
                else:
                    self.open_entry(column_key)
            case "x":
                self.grid.clear_filters()
                self.status_message = "Filters cleared"
            case "n" | readchar.key.PAGE_DOWN:
                if not self.grid.next_page():
                    self.status_message = "Already on the last page"
            case "p" | readchar.key.PAGE_UP:
                if not self.grid.prev_page():
                    self.status_message = "Already on the first page"
            case "a":
                if self.grid.options.selectable:
                    self.grid.toggle_select_all()
                else:
                    self.status_message = "Rows cannot be selected in this table"
            case _:
                self.status_message = f"Unknown key: {repr(key)}"
        return True

    def run(self) -> None:
        """Run the interactive loop until the user quits."""
        # get_renderable lets auto refresh drop expired announcements between key presses
        with Live(
            console=self.console,
            refresh_per_second=4,
            get_renderable=self.generate_display,
        ) as live:
            try:
                while True:
                    key = readchar.readkey()
                    keep_going = self.handle_key(key)
                    live.refresh()
                    if not keep_going:
                        break
            except KeyboardInterrupt:
                self.status_message = "Interrupted by user"
                live.refresh()
            finally:
                self.grid.close()


def build_grid(name: str, report: Callable[[str], None] = logger.info) -> DataGrid[Row]:
    """Create a grid over one of the sample datasets, passing callback events to report."""
    rows, columns, options = DATASETS[name]

    def on_row_click(row: Row) -> None:
        report(f"✓ Opened {row['id']}")

    def on_sort(column_key: str, direction: SortDirection) -> None:
        report(f"✓ Sorted by {column_key} {direction.value}")

    def on_filter(column_key: str, value: str) -> None:
        report(f"✓ Filter {column_key} = {value!r}")

    def on_selection_change(selected: frozenset[str]) -> None:
        report(f"✓ {len(selected)} selected: {', '.join(sorted(selected)) or '-'}")

    return DataGrid(
        rows,
        columns,
        options=options,
        on_row_click=on_row_click,
        on_sort=on_sort,
        on_filter=on_filter,
        on_selection_change=on_selection_change,
    )


def main(name: str) -> None:
    """Run the interactive demo over a sample dataset."""
    demo: InteractiveTable | None = None

    def report(message: str) -> None:
        logger.info(message)
        if demo is not None:
            demo.status_message = message

    demo = InteractiveTable(build_grid(name, report))
    demo.run()


if __name__ == "__main__":
    if len(sys.argv) > 1 and sys.argv[1] == 'sublime':
        # Running from IDE - just render the initial state
        logging.basicConfig(level=logging.INFO, format='%(levelname)s: %(message)s')

        print('Running from IDE - rendering initial state')
        print()

        grid = build_grid(sys.argv[2] if len(sys.argv) > 2 else 'supplements')
        grid.handle_key(NavKey.HOME)
        print(render_text(grid.view()))
        grid.close()
    else:
        dataset = sys.argv[1] if len(sys.argv) > 1 else 'foods'
        if dataset not in DATASETS:
            print(f"ERROR: Unknown dataset {dataset!r}")
            print(f"Choose one of: {', '.join(DATASETS)}")
            sys.exit(1)
        main(dataset)
