"""
Demonstration scripts for the accessible data grid.
"""

from rich.console import Console

from datagrid import DataGrid
from grid_types import ColumnDescriptor, GridOptions, NavKey
from sample_data import DATASETS
from table_render import render_table, render_text


def pipeline_demo() -> None:
    """Demonstrate search, filter, sort and paging on the supplement catalog."""
    rows, columns, options = DATASETS["supplements"]
    grid = DataGrid(rows, columns, options=options)

    print("=" * 40)
    print("Initial catalog (page 1):")
    print("=" * 40)
    print(render_text(grid.view()))
    print()

    print("=" * 40)
    print("Filter category 'adapto', sort by price:")
    print("=" * 40)
    grid.set_filter("category", "adapto")
    grid.activate_header("price")
    print(render_text(grid.view()))
    print()

    print("=" * 40)
    print("Search 'stock', sorted by price descending:")
    print("=" * 40)
    grid.clear_filters()
    grid.set_search("stock")
    grid.activate_header("price")
    print(render_text(grid.view()))
    grid.close()


def navigation_demo() -> None:
    """Demonstrate the keyboard cursor and activation on the food log."""
    rows, columns, options = DATASETS["foods"]
    clicked: list[str] = []
    grid = DataGrid(rows, columns, options=options, on_row_click=lambda row: clicked.append(row["id"]))

    keys = [NavKey.DOWN, NavKey.RIGHT, NavKey.RIGHT, NavKey.ACTIVATE, NavKey.END, NavKey.LEFT, NavKey.HOME]
    for step, key in enumerate(keys, 1):
        result = grid.handle_key(key)
        print(f"{step}. {key.name:<8} -> cursor {result.cursor}")

    # Activating the checkbox column selects the row
    grid.handle_key(NavKey.ACTIVATE)
    print(f"Clicked rows: {clicked}")
    print(f"Selected rows: {sorted(grid.selection.selected)}")
    print()
    print(render_text(grid.view()))
    grid.close()


def announcement_demo() -> None:
    """Demonstrate live-region announcements and the screen-reader summary."""
    rows, columns, options = DATASETS["metrics"]
    grid = DataGrid(rows, columns, options=options)

    grid.activate_header("value")
    grid.activate_header("value")
    grid.set_filter("metric_type", "glucose")
    grid.set_filter("metric_type", "")
    grid.next_page()

    Console().print(render_table(grid.view()))
    grid.close()


def empty_demo() -> None:
    """Demonstrate the empty-state row and a malformed accessor."""
    columns = [
        ColumnDescriptor("name", "Name", "name", sortable=True),
        ColumnDescriptor("ratio", "Ratio", lambda row: row["a"] / row["b"], sortable=True),
    ]
    grid = DataGrid(
        [{"id": 1, "name": "ok", "a": 1, "b": 2}, {"id": 2, "name": "broken", "a": 1, "b": 0}],
        columns,
        options=GridOptions(page_size=5, caption="Malformed accessor renders an empty cell"),
    )
    grid.activate_header("ratio")
    print(render_text(grid.view()))
    print()

    grid.set_rows([])
    print(render_text(grid.view()))
    grid.close()


if __name__ == "__main__":
    pipeline_demo()
    print()
    navigation_demo()
    print()
    announcement_demo()
    print()
    empty_demo()
