"""
Rendering for DataGrid snapshots.

Provides two renderers over the same GridView:
1. Rich rendering - a renderable for rich consoles and Live displays
2. Text rendering - box-drawn ANSI text for logs and plain terminals

Renderers hold no state. The focused cell is taken from GridView.cursor on
every render, so visual focus always follows the navigation cursor.
"""

from __future__ import annotations

import logging
from typing import Callable

import simple_chalk as chalk  # type: ignore[import-untyped]
from rich import box
from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from datagrid import GridView, HeaderView
from grid_types import Align

logger = logging.getLogger(__name__)

KEYBOARD_HELP: list[tuple[str, str]] = [
    ("↑↓←→", "Navigate cells"),
    ("Enter/Space", "Select row or activate cell"),
    ("Home/End", "Jump to first/last cell"),
    ("s", "Sort by focused column"),
    ("/", "Search all columns"),
    ("f", "Filter focused column"),
    ("n/p", "Next/previous page"),
    ("a", "Select all filtered rows"),
]

SORT_ARROWS = {"ascending": "▲", "descending": "▼", "none": "↕"}


def header_label(header: HeaderView) -> str:
    """Header text with its sort affordance."""
    if header.aria_sort is None:
        return header.header
    return f"{header.header} {SORT_ARROWS[header.aria_sort]}"


def checkbox(checked: bool) -> str:
    return "[x]" if checked else "[ ]"


def status_line(view: GridView) -> str:
    line = f"Showing {len(view.rows)} of {view.total_filtered} items"
    if view.selected_count > 0:
        line += f" · {view.selected_count} selected"
    return line


def pagination_line(view: GridView) -> str:
    previous = "‹ Previous" if view.page > 1 else "  ·  "
    following = "Next ›" if view.page < view.page_count else "  ·  "
    return f"Page {view.page} of {view.page_count}    {previous} | {view.page}/{view.page_count} | {following}"


def body_message(view: GridView) -> str | None:
    """Informational message that replaces the body, if any."""
    if view.loading:
        return "Loading data..."
    if not view.rows:
        return view.empty_message
    return None


# =============================================================================
# Rich Rendering
# =============================================================================


def render_table(view: GridView, show_help: bool = False) -> RenderableType:
    """
    Build a rich renderable for a grid snapshot.

    Args:
        view: Snapshot from DataGrid.view()
        show_help: Append the keyboard help lines

    Returns:
        A Group with the controls line, the table, pagination, the screen
        reader summary and the live-region announcements
    """
    parts: list[RenderableType] = []

    controls = Text()
    if view.searchable:
        controls.append("Search: ", style="bold")
        controls.append(view.search_term or "(none)", style="cyan" if view.search_term else "dim")
        controls.append("    ")
    controls.append(status_line(view), style="dim")
    parts.append(controls)

    table = Table(
        caption=view.caption or None,
        box=box.ROUNDED,
        header_style="bold",
        show_edge=True,
    )
    if view.selectable:
        table.add_column(Text(checkbox(view.all_selected)), justify="center", width=3, no_wrap=True)
    for header in view.headers:
        table.add_column(
            Text(header_label(header)),
            justify=header.align.value,  # type: ignore[arg-type]
            width=header.width,
            header_style="bold cyan" if header.aria_sort in ("ascending", "descending") else "bold",
        )

    if view.has_filters:
        filter_cells = [Text("")] if view.selectable else []
        for header in view.headers:
            if header.filterable:
                filter_cells.append(Text(f"⌕ {header.filter_value}", style="yellow" if header.filter_value else "dim"))
            else:
                filter_cells.append(Text(""))
        table.add_row(*filter_cells, end_section=True)

    for r_idx, row in enumerate(view.rows):
        cells: list[Text] = []
        values = ([checkbox(row.selected)] if view.selectable else []) + list(row.cells)
        for c_idx, value in enumerate(values):
            focused = view.cursor is not None and view.cursor.row == r_idx and view.cursor.col == c_idx
            cells.append(Text(value, style="reverse" if focused else ""))
        table.add_row(*cells, style="green" if row.selected else None)

    parts.append(table)

    message = body_message(view)
    if message is not None:
        parts.append(Text(message, justify="center", style="dim italic"))

    if view.page_count > 1:
        parts.append(Text(pagination_line(view)))

    parts.append(Text(view.summary, style="dim"))

    live_region = Text()
    for announcement in view.announcements:
        live_region.append(f"» {announcement}\n", style="bold magenta")
    parts.append(live_region)

    if show_help:
        help_text = Text()
        help_text.append("Keys:\n", style="bold cyan")
        for keys, action in KEYBOARD_HELP:
            help_text.append(f"  {keys:<12} {action}\n")
        parts.append(help_text)

    return Group(*parts)


# =============================================================================
# Text Rendering
# =============================================================================


def _fit(text: str, width: int, align: Align) -> str:
    if len(text) > width:
        text = text[: max(0, width - 1)] + "…"
    match align:
        case Align.RIGHT:
            return text.rjust(width)
        case Align.CENTER:
            return text.center(width)
        case _:
            return text.ljust(width)


def render_text(view: GridView) -> str:
    """
    Render a grid snapshot as box-drawn text with ANSI highlighting.

    The focused cell is drawn inverted, selected rows green and the sorted
    column's header cyan.
    """
    labels = ([checkbox(view.all_selected)] if view.selectable else []) + [header_label(h) for h in view.headers]
    aligns = ([Align.CENTER] if view.selectable else []) + [h.align for h in view.headers]
    body = [([checkbox(row.selected)] if view.selectable else []) + list(row.cells) for row in view.rows]

    offset = 1 if view.selectable else 0
    widths: list[int] = []
    for idx, label in enumerate(labels):
        fixed = view.headers[idx - offset].width if idx >= offset else None
        widths.append(fixed if fixed is not None else max([len(label)] + [len(cells[idx]) for cells in body]))

    def border(left: str, mid: str, right: str) -> str:
        return left + mid.join("─" * (w + 2) for w in widths) + right

    lines: list[str] = []
    if view.caption:
        lines.append(chalk.yellow(view.caption))
    if view.searchable:
        lines.append(f"Search: {view.search_term or '(none)'}    {status_line(view)}")
    else:
        lines.append(status_line(view))

    lines.append(border("┌", "┬", "┐"))
    header_cells: list[str] = []
    for idx, label in enumerate(labels):
        content = _fit(label, widths[idx], aligns[idx])
        sorted_column = idx >= offset and view.headers[idx - offset].aria_sort in ("ascending", "descending")
        header_cells.append(chalk.cyan(content) if sorted_column else chalk.white(content))
    lines.append("│ " + " │ ".join(header_cells) + " │")

    if view.has_filters:
        filter_cells = [" " * widths[0]] if view.selectable else []
        for idx, header in enumerate(view.headers):
            text = f"⌕ {header.filter_value}" if header.filterable else ""
            filter_cells.append(_fit(text, widths[idx + offset], Align.LEFT))
        lines.append("│ " + " │ ".join(filter_cells) + " │")

    lines.append(border("├", "┼", "┤"))

    message = body_message(view)
    if message is not None:
        inner = sum(widths) + 3 * (len(widths) - 1)
        lines.append("│ " + chalk.yellow(_fit(message, inner, Align.CENTER)) + " │")

    for r_idx, (row, cells) in enumerate(zip(view.rows, body)):
        colorize: Callable[[str], str] = chalk.green if row.selected else (lambda s: s)
        rendered: list[str] = []
        for c_idx, value in enumerate(cells):
            content = _fit(value, widths[c_idx], aligns[c_idx])
            focused = view.cursor is not None and view.cursor.row == r_idx and view.cursor.col == c_idx
            rendered.append(chalk.bgWhite.black(content) if focused else colorize(content))
        lines.append("│ " + " │ ".join(rendered) + " │")

    lines.append(border("└", "┴", "┘"))

    if view.page_count > 1:
        lines.append(pagination_line(view))
    lines.append(chalk.blue(view.summary))
    for announcement in view.announcements:
        lines.append(chalk.magenta(f"» {announcement}"))

    return "\n".join(lines)
