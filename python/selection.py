"""
Row selection keyed by stable row identifiers.
"""

from __future__ import annotations

import logging
from typing import Iterable

logger = logging.getLogger(__name__)


class SelectionModel:
    """
    Set of selected row ids.

    Selection is keyed by id, never by position, so it survives re-sorting and
    paging. Ids must be unique per row; duplicate ids make selection
    ambiguous and are not detected.
    """

    def __init__(self, initial: Iterable[str] = ()) -> None:
        self._selected: set[str] = set(initial)

    @property
    def selected(self) -> frozenset[str]:
        return frozenset(self._selected)

    def __len__(self) -> int:
        return len(self._selected)

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._selected

    def is_selected(self, row_id: str) -> bool:
        return row_id in self._selected

    def toggle(self, row_id: str) -> bool:
        """Flip membership of one row. Returns the new state."""
        if row_id in self._selected:
            self._selected.discard(row_id)
            logger.debug("Deselected row %s", row_id)
            return False
        self._selected.add(row_id)
        logger.debug("Selected row %s", row_id)
        return True

    def select_all(self, row_ids: Iterable[str]) -> None:
        """Replace the selection with exactly the given ids (the filtered rows)."""
        self._selected = set(row_ids)
        logger.debug("Selected %d rows", len(self._selected))

    def clear(self) -> None:
        self._selected.clear()

    def all_selected(self, row_ids: Iterable[str]) -> bool:
        """True when row_ids is non-empty and every one of them is selected."""
        ids = list(row_ids)
        return bool(ids) and all(row_id in self._selected for row_id in ids)
