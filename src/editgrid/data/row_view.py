"""Displayed rows: the store's rows that pass the adapter's row filter.

Selection, editing, the clipboard and the host widget all address rows by
display position. The view maps those positions onto store rows and is
rebuilt by the table after every change.
"""

from __future__ import annotations

from ..models.row import Row, RowId
from ..models.row_adapter import RowAdapter
from .row_store import RowStore


class RowView:
    """Row identifiers currently displayed, in store order.

    Args:
        store: Rows to display.
        adapter: Supplies ``has_row_filter`` and ``filter_row``.
    """

    def __init__(self, store: RowStore, adapter: RowAdapter):
        self._store = store
        self._adapter = adapter
        self._displayed: list[RowId] = []
        self._positions: dict[RowId, int] = {}

    def __repr__(self) -> str:
        return f"RowView({len(self._displayed)}/{len(self._store)} rows)"

    def __len__(self) -> int:
        return len(self._displayed)

    def refresh(self) -> bool:
        """Re-run the row filter.

        Returns:
            True if the displayed rows or their order changed.
        """
        if self._adapter.has_row_filter():
            displayed = [row.row_id for row in self._store if self._adapter.filter_row(row.payload)]
        else:
            displayed = self._store.ids()
        if displayed == self._displayed:
            return False
        self._displayed = displayed
        self._positions = {row_id: i for i, row_id in enumerate(displayed)}
        return True

    def ids(self) -> list[RowId]:
        return list(self._displayed)

    def rows(self) -> list[Row]:
        return [self._store.row_by_id(row_id) for row_id in self._displayed]

    def row_at(self, position: int) -> Row | None:
        """Row at a display position, or None if out of range."""
        if 0 <= position < len(self._displayed):
            return self._store.row_by_id(self._displayed[position])
        return None

    def position_of(self, row_id: RowId) -> int | None:
        """Display position of a row, or None if it is filtered out or gone."""
        return self._positions.get(row_id)

    def store_index(self, position: int) -> int:
        """Store position for inserting in front of a display position.

        Positions past the last displayed row map to the end of the store.
        """
        if 0 <= position < len(self._displayed):
            return self._store.position_of(self._displayed[position])
        if position < 0 and self._displayed:
            return self._store.position_of(self._displayed[0])
        return len(self._store)

    def store_positions(self, positions: list[int]) -> list[int]:
        """Store positions of the displayed rows at ``positions``, skipping invalid ones."""
        result = []
        for position in positions:
            row = self.row_at(position)
            if row is not None:
                result.append(self._store.position_of(row.row_id))
        return result
