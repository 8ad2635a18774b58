"""Row value type and row identifier allocation.

A Row pairs an opaque user payload with a table-managed identifier. Rows are
immutable; a cell write produces a new Row with the same identifier and a new
payload, so Actions can keep references to prior rows as snapshots.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any

RowId = int


@dataclass(frozen=True)
class Row:
    """A payload with its durable identifier.

    Attributes:
        row_id: Unique for the table's lifetime, never reused.
        payload: User-defined row value; only the RowAdapter looks inside it.
    """

    row_id: RowId
    payload: Any

    def with_payload(self, payload: Any) -> Row:
        """Return a copy of this row carrying a different payload."""
        return replace(self, payload=payload)

    def __repr__(self) -> str:
        return f"Row({self.row_id}, {self.payload!r})"


class RowIdAllocator:
    """Monotonic row identifier source.

    Identifiers are never handed out twice, even after the row that held one
    has been removed.
    """

    def __init__(self, start: int = 1):
        self._next = start

    @property
    def peek(self) -> RowId:
        """The identifier the next call to allocate() will return."""
        return self._next

    def allocate(self) -> RowId:
        row_id = self._next
        self._next += 1
        return row_id

    def reserve_through(self, row_id: RowId) -> None:
        """Make sure identifiers up to ``row_id`` are never allocated again."""
        if row_id >= self._next:
            self._next = row_id + 1
