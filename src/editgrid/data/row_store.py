"""Ordered row storage with stable row identifiers.

The store has two layers of API:

- Gated operations (insert_rows, remove_rows, set_cell, ...) check bounds and
  ask the RowAdapter for permission. A successful call builds exactly one
  Action and hands it to the ``record`` callback (the table's ActionLog),
  which applies it. A refused call changes nothing and records nothing.
- Primitive mutators (place_rows, take_rows, replace_payload, apply_order)
  are what Actions call when they are applied or reverted. They never ask
  for permission: undoing a deletion must work even when insertions are
  currently disallowed.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Sequence
from typing import Any

from ..debug_trace import get_logger
from ..models.actions import Action, Batch, DuplicateRows, InsertRows, RemoveRows, SetCell
from ..models.rejection import Rejection, RejectionKind
from ..models.row import Row, RowId, RowIdAllocator
from ..models.row_adapter import CellWriteContext, EmptyRowContext, RowAdapter, WriteSource

logger = get_logger(__name__)


class RowStore:
    """Row sequence for one table.

    Args:
        adapter: Domain semantics for the payloads.
        record: Callback that applies an Action and pushes it for undo.
        reject: Optional callback receiving a Rejection for every refused call.
    """

    def __init__(
        self,
        adapter: RowAdapter,
        record: Callable[[Action], None],
        reject: Callable[[Rejection], None] | None = None,
    ):
        self._adapter = adapter
        self._record = record
        self._reject = reject
        self._rows: list[Row] = []
        self._ids = RowIdAllocator()

        # row_id -> position, rebuilt lazily after structural changes
        self._positions: dict[RowId, int] | None = None

    def __repr__(self) -> str:
        return f"RowStore({len(self._rows)} rows, next id {self._ids.peek})"

    # --- Read access ---

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(list(self._rows))

    def row_at(self, position: int) -> Row | None:
        """Row at a view position, or None if out of range."""
        if 0 <= position < len(self._rows):
            return self._rows[position]
        return None

    def row_by_id(self, row_id: RowId) -> Row | None:
        position = self.position_of(row_id)
        return None if position is None else self._rows[position]

    def position_of(self, row_id: RowId) -> int | None:
        if self._positions is None:
            self._positions = {row.row_id: i for i, row in enumerate(self._rows)}
        return self._positions.get(row_id)

    def ids(self) -> list[RowId]:
        return [row.row_id for row in self._rows]

    def payloads(self) -> list[Any]:
        return [row.payload for row in self._rows]

    def is_editable(self, row_id: RowId, column: int) -> bool:
        """Whether the adapter allows editing this cell right now."""
        position = self.position_of(row_id)
        if position is None or not 0 <= column < self._adapter.num_columns():
            return False
        return self._adapter.is_editable_cell(self._rows[position].payload, column, position)

    # --- Row construction ---

    def new_row(self, payload: Any) -> Row:
        """Wrap a payload in a Row with a fresh identifier (not inserted)."""
        return Row(self._ids.allocate(), payload)

    def load(self, payloads: Iterable[Any]) -> None:
        """Replace every row without recording history.

        Identifiers keep counting up; rows loaded here never reuse an id that
        was handed out before.
        """
        self._rows = [self.new_row(payload) for payload in payloads]
        self._positions = None

    def load_rows(self, rows: Iterable[Row]) -> None:
        """Replace every row with rows that already carry identifiers."""
        self._rows = list(rows)
        self._positions = None
        for row in self._rows:
            self._ids.reserve_through(row.row_id)

    # --- Primitive mutators (called by Actions) ---

    def place_rows(self, placements: Sequence[tuple[int, Row]]) -> None:
        """Insert rows so that each ends up at its given position.

        Placements must be in ascending position order. Positions past the
        end append.
        """
        for position, row in placements:
            self._rows.insert(min(max(position, 0), len(self._rows)), row)
        self._positions = None
        for _, row in placements:
            self._adapter.on_row_inserted(row.row_id, row.payload)

    def take_rows(self, row_ids: Iterable[RowId]) -> list[tuple[int, Row]]:
        """Remove rows by identifier.

        Returns:
            (original position, row) pairs in ascending position order.
            Unknown identifiers are skipped.
        """
        wanted = set(row_ids)
        taken = [(i, row) for i, row in enumerate(self._rows) if row.row_id in wanted]
        if not taken:
            return []
        self._rows = [row for row in self._rows if row.row_id not in wanted]
        self._positions = None
        for _, row in taken:
            self._adapter.on_row_removed(row.row_id, row.payload)
        return taken

    def replace_payload(self, row_id: RowId, payload: Any) -> Any | None:
        """Swap the payload of a row, keeping its identifier and position.

        Returns:
            The previous payload, or None if the row is not in the table.
        """
        position = self.position_of(row_id)
        if position is None:
            return None
        old = self._rows[position]
        self._rows[position] = old.with_payload(payload)
        self._adapter.on_row_updated(row_id, old.payload, payload)
        return old.payload

    def apply_order(self, row_ids: Sequence[RowId]) -> None:
        """Reorder rows to follow ``row_ids``.

        Rows missing from ``row_ids`` keep their relative order after the
        listed ones; unknown identifiers are ignored.
        """
        by_id = {row.row_id: row for row in self._rows}
        ordered = [by_id.pop(row_id) for row_id in row_ids if row_id in by_id]
        ordered.extend(row for row in self._rows if row.row_id in by_id)
        self._rows = ordered
        self._positions = None

    # --- Rejections ---

    def _refuse(self, kind: RejectionKind, operation: str, detail: str = "") -> None:
        rejection = Rejection(kind, operation, detail)
        logger.debug("Rejected %s", rejection)
        if self._reject is not None:
            self._reject(rejection)

    # --- Gated operations ---

    def insert_rows(self, at: int, payloads: Iterable[Any]) -> InsertRows | None:
        """Insert payloads as new rows starting at view position ``at``.

        ``at`` is clamped to [0, len]. Fails closed when the adapter disallows
        insertions.

        Returns:
            The recorded action, or None when nothing was inserted.
        """
        payloads = list(payloads)
        if not payloads:
            return None
        if not self._adapter.allow_row_insertions():
            self._refuse(RejectionKind.VALIDATION, "insert_rows", "row insertion not permitted")
            return None

        at = min(max(at, 0), len(self._rows))
        placements = tuple((at + i, self.new_row(payload)) for i, payload in enumerate(payloads))
        action = InsertRows(placements)
        self._record(action)
        return action

    def insert_empty_rows(self, at: int, count: int = 1) -> InsertRows | None:
        """Insert ``count`` rows built by the adapter's empty-row constructor."""
        if count <= 0:
            return None
        if not self._adapter.allow_row_insertions():
            self._refuse(RejectionKind.VALIDATION, "insert_rows", "row insertion not permitted")
            return None
        payloads = [self._adapter.new_empty_row(EmptyRowContext.INSERTION) for _ in range(count)]
        return self.insert_rows(at, payloads)

    def remove_rows(self, positions: Iterable[int]) -> RemoveRows | None:
        """Remove rows at view positions.

        Out-of-range positions are ignored. Rows whose deletion the adapter
        refuses stay in place; the others are removed as one action.
        """
        count = len(self._rows)
        valid = sorted({p for p in positions if 0 <= p < count})
        if not valid:
            self._refuse(RejectionKind.BOUNDS, "remove_rows", "no row in range")
            return None
        if not self._adapter.allow_row_deletions():
            self._refuse(RejectionKind.VALIDATION, "remove_rows", "row deletion not permitted")
            return None

        placements = []
        for position in valid:
            row = self._rows[position]
            if self._adapter.confirm_row_deletion(row.payload):
                placements.append((position, row))
            else:
                self._refuse(
                    RejectionKind.VALIDATION, "remove_rows", f"row {row.row_id} kept by adapter"
                )

        if not placements:
            return None
        action = RemoveRows(tuple(placements))
        self._record(action)
        return action

    def duplicate_rows(self, positions: Iterable[int], user_copy: bool = False) -> DuplicateRows | None:
        """Insert a clone of each row directly below it.

        Args:
            positions: View positions of the source rows.
            user_copy: True when the user asked for the copy; uses
                clone_row_as_copied_base instead of clone_row_for_insertion.
        """
        count = len(self._rows)
        valid = sorted({p for p in positions if 0 <= p < count})
        if not valid:
            self._refuse(RejectionKind.BOUNDS, "duplicate_rows", "no row in range")
            return None
        if not self._adapter.allow_row_insertions():
            self._refuse(RejectionKind.VALIDATION, "duplicate_rows", "row insertion not permitted")
            return None

        clone = (
            self._adapter.clone_row_as_copied_base
            if user_copy
            else self._adapter.clone_row_for_insertion
        )
        # Each earlier clone pushes later sources down by one
        placements = tuple(
            (position + offset + 1, self.new_row(clone(self._rows[position].payload)))
            for offset, position in enumerate(valid)
        )
        action = DuplicateRows(placements)
        self._record(action)
        return action

    def build_cell_write(
        self,
        row_id: RowId,
        column: int,
        value: Any,
        source: WriteSource = WriteSource.PROGRAM,
        base_payload: Any = None,
    ) -> SetCell | None:
        """Validate a cell write and build its action without recording it.

        Args:
            row_id: Target row.
            column: Data column.
            value: New cell value.
            source: What triggered the write (passed to the confirm hook).
            base_payload: Payload to write on top of instead of the stored one,
                for chaining several writes to one row into a batch.

        Returns:
            The SetCell action, or None when the write is out of bounds,
            targets a non-editable cell, is refused, or changes nothing.
        """
        position = self.position_of(row_id)
        if position is None or not 0 <= column < self._adapter.num_columns():
            self._refuse(RejectionKind.BOUNDS, "set_cell", f"no cell ({row_id}, {column})")
            return None

        current = self._rows[position].payload if base_payload is None else base_payload
        if not self._adapter.is_editable_cell(current, column, position):
            self._refuse(RejectionKind.VALIDATION, "set_cell", f"cell ({row_id}, {column}) is locked")
            return None

        old_value = self._adapter.get_cell_value(current, column)
        if old_value == value:
            return None

        proposed = self._adapter.set_cell_value(current, column, value)
        context = CellWriteContext(row_id, column, current, proposed, value, source)
        if not self._adapter.confirm_cell_write(context):
            self._refuse(RejectionKind.VALIDATION, "set_cell", f"write to ({row_id}, {column}) refused")
            return None

        return SetCell(row_id, column, old_value, value, current, proposed)

    def set_cell(
        self, row_id: RowId, column: int, value: Any, source: WriteSource = WriteSource.PROGRAM
    ) -> SetCell | None:
        """Write one cell after the adapter confirms it.

        Returns:
            The recorded action, or None for a no-op.
        """
        action = self.build_cell_write(row_id, column, value, source)
        if action is not None:
            self._record(action)
        return action

    def _record_cell_batch(self, writes: list[SetCell], label: str) -> Batch | None:
        if not writes:
            return None
        action = Batch(tuple(writes), label)
        self._record(action)
        return action

    def clear_cells(self, cells: Iterable[tuple[RowId, int]]) -> Batch | None:
        """Reset cells through the adapter's clear_cell hook.

        Non-editable cells are skipped. All cleared cells form one action.
        """
        working: dict[RowId, Any] = {}
        writes: list[SetCell] = []

        for row_id, column in cells:
            if not 0 <= column < self._adapter.num_columns():
                continue
            row = self.row_by_id(row_id)
            if row is None:
                self._refuse(RejectionKind.BOUNDS, "clear_cells", f"no row {row_id}")
                continue
            base = working.get(row_id, row.payload)
            value = self._adapter.get_cell_value(self._adapter.clear_cell(base, column), column)
            action = self.build_cell_write(row_id, column, value, WriteSource.CLEAR, base)
            if action is not None:
                working[row_id] = action.new_payload
                writes.append(action)

        return self._record_cell_batch(writes, "Clear cells")

    def fill_cells(self, source_row_id: RowId, targets: Iterable[tuple[RowId, int]]) -> Batch | None:
        """Copy cell values from one row into other rows.

        Args:
            source_row_id: Row the values are read from.
            targets: (row_id, data column) pairs to overwrite.
        """
        source = self.row_by_id(source_row_id)
        if source is None:
            self._refuse(RejectionKind.BOUNDS, "fill_cells", f"no row {source_row_id}")
            return None

        working: dict[RowId, Any] = {}
        writes: list[SetCell] = []

        for row_id, column in targets:
            if row_id == source_row_id or not 0 <= column < self._adapter.num_columns():
                continue
            target = self.row_by_id(row_id)
            if target is None:
                continue
            base = working.get(row_id, target.payload)
            value = self._adapter.get_cell_value(
                self._adapter.copy_cell_value(source.payload, base, column), column
            )
            action = self.build_cell_write(row_id, column, value, WriteSource.FILL, base)
            if action is not None:
                working[row_id] = action.new_payload
                writes.append(action)

        return self._record_cell_batch(writes, "Fill cells")
