"""Row adapter capability interface.

The engine never looks inside a row payload. Everything it needs to know
about rows (how to build, clone, read, write and validate them) goes through
a RowAdapter supplied by the host application.

Payloads are treated as values: ``set_cell_value`` returns the updated
payload instead of mutating its argument, so prior payloads stay valid as
undo snapshots. Adapters over mutable objects should clone before writing.
"""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class EmptyRowContext(Enum):
    """Why the engine is asking for an empty row."""

    DEFAULT = "default"
    INSERTION = "insertion"
    PASTE = "paste"
    CLEAR = "clear"


class WriteSource(Enum):
    """What triggered a cell write."""

    EDIT = "edit"
    PASTE = "paste"
    DROP = "drop"
    CLEAR = "clear"
    FILL = "fill"
    PROGRAM = "program"


@dataclass(frozen=True)
class CellWriteContext:
    """Everything the write-confirmation hook may inspect.

    Attributes:
        row_id: Identifier of the row being written, or None for a row that
            is not in the table yet (pasted rows being built).
        column: Data column index.
        current: Payload before the write.
        proposed: Payload after the write.
        value: The cell value being written.
        source: What triggered the write.
    """

    row_id: int | None
    column: int
    current: Any
    proposed: Any
    value: Any
    source: WriteSource


class RowAdapter(ABC):
    """Domain semantics for one row type.

    Subclasses must implement the abstract methods. Every other hook has a
    permissive default: all cells editable, insertions and deletions allowed,
    every write confirmed.
    """

    # --- Shape ---

    @abstractmethod
    def num_columns(self) -> int:
        """Number of data columns. Must be at least 1."""

    def column_name(self, column: int) -> str:
        """Header text for a data column."""
        return f"Column {column + 1}"

    # --- Construction and cloning ---

    @abstractmethod
    def new_empty_row(self, context: EmptyRowContext = EmptyRowContext.DEFAULT) -> Any:
        """Build a fresh payload with every cell empty."""

    def clone_row(self, row: Any) -> Any:
        """Deep copy of a payload."""
        return copy.deepcopy(row)

    def clone_row_for_insertion(self, row: Any) -> Any:
        """Copy used for programmatic duplication."""
        return self.clone_row(row)

    def clone_row_as_copied_base(self, row: Any) -> Any:
        """Copy used when the user duplicates a row.

        Override to reset fields that must stay unique (keys, timestamps).
        """
        return self.clone_row(row)

    # --- Cell access ---

    @abstractmethod
    def get_cell_value(self, row: Any, column: int) -> Any:
        """Read one cell of a payload."""

    @abstractmethod
    def set_cell_value(self, row: Any, column: int, value: Any) -> Any:
        """Return a payload equal to ``row`` with one cell replaced."""

    def copy_cell_value(self, src: Any, dst: Any, column: int) -> Any:
        """Return ``dst`` with ``column`` taken from ``src``."""
        return self.set_cell_value(dst, column, self.get_cell_value(src, column))

    def clear_cell(self, row: Any, column: int) -> Any:
        """Return ``row`` with ``column`` reset to its empty-row value."""
        empty = self.new_empty_row(EmptyRowContext.CLEAR)
        return self.copy_cell_value(empty, row, column)

    def encode_cell(self, row: Any, column: int) -> str:
        """Text form of a cell for the clipboard."""
        value = self.get_cell_value(row, column)
        return "" if value is None else str(value)

    def decode_cell(self, text: str, row: Any, column: int) -> Any | None:
        """Parse clipboard text for a cell.

        Returns:
            The cell value, or None when the text cannot be used for this column.
        """
        return text

    # --- Editors ---

    def create_cell_editor(self, row: Any, column: int) -> Any | None:
        """Produce an editor handle for a cell, or None when there is none.

        The engine only checks whether an editor was produced (to drive focus);
        the default editor handle is the current cell value.
        """
        value = self.get_cell_value(row, column)
        return "" if value is None else value

    # --- Validation hooks ---

    def is_editable_cell(self, row: Any, column: int, position: int) -> bool:
        """Whether a cell accepts edits, pastes and drops."""
        return True

    def confirm_cell_write(self, context: CellWriteContext) -> bool:
        """Accept or reject a cell write before it is applied."""
        return True

    def confirm_row_deletion(self, row: Any) -> bool:
        """Accept or reject deleting one row."""
        return True

    def allow_row_insertions(self) -> bool:
        return True

    def allow_row_deletions(self) -> bool:
        return True

    # --- Filtering ---

    def has_row_filter(self) -> bool:
        """Whether filter_row should be consulted.

        Call DataTable.refilter after changing the filter criteria.
        """
        return False

    def filter_row(self, row: Any) -> bool:
        """Whether a payload is displayed. Hidden rows keep their data and ids."""
        return True

    # --- Notifications ---

    def on_row_updated(self, row_id: int, old: Any, new: Any) -> None:
        """Called after a committed change replaced a row's payload."""

    def on_row_inserted(self, row_id: int, row: Any) -> None:
        """Called after a row entered the table."""

    def on_row_removed(self, row_id: int, row: Any) -> None:
        """Called after a row left the table."""

    # --- Sorting ---

    def is_sortable_column(self, column: int) -> bool:
        return True

    def compare_cells(self, left: Any, right: Any, column: int) -> int:
        """Three-way comparison of one column of two payloads."""
        a = self.get_cell_value(left, column)
        b = self.get_cell_value(right, column)
        if a is None or b is None:
            # None sorts first
            return (a is not None) - (b is not None)
        return (a > b) - (a < b)

    # --- Persistence ---

    def persist_ui_state(self) -> bool:
        """Opt in to saving the selection with snapshots."""
        return False

    def serialize_row(self, row: Any) -> Any:
        """Convert a payload to a JSON-compatible value."""
        return row

    def deserialize_row(self, data: Any) -> Any:
        """Inverse of serialize_row."""
        return data
