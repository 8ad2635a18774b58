"""In-place cell editing state machine.

States::

    IDLE --begin--> EDITING --commit--> COMMITTING --> IDLE
                       |
                       +----cancel--> CANCELLED ----> IDLE

Only one cell edits at a time. Keystrokes replace the pending value; the
whole session becomes at most one SetCell action when it commits.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any

from ..debug_trace import get_logger
from ..models.rejection import Rejection, RejectionKind
from ..models.row import RowId
from ..models.row_adapter import WriteSource
from ..models.selection import CellPos

if TYPE_CHECKING:
    from .data_table import DataTable

logger = get_logger(__name__)


class EditState(Enum):
    IDLE = "idle"
    EDITING = "editing"
    COMMITTING = "committing"
    CANCELLED = "cancelled"


class EditGesture(Enum):
    """How the user asked to start editing."""

    SINGLE_CLICK = "single_click"
    DOUBLE_CLICK = "double_click"
    KEYBOARD = "keyboard"


class EditSession:
    """The single active cell editor of a table.

    Usage:
        if table.edit.begin(CellPos(0, 1), EditGesture.DOUBLE_CLICK):
            table.edit.update("new text")
            table.edit.commit()
    """

    def __init__(self, table: DataTable):
        self._table = table
        self._state = EditState.IDLE
        self._row_id: RowId | None = None
        self._column: int | None = None
        self._editor: Any = None
        self._original: Any = None
        self._pending: Any = None

    def __repr__(self) -> str:
        if self._state is EditState.IDLE:
            return "EditSession(idle)"
        return f"EditSession({self._state.value}, row={self._row_id}, column={self._column})"

    # --- Properties ---

    @property
    def state(self) -> EditState:
        return self._state

    @property
    def is_active(self) -> bool:
        """Whether a cell is being edited (or committed right now)."""
        return self._state in (EditState.EDITING, EditState.COMMITTING)

    @property
    def row_id(self) -> RowId | None:
        return self._row_id

    @property
    def column(self) -> int | None:
        """Data column being edited."""
        return self._column

    @property
    def editor(self) -> Any:
        """Handle returned by the adapter's create_cell_editor."""
        return self._editor

    @property
    def original_value(self) -> Any:
        return self._original

    @property
    def pending_value(self) -> Any:
        return self._pending

    @property
    def position(self) -> CellPos | None:
        """Current view coordinate of the edited cell, if it is visible."""
        if self._row_id is None or self._column is None:
            return None
        row = self._table.view.position_of(self._row_id)
        col = self._table.columns.position_of(self._column)
        if row is None or col is None:
            return None
        return CellPos(row, col)

    # --- Transitions ---

    def _refuse(self, kind: RejectionKind, detail: str) -> bool:
        self._table.report_rejection(Rejection(kind, "begin_edit", detail))
        return False

    def _reset(self) -> None:
        self._state = EditState.IDLE
        self._row_id = None
        self._column = None
        self._editor = None
        self._original = None
        self._pending = None

    def gesture_activates(self, gesture: EditGesture) -> bool:
        """Whether ``gesture`` starts editing under the table's style."""
        if gesture is EditGesture.SINGLE_CLICK:
            return self._table.style.single_click_edit_mode
        return True

    def begin(self, pos: CellPos, gesture: EditGesture = EditGesture.KEYBOARD) -> bool:
        """Start editing the cell at a view coordinate.

        A cell already being edited elsewhere is committed first.

        Returns:
            True if the cell is now being edited.
        """
        if not self.gesture_activates(gesture):
            return False

        store, view, columns = self._table.store, self._table.view, self._table.columns
        row = view.row_at(pos.row)
        column = columns.data_column(pos.column)
        if row is None or column is None:
            return self._refuse(RejectionKind.BOUNDS, f"no cell at {pos}")

        if self.is_active:
            if self._row_id == row.row_id and self._column == column:
                return True
            self.commit()
            # Committing can move rows or filter them out
            row = store.row_by_id(row.row_id)
            position = view.position_of(row.row_id) if row is not None else None
            if position is None:
                return self._refuse(RejectionKind.BOUNDS, "row left the table")
            pos = CellPos(position, pos.column)

        adapter = self._table.adapter
        if not store.is_editable(row.row_id, column):
            return self._refuse(RejectionKind.VALIDATION, f"cell {pos} is not editable")

        editor = adapter.create_cell_editor(row.payload, column)
        if editor is None:
            return self._refuse(RejectionKind.VALIDATION, f"no editor for cell {pos}")

        self._state = EditState.EDITING
        self._row_id = row.row_id
        self._column = column
        self._editor = editor
        self._original = adapter.get_cell_value(row.payload, column)
        self._pending = self._original

        self._table.selection.set_anchor(pos)
        logger.debug("Editing row %s column %s", self._row_id, self._column)
        return True

    def update(self, value: Any) -> bool:
        """Replace the pending value (one keystroke or editor change)."""
        if self._state is not EditState.EDITING:
            return False
        self._pending = value
        return True

    def commit(self) -> bool:
        """Write the pending value through the confirm hook and go idle.

        Returns:
            True if a cell-value action was recorded.
        """
        if self._state is not EditState.EDITING:
            return False

        self._state = EditState.COMMITTING
        try:
            if self._pending == self._original:
                return False
            action = self._table.store.set_cell(
                self._row_id, self._column, self._pending, WriteSource.EDIT
            )
            return action is not None
        finally:
            self._reset()

    def cancel(self) -> bool:
        """Discard the pending value and go idle."""
        if self._state is not EditState.EDITING:
            return False
        self._state = EditState.CANCELLED
        logger.debug("Cancelled edit of row %s column %s", self._row_id, self._column)
        self._reset()
        return True

    def revalidate(self) -> None:
        """Cancel the session if its row is no longer displayed."""
        if self.is_active and self._table.view.position_of(self._row_id) is None:
            self._state = EditState.EDITING
            self.cancel()
