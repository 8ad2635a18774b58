"""User-visible actions a host can trigger.

The set is open: new variants may be added in later versions, so every
consumer must keep a default branch for actions it does not recognise
(``DataTable.apply_ui_action`` logs and ignores them).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MoveDirection(Enum):
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True)
class UiAction:
    """Base class for host-triggered actions."""

    @property
    def name(self) -> str:
        return type(self).__name__


# --- Editing ---


@dataclass(frozen=True)
class ActivateSelectedCell(UiAction):
    """Start editing the cell under the cursor."""


@dataclass(frozen=True)
class CancelEdit(UiAction):
    pass


@dataclass(frozen=True)
class CommitEdit(UiAction):
    pass


@dataclass(frozen=True)
class CommitEditAndMove(UiAction):
    """Commit the active edit, then move the cursor."""

    direction: MoveDirection = MoveDirection.DOWN


# --- Navigation and selection ---


@dataclass(frozen=True)
class MoveSelection(UiAction):
    direction: MoveDirection
    extend: bool = False


@dataclass(frozen=True)
class SelectAll(UiAction):
    pass


# --- History ---


@dataclass(frozen=True)
class Undo(UiAction):
    pass


@dataclass(frozen=True)
class Redo(UiAction):
    pass


# --- Clipboard ---


@dataclass(frozen=True)
class CopySelection(UiAction):
    pass


@dataclass(frozen=True)
class CutSelection(UiAction):
    pass


@dataclass(frozen=True)
class PasteText(UiAction):
    """Paste clipboard text at the selection's top-left cell."""

    text: str


@dataclass(frozen=True)
class ClearSelection(UiAction):
    """Reset every selected editable cell to its empty value."""


@dataclass(frozen=True)
class SelectionDuplicateValues(UiAction):
    """Copy the top row of the selection down into the other selected rows."""


# --- Rows ---


@dataclass(frozen=True)
class InsertRowAbove(UiAction):
    pass


@dataclass(frozen=True)
class InsertRowBelow(UiAction):
    pass


@dataclass(frozen=True)
class InsertEmptyRows(UiAction):
    """Insert ``count`` empty rows at ``at`` (below the selection when None)."""

    count: int = 1
    at: int | None = None


@dataclass(frozen=True)
class DuplicateRow(UiAction):
    """Duplicate every selected row below itself."""


@dataclass(frozen=True)
class DeleteRow(UiAction):
    """Delete every selected row."""


# --- Columns ---


@dataclass(frozen=True)
class SortByColumn(UiAction):
    """Sort rows on a data column as an undoable step."""

    column: int
    ascending: bool = True


@dataclass(frozen=True)
class HideColumn(UiAction):
    column: int


@dataclass(frozen=True)
class ShowColumn(UiAction):
    column: int
    at: int | None = None


@dataclass(frozen=True)
class ReorderColumn(UiAction):
    from_pos: int
    to_pos: int
