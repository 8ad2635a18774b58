"""Default key map.

Keys are Tk keysym names ("Return", "Tab", "F2", "z", ...), so a tksheet
host can pass ``event.keysym`` straight through. The map follows spreadsheet
conventions: Enter and Tab commit and move, Escape cancels, F2 edits.
"""

from __future__ import annotations

from ..models.ui_actions import (
    ActivateSelectedCell,
    CancelEdit,
    ClearSelection,
    CommitEditAndMove,
    CopySelection,
    CutSelection,
    DeleteRow,
    DuplicateRow,
    InsertRowAbove,
    InsertRowBelow,
    MoveDirection,
    MoveSelection,
    Redo,
    SelectAll,
    SelectionDuplicateValues,
    UiAction,
    Undo,
)

ARROWS = {
    "Up": MoveDirection.UP,
    "Down": MoveDirection.DOWN,
    "Left": MoveDirection.LEFT,
    "Right": MoveDirection.RIGHT,
}

# (keysym, shift) -> action, with Ctrl held
CTRL_BINDINGS: dict[tuple[str, bool], UiAction] = {
    ("z", False): Undo(),
    ("y", False): Redo(),
    ("z", True): Redo(),
    ("c", False): CopySelection(),
    ("x", False): CutSelection(),
    ("a", False): SelectAll(),
    ("d", False): DuplicateRow(),
    ("d", True): SelectionDuplicateValues(),
    ("minus", False): DeleteRow(),
    ("plus", True): InsertRowBelow(),
    ("equal", True): InsertRowBelow(),
    ("plus", False): InsertRowAbove(),
}


def detect_hotkey(
    key: str, ctrl: bool = False, shift: bool = False, alt: bool = False, editing: bool = False
) -> UiAction | None:
    """Map a key press to a UiAction.

    Args:
        key: Tk keysym. Letters match case-insensitively.
        ctrl: Control held.
        shift: Shift held.
        alt: Alt held. Alt chords are left to the host.
        editing: A cell editor is open. Only commit/cancel keys are mapped
            then; everything else belongs to the editor.

    Returns:
        The action for the key, or None when the key is not bound.
    """
    if alt:
        return None
    if len(key) == 1:
        key = key.lower()

    if editing:
        if key == "Escape":
            return CancelEdit()
        if key in ("Return", "KP_Enter"):
            return CommitEditAndMove(MoveDirection.UP if shift else MoveDirection.DOWN)
        if key in ("Tab", "ISO_Left_Tab"):
            return CommitEditAndMove(MoveDirection.LEFT if shift else MoveDirection.RIGHT)
        return None

    if ctrl:
        return CTRL_BINDINGS.get((key, shift))

    if key in ARROWS:
        return MoveSelection(ARROWS[key], extend=shift)
    if key in ("Tab", "ISO_Left_Tab"):
        return MoveSelection(MoveDirection.LEFT if shift else MoveDirection.RIGHT)
    if key in ("F2", "Return", "KP_Enter"):
        return ActivateSelectedCell()
    if key in ("Delete", "BackSpace"):
        return ClearSelection()
    return None
