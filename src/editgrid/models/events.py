"""Input events delivered to ``DataTable.process`` once per UI tick.

Coordinates are view coordinates (row position, visible column position).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .ui_actions import UiAction


@dataclass(frozen=True)
class InputEvent:
    """Base class for tick events."""


@dataclass(frozen=True)
class CellPressed(InputEvent):
    """Mouse press on a cell.

    Attributes:
        clicks: 1 for a single click, 2 for a double click.
        shift: Extend the selection instead of moving it.
        ctrl: Toggle the row in a discrete row selection.
    """

    row: int
    column: int
    clicks: int = 1
    shift: bool = False
    ctrl: bool = False


@dataclass(frozen=True)
class CellDragged(InputEvent):
    """Pointer dragged over a cell with the button held."""

    row: int
    column: int


@dataclass(frozen=True)
class RowHeaderPressed(InputEvent):
    row: int
    ctrl: bool = False
    shift: bool = False


@dataclass(frozen=True)
class KeyPressed(InputEvent):
    """Key press, as a Tk keysym plus modifiers."""

    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False


@dataclass(frozen=True)
class TextEdited(InputEvent):
    """The open cell editor's content changed."""

    value: Any


@dataclass(frozen=True)
class FocusLost(InputEvent):
    """The grid lost keyboard focus; an open editor commits."""


@dataclass(frozen=True)
class ValueDropped(InputEvent):
    """A dragged value was dropped on a cell."""

    row: int
    column: int
    value: Any


@dataclass(frozen=True)
class TextPasted(InputEvent):
    """Clipboard text the host read for a paste gesture."""

    text: str


@dataclass(frozen=True)
class Triggered(InputEvent):
    """An explicit UiAction (menu item, toolbar button, host code)."""

    action: UiAction
