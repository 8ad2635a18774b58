"""Style and policy configuration for a table.

These values are read-only inputs to the engine: the edit session reads the
activation policy and the action log reads the history capacity. The layout
flags are carried for the host renderer.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum

# Undo entries kept when no capacity is configured
DEFAULT_MAX_UNDO_HISTORY = 100


class ScrollBarVisibility(Enum):
    """When the host should draw scroll bars."""

    ALWAYS_VISIBLE = "always_visible"
    VISIBLE_WHEN_NEEDED = "visible_when_needed"
    ALWAYS_HIDDEN = "always_hidden"


@dataclass
class TableStyle:
    """Policy inputs for one table.

    Attributes:
        single_click_edit_mode: Start editing on a single click instead of
            requiring a double click.
        auto_shrink: (horizontal, vertical) shrink-to-content flags for the host.
        scroll_bar_visibility: Scroll bar policy for the host.
        max_undo_history: Maximum undo entries; 0 keeps every entry.
        table_row_height: Fixed row height for the host, or None for automatic.
    """

    single_click_edit_mode: bool = False
    auto_shrink: tuple[bool, bool] = (False, False)
    scroll_bar_visibility: ScrollBarVisibility = ScrollBarVisibility.VISIBLE_WHEN_NEEDED
    max_undo_history: int = DEFAULT_MAX_UNDO_HISTORY
    table_row_height: float | None = None

    def __post_init__(self):
        if self.max_undo_history < 0:
            self.max_undo_history = 0

    def clone(self, **changes) -> TableStyle:
        """Create a copy of this style, optionally with some fields changed."""
        return replace(self, **changes)

    @classmethod
    def fresh(cls) -> TableStyle:
        """Create a style with default settings."""
        return cls()
