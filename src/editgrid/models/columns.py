"""Column visibility and display order.

Column positions (what the user sees) map to data column indices (what the
row adapter understands). Hiding or reordering columns only changes this
mapping; row payloads are never touched.
"""

from __future__ import annotations


class ColumnLayout:
    """Ordered list of visible data columns.

    Usage:
        layout = ColumnLayout(3)        # visible: [0, 1, 2]
        layout.visible = [2, 0]         # column 1 hidden, 2 shown first
        layout.data_column(0)           # -> 2
    """

    def __init__(self, num_columns: int):
        self._num_columns = max(num_columns, 0)
        self._visible: list[int] = list(range(self._num_columns))

    @property
    def num_columns(self) -> int:
        """Total data columns, visible or not."""
        return self._num_columns

    @property
    def visible(self) -> list[int]:
        """Data column indices in display order (a copy)."""
        return list(self._visible)

    @visible.setter
    def visible(self, columns: list[int]) -> None:
        if not self.is_valid_layout(columns):
            raise ValueError(f"Invalid column layout: {columns!r}")
        self._visible = list(columns)

    def __len__(self) -> int:
        return len(self._visible)

    def is_valid_layout(self, columns: list[int]) -> bool:
        """Check that ``columns`` is a non-empty list of distinct data columns."""
        if not columns:
            return False
        if len(set(columns)) != len(columns):
            return False
        return all(0 <= col < self._num_columns for col in columns)

    def data_column(self, position: int) -> int | None:
        """Data column shown at a visible position, or None if out of range."""
        if 0 <= position < len(self._visible):
            return self._visible[position]
        return None

    def position_of(self, column: int) -> int | None:
        """Visible position of a data column, or None if hidden."""
        try:
            return self._visible.index(column)
        except ValueError:
            return None

    def is_visible(self, column: int) -> bool:
        return column in self._visible

    def hidden(self) -> list[int]:
        """Hidden data columns in ascending order."""
        return [col for col in range(self._num_columns) if col not in self._visible]

    # --- Layout proposals (used to build SetVisibleColumns actions) ---

    def without(self, column: int) -> list[int] | None:
        """Layout with ``column`` hidden, or None if that is not possible.

        The last visible column cannot be hidden.
        """
        if column not in self._visible or len(self._visible) == 1:
            return None
        return [col for col in self._visible if col != column]

    def with_shown(self, column: int, at: int | None = None) -> list[int] | None:
        """Layout with a hidden ``column`` shown at visible position ``at``."""
        if not 0 <= column < self._num_columns or column in self._visible:
            return None
        layout = list(self._visible)
        if at is None or at > len(layout):
            at = len(layout)
        layout.insert(max(at, 0), column)
        return layout

    def with_moved(self, from_pos: int, to_pos: int) -> list[int] | None:
        """Layout with the column at ``from_pos`` moved to ``to_pos``."""
        count = len(self._visible)
        if from_pos == to_pos or not 0 <= from_pos < count or not 0 <= to_pos < count:
            return None
        layout = list(self._visible)
        layout.insert(to_pos, layout.pop(from_pos))
        return layout
