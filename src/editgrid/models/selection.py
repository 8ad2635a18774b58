"""Selection model over the visible grid.

Coordinates are view coordinates: displayed row positions and visible
column positions in the column layout. Both change under structural
edits, so the owning table calls ``revalidate()`` after every mutation.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass

from .ui_actions import MoveDirection


@dataclass(frozen=True, order=True)
class CellPos:
    """A (row, column) view coordinate."""

    row: int
    column: int


class Selection:
    """Anchor/cursor rectangle, or a discrete set of whole rows.

    The selected rectangle is the normalised box spanned by the anchor and the
    cursor. Row-level selection is the same rectangle stretched across every
    visible column. ``toggle_row`` switches to a discrete row set.

    Args:
        bounds: Callable returning (row_count, visible_column_count).
    """

    def __init__(self, bounds: Callable[[], tuple[int, int]]):
        self._bounds = bounds
        self._anchor: CellPos | None = None
        self._cursor: CellPos | None = None
        self._row_mode = False
        self._discrete: set[int] | None = None

    def __repr__(self) -> str:
        if self._discrete is not None:
            return f"Selection(rows={sorted(self._discrete)})"
        return f"Selection({self._anchor} -> {self._cursor}, row_mode={self._row_mode})"

    # --- Properties ---

    @property
    def anchor(self) -> CellPos | None:
        return self._anchor

    @property
    def cursor(self) -> CellPos | None:
        return self._cursor

    @property
    def is_row_selection(self) -> bool:
        return self._row_mode or self._discrete is not None

    @property
    def is_empty(self) -> bool:
        return self._cursor is None

    @property
    def is_single_cell(self) -> bool:
        return (
            self._discrete is None
            and not self._row_mode
            and self._cursor is not None
            and self._anchor == self._cursor
        )

    # --- Helpers ---

    def _clamp(self, pos: CellPos) -> CellPos | None:
        """Nearest valid coordinate, or None if the grid has no cells."""
        rows, cols = self._bounds()
        if rows <= 0 or cols <= 0:
            return None
        return CellPos(min(max(pos.row, 0), rows - 1), min(max(pos.column, 0), cols - 1))

    def _last_column(self) -> int:
        return max(self._bounds()[1] - 1, 0)

    # --- Mutations ---

    def set_anchor(self, pos: CellPos) -> bool:
        """Start a new selection at ``pos`` (clamped).

        Returns:
            False when the grid is empty and nothing could be selected.
        """
        clamped = self._clamp(pos)
        if clamped is None:
            self.clear()
            return False
        self._anchor = self._cursor = clamped
        self._row_mode = False
        self._discrete = None
        return True

    def extend_to(self, pos: CellPos) -> bool:
        """Move the cursor to ``pos`` (clamped), keeping the anchor."""
        if self._anchor is None:
            return self.set_anchor(pos)
        clamped = self._clamp(pos)
        if clamped is None:
            self.clear()
            return False
        if self._discrete is not None:
            # Extending leaves discrete mode and spans from the last toggled row
            self._discrete = None
            self._row_mode = True
        if self._row_mode:
            clamped = CellPos(clamped.row, self._last_column())
        self._cursor = clamped
        return True

    def clear(self) -> None:
        self._anchor = self._cursor = None
        self._row_mode = False
        self._discrete = None

    def select_row(self, index: int) -> bool:
        """Select one whole row."""
        clamped = self._clamp(CellPos(index, 0))
        if clamped is None:
            self.clear()
            return False
        self._anchor = CellPos(clamped.row, 0)
        self._cursor = CellPos(clamped.row, self._last_column())
        self._row_mode = True
        self._discrete = None
        return True

    def toggle_row(self, index: int) -> bool:
        """Add a row to, or remove it from, a discrete row selection."""
        clamped = self._clamp(CellPos(index, 0))
        if clamped is None:
            self.clear()
            return False

        if self._discrete is None:
            self._discrete = set(self.selected_rows()) if self._row_mode else set()
        self._row_mode = False

        row = clamped.row
        if row in self._discrete:
            self._discrete.discard(row)
        else:
            self._discrete.add(row)

        if not self._discrete:
            self.clear()
            return True

        focus = row if row in self._discrete else max(self._discrete)
        self._anchor = CellPos(focus, 0)
        self._cursor = CellPos(focus, self._last_column())
        return True

    def select_all(self) -> bool:
        rows, cols = self._bounds()
        if rows <= 0 or cols <= 0:
            self.clear()
            return False
        self._anchor = CellPos(0, 0)
        self._cursor = CellPos(rows - 1, cols - 1)
        self._row_mode = True
        self._discrete = None
        return True

    def move_cursor(self, direction: MoveDirection, extend: bool = False) -> bool:
        """Keyboard navigation.

        Up/Down stop at the first/last row. Left/Right wrap to the previous or
        next row at the first/last column.
        """
        rows, cols = self._bounds()
        if rows <= 0 or cols <= 0:
            self.clear()
            return False
        if self._cursor is None:
            return self.set_anchor(CellPos(0, 0))

        r, c = self._cursor.row, self._cursor.column
        rmax, cmax = rows - 1, cols - 1

        if direction is MoveDirection.UP:
            r = max(r - 1, 0)
        elif direction is MoveDirection.DOWN:
            r = min(r + 1, rmax)
        elif direction is MoveDirection.LEFT:
            if c > 0:
                c -= 1
            elif r > 0:
                r, c = r - 1, cmax
        elif direction is MoveDirection.RIGHT:
            if c < cmax:
                c += 1
            elif r < rmax:
                r, c = r + 1, 0

        target = CellPos(r, c)
        if extend and self._anchor is not None:
            self._discrete = None
            self._row_mode = False
            self._cursor = target
            return True
        return self.set_anchor(target)

    def follow_rows(self, new_position: Callable[[int], int | None]) -> None:
        """Carry a discrete row set over to the rows' new positions.

        Rows that left the grid drop out of the set. When none is left the
        selection becomes a single row that ``revalidate`` clamps onto the
        nearest remaining one.

        Args:
            new_position: Maps a position before the change to the same
                row's position after it, or None when the row is gone.
        """
        if self._discrete is None:
            return
        moved = {p for p in (new_position(row) for row in self._discrete) if p is not None}
        if not moved:
            self._discrete = None
            self._row_mode = True
            return

        focus = new_position(self._anchor.row) if self._anchor is not None else None
        if focus not in moved:
            focus = max(moved)
        self._discrete = moved
        self._anchor = CellPos(focus, 0)
        self._cursor = CellPos(focus, self._last_column())

    def revalidate(self) -> None:
        """Collapse coordinates onto the current grid after a structural change."""
        rows, cols = self._bounds()
        if rows <= 0 or cols <= 0 or self._cursor is None:
            self.clear()
            return

        if self._discrete is not None:
            self._discrete = {r for r in self._discrete if r < rows}
            if not self._discrete:
                self._discrete = None
                self._row_mode = True

        self._anchor = self._clamp(self._anchor or self._cursor)
        self._cursor = self._clamp(self._cursor)
        if self.is_row_selection:
            self._anchor = CellPos(self._anchor.row, 0)
            self._cursor = CellPos(self._cursor.row, cols - 1)

    # --- Queries ---

    def rect(self) -> tuple[int, int, int, int] | None:
        """Normalised (top, left, bottom, right) box, inclusive.

        For a discrete row set this is the bounding box of the rows.
        """
        if self._cursor is None or self._anchor is None:
            return None
        if self._discrete is not None:
            return (min(self._discrete), 0, max(self._discrete), self._last_column())
        a, b = self._anchor, self._cursor
        return (
            min(a.row, b.row),
            min(a.column, b.column),
            max(a.row, b.row),
            max(a.column, b.column),
        )

    def selected_rows(self) -> list[int]:
        """Selected row positions, ascending."""
        if self._discrete is not None:
            return sorted(self._discrete)
        box = self.rect()
        if box is None:
            return []
        return list(range(box[0], box[2] + 1))

    def selected_columns(self) -> list[int]:
        """Selected visible column positions, ascending."""
        box = self.rect()
        if box is None:
            return []
        return list(range(box[1], box[3] + 1))

    def cells(self) -> Iterator[tuple[int, int]]:
        """Selected (row, column) positions in row-major order."""
        columns = self.selected_columns()
        for row in self.selected_rows():
            for col in columns:
                yield row, col

    def contains(self, row: int, column: int) -> bool:
        box = self.rect()
        if box is None:
            return False
        if self._discrete is not None:
            return row in self._discrete and box[1] <= column <= box[3]
        top, left, bottom, right = box
        return top <= row <= bottom and left <= column <= right
