"""Reversible table mutations.

Every Action carries the state it needs to undo itself, so reverting never
depends on anything that existed only before the action was applied. Rows
are referred to by identifier; positions stored in an action are only used
to put rows back where they were.

Actions are applied by the ActionLog against a table exposing ``store``
(a RowStore) and ``columns`` (a ColumnLayout).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from .row import Row, RowId

if TYPE_CHECKING:
    from ..data.data_table import DataTable


class ActionKind(Enum):
    """Tag identifying the Action variant."""

    SET_CELL = "set_cell"
    INSERT_ROWS = "insert_rows"
    REMOVE_ROWS = "remove_rows"
    DUPLICATE_ROWS = "duplicate_rows"
    SET_ROW_ORDER = "set_row_order"
    SET_VISIBLE_COLUMNS = "set_visible_columns"
    BATCH = "batch"


@dataclass(frozen=True)
class Action:
    """Base class for reversible mutations."""

    kind = None  # set by every subclass

    @property
    def description(self) -> str:
        return self.kind.value.replace("_", " ").capitalize() if self.kind else ""

    @property
    def is_structural(self) -> bool:
        """Whether applying this action can move or remove rows."""
        return False

    def apply(self, table: DataTable) -> None:
        raise NotImplementedError

    def revert(self, table: DataTable) -> None:
        raise NotImplementedError

    def affected_ids(self) -> set[RowId]:
        return set()


@dataclass(frozen=True)
class SetCell(Action):
    """One cell changed.

    The before/after payloads are full snapshots of the row, so applying and
    reverting are plain payload swaps.
    """

    kind = ActionKind.SET_CELL

    row_id: RowId
    column: int
    old_value: Any
    new_value: Any
    old_payload: Any = field(repr=False, compare=False)
    new_payload: Any = field(repr=False, compare=False)

    @property
    def description(self) -> str:
        return f"Edit cell ({self.row_id}, {self.column})"

    def apply(self, table: DataTable) -> None:
        table.store.replace_payload(self.row_id, self.new_payload)

    def revert(self, table: DataTable) -> None:
        table.store.replace_payload(self.row_id, self.old_payload)

    def affected_ids(self) -> set[RowId]:
        return {self.row_id}


@dataclass(frozen=True)
class InsertRows(Action):
    """Rows entered the table.

    Attributes:
        placements: (final position, row) pairs in ascending position order.
    """

    kind = ActionKind.INSERT_ROWS

    placements: tuple[tuple[int, Row], ...]

    @property
    def description(self) -> str:
        count = len(self.placements)
        return f"Insert {count} row{'s' if count != 1 else ''}"

    @property
    def is_structural(self) -> bool:
        return True

    @property
    def rows(self) -> list[Row]:
        return [row for _, row in self.placements]

    def apply(self, table: DataTable) -> None:
        table.store.place_rows(self.placements)

    def revert(self, table: DataTable) -> None:
        table.store.take_rows([row.row_id for _, row in self.placements])

    def affected_ids(self) -> set[RowId]:
        return {row.row_id for _, row in self.placements}


@dataclass(frozen=True)
class DuplicateRows(InsertRows):
    """Clones inserted directly below their source rows."""

    kind = ActionKind.DUPLICATE_ROWS

    @property
    def description(self) -> str:
        count = len(self.placements)
        return f"Duplicate {count} row{'s' if count != 1 else ''}"


@dataclass(frozen=True)
class RemoveRows(Action):
    """Rows left the table.

    Attributes:
        placements: (original position, removed row) pairs in ascending
            position order. The rows keep their identifiers, so reverting
            brings back the very same rows.
    """

    kind = ActionKind.REMOVE_ROWS

    placements: tuple[tuple[int, Row], ...]

    @property
    def description(self) -> str:
        count = len(self.placements)
        return f"Delete {count} row{'s' if count != 1 else ''}"

    @property
    def is_structural(self) -> bool:
        return True

    def apply(self, table: DataTable) -> None:
        table.store.take_rows([row.row_id for _, row in self.placements])

    def revert(self, table: DataTable) -> None:
        table.store.place_rows(self.placements)

    def affected_ids(self) -> set[RowId]:
        return {row.row_id for _, row in self.placements}


@dataclass(frozen=True)
class SetRowOrder(Action):
    """Row order permutation (an undoable sort)."""

    kind = ActionKind.SET_ROW_ORDER

    before: tuple[RowId, ...]
    after: tuple[RowId, ...]

    @property
    def is_structural(self) -> bool:
        return True

    def apply(self, table: DataTable) -> None:
        table.store.apply_order(self.after)

    def revert(self, table: DataTable) -> None:
        table.store.apply_order(self.before)

    def affected_ids(self) -> set[RowId]:
        return set(self.after)


@dataclass(frozen=True)
class SetVisibleColumns(Action):
    """Column visibility/order change. Row data is untouched."""

    kind = ActionKind.SET_VISIBLE_COLUMNS

    before: tuple[int, ...]
    after: tuple[int, ...]

    @property
    def is_structural(self) -> bool:
        return True

    def apply(self, table: DataTable) -> None:
        table.columns.visible = list(self.after)

    def revert(self, table: DataTable) -> None:
        table.columns.visible = list(self.before)


@dataclass(frozen=True)
class Batch(Action):
    """Several actions undone and redone as one step."""

    kind = ActionKind.BATCH

    actions: tuple[Action, ...]
    label: str = ""

    @property
    def description(self) -> str:
        if self.label:
            return self.label
        if len(self.actions) == 1:
            return self.actions[0].description
        return f"{len(self.actions)} changes"

    @property
    def is_structural(self) -> bool:
        return any(action.is_structural for action in self.actions)

    def apply(self, table: DataTable) -> None:
        for action in self.actions:
            action.apply(table)

    def revert(self, table: DataTable) -> None:
        for action in reversed(self.actions):
            action.revert(table)

    def affected_ids(self) -> set[RowId]:
        affected: set[RowId] = set()
        for action in self.actions:
            affected |= action.affected_ids()
        return affected

    def iter_leaves(self):
        """Yield the non-batch actions inside this batch, depth first."""
        for action in self.actions:
            if isinstance(action, Batch):
                yield from action.iter_leaves()
            else:
                yield action
