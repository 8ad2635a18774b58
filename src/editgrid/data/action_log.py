"""Undo/redo history of Actions.

The log is not a deferred queue: ``record`` applies an action immediately and
then pushes it. Undo pops from the done stack and reverts; redo pops from the
undone stack and re-applies. Recording a new action clears the undone stack.

Dirty state is derived from the log position: every pushed frame gets a
serial number, and the table is dirty whenever the serial at the top of the
done stack differs from the one remembered by ``mark_saved``.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..debug_trace import get_logger
from ..models.actions import Action, Batch
from ..settings import DEFAULT_MAX_UNDO_HISTORY

if TYPE_CHECKING:
    from .data_table import DataTable

logger = get_logger(__name__)


@dataclass
class UndoFrame:
    """One entry of the history.

    Attributes:
        action: The applied action.
        serial: Unique, increasing number identifying the log position
            reached right after this action was applied.
    """

    action: Action
    serial: int

    @property
    def description(self) -> str:
        return self.action.description

    def __repr__(self) -> str:
        return f"UndoFrame({self.description!r}, #{self.serial})"


class ActionLog:
    """Done/undone stacks with capacity-bounded history.

    Usage:
        log = ActionLog(table, capacity=100)
        log.record(action)      # applied now, undoable
        log.undo()
        log.redo()

        with log.group("Paste"):
            log.record(first)
            log.record(second)  # both undone together

    Args:
        target: Table the actions are applied to.
        capacity: Maximum entries on the done stack; 0 keeps everything.
        on_applied: Called after every apply/revert with (action, reverted).
    """

    def __init__(
        self,
        target: DataTable,
        capacity: int = DEFAULT_MAX_UNDO_HISTORY,
        on_applied: Callable[[Action, bool], None] | None = None,
    ):
        self._target = target
        self._capacity = max(capacity, 0)
        self._on_applied = on_applied

        self.undo_stack: list[UndoFrame] = []
        self.redo_stack: list[UndoFrame] = []

        self._serial = 0
        # Serial of the position below the oldest retained frame
        self._floor_serial = 0
        self._saved_serial = 0

        # Open group (actions already applied, waiting to be pushed as one frame)
        self._group: list[Action] | None = None
        self._group_label = ""

    def __repr__(self) -> str:
        return f"ActionLog({len(self.undo_stack)} done, {len(self.redo_stack)} undone)"

    # --- Capacity ---

    @property
    def capacity(self) -> int:
        return self._capacity

    @capacity.setter
    def capacity(self, value: int) -> None:
        self._capacity = max(value, 0)
        self._evict()

    def _evict(self) -> None:
        if not self._capacity:
            return
        while len(self.undo_stack) > self._capacity:
            evicted = self.undo_stack.pop(0)
            self._floor_serial = evicted.serial
            logger.debug("Evicted %r", evicted)

    # --- Recording ---

    def _apply(self, action: Action, reverted: bool = False) -> None:
        if reverted:
            action.revert(self._target)
        else:
            action.apply(self._target)
        if self._on_applied is not None:
            self._on_applied(action, reverted)

    def _push(self, action: Action) -> None:
        self._serial += 1
        self.undo_stack.append(UndoFrame(action, self._serial))
        self.redo_stack.clear()
        self._evict()

    def record(self, action: Action) -> None:
        """Apply ``action`` and push it for undo.

        Inside ``group()`` the action is applied and held until the group
        closes.
        """
        self._apply(action)
        if self._group is not None:
            self._group.append(action)
            return
        self._push(action)
        logger.debug("Recorded %s", action.description)

    @property
    def in_group(self) -> bool:
        return self._group is not None

    @contextmanager
    def group(self, description: str = "") -> Generator[ActionLog, None, None]:
        """Collect every action recorded inside the block into one undo step.

        If the block raises, the collected actions are reverted before the
        exception propagates.

        Raises:
            RuntimeError: If a group is already open.
        """
        if self._group is not None:
            raise RuntimeError("Cannot nest action log groups")

        self._group = []
        self._group_label = description
        try:
            yield self
        except BaseException:
            collected, self._group = self._group, None
            for action in reversed(collected):
                self._apply(action, reverted=True)
            raise

        collected, self._group = self._group, None
        if not collected:
            return
        if len(collected) == 1 and not description:
            self._push(collected[0])
        else:
            self._push(Batch(tuple(collected), description))
        logger.debug("Recorded group %r (%d actions)", description, len(collected))

    # --- Undo/Redo ---

    def undo(self) -> bool:
        """Revert the most recent action.

        Returns:
            True if undo was performed
        """
        if self._group is not None:
            raise RuntimeError("Cannot undo while a group is open")
        if not self.undo_stack:
            return False

        frame = self.undo_stack.pop()
        self._apply(frame.action, reverted=True)
        self.redo_stack.append(frame)
        logger.debug("Undid %s", frame.description)
        return True

    def redo(self) -> bool:
        """Re-apply the most recently undone action.

        Returns:
            True if redo was performed
        """
        if self._group is not None:
            raise RuntimeError("Cannot redo while a group is open")
        if not self.redo_stack:
            return False

        frame = self.redo_stack.pop()
        self._apply(frame.action)
        self.undo_stack.append(frame)
        logger.debug("Redid %s", frame.description)
        return True

    def can_undo(self) -> bool:
        return len(self.undo_stack) > 0

    def can_redo(self) -> bool:
        return len(self.redo_stack) > 0

    def undo_description(self) -> str | None:
        """Get description of next undo action."""
        if self.undo_stack:
            return self.undo_stack[-1].description
        return None

    def redo_description(self) -> str | None:
        """Get description of next redo action."""
        if self.redo_stack:
            return self.redo_stack[-1].description
        return None

    # --- Dirty state ---

    @property
    def position(self) -> int:
        """Serial of the current log position."""
        if self.undo_stack:
            return self.undo_stack[-1].serial
        return self._floor_serial

    def mark_saved(self) -> None:
        """Remember the current position as the saved state."""
        self._saved_serial = self.position

    def is_dirty(self) -> bool:
        """Whether the table differs from the last saved position."""
        return self.position != self._saved_serial

    def clear(self) -> None:
        """Forget all history. The current state becomes a new position."""
        if self._group is not None:
            raise RuntimeError("Cannot clear while a group is open")
        self.undo_stack.clear()
        self.redo_stack.clear()
        self._serial += 1
        self._floor_serial = self._serial
