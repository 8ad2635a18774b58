"""DataTable: the editable grid aggregate.

One DataTable exclusively owns everything a grid needs between UI ticks:

- store: rows in order with stable identifiers
- view: the rows that pass the adapter's row filter, as displayed
- columns: visibility and display order
- selection: anchor/cursor over view coordinates
- edit: the single in-place cell editor
- history: applied Actions for undo/redo and dirty tracking

The host calls ``process(events)`` once per tick. Every mutation flows through
``record`` into the ActionLog, which applies it, and then back out through
``notify_changed`` so the selection, the edit session and observers catch up.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any

from ..debug_trace import get_logger
from ..models.actions import Action, SetVisibleColumns
from ..models.columns import ColumnLayout
from ..models.events import (
    CellDragged,
    CellPressed,
    FocusLost,
    InputEvent,
    KeyPressed,
    RowHeaderPressed,
    TextEdited,
    TextPasted,
    Triggered,
    ValueDropped,
)
from ..models.rejection import Rejection, RejectionKind
from ..models.row import RowId
from ..models.row_adapter import RowAdapter, WriteSource
from ..models.selection import CellPos, Selection
from ..models.ui_actions import (
    ActivateSelectedCell,
    CancelEdit,
    ClearSelection,
    CommitEdit,
    CommitEditAndMove,
    CopySelection,
    CutSelection,
    DeleteRow,
    DuplicateRow,
    HideColumn,
    InsertEmptyRows,
    InsertRowAbove,
    InsertRowBelow,
    MoveSelection,
    PasteText,
    Redo,
    ReorderColumn,
    SelectAll,
    SelectionDuplicateValues,
    ShowColumn,
    SortByColumn,
    UiAction,
    Undo,
)
from ..services.clipboard import ClipboardCodec
from ..services.hotkeys import detect_hotkey
from ..services.sort_service import Comparator, SortService
from ..services.tsv import parse_tsv, table_width
from ..settings import TableStyle
from .action_log import ActionLog
from .edit_session import EditGesture, EditSession
from .row_store import RowStore
from .row_view import RowView

logger = get_logger(__name__)

Observer = Callable[["DataTable", set[RowId]], None]
RejectionListener = Callable[[Rejection], None]


@dataclass
class TickResult:
    """What one ``process`` call produced.

    Attributes:
        clipboard_text: Text the host should put on the system clipboard
            (set by copy and cut), or None.
        changed: Whether row data or column layout changed.
        rejections: Operations dropped during the tick.
    """

    clipboard_text: str | None = None
    changed: bool = False
    rejections: list[Rejection] = field(default_factory=list)


class DataTable:
    """Editable grid state for rows handled by a RowAdapter.

    Usage:
        table = DataTable(adapter, rows=[...])
        result = table.process([CellPressed(0, 1, clicks=2), TextEdited("x"), FocusLost()])
        if result.clipboard_text is not None:
            host.set_clipboard(result.clipboard_text)

    Args:
        adapter: Domain semantics for the row payloads.
        rows: Initial payloads, loaded without history.
        style: Policy configuration. Defaults to ``TableStyle.fresh()``.
    """

    def __init__(
        self,
        adapter: RowAdapter,
        rows: Iterable[Any] = (),
        style: TableStyle | None = None,
    ):
        self.adapter = adapter
        self.style = style if style is not None else TableStyle.fresh()

        self.columns = ColumnLayout(adapter.num_columns())
        self.store = RowStore(adapter, record=self.record, reject=self.report_rejection)
        self.view = RowView(self.store, adapter)
        self.selection = Selection(self._bounds)
        self.edit = EditSession(self)
        self.history = ActionLog(
            self, self.style.max_undo_history, on_applied=self._on_applied
        )

        self._observers: list[Observer] = []
        self._rejection_listeners: list[RejectionListener] = []
        # Result of the tick being processed, None outside process()
        self._tick: TickResult | None = None

        self.store.load(rows)
        self.view.refresh()

    def __repr__(self) -> str:
        return f"DataTable({len(self.store)} rows, {len(self.columns)}/{self.columns.num_columns} columns)"

    def _bounds(self) -> tuple[int, int]:
        return len(self.view), len(self.columns)

    # --- Collection access (every row in store order, displayed or not) ---

    def __len__(self) -> int:
        return len(self.store)

    def __iter__(self) -> Iterator[Any]:
        return iter(self.store.payloads())

    def __getitem__(self, position: int) -> Any:
        row = self.store.row_at(position)
        if row is None:
            raise IndexError(position)
        return row.payload

    def _reset(self, saved: bool = False) -> None:
        """Drop UI state and history after a programmatic bulk change."""
        if self.edit.is_active:
            self.edit.cancel()
        self.selection.clear()
        self.history.clear()
        if saved:
            self.history.mark_saved()
        self.notify_changed(set(self.store.ids()), structural=True)

    def take(self) -> list[Any]:
        """Remove and return every payload. Not undoable."""
        payloads = self.store.payloads()
        self.store.load([])
        self._reset()
        return payloads

    def replace(self, payloads: Iterable[Any]) -> list[Any]:
        """Swap in new payloads as a freshly loaded, saved table.

        Returns:
            The payloads that were replaced.
        """
        old = self.store.payloads()
        self.store.load(payloads)
        self._reset(saved=True)
        return old

    def retain(self, predicate: Callable[[Any], bool]) -> int:
        """Keep only payloads matching ``predicate``. Not undoable.

        Returns:
            Number of rows removed.
        """
        rows = list(self.store)
        kept = [row for row in rows if predicate(row.payload)]
        if len(kept) == len(rows):
            return 0
        self.store.load_rows(kept)
        self._reset()
        return len(rows) - len(kept)

    def extend(self, payloads: Iterable[Any]) -> int:
        """Append payloads as new rows. Not undoable.

        Returns:
            Number of rows appended.
        """
        added = [self.store.new_row(payload) for payload in payloads]
        if not added:
            return 0
        self.store.load_rows(list(self.store) + added)
        self._reset()
        return len(added)

    # --- Configuration ---

    def set_style(self, style: TableStyle) -> None:
        """Swap the policy configuration; history capacity follows it."""
        self.style = style
        self.history.capacity = style.max_undo_history

    # --- Observers ---

    def add_observer(self, callback: Observer) -> None:
        """Add observer callback, called as ``callback(table, affected_row_ids)``."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Observer) -> None:
        """Remove observer callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def add_rejection_listener(self, callback: RejectionListener) -> None:
        if callback not in self._rejection_listeners:
            self._rejection_listeners.append(callback)

    def remove_rejection_listener(self, callback: RejectionListener) -> None:
        if callback in self._rejection_listeners:
            self._rejection_listeners.remove(callback)

    def report_rejection(self, rejection: Rejection) -> None:
        """Publish a dropped operation to listeners and the current tick."""
        logger.debug("Rejected %s", rejection)
        if self._tick is not None:
            self._tick.rejections.append(rejection)
        for callback in list(self._rejection_listeners):
            try:
                callback(rejection)
            except Exception:
                logger.exception("Rejection listener %r failed", callback)

    def notify_changed(self, affected: set[RowId], structural: bool = False) -> None:
        """Bring dependent state up to date and tell observers.

        Args:
            affected: Identifiers of the rows that changed.
            structural: Rows or columns moved, appeared or disappeared.
        """
        before = self.view.ids()
        if self.view.refresh():
            # A write can also move a row across the filter
            structural = True
            self.selection.follow_rows(
                lambda position: self.view.position_of(before[position])
                if 0 <= position < len(before)
                else None
            )
        if structural:
            self.selection.revalidate()
            self.edit.revalidate()
        if self._tick is not None:
            self._tick.changed = True
        for callback in list(self._observers):
            try:
                callback(self, affected)
            except Exception:
                logger.exception("Observer %r failed", callback)

    def refilter(self) -> None:
        """Re-run the adapter's row filter after its criteria changed."""
        self.notify_changed(set())

    def _on_applied(self, action: Action, reverted: bool) -> None:
        self.notify_changed(action.affected_ids(), action.is_structural)

    # --- History ---

    def record(self, action: Action) -> None:
        """Apply an action and push it for undo."""
        self.history.record(action)

    def undo(self) -> bool:
        """Undo the last action, committing any open edit first."""
        self.edit.commit()
        return self.history.undo()

    def redo(self) -> bool:
        """Redo the last undone action. An open edit is discarded, not committed."""
        self.edit.cancel()
        return self.history.redo()

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def is_dirty(self) -> bool:
        """Whether the table differs from the last saved position."""
        return self.history.is_dirty()

    def mark_saved(self) -> None:
        self.history.mark_saved()

    # --- Selection helpers ---

    def _selected_cells(self) -> list[tuple[RowId, int]]:
        """Selected cells as (row_id, data column) pairs, row-major."""
        cells = []
        for position, visible in self.selection.cells():
            row = self.view.row_at(position)
            column = self.columns.data_column(visible)
            if row is not None and column is not None:
                cells.append((row.row_id, column))
        return cells

    def _paste_target(self) -> CellPos:
        box = self.selection.rect()
        if box is None:
            return CellPos(0, 0)
        return CellPos(box[0], box[1])

    # --- Row operations ---

    def insert_empty_rows(self, count: int = 1, at: int | None = None) -> bool:
        """Insert empty rows in front of display position ``at``.

        When ``at`` is None the rows go below the last selected row, or at
        the end without a selection. The first new row gets the cursor if
        the row filter displays it.
        """
        self.edit.commit()
        rows = self.view.store_positions(self.selection.selected_rows())
        if at is not None:
            index = self.view.store_index(at)
        elif rows:
            index = rows[-1] + 1
        else:
            index = len(self.store)
        action = self.store.insert_empty_rows(index, count)
        if action is None:
            return False
        first = self.view.position_of(action.placements[0][1].row_id)
        if first is not None:
            cursor = self.selection.cursor
            self.selection.set_anchor(CellPos(first, cursor.column if cursor else 0))
        return True

    def delete_selected_rows(self) -> bool:
        self.edit.commit()
        rows = self.view.store_positions(self.selection.selected_rows())
        return self.store.remove_rows(rows) is not None

    def duplicate_selected_rows(self) -> bool:
        """Duplicate every selected row below itself as a user copy."""
        self.edit.commit()
        rows = self.view.store_positions(self.selection.selected_rows())
        if not rows:
            return False
        return self.store.duplicate_rows(rows, user_copy=True) is not None

    def clear_selection(self) -> bool:
        """Reset the selected editable cells to their empty values."""
        self.edit.commit()
        return self.store.clear_cells(self._selected_cells()) is not None

    def fill_selection(self) -> bool:
        """Copy the selection's top row into its other rows, column by column."""
        self.edit.commit()
        rows = self.selection.selected_rows()
        if len(rows) < 2:
            return False
        source = self.view.row_at(rows[0])
        if source is None:
            return False
        targets = [cell for cell in self._selected_cells() if cell[0] != source.row_id]
        return self.store.fill_cells(source.row_id, targets) is not None

    def drop_value(self, pos: CellPos, value: Any) -> bool:
        """Write a dragged value into a cell.

        Drops onto non-editable cells are refused before the adapter's
        write-confirmation hook sees them.
        """
        row = self.view.row_at(pos.row)
        column = self.columns.data_column(pos.column)
        if row is None or column is None:
            self.report_rejection(Rejection(RejectionKind.BOUNDS, "drop", f"no cell at {pos}"))
            return False
        if not self.store.is_editable(row.row_id, column):
            self.report_rejection(
                Rejection(RejectionKind.VALIDATION, "drop", f"cell {pos} is not editable")
            )
            return False
        self.edit.commit()
        return self.store.set_cell(row.row_id, column, value, WriteSource.DROP) is not None

    def sort_by(
        self,
        column: int,
        ascending: bool = True,
        undoable: bool = True,
        comparator: Comparator | None = None,
    ) -> bool:
        """Sort rows on a data column. See ``SortService.sort_by``."""
        self.edit.commit()
        return SortService.sort_by(self, column, comparator, ascending, undoable)

    # --- Column operations ---

    def _set_layout(self, layout: list[int] | None, operation: str, detail: str) -> bool:
        if layout is None:
            self.report_rejection(Rejection(RejectionKind.VALIDATION, operation, detail))
            return False
        self.edit.commit()
        self.record(SetVisibleColumns(tuple(self.columns.visible), tuple(layout)))
        return True

    def hide_column(self, column: int) -> bool:
        """Hide a data column. The last visible column stays."""
        return self._set_layout(
            self.columns.without(column), "hide_column", f"cannot hide column {column}"
        )

    def show_column(self, column: int, at: int | None = None) -> bool:
        """Show a hidden data column at visible position ``at`` (end when None)."""
        return self._set_layout(
            self.columns.with_shown(column, at), "show_column", f"cannot show column {column}"
        )

    def reorder_column(self, from_pos: int, to_pos: int) -> bool:
        """Move the column at one visible position to another."""
        return self._set_layout(
            self.columns.with_moved(from_pos, to_pos),
            "reorder_column",
            f"cannot move column {from_pos} to {to_pos}",
        )

    # --- Clipboard ---

    def copy(self) -> str:
        """Encode the visible selected region as TSV text."""
        self.edit.commit()
        return ClipboardCodec.encode(self, self.selection)

    def cut(self) -> str:
        """Copy the selection, then clear its editable cells as one undo step."""
        text = self.copy()
        if text:
            with self.history.group("Cut"):
                self.store.clear_cells(self._selected_cells())
        return text

    def paste(self, text: str, target: CellPos | None = None) -> bool:
        """Paste TSV text at ``target`` (the selection's top-left when None).

        Everything the paste changes, including appended rows, is recorded
        as a single undo step and the pasted region becomes the selection.

        Returns:
            True if anything changed.
        """
        self.edit.commit()
        if target is None:
            target = self._paste_target()

        actions = ClipboardCodec.decode(self, text, target)
        if not actions:
            return False

        with self.history.group("Paste"):
            for action in actions:
                self.record(action)

        rows = parse_tsv(text)
        self.selection.set_anchor(target)
        self.selection.extend_to(
            CellPos(target.row + len(rows) - 1, target.column + table_width(rows) - 1)
        )
        return True

    # --- UI actions ---

    def apply_ui_action(self, action: UiAction) -> bool:
        """Perform a host-visible action.

        Unknown variants are logged and ignored so hosts built against a
        newer action set keep working.

        Returns:
            True if the action did something.
        """
        selection = self.selection

        if isinstance(action, ActivateSelectedCell):
            cursor = selection.cursor
            return cursor is not None and self.edit.begin(cursor, EditGesture.KEYBOARD)
        elif isinstance(action, CancelEdit):
            return self.edit.cancel()
        elif isinstance(action, CommitEdit):
            was_active = self.edit.is_active
            self.edit.commit()
            return was_active
        elif isinstance(action, CommitEditAndMove):
            self.edit.commit()
            return selection.move_cursor(action.direction)
        elif isinstance(action, MoveSelection):
            self.edit.commit()
            return selection.move_cursor(action.direction, action.extend)
        elif isinstance(action, SelectAll):
            return selection.select_all()
        elif isinstance(action, Undo):
            return self.undo()
        elif isinstance(action, Redo):
            return self.redo()
        elif isinstance(action, (CopySelection, CutSelection)):
            text = self.copy() if isinstance(action, CopySelection) else self.cut()
            if not text:
                return False
            if self._tick is not None:
                self._tick.clipboard_text = text
            return True
        elif isinstance(action, PasteText):
            return self.paste(action.text)
        elif isinstance(action, ClearSelection):
            return self.clear_selection()
        elif isinstance(action, SelectionDuplicateValues):
            return self.fill_selection()
        elif isinstance(action, InsertRowAbove):
            rows = selection.selected_rows()
            return self.insert_empty_rows(1, rows[0] if rows else 0)
        elif isinstance(action, InsertRowBelow):
            return self.insert_empty_rows(1)
        elif isinstance(action, InsertEmptyRows):
            return self.insert_empty_rows(action.count, action.at)
        elif isinstance(action, DuplicateRow):
            return self.duplicate_selected_rows()
        elif isinstance(action, DeleteRow):
            return self.delete_selected_rows()
        elif isinstance(action, SortByColumn):
            return self.sort_by(action.column, action.ascending, undoable=True)
        elif isinstance(action, HideColumn):
            return self.hide_column(action.column)
        elif isinstance(action, ShowColumn):
            return self.show_column(action.column, action.at)
        elif isinstance(action, ReorderColumn):
            return self.reorder_column(action.from_pos, action.to_pos)

        logger.debug("Ignoring unknown UI action %s", action.name)
        return False

    # --- Tick processing ---

    def process(self, events: Iterable[InputEvent]) -> TickResult:
        """Handle one tick's worth of input events, in order."""
        result = TickResult()
        self._tick = result
        try:
            for event in events:
                self._handle_event(event)
        finally:
            self._tick = None
        return result

    def _handle_event(self, event: InputEvent) -> None:
        selection = self.selection

        if isinstance(event, CellPressed):
            pos = CellPos(event.row, event.column)
            if event.clicks >= 2:
                selection.set_anchor(pos)
                self.edit.begin(pos, EditGesture.DOUBLE_CLICK)
            elif event.shift:
                self.edit.commit()
                selection.extend_to(pos)
            elif event.ctrl:
                self.edit.commit()
                selection.toggle_row(event.row)
            else:
                if self.edit.is_active and self.edit.position != pos:
                    self.edit.commit()
                selection.set_anchor(pos)
                if self.style.single_click_edit_mode:
                    self.edit.begin(pos, EditGesture.SINGLE_CLICK)
        elif isinstance(event, CellDragged):
            selection.extend_to(CellPos(event.row, event.column))
        elif isinstance(event, RowHeaderPressed):
            self.edit.commit()
            if event.ctrl:
                selection.toggle_row(event.row)
            elif event.shift and selection.is_row_selection:
                selection.extend_to(CellPos(event.row, 0))
            else:
                selection.select_row(event.row)
        elif isinstance(event, KeyPressed):
            action = detect_hotkey(
                event.key, event.ctrl, event.shift, event.alt, editing=self.edit.is_active
            )
            if action is not None:
                self.apply_ui_action(action)
        elif isinstance(event, TextEdited):
            self.edit.update(event.value)
        elif isinstance(event, FocusLost):
            self.edit.commit()
        elif isinstance(event, ValueDropped):
            self.drop_value(CellPos(event.row, event.column), event.value)
        elif isinstance(event, TextPasted):
            self.paste(event.text)
        elif isinstance(event, Triggered):
            self.apply_ui_action(event.action)
        else:
            logger.debug("Ignoring unknown event %r", event)
