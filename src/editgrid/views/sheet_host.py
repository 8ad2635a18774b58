"""tksheet host binding.

SheetHost lets a ``tksheet.Sheet`` act as the renderer and input source of a
DataTable. The sheet shows the table's visible columns in view order; the
engine stays the source of truth:

- cell edits are routed through ``edit_validation`` into the edit session,
  and returning None tells tksheet to drop a refused edit
- undo, clipboard, delete and duplicate keys become engine events
- selection changes in the sheet are mirrored into the table's selection
- observer notifications repopulate the sheet on the next idle cycle
"""

from __future__ import annotations

import tkinter as tk
from typing import Any

from tksheet import Sheet

from ..data.data_table import DataTable, TickResult
from ..debug_trace import get_logger
from ..models.events import (
    CellDragged,
    CellPressed,
    FocusLost,
    InputEvent,
    KeyPressed,
    RowHeaderPressed,
    TextEdited,
    TextPasted,
)
from ..models.rejection import Rejection, RejectionKind
from ..models.row import RowId

logger = get_logger(__name__)

# Tk event.state modifier bits
_SHIFT_MASK = 0x0001
_CONTROL_MASK = 0x0004

# Keys the engine handles instead of tksheet
KEY_SEQUENCES = (
    "<Control-z>",
    "<Control-Z>",
    "<Control-y>",
    "<Control-Y>",
    "<Control-c>",
    "<Control-C>",
    "<Control-x>",
    "<Control-X>",
    "<Control-d>",
    "<Control-D>",
    "<Control-a>",
    "<Control-minus>",
    "<Control-plus>",
    "<Delete>",
)
PASTE_SEQUENCES = ("<Control-v>", "<Control-V>")

# tksheet bindings replaced by the engine
ENGINE_OWNED_BINDINGS = (
    "undo",
    "copy",
    "cut",
    "paste",
    "delete",
    "rc_insert_row",
    "rc_delete_row",
    "rc_insert_column",
    "rc_delete_column",
    "column_drag_and_drop",
    "row_drag_and_drop",
    "sort_cells",
    "sort_row",
    "sort_column",
    "sort_rows",
    "sort_columns",
)


class SheetHost:
    """Keeps a tksheet Sheet and a DataTable in step.

    Args:
        table: Engine state to display and edit.
        sheet: A tksheet ``Sheet`` (or an object with the same methods).
    """

    def __init__(self, table: DataTable, sheet: Sheet):
        self.table = table
        self.sheet = sheet
        self.last_result: TickResult | None = None

        # Suppresses selection echo while the sheet is being repopulated
        self._populating = False
        self._refresh_pending = False

        sheet.edit_validation(self._validate_edit)
        for binding in ("cell_select", "drag_select_cells", "shift_cell_select", "row_select"):
            sheet.extra_bindings(binding, self._on_select)
        for sequence in KEY_SEQUENCES:
            sheet.bind(sequence, self._on_key)
        for sequence in PASTE_SEQUENCES:
            sheet.bind(sequence, self._on_paste)

        table.add_observer(self._on_table_changed)
        self.populate()

    def close(self) -> None:
        """Stop listening to the table."""
        self.table.remove_observer(self._on_table_changed)

    # --- Engine -> sheet ---

    def display_data(self) -> tuple[list[str], list[list[str]]]:
        """Headers and cell text of the displayed rows and visible columns."""
        adapter = self.table.adapter
        visible = self.table.columns.visible
        headers = [adapter.column_name(col) for col in visible]
        data = [
            [adapter.encode_cell(row.payload, col) for col in visible]
            for row in self.table.view.rows()
        ]
        return headers, data

    def populate(self) -> None:
        """Push the table's current content and selection into the sheet."""
        self._refresh_pending = False
        headers, data = self.display_data()
        self._populating = True
        try:
            self.sheet.headers(headers)
            self.sheet.set_sheet_data(data, reset_col_positions=False)
            self._show_selection()
        finally:
            self._populating = False

    def _show_selection(self) -> None:
        box = self.table.selection.rect()
        self.sheet.deselect()
        if box is None:
            return
        top, left, bottom, right = box
        type_ = "rows" if self.table.selection.is_row_selection else "cells"
        self.sheet.create_selection_box(top, left, bottom + 1, right + 1, type_=type_)

    def _on_table_changed(self, table: DataTable, affected: set[RowId]) -> None:
        # Coalesce every notification of one tk callback into one repopulation
        if self._refresh_pending:
            return
        self._refresh_pending = True
        self.sheet.after_idle(self.populate)

    # --- Sheet -> engine ---

    def dispatch(self, events: list[InputEvent]) -> TickResult:
        """Run one engine tick and publish clipboard text it produced."""
        result = self.table.process(events)
        self.last_result = result
        if result.clipboard_text is not None:
            self.sheet.clipboard_clear()
            self.sheet.clipboard_append(result.clipboard_text)
        for rejection in result.rejections:
            logger.debug("Sheet action dropped: %s", rejection)
        return result

    def _on_select(self, event) -> None:
        if self._populating:
            return
        selected = getattr(event, "selected", None)
        box = getattr(selected, "box", None)
        if not box:
            return

        from_r, from_c, upto_r, upto_c = box
        if getattr(selected, "type_", "cells") == "rows":
            events: list[InputEvent] = [RowHeaderPressed(from_r)]
            if upto_r - 1 > from_r:
                events.append(RowHeaderPressed(upto_r - 1, shift=True))
        else:
            events = [CellPressed(from_r, from_c), CellDragged(upto_r - 1, upto_c - 1)]
        self.dispatch(events)

    def _on_key(self, event) -> str:
        state = getattr(event, "state", 0)
        self.dispatch(
            [
                KeyPressed(
                    event.keysym,
                    ctrl=bool(state & _CONTROL_MASK),
                    shift=bool(state & _SHIFT_MASK),
                )
            ]
        )
        return "break"

    def _on_paste(self, event) -> str:
        try:
            text = self.sheet.clipboard_get()
        except tk.TclError:
            # Empty clipboard or non-text content
            return "break"
        self.dispatch([TextPasted(text)])
        return "break"

    def _validate_edit(self, event) -> Any:
        """Route a finished tksheet cell edit through the edit session.

        Returns:
            Cell text to display, or None to make tksheet drop the edit.
        """
        table = self.table
        row = table.view.row_at(event.row)
        column = table.columns.data_column(event.column)
        if row is None or column is None:
            return None

        text = event.value if event.value is not None else ""
        value = table.adapter.decode_cell(text, row.payload, column)
        if value is None:
            table.report_rejection(
                Rejection(RejectionKind.MALFORMED, "edit", f"cannot read {text!r}")
            )
            return None

        self.dispatch(
            [CellPressed(event.row, event.column, clicks=2), TextEdited(value), FocusLost()]
        )

        current = table.store.row_by_id(row.row_id)
        if current is None or table.adapter.get_cell_value(current.payload, column) != value:
            return None
        return table.adapter.encode_cell(current.payload, column)


def create_sheet(parent: tk.Misc, table: DataTable, **kwargs) -> SheetHost:
    """Build a tksheet Sheet driven by ``table``.

    tksheet's own undo, clipboard, row/column insertion and sorting are
    disabled; the engine provides them.

    Args:
        parent: Tk container for the sheet.
        table: Engine state to show.
        **kwargs: Extra ``Sheet`` options (height, width, ...).

    Returns:
        The host; the widget is ``host.sheet`` and still needs packing.
    """
    kwargs.setdefault("show_row_index", True)
    sheet = Sheet(parent, **kwargs)
    sheet.enable_bindings()
    sheet.disable_bindings(*ENGINE_OWNED_BINDINGS)
    return SheetHost(table, sheet)
