"""Clipboard codec: selection to TSV text and TSV text to Actions.

Encoding reads cells through the row adapter and never changes the table.
Decoding is pure as well: it builds the Actions a paste would record and
leaves recording them (as one undo step) to the caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..debug_trace import get_logger, perf_timer
from ..models.actions import Action, InsertRows
from ..models.rejection import Rejection, RejectionKind
from ..models.row_adapter import CellWriteContext, EmptyRowContext, WriteSource
from ..models.selection import CellPos, Selection
from .tsv import parse_tsv, table_width, write_tsv

if TYPE_CHECKING:
    from ..data.data_table import DataTable

logger = get_logger(__name__)


class ClipboardCodec:
    """Copy/paste conversions for a DataTable.

    The codec holds no state of its own; all methods are static.
    """

    @staticmethod
    def encode(table: DataTable, selection: Selection) -> str:
        """Serialise the visible selected region.

        Every selected cell is written, editable or not. Hidden columns are
        never part of the selection, so they are never copied.

        Returns:
            TSV text with a trailing newline, or "" for an empty selection.
        """
        adapter, view, columns = table.adapter, table.view, table.columns
        data_columns = [
            col
            for col in (columns.data_column(pos) for pos in selection.selected_columns())
            if col is not None
        ]
        if not data_columns:
            return ""

        lines = []
        for position in selection.selected_rows():
            row = view.row_at(position)
            if row is None:
                continue
            lines.append([adapter.encode_cell(row.payload, col) for col in data_columns])
        return write_tsv(lines)

    @staticmethod
    def decode(table: DataTable, text: str, target: CellPos) -> list[Action]:
        """Turn pasted text into the Actions that apply it at ``target``.

        Rows that land on displayed rows become one SetCell per changed,
        editable, confirmed cell. Rows past the end become a single
        InsertRows of empty rows appended to the table with the fields
        overlaid, provided the adapter allows insertions. Fields past the last visible column are
        dropped and short rows leave the remaining cells unchanged.

        Args:
            table: Table to paste into. Not modified.
            text: TSV text.
            target: View coordinate of the top-left pasted cell.

        Returns:
            Actions in the order they must be applied.
        """
        parsed = parse_tsv(text)
        if not parsed:
            return []

        view, columns = table.view, table.columns
        if columns.data_column(target.column) is None:
            table.report_rejection(
                Rejection(RejectionKind.BOUNDS, "paste", f"no column at {target.column}")
            )
            return []

        width = table_width(parsed)
        if any(len(fields) != width for fields in parsed):
            table.report_rejection(
                Rejection(RejectionKind.MALFORMED, "paste", "rows have different field counts")
            )

        start = min(max(target.row, 0), len(view))
        existing = max(min(len(parsed), len(view) - start), 0)

        with perf_timer("clipboard decode", row_count=len(parsed)):
            actions: list[Action] = []
            for offset, fields in enumerate(parsed[:existing]):
                actions.extend(
                    ClipboardCodec._overwrite_row(table, start + offset, fields, target.column)
                )

            extra = parsed[existing:]
            if extra:
                inserted = ClipboardCodec._build_rows(table, extra, target.column)
                if inserted is not None:
                    actions.append(inserted)

        return actions

    @staticmethod
    def _decoded_cells(
        table: DataTable, fields: list[str], first_column: int
    ) -> list[tuple[int, str]]:
        """Pair fields with data columns, dropping those past the last visible column."""
        cells = []
        for offset, field in enumerate(fields):
            column = table.columns.data_column(first_column + offset)
            if column is None:
                break
            cells.append((column, field))
        return cells

    @staticmethod
    def _overwrite_row(
        table: DataTable, position: int, fields: list[str], first_column: int
    ) -> list[Action]:
        row = table.view.row_at(position)
        payload = row.payload
        writes: list[Action] = []

        for column, field in ClipboardCodec._decoded_cells(table, fields, first_column):
            value = table.adapter.decode_cell(field, payload, column)
            if value is None:
                table.report_rejection(
                    Rejection(RejectionKind.MALFORMED, "paste", f"cannot read {field!r}")
                )
                continue
            action = table.store.build_cell_write(
                row.row_id, column, value, WriteSource.PASTE, payload
            )
            if action is not None:
                payload = action.new_payload
                writes.append(action)

        return writes

    @staticmethod
    def _build_rows(
        table: DataTable, rows: list[list[str]], first_column: int
    ) -> InsertRows | None:
        adapter, store = table.adapter, table.store
        if not adapter.allow_row_insertions():
            table.report_rejection(
                Rejection(
                    RejectionKind.VALIDATION,
                    "paste",
                    f"row insertion not permitted, {len(rows)} row(s) dropped",
                )
            )
            return None

        at = len(store)
        placements = []
        for offset, fields in enumerate(rows):
            payload = ClipboardCodec._overlay(
                table, adapter.new_empty_row(EmptyRowContext.PASTE), fields, first_column, at + offset
            )
            placements.append((at + offset, store.new_row(payload)))

        logger.debug("Paste appends %d row(s) at %d", len(placements), at)
        return InsertRows(tuple(placements))

    @staticmethod
    def _overlay(
        table: DataTable, payload: Any, fields: list[str], first_column: int, position: int
    ) -> Any:
        """Write pasted fields into a row that is not in the table yet."""
        adapter = table.adapter
        for column, field in ClipboardCodec._decoded_cells(table, fields, first_column):
            if not adapter.is_editable_cell(payload, column, position):
                continue
            value = adapter.decode_cell(field, payload, column)
            if value is None:
                table.report_rejection(
                    Rejection(RejectionKind.MALFORMED, "paste", f"cannot read {field!r}")
                )
                continue
            proposed = adapter.set_cell_value(payload, column, value)
            context = CellWriteContext(None, column, payload, proposed, value, WriteSource.PASTE)
            if adapter.confirm_cell_write(context):
                payload = proposed
        return payload
