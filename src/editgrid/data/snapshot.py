"""Table snapshots for persistence.

A snapshot is the row sequence plus the column layout, and optionally the
selection when the adapter opts in with ``persist_ui_state``. Payloads go
through the adapter's ``serialize_row``/``deserialize_row`` so the snapshot
is plain JSON data. Reading and writing files is the host's business.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..debug_trace import get_logger, log_perf
from ..models.rejection import Rejection, RejectionKind
from ..models.selection import CellPos

if TYPE_CHECKING:
    from .data_table import DataTable

logger = get_logger(__name__)

SNAPSHOT_VERSION = 1


@dataclass
class TableSnapshot:
    """Serialisable state of one table.

    Attributes:
        rows: Serialised payloads in view order.
        columns: Visible data columns in display order.
        ui_state: Selection anchor/cursor, or None when not persisted.
    """

    rows: list[Any] = field(default_factory=list)
    columns: list[int] = field(default_factory=list)
    ui_state: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "version": SNAPSHOT_VERSION,
            "rows": list(self.rows),
            "columns": list(self.columns),
        }
        if self.ui_state is not None:
            data["ui_state"] = dict(self.ui_state)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TableSnapshot:
        """Build a snapshot from ``to_dict`` output.

        Raises:
            ValueError: If the data does not have the snapshot shape.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot must be an object, got {type(data).__name__}")
        version = data.get("version", SNAPSHOT_VERSION)
        if version != SNAPSHOT_VERSION:
            raise ValueError(f"Unsupported snapshot version: {version!r}")

        rows = data.get("rows", [])
        columns = data.get("columns", [])
        if not isinstance(rows, list) or not isinstance(columns, list):
            raise ValueError("Snapshot rows and columns must be lists")
        if not all(isinstance(col, int) for col in columns):
            raise ValueError("Snapshot columns must be integers")

        ui_state = data.get("ui_state")
        if ui_state is not None and not isinstance(ui_state, dict):
            raise ValueError("Snapshot ui_state must be an object")
        return cls(rows=rows, columns=columns, ui_state=ui_state)

    def dumps(self, **kwargs) -> str:
        """Encode as JSON. Keyword arguments go to ``json.dumps``."""
        return json.dumps(self.to_dict(), **kwargs)

    @classmethod
    def loads(cls, text: str) -> TableSnapshot:
        """Decode JSON produced by ``dumps``.

        Raises:
            ValueError: For invalid JSON or an invalid snapshot shape.
        """
        return cls.from_dict(json.loads(text))


def _selection_state(table: DataTable) -> dict[str, Any] | None:
    anchor, cursor = table.selection.anchor, table.selection.cursor
    if anchor is None or cursor is None:
        return None
    return {
        "anchor": [anchor.row, anchor.column],
        "cursor": [cursor.row, cursor.column],
        "row_mode": table.selection.is_row_selection,
    }


@log_perf
def capture(table: DataTable) -> TableSnapshot:
    """Take a snapshot of the table's rows and layout."""
    adapter = table.adapter
    ui_state = _selection_state(table) if adapter.persist_ui_state() else None
    return TableSnapshot(
        rows=[adapter.serialize_row(payload) for payload in table],
        columns=table.columns.visible,
        ui_state=ui_state,
    )


@log_perf
def restore(table: DataTable, snapshot: TableSnapshot) -> None:
    """Load a snapshot into the table.

    History is cleared and the loaded state counts as saved. A column layout
    that does not fit the adapter is reported as malformed and the current
    layout is kept.
    """
    adapter = table.adapter
    if table.columns.is_valid_layout(snapshot.columns):
        table.columns.visible = snapshot.columns
    else:
        table.report_rejection(
            Rejection(RejectionKind.MALFORMED, "restore", f"bad column layout {snapshot.columns!r}")
        )

    table.replace(adapter.deserialize_row(data) for data in snapshot.rows)

    if snapshot.ui_state is not None and adapter.persist_ui_state():
        _restore_selection(table, snapshot.ui_state)

    logger.debug("Restored %d rows", len(table))


def _restore_selection(table: DataTable, state: dict[str, Any]) -> None:
    try:
        anchor = CellPos(*(int(v) for v in state["anchor"]))
        cursor = CellPos(*(int(v) for v in state["cursor"]))
    except (KeyError, TypeError, ValueError):
        table.report_rejection(
            Rejection(RejectionKind.MALFORMED, "restore", "bad selection state")
        )
        return

    if state.get("row_mode"):
        table.selection.select_row(anchor.row)
        table.selection.extend_to(cursor)
    else:
        table.selection.set_anchor(anchor)
        table.selection.extend_to(cursor)
