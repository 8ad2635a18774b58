"""Editable grid state engine.

Row storage, selection, in-place cell editing, validated mutation,
undo/redo history and TSV copy/paste for a spreadsheet-like grid. Rendering
is left to the host; ``editgrid.views`` binds the engine to tksheet.
"""

from .data.action_log import ActionLog
from .data.data_table import DataTable, TickResult
from .data.edit_session import EditGesture, EditSession, EditState
from .data.row_store import RowStore
from .data.snapshot import TableSnapshot, capture, restore
from .models.columns import ColumnLayout
from .models.rejection import Rejection, RejectionKind
from .models.row import Row, RowId
from .models.row_adapter import CellWriteContext, EmptyRowContext, RowAdapter, WriteSource
from .models.selection import CellPos, Selection
from .services.clipboard import ClipboardCodec
from .services.sort_service import SortService
from .settings import ScrollBarVisibility, TableStyle

__version__ = "0.1.0"

__all__ = [
    # Aggregate
    "DataTable",
    "TickResult",
    # Components
    "ActionLog",
    "ColumnLayout",
    "EditSession",
    "EditState",
    "EditGesture",
    "RowStore",
    "Selection",
    "CellPos",
    # Row adapter
    "RowAdapter",
    "Row",
    "RowId",
    "CellWriteContext",
    "EmptyRowContext",
    "WriteSource",
    # Errors
    "Rejection",
    "RejectionKind",
    # Services
    "ClipboardCodec",
    "SortService",
    # Persistence
    "TableSnapshot",
    "capture",
    "restore",
    # Configuration
    "TableStyle",
    "ScrollBarVisibility",
]
