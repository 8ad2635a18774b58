"""Stateless services operating on a DataTable.

Services:
- ClipboardCodec: selection to TSV text, TSV text to paste Actions
- SortService: deterministic row sorting, optionally undoable
- detect_hotkey: default spreadsheet key map

The TSV format itself lives in ``tsv``.
"""

from .clipboard import ClipboardCodec
from .hotkeys import detect_hotkey
from .sort_service import SortService

__all__ = [
    "ClipboardCodec",
    "SortService",
    "detect_hotkey",
]
