"""Shared fixtures: a two-column row adapter with switchable policies."""

from typing import NamedTuple

import pytest

from editgrid.data.data_table import DataTable
from editgrid.models.row_adapter import EmptyRowContext, RowAdapter


class Item(NamedTuple):
    """Test payload: an integer column and a text column."""

    num: int = 0
    text: str = ""


class ItemAdapter(RowAdapter):
    """Row adapter for Item payloads.

    Every policy hook is driven by a plain attribute so tests can flip it.
    """

    def __init__(self):
        self.allow_insert = True
        self.allow_delete = True
        self.keep: set[int] = set()  # nums whose deletion is refused
        self.locked_columns: set[int] = set()
        self.refuse_values: set = set()  # values confirm_cell_write refuses
        self.unsortable: set[int] = set()
        self.no_editor = False
        self.persist = False
        self.hidden_nums: set[int] = set()  # nums the row filter hides

        self.writes = []  # CellWriteContext passed to confirm_cell_write
        self.updates = []  # (row_id, old, new) from on_row_updated
        self.empty_contexts = []
        self.copied = 0

    def num_columns(self):
        return 2

    def column_name(self, column):
        return ("Num", "Text")[column]

    def new_empty_row(self, context=EmptyRowContext.DEFAULT):
        self.empty_contexts.append(context)
        return Item()

    def clone_row_as_copied_base(self, row):
        self.copied += 1
        return self.clone_row(row)

    def get_cell_value(self, row, column):
        return row.num if column == 0 else row.text

    def set_cell_value(self, row, column, value):
        if column == 0:
            return row._replace(num=value)
        return row._replace(text=value)

    def decode_cell(self, text, row, column):
        if column == 0:
            try:
                return int(text)
            except ValueError:
                return None
        return text

    def create_cell_editor(self, row, column):
        if self.no_editor:
            return None
        return super().create_cell_editor(row, column)

    def is_editable_cell(self, row, column, position):
        return column not in self.locked_columns

    def confirm_cell_write(self, context):
        self.writes.append(context)
        return context.value not in self.refuse_values

    def confirm_row_deletion(self, row):
        return row.num not in self.keep

    def allow_row_insertions(self):
        return self.allow_insert

    def allow_row_deletions(self):
        return self.allow_delete

    def has_row_filter(self):
        return bool(self.hidden_nums)

    def filter_row(self, row):
        return row.num not in self.hidden_nums

    def on_row_updated(self, row_id, old, new):
        self.updates.append((row_id, old, new))

    def is_sortable_column(self, column):
        return column not in self.unsortable

    def persist_ui_state(self):
        return self.persist

    def serialize_row(self, row):
        return [row.num, row.text]

    def deserialize_row(self, data):
        return Item(*data)


SAMPLE_ROWS = [Item(1, "a"), Item(2, "b"), Item(3, "c")]


@pytest.fixture
def adapter():
    return ItemAdapter()


@pytest.fixture
def table(adapter):
    """Table holding (1, "a"), (2, "b"), (3, "c") with row ids 1, 2, 3."""
    return DataTable(adapter, rows=SAMPLE_ROWS)


@pytest.fixture
def make_table(adapter):
    """Factory for tables sharing the ``adapter`` fixture."""

    def _make(rows=(), style=None):
        return DataTable(adapter, rows=rows, style=style)

    return _make


@pytest.fixture
def rejections(table):
    """Rejections reported by ``table``, in order."""
    collected = []
    table.add_rejection_listener(collected.append)
    return collected
