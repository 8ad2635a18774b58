"""Tests for ColumnLayout and the table's column operations."""

import pytest

from editgrid.models.actions import ActionKind
from editgrid.models.columns import ColumnLayout
from editgrid.models.rejection import RejectionKind
from editgrid.models.selection import CellPos


class TestColumnLayout:
    def test_defaults_show_every_column(self):
        layout = ColumnLayout(3)

        assert layout.visible == [0, 1, 2]
        assert layout.hidden() == []

    def test_mapping(self):
        layout = ColumnLayout(3)
        layout.visible = [2, 0]

        assert layout.data_column(0) == 2
        assert layout.data_column(5) is None
        assert layout.position_of(0) == 1
        assert layout.position_of(1) is None
        assert layout.hidden() == [1]

    @pytest.mark.parametrize("columns", [[], [0, 0], [3], [-1]])
    def test_invalid_layouts_rejected(self, columns):
        layout = ColumnLayout(3)

        with pytest.raises(ValueError):
            layout.visible = columns

    def test_last_visible_column_cannot_be_hidden(self):
        layout = ColumnLayout(2)
        layout.visible = [1]

        assert layout.without(1) is None

    def test_with_shown(self):
        layout = ColumnLayout(3)
        layout.visible = [2]

        assert layout.with_shown(0, at=0) == [0, 2]
        assert layout.with_shown(1) == [2, 1]
        assert layout.with_shown(2) is None

    def test_with_moved(self):
        layout = ColumnLayout(3)

        assert layout.with_moved(0, 2) == [1, 2, 0]
        assert layout.with_moved(1, 1) is None
        assert layout.with_moved(0, 3) is None


class TestTableColumnOps:
    """Column changes are undoable and never touch row data."""

    def test_hide_and_undo(self, table):
        assert table.hide_column(0)

        assert table.columns.visible == [1]
        assert list(table) == [(1, "a"), (2, "b"), (3, "c")]
        assert table.history.undo_stack[-1].action.kind is ActionKind.SET_VISIBLE_COLUMNS

        table.undo()
        assert table.columns.visible == [0, 1]

    def test_hide_last_visible_column_refused(self, table, rejections):
        table.hide_column(0)

        assert table.hide_column(1) is False
        assert table.columns.visible == [1]
        assert rejections[0].kind is RejectionKind.VALIDATION

    def test_show_column(self, table):
        table.hide_column(0)

        assert table.show_column(0, at=1)
        assert table.columns.visible == [1, 0]

    def test_reorder_column(self, table):
        assert table.reorder_column(0, 1)
        assert table.columns.visible == [1, 0]

        table.undo()
        assert table.columns.visible == [0, 1]

    def test_hiding_collapses_selection(self, table):
        table.selection.set_anchor(CellPos(0, 1))

        table.hide_column(0)

        assert table.selection.cursor == CellPos(0, 0)

    def test_row_ids_unchanged(self, table):
        table.reorder_column(0, 1)
        table.hide_column(0)

        assert table.store.ids() == [1, 2, 3]
