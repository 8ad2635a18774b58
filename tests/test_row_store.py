"""Tests for RowStore gated operations and row identity."""

from conftest import Item

from editgrid.models.actions import ActionKind
from editgrid.models.rejection import RejectionKind
from editgrid.models.row_adapter import EmptyRowContext, WriteSource


class TestIdentity:
    """Row identifiers are stable and never reused."""

    def test_loaded_rows_get_sequential_ids(self, table):
        assert table.store.ids() == [1, 2, 3]

    def test_inserted_rows_get_fresh_ids(self, table):
        table.store.insert_rows(1, [Item(9, "z")])

        assert table.store.ids() == [1, 4, 2, 3]
        assert list(table) == [(1, "a"), (9, "z"), (2, "b"), (3, "c")]

    def test_ids_not_reused_after_removal(self, table):
        table.store.remove_rows([2])
        table.store.insert_rows(2, [Item(4, "d")])

        assert table.store.ids() == [1, 2, 4]

    def test_position_lookup_follows_structure(self, table):
        table.store.remove_rows([0])

        assert table.store.position_of(1) is None
        assert table.store.position_of(3) == 1
        assert table.store.row_by_id(2).payload == (2, "b")


class TestInsertRows:
    """Tests for insert_rows and insert_empty_rows."""

    def test_position_is_clamped(self, table):
        table.store.insert_rows(99, [Item(8, "end")])
        table.store.insert_rows(-5, [Item(7, "start")])

        assert table[0] == (7, "start")
        assert table[len(table) - 1] == (8, "end")

    def test_insertion_disallowed_is_a_noop(self, table, adapter, rejections):
        adapter.allow_insert = False

        assert table.store.insert_rows(0, [Item(9, "z")]) is None
        assert len(table) == 3
        assert not table.can_undo()
        assert rejections[0].kind is RejectionKind.VALIDATION

    def test_empty_payload_list_records_nothing(self, table):
        assert table.store.insert_rows(0, []) is None
        assert not table.can_undo()

    def test_insert_empty_rows_uses_insertion_context(self, table, adapter):
        action = table.store.insert_empty_rows(3, count=2)

        assert action.kind is ActionKind.INSERT_ROWS
        assert list(table)[3:] == [(0, ""), (0, "")]
        assert adapter.empty_contexts == [EmptyRowContext.INSERTION] * 2

    def test_insert_records_one_action(self, table):
        table.store.insert_rows(0, [Item(8, "x"), Item(9, "y")])

        assert len(table.history.undo_stack) == 1


class TestRemoveRows:
    """Tests for remove_rows bounds handling and deletion confirmation."""

    def test_out_of_range_positions_change_nothing(self, table, rejections):
        assert table.store.remove_rows([5, -1]) is None
        assert list(table) == [(1, "a"), (2, "b"), (3, "c")]
        assert not table.can_undo()
        assert rejections[0].kind is RejectionKind.BOUNDS

    def test_out_of_range_positions_are_ignored(self, table):
        table.store.remove_rows([0, 10])

        assert list(table) == [(2, "b"), (3, "c")]

    def test_deletion_disallowed(self, table, adapter):
        adapter.allow_delete = False

        assert table.store.remove_rows([0]) is None
        assert len(table) == 3

    def test_refused_rows_stay(self, table, adapter):
        adapter.keep = {1}

        table.store.remove_rows([0, 1])

        assert list(table) == [(1, "a"), (3, "c")]

    def test_all_refused_records_nothing(self, table, adapter):
        adapter.keep = {1, 2, 3}

        assert table.store.remove_rows([0, 1, 2]) is None
        assert list(table) == [(1, "a"), (2, "b"), (3, "c")]
        assert not table.can_undo()

    def test_removal_carries_original_positions(self, table):
        action = table.store.remove_rows([2, 0])

        assert [(pos, row.row_id) for pos, row in action.placements] == [(0, 1), (2, 3)]


class TestDuplicateRows:
    """Tests for duplicate_rows."""

    def test_clone_goes_directly_below_source(self, table):
        table.store.duplicate_rows([0, 2])

        assert list(table) == [(1, "a"), (1, "a"), (2, "b"), (3, "c"), (3, "c")]
        assert table.store.ids() == [1, 4, 2, 3, 5]

    def test_user_copy_uses_copied_base_hook(self, table, adapter):
        table.store.duplicate_rows([1], user_copy=True)
        assert adapter.copied == 1

        table.store.duplicate_rows([1])
        assert adapter.copied == 1

    def test_gated_by_insertion_permission(self, table, adapter):
        adapter.allow_insert = False

        assert table.store.duplicate_rows([0]) is None
        assert len(table) == 3


class TestSetCell:
    """Tests for set_cell validation gates."""

    def test_write_replaces_payload(self, table):
        action = table.store.set_cell(1, 1, "x")

        assert table[0] == (1, "x")
        assert action.old_value == "a"
        assert action.new_value == "x"

    def test_unknown_row_or_column(self, table, rejections):
        assert table.store.set_cell(99, 0, 5) is None
        assert table.store.set_cell(1, 7, 5) is None
        assert [r.kind for r in rejections] == [RejectionKind.BOUNDS] * 2

    def test_locked_cell_is_refused_before_confirm(self, table, adapter):
        adapter.locked_columns = {0}

        assert table.store.set_cell(1, 0, 5) is None
        assert adapter.writes == []

    def test_confirm_rejection_is_a_noop(self, table, adapter):
        adapter.refuse_values = {"bad"}

        assert table.store.set_cell(1, 1, "bad") is None
        assert table[0] == (1, "a")
        assert not table.can_undo()

    def test_unchanged_value_records_nothing(self, table):
        assert table.store.set_cell(1, 1, "a") is None
        assert not table.can_undo()

    def test_confirm_hook_sees_context(self, table, adapter):
        table.store.set_cell(2, 0, 20, WriteSource.EDIT)

        context = adapter.writes[-1]
        assert context.row_id == 2
        assert context.current == (2, "b")
        assert context.proposed == (20, "b")
        assert context.source is WriteSource.EDIT

    def test_update_notification(self, table, adapter):
        table.store.set_cell(1, 1, "x")

        assert adapter.updates == [(1, (1, "a"), (1, "x"))]


class TestClearAndFill:
    """Tests for clear_cells and fill_cells batches."""

    def test_clear_resets_to_empty_values(self, table):
        table.store.clear_cells([(1, 0), (1, 1), (2, 1)])

        assert list(table) == [(0, ""), (2, ""), (3, "c")]
        assert len(table.history.undo_stack) == 1

    def test_clear_is_undone_in_one_step(self, table):
        table.store.clear_cells([(1, 0), (1, 1), (2, 1)])
        table.undo()

        assert list(table) == [(1, "a"), (2, "b"), (3, "c")]

    def test_clear_skips_locked_cells(self, table, adapter):
        adapter.locked_columns = {0}

        table.store.clear_cells([(1, 0), (1, 1)])

        assert table[0] == (1, "")

    def test_clear_uses_adapter_clear_cell(self, table, adapter, monkeypatch):
        def clear_cell(row, column):
            return adapter.set_cell_value(row, column, -1 if column == 0 else "-")

        monkeypatch.setattr(adapter, "clear_cell", clear_cell)

        table.store.clear_cells([(1, 0), (2, 1)])

        assert list(table) == [(-1, "a"), (2, "-"), (3, "c")]

    def test_clear_unknown_row(self, table, rejections):
        assert table.store.clear_cells([(42, 1)]) is None
        assert rejections[0].kind is RejectionKind.BOUNDS

    def test_fill_copies_source_values(self, table):
        table.store.fill_cells(1, [(2, 1), (3, 1)])

        assert list(table) == [(1, "a"), (2, "a"), (3, "a")]

    def test_fill_from_missing_source(self, table, rejections):
        assert table.store.fill_cells(42, [(2, 1)]) is None
        assert rejections[0].kind is RejectionKind.BOUNDS
