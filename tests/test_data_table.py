"""Tests for the DataTable aggregate and per-tick event processing."""

from dataclasses import dataclass

import pytest
from conftest import SAMPLE_ROWS, Item

from editgrid.data.edit_session import EditState
from editgrid.models.events import (
    CellDragged,
    CellPressed,
    FocusLost,
    KeyPressed,
    RowHeaderPressed,
    TextEdited,
    TextPasted,
    Triggered,
    ValueDropped,
)
from editgrid.models.rejection import RejectionKind
from editgrid.models.selection import CellPos
from editgrid.models.ui_actions import (
    InsertEmptyRows,
    InsertRowAbove,
    MoveDirection,
    MoveSelection,
    SelectionDuplicateValues,
    SortByColumn,
    UiAction,
)
from editgrid.settings import TableStyle


def state(table):
    return table.store.ids(), list(table), table.columns.visible


@dataclass(frozen=True)
class FutureAction(UiAction):
    """A variant this version of the engine does not know."""


class TestScenarios:
    """End-to-end scenarios over the sample table."""

    def test_copy_delete_undo(self, table):
        table.selection.select_row(0)
        table.selection.extend_to(CellPos(1, 0))
        assert table.copy() == "1\ta\n2\tb\n"

        table.selection.select_row(0)
        assert table.delete_selected_rows()
        assert list(table) == [(2, "b"), (3, "c")]

        assert table.undo()
        assert list(table) == [(1, "a"), (2, "b"), (3, "c")]
        assert table.store.ids() == [1, 2, 3]

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda t: t.store.insert_rows(1, [Item(9, "z")]),
            lambda t: t.store.remove_rows([0, 2]),
            lambda t: t.store.duplicate_rows([1]),
            lambda t: t.store.set_cell(2, 1, "q"),
            lambda t: t.sort_by(0, ascending=False),
            lambda t: t.hide_column(1),
            lambda t: t.paste("5\te\n6\tf\n7\tg\n8\th\n", CellPos(1, 0)),
        ],
        ids=["insert", "remove", "duplicate", "set_cell", "sort", "hide", "paste"],
    )
    def test_undo_and_redo_restore_exactly(self, table, mutate):
        before = state(table)
        mutate(table)
        after = state(table)
        assert after != before

        table.undo()
        assert state(table) == before

        table.redo()
        assert state(table) == after


class TestProcess:
    """Tests for process() event handling."""

    def test_edit_through_events(self, table):
        result = table.process([CellPressed(0, 1, clicks=2), TextEdited("x"), FocusLost()])

        assert table[0] == (1, "x")
        assert result.changed
        assert table.edit.state is EditState.IDLE

    def test_single_click_only_selects_by_default(self, table):
        table.process([CellPressed(1, 1)])

        assert table.selection.anchor == CellPos(1, 1)
        assert not table.edit.is_active

    def test_single_click_edits_in_single_click_mode(self, make_table):
        table = make_table(SAMPLE_ROWS, TableStyle(single_click_edit_mode=True))
        table.process([CellPressed(1, 1)])

        assert table.edit.is_active

    def test_selection_only_tick_is_not_a_change(self, table):
        result = table.process([CellPressed(0, 0), CellDragged(2, 1)])

        assert table.selection.rect() == (0, 0, 2, 1)
        assert not result.changed

    def test_shift_and_ctrl_clicks(self, table):
        table.process([CellPressed(0, 0), CellPressed(1, 1, shift=True)])
        assert table.selection.rect() == (0, 0, 1, 1)

        table.process([CellPressed(0, 0, ctrl=True), CellPressed(2, 0, ctrl=True)])
        assert table.selection.selected_rows() == [0, 2]

    def test_row_header(self, table):
        table.process([RowHeaderPressed(1)])
        assert table.selection.rect() == (1, 0, 1, 1)

        table.process([RowHeaderPressed(2, shift=True)])
        assert table.selection.selected_rows() == [1, 2]

    def test_copy_key_publishes_clipboard_text(self, table):
        result = table.process([RowHeaderPressed(2), KeyPressed("c", ctrl=True)])

        assert result.clipboard_text == "3\tc\n"

    def test_cut_key(self, table):
        result = table.process([RowHeaderPressed(0), KeyPressed("x", ctrl=True)])

        assert result.clipboard_text == "1\ta\n"
        assert table[0] == (0, "")

    def test_undo_redo_keys(self, table):
        table.store.set_cell(1, 1, "x")

        table.process([KeyPressed("z", ctrl=True)])
        assert table[0] == (1, "a")

        table.process([KeyPressed("y", ctrl=True)])
        assert table[0] == (1, "x")

    def test_enter_commits_and_moves_down(self, table):
        table.process(
            [CellPressed(0, 1, clicks=2), TextEdited("x"), KeyPressed("Return")]
        )

        assert table[0] == (1, "x")
        assert not table.edit.is_active
        assert table.selection.cursor == CellPos(1, 1)

    def test_f2_then_escape_cancels(self, table):
        table.process([CellPressed(0, 1), KeyPressed("F2"), TextEdited("x")])
        assert table.edit.is_active

        table.process([KeyPressed("Escape")])

        assert table[0] == (1, "a")
        assert not table.edit.is_active

    def test_arrow_keys_move(self, table):
        table.process([CellPressed(0, 0), KeyPressed("Down"), KeyPressed("Right", shift=True)])

        assert table.selection.anchor == CellPos(1, 0)
        assert table.selection.cursor == CellPos(1, 1)

    def test_delete_key_clears_cells(self, table):
        table.process([CellPressed(0, 1), KeyPressed("Delete")])

        assert table[0] == (1, "")

    def test_value_dropped(self, table):
        table.process([ValueDropped(2, 1, "dropped")])

        assert table[2] == (3, "dropped")

    def test_text_pasted(self, table):
        table.process([CellPressed(2, 0), TextPasted("9\tz\n")])

        assert table[2] == (9, "z")

    def test_rejections_collected_per_tick(self, table, adapter):
        adapter.locked_columns = {0}

        result = table.process([CellPressed(0, 0, clicks=2)])

        assert [r.kind for r in result.rejections] == [RejectionKind.VALIDATION]
        assert table.process([]).rejections == []

    def test_unknown_event_ignored(self, table):
        result = table.process([object()])

        assert not result.changed


class TestUiActions:
    """Tests for apply_ui_action."""

    def test_unknown_action_is_ignored(self, table):
        assert table.apply_ui_action(FutureAction()) is False
        assert state(table) == ([1, 2, 3], [(1, "a"), (2, "b"), (3, "c")], [0, 1])

    def test_insert_empty_rows_appends_without_selection(self, table):
        table.process([Triggered(InsertEmptyRows(count=2))])

        assert list(table)[3:] == [(0, ""), (0, "")]
        assert len(table.history.undo_stack) == 1

    def test_insert_row_above_selection(self, table):
        table.selection.set_anchor(CellPos(1, 1))

        assert table.apply_ui_action(InsertRowAbove())

        assert table[1] == (0, "")
        assert table.selection.cursor == CellPos(1, 1)

    def test_duplicate_row_key_is_a_user_copy(self, table, adapter):
        table.process([RowHeaderPressed(0), KeyPressed("d", ctrl=True)])

        assert list(table) == [(1, "a"), (1, "a"), (2, "b"), (3, "c")]
        assert adapter.copied == 1

    def test_selection_duplicate_values(self, table):
        table.selection.set_anchor(CellPos(0, 1))
        table.selection.extend_to(CellPos(2, 1))

        assert table.apply_ui_action(SelectionDuplicateValues())

        assert list(table) == [(1, "a"), (2, "a"), (3, "a")]
        table.undo()
        assert list(table) == [(1, "a"), (2, "b"), (3, "c")]

    def test_sort_action_is_undoable(self, table):
        table.apply_ui_action(SortByColumn(0, ascending=False))
        assert [item.num for item in table] == [3, 2, 1]

        table.undo()
        assert [item.num for item in table] == [1, 2, 3]

    def test_move_selection(self, table):
        table.selection.set_anchor(CellPos(0, 1))

        table.apply_ui_action(MoveSelection(MoveDirection.RIGHT))

        assert table.selection.cursor == CellPos(1, 0)

    def test_structural_change_commits_active_edit(self, table):
        table.edit.begin(CellPos(2, 1))
        table.edit.update("x")

        table.apply_ui_action(InsertEmptyRows(at=0))

        assert table[3] == (3, "x")
        assert not table.edit.is_active


class TestSelectionAfterChanges:
    """Discrete row selections stay on the rows the user picked."""

    def test_removal_above_keeps_picked_rows(self, table):
        table.selection.toggle_row(0)
        table.selection.toggle_row(2)

        table.store.remove_rows([0])

        assert table.selection.selected_rows() == [1]
        assert table.view.row_at(1).payload == Item(3, "c")

    def test_insertion_above_keeps_picked_rows(self, table):
        table.selection.toggle_row(0)
        table.selection.toggle_row(2)

        table.store.insert_rows(1, [Item(9, "z")])

        assert table.selection.selected_rows() == [0, 3]

    def test_removing_every_picked_row_collapses(self, table):
        table.selection.toggle_row(2)

        table.store.remove_rows([2])

        assert table.selection.selected_rows() == [1]

    def test_redo_while_editing_discards_the_edit(self, table):
        table.store.set_cell(1, 1, "x")
        table.undo()
        table.process([CellPressed(1, 1, clicks=2), TextEdited("zz")])

        assert table.redo()

        assert table[0] == (1, "x")
        assert table[1] == (2, "b")
        assert not table.edit.is_active


class TestObservers:
    def test_observer_gets_affected_ids(self, table):
        calls = []
        table.add_observer(lambda t, ids: calls.append(ids))

        table.store.set_cell(2, 1, "x")

        assert calls == [{2}]

    def test_failing_observer_does_not_break_others(self, table):
        calls = []

        def broken(t, ids):
            raise RuntimeError("observer bug")

        table.add_observer(broken)
        table.add_observer(lambda t, ids: calls.append(ids))

        table.store.set_cell(1, 1, "x")

        assert table[0] == (1, "x")
        assert calls == [{1}]

    def test_remove_observer(self, table):
        calls = []

        def observer(t, ids):
            calls.append(ids)

        table.add_observer(observer)
        table.remove_observer(observer)
        table.store.set_cell(1, 1, "x")

        assert calls == []

    def test_failing_rejection_listener_is_contained(self, table):
        def broken(rejection):
            raise RuntimeError("listener bug")

        table.add_rejection_listener(broken)

        assert table.store.set_cell(99, 0, 1) is None


class TestDirty:
    def test_dirty_follows_history(self, table):
        assert not table.is_dirty()

        table.process([CellPressed(0, 1, clicks=2), TextEdited("x"), FocusLost()])
        assert table.is_dirty()

        table.mark_saved()
        assert not table.is_dirty()

        table.undo()
        assert table.is_dirty()


class TestCollectionHelpers:
    def test_len_iter_getitem(self, table):
        assert len(table) == 3
        assert list(table) == [(1, "a"), (2, "b"), (3, "c")]
        assert table[1] == (2, "b")
        with pytest.raises(IndexError):
            table[3]

    def test_take(self, table):
        table.store.set_cell(1, 1, "x")

        payloads = table.take()

        assert payloads == [(1, "x"), (2, "b"), (3, "c")]
        assert len(table) == 0
        assert not table.can_undo()

    def test_replace_is_a_clean_load(self, table):
        table.store.set_cell(1, 1, "x")
        table.selection.select_all()

        old = table.replace([Item(7, "g")])

        assert old == [(1, "x"), (2, "b"), (3, "c")]
        assert list(table) == [(7, "g")]
        assert table.store.ids() == [4]
        assert not table.is_dirty()
        assert not table.can_undo()
        assert table.selection.is_empty

    def test_retain_keeps_ids(self, table):
        removed = table.retain(lambda item: item.num != 2)

        assert removed == 1
        assert table.store.ids() == [1, 3]

    def test_extend_appends_fresh_ids(self, table):
        assert table.extend([Item(4, "d"), Item(5, "e")]) == 2

        assert table.store.ids() == [1, 2, 3, 4, 5]
        assert table[4] == (5, "e")
