"""Row sorting.

Sorting reorders the row store itself, so positions read afterwards follow
the new order while row identifiers stay put.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import cmp_to_key
from typing import TYPE_CHECKING, Any

from ..debug_trace import get_logger, perf_timer
from ..models.actions import SetRowOrder
from ..models.rejection import Rejection, RejectionKind
from ..models.row import Row

if TYPE_CHECKING:
    from ..data.data_table import DataTable

logger = get_logger(__name__)

Comparator = Callable[[Any, Any], int]


class SortService:
    """Deterministic, stable row sorting.

    All methods are static as the service is stateless.
    """

    @staticmethod
    def sorted_ids(
        rows: list[Row], comparator: Comparator, ascending: bool = True
    ) -> tuple[int, ...]:
        """Row identifiers in sorted order.

        Equal keys are ordered by row identifier ascending in both
        directions, so sorting twice gives the same order.
        """
        sign = 1 if ascending else -1

        def compare(a: Row, b: Row) -> int:
            result = comparator(a.payload, b.payload) * sign
            if result:
                return result
            return (a.row_id > b.row_id) - (a.row_id < b.row_id)

        return tuple(row.row_id for row in sorted(rows, key=cmp_to_key(compare)))

    @staticmethod
    def sort_by(
        table: DataTable,
        column: int,
        comparator: Comparator | None = None,
        ascending: bool = True,
        undoable: bool = False,
    ) -> bool:
        """Sort the table's rows on a data column.

        Args:
            table: Table to sort.
            column: Data column index.
            comparator: Three-way comparison of two payloads. Defaults to
                the adapter's ``compare_cells`` for ``column``.
            ascending: Sort direction.
            undoable: Record the reordering as a SetRowOrder action. A plain
                sort is a view change and records nothing.

        Returns:
            True if the row order changed.
        """
        adapter = table.adapter
        if not 0 <= column < adapter.num_columns():
            table.report_rejection(Rejection(RejectionKind.BOUNDS, "sort", f"no column {column}"))
            return False
        if not adapter.is_sortable_column(column):
            table.report_rejection(
                Rejection(RejectionKind.VALIDATION, "sort", f"column {column} is not sortable")
            )
            return False

        if comparator is None:

            def comparator(left: Any, right: Any) -> int:
                return adapter.compare_cells(left, right, column)

        rows = list(table.store)
        with perf_timer("sort_by", row_count=len(rows)):
            after = SortService.sorted_ids(rows, comparator, ascending)

        before = tuple(row.row_id for row in rows)
        if after == before:
            return False

        if undoable:
            table.record(SetRowOrder(before, after))
        else:
            table.store.apply_order(after)
            table.notify_changed(set(after), structural=True)

        logger.debug("Sorted %d rows on column %d (%s)", len(rows), column,
                     "ascending" if ascending else "descending")
        return True
