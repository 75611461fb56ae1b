from datetime import date

import pytest

from invoicedesk.services.ordering_service import (
    PositionMap,
    add_item,
    array_move,
    move_item_down,
    move_item_up,
    next_order,
    remove_item,
    renumber,
    reorder_by_drag,
    reorder_by_rank,
    sort_by_order,
    sort_by_rank,
)


def ids(items):
    return [item.id for item in items]


def orders(items):
    return [item.order for item in items]


@pytest.fixture
def three_items(make_item):
    return [make_item(1, 1, item_id=name) for name in ("a", "b", "c")]


class TestDenseOrdering:
    """Line item order within a document."""

    def test_array_move(self):
        assert array_move(["a", "b", "c", "d"], 0, 2) == ["b", "c", "a", "d"]
        assert array_move(["a", "b", "c", "d"], 3, 1) == ["a", "d", "b", "c"]

    def test_next_order(self, three_items):
        assert next_order([]) == 1
        assert next_order(three_items) == 4

    def test_add_item_appends_with_next_order(self, three_items, make_item):
        result = add_item(three_items, make_item(1, 1, item_id="d", order=0))

        assert ids(result) == ["a", "b", "c", "d"]
        assert result[-1].order == 4

    def test_remove_renumbers(self, three_items):
        result = remove_item(three_items, "b")

        assert ids(result) == ["a", "c"]
        assert orders(result) == [1, 2]

    def test_remove_unknown_id_is_noop(self, three_items):
        assert remove_item(three_items, "zzz") is three_items

    def test_move_up_then_down_restores(self, three_items):
        up = move_item_up(three_items, "b")
        assert ids(up) == ["b", "a", "c"]
        assert orders(up) == [1, 2, 3]

        restored = move_item_down(up, "b")
        assert ids(restored) == ids(three_items)
        assert orders(restored) == [1, 2, 3]

    def test_move_at_boundaries_is_noop(self, three_items):
        assert move_item_up(three_items, "a") is three_items
        assert move_item_down(three_items, "c") is three_items
        assert move_item_up(three_items, "missing") is three_items

    def test_drag_onto_itself_is_noop(self, three_items):
        assert reorder_by_drag(three_items, "b", "b") is three_items
        assert reorder_by_drag(three_items, "b", None) is three_items

    def test_drag_moves_to_target_position(self, three_items):
        result = reorder_by_drag(three_items, "a", "c")

        assert ids(result) == ["b", "c", "a"]
        assert orders(result) == [1, 2, 3]

    def test_renumber_fills_gaps(self, make_item):
        items = [make_item(1, 1, order=5), make_item(1, 1, order=9)]

        assert orders(renumber(items)) == [1, 2]

    def test_sort_by_order_is_stable(self, make_item):
        items = [make_item(1, 1, item_id="x", order=2), make_item(1, 1, item_id="y", order=1),
                 make_item(1, 1, item_id="z", order=2)]

        assert ids(sort_by_order(items)) == ["y", "x", "z"]

    def test_input_not_mutated(self, three_items):
        before = orders(three_items)
        move_item_down(three_items, "a")

        assert orders(three_items) == before


class TestPositionMap:
    def test_default_rank_is_sentinel(self):
        assert PositionMap().rank("2025-03-10", "job") == 999

    def test_with_rank_returns_new_map(self):
        empty = PositionMap()
        ranked = empty.with_rank("d", "job", 0)

        assert len(empty) == 0
        assert ranked.rank("d", "job") == 0
        assert ("d", "job") in ranked

    def test_without_missing_key_returns_same_map(self):
        positions = PositionMap({("d", "a"): 1})

        assert positions.without("d", "b") is positions
        assert not positions.without("d", "a").has_rank("d", "a")

    def test_group_order_is_dense_and_zero_based(self):
        positions = PositionMap().with_group_order("d", ["c", "a", "b"])

        assert positions.group_ranks("d") == {"c": 0, "a": 1, "b": 2}


class TestSparseOrdering:
    """Calendar jobs within one day."""

    def test_unranked_jobs_sort_after_ranked(self, make_job, created, monday):
        jobs = [make_job("a", monday, created(1)), make_job("b", monday, created(2))]
        positions = PositionMap({(monday, "b"): 0})

        assert ids(sort_by_rank(jobs, monday, positions)) == ["b", "a"]

    def test_ties_broken_by_creation_time(self, make_job, created, monday):
        jobs = [make_job("late", monday, created(30)), make_job("early", monday, created(5))]

        assert ids(sort_by_rank(jobs, monday, PositionMap())) == ["early", "late"]

    def test_missing_creation_time_keeps_input_order(self, make_job, monday):
        jobs = [make_job("x", monday), make_job("y", monday)]

        assert ids(sort_by_rank(jobs, monday, PositionMap())) == ["x", "y"]
        assert ids(sort_by_rank(jobs, monday, PositionMap())) == ["x", "y"]

    def test_reorder_writes_dense_ranks(self, make_job, created, monday):
        jobs = [make_job(name, monday, created(i)) for i, name in enumerate("abc")]

        positions = reorder_by_rank(jobs, monday, PositionMap(), "c", "a")

        assert positions.group_ranks(monday) == {"c": 0, "a": 1, "b": 2}
        assert ids(sort_by_rank(jobs, monday, positions)) == ["c", "a", "b"]

    def test_reorder_onto_itself_returns_same_map(self, make_job, monday):
        jobs = [make_job("a", monday), make_job("b", monday)]
        positions = PositionMap()

        assert reorder_by_rank(jobs, monday, positions, "a", "a") is positions
        assert reorder_by_rank(jobs, monday, positions, "a", "unknown") is positions

    def test_groups_are_independent(self, monday, tuesday):
        positions = PositionMap({(tuesday, "a"): 0})

        assert positions.rank(monday, "a") == 999
        assert positions.rank(date(2025, 3, 11), "a") == 0
