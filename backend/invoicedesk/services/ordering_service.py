"""
Ordering engine: one rank per (group, item), two storage strategies.

Dense (document line items): the rank lives on the item as ``order`` and is
renumbered 1..N after every structural change (add, remove, move up/down,
drag reorder).

Sparse (calendar jobs per day): ranks live out-of-band in a PositionMap keyed
by (day, job id). Items without a rank sort after ranked ones using the
UNRANKED_POSITION sentinel (999), then by creation time.

Every function returns new lists/maps; inputs are never mutated, and a no-op
returns the input object itself.
"""
from datetime import datetime
from typing import Any, Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from invoicedesk.config import settings

T = TypeVar("T")
RankKey = Tuple[Hashable, str]


def array_move(items: Sequence[T], from_index: int, to_index: int) -> List[T]:
    """Stable move of one element: remove at from_index, insert at to_index."""
    moved = list(items)
    element = moved.pop(from_index)
    moved.insert(to_index, element)
    return moved


def _index_of(items: Sequence[Any], item_id: str) -> int:
    for index, item in enumerate(items):
        if item.id == item_id:
            return index
    return -1


# --- Dense ordering (document line items) -----------------------------------

def next_order(items: Iterable[Any]) -> int:
    """max(order) + 1, or 1 for an empty document."""
    orders = [item.order or 0 for item in items]
    return max(orders) + 1 if orders else 1


def sort_by_order(items: Iterable[T]) -> List[T]:
    """Items by their order field; equal orders keep their list position."""
    return sorted(items, key=lambda item: item.order or 0)


def renumber(items: Sequence[T]) -> List[T]:
    """Dense 1..N order values following the list position."""
    return [
        item if item.order == position else item.model_copy(update={"order": position})
        for position, item in enumerate(items, start=1)
    ]


def add_item(items: Sequence[T], item: T) -> List[T]:
    """Append ``item`` with order = max(existing) + 1."""
    return list(items) + [item.model_copy(update={"order": next_order(items)})]


def remove_item(items: Sequence[T], item_id: str) -> List[T]:
    """Remove by id (never by index) and renumber; unknown ids are a no-op."""
    if _index_of(items, item_id) == -1:
        return items
    return renumber([item for item in items if item.id != item_id])


def move_item_up(items: Sequence[T], item_id: str) -> Sequence[T]:
    """Swap with the previous item and renumber; no-op for the first or an unknown item."""
    index = _index_of(items, item_id)
    if index <= 0:
        return items
    moved = list(items)
    moved[index - 1], moved[index] = moved[index], moved[index - 1]
    return renumber(moved)


def move_item_down(items: Sequence[T], item_id: str) -> Sequence[T]:
    """Swap with the next item and renumber; no-op for the last or an unknown item."""
    index = _index_of(items, item_id)
    if index == -1 or index >= len(items) - 1:
        return items
    moved = list(items)
    moved[index], moved[index + 1] = moved[index + 1], moved[index]
    return renumber(moved)


def reorder_by_drag(items: Sequence[T], active_id: str, over_id: Optional[str]) -> Sequence[T]:
    """
    Drag end: move the dragged item to the position of the item it was dropped on.
    Dropping nowhere or onto itself is a no-op.
    """
    if over_id is None or active_id == over_id:
        return items
    old_index = _index_of(items, active_id)
    new_index = _index_of(items, over_id)
    if old_index == -1 or new_index == -1:
        return items
    return renumber(array_move(items, old_index, new_index))


# --- Sparse ordering (calendar) ----------------------------------------------

class PositionMap:
    """
    Immutable mapping (group key, item id) -> rank.

    Lower ranks sort first. ``rank()`` falls back to ``default_rank`` for items
    that were never positioned.
    """

    def __init__(self, ranks: Optional[Dict[RankKey, int]] = None, default_rank: Optional[int] = None):
        self._ranks: Dict[RankKey, int] = dict(ranks or {})
        self.default_rank = settings.UNRANKED_POSITION if default_rank is None else default_rank

    def rank(self, group: Hashable, item_id: str) -> int:
        return self._ranks.get((group, item_id), self.default_rank)

    def has_rank(self, group: Hashable, item_id: str) -> bool:
        return (group, item_id) in self._ranks

    def with_rank(self, group: Hashable, item_id: str, rank: int) -> "PositionMap":
        ranks = dict(self._ranks)
        ranks[(group, item_id)] = rank
        return PositionMap(ranks, self.default_rank)

    def without(self, group: Hashable, item_id: str) -> "PositionMap":
        if (group, item_id) not in self._ranks:
            return self
        ranks = dict(self._ranks)
        del ranks[(group, item_id)]
        return PositionMap(ranks, self.default_rank)

    def with_group_order(self, group: Hashable, item_ids: Iterable[str]) -> "PositionMap":
        """Dense 0-based ranks for every listed item of ``group``."""
        ranks = dict(self._ranks)
        for rank, item_id in enumerate(item_ids):
            ranks[(group, item_id)] = rank
        return PositionMap(ranks, self.default_rank)

    def group_ranks(self, group: Hashable) -> Dict[str, int]:
        return {item_id: rank for (g, item_id), rank in self._ranks.items() if g == group}

    def to_dict(self) -> Dict[RankKey, int]:
        return dict(self._ranks)

    def __len__(self) -> int:
        return len(self._ranks)

    def __contains__(self, key: RankKey) -> bool:
        return key in self._ranks

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PositionMap):
            return NotImplemented
        return self._ranks == other._ranks and self.default_rank == other.default_rank

    def __repr__(self) -> str:
        return f"PositionMap({self._ranks!r}, default_rank={self.default_rank})"


def _timestamp(value: Optional[datetime]) -> float:
    # missing creation time sorts as the epoch
    return value.timestamp() if value else 0.0


def sort_by_rank(
    items: Iterable[T],
    group: Hashable,
    positions: PositionMap,
    created_at: Callable[[T], Optional[datetime]] = lambda item: item.created_at,
) -> List[T]:
    """
    Items of one group by rank, then creation time.

    Python's sort is stable, so items with neither rank nor creation time keep
    their input order on every call.
    """
    return sorted(
        items,
        key=lambda item: (positions.rank(group, item.id), _timestamp(created_at(item))),
    )


def reorder_by_rank(
    sorted_items: Sequence[Any],
    group: Hashable,
    positions: PositionMap,
    dragged_id: str,
    target_id: str,
) -> PositionMap:
    """
    Drop ``dragged_id`` onto ``target_id`` within one group.

    ``sorted_items`` is the group as currently displayed. Writes dense 0-based
    ranks for the whole group. Returns ``positions`` itself when nothing moves.
    """
    dragged_index = _index_of(sorted_items, dragged_id)
    target_index = _index_of(sorted_items, target_id)
    if dragged_index == -1 or target_index == -1 or dragged_index == target_index:
        return positions
    reordered = array_move(sorted_items, dragged_index, target_index)
    return positions.with_group_order(group, [item.id for item in reordered])
