"""
Ordered patient selection for batch appointments.

The selection holds references to patient objects (anything with an ``id``
and a ``distance_from_hospital`` attribute) in the order they will be
served. It never copies patient data, and nothing is persisted until the
caller saves it.
"""
from __future__ import annotations

from typing import Any, Iterable, Iterator

from ..exceptions import DuplicateItem, IndexOutOfRange, MissingDistanceData


class OrderedSelection:
    def __init__(self, items: Iterable[Any] = ()):
        self._items: list[Any] = []
        for item in items:
            self.add(item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Any]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Any:
        return self._items[index]

    @property
    def ids(self) -> list:
        return [item.id for item in self._items]

    def __contains__(self, item_id) -> bool:
        return any(item.id == item_id for item in self._items)

    def add(self, item: Any) -> None:
        if item.id in self:
            raise DuplicateItem(item.id)
        self._items.append(item)

    def remove(self, item_id) -> None:
        """Drop the item with ``item_id``; unknown ids are ignored."""
        self._items = [item for item in self._items if item.id != item_id]

    def move(self, from_index: int, to_index: int) -> None:
        """Relocate one item, shifting the ones in between (not a swap)."""
        length = len(self._items)
        for index in (from_index, to_index):
            if not 0 <= index < length:
                raise IndexOutOfRange(index, length)
        item = self._items.pop(from_index)
        self._items.insert(to_index, item)

    def can_sort_by_distance(self) -> bool:
        return all(item.distance_from_hospital is not None for item in self._items)

    def sort_by_distance(self) -> None:
        """Nearest first. Ties keep their current relative order."""
        missing = [item.id for item in self._items if item.distance_from_hospital is None]
        if missing:
            raise MissingDistanceData(missing)
        self._items.sort(key=lambda item: item.distance_from_hospital)
