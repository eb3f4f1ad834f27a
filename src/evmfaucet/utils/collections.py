"""
Bounded containers for diagnostic state.
"""

from __future__ import annotations

from collections import OrderedDict
from typing import Generic, Iterator, List, TypeVar

T = TypeVar("T")


class BoundedSet(Generic[T]):
    """
    Insertion-ordered set with a maximum size.

    When full, the oldest entry is evicted. Re-adding an existing entry
    marks it as the most recent one.

    This implementation uses OrderedDict for O(1) operations.

    Example:
        >>> errors: BoundedSet[str] = BoundedSet(max_size=2)
        >>> errors.add("timeout")
        >>> errors.add("nonce too low")
        >>> errors.add("503")
        >>> list(errors)
        ['nonce too low', '503']
    """

    def __init__(self, max_size: int = 20) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")

        self._max_size = max_size
        self._items: OrderedDict[T, None] = OrderedDict()

    @property
    def max_size(self) -> int:
        return self._max_size

    def add(self, item: T) -> None:
        if item in self._items:
            self._items.move_to_end(item)
            return

        if len(self._items) >= self._max_size:
            self._items.popitem(last=False)

        self._items[item] = None

    def to_list(self) -> List[T]:
        """Items oldest first."""
        return list(self._items.keys())

    def __contains__(self, item: object) -> bool:
        return item in self._items

    def __iter__(self) -> Iterator[T]:
        # Snapshot so concurrent writers cannot break iteration
        return iter(list(self._items.keys()))

    def __len__(self) -> int:
        return len(self._items)
