"""OrderedRegistry — an insertion-ordered collection with unique keys.

A combination of a list and a dict: adding a member, testing for
membership, finding a member's index and fetching by key or index are
all O(1). Removal compacts the ordering so ``index_of`` always agrees
with ``to_list()``; it costs O(n).

Adding a key that is already present is a no-op, not an error, because
re-registration is routine (a parent re-rendering its template registers
the same children again).
"""

from collections.abc import Callable, Hashable, Iterable, Iterator
from typing import Generic, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class OrderedRegistry(Generic[K, V]):
    """Unique-key, insertion-ordered registry.

    Usage::

        children = OrderedRegistry[str, Component]()
        children.add(child.id, child)
        children.index_of(child.id)   # 0
        children.at(0) is child       # True
    """

    __slots__ = ("_index", "_keys", "_values")

    def __init__(self) -> None:
        self._keys: list[K] = []
        self._values: list[V] = []
        self._index: dict[K, int] = {}

    @classmethod
    def from_iterable(cls, items: Iterable[K]) -> "OrderedRegistry[K, K]":
        """Build a registry whose keys are also its values."""
        registry: OrderedRegistry[K, K] = OrderedRegistry()
        for item in items:
            registry.add(item)
        return registry

    def add(self, key: K, value: V | None = None) -> bool:
        """Insert *value* under *key* unless the key is already present.

        When *value* is omitted the key itself is stored. Returns ``True``
        if the registry changed.
        """
        if key in self._index:
            return False
        self._index[key] = len(self._values)
        self._keys.append(key)
        self._values.append(key if value is None else value)  # type: ignore[arg-type]
        return True

    def has(self, key: K) -> bool:
        return key in self._index

    def index_of(self, key: K) -> int | None:
        return self._index.get(key)

    def get(self, key: K) -> V | None:
        index = self._index.get(key)
        if index is None:
            return None
        return self._values[index]

    def at(self, index: int) -> V | None:
        """Return the member at *index*, or ``None`` when out of range.

        Negative indexes are out of range; they do not count from the end.
        """
        if 0 <= index < len(self._values):
            return self._values[index]
        return None

    def remove(self, key: K) -> V | None:
        """Delete *key* and shift every later member down one position."""
        index = self._index.pop(key, None)
        if index is None:
            return None
        del self._keys[index]
        value = self._values.pop(index)
        for position in range(index, len(self._keys)):
            self._index[self._keys[position]] = position
        return value

    def clear(self) -> None:
        self._keys.clear()
        self._values.clear()
        self._index.clear()

    def to_list(self) -> list[V]:
        """Return a copy of the members in insertion order."""
        return list(self._values)

    def keys(self) -> list[K]:
        return list(self._keys)

    def filter(self, predicate: Callable[[V], bool]) -> list[V]:
        """Return the members matching *predicate* without mutating the registry."""
        return [value for value in self._values if predicate(value)]

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[V]:
        # Iterate a snapshot: destroying a child removes it from its
        # parent's registry mid-iteration.
        return iter(list(self._values))

    def __repr__(self) -> str:
        return f"OrderedRegistry({self._keys!r})"
