"""
Sentinel Discord Bot - Bounded Map
==================================

Size-capped per-user map shared by every moderation state collection.

DESIGN:
    Two policies keep per-user state from growing without bound:
    - Capacity eviction runs on every insert. When the map holds more
      than max_entries, the oldest slice (10% of capacity by default)
      is dropped, ordered by each value's last-activity timestamp.
    - sweep() removes every entry matching a predicate. The owner calls
      it from a periodic timer for idle or retention-based cleanup.

    The eviction order is a parameter: pass activity_key to order by a
    timestamp stored on the value, or leave it None to order by
    insertion (oldest inserted first).

Author: John Hamwi
"""

from typing import Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class BoundedMap(Generic[K, V]):
    """
    A dict-like map with a capacity ceiling and oldest-first eviction.

    Thread-safe for single-threaded async use.
    """

    def __init__(
        self,
        max_entries: int,
        activity_key: Optional[Callable[[V], float]] = None,
        evict_fraction: float = 0.1,
    ):
        """
        Initialize the bounded map.

        Args:
            max_entries: Maximum number of entries before eviction kicks in.
            activity_key: Returns the last-activity timestamp of a value.
                None means insertion order is used.
            evict_fraction: Share of max_entries removed per eviction.
        """
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self._max_entries = max_entries
        self._activity_key = activity_key
        self._evict_count = max(1, int(max_entries * evict_fraction))
        self._data: Dict[K, V] = {}

    # =========================================================================
    # Access
    # =========================================================================

    def get(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Get a value without creating it."""
        return self._data.get(key, default)

    def get_or_create(self, key: K, factory: Callable[[], V]) -> V:
        """
        Get a value, creating it lazily on first access.

        Creation counts as an insert, so capacity eviction may run.
        The new entry itself is never evicted by its own insert.
        """
        value = self._data.get(key)
        if value is None:
            value = factory()
            self.set(key, value)
        return value

    def set(self, key: K, value: V) -> None:
        """Insert or replace a value, then enforce the capacity ceiling."""
        is_new = key not in self._data
        self._data[key] = value
        if is_new:
            self.enforce_limit(protect=key)

    def pop(self, key: K, default: Optional[V] = None) -> Optional[V]:
        """Remove and return a value."""
        return self._data.pop(key, default)

    def clear(self) -> None:
        """Remove every entry."""
        self._data.clear()

    # =========================================================================
    # Policies
    # =========================================================================

    def enforce_limit(self, protect: Optional[K] = None) -> int:
        """
        Evict the oldest entries if the map is over capacity.

        Args:
            protect: Key that must survive this pass (the entry just inserted).

        Returns:
            Number of entries evicted.
        """
        if len(self._data) <= self._max_entries:
            return 0

        if self._activity_key is None:
            ordered = list(self._data.keys())
        else:
            key_fn = self._activity_key
            ordered = sorted(self._data.keys(), key=lambda k: key_fn(self._data[k]))

        evicted = 0
        for key in ordered:
            if evicted >= self._evict_count:
                break
            if key == protect:
                continue
            del self._data[key]
            evicted += 1
        return evicted

    def sweep(self, predicate: Callable[[K, V], bool]) -> int:
        """
        Remove every entry for which predicate(key, value) is True.

        Returns:
            Number of entries removed.
        """
        doomed = [k for k, v in self._data.items() if predicate(k, v)]
        for key in doomed:
            del self._data[key]
        return len(doomed)

    # =========================================================================
    # Introspection
    # =========================================================================

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def items(self) -> List[Tuple[K, V]]:
        return list(self._data.items())

    def keys(self) -> List[K]:
        return list(self._data.keys())

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[K]:
        return iter(list(self._data.keys()))


__all__ = ["BoundedMap"]
