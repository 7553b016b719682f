"""A bounded cache of per-key locks."""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Any, Hashable, Optional

from .errors import InvalidValueError

_LockType = type(threading.Lock())


class LRUCache:
    """Thread-safe least-recently-used cache with a fixed capacity."""

    def __init__(self, capacity: int) -> None:
        if capacity <= 0:
            raise InvalidValueError(f"cache capacity must be positive, got {capacity}")
        self._capacity = capacity
        self._items: OrderedDict[Hashable, Any] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        """Return the value for ``key`` and mark it as recently used, or None."""
        with self._lock:
            if key not in self._items:
                return None
            self._items.move_to_end(key)
            return self._items[key]

    def put(self, key: Hashable, value: Any) -> None:
        """Store ``value`` under ``key``, evicting the oldest entry when full."""
        with self._lock:
            self._items[key] = value
            self._items.move_to_end(key)
            while len(self._items) > self._capacity:
                self._items.popitem(last=False)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            return key in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)


class MutexHolder:
    """Hands out one lock per key, keeping at most ``capacity`` of them."""

    def __init__(self, capacity: int) -> None:
        self._general_lock = threading.Lock()
        self._mutexes = LRUCache(capacity)

    def get(self, key: str) -> Any:
        """Return the lock for ``key``, creating and caching it if needed."""
        with self._general_lock:
            existing = self._mutexes.get(key)
            if isinstance(existing, _LockType):
                return existing
            new_lock = threading.Lock()
            self._mutexes.put(key, new_lock)
            return new_lock

    @property
    def mutexes(self) -> LRUCache:
        """The underlying cache of locks."""
        return self._mutexes