"""
Keyed storage backends for the template and report registries.

The registries only depend on the ``KeyValueStore`` protocol, so the
in-memory store can be swapped for a persistent one without touching them.
"""
from __future__ import annotations

import logging
import threading
from typing import Dict, Generic, List, Optional, Protocol, TypeVar, runtime_checkable

logger = logging.getLogger(__name__)

V = TypeVar("V")


@runtime_checkable
class KeyValueStore(Protocol[V]):
    """Contract every registry storage backend implements."""

    def put_new(self, key: str, value: V) -> bool:
        """Store *value* under *key* unless the key exists. Returns True if stored."""
        ...

    def get(self, key: str) -> Optional[V]:
        """Return the value for *key*, or None."""
        ...

    def values(self) -> List[V]:
        """All values in insertion order."""
        ...

    def __len__(self) -> int:
        ...


class InMemoryStore(Generic[V]):
    """Dict-backed store guarded by a lock; nothing touches disk."""

    def __init__(self) -> None:
        self._items: Dict[str, V] = {}
        self._lock = threading.Lock()

    def put_new(self, key: str, value: V) -> bool:
        with self._lock:
            if key in self._items:
                return False
            self._items[key] = value
        logger.debug(f"Stored {key} in memory store")
        return True

    def get(self, key: str) -> Optional[V]:
        with self._lock:
            return self._items.get(key)

    def values(self) -> List[V]:
        with self._lock:
            return list(self._items.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
