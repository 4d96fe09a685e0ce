"""
Template cache — process-lifetime memoization of generated content.

One instance is built at CLI entry and handed to whoever renders
templates. Several operations of the same phase may ask for the same
key at once; the first caller computes, the others wait and reuse.

Thread safety
─────────────
- ``_guard`` protects creation of per-key locks.
- Each key has its own lock, so a slow producer for one key never
  blocks readers of another key.
- Populated entries are read without taking any lock.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

_MISSING = object()


class TemplateCache(Generic[T]):
    """Thread-safe, lazily-populated content cache keyed by logical name."""

    def __init__(self) -> None:
        self._values: dict[str, T] = {}
        self._key_locks: dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def _get_key_lock(self, key: str) -> threading.Lock:
        """Get or create the lock for a specific key."""
        with self._guard:
            lock = self._key_locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[key] = lock
            return lock

    def get(self, key: str, producer: Callable[[], T]) -> T:
        """Return the cached value for ``key``, computing it once if needed."""
        value = self._values.get(key, _MISSING)
        if value is not _MISSING:
            return value  # type: ignore[return-value]

        with self._get_key_lock(key):
            # Another thread may have filled it while we waited.
            value = self._values.get(key, _MISSING)
            if value is not _MISSING:
                return value  # type: ignore[return-value]

            logger.debug("Template cache miss: %s", key)
            produced = producer()
            self._values[key] = produced
            return produced
