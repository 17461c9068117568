"""
Per-flight lock registry.

Every read-modify-write over a flight's passenger list or movement log runs
under the lock for that flight key. Locks are re-entrant so a batch
operation can call single-record helpers while holding the key.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class KeyLockRegistry:
    """
    Hands out one re-entrant lock per flight key.

    Features:
    - Lazy lock creation guarded by a registry lock
    - Re-entrant locks so nested store calls do not deadlock
    """

    def __init__(self):
        self._registry_lock = threading.Lock()
        self._locks: Dict[str, threading.RLock] = {}

    def get(self, key: str) -> threading.RLock:
        """The lock for ``key``, created on first use."""
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.RLock()
                self._locks[key] = lock
            return lock

    @contextmanager
    def lock_context(self, key: str) -> Iterator[None]:
        """
        Hold the lock for ``key`` for the duration of the block.

        Args:
            key: Flight key to serialize on
        """
        with self.get(key):
            yield
