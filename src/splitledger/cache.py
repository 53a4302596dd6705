from __future__ import annotations

import threading
import time
from typing import Any, Callable, Hashable, Optional, TypeVar

from splitledger.logging import get_logger


T = TypeVar("T")


class BalanceCache:
    """
    Short-lived memo of computed balances.

    Entries live for ``ttl`` seconds and are all dropped as soon as the ledger
    version they were computed against changes.
    """

    def __init__(self, ttl: float = 1.0, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._version: Optional[int] = None
        self._lock = threading.Lock()
        self._log = get_logger(__name__)

    def get_or_compute(self, key: Hashable, version: int, compute: Callable[[], T]) -> T:
        with self._lock:
            if version != self._version:
                self._entries.clear()
                self._version = version

            entry = self._entries.get(key)
            now = self._clock()
            if entry is not None and now - entry[0] < self._ttl:
                self._log.debug("cache.hit", key=key, version=version)
                return entry[1]

        self._log.debug("cache.miss", key=key, version=version)
        value = compute()

        with self._lock:
            # a newer ledger may have been seen while computing
            if version == self._version:
                self._entries[key] = (self._clock(), value)
        return value

    def invalidate(self, version: Optional[int] = None) -> None:
        with self._lock:
            self._entries.clear()
            self._version = version
        self._log.debug("cache.invalidated", version=version)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
