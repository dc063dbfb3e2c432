# scd_core/utils/ttl_cache.py
from __future__ import annotations
import threading
import time
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """
    Key -> (value, expiry) map with lazy eviction.
    - Expiry is refreshed on every hit (sliding TTL).
    - No background timer: expired entries go on access, on sweep(), or when
      the soft size cap is reached during put().
    """
    def __init__(
        self,
        ttl_s: float = 60.0,
        max_entries: int = 2048,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_s = ttl_s
        self.max_entries = max_entries
        self.clock = clock
        self._lock = threading.RLock()
        self._data: Dict[K, Tuple[V, float]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)

    def get(self, key: K) -> Optional[V]:
        now = self.clock()
        with self._lock:
            hit = self._data.get(key)
            if hit is None:
                return None
            value, expires = hit
            if expires <= now:
                del self._data[key]
                return None
            self._data[key] = (value, now + self.ttl_s)
            return value

    def put(self, key: K, value: V) -> None:
        now = self.clock()
        with self._lock:
            if len(self._data) >= self.max_entries and key not in self._data:
                self._sweep_locked(now)
                if len(self._data) >= self.max_entries:
                    # still full: drop whatever expires first
                    oldest = min(self._data, key=lambda k: self._data[k][1])
                    del self._data[oldest]
            self._data[key] = (value, now + self.ttl_s)

    def sweep(self) -> int:
        """Evict every expired entry; returns how many were dropped."""
        with self._lock:
            return self._sweep_locked(self.clock())

    def clear(self) -> None:
        with self._lock:
            self._data.clear()

    def _sweep_locked(self, now: float) -> int:
        expired = [k for k, (_v, exp) in self._data.items() if exp <= now]
        for k in expired:
            del self._data[k]
        return len(expired)
