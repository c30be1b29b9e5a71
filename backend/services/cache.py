"""Simple in-memory TTL cache with a stale-read path for fallbacks.

Note: Each uvicorn worker has its own cache instance. With --workers 2,
the upstream may be queried twice (once per worker). Within a worker the
event loop never interleaves the synchronous check-then-evict steps below,
so no lock is needed.

Every accessor classifies an entry as FRESH, EXPIRED or ABSENT from a single
clock reading (see ``lookup``). ``get`` evicts expired entries; the last value
stored under a key is kept separately so ``get_stale`` can still serve it
after that eviction.
"""

import enum
import math
import time
from dataclasses import dataclass
from typing import Any, Callable


class EntryState(str, enum.Enum):
    FRESH = "fresh"
    EXPIRED = "expired"
    ABSENT = "absent"


@dataclass
class CacheEntry:
    value: Any
    expires_at: float


@dataclass
class CacheLookup:
    state: EntryState
    value: Any = None
    remaining_ttl: int = 0

    @property
    def hit(self) -> bool:
        return self.state is EntryState.FRESH


class TTLCache:
    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._store: dict[str, CacheEntry] = {}
        # last value set per key, never removed by expiry
        self._last_known: dict[str, CacheEntry] = {}

    def lookup(self, key: str) -> CacheLookup:
        """Classify ``key`` without mutating the cache."""
        entry = self._store.get(key)
        if entry is None:
            return CacheLookup(EntryState.ABSENT)
        now = self._clock()
        if now > entry.expires_at:
            return CacheLookup(EntryState.EXPIRED, entry.value, 0)
        return CacheLookup(EntryState.FRESH, entry.value, _seconds_left(entry, now))

    def get(self, key: str) -> Any | None:
        result = self.lookup(key)
        if result.state is EntryState.EXPIRED:
            self._store.pop(key, None)
            return None
        return result.value

    def set(self, key: str, value: Any, ttl_seconds: float = 60) -> None:
        entry = CacheEntry(value=value, expires_at=self._clock() + ttl_seconds)
        self._store[key] = entry
        self._last_known[key] = entry

    def remaining_ttl(self, key: str) -> int:
        """Whole seconds until expiry, 0 for expired or missing keys."""
        return self.lookup(key).remaining_ttl

    def get_stale(self, key: str) -> Any | None:
        """Return the last value set for ``key`` regardless of expiry.

        Used only as a fallback when a fresh computation fails. Reading
        never evicts, so repeated failures keep getting the same value.
        """
        entry = self._last_known.get(key)
        return None if entry is None else entry.value

    def stale_ttl(self, key: str) -> int:
        """Remaining TTL of the last known value, floored at 0."""
        entry = self._last_known.get(key)
        if entry is None:
            return 0
        return _seconds_left(entry, self._clock())

    def delete(self, key: str) -> None:
        self._store.pop(key, None)
        self._last_known.pop(key, None)

    def clear(self) -> None:
        self._store.clear()
        self._last_known.clear()

    def __contains__(self, key: str) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)


def _seconds_left(entry: CacheEntry, now: float) -> int:
    return max(0, math.floor(entry.expires_at - now))
