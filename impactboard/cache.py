"""Caller-owned TTL cache.

The cache is created by whoever owns its lifetime (a scheduler, a request
handler, a test) and passed to the components that use it; nothing in this
package keeps a cache at module level.
"""

from __future__ import annotations

import time
from typing import Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

V = TypeVar("V")


class TTLCache(Generic[V]):
    """A mapping whose entries expire ``ttl`` seconds after they are set.

    Args:
        ttl: Entry lifetime in seconds; must be positive.
        clock: Monotonic time source, injectable for tests.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, V]] = {}

    def get(self, key: Hashable) -> Optional[V]:
        """Return the live value for ``key``, dropping it if expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: V) -> None:
        self._entries[key] = (self._clock() + self.ttl, value)

    def evict(self, key: Hashable) -> bool:
        """Remove ``key``; return whether it was present."""
        return self._entries.pop(key, None) is not None

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [k for k, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None
