from __future__ import annotations
"""Time-bounded cache for signed read URLs."""
from collections import OrderedDict
from dataclasses import dataclass
import threading
import time
from typing import Callable, Optional

DEFAULT_MAX_ENTRIES = 1024
DEFAULT_REFRESH_MARGIN = 10


@dataclass(frozen=True)
class CachedUrl:
    url: str
    lifetime: int
    expires_at: float


class SignedUrlCache:
    """Keeps signed URLs per object key until shortly before they expire.

    An entry is served only while it still has more than ``refresh_margin``
    seconds to live and was signed for at least the requested lifetime.
    The oldest entries are evicted once ``max_entries`` is reached.
    """

    def __init__(
        self,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        refresh_margin: float = DEFAULT_REFRESH_MARGIN,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._max_entries = max(int(max_entries), 1)
        self._refresh_margin = max(float(refresh_margin), 0.0)
        self._clock = clock or time.monotonic
        self._entries: OrderedDict[str, CachedUrl] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get(self, key: str, expires_in: int) -> Optional[str]:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expires_at - now <= self._refresh_margin:
                del self._entries[key]
                return None
            if entry.lifetime < expires_in:
                return None
            self._entries.move_to_end(key)
            return entry.url

    def put(self, key: str, url: str, expires_in: int) -> None:
        entry = CachedUrl(url=url, lifetime=int(expires_in), expires_at=self._clock() + expires_in)
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            self._evict(self._clock())

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _evict(self, now: float) -> None:
        expired = [key for key, entry in self._entries.items() if entry.expires_at <= now]
        for key in expired:
            del self._entries[key]
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)
