"""Deployment-versioned response cache for CMS queries.

Entries live for a short revalidation window. Changing the deployment marker
makes the next lookup miss, so a new deploy never serves content cached by
the previous one. The cache holds at most ``max_entries`` responses: expired
entries are purged first, then the oldest ones are evicted.
"""

import json
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple


class VersionedCache:
    def __init__(
        self,
        ttl_seconds: int = 60,
        version: str = "dev",
        clock: Callable[[], float] = time.monotonic,
        max_entries: int = 256,
    ):
        self.ttl_seconds = ttl_seconds
        self.version = version
        self.max_entries = max_entries
        self._clock = clock
        self._lock = threading.Lock()
        # Insertion order is storage order, so the first key is the oldest.
        self._entries: Dict[str, Tuple[str, float, Any]] = {}

    @staticmethod
    def key(query: str, variables: Dict[str, Any]) -> str:
        return json.dumps({"q": " ".join(query.split()), "v": variables}, sort_keys=True, default=str)

    def _stale(self, entry: Tuple[str, float, Any], now: float) -> bool:
        version, stored_at, _ = entry
        return version != self.version or now - stored_at > self.ttl_seconds

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._stale(entry, self._clock()):
                self._entries.pop(key, None)
                return None
            return entry[2]

    def set(self, key: str, value: Any) -> None:
        if self.ttl_seconds <= 0 or self.max_entries <= 0:
            return
        with self._lock:
            now = self._clock()
            self._entries.pop(key, None)
            if len(self._entries) >= self.max_entries:
                self._purge(now)
            while len(self._entries) >= self.max_entries:
                del self._entries[next(iter(self._entries))]
            self._entries[key] = (self.version, now, value)

    def _purge(self, now: float) -> None:
        for key in [k for k, entry in self._entries.items() if self._stale(entry, now)]:
            del self._entries[key]

    def set_version(self, version: str) -> bool:
        with self._lock:
            if version == self.version:
                return False
            self.version = version
            self._entries.clear()
            return True

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
