import copy
import json
import threading
import time
from collections.abc import Callable
from typing import Any

from interview_prep.core.constants import DEFAULT_CACHE_TTL_SECONDS


class CacheEntry:
    __slots__ = ("data", "timestamp", "ttl")

    def __init__(self, data: Any, timestamp: float, ttl: float):
        self.data = data
        self.timestamp = timestamp
        self.ttl = ttl

    def expired(self, now: float) -> bool:
        return now > self.timestamp + self.ttl


class ResponseCache:
    """In-process TTL cache for raw model responses.

    Entries are deep-copied in and out so a caller can never mutate what is
    stored. Expired entries are dropped lazily on read and swept before stats
    are reported.
    """

    def __init__(
        self,
        default_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    @staticmethod
    def make_key(endpoint: str, payload: Any) -> str:
        body = json.dumps(payload, sort_keys=True, ensure_ascii=False, separators=(",", ":"))
        return f"{endpoint}:{body}"

    def get(self, key: str) -> Any | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if entry.expired(self._clock()):
                del self._entries[key]
                return None
            return copy.deepcopy(entry.data)

    def set(self, key: str, data: Any, ttl: float | None = None) -> None:
        entry = CacheEntry(
            data=copy.deepcopy(data),
            timestamp=self._clock(),
            ttl=self.default_ttl if ttl is None else ttl,
        )
        with self._lock:
            self._entries[key] = entry

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def cleanup(self) -> int:
        with self._lock:
            now = self._clock()
            stale = [key for key, entry in self._entries.items() if entry.expired(now)]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def stats(self) -> dict[str, int]:
        self.cleanup()
        with self._lock:
            size = len(self._entries)
        return {"size": size, "entries": size}

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
