import time
from typing import Any

DEFAULT_MAX_ENTRIES = 1000


class TTLCache:
    """
    In-process cache for upstream API responses.

    Expired entries are dropped on read and swept on every write. Once
    `max_entries` live entries are held, the oldest one is evicted.
    """

    def __init__(self, ttl_seconds: float, max_entries: int = DEFAULT_MAX_ENTRIES):
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._entries: dict[str, tuple[float, Any]] = {}

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at > self.ttl_seconds

    def get(self, key: str) -> Any | None:
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, value = entry
        if self._expired(stored_at, time.monotonic()):
            del self._entries[key]
            return None
        return value

    def set(self, key: str, value: Any) -> None:
        now = time.monotonic()
        self._entries.pop(key, None)
        self._entries = {k: e for k, e in self._entries.items() if not self._expired(e[0], now)}

        # dicts keep insertion order, so the first key is the oldest write
        while len(self._entries) >= self.max_entries:
            del self._entries[next(iter(self._entries))]

        self._entries[key] = (now, value)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
