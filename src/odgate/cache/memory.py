"""In-process cache store."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional


class InMemoryCacheStore:
    """
    Dict-backed cache store with an optional time-to-live.

    Thread-safe via :class:`threading.Lock`.
    """

    def __init__(
        self,
        *,
        ttl_sec: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_sec is not None and ttl_sec <= 0:
            raise ValueError("ttl_sec must be positive")
        self._ttl_sec = ttl_sec
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, tuple[Any, Optional[float]]] = {}

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at is not None and self._clock() >= expires_at:
                del self._entries[key]
                return None
            return value

    def set(self, key: str, value: Any) -> None:
        expires_at = None
        if self._ttl_sec is not None:
            expires_at = self._clock() + self._ttl_sec
        with self._lock:
            self._entries[key] = (value, expires_at)

    def invalidate_all(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
