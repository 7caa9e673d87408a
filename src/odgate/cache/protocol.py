"""Cache store interface used by the resolver and the manager."""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class CacheStore(Protocol):
    """
    Process-wide key/value cache of listings and item metadata.

    Implementations must be thread-safe. `invalidate_all` may raise; callers
    log the failure and carry on.
    """

    def get(self, key: str) -> Optional[Any]: ...
    def set(self, key: str, value: Any) -> None: ...
    def invalidate_all(self) -> None: ...
