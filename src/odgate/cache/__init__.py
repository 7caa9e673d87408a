"""Cache store exports for odgate."""

from __future__ import annotations

from .memory import InMemoryCacheStore
from .protocol import CacheStore

__all__ = ["CacheStore", "InMemoryCacheStore"]
