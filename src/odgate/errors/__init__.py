"""Public error exports for odgate."""

from __future__ import annotations

from .exceptions import (
    AuthError,
    CacheInvalidationError,
    HttpErrorInfo,
    InvalidContentError,
    InvalidPathError,
    NotFoundError,
    OdGateError,
    RemoteRejectedError,
    RemoteUnavailableError,
    TokenInvalidError,
    map_http_error,
)

__all__ = [
    "OdGateError",
    "InvalidPathError",
    "InvalidContentError",
    "TokenInvalidError",
    "NotFoundError",
    "RemoteRejectedError",
    "RemoteUnavailableError",
    "CacheInvalidationError",
    "AuthError",
    "HttpErrorInfo",
    "map_http_error",
]
