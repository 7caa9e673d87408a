"""Exception hierarchy and HTTP error mapping for odgate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class OdGateError(Exception):
    """
    Base exception for odgate.

    Attributes:
        details: Optional structured information (e.g., HTTP status, path).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class InvalidPathError(OdGateError):
    """Raised when a logical or remote path is malformed (caller error)."""


class TokenInvalidError(OdGateError):
    """Raised when a capability or navigation token fails to decode."""


class NotFoundError(OdGateError):
    """Raised when a path segment or remote item does not exist."""


class RemoteRejectedError(OdGateError):
    """Raised when the remote API returns a business error (name collision, etag mismatch)."""


class RemoteUnavailableError(OdGateError):
    """Raised on transport failures and timeouts. Callers may retry with backoff."""


class CacheInvalidationError(OdGateError):
    """Raised by a cache store when invalidation fails. Logged, never surfaced."""


class AuthError(RemoteRejectedError):
    """Raised when OAuth token acquisition or refresh fails, or Graph answers 401."""


class InvalidContentError(OdGateError):
    """Raised when upload content is not bytes, text or a readable binary stream."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to odgate exceptions."""

    status_code: int
    code: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


_UNAVAILABLE_STATUS: tuple[int, ...] = (408, 429)


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> OdGateError:
    """
    Map an HTTP error to an odgate exception.

    Policy:
        - 401 -> AuthError (a RemoteRejectedError)
        - 404 -> NotFoundError
        - 408/429 -> RemoteUnavailableError
        - 5xx -> RemoteUnavailableError
        - otherwise -> RemoteRejectedError (remote message preserved)
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "code": info.code,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code == 401:
        return AuthError(message, details=details, cause=cause)
    if info.status_code == 404:
        return NotFoundError(message, details=details, cause=cause)
    if info.status_code in _UNAVAILABLE_STATUS:
        return RemoteUnavailableError(message, details=details, cause=cause)
    if 500 <= info.status_code <= 599:
        return RemoteUnavailableError(message, details=details, cause=cause)

    return RemoteRejectedError(message, details=details, cause=cause)
