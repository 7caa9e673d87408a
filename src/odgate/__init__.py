"""odgate public API."""

from __future__ import annotations

from odgate.auth import AuthInfo, OAuthClient
from odgate.cache import CacheStore, InMemoryCacheStore
from odgate.config import GatewayConfig
from odgate.controller import GraphController, RemoteStorageClient
from odgate.errors import (
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
from odgate.manager import GatewayManager
from odgate.models import DeleteCapability, OperationResult, RemoteItem, UploadedImage
from odgate.resolver import PathResolver
from odgate.tokens import TokenCodec
from odgate.util.paths import from_remote_path, normalize_path, to_remote_path

__all__ = [
    # High-level
    "GatewayManager",
    "GatewayConfig",
    "PathResolver",
    "TokenCodec",
    # Collaborators
    "RemoteStorageClient",
    "GraphController",
    "CacheStore",
    "InMemoryCacheStore",
    # Auth
    "AuthInfo",
    "OAuthClient",
    # Models
    "RemoteItem",
    "DeleteCapability",
    "UploadedImage",
    "OperationResult",
    # Path codec
    "normalize_path",
    "to_remote_path",
    "from_remote_path",
    # Errors
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
