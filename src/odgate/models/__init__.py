"""Public model exports for odgate."""

from __future__ import annotations

from .item import DeleteCapability, RemoteItem, UploadedImage
from .results import OperationResult, OperationStatus

__all__ = [
    "RemoteItem",
    "DeleteCapability",
    "UploadedImage",
    "OperationStatus",
    "OperationResult",
]
