"""Remote storage controller exports for odgate."""

from __future__ import annotations

from .graph_controller import GraphController
from .protocol import RemoteStorageClient

__all__ = ["GraphController", "RemoteStorageClient"]
