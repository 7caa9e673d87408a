"""Remote storage client interface consumed by the resolver and the manager."""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from odgate.models import RemoteItem


@runtime_checkable
class RemoteStorageClient(Protocol):
    """
    Id-addressed drive operations plus upload by Graph path.

    Every method may raise an odgate error (NotFoundError, RemoteRejectedError,
    RemoteUnavailableError, AuthError).
    """

    def upload_by_path(self, remote_path: str, data: bytes) -> RemoteItem: ...
    def upload_by_id(self, item_id: str, data: bytes) -> RemoteItem: ...
    def get_item(self, item_id: str) -> RemoteItem: ...
    def list_children(self, item_id: str) -> list[RemoteItem]: ...
    def create_folder(self, name: str, parent_id: str) -> RemoteItem: ...
    def delete_item(self, item_id: str, integrity_tag: Optional[str] = None) -> bool: ...
    def copy(self, item_id: str, dest_parent_id: str) -> str: ...
    def move(self, item_id: str, dest_parent_id: str, new_name: Optional[str] = None) -> RemoteItem: ...
    def create_share_link(self, item_id: str) -> str: ...
    def delete_share_link(self, item_id: str) -> bool: ...
    def download(self, url: str) -> bytes: ...
