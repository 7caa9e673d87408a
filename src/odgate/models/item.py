"""Data model for remote drive items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(slots=True, frozen=True)
class RemoteItem:
    """
    Snapshot of a drive item as reported by the remote storage API.

    Notes:
        - `integrity_tag` is the remote eTag; it changes on every content write.
        - `download_url` is short-lived and only present for files.
    """

    id: str
    name: str

    size: Optional[int] = None
    last_modified_time: Optional[datetime] = None
    integrity_tag: Optional[str] = None
    download_url: Optional[str] = None

    is_folder: bool = False
    parent_id: Optional[str] = None
    web_url: Optional[str] = None
    mime_type: Optional[str] = None


@dataclass(slots=True, frozen=True)
class DeleteCapability:
    """Item id and integrity tag carried by a delete token."""

    item_id: str
    integrity_tag: str


@dataclass(slots=True, frozen=True)
class UploadedImage:
    """Result of an image upload: the stored item plus its public links."""

    item: RemoteItem
    path: str
    view_url: str
    delete_url: Optional[str] = None
