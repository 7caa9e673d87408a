"""PathResolver: maps logical paths to remote items."""

from __future__ import annotations

import logging
from typing import Optional

from odgate.cache import CacheStore
from odgate.controller import RemoteStorageClient
from odgate.errors import NotFoundError
from odgate.models import RemoteItem
from odgate.util.paths import LogicalPath, split_path

logger = logging.getLogger(__name__)

ITEM_KEY_PREFIX = "item:"
CHILDREN_KEY_PREFIX = "children:"


class PathResolver:
    """
    Resolve logical paths by walking the remote tree from the configured root.

    Logical paths are relative to `root_path`, a folder below the drive item
    `root_id`; the empty path resolves to that folder.

    Only positive results are cached. A segment missing from a cached listing
    causes one uncached re-list before NotFoundError, so an item created since
    the listing was cached is still found.
    """

    def __init__(
        self,
        client: RemoteStorageClient,
        cache: CacheStore,
        *,
        root_id: str = "root",
        root_path: LogicalPath = "",
    ) -> None:
        self._client = client
        self._cache = cache
        self._root_id = root_id
        self._root_segments = split_path(root_path)

    @property
    def root_id(self) -> str:
        return self._root_id

    @property
    def root_path(self) -> str:
        return "/".join(self._root_segments)

    def resolve(self, path: LogicalPath) -> RemoteItem:
        """
        Return the remote item at `path`. The empty path is the configured root.

        Raises:
            InvalidPathError: malformed path.
            NotFoundError: the first segment without a matching child.
        """
        segments = split_path(path)
        full = self._root_segments + segments

        cached = self._cache.get(_item_key(full))
        if isinstance(cached, RemoteItem):
            return cached

        current = self._drive_root()
        for depth, name in enumerate(full):
            prefix = full[: depth + 1]
            prefix_key = _item_key(prefix)
            hit = self._cache.get(prefix_key)
            if isinstance(hit, RemoteItem):
                current = hit
                continue

            child = self._find_child(current, name)
            if child is None:
                if depth < len(self._root_segments):
                    raise NotFoundError(
                        "Configured root folder not found",
                        details={"root_path": self.root_path},
                    )
                raise NotFoundError(
                    "Path not found",
                    details={
                        "path": "/".join(segments),
                        "missing": "/".join(prefix[len(self._root_segments):]),
                    },
                )
            self._cache.set(prefix_key, child)
            current = child

        return current

    def resolve_or_root(self, path: Optional[LogicalPath]) -> RemoteItem:
        """Resolve `path`, treating None and "/" as the root."""
        if path is None:
            return self.resolve([])
        return self.resolve(path)

    def resolve_id(self, path: Optional[LogicalPath]) -> str:
        return self.resolve_or_root(path).id

    def list_folder(self, path: LogicalPath) -> list[RemoteItem]:
        """Return the children of the folder at `path` (cache-assisted)."""
        folder = self.resolve(path)
        if not folder.is_folder:
            raise NotFoundError("Path is not a folder", details={"path": "/".join(split_path(path))})
        cached = self._cache.get(CHILDREN_KEY_PREFIX + folder.id)
        if isinstance(cached, list):
            return cached
        return self._fetch_children(folder.id)

    def _drive_root(self) -> RemoteItem:
        key = _item_key([])
        cached = self._cache.get(key)
        if isinstance(cached, RemoteItem):
            return cached
        root = self._client.get_item(self._root_id)
        self._cache.set(key, root)
        return root

    def _find_child(self, parent: RemoteItem, name: str) -> Optional[RemoteItem]:
        cached = self._cache.get(CHILDREN_KEY_PREFIX + parent.id)
        if isinstance(cached, list):
            child = _match(cached, name)
            if child is not None:
                return child
            logger.debug("Segment %r missing from cached listing of %s; re-listing", name, parent.id)
        return _match(self._fetch_children(parent.id), name)

    def _fetch_children(self, item_id: str) -> list[RemoteItem]:
        children = self._client.list_children(item_id)
        self._cache.set(CHILDREN_KEY_PREFIX + item_id, children)
        return children


def _item_key(segments: list[str]) -> str:
    return ITEM_KEY_PREFIX + "/".join(segments)


def _match(children: list[RemoteItem], name: str) -> Optional[RemoteItem]:
    for child in children:
        if child.name == name:
            return child
    return None
