"""GatewayManager: path-addressed mutations on top of a remote drive."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import IO, Any, Callable, Optional, TypeVar, Union
from urllib.parse import quote

from odgate.auth import AuthInfo
from odgate.cache import CacheStore, InMemoryCacheStore
from odgate.config import GatewayConfig
from odgate.controller import GraphController, RemoteStorageClient
from odgate.errors import (
    AuthError,
    CacheInvalidationError,
    InvalidContentError,
    InvalidPathError,
    NotFoundError,
    OdGateError,
    RemoteRejectedError,
    RemoteUnavailableError,
    TokenInvalidError,
)
from odgate.models import OperationResult, RemoteItem, UploadedImage
from odgate.resolver import PathResolver
from odgate.tokens import TokenCodec
from odgate.util.ids import random_segment
from odgate.util.paths import (
    LogicalPath,
    join_path,
    normalize_path,
    to_remote_path,
    validate_name,
)
from odgate.util.time import date_shards, now_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")

Content = Union[bytes, bytearray, memoryview, str, IO[bytes]]

# operation -> (success message, failure message)
_MESSAGES: dict[str, tuple[str, str]] = {
    "upload_file": ("File uploaded.", "Upload failed."),
    "upload_image": ("Image uploaded.", "Image upload failed."),
    "create_folder": ("Folder created.", "Failed to create folder."),
    "create_text_file": ("File created.", "Failed to create file."),
    "edit_text_file": ("File updated.", "Failed to update file."),
    "lock_folder": ("Folder locked. Remember the password!", "Failed to lock folder."),
    "delete_item": ("File deleted.", "Failed to delete file."),
    "copy_item": ("Copy started.", "Copy failed."),
    "move_item": ("Item moved.", "Move failed."),
    "create_share_link": ("Share link created.", "Failed to create share link."),
    "delete_share_link": ("Share link removed.", "Failed to remove share link."),
    "read_text_file": ("File loaded.", "Failed to load file."),
}


class GatewayManager:
    """
    Orchestrates path resolution, capability tokens and remote mutations.

    Every mutating operation runs: token decoding (if any), at most one
    resolve, exactly one remote mutation, then a whole-cache invalidation.
    Operations never raise odgate or remote errors; they return a failed
    OperationResult instead.
    """

    def __init__(
        self,
        client: RemoteStorageClient,
        cache: CacheStore,
        codec: TokenCodec,
        config: GatewayConfig,
        *,
        clock: Callable[[], datetime] = now_utc,
        segment_factory: Callable[[], str] = random_segment,
    ) -> None:
        self._client = client
        self._cache = cache
        self._codec = codec
        self._config = config
        self._clock = clock
        self._segment_factory = segment_factory
        self._resolver = PathResolver(
            client,
            cache,
            root_id=config.root_id,
            root_path=config.root_path,
        )

    @classmethod
    def from_config(
        cls,
        config: GatewayConfig,
        auth_info: AuthInfo,
        *,
        cache: Optional[CacheStore] = None,
    ) -> "GatewayManager":
        """Wire a Graph-backed manager with an in-memory cache by default."""
        controller = GraphController(
            auth_info,
            timeout_sec=config.request_timeout_sec,
            max_upload_bytes=config.max_upload_bytes,
        )
        return cls(
            controller,
            cache if cache is not None else InMemoryCacheStore(),
            TokenCodec.from_app_key(config.app_key),
            config,
        )

    @property
    def resolver(self) -> PathResolver:
        return self._resolver

    @property
    def codec(self) -> TokenCodec:
        return self._codec

    # ----------------------------
    # Uploads
    # ----------------------------
    def upload_file(
        self,
        folder_path: LogicalPath,
        content: Content,
        filename: str,
    ) -> OperationResult:
        """Upload `content` as `<folder_path>/<filename>`, replacing any existing file."""

        def call() -> RemoteItem:
            data = _read_content(content)
            path = join_path(folder_path, validate_name(filename))
            item = self._client.upload_by_path(self._remote(path), data)
            logger.info("Uploaded %s (%s)", path, item.id)
            return item

        return self._mutate("upload_file", call)

    def upload_image(self, content: Content, filename: str) -> OperationResult:
        """
        Upload an image to `<image_hosting_path>/YYYY/MM/DD/<random>/<filename>`.

        The result carries the public view URL and a delete URL whose token
        binds the uploaded item's id and eTag. When the remote reports no eTag
        the upload still succeeds and `delete_url` is None.
        """

        def call() -> tuple[str, RemoteItem]:
            data = _read_content(content)
            path = join_path(
                self._config.image_hosting_path,
                date_shards(self._clock()),
                [self._segment_factory()],
                validate_name(filename),
            )
            item = self._client.upload_by_path(self._remote(path), data)
            logger.info("Uploaded image %s (%s)", path, item.id)
            return path, item

        def finish(value: tuple[str, RemoteItem]) -> UploadedImage:
            path, item = value
            delete_url: Optional[str]
            try:
                delete_url = self.issue_delete_url(item)
            except (RemoteRejectedError, ValueError) as exc:
                logger.warning("No delete URL issued for uploaded image %s: %s", item.id, exc)
                delete_url = None
            return UploadedImage(
                item=item,
                path=path,
                view_url=self.view_url(path),
                delete_url=delete_url,
            )

        return self._mutate("upload_image", call, finish)

    # ----------------------------
    # Folder / text file management
    # ----------------------------
    def create_folder(self, parent_token: str, name: str) -> OperationResult:
        def call() -> RemoteItem:
            parent_path = self._codec.decode_path_token(parent_token)
            folder_name = validate_name(name)
            parent = self._resolver.resolve(parent_path)
            item = self._client.create_folder(folder_name, parent.id)
            logger.info("Created folder %s", join_path(parent_path, folder_name))
            return item

        return self._mutate("create_folder", call)

    def create_text_file(self, parent_token: str, name: str, content: str) -> OperationResult:
        """Create `<parent>/<name>.md` (e.g. README/HEAD files) with `content`."""

        def call() -> RemoteItem:
            data = _read_content(content)
            parent_path = self._codec.decode_path_token(parent_token)
            file_name = validate_name(name) + self._config.text_file_suffix
            path = join_path(parent_path, file_name)
            item = self._client.upload_by_path(self._remote(path), data)
            logger.info("Created text file %s (%s)", path, item.id)
            return item

        return self._mutate("create_text_file", call)

    def edit_text_file(self, item_id: str, content: str) -> OperationResult:
        """Replace the content of an existing file in place."""

        def call() -> RemoteItem:
            data = _read_content(content)
            item = self._client.upload_by_id(item_id, data)
            logger.info("Updated file %s", item_id)
            return item

        return self._mutate("edit_text_file", call)

    def read_text_file(self, item_id: str) -> OperationResult:
        """Load a file and its text content, as needed by an edit form."""

        def call() -> tuple[RemoteItem, str]:
            item = self._client.get_item(item_id)
            if item.is_folder or not item.download_url:
                raise RemoteRejectedError("Item has no downloadable content", details={"item_id": item_id})
            text = self._client.download(item.download_url).decode("utf-8", errors="replace")
            return item, text

        return self._run("read_text_file", call)

    def lock_folder(self, folder_token: str, password: Optional[str] = None) -> OperationResult:
        """Write the password marker file into the folder named by `folder_token`."""
        secret = password if password else self._config.default_lock_password
        data = secret.encode("utf-8")

        def call() -> RemoteItem:
            folder_path = self._codec.decode_path_token(folder_token)
            path = join_path(folder_path, self._config.lock_marker_name)
            item = self._client.upload_by_path(self._remote(path), data)
            logger.info("Locked folder /%s", folder_path)
            return item

        return self._mutate("lock_folder", call)

    # ----------------------------
    # Delete / copy / move
    # ----------------------------
    def delete_item(self, token: str) -> OperationResult:
        """
        Delete the exact item version named by a delete token.

        The token's eTag is sent as a precondition, so a file modified or
        replaced since the token was issued is not deleted.
        """

        def call() -> None:
            capability = self._codec.decode_delete_token(token)
            deleted = self._client.delete_item(capability.item_id, capability.integrity_tag)
            if not deleted:
                raise RemoteRejectedError(
                    "Remote storage refused the delete",
                    details={"item_id": capability.item_id},
                )
            logger.info("Deleted item %s", capability.item_id)
            return None

        return self._mutate("delete_item", call)

    def copy_item(self, source_path: LogicalPath, dest_path: Optional[LogicalPath]) -> OperationResult:
        """Start copying `source_path` into the folder `dest_path`. Data is the progress handle."""

        def call() -> str:
            source = self._resolver.resolve(source_path)
            dest = self._resolve_folder(dest_path)
            handle = self._client.copy(source.id, dest.id)
            logger.info("Copy of %s into %s started", source.id, dest.id)
            return handle

        return self._mutate("copy_item", call)

    def move_item(
        self,
        source_path: LogicalPath,
        dest_path: Optional[LogicalPath],
        new_name: Optional[str] = None,
    ) -> OperationResult:
        def call() -> RemoteItem:
            name = validate_name(new_name) if new_name else None
            source = self._resolver.resolve(source_path)
            dest = self._resolve_folder(dest_path)
            item = self._client.move(source.id, dest.id, name)
            logger.info("Moved %s into %s", source.id, dest.id)
            return item

        return self._mutate("move_item", call)

    # ----------------------------
    # Share links
    # ----------------------------
    def create_share_link(self, item_path: LogicalPath) -> OperationResult:
        def call() -> str:
            item = self._resolver.resolve(item_path)
            url = self._client.create_share_link(item.id)
            logger.info("Created share link for %s", item.id)
            return url

        return self._mutate("create_share_link", call)

    def delete_share_link(self, item_path: LogicalPath) -> OperationResult:
        def call() -> None:
            item = self._resolver.resolve(item_path)
            self._client.delete_share_link(item.id)
            logger.info("Removed share links of %s", item.id)
            return None

        return self._mutate("delete_share_link", call)

    # ----------------------------
    # Link helpers
    # ----------------------------
    def issue_delete_url(self, item: RemoteItem) -> str:
        """Build a public delete URL for the current version of `item`."""
        if not item.integrity_tag:
            raise RemoteRejectedError("Item has no eTag", details={"item_id": item.id})
        token = self._codec.encode_delete_token(item.id, item.integrity_tag)
        return self._public_url(self._config.delete_route, token)

    def issue_path_token(self, path: LogicalPath) -> str:
        return self._codec.encode_path_token(normalize_path(path))

    def view_url(self, path: LogicalPath) -> str:
        return self._public_url(self._config.view_route, quote(normalize_path(path), safe="/"))

    # ----------------------------
    # Internals
    # ----------------------------
    def _remote(self, path: LogicalPath) -> str:
        return to_remote_path(path, root_path=self._config.root_path)

    def _resolve_folder(self, path: Optional[LogicalPath]) -> RemoteItem:
        folder = self._resolver.resolve_or_root(path)
        if not folder.is_folder:
            raise InvalidPathError("Destination is not a folder", details={"item_id": folder.id})
        return folder

    def _public_url(self, route: str, tail: str) -> str:
        return "/".join(p for p in (self._config.base_url.rstrip("/"), normalize_path(route), tail) if p)

    def _run(self, operation: str, call: Callable[[], T]) -> OperationResult:
        try:
            data = call()
        except Exception as exc:
            return _failed_result(operation, exc)
        return OperationResult(
            operation=operation,
            status="success",
            message=_MESSAGES[operation][0],
            data=data,
        )

    def _mutate(
        self,
        operation: str,
        call: Callable[[], T],
        finish: Optional[Callable[[T], Any]] = None,
    ) -> OperationResult:
        try:
            value = call()
        except Exception as exc:
            return _failed_result(operation, exc)

        invalidated = self._invalidate_cache(operation)

        data: Any = value
        if finish is not None:
            try:
                data = finish(value)
            except Exception as exc:
                result = _failed_result(operation, exc)
                result.cache_invalidated = invalidated
                return result

        return OperationResult(
            operation=operation,
            status="success",
            message=_MESSAGES[operation][0],
            data=data,
            cache_invalidated=invalidated,
        )

    def _invalidate_cache(self, operation: str) -> bool:
        try:
            self._cache.invalidate_all()
        except Exception as exc:
            err = CacheInvalidationError("Cache invalidation failed", details={"operation": operation}, cause=exc)
            logger.warning("%s after %s; cached listings may be stale", err, operation, exc_info=exc)
            return False
        return True


def _read_content(content: Content) -> bytes:
    if isinstance(content, str):
        return content.encode("utf-8")
    if isinstance(content, (bytes, bytearray, memoryview)):
        return bytes(content)
    read = getattr(content, "read", None)
    if callable(read):
        data = read()
        if isinstance(data, str):
            return data.encode("utf-8")
        if isinstance(data, (bytes, bytearray)):
            return bytes(data)
    raise InvalidContentError(
        "Content must be bytes, text or a readable binary stream",
        details={"type": type(content).__name__},
    )


def _normalize_exception(exc: Exception) -> OdGateError:
    if isinstance(exc, OdGateError):
        return exc
    if isinstance(exc, (OSError, TimeoutError)):
        return RemoteUnavailableError("Remote storage is unreachable", cause=exc)
    return RemoteRejectedError("Remote storage error", cause=exc)


def _user_message(exc: OdGateError) -> str:
    if isinstance(exc, TokenInvalidError):
        return "The link is invalid or has expired."
    if isinstance(exc, InvalidPathError):
        return f"Invalid path: {exc}"
    if isinstance(exc, NotFoundError):
        return "The requested item does not exist."
    if isinstance(exc, RemoteUnavailableError):
        return "Remote storage is unavailable, please retry later."
    if isinstance(exc, AuthError):
        return "Remote storage authorization failed."
    return str(exc)


def _failed_result(operation: str, exc: Exception) -> OperationResult:
    err = _normalize_exception(exc)
    if err is exc:
        logger.warning("%s failed: %s: %s", operation, err.__class__.__name__, err)
    else:
        logger.exception("%s failed with an unexpected error", operation, exc_info=exc)

    return OperationResult(
        operation=operation,
        status="failed",
        message=f"{_MESSAGES[operation][1]} {_user_message(err)}",
        error_type=err.__class__.__name__,
        error_message=str(err),
        error_details=dict(err.details) or None,
    )
