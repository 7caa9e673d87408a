"""Microsoft Graph drive controller."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence, TypeVar

import requests

from odgate.auth import AuthInfo, OAuthClient
from odgate.errors import (
    HttpErrorInfo,
    InvalidPathError,
    OdGateError,
    RemoteRejectedError,
    RemoteUnavailableError,
    map_http_error,
)
from odgate.models import RemoteItem
from odgate.util.paths import REMOTE_ROOT
from odgate.util.time import parse_rfc3339

from .fields import (
    CHILDREN_PAGE_SIZE,
    CONFLICT_BEHAVIOR_FIELD,
    DOWNLOAD_URL_FIELD,
    ITEM_FIELDS,
    NEXT_LINK_FIELD,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

GRAPH_BASE_URL = "https://graph.microsoft.com/v1.0"
DEFAULT_DRIVE_PATH = "/me/drive"
SIMPLE_UPLOAD_MAX_BYTES = 4 * 1024 * 1024


@dataclass(frozen=True)
class _RetryPolicy:
    max_retries: int = 3
    initial_delay_sec: float = 1.0


class GraphController:
    """
    Graph drive controller.

    Notes:
        - Only idempotent reads are retried; every mutating call is sent once.
        - Uploads use the simple (single request) upload API.
    """

    DEFAULT_SCOPES: tuple[str, ...] = ("Files.ReadWrite.All",)

    def __init__(
        self,
        auth_info: AuthInfo,
        *,
        scopes: Optional[Sequence[str]] = None,
        drive_path: str = DEFAULT_DRIVE_PATH,
        timeout_sec: float = 30.0,
        max_upload_bytes: int = SIMPLE_UPLOAD_MAX_BYTES,
    ) -> None:
        use_scopes = list(scopes) if scopes is not None else list(self.DEFAULT_SCOPES)
        client = OAuthClient(auth_info)
        self._init(
            client.build_session(use_scopes),
            base_url=GRAPH_BASE_URL,
            drive_path=drive_path,
            timeout_sec=timeout_sec,
            max_upload_bytes=max_upload_bytes,
        )

    @classmethod
    def from_session(
        cls,
        session: Any,
        *,
        download_session: Any = None,
        base_url: str = GRAPH_BASE_URL,
        drive_path: str = DEFAULT_DRIVE_PATH,
        timeout_sec: float = 30.0,
        max_upload_bytes: int = SIMPLE_UPLOAD_MAX_BYTES,
    ) -> "GraphController":
        """Create controller from a pre-built HTTP session (useful for tests)."""
        obj = cls.__new__(cls)
        obj._init(
            session,
            download_session=download_session,
            base_url=base_url,
            drive_path=drive_path,
            timeout_sec=timeout_sec,
            max_upload_bytes=max_upload_bytes,
        )
        return obj

    def _init(
        self,
        session: Any,
        *,
        download_session: Any = None,
        base_url: str,
        drive_path: str,
        timeout_sec: float,
        max_upload_bytes: int,
    ) -> None:
        self._session = session
        # Download URLs are pre-authenticated and must not receive the bearer token.
        self._download_session = download_session if download_session is not None else requests.Session()
        self._drive_url = base_url.rstrip("/") + "/" + drive_path.strip("/")
        self._timeout_sec = timeout_sec
        self._max_upload_bytes = max_upload_bytes
        self._retry_policy = _RetryPolicy()

    # ----------------------------
    # Reads
    # ----------------------------
    def get_item(self, item_id: str) -> RemoteItem:
        resp = self._request(
            "GET",
            f"/items/{item_id}",
            params={"$select": ITEM_FIELDS},
            idempotent=True,
        )
        return _item_dict_to_remote_item(resp.json())

    def list_children(self, item_id: str) -> list[RemoteItem]:
        items: list[RemoteItem] = []
        url: Optional[str] = f"/items/{item_id}/children"
        params: Optional[dict[str, Any]] = {
            "$select": ITEM_FIELDS,
            "$top": CHILDREN_PAGE_SIZE,
        }

        while url:
            resp = self._request("GET", url, params=params, idempotent=True)
            data = resp.json()
            for entry in data.get("value", []):
                items.append(_item_dict_to_remote_item(entry))
            # nextLink already carries the query string.
            url = data.get(NEXT_LINK_FIELD)
            params = None

        return items

    def download(self, url: str) -> bytes:
        """Fetch a `@microsoft.graph.downloadUrl` through the unauthenticated session."""
        resp = self._request("GET", url, idempotent=True, session=self._download_session)
        return resp.content

    # ----------------------------
    # Mutations
    # ----------------------------
    def upload_by_path(self, remote_path: str, data: bytes) -> RemoteItem:
        if remote_path == REMOTE_ROOT:
            raise InvalidPathError("Cannot upload content to the drive root")
        self._check_upload_size(data)
        resp = self._request(
            "PUT",
            f"/{remote_path}/content",
            params={CONFLICT_BEHAVIOR_FIELD: "replace"},
            data=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return _item_dict_to_remote_item(resp.json())

    def upload_by_id(self, item_id: str, data: bytes) -> RemoteItem:
        self._check_upload_size(data)
        resp = self._request(
            "PUT",
            f"/items/{item_id}/content",
            data=data,
            headers={"Content-Type": "application/octet-stream"},
        )
        return _item_dict_to_remote_item(resp.json())

    def create_folder(self, name: str, parent_id: str) -> RemoteItem:
        body = {
            "name": name,
            "folder": {},
            CONFLICT_BEHAVIOR_FIELD: "fail",
        }
        resp = self._request("POST", f"/items/{parent_id}/children", json=body)
        return _item_dict_to_remote_item(resp.json())

    def delete_item(self, item_id: str, integrity_tag: Optional[str] = None) -> bool:
        """
        Delete an item. With `integrity_tag`, the request carries If-Match so
        Graph refuses (412) to delete any other version of the item.
        """
        headers = {"If-Match": integrity_tag} if integrity_tag else None
        self._request("DELETE", f"/items/{item_id}", headers=headers)
        return True

    def copy(self, item_id: str, dest_parent_id: str) -> str:
        """Start an async copy. Returns the monitor URL reported by Graph."""
        body = {"parentReference": {"id": dest_parent_id}}
        resp = self._request("POST", f"/items/{item_id}/copy", json=body)
        monitor_url = resp.headers.get("Location")
        if not monitor_url:
            raise RemoteRejectedError(
                "Copy accepted without a monitor URL",
                details={"status_code": resp.status_code},
            )
        return str(monitor_url)

    def move(
        self,
        item_id: str,
        dest_parent_id: str,
        new_name: Optional[str] = None,
    ) -> RemoteItem:
        body: dict[str, Any] = {"parentReference": {"id": dest_parent_id}}
        if new_name:
            body["name"] = new_name
        resp = self._request("PATCH", f"/items/{item_id}", json=body)
        return _item_dict_to_remote_item(resp.json())

    def create_share_link(self, item_id: str) -> str:
        body = {"type": "view", "scope": "anonymous"}
        resp = self._request("POST", f"/items/{item_id}/createLink", json=body)
        link = resp.json().get("link") or {}
        url = link.get("webUrl")
        if not isinstance(url, str) or not url:
            raise RemoteRejectedError("Share link response has no webUrl")
        return url

    def delete_share_link(self, item_id: str) -> bool:
        """Remove every sharing-link permission of the item."""
        resp = self._request("GET", f"/items/{item_id}/permissions", idempotent=True)
        for perm in resp.json().get("value", []):
            if "link" not in perm or not perm.get("id"):
                continue
            self._request("DELETE", f"/items/{item_id}/permissions/{perm['id']}")
        return True

    # ----------------------------
    # Internals
    # ----------------------------
    def _check_upload_size(self, data: bytes) -> None:
        if len(data) > self._max_upload_bytes:
            raise RemoteRejectedError(
                "File exceeds the single request upload limit",
                details={"size": len(data), "limit": self._max_upload_bytes},
            )

    def _request(
        self,
        method: str,
        path_or_url: str,
        *,
        idempotent: bool = False,
        session: Any = None,
        **kwargs: Any,
    ) -> requests.Response:
        if path_or_url.startswith(("http://", "https://")):
            url = path_or_url
        else:
            url = self._drive_url + path_or_url
        use_session = session if session is not None else self._session

        def send() -> requests.Response:
            resp = use_session.request(method, url, timeout=self._timeout_sec, **kwargs)
            if resp.status_code >= 400:
                raise map_http_error(_response_to_info(resp))
            return resp

        return self._execute(send, retry=idempotent)

    def _execute(self, func: Callable[[], T], *, retry: bool) -> T:
        max_retries = self._retry_policy.max_retries if retry else 0
        delay = self._retry_policy.initial_delay_sec
        for attempt in range(max_retries + 1):
            try:
                return func()
            except Exception as exc:
                mapped = self._map_exception(exc)
                if isinstance(mapped, RemoteUnavailableError) and attempt < max_retries:
                    logger.debug("Retrying Graph request after %s (attempt %d)", mapped, attempt + 1)
                    time.sleep(delay)
                    delay *= 2
                    continue
                if mapped is exc:
                    raise
                raise mapped from exc

        raise RemoteUnavailableError("Unexpected retry loop termination")

    def _map_exception(self, exc: Exception) -> Exception:
        if isinstance(exc, OdGateError):
            return exc
        if isinstance(exc, (requests.Timeout, requests.ConnectionError, OSError, TimeoutError)):
            return RemoteUnavailableError("Network error", cause=exc)
        if isinstance(exc, requests.RequestException):
            return RemoteUnavailableError("HTTP transport error", cause=exc)
        return RemoteRejectedError("Graph API error", cause=exc)


def _item_dict_to_remote_item(data: dict[str, Any]) -> RemoteItem:
    item_id = data.get("id")
    if not isinstance(item_id, str) or not item_id:
        raise RemoteRejectedError("Graph response has no item id")

    name = data.get("name")

    modified_time = None
    if isinstance(data.get("lastModifiedDateTime"), str):
        try:
            modified_time = parse_rfc3339(data["lastModifiedDateTime"])
        except ValueError:
            modified_time = None

    size = data.get("size")
    if isinstance(size, bool) or not isinstance(size, int):
        size = None

    etag = data.get("eTag")
    download_url = data.get(DOWNLOAD_URL_FIELD)
    parent = data.get("parentReference") or {}
    file_facet = data.get("file") or {}
    web_url = data.get("webUrl")

    return RemoteItem(
        id=item_id,
        name=name if isinstance(name, str) else "",
        size=size,
        last_modified_time=modified_time,
        integrity_tag=etag if isinstance(etag, str) else None,
        download_url=download_url if isinstance(download_url, str) else None,
        is_folder="folder" in data,
        parent_id=parent.get("id") if isinstance(parent.get("id"), str) else None,
        web_url=web_url if isinstance(web_url, str) else None,
        mime_type=file_facet.get("mimeType") if isinstance(file_facet, dict) else None,
    )


def _response_to_info(resp: Any) -> HttpErrorInfo:
    status_code = getattr(resp, "status_code", None)
    code = None
    message = None
    details: dict[str, Any] = {}

    try:
        payload = resp.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            code = err.get("code") if isinstance(err.get("code"), str) else None
            message = err.get("message") or None
            inner = err.get("innerError")
            if isinstance(inner, dict) and isinstance(inner.get("request-id"), str):
                details["request_id"] = inner["request-id"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        code=code,
        message=message if isinstance(message, str) else None,
        details=details or None,
    )
