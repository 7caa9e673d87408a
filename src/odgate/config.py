"""Gateway configuration."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from typing import Any

from odgate.errors import InvalidPathError
from odgate.util.paths import normalize_path, validate_name

DEFAULT_LOCK_PASSWORD = "12345678"
LOCK_MARKER_NAME = ".password"
TEXT_FILE_SUFFIX = ".md"
MAX_UPLOAD_BYTES = 4 * 1024 * 1024


@dataclass(slots=True, frozen=True)
class GatewayConfig:
    """
    Settings shared by the gateway components.

    `app_key` keys the token codec: either `base64:<32 raw bytes>` or a
    passphrase. `base_url` is the public site used for view/delete links.
    """

    app_key: str
    base_url: str

    root_path: str = ""
    root_id: str = "root"
    image_hosting_path: str = "images"
    view_route: str = "view"
    delete_route: str = "delete"

    default_lock_password: str = DEFAULT_LOCK_PASSWORD
    lock_marker_name: str = LOCK_MARKER_NAME
    text_file_suffix: str = TEXT_FILE_SUFFIX

    max_upload_bytes: int = MAX_UPLOAD_BYTES
    request_timeout_sec: float = 30.0

    def __post_init__(self) -> None:
        for key in ("app_key", "base_url", "root_id", "lock_marker_name", "default_lock_password"):
            value = getattr(self, key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"GatewayConfig.{key} must be a non-empty string")

        if not self.base_url.startswith(("http://", "https://")):
            raise ValueError("GatewayConfig.base_url must be an http(s) URL")

        try:
            normalize_path(self.root_path)
            normalize_path(self.image_hosting_path)
            normalize_path(self.view_route)
            normalize_path(self.delete_route)
            validate_name(self.lock_marker_name)
        except InvalidPathError as exc:
            raise ValueError(f"GatewayConfig has an invalid path setting: {exc}") from exc

        if self.max_upload_bytes <= 0:
            raise ValueError("GatewayConfig.max_upload_bytes must be positive")
        if self.request_timeout_sec <= 0:
            raise ValueError("GatewayConfig.request_timeout_sec must be positive")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GatewayConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise TypeError("config data must be a dict")
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_json_file(cls, path: str) -> "GatewayConfig":
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_dict(json.load(f))
