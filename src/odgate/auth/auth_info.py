"""Authentication information for odgate (MSAL OAuth only)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

DEFAULT_AUTHORITY = "https://login.microsoftonline.com/common"


@dataclass(slots=True, frozen=True)
class AuthInfo:
    """
    Authentication information.

    Supports MSAL only:
        kind = "msal"
        data must include:
            - client_id
            - token_cache_file
        data may include:
            - authority (defaults to the "common" endpoint)
            - client_secret (switches to a confidential client)
    """

    kind: str
    data: dict[str, Any]

    def __post_init__(self) -> None:
        if self.kind != "msal":
            raise ValueError("AuthInfo.kind must be 'msal'")

        if not isinstance(self.data, dict):
            raise TypeError("AuthInfo.data must be a dict")

        for key in ("client_id", "token_cache_file"):
            value = self.data.get(key)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string")

        for key in ("authority", "client_secret"):
            value = self.data.get(key)
            if value is not None and (not isinstance(value, str) or not value.strip()):
                raise ValueError(f"AuthInfo.data['{key}'] must be a non-empty string if set")

    @property
    def client_id(self) -> str:
        return str(self.data["client_id"])

    @property
    def token_cache_file(self) -> str:
        """Path to the serialized MSAL token cache."""
        return str(self.data["token_cache_file"])

    @property
    def authority(self) -> str:
        return str(self.data.get("authority") or DEFAULT_AUTHORITY)

    @property
    def client_secret(self) -> Optional[str]:
        value = self.data.get("client_secret")
        return str(value) if value else None
