"""OAuth client utilities for odgate."""

from __future__ import annotations

import logging
import os
from typing import Any, Sequence

import msal
import requests

from odgate.errors import AuthError

from .auth_info import AuthInfo

logger = logging.getLogger(__name__)


class OAuthClient:
    """Acquire Microsoft Graph access tokens through MSAL and build HTTP sessions."""

    def __init__(self, auth_info: AuthInfo) -> None:
        if auth_info.kind != "msal":
            raise AuthError("OAuthClient requires AuthInfo(kind='msal')")
        self._auth_info = auth_info
        self._cache = msal.SerializableTokenCache()
        self._app: Any = None

    def get_access_token(self, scopes: Sequence[str], interactive: bool = True) -> str:
        """
        Return a bearer token for the given scopes.

        Args:
            scopes: Graph scopes, e.g. ("Files.ReadWrite.All",).
            interactive: If True, fall back to the interactive browser flow
                (public clients) when no cached account can be used.

        Raises:
            AuthError: on cache load/save or token acquisition failures.
            ValueError: if scopes is invalid.
        """
        if not scopes or not all(isinstance(s, str) and s.strip() for s in scopes):
            raise ValueError("scopes must be a non-empty sequence of strings")

        app = self._get_app()
        use_scopes = list(scopes)
        result = None

        try:
            if self._auth_info.client_secret:
                result = app.acquire_token_for_client(scopes=use_scopes)
            else:
                accounts = app.get_accounts()
                if accounts:
                    result = app.acquire_token_silent(use_scopes, account=accounts[0])
                if not result and interactive:
                    logger.info("No cached Graph account; starting interactive login")
                    result = app.acquire_token_interactive(scopes=use_scopes)
        except Exception as exc:
            raise AuthError("Token acquisition failed", cause=exc) from exc

        if not result or "access_token" not in result:
            error = (result or {}).get("error_description") or (result or {}).get("error")
            raise AuthError(
                "Failed to acquire access token",
                details={"error": error} if error else None,
            )

        self._save_cache()
        return str(result["access_token"])

    def build_session(self, scopes: Sequence[str]) -> requests.Session:
        """Build a requests session that sends a fresh bearer token on every request."""
        session = requests.Session()
        session.auth = _BearerAuth(self, list(scopes))
        return session

    def _get_app(self) -> Any:
        if self._app is not None:
            return self._app

        self._load_cache()
        info = self._auth_info
        try:
            if info.client_secret:
                self._app = msal.ConfidentialClientApplication(
                    info.client_id,
                    authority=info.authority,
                    client_credential=info.client_secret,
                    token_cache=self._cache,
                )
            else:
                self._app = msal.PublicClientApplication(
                    info.client_id,
                    authority=info.authority,
                    token_cache=self._cache,
                )
        except Exception as exc:
            raise AuthError(
                "Failed to initialize MSAL application",
                details={"authority": info.authority},
                cause=exc,
            ) from exc
        return self._app

    def _load_cache(self) -> None:
        cache_file = self._auth_info.token_cache_file
        if not os.path.exists(cache_file):
            return
        try:
            with open(cache_file, "r", encoding="utf-8") as f:
                self._cache.deserialize(f.read())
        except Exception as exc:
            raise AuthError(
                "Failed to load token cache",
                details={"token_cache_file": cache_file},
                cause=exc,
            ) from exc

    def _save_cache(self) -> None:
        if not self._cache.has_state_changed:
            return

        cache_file = self._auth_info.token_cache_file
        cache_dir = os.path.dirname(cache_file)
        if cache_dir:
            os.makedirs(cache_dir, exist_ok=True)

        try:
            with open(cache_file, "w", encoding="utf-8") as f:
                f.write(self._cache.serialize())
        except Exception as exc:
            raise AuthError(
                "Failed to save token cache",
                details={"token_cache_file": cache_file},
                cause=exc,
            ) from exc


class _BearerAuth(requests.auth.AuthBase):
    def __init__(self, client: OAuthClient, scopes: list[str]) -> None:
        self._client = client
        self._scopes = scopes

    def __call__(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        token = self._client.get_access_token(self._scopes, interactive=False)
        request.headers["Authorization"] = f"Bearer {token}"
        return request
