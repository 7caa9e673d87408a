"""
Capability token codec.

Tokens are AES-256-GCM ciphertexts rendered as unpadded URL-safe base64:

    version (1 byte) || nonce (12 bytes) || ciphertext + tag

The version byte is bound as associated data. A fresh nonce per call makes
encryption non-deterministic, so equal plaintexts never yield equal tokens.

Delete tokens use two layers: the integrity tag is encrypted alone, then
`item_id + "." + inner` is encrypted again.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import os
from typing import Callable, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from odgate.errors import InvalidPathError, TokenInvalidError
from odgate.models import DeleteCapability
from odgate.util.paths import normalize_path

KEY_SIZE = 32  # 256 bits
NONCE_SIZE = 12  # 96 bits for GCM
TAG_SIZE = 16
TOKEN_VERSION = 1

DELETE_TOKEN_SEPARATOR = "."
_APP_KEY_PREFIX = "base64:"

NonceSource = Callable[[int], bytes]


class TokenCodec:
    """Encrypt and decrypt opaque, URL-safe capability tokens."""

    def __init__(
        self,
        key: bytes,
        *,
        nonce_source: Optional[NonceSource] = None,
    ) -> None:
        if not isinstance(key, (bytes, bytearray)) or len(key) != KEY_SIZE:
            raise ValueError(f"key must be {KEY_SIZE} bytes")
        self._aesgcm = AESGCM(bytes(key))
        self._nonce_source: NonceSource = nonce_source or os.urandom
        self._header = bytes([TOKEN_VERSION])

    @classmethod
    def from_app_key(
        cls,
        app_key: Union[str, bytes],
        *,
        nonce_source: Optional[NonceSource] = None,
    ) -> "TokenCodec":
        """
        Build a codec from an application secret.

        `base64:<key>` values are decoded as a raw 32-byte key; anything else
        is treated as a passphrase and hashed with SHA-256.
        """
        if isinstance(app_key, str):
            if app_key.startswith(_APP_KEY_PREFIX):
                try:
                    raw = base64.b64decode(app_key[len(_APP_KEY_PREFIX):], validate=True)
                except binascii.Error as exc:
                    raise ValueError("app_key has an invalid base64 payload") from exc
                return cls(raw, nonce_source=nonce_source)
            app_key = app_key.encode("utf-8")
        if not app_key:
            raise ValueError("app_key must not be empty")
        return cls(hashlib.sha256(app_key).digest(), nonce_source=nonce_source)

    # ----------------------------
    # Primitive
    # ----------------------------
    def encrypt(self, plaintext: str) -> str:
        """Encrypt a string into a URL-safe token."""
        nonce = self._nonce_source(NONCE_SIZE)
        if len(nonce) != NONCE_SIZE:
            raise ValueError(f"nonce source must return {NONCE_SIZE} bytes")
        ciphertext = self._aesgcm.encrypt(nonce, plaintext.encode("utf-8"), self._header)
        return _b64encode(self._header + nonce + ciphertext)

    def decrypt(self, token: str) -> str:
        """
        Decrypt a token produced by `encrypt`.

        Raises:
            TokenInvalidError: for any malformed, tampered or foreign token.
        """
        if not isinstance(token, str) or not token:
            raise TokenInvalidError("Token is missing")

        try:
            raw = _b64decode(token)
        except (binascii.Error, ValueError) as exc:
            raise TokenInvalidError("Token is not valid base64", cause=exc) from exc

        if len(raw) < 1 + NONCE_SIZE + TAG_SIZE:
            raise TokenInvalidError("Token is too short")
        if raw[:1] != self._header:
            raise TokenInvalidError("Unsupported token version")

        nonce = raw[1:1 + NONCE_SIZE]
        ciphertext = raw[1 + NONCE_SIZE:]
        try:
            plaintext = self._aesgcm.decrypt(nonce, ciphertext, self._header)
            return plaintext.decode("utf-8")
        except InvalidTag as exc:
            raise TokenInvalidError("Token failed authentication", cause=exc) from exc
        except UnicodeDecodeError as exc:
            raise TokenInvalidError("Token payload is not text", cause=exc) from exc

    # ----------------------------
    # Delete capability
    # ----------------------------
    def encode_delete_token(self, item_id: str, integrity_tag: str) -> str:
        if not item_id or DELETE_TOKEN_SEPARATOR in item_id:
            raise ValueError("item_id must be non-empty and must not contain '.'")
        if not integrity_tag:
            raise ValueError("integrity_tag must be non-empty")
        inner = self.encrypt(integrity_tag)
        return self.encrypt(f"{item_id}{DELETE_TOKEN_SEPARATOR}{inner}")

    def decode_delete_token(self, token: str) -> DeleteCapability:
        """
        Reverse both layers of a delete token.

        Raises:
            TokenInvalidError: if either layer fails or the payload does not
                split into an item id and an inner token.
        """
        payload = self.decrypt(token)
        item_id, sep, inner = payload.partition(DELETE_TOKEN_SEPARATOR)
        if not sep or not item_id or not inner:
            raise TokenInvalidError("Delete token payload is malformed")
        integrity_tag = self.decrypt(inner)
        if not integrity_tag:
            raise TokenInvalidError("Delete token carries no integrity tag")
        return DeleteCapability(item_id=item_id, integrity_tag=integrity_tag)

    # ----------------------------
    # Navigation path
    # ----------------------------
    def encode_path_token(self, path: str) -> str:
        return self.encrypt(normalize_path(path))

    def decode_path_token(self, token: str) -> str:
        path = self.decrypt(token)
        try:
            return normalize_path(path)
        except InvalidPathError as exc:
            raise TokenInvalidError("Path token carries an invalid path", cause=exc) from exc


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64decode(token: str) -> bytes:
    data = token.encode("ascii")
    data += b"=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data)
