"""Capability token exports for odgate."""

from __future__ import annotations

from .codec import KEY_SIZE, NONCE_SIZE, TokenCodec

__all__ = ["TokenCodec", "KEY_SIZE", "NONCE_SIZE"]
