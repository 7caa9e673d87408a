from __future__ import annotations

import secrets
import string

_SEGMENT_ALPHABET: str = string.ascii_letters + string.digits


def random_segment(length: int = 8) -> str:
    """Generate a random alphanumeric path segment."""
    if length <= 0:
        raise ValueError("length must be positive")
    return "".join(secrets.choice(_SEGMENT_ALPHABET) for _ in range(length))
