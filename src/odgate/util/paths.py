"""
Logical path helpers and the Graph path codec.

A logical path is a root-relative, `/`-separated string. Its normalized form
has no leading, trailing or duplicate separators; the empty string is the
root. The remote form is Graph path addressing relative to the drive:

    ""        -> "root"
    "a/b c"   -> "root:/a/b%20c:"
"""

from __future__ import annotations

from typing import Sequence, Union
from urllib.parse import quote, unquote

from odgate.errors import InvalidPathError

SEPARATOR: str = "/"
REMOTE_ROOT: str = "root"
_REMOTE_PREFIX: str = "root:/"
_REMOTE_SUFFIX: str = ":"
_RESERVED_SEGMENTS: frozenset[str] = frozenset({".", ".."})

LogicalPath = Union[str, Sequence[str]]


def split_path(path: LogicalPath) -> list[str]:
    """Split a logical path into validated segments."""
    if isinstance(path, str):
        return _check_segments([s for s in path.split(SEPARATOR) if s])

    segments: list[str] = []
    for seg in path:
        if not isinstance(seg, str):
            raise InvalidPathError("path segments must be strings")
        if SEPARATOR in seg:
            raise InvalidPathError(
                "path segment must not contain a separator",
                details={"segment": seg},
            )
        if seg:
            segments.append(seg)
    return _check_segments(segments)


def normalize_path(path: LogicalPath) -> str:
    """Return the normalized string form of a logical path."""
    return SEPARATOR.join(split_path(path))


def join_path(*parts: LogicalPath) -> str:
    """Join logical paths, dropping empty parts."""
    segments: list[str] = []
    for part in parts:
        segments.extend(split_path(part))
    return SEPARATOR.join(segments)


def validate_name(name: str) -> str:
    """Check that `name` is a single usable path segment and return it."""
    if not isinstance(name, str) or not name.strip():
        raise InvalidPathError("name must be a non-empty string")
    if SEPARATOR in name:
        raise InvalidPathError("name must not contain a separator", details={"name": name})
    if name in _RESERVED_SEGMENTS:
        raise InvalidPathError("name must not be '.' or '..'", details={"name": name})
    return name


def to_remote_path(path: LogicalPath, *, root_path: LogicalPath = "") -> str:
    """
    Convert a logical path into Graph path addressing.

    Every segment is percent-encoded with no safe characters, which keeps the
    mapping injective and neutralizes characters Graph treats specially
    (`:`, `#`, `%`, `?`).
    """
    segments = split_path(root_path) + split_path(path)
    if not segments:
        return REMOTE_ROOT
    encoded = SEPARATOR.join(quote(seg, safe="") for seg in segments)
    return f"{_REMOTE_PREFIX}{encoded}{_REMOTE_SUFFIX}"


def from_remote_path(remote_path: str, *, root_path: LogicalPath = "") -> str:
    """
    Convert Graph path addressing back into a normalized logical path.

    Raises:
        InvalidPathError: malformed remote path, reserved or separator-bearing
            segment after decoding, or a path outside `root_path`.
    """
    if not isinstance(remote_path, str):
        raise InvalidPathError("remote path must be a string")

    if remote_path == REMOTE_ROOT:
        segments: list[str] = []
    else:
        if not (
            remote_path.startswith(_REMOTE_PREFIX)
            and remote_path.endswith(_REMOTE_SUFFIX)
            and len(remote_path) > len(_REMOTE_PREFIX) + len(_REMOTE_SUFFIX)
        ):
            raise InvalidPathError("malformed remote path", details={"remote_path": remote_path})

        body = remote_path[len(_REMOTE_PREFIX):-len(_REMOTE_SUFFIX)]
        if _REMOTE_SUFFIX in body:
            raise InvalidPathError("malformed remote path", details={"remote_path": remote_path})

        segments = []
        for raw in body.split(SEPARATOR):
            if not raw:
                raise InvalidPathError("empty remote path segment", details={"remote_path": remote_path})
            try:
                seg = unquote(raw, errors="strict")
            except UnicodeDecodeError as exc:
                raise InvalidPathError(
                    "remote path segment is not valid UTF-8",
                    details={"remote_path": remote_path},
                    cause=exc,
                ) from exc
            if SEPARATOR in seg:
                raise InvalidPathError(
                    "decoded segment contains a separator",
                    details={"remote_path": remote_path},
                )
            segments.append(seg)
        _check_segments(segments)

    root_segments = split_path(root_path)
    if segments[: len(root_segments)] != root_segments:
        raise InvalidPathError(
            "remote path is outside the configured root",
            details={"remote_path": remote_path},
        )
    return SEPARATOR.join(segments[len(root_segments):])


def _check_segments(segments: list[str]) -> list[str]:
    for seg in segments:
        if seg in _RESERVED_SEGMENTS:
            raise InvalidPathError(
                "path must not contain '.' or '..' segments",
                details={"segment": seg},
            )
    return segments
