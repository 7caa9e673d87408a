from .ids import random_segment
from .paths import (
    from_remote_path,
    join_path,
    normalize_path,
    split_path,
    to_remote_path,
    validate_name,
)
from .time import date_shards, normalize_dt, now_utc, parse_rfc3339

__all__ = [
    "random_segment",
    "split_path",
    "normalize_path",
    "join_path",
    "validate_name",
    "to_remote_path",
    "from_remote_path",
    "now_utc",
    "parse_rfc3339",
    "normalize_dt",
    "date_shards",
]
