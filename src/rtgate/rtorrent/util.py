"""Utility functions for coercing loosely typed rTorrent values."""

import base64
import binascii
import math
import re
from datetime import datetime
from typing import Any

PRIORITY_OFF = 0
PRIORITY_LOW = 1
PRIORITY_NORMAL = 2
PRIORITY_HIGH = 3

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_MAGNET_HASH = re.compile(
    r"xt=urn:btih:([a-fA-F0-9]{40}|[a-zA-Z2-7]{32})", re.IGNORECASE
)


def to_int(value: Any, default: int = 0) -> int:
    """Coerce a daemon value to int.

    Strings are parsed up to the first non-digit character ("12kb" -> 12).
    Anything that can't be read as a number returns default.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else default
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if isinstance(value, str):
        match = _INT_PREFIX.match(value)
        return int(match.group(1)) if match else default

    return default


def to_flag(value: Any) -> bool:
    """Interpret a daemon 0/1 flag. Only an explicit 1 counts as set."""
    return to_int(value) == 1


def to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")

    return str(value)


def from_timestamp(value: Any) -> datetime | None:
    """Convert epoch seconds to datetime, None for 0 or unusable values."""
    seconds = to_int(value)
    if seconds <= 0:
        return None

    try:
        return datetime.fromtimestamp(seconds)
    except (OverflowError, OSError, ValueError):
        return None


def normalize_hash(value: Any) -> str:
    """Info-hashes are compared and sent upper-cased."""
    return to_str(value).strip().upper()


def clamp_priority(value: Any) -> int:
    """Clamp a torrent priority to the 0..3 range.

    Strings are read up to the first non-digit ("3abc" -> 3, "1.0" -> 1).
    Values above high become high; negative or unparsable values fall
    back to normal.
    """
    if isinstance(value, bool):
        return PRIORITY_NORMAL

    # Unparsable input reads as -1 and falls through to normal
    priority = to_int(value, default=-1)
    if priority < PRIORITY_OFF:
        return PRIORITY_NORMAL

    return min(priority, PRIORITY_HIGH)


def quote_command_arg(value: str) -> str:
    """Quote a string argument for an inline rTorrent command."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def parse_magnet_hash(magnet_uri: str) -> str | None:
    """Extract the info-hash from a magnet URI.

    Both hex (40 chars) and base32 (32 chars) forms are accepted.

    Returns:
        Upper-cased hex info-hash, or None if the URI carries none
    """
    match = _MAGNET_HASH.search(magnet_uri)
    if not match:
        return None

    value = match.group(1)
    if len(value) == 32:
        try:
            value = base64.b32decode(value.upper()).hex()
        except binascii.Error:
            return None

    return value.upper()
