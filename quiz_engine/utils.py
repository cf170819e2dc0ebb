"""Helpers for ids, time, rounding, answer comparison and text sanitization."""

import math
import threading
import time
from datetime import datetime, timezone
from typing import Any

import bleach

_id_lock = threading.Lock()
_last_id = 0


def new_id() -> str:
    """Return a time-based id (milliseconds since epoch) as a string.

    Ids issued within the same millisecond are bumped so they never collide.
    """
    global _last_id
    with _id_lock:
        candidate = int(time.time() * 1000)
        if candidate <= _last_id:
            candidate = _last_id + 1
        _last_id = candidate
        return str(candidate)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (2.5 -> 3)."""
    return int(math.floor(value + 0.5))


def format_time_taken(seconds: int) -> str:
    """Format a duration using its two coarsest units.

    Examples: 3725 -> "1h 2m", 125 -> "2m 5s", 42 -> "42s".
    """
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60

    if hours > 0:
        return f"{hours}h {minutes}m"
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def is_number(value: Any) -> bool:
    """True for int/float values; bool is not a number here."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(left: Any, right: Any) -> bool:
    """Equality without type coercion.

    "true" != True, 1 != True, 1 == 1.0. Numbers compare by value,
    everything else must also share a type.
    """
    if is_number(left) and is_number(right):
        return left == right
    return type(left) is type(right) and left == right


def sanitize_text(text: str) -> str:
    """Strip all HTML from a piece of authored text."""
    sanitized = bleach.clean(text or "", tags=[], strip=True)
    return sanitized.strip()
