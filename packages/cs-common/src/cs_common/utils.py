"""
Shared utility functions for CallSync.

Clock-time conversion and display formatting helpers used by the
parser, the synchronizer and the session list.
"""

from __future__ import annotations

import math
import re
from datetime import datetime

from cs_common.exceptions import TranscriptFormatError

_CLOCK_RE = re.compile(r"^(\d{2}):(\d{2}):(\d{2})$")


def clock_to_seconds(value: str) -> int | None:
    """Convert an ``HH:MM:SS`` wall-clock string to seconds since midnight.

    Returns ``None`` when the string is not a valid clock time
    (hours above 23 or minutes/seconds above 59 included).
    """
    match = _CLOCK_RE.match(value.strip())
    if match is None:
        return None
    hours, minutes, seconds = (int(g) for g in match.groups())
    if hours > 23 or minutes > 59 or seconds > 59:
        return None
    return hours * 3600 + minutes * 60 + seconds


def timestamp_to_seconds(value: str) -> int:
    """Strict variant of :func:`clock_to_seconds`.

    Raises:
        TranscriptFormatError: If *value* is not a valid ``HH:MM:SS`` time.
    """
    seconds = clock_to_seconds(value)
    if seconds is None:
        raise TranscriptFormatError(f"Invalid HH:MM:SS time: {value!r}")
    return seconds


def format_time_from_seconds(total_seconds: float | None) -> str:
    """Format an offset as ``M:SS``; missing or negative values render ``0:00``."""
    if total_seconds is None or total_seconds < 0 or math.isnan(total_seconds):
        return "0:00"
    if math.isinf(total_seconds):
        return "0:00"
    mins = int(total_seconds // 60)
    secs = int(total_seconds % 60)
    return f"{mins}:{secs:02d}"


def format_duration(seconds: float | None) -> str:
    """Format a call duration as ``M:SS``, or ``N/A`` when unknown."""
    if seconds is None:
        return "N/A"
    return format_time_from_seconds(seconds)


def format_date(value: str | datetime | None) -> str:
    """Format a timestamp as ``Mon D, YYYY, HH:MM AM``, or ``N/A``.

    Accepts ISO-8601 strings (a trailing ``Z`` is understood) and
    ``datetime`` objects.
    """
    if not value:
        return "N/A"
    if isinstance(value, datetime):
        dt = value
    else:
        try:
            dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return "N/A"
    return f"{dt.strftime('%b')} {dt.day}, {dt.year}, {dt.strftime('%I:%M %p')}"
