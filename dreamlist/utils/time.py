"""
Time utilities.

The task-list API speaks epoch milliseconds (like the browser frontend),
while transcripts carry ISO 8601 strings or epoch numbers.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from dateutil import parser as dateutil_parser


def utc_now() -> datetime:
    """Get the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def now_ms() -> int:
    """Get the current time in epoch milliseconds."""
    return to_epoch_ms(utc_now())


def to_epoch_ms(dt: datetime) -> int:
    """
    Convert a datetime to epoch milliseconds.

    Args:
        dt: Datetime to convert (naive values are taken as UTC)

    Returns:
        Milliseconds since the epoch
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(dt.timestamp() * 1000)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a transcript timestamp into an aware UTC datetime.

    Accepts ISO 8601 strings and epoch numbers. Numbers larger than 1e11
    are treated as milliseconds, smaller ones as seconds.

    Args:
        value: Raw timestamp value from a record

    Returns:
        Parsed datetime, or None if the value is missing or unparseable
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        seconds = value / 1000.0 if value > 1e11 else float(value)
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None

    if isinstance(value, str) and value.strip():
        try:
            parsed = dateutil_parser.isoparse(value.strip())
        except (ValueError, OverflowError):
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)

    return None
