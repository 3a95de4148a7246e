"""Small formatting helpers shared across the application."""

from datetime import datetime, timezone
from typing import Optional


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """
    Format a moment the way the backend does, e.g. 2024-05-01T10:00:00.000Z.

    Raises:
        ValueError: If the moment is naive; local time is never assumed
    """
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is None or moment.utcoffset() is None:
        raise ValueError(f"Timestamp requires a timezone-aware datetime, got {moment!r}")
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
