"""Block-time conversion helpers."""

from __future__ import annotations

from datetime import UTC, datetime


def block_time_to_datetime(block_time: int | float | None) -> datetime | None:
    """Convert a unix block time (seconds) to an aware UTC datetime. None if absent or invalid."""
    if block_time is None or isinstance(block_time, bool):
        return None
    try:
        return datetime.fromtimestamp(float(block_time), UTC)
    except (TypeError, ValueError, OverflowError, OSError):
        return None


def to_iso8601(dt: datetime) -> str:
    """Render an aware datetime as ISO-8601 with millisecond precision and a Z suffix."""
    return dt.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
