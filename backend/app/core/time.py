"""Time utilities for timezone-aware UTC datetimes."""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to naive datetimes read back from stores that drop tzinfo."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def days_from(start: datetime, days: int) -> datetime:
    return start + timedelta(days=days)
