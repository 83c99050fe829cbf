"""Time utilities for database models."""

from datetime import UTC, date, datetime


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


def quota_day(moment: datetime) -> str:
    """Return the ``YYYY-MM-DD`` UTC calendar day used to bucket quotas."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return date(moment.year, moment.month, moment.day).isoformat()
