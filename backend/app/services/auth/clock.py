"""Timezone helpers shared by the token and ledger code."""

from datetime import UTC, datetime


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite returns these) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def is_past(value: datetime, now: datetime | None = None) -> bool:
    """Whether ``value`` lies before ``now``."""
    return as_utc(value) < (now or utcnow())
