"""Time utilities for timezone-aware UTC datetimes and the studio's local clock."""

from datetime import UTC, datetime

import pytz

from gymdesk.app.core.settings import get_settings


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime for defaults and onupdate hooks."""
    return datetime.now(UTC)


def ensure_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes (as returned by SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def to_storage(value: datetime) -> datetime:
    """Normalize an instant to naive UTC, the form every DateTime column holds."""
    return ensure_utc(value).replace(tzinfo=None)


def to_studio_time(value: datetime) -> datetime:
    tz = pytz.timezone(get_settings().STUDIO_TIMEZONE)
    return ensure_utc(value).astimezone(tz)
