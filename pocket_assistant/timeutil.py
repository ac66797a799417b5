"""Time helpers.

The database stores naive UTC datetimes. Times shown to users are converted
to the configured timezone.
"""

from datetime import datetime

import pytz

from pocket_assistant.config import get


def utcnow() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(pytz.UTC).replace(tzinfo=None)


def local_timezone():
    return pytz.timezone(get("timezone", "UTC"))


def to_local(dt: datetime) -> datetime:
    """Convert a naive UTC datetime to the configured timezone."""
    if dt.tzinfo is None:
        dt = pytz.UTC.localize(dt)
    return dt.astimezone(local_timezone())


def format_datetime(dt: datetime, fmt: str = "%Y-%m-%d %H:%M") -> str:
    if dt is None:
        return ""
    return to_local(dt).strftime(fmt)
