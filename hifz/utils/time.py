from __future__ import annotations

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from flask import current_app, has_app_context

FALLBACK_TZ = "Asia/Muscat"


def display_tz() -> ZoneInfo:
    name = FALLBACK_TZ
    if has_app_context():
        name = current_app.config.get("DISPLAY_TIMEZONE") or FALLBACK_TZ
    return ZoneInfo(name)


def to_local(dt: datetime | None, tz: ZoneInfo | None = None) -> datetime | None:
    if not dt:
        return None
    # If naive, assume UTC (DB stores UTC)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz or display_tz())


def local_today(now: datetime | None = None, tz: ZoneInfo | None = None) -> date:
    now = now or datetime.now(timezone.utc)
    return to_local(now, tz).date()


def is_same_local_day(dt: datetime | None, now: datetime | None = None, tz: ZoneInfo | None = None) -> bool:
    """Calendar-day comparison in the display timezone; the time of day is ignored."""
    local_dt = to_local(dt, tz)
    if local_dt is None:
        return False
    return local_dt.date() == local_today(now, tz)


def isoformat(dt: datetime | None) -> str | None:
    if not dt:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()
