"""Wall-clock helpers.

Rows are stamped with timezone-aware UTC datetimes. Business days (the
reference-number prefix, the dashboard's "today", stock expiry) follow the
console's zone: ``POS_TIMEZONE`` when set, the server's local offset otherwise.
"""

from __future__ import annotations

import time
from datetime import date, datetime, timedelta, timezone, tzinfo
from datetime import time as clock_time
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from .config import get_settings


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Return *value* in UTC; naive values are taken to be UTC already."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_zone() -> tzinfo:
    name = get_settings().timezone
    if name:
        return ZoneInfo(name)
    offset = datetime.now() - datetime.fromtimestamp(time.time(), timezone.utc).replace(tzinfo=None)
    return timezone(timedelta(minutes=round(offset.total_seconds() / 60)))


def local_today() -> date:
    name = get_settings().timezone
    if name:
        return datetime.now(ZoneInfo(name)).date()
    return date.today()


def day_bounds(day: Optional[date] = None) -> Tuple[datetime, datetime]:
    """UTC ``[start, end)`` of the local business *day*."""

    day = day or local_today()
    zone = local_zone()
    start = datetime.combine(day, clock_time.min, tzinfo=zone)
    end = datetime.combine(day + timedelta(days=1), clock_time.min, tzinfo=zone)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)
