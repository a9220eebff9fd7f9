"""Wall-clock conversions for the site's civil timezone (America/Chicago).

Event times are entered as ``datetime-local`` strings (``YYYY-MM-DDTHH:MM``)
meaning Chicago wall-clock time, stored as UTC instants, and shown back in
Chicago time.
"""

from __future__ import annotations

import re
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

SITE_TZ = ZoneInfo('America/Chicago')

_LOCAL_RE = re.compile(r'^(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2})$')
MONTH_KEY_RE = re.compile(r'^\d{4}-\d{2}$')


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; they were written as UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_to_utc(local: str, tz: ZoneInfo = SITE_TZ) -> datetime | None:
    """Convert a local ``YYYY-MM-DDTHH:MM`` string to an aware UTC datetime.

    Starts by reading the fields as if they were UTC, then twice measures how
    far that instant's wall-clock reading in ``tz`` is from the desired one
    and shifts by the difference. Two passes are enough to settle across a
    DST boundary. Nonexistent local times (spring-forward gap) resolve to
    whatever the zone data yields.
    """
    match = _LOCAL_RE.match((local or '').strip())
    if not match:
        return None
    try:
        desired = datetime(*(int(part) for part in match.groups()))
    except ValueError:
        return None

    guess = desired.replace(tzinfo=timezone.utc)
    for _ in range(2):
        observed = guess.astimezone(tz).replace(tzinfo=None)
        delta = desired - observed
        if not delta:
            break
        guess += delta
    return guess


def utc_to_local(value: datetime, tz: ZoneInfo = SITE_TZ) -> str:
    """Format a UTC instant as a ``datetime-local`` value in ``tz``."""
    return as_utc(value).astimezone(tz).strftime('%Y-%m-%dT%H:%M')


def utc_to_date_key(value: datetime, tz: ZoneInfo = SITE_TZ) -> str:
    return as_utc(value).astimezone(tz).strftime('%Y-%m-%d')


def utc_to_month_key(value: datetime, tz: ZoneInfo = SITE_TZ) -> str:
    return as_utc(value).astimezone(tz).strftime('%Y-%m')


def to_utc_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return as_utc(value).strftime('%Y-%m-%dT%H:%M:%S.000Z')


def current_month_key(tz: ZoneInfo = SITE_TZ) -> str:
    return datetime.now(tz).strftime('%Y-%m')


def is_month_key(value: str | None) -> bool:
    if not value or not MONTH_KEY_RE.match(value):
        return False
    return 1 <= int(value[5:7]) <= 12


def next_month_key(month_key: str) -> str:
    year, month = (int(part) for part in month_key.split('-'))
    if month == 12:
        return f'{year + 1:04d}-01'
    return f'{year:04d}-{month + 1:02d}'


def month_label(month_key: str) -> str:
    year, month = (int(part) for part in month_key.split('-'))
    return date(year, month, 1).strftime('%B %Y')


def month_bounds_utc(month_key: str, tz: ZoneInfo = SITE_TZ) -> tuple[datetime, datetime]:
    """UTC instants bracketing a local calendar month: ``[start, end)``."""
    start = local_to_utc(f'{month_key}-01T00:00', tz)
    end = local_to_utc(f'{next_month_key(month_key)}-01T00:00', tz)
    return start, end


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def is_real_iso_date(value: str) -> bool:
    if not re.match(r'^\d{4}-\d{2}-\d{2}$', value or ''):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


__all__ = [
    'SITE_TZ',
    'as_utc',
    'local_to_utc',
    'utc_to_local',
    'utc_to_date_key',
    'utc_to_month_key',
    'to_utc_iso',
    'current_month_key',
    'is_month_key',
    'next_month_key',
    'month_label',
    'month_bounds_utc',
    'now_utc',
    'is_real_iso_date',
]
