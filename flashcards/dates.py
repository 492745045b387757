"""
Date helpers shared by scheduling, streaks and analytics.

Every calendar-day comparison is made on UTC days. Naive datetimes are
treated as UTC.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def ensure_utc_optional(value: Optional[datetime]) -> Optional[datetime]:
    return ensure_utc(value) if value is not None else None


def utc_day(value: datetime) -> date:
    """Calendar day (UTC) a timestamp falls on."""
    return ensure_utc(value).date()


def day_gap(earlier: datetime, later: datetime) -> int:
    """
    Number of calendar days between two timestamps.

    0 means same day, 1 means consecutive days. Negative when ``later``
    falls on an earlier day than ``earlier``.
    """
    return (utc_day(later) - utc_day(earlier)).days


def add_days(value: datetime, days: int) -> datetime:
    return ensure_utc(value) + timedelta(days=days)
