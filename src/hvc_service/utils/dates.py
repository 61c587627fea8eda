"""
Date helpers bound to the airport's business time zone
"""

from datetime import date, datetime, timedelta, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from ..config import config
from ..types import DashboardPeriod


def business_tz() -> ZoneInfo:
    return ZoneInfo(config.engine.timezone)


def to_utc(value: datetime) -> datetime:
    """Make a timestamp timezone-aware; naive values are taken as UTC"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def local_date(value: datetime) -> date:
    """Calendar day of a timestamp in the business time zone"""
    return to_utc(value).astimezone(business_tz()).date()


def today_local(now: Optional[datetime] = None) -> date:
    return local_date(now or datetime.now(timezone.utc))


def is_birthday(birth_date: Optional[date], today: Optional[date] = None) -> bool:
    """Check whether today (business time zone) matches the birth month and day"""
    if birth_date is None:
        return False
    today = today or today_local()
    return (today.month, today.day) == (birth_date.month, birth_date.day)


def period_range(
    period: DashboardPeriod,
    now: Optional[datetime] = None
) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Map a dashboard period to a (start, end) window in UTC.
    ALL returns (None, None) meaning unbounded.
    """
    now = to_utc(now or datetime.now(timezone.utc))

    if period == DashboardPeriod.TODAY:
        local_now = now.astimezone(business_tz())
        start = local_now.replace(hour=0, minute=0, second=0, microsecond=0)
        return start.astimezone(timezone.utc), now
    if period == DashboardPeriod.WEEK:
        return now - timedelta(days=7), now
    if period == DashboardPeriod.MONTH:
        return now - timedelta(days=30), now
    if period == DashboardPeriod.YEAR:
        return now - timedelta(days=365), now
    return None, None
