"""Wall-clock helpers for the business timezone (``APP_TIMEZONE``)."""

from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from travel_crm.core.config import settings


def business_tz() -> ZoneInfo:
    return ZoneInfo(settings.APP_TIMEZONE)


def local_datetime(day: date, at: time) -> datetime:
    """Combine a wall-clock date and time in the business timezone."""
    return datetime.combine(day, at, tzinfo=business_tz())


def today_local() -> date:
    return datetime.now(business_tz()).date()


def start_of_today() -> datetime:
    """Midnight today in the business timezone, as an aware datetime."""
    return local_datetime(today_local(), time.min)


def default_reminder_time() -> time:
    return time.fromisoformat(settings.DEFAULT_REMINDER_TIME)
