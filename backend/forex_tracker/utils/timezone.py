from datetime import date, datetime
from zoneinfo import ZoneInfo

from forex_tracker.core.config import settings


def tracker_tz() -> ZoneInfo:
    return ZoneInfo(settings.tracker_timezone or "UTC")


def now_local() -> datetime:
    return datetime.now(tz=tracker_tz())


def today_local() -> date:
    return now_local().date()
