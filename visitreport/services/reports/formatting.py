"""
Date formatting for reports (en-IN conventions).
"""
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo


def _localize(value: datetime, tz: Optional[ZoneInfo]) -> datetime:
    return value.astimezone(tz) if tz else value


def _clock(value: datetime, with_seconds: bool = False) -> str:
    hour = value.hour % 12 or 12
    suffix = "am" if value.hour < 12 else "pm"
    if with_seconds:
        return f"{hour}:{value.minute:02d}:{value.second:02d} {suffix}"
    return f"{hour}:{value.minute:02d} {suffix}"


def format_locale_date(value: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """17/10/2026"""
    local = _localize(value, tz)
    return f"{local.day}/{local.month}/{local.year}"


def format_locale_datetime(value: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """17/10/2026, 2:53:00 pm"""
    local = _localize(value, tz)
    return f"{format_locale_date(local)}, {_clock(local, with_seconds=True)}"


def format_long_datetime(value: datetime, tz: Optional[ZoneInfo] = None) -> str:
    """Saturday, 17 October 2026 at 2:53 pm"""
    local = _localize(value, tz)
    return f"{local.strftime('%A')}, {local.day} {local.strftime('%B')} {local.year} at {_clock(local)}"
