"""
utils/time_utils.py

Purpose: Time and expiry helpers

- Auth session expiry calculation
- Remaining-cycle-time rendering
- Timestamp utilities
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

CYCLE_ENDED = "cycle ended"
SECONDS_PER_DAY = 86400


def calculate_session_expiry(created_at: datetime, validity_minutes: int = 10) -> datetime:
    """
    Calculates the expiry timestamp recorded on an auth session.
    """
    return created_at + timedelta(minutes=validity_minutes)


def days_to_seconds(days: int) -> int:
    return days * SECONDS_PER_DAY


def seconds_to_days(seconds: int) -> int:
    return seconds // SECONDS_PER_DAY


def format_remaining_time(seconds: int) -> str:
    """
    Decomposes seconds into whole days, hours and minutes.

    A value <= 0 renders as "cycle ended".
    """
    seconds = int(seconds)
    if seconds <= 0:
        return CYCLE_ENDED

    days, rest = divmod(seconds, SECONDS_PER_DAY)
    hours, rest = divmod(rest, 3600)
    minutes = rest // 60

    return f"{days}d {hours}h {minutes}m"


def format_timestamp(dt: Optional[datetime], format_str: str = "%Y-%m-%d %H:%M:%S") -> str:
    """
    Formats a datetime object to string.
    """
    if not dt:
        return "N/A"
    return dt.strftime(format_str)


def format_unix_timestamp(ts: int, format_str: str = "%Y-%m-%d %H:%M") -> str:
    if not ts:
        return "N/A"
    return format_timestamp(datetime.fromtimestamp(int(ts), tz=timezone.utc), format_str)
