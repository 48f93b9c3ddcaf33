import calendar
import datetime as dt
from zoneinfo import ZoneInfo

from loguru import logger


def time_to_12h(time: dt.time) -> str:
    """Convert ``time(14, 30)`` → ``2:30 PM`` for slot labels.

    No leading zero on the hour (``3:30 PM`` not ``03:30 PM``).
    """
    hour = time.hour % 12 or 12
    period = "AM" if time.hour < 12 else "PM"
    return f"{hour}:{time.strftime('%M')} {period}"


def add_months(date: dt.date, months: int) -> dt.date:
    """Shift ``date`` by whole months, clamping to the last day of the target month.

    ``add_months(date(2026, 11, 30), 3)`` → ``date(2027, 2, 28)``.
    """
    month_index = date.month - 1 + months
    year = date.year + month_index // 12
    month = month_index % 12 + 1
    day = min(date.day, calendar.monthrange(year, month)[1])
    return dt.date(year, month, day)


def resolve_timezone(name: str) -> dt.tzinfo:
    """Resolve a timezone name, falling back to UTC if invalid."""
    try:
        return ZoneInfo(name)
    except Exception:
        logger.warning("Invalid clinic timezone '{}'; defaulting to UTC", name)
        return dt.timezone.utc
