"""Calendar helpers shared by the task services."""

from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

from src.core.config import settings


DAYS_IN_WEEK = 7


def today() -> date:
    """Return the current calendar date in the configured timezone."""
    return datetime.now(ZoneInfo(settings.timezone)).date()


def now_iso() -> str:
    """Return the current UTC time as an ISO timestamp for created_at/updated_at."""
    return datetime.now(UTC).isoformat()


def parse_date(value: str | date) -> date:
    """Parse a YYYY-MM-DD string (or pass a date through).

    Raises:
        ValueError: If the string is not a valid ISO date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value)


def weekday_index(day: date) -> int:
    """Return the weekday with Sunday as 0 and Saturday as 6."""
    # date.weekday() is Monday=0..Sunday=6
    return (day.weekday() + 1) % DAYS_IN_WEEK


def week_dates(base: date) -> list[date]:
    """Return the seven dates of the Monday-start week containing ``base``."""
    start = base - timedelta(days=base.weekday())
    return [start + timedelta(days=offset) for offset in range(DAYS_IN_WEEK)]
