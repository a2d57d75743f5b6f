"""Date parsing utilities."""

from datetime import date, timedelta
from dateutil import parser as date_parser


def parse_date(date_str: str) -> date:
    """Parse a date string into a date object.

    Supports ISO and free-form dates ("2024-03-31", "31 March 2024") plus
    "today" and "yesterday".

    Args:
        date_str: Date string in various formats

    Returns:
        Date object

    Raises:
        ValueError: If date string cannot be parsed
    """
    date_str = date_str.strip().lower()
    today = date.today()

    relative_dates = {
        "today": today,
        "yesterday": today - timedelta(days=1),
    }
    if date_str in relative_dates:
        return relative_dates[date_str]

    try:
        # UK documents write day first
        dt = date_parser.parse(date_str, dayfirst=not _looks_iso(date_str))
        return dt.date()
    except (ValueError, TypeError, OverflowError) as e:
        raise ValueError(f"Could not parse date '{date_str}': {e}")


def _looks_iso(date_str: str) -> bool:
    return len(date_str) >= 10 and date_str[4] == "-" and date_str[:4].isdigit()


def period_days(start_date: date, end_date: date) -> int:
    """Number of days in an accounting period, counting both ends."""
    return (end_date - start_date).days + 1
