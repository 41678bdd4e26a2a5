"""Calendar month helpers.

Breakdowns, projections and expense queries are all keyed by calendar
month. Month keys use the "YYYY-MM" format.
"""

import calendar
import re
from collections.abc import Iterator
from datetime import date

from finplan.core.exceptions import InvalidMonthError

_MONTH_KEY_RE = re.compile(r"^(\d{4})-(\d{2})$")


def format_month(value: date) -> str:
    """Format a date as its "YYYY-MM" month key."""
    return f"{value.year:04d}-{value.month:02d}"


def parse_month(month: str) -> date:
    """Parse a "YYYY-MM" month key into the first day of that month.

    Args:
        month: Month key string.

    Returns:
        Date of the first day of the month.

    Raises:
        InvalidMonthError: If the key is malformed or the month is out of range.
    """
    match = _MONTH_KEY_RE.match(month or "")
    if not match:
        raise InvalidMonthError(f"Invalid month key: {month!r} (expected YYYY-MM)")
    year, month_number = int(match.group(1)), int(match.group(2))
    if not 1 <= month_number <= 12 or year < 1:
        raise InvalidMonthError(f"Invalid month key: {month!r}")
    return date(year, month_number, 1)


def start_of_month(value: date) -> date:
    """Return the first day of the month containing value."""
    return value.replace(day=1)


def add_months(value: date, months: int) -> date:
    """Shift a date by a number of months, clamping the day to the month length."""
    total = value.year * 12 + (value.month - 1) + months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(value.day, days_in_month(year, month))
    return date(year, month, day)


def month_bounds(month: str) -> tuple[date, date]:
    """Return [start, end) dates for a month key.

    The end date is the first day of the following month (exclusive).
    """
    start = parse_month(month)
    return start, add_months(start, 1)


def days_in_month(year: int, month: int) -> int:
    """Number of days in the given month."""
    return calendar.monthrange(year, month)[1]


def months_between(start: date, end: date) -> int:
    """Number of whole calendar months elapsed from start to end.

    A month only counts once the day-of-month has been reached, so
    2024-01-15 -> 2024-02-14 is 0 months and 2024-01-15 -> 2024-02-15 is 1.
    Returns a negative number when end precedes start.
    """
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if months > 0 and end.day < start.day:
        months -= 1
    elif months < 0 and end.day > start.day:
        months += 1
    return months


def iterate_months(start: date, end: date) -> Iterator[date]:
    """Yield the first day of every month from start to end inclusive.

    Both bounds are normalised to the start of their month, so partial
    months at either end are included.
    """
    current = start_of_month(start)
    last = start_of_month(end)
    while current <= last:
        yield current
        current = add_months(current, 1)


def count_months_spanned(start: date, end: date) -> int:
    """Number of calendar months touched by the inclusive range [start, end]."""
    if end < start:
        return 0
    return (end.year - start.year) * 12 + (end.month - start.month) + 1
