"""
Calendar-month arithmetic for subscription periods.

All functions work at month granularity: only (year, month) of a date matters,
day-of-month is ignored. Nothing here raises on out-of-order input; a reversed
pair simply yields an empty (0-month) span.
"""
import calendar
from datetime import date


def month_key(d: date) -> tuple[int, int]:
    """(year, month) pair used for all month comparisons."""
    return d.year, d.month


def month_start(d: date) -> date:
    """First day of the month containing d."""
    return d.replace(day=1)


def month_end(d: date) -> date:
    """Last day of the month containing d."""
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def months_inclusive(a: date, b: date) -> int:
    """
    Number of calendar months from a's month through b's month, both included.

    Examples:
        >>> months_inclusive(date(2025, 7, 1), date(2025, 9, 1))
        3
        >>> months_inclusive(date(2024, 11, 3), date(2025, 2, 20))
        4
        >>> months_inclusive(date(2025, 9, 1), date(2025, 8, 1))
        0
    """
    months = (b.year - a.year) * 12 + (b.month - a.month) + 1
    return max(months, 0)


def later_of(a: date, b: date) -> date:
    """Month-granularity max. On the same month returns a."""
    return b if month_key(b) > month_key(a) else a


def earlier_of(a: date, b: date) -> date:
    """Month-granularity min. On the same month returns a."""
    return b if month_key(b) < month_key(a) else a
