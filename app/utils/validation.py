"""
Validation utilities for wire-format input
"""
import re
import uuid
from datetime import date

_MONTH_YEAR_RE = re.compile(r"^(\d{2})-(\d{4})$")


def parse_month_year(value: str) -> date:
    """
    Parse "MM-YYYY" into the first day of that month

    Args:
        value: e.g. "07-2025"

    Returns:
        date(2025, 7, 1)

    Raises:
        ValueError: on any other format or a month outside 01..12

    Example:
        >>> parse_month_year("07-2025")
        datetime.date(2025, 7, 1)
        >>> parse_month_year("2025-07")
        ValueError: invalid month-year '2025-07', expected MM-YYYY
    """
    match = _MONTH_YEAR_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"invalid month-year {value!r}, expected MM-YYYY")

    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise ValueError(f"invalid month-year {value!r}, expected MM-YYYY")

    return date(year, month, 1)


def parse_uuid(value: str, field: str = "id") -> uuid.UUID:
    """
    Parse a UUID string

    Raises:
        ValueError: "invalid <field>" if value is not a UUID
    """
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValueError(f"invalid {field}") from None
