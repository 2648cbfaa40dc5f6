"""
Date parsing and formatting.

Usage files carry calendar days as DD.MM.YYYY; internally every day is a
``datetime.date`` so comparisons and sorting never depend on string form.
"""

from datetime import date

DATE_FORMAT_HINT = "DD.MM.YYYY"


def parse_date(value: str) -> date:
    """Parse a DD.MM.YYYY string into a calendar date.

    Args:
        value: Date string such as "01.03.2024"

    Returns:
        The corresponding date

    Raises:
        ValueError: If the string is not a valid DD.MM.YYYY date
    """
    parts = value.strip().split(".")
    if len(parts) != 3 or not all(part.isdigit() for part in parts):
        raise ValueError(f"Invalid date '{value}', expected {DATE_FORMAT_HINT}")

    day, month, year = (int(part) for part in parts)
    try:
        return date(year, month, day)
    except ValueError as e:
        raise ValueError(f"Invalid date '{value}': {e}")


def format_date(value: date) -> str:
    """Format a date as DD.MM.YYYY."""
    return f"{value.day:02d}.{value.month:02d}.{value.year:04d}"
