"""Date option parsing for CLI commands."""

import datetime as dt
from calendar import monthrange
from typing import Optional

import click


def parse_date_input(date_str: str, end_of_month: bool = False) -> dt.date:
    """Parse a date in YYYY-MM-DD or YYYY-MM format.

    Args:
        date_str: Date string
        end_of_month: For YYYY-MM input, use the last day instead of the first

    Raises:
        ValueError: If the format is invalid

    Example:
        >>> parse_date_input("2024-02", end_of_month=True)
        datetime.date(2024, 2, 29)
    """
    try:
        return dt.datetime.strptime(date_str, "%Y-%m-%d").date()
    except ValueError:
        pass

    try:
        parsed = dt.datetime.strptime(date_str, "%Y-%m")
    except ValueError:
        raise ValueError(f"Invalid date format: {date_str}. Expected YYYY-MM-DD or YYYY-MM")

    day = monthrange(parsed.year, parsed.month)[1] if end_of_month else 1
    return dt.date(parsed.year, parsed.month, day)


def date_option_callback(ctx, param, value: Optional[str]) -> Optional[dt.date]:
    """Click callback turning a date option into a ``dt.date``."""
    if value is None:
        return None
    try:
        return parse_date_input(value, end_of_month=param.name.startswith("end"))
    except ValueError as e:
        raise click.BadParameter(str(e)) from e
