"""Base model for all records consumed by the insights engine.

Records arrive as decoded JSON from the backend, with optional and sometimes
null fields. This module provides the shared Pydantic configuration and the
boundary helpers that turn those loose shapes into typed values, so the
aggregation code never has to check for missing data itself.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Validation with lenient type coercion
    - Ignoring unknown backend fields
    - Immutability (records are read-only for one aggregation pass)

    Example:
        >>> class User(BaseDataModel):
        ...     email: str
        >>> User(email="a@x.com", unknown_field=1).email
        'a@x.com'
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date
        arbitrary_types_allowed=True,
        # Backend records carry many fields the engine does not use
        extra="ignore",
        strict=False,
        populate_by_name=True,
        # Records are value objects for the duration of one aggregation pass
        frozen=True,
    )


def to_decimal(value: Any) -> Decimal:
    """Convert a loose numeric value to Decimal, defaulting to zero.

    Args:
        value: Number, numeric string, None or garbage

    Returns:
        The value as a Decimal, or Decimal("0") when it cannot be converted

    Example:
        >>> to_decimal("12.5")
        Decimal('12.5')
        >>> to_decimal(None)
        Decimal('0')
    """
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    try:
        result = Decimal(str(value).strip() or "0")
    except (InvalidOperation, ValueError, TypeError):
        return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


def to_int(value: Any) -> int:
    """Convert a loose numeric value to a non-negative int, defaulting to zero."""
    number = to_decimal(value)
    if number < 0:
        return 0
    return int(number)


TRUE_STRINGS = {"true", "yes", "y", "1", "on"}


def to_bool(value: Any) -> bool:
    """Convert a loose flag to bool, defaulting to False.

    Strings count as true only when they spell a yes ("true", "yes", "1", ...),
    so "false" and "0" read as False.

    Example:
        >>> to_bool("false"), to_bool("TRUE"), to_bool(1), to_bool(None)
        (False, True, True, False)
    """
    if value is None:
        return False
    if isinstance(value, str):
        return value.strip().lower() in TRUE_STRINGS
    if isinstance(value, (int, float, Decimal)):
        return value != 0
    return bool(value)


def to_relation_id(value: Any) -> Optional[str]:
    """Flatten a relation reference to its id.

    The backend sometimes embeds related records (``{"id": "p1", ...}`` or
    ``{"_id": "p1"}``) where a plain id is expected.

    Args:
        value: Plain id, embedded object or None

    Returns:
        The id as a string, or None when absent
    """
    if value is None:
        return None
    if isinstance(value, dict):
        value = value.get("id") or value.get("_id")
        if value is None:
            return None
    text = str(value).strip()
    return text or None


def to_date(value: Any) -> Optional[dt.date]:
    """Parse a backend date or timestamp into a date.

    Accepts ``date``/``datetime`` objects and ISO strings such as
    ``"2024-06-15"`` or ``"2024-06-15T10:30:00Z"``. Anything else maps to
    None rather than failing the record.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    text = str(value).strip()
    if len(text) < 10:
        return None
    try:
        return dt.date.fromisoformat(text[:10])
    except ValueError:
        return None


def to_optional_str(value: Any) -> Optional[str]:
    """Strip a string value, mapping empty strings to None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def to_datetime(value: Any) -> Optional[dt.datetime]:
    """Parse a backend timestamp into a naive datetime.

    Date-only values map to midnight. Timezone offsets are dropped after
    parsing; unparseable values map to None.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.replace(tzinfo=None)
    if isinstance(value, dt.date):
        return dt.datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return dt.datetime.fromisoformat(text).replace(tzinfo=None)
    except ValueError:
        parsed = to_date(text)
        if parsed is None:
            return None
        return dt.datetime(parsed.year, parsed.month, parsed.day)
