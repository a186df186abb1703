"""CSV export of report rows.

The header row is the keys of the first row. Every value is written as its
JSON encoding, so strings are quoted and escaped while numbers and booleans
are written bare. Missing values are written as an empty JSON string (`""`),
while zero and false keep their own encoding.
"""

import datetime as dt
import json
import logging
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping

logger = logging.getLogger(__name__)


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, (dt.date, dt.datetime)):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_json_value(item) for item in value]
    return value


def encode_csv_value(value: Any) -> str:
    """Encode one cell.

    Example:
        >>> encode_csv_value("Alpha"), encode_csv_value(3), encode_csv_value(None)
        ('"Alpha"', '3', '""')
    """
    if value is None:
        return '""'
    return json.dumps(_json_value(value), ensure_ascii=False, default=str)


def rows_to_csv(rows: List[Mapping[str, Any]]) -> str:
    """Convert report rows to CSV text.

    Args:
        rows: Rows as mappings; the first row's keys define the columns

    Returns:
        CSV text with rows joined by newlines and no trailing newline, or an
        empty string when there are no rows

    Example:
        >>> rows_to_csv([{"a": 1, "b": 2}, {"a": 3, "b": 4}])
        'a,b\\n1,2\\n3,4'
    """
    if not rows:
        return ""

    headers = list(rows[0].keys())
    lines = [",".join(headers)]
    for row in rows:
        lines.append(",".join(encode_csv_value(row.get(header)) for header in headers))

    logger.debug(f"Encoded {len(rows)} rows x {len(headers)} columns as CSV")
    return "\n".join(lines)


def records_to_rows(records: List[Any]) -> List[Dict[str, Any]]:
    """Turn dataclass or model results into plain rows for export."""
    rows = []
    for record in records:
        if isinstance(record, Mapping):
            rows.append(dict(record))
        elif hasattr(record, "model_dump"):
            rows.append(record.model_dump())
        else:
            rows.append(
                {key: value for key, value in vars(record).items() if not key.startswith("_")}
            )
    return rows
