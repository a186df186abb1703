"""Export file names and saving."""

import datetime as dt
import logging
import re
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


def _dashed(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip()) or "report"


def _underscored(name: str) -> str:
    return re.sub(r"\s+", "_", name.strip()) or "report"


def csv_filename(timestamp: dt.datetime) -> str:
    """``report_<epoch milliseconds>.csv``."""
    return f"report_{int(timestamp.timestamp() * 1000)}.csv"


def report_filename(entity_name: str, day: dt.date) -> str:
    """``<entity>-report-<yyyy-MM-dd>.pdf`` with whitespace runs as dashes.

    Example:
        >>> report_filename("Website Redesign", dt.date(2024, 3, 5))
        'Website-Redesign-report-2024-03-05.pdf'
    """
    return f"{_dashed(entity_name)}-report-{day.isoformat()}.pdf"


def executive_report_filename(entity_name: str, day: dt.date) -> str:
    """``<entity>-ai-executive-report-<yyyy-MM-dd>.pdf``."""
    return f"{_dashed(entity_name)}-ai-executive-report-{day.isoformat()}.pdf"


def timesheet_report_filename(name: str, start: dt.date, end: dt.date) -> str:
    """``Timesheet_Report_<name>_<start>_to_<end>.pdf``."""
    return f"Timesheet_Report_{_underscored(name)}_{start.isoformat()}_to_{end.isoformat()}.pdf"


def sprint_report_filename(sprint_name: str) -> str:
    return f"Sprint_Report_{_underscored(sprint_name)}.pdf"


def document_filename(title: str) -> str:
    """Document title with every non-alphanumeric character replaced by "_"."""
    return f"{re.sub(r'[^a-zA-Z0-9]', '_', title) or 'document'}.pdf"


def save_export(data: Union[bytes, str], directory: Union[str, Path], filename: str) -> Path:
    """Write export content to ``directory/filename``, creating the directory.

    Text is written as UTF-8.

    Returns:
        Path of the written file
    """
    path = Path(directory) / filename
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(data, str):
        path.write_text(data, encoding="utf-8")
    else:
        path.write_bytes(data)
    logger.info(f"Saved export to {path}")
    return path
