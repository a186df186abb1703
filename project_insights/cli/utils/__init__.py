"""CLI utility functions."""

from project_insights.cli.utils.dates import date_option_callback, parse_date_input
from project_insights.cli.utils.formatters import (
    format_error,
    format_frame,
    format_info,
    format_success,
    format_table,
    format_warning,
)
from project_insights.cli.utils.progress import ProgressTracker
from project_insights.cli.utils.typewriter import Typewriter, stream_text

__all__ = [
    "date_option_callback",
    "parse_date_input",
    "format_error",
    "format_frame",
    "format_info",
    "format_success",
    "format_table",
    "format_warning",
    "ProgressTracker",
    "Typewriter",
    "stream_text",
]
