"""Logging setup for the insights CLI.

Handlers are built from ``InsightsConfig``: a console stream, an optional
rotating file, and either a plain or a JSON line format. Every record passes
through the context filter, so fields bound with ``LogContext`` (the run's
correlation id, the project being reported on) reach both formats.
"""

import json
import logging
import logging.handlers
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Tuple

from project_insights.utils.logging_utils import _ContextFilter, sanitize_sensitive_data

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("standard", "json")

STANDARD_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(run)s%(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP and PDF libraries log every request and image at DEBUG
QUIET_LOGGERS = ("urllib3", "requests", "PIL", "reportlab")

# Attributes every LogRecord has; anything else was bound as context
_BUILTIN_ATTRS = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "run"}


class StandardFormatter(logging.Formatter):
    """Plain text lines, tagged with the first block of the run's correlation id."""

    def __init__(self):
        super().__init__(fmt=STANDARD_FORMAT, datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        correlation_id = getattr(record, "correlation_id", None)
        record.run = f"[{correlation_id.split('-')[0]}] " if correlation_id else ""
        return super().format(record)


class JSONFormatter(logging.Formatter):
    """One JSON object per line.

    Context fields are added next to the standard keys with sensitive keys
    redacted. Decimal amounts and dates are written with ``str``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, DATE_FORMAT),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _BUILTIN_ATTRS and not key.startswith("_")
        }
        entry.update(sanitize_sensitive_data(context))
        return json.dumps(entry, default=str)


@dataclass(frozen=True)
class LoggingConfig:
    """
    Where and how log records are written.

    Attributes:
        log_level: Root level, one of LOG_LEVELS
        log_format: "standard" or "json"
        log_file: Rotating log file; file output is off when None
        enable_console: Write to stderr
        max_file_size: Bytes before the log file rotates
        backup_count: Rotated files kept
        quiet_loggers: Third-party loggers held at WARNING or above

    Raises:
        ValueError: On an unknown level or format
    """

    log_level: str = "INFO"
    log_format: str = "standard"
    log_file: Optional[str] = None
    enable_console: bool = True
    max_file_size: int = 10 * 1024 * 1024
    backup_count: int = 5
    quiet_loggers: Tuple[str, ...] = QUIET_LOGGERS

    def __post_init__(self):
        level = self.log_level.upper()
        if level not in LOG_LEVELS:
            raise ValueError(
                f"Invalid log level: {self.log_level}. Must be one of {', '.join(LOG_LEVELS)}"
            )
        if self.log_format not in LOG_FORMATS:
            raise ValueError(
                f"Invalid log format: {self.log_format}. Must be one of {', '.join(LOG_FORMATS)}"
            )
        object.__setattr__(self, "log_level", level)

    @property
    def enable_file(self) -> bool:
        return bool(self.log_file)

    @classmethod
    def from_settings(cls, settings: Any) -> "LoggingConfig":
        """Build from the LOG_* fields of ``InsightsConfig``."""
        return cls(
            log_level=settings.log_level,
            log_format=settings.log_format,
            log_file=settings.log_file,
            enable_console=settings.log_console,
            max_file_size=settings.log_max_file_size,
            backup_count=settings.log_backup_count,
        )


def _clear_root_handlers(root_logger: logging.Logger) -> None:
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()


def configure_logging(config: LoggingConfig) -> None:
    """
    Install handlers on the root logger.

    Existing root handlers are replaced, so each CLI invocation starts from
    a clean slate.
    """
    root_logger = logging.getLogger()
    _clear_root_handlers(root_logger)

    level = getattr(logging, config.log_level)
    root_logger.setLevel(level)

    handlers = []
    if config.enable_console:
        handlers.append(logging.StreamHandler())
    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                config.log_file,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )

    formatter = JSONFormatter() if config.log_format == "json" else StandardFormatter()
    context_filter = _ContextFilter()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root_logger.addHandler(handler)

    for name in config.quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def reset_logging() -> None:
    """Remove all root handlers and restore the WARNING level."""
    root_logger = logging.getLogger()
    _clear_root_handlers(root_logger)
    root_logger.setLevel(logging.WARNING)
