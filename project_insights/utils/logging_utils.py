"""Structured logging utilities with context support."""

import functools
import logging
import threading
import time
import uuid
from typing import Any, Callable, Dict, Optional, cast

# Thread-local storage for log context
_thread_local = threading.local()

# Sensitive field names to redact
SENSITIVE_FIELDS = {
    "password",
    "token",
    "api_key",
    "secret",
    "access_token",
    "credentials",
    "authorization",
    "cookie",
}

REDACTED = "***REDACTED***"


def generate_correlation_id() -> str:
    """Generate a unique correlation ID for tracking one report run."""
    return str(uuid.uuid4())


def get_log_context() -> Dict[str, Any]:
    """Return a copy of the fields currently attached to log records."""
    return dict(getattr(_thread_local, "context", {}))


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from thread-local context, if set."""
    return get_log_context().get("correlation_id")


class LogContext:
    """
    Context manager for adding structured fields to log records.

    Fields are stored in thread-local storage and copied onto every log
    record emitted inside the block. Nested contexts merge, and the outer
    fields are restored on exit.

    Example:
        with LogContext(project_id="p1", report="profitability"):
            logger.info("Calculating profitability")
            # Log will include project_id and report fields
    """

    def __init__(self, **kwargs):
        self.fields = kwargs
        self.previous_context: Optional[Dict[str, Any]] = None

    def __enter__(self):
        if not hasattr(_thread_local, "context"):
            _thread_local.context = {}

        self.previous_context = _thread_local.context.copy()
        _thread_local.context.update(self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        _thread_local.context = self.previous_context or {}


class _ContextFilter(logging.Filter):
    """Logging filter that adds context fields to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in getattr(_thread_local, "context", {}).items():
            setattr(record, key, value)
        return True


def sanitize_sensitive_data(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Redact values of sensitive keys, recursing into nested dicts and lists.

    Args:
        data: Dictionary to sanitize (e.g. request headers or a payload)

    Returns:
        Sanitized copy with sensitive values replaced

    Example:
        >>> sanitize_sensitive_data({"Authorization": "Bearer x", "tenant_id": "t1"})
        {'Authorization': '***REDACTED***', 'tenant_id': 't1'}
    """
    if not isinstance(data, dict):
        return data

    sanitized: Dict[str, Any] = {}

    for key, value in data.items():
        if any(sensitive in str(key).lower() for sensitive in SENSITIVE_FIELDS):
            sanitized[key] = REDACTED if value is not None else None
        elif isinstance(value, dict):
            sanitized[key] = sanitize_sensitive_data(cast(Dict[str, Any], value))
        elif isinstance(value, list):
            sanitized[key] = [sanitize_sensitive_data(item) for item in value]
        else:
            sanitized[key] = value

    return sanitized


def log_function_call(
    func: Optional[Callable] = None, *, include_args: bool = False, level: str = "DEBUG"
) -> Callable:
    """
    Decorator to log function entry, exit with elapsed time, and exceptions.

    Args:
        func: Function to decorate (when used without arguments)
        include_args: Whether to include function arguments in logs
        level: Log level to use (DEBUG, INFO, WARNING, ERROR)

    Example:
        @log_function_call(level="INFO")
        def fetch_projects(client):
            ...
    """

    def decorator(f: Callable) -> Callable:
        @functools.wraps(f)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(f.__module__)
            log_level = getattr(logging, level.upper())

            if include_args:
                args_repr = [repr(a) for a in args]
                kwargs_repr = [f"{k}={v!r}" for k, v in kwargs.items()]
                signature = ", ".join(args_repr + kwargs_repr)
                logger.log(log_level, f"Entering {f.__name__} with args: {signature}")
            else:
                logger.log(log_level, f"Entering {f.__name__}")

            started = time.perf_counter()
            try:
                result = f(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Exception in {f.__name__} after {time.perf_counter() - started:.2f}s: "
                    f"{type(e).__name__}: {e}",
                    exc_info=True,
                )
                raise

            logger.log(
                log_level, f"Exiting {f.__name__} after {time.perf_counter() - started:.2f}s"
            )
            return result

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
