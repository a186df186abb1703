"""Error handling for CLI commands."""

import sys
import traceback
from typing import Optional

import click

from project_insights.cli.utils.formatters import format_error, format_warning
from project_insights.readers.snapshot_reader import SnapshotError
from project_insights.services.backend_client import BackendError
from project_insights.services.retry_handler import (
    CircuitBreakerError,
    RetryExhaustedException,
)


class CLIError(Exception):
    """Base exception for CLI errors with user-friendly messages."""

    def __init__(self, message: str, recovery_hint: Optional[str] = None):
        """
        Args:
            message: Error message to display
            recovery_hint: Optional hint for recovering from the error
        """
        self.message = message
        self.recovery_hint = recovery_hint
        super().__init__(message)


class ConfigurationError(CLIError):
    """Error related to configuration issues."""


class APIError(CLIError):
    """Error related to backend API calls."""


class DataValidationError(CLIError):
    """Error related to input data or report options."""


class ProcessingError(CLIError):
    """Error related to aggregation or rendering."""


_CLI_ERRORS = (
    (ConfigurationError, "Configuration Error", 1),
    (APIError, "API Error", 2),
    (DataValidationError, "Data Validation Error", 3),
    (ProcessingError, "Processing Error", 4),
)

_HTTP_ERRORS = {
    401: ("Authentication Failed", "Check API_TOKEN in your .env file", 5),
    403: ("Permission Denied", "Ensure the token's user may read these records", 6),
    404: ("Resource Not Found", "Verify API_BASE_URL and the requested id", 7),
    429: ("Rate Limit Exceeded", "Wait a few minutes before retrying", 8),
}


def handle_cli_error(error: Exception, debug: bool = False) -> int:
    """
    Report an error with a user-friendly message.

    Args:
        error: The exception that occurred
        debug: Whether to show the full stack trace

    Returns:
        Exit code (1-9 for known error types, 130 on cancel, 255 otherwise)
    """
    for error_type, title, code in _CLI_ERRORS:
        if isinstance(error, error_type):
            click.echo(format_error(f"{title}: {error.message}"))
            if error.recovery_hint:
                click.echo(format_warning(f"Hint: {error.recovery_hint}"))
            return code

    if isinstance(error, RetryExhaustedException) and error.last_exception is not None:
        return handle_cli_error(error.last_exception, debug)

    if isinstance(error, BackendError):
        known = _HTTP_ERRORS.get(error.status_code)
        if known:
            title, hint, code = known
            click.echo(format_error(title))
            click.echo(format_warning(f"Hint: {hint}"))
            return code
        click.echo(format_error(f"Backend Error (HTTP {error.status_code})"))
        click.echo(format_warning(f"Details: {error}"))
        return 9

    if isinstance(error, CircuitBreakerError):
        click.echo(format_error("Backend unavailable"))
        click.echo(format_warning("Hint: Too many failed requests; retry in a minute"))
        return 9

    if isinstance(error, SnapshotError):
        click.echo(format_error(f"Data Validation Error: {error}"))
        return 3

    if isinstance(error, click.Abort):
        click.echo(format_warning("\nOperation cancelled by user"))
        return 130

    click.echo(format_error(f"Unexpected Error: {type(error).__name__}"))
    click.echo(str(error))

    if debug:
        click.echo("\nFull stack trace:")
        click.echo(traceback.format_exc())
    else:
        click.echo(format_warning("\nRun with --debug flag for full stack trace"))

    return 255


class ErrorHandler:
    """
    Context manager mapping exceptions to exit codes.

    Example:
        with ErrorHandler(debug):
            run_command()
    """

    def __init__(self, show_debug: bool = False):
        self.show_debug = show_debug

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_val is None or isinstance(exc_val, (SystemExit, click.ClickException)):
            return False
        sys.exit(handle_cli_error(exc_val, self.show_debug))
