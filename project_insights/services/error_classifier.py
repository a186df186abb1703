"""
Error classification for backend calls: retryable versus fatal.
"""

import logging
import socket
from enum import Enum
from typing import Any, Dict, Optional

import requests.exceptions

logger = logging.getLogger(__name__)


class ErrorType(Enum):
    """Classification of error types."""

    RETRYABLE = "retryable"  # 429, 5xx, network errors
    FATAL = "fatal"  # other 4xx, including 413 payload too large
    UNKNOWN = "unknown"


def status_code_of(exception: Exception) -> Optional[int]:
    """Extract an HTTP status code from a backend or requests error."""
    status = getattr(exception, "status_code", None)
    if status is not None:
        return status
    response = getattr(exception, "response", None)
    if response is not None:
        return getattr(response, "status_code", None)
    return None


class ErrorClassifier:
    """
    Classifies errors to distinguish between retryable and fatal errors.

    Keeps running counts per classification for diagnostics.

    Example:
        >>> classifier = ErrorClassifier()
        >>> classifier.is_retryable(requests.exceptions.Timeout())
        True
    """

    def __init__(self):
        self._stats: Dict[str, int] = {
            "retryable": 0,
            "fatal": 0,
            "unknown": 0,
            "total": 0,
        }

    def _count(self, error_type: ErrorType) -> ErrorType:
        self._stats[error_type.value] += 1
        return error_type

    def classify(self, exception: Exception) -> ErrorType:
        """
        Classify an exception into retryable, fatal, or unknown.

        Args:
            exception: The exception to classify

        Returns:
            ErrorType classification
        """
        self._stats["total"] += 1

        status_code = status_code_of(exception)
        if status_code is not None:
            if status_code == 429 or 500 <= status_code < 600:
                return self._count(ErrorType.RETRYABLE)
            if 400 <= status_code < 500:
                return self._count(ErrorType.FATAL)

        if isinstance(
            exception,
            (
                socket.timeout,
                requests.exceptions.ConnectionError,
                requests.exceptions.Timeout,
            ),
        ):
            return self._count(ErrorType.RETRYABLE)

        return self._count(ErrorType.UNKNOWN)

    def is_retryable(self, exception: Exception) -> bool:
        return self.classify(exception) == ErrorType.RETRYABLE

    def get_error_description(self, exception: Exception) -> str:
        """
        Get a human-readable error description.

        Example:
            "Server error (HTTP 503) - retryable"
        """
        error_type = self.classify(exception)
        status_code = status_code_of(exception)

        if status_code == 429:
            return f"Rate limit error (HTTP 429) - {error_type.value}"
        if status_code == 413:
            return f"Payload too large (HTTP 413) - {error_type.value}"
        if status_code is not None and 500 <= status_code < 600:
            return f"Server error (HTTP {status_code}) - {error_type.value}"
        if status_code is not None and 400 <= status_code < 500:
            return f"Client error (HTTP {status_code}) - {error_type.value}"

        if isinstance(exception, (socket.timeout, requests.exceptions.Timeout)):
            return f"Network timeout error - {error_type.value}"

        if isinstance(exception, requests.exceptions.ConnectionError):
            return f"Network connection error - {error_type.value}"

        return f"{type(exception).__name__}: {str(exception)} - {error_type.value}"

    def get_statistics(self) -> Dict[str, Any]:
        return self._stats.copy()
