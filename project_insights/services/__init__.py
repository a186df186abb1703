"""
Backend services for the insights engine.

This package provides resilient access to the backend REST API with:
- Exponential backoff with jitter for transient failures
- Circuit breaker pattern for failure handling
- Graceful degradation for rates, LLM answers and report persistence
- A read-through repository cache of entity collections
"""

from .backend_client import SERVICE_ERRORS, BackendClient, BackendError
from .currency_service import CurrencyService
from .error_classifier import ErrorClassifier, ErrorType
from .insight_service import InsightService
from .report_store import ReportStore, SaveResult
from .repository import EntityRepository
from .retry_handler import CircuitBreakerError, RetryExhaustedException, RetryHandler

__all__ = [
    "RetryHandler",
    "RetryExhaustedException",
    "CircuitBreakerError",
    "ErrorClassifier",
    "ErrorType",
    "BackendClient",
    "BackendError",
    "SERVICE_ERRORS",
    "CurrencyService",
    "InsightService",
    "ReportStore",
    "SaveResult",
    "EntityRepository",
]
