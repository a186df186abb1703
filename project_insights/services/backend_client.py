"""
REST client for the project-management backend with retry handling.
"""

import logging
from typing import Any, Dict, List, Optional

import requests

from project_insights.services.retry_handler import (
    CircuitBreakerError,
    RetryExhaustedException,
    RetryHandler,
)
from project_insights.utils.logging_utils import sanitize_sensitive_data

logger = logging.getLogger(__name__)


class BackendError(Exception):
    """Raised when the backend answers with an error status.

    Attributes:
        status_code: HTTP status code
        url: Requested URL
        retry_after: Seconds the backend asked to wait (HTTP 429 only)
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        url: str = "",
        retry_after: Optional[float] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.url = url
        self.retry_after = retry_after


def retry_after_seconds(response: Any) -> Optional[float]:
    """Numeric Retry-After header of a 429 response, if any."""
    if response.status_code != 429:
        return None
    try:
        return max(0.0, float(response.headers.get("Retry-After")))
    except (AttributeError, TypeError, ValueError):
        return None


# Errors a caller should catch to degrade gracefully on a failed backend call
SERVICE_ERRORS = (
    BackendError,
    RetryExhaustedException,
    CircuitBreakerError,
    requests.exceptions.RequestException,
    ValueError,
)


class BackendClient:
    """
    Thin JSON client for the backend REST API.

    Features:
    - Bearer token authentication
    - Automatic retry with exponential backoff on 429, 5xx and network errors
    - ``_id`` to ``id`` normalization on returned records

    Args:
        base_url: API base URL, e.g. ``http://localhost:5000/api``
        token: Bearer token sent with each request
        timeout: Request timeout in seconds
        session: Optional requests session (injectable for tests)
        retry_handler: Custom retry handler instance

    Example:
        >>> client = BackendClient("http://localhost:5000/api", token="t0k3n")
        >>> projects = client.list_entities("Project")
    """

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
        retry_handler: Optional[RetryHandler] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()
        self.retry_handler = retry_handler or RetryHandler()

    @classmethod
    def from_config(cls, config: Any, **kwargs) -> "BackendClient":
        """Create a client from an ``InsightsConfig``."""
        retry_handler = kwargs.pop(
            "retry_handler",
            RetryHandler(max_retries=config.max_retries, base_delay=config.retry_delay),
        )
        return cls(
            config.api_base_url,
            token=config.api_token,
            timeout=config.request_timeout,
            retry_handler=retry_handler,
            **kwargs,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = self.url_for(path)

        def _operation():
            response = self.session.request(
                method, url, headers=self._headers(), timeout=self.timeout, **kwargs
            )
            if response.status_code >= 400:
                raise BackendError(
                    f"{method} {url} failed with HTTP {response.status_code}",
                    status_code=response.status_code,
                    url=url,
                    retry_after=retry_after_seconds(response),
                )
            if not response.content:
                return None
            try:
                return response.json()
            except ValueError:
                # plain-text bodies (LLM answers)
                return response.text

        logger.debug(
            f"{method} {url}",
            extra={"request_headers": sanitize_sensitive_data(self._headers())},
        )
        return self.retry_handler.execute_with_retry(_operation)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """
        Send a GET request and decode the JSON body.

        Raises:
            BackendError: On a non-retryable error status
            RetryExhaustedException: If transient failures persist
        """
        return self._request("GET", path, params=params)

    def post(self, path: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        """Send a POST request with a JSON body and decode the JSON answer."""
        return self._request("POST", path, json=payload or {})

    def list_entities(
        self,
        entity: str,
        filters: Optional[Dict[str, Any]] = None,
        sort: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Fetch all records of an entity collection.

        Args:
            entity: Backend entity name, e.g. "Project" or "Timesheet"
            filters: Optional backend filter document
            sort: Optional sort field, prefixed with "-" for descending

        Returns:
            List of raw record dictionaries with ``id`` set
        """
        body: Dict[str, Any] = {"filters": filters or {}}
        if sort:
            body["sort"] = sort
        data = self.post(f"entities/{entity}/filter", body)
        if not isinstance(data, list):
            logger.warning(f"Unexpected {entity} payload of type {type(data).__name__}")
            return []
        records = [normalize_record(item) for item in data if isinstance(item, dict)]
        logger.info(f"Fetched {len(records)} {entity} records")
        return records

    def create_entity(self, entity: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a record and return the backend's copy of it."""
        created = self.post(f"entities/{entity}/create", data)
        if isinstance(created, dict):
            return normalize_record(created)
        return {}


def normalize_record(record: Dict[str, Any]) -> Dict[str, Any]:
    """Copy ``_id`` into ``id`` when the backend omits the latter."""
    if record.get("_id") and not record.get("id"):
        return {**record, "id": record["_id"]}
    return record
