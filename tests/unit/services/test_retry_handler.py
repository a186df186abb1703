"""
Unit tests for retry handler with exponential backoff and circuit breaker.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from project_insights.services.backend_client import BackendError
from project_insights.services.retry_handler import (
    CircuitBreakerError,
    RetryExhaustedException,
    RetryHandler,
)


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestRetryHandler:
    """Test cases for RetryHandler."""

    @pytest.fixture
    def sleeps(self):
        return []

    @pytest.fixture
    def clock(self):
        return FakeClock()

    @pytest.fixture
    def retry_handler(self, sleeps, clock):
        """RetryHandler instance with recorded sleeps and a fake clock."""
        return RetryHandler(
            max_retries=3,
            base_delay=0.1,
            max_delay=1.0,
            exponential_base=2,
            jitter_factor=0.0,
            circuit_breaker_threshold=2,
            circuit_breaker_timeout=60.0,
            sleep=sleeps.append,
            clock=clock,
        )

    def test_initialization_with_defaults(self):
        """Test retry handler initializes with default values."""
        handler = RetryHandler()

        assert handler.max_retries == 3
        assert handler.base_delay == 1.0
        assert handler.max_delay == 30.0
        assert handler.exponential_base == 2
        assert handler.jitter_factor == 0.1
        assert handler.circuit_breaker_threshold == 5
        assert handler.circuit_breaker_timeout == 60.0

    def test_successful_execution_no_retry(self, retry_handler, sleeps):
        """Test successful execution without retries."""
        mock_func = Mock(return_value="success")

        assert retry_handler.execute_with_retry(mock_func, 1, key="v") == "success"
        mock_func.assert_called_once_with(1, key="v")
        assert sleeps == []

    def test_retry_on_server_error(self, retry_handler, sleeps):
        """Test that 5xx responses are retried with exponential delays."""
        mock_func = Mock(
            side_effect=[BackendError("boom", 503), BackendError("boom", 502), "ok"]
        )

        assert retry_handler.execute_with_retry(mock_func) == "ok"
        assert mock_func.call_count == 3
        assert sleeps == pytest.approx([0.1, 0.2])

    def test_retry_on_rate_limit_and_network_errors(self, retry_handler):
        mock_func = Mock(
            side_effect=[BackendError("slow down", 429), requests.ConnectionError(), "ok"]
        )

        assert retry_handler.execute_with_retry(mock_func) == "ok"

    def test_no_retry_on_client_error(self, retry_handler, sleeps):
        """Test that fatal errors are raised immediately."""
        mock_func = Mock(side_effect=BackendError("missing", 404))

        with pytest.raises(BackendError):
            retry_handler.execute_with_retry(mock_func)

        assert mock_func.call_count == 1
        assert sleeps == []

    def test_payload_too_large_is_not_retried(self, retry_handler):
        mock_func = Mock(side_effect=BackendError("too large", 413))

        with pytest.raises(BackendError):
            retry_handler.execute_with_retry(mock_func)

        assert mock_func.call_count == 1

    def test_max_retries_exhausted(self, retry_handler):
        """Test that RetryExhaustedException carries the last error."""
        error = requests.Timeout("slow")
        mock_func = Mock(side_effect=error)

        with pytest.raises(RetryExhaustedException) as exc_info:
            retry_handler.execute_with_retry(mock_func)

        assert mock_func.call_count == 4
        assert exc_info.value.last_exception is error
        assert "Max retries (3) exceeded" in str(exc_info.value)

    def test_delay_is_capped(self, sleeps, clock):
        handler = RetryHandler(
            max_retries=5, base_delay=0.5, max_delay=1.0, jitter_factor=0.0,
            sleep=sleeps.append, clock=clock,
        )
        mock_func = Mock(side_effect=[BackendError("x", 500)] * 5 + ["ok"])

        handler.execute_with_retry(mock_func)

        assert sleeps == pytest.approx([0.5, 1.0, 1.0, 1.0, 1.0])

    def test_retry_after_stretches_delay(self, retry_handler, sleeps):
        """Test that a Retry-After hint is honored up to max_delay."""
        mock_func = Mock(
            side_effect=[
                BackendError("slow down", 429, retry_after=0.5),
                BackendError("slow down", 429, retry_after=10),
                "ok",
            ]
        )

        assert retry_handler.execute_with_retry(mock_func) == "ok"
        assert sleeps == pytest.approx([0.5, 1.0])

    @patch("project_insights.services.retry_handler.random.uniform", return_value=0.1)
    def test_jitter(self, _mock_uniform):
        handler = RetryHandler(base_delay=1.0, jitter_factor=0.1)

        assert handler._calculate_delay(1) == pytest.approx(2.2)

    def test_circuit_breaker_opens_and_half_opens(self, retry_handler, clock):
        """Test that exhausted calls open the circuit until the timeout passes."""
        failing = Mock(side_effect=requests.ConnectionError())

        for _ in range(2):
            with pytest.raises(RetryExhaustedException):
                retry_handler.execute_with_retry(failing)

        with pytest.raises(CircuitBreakerError):
            retry_handler.execute_with_retry(Mock(return_value="ok"))

        clock.now = 61.0
        assert retry_handler.execute_with_retry(Mock(return_value="ok")) == "ok"
        assert retry_handler.get_retry_statistics()["circuit_breaker_open"] is False

    def test_statistics(self, retry_handler):
        retry_handler.execute_with_retry(Mock(side_effect=[BackendError("x", 500), "ok"]))

        stats = retry_handler.get_retry_statistics()

        assert stats["total_calls"] == 1
        assert stats["total_retries"] == 1
        assert stats["total_failures"] == 0

    def test_reset_circuit_breaker(self, retry_handler):
        failing = Mock(side_effect=requests.ConnectionError())
        for _ in range(2):
            with pytest.raises(RetryExhaustedException):
                retry_handler.execute_with_retry(failing)

        retry_handler.reset_circuit_breaker()

        assert retry_handler.execute_with_retry(Mock(return_value=1)) == 1

    def test_custom_retry_condition(self, sleeps, clock):
        handler = RetryHandler(
            max_retries=1, retry_condition=lambda e: isinstance(e, KeyError),
            sleep=sleeps.append, clock=clock,
        )

        with pytest.raises(RetryExhaustedException):
            handler.execute_with_retry(Mock(side_effect=KeyError("k")))
        with pytest.raises(ValueError):
            handler.execute_with_retry(Mock(side_effect=ValueError("v")))
