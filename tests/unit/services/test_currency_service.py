"""
Unit tests for exchange-rate lookup.
"""

from decimal import Decimal
from unittest.mock import Mock

import pytest

from project_insights.calculators.currency import RateTable
from project_insights.models import Expense, Project, User
from project_insights.services.backend_client import BackendError
from project_insights.services.currency_service import CurrencyService


@pytest.fixture
def client():
    return Mock()


@pytest.fixture
def service(client):
    return CurrencyService(client)


class TestFetchRate:
    """Test cases for CurrencyService.fetch_rate."""

    def test_rate_field(self, service, client):
        client.get.return_value = {"rate": 83.1}

        assert service.fetch_rate("USD", "INR") == Decimal("83.1")
        client.get.assert_called_once_with(
            "currency/convert", params={"from": "USD", "to": "INR", "amount": 1}
        )

    def test_result_field(self, service, client):
        client.get.return_value = {"result": "0.012"}

        assert service.fetch_rate("INR", "USD") == Decimal("0.012")

    @pytest.mark.parametrize("payload", [{"rate": 0}, {"rate": "abc"}, {}, "text", None])
    def test_unusable_payload(self, service, client, payload):
        client.get.return_value = payload

        assert service.fetch_rate("USD", "INR") is None

    def test_backend_failure(self, service, client):
        client.get.side_effect = BackendError("down", 503)

        assert service.fetch_rate("USD", "INR") is None


class TestBuildRateTable:
    """Test cases for CurrencyService.build_rate_table."""

    def test_fetches_missing_target_rates(self, service, client):
        client.get.return_value = {"rate": 83}
        projects = [Project(id="p1", currency="USD"), Project(id="p2", currency="INR")]
        users = [User(email="a@x.com", ctc_currency="EUR")]

        table = service.build_rate_table("INR", projects, users)

        assert table.lookup("USD", "INR") == Decimal("83")
        assert table.lookup("EUR", "INR") == Decimal("83")
        assert client.get.call_count == 2

    def test_direct_rate_for_foreign_expense(self, service, client):
        client.get.return_value = {"rate": 2}
        projects = [Project(id="p1", currency="USD")]
        expenses = [
            Expense(project_id="p1", amount=10, currency="EUR", status="approved"),
            Expense(project_id="p1", amount=10, currency="GBP", status="draft"),
        ]

        table = service.build_rate_table("USD", projects, expenses=expenses)

        assert ("EUR", "USD") in table
        requested = [call.kwargs["params"]["from"] for call in client.get.call_args_list]
        assert requested.count("EUR") == 1

    def test_known_rates_are_not_refetched(self, service, client):
        existing = RateTable("INR", {("USD", "INR"): Decimal("80")})

        table = service.build_rate_table(
            "INR", [Project(id="p1", currency="USD")], table=existing
        )

        assert table is existing
        client.get.assert_not_called()

    def test_failed_lookup_is_left_out(self, service, client):
        client.get.side_effect = BackendError("down", 500)

        table = service.build_rate_table("INR", [Project(id="p1", currency="USD")])

        assert len(table) == 0
        assert table.to_target(Decimal("10"), "USD").is_approximate

    def test_empty_table_is_extended_in_place(self, service, client):
        client.get.return_value = {"rate": 83}
        existing = RateTable("INR")
        assert len(existing) == 0

        table = service.build_rate_table(
            "INR", [Project(id="p1", currency="USD")], table=existing
        )

        assert table is existing
        assert existing.lookup("USD", "INR") == Decimal("83")
