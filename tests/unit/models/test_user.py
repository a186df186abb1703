"""Unit tests for the User model."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from project_insights.models import User


class TestUserModel:
    """Test suite for User."""

    def test_email_is_required(self):
        with pytest.raises(ValidationError):
            User(full_name="Nobody")
        with pytest.raises(ValidationError):
            User(email="   ")

    def test_display_name_falls_back_to_email(self):
        assert User(email="a@x.com", full_name="Ann").display_name == "Ann"
        assert User(email="a@x.com").display_name == "a@x.com"

    def test_client_role_is_not_staff(self):
        assert not User(email="a@x.com", custom_role="Client").is_staff
        assert User(email="a@x.com", custom_role="developer").is_staff
        assert User(email="a@x.com").is_staff

    def test_rate_and_currency_defaults(self):
        user = User(email="a@x.com", hourly_rate=None, ctc_currency="usd")

        assert user.hourly_rate == Decimal("0")
        assert user.ctc_currency == "USD"
        assert User(email="b@x.com").ctc_currency == "INR"
