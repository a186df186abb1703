"""Tests for CLI date parsing."""

import datetime as dt
from unittest.mock import Mock

import click
import pytest

from project_insights.cli.utils.dates import date_option_callback, parse_date_input


class TestParseDateInput:
    """Tests for parse_date_input."""

    def test_full_date(self):
        assert parse_date_input("2024-06-15") == dt.date(2024, 6, 15)

    def test_month_start(self):
        assert parse_date_input("2024-02") == dt.date(2024, 2, 1)

    def test_month_end_leap_year(self):
        assert parse_date_input("2024-02", end_of_month=True) == dt.date(2024, 2, 29)

    def test_invalid(self):
        with pytest.raises(ValueError, match="Expected YYYY-MM-DD or YYYY-MM"):
            parse_date_input("15.06.2024")


class TestDateOptionCallback:
    """Tests for date_option_callback."""

    def test_end_option_uses_month_end(self):
        param = Mock()
        param.name = "end"

        assert date_option_callback(None, param, "2024-04") == dt.date(2024, 4, 30)

    def test_start_option_uses_month_start(self):
        param = Mock()
        param.name = "start"

        assert date_option_callback(None, param, "2024-04") == dt.date(2024, 4, 1)

    def test_none_passes_through(self):
        assert date_option_callback(None, Mock(), None) is None

    def test_bad_value(self):
        param = Mock()
        param.name = "start"

        with pytest.raises(click.BadParameter):
            date_option_callback(None, param, "April")
