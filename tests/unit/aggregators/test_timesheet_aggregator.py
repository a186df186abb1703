"""Tests for timesheet aggregator module.

This module contains tests for the TimesheetAggregator class, which groups
time entries into chart rows, summarizes them and builds weekly matrices.
"""

import datetime as dt
from decimal import Decimal

import pandas as pd
import pytest

from project_insights.aggregators.timesheet_aggregator import TimesheetAggregator
from project_insights.models import TimeEntry


@pytest.fixture
def aggregator():
    """Aggregator that knows the sample project's name."""
    return TimesheetAggregator(project_names={"p1": "Website Redesign"})


class TestGroupEntries:
    """Test suite for group_entries."""

    def test_group_by_project(self, aggregator, sample_entries):
        rows = aggregator.group_entries(sample_entries, "project")

        assert len(rows) == 1
        row = rows[0]
        assert row.name == "Website Redesign"
        assert row.hours == Decimal("14.50")
        assert row.billable_hours == Decimal("13.50")
        assert row.amount == Decimal("400.00")
        assert row.entries == 4

    def test_denormalized_project_name_wins(self):
        entries = [TimeEntry(project_id="p1", project_name="From Entry", total_minutes=60)]

        rows = TimesheetAggregator({"p1": "From Lookup"}).group_entries(entries, "project")

        assert rows[0].name == "From Entry"

    def test_group_by_user_sorted_by_hours(self, aggregator, sample_entries):
        rows = aggregator.group_entries(sample_entries, "user")

        assert [(r.name, r.hours) for r in rows] == [
            ("ann@example.com", Decimal("11.00")),
            ("bob@example.com", Decimal("3.50")),
        ]

    def test_group_by_work_type_uses_other_bucket(self, aggregator, sample_entries):
        rows = aggregator.group_entries(sample_entries, "work_type")

        assert [(r.name, r.hours) for r in rows] == [
            ("Development", Decimal("11.00")),
            ("Meeting", Decimal("2.00")),
            ("Other", Decimal("1.50")),
        ]

    def test_task_type_alias(self, aggregator, sample_entries):
        assert aggregator.group_entries(sample_entries, "task_type") == (
            aggregator.group_entries(sample_entries, "work_type")
        )

    def test_group_by_date_labels(self, aggregator, sample_entries):
        rows = aggregator.group_entries(sample_entries, "date")

        assert rows[0].name == "Jun 3"
        assert len(rows) == 4

    def test_group_by_none_is_single_total(self, aggregator, sample_entries):
        rows = aggregator.group_entries(sample_entries, "none")

        assert [(r.name, r.entries) for r in rows] == [("Total", 4)]

    def test_missing_keys_fall_into_fallback_buckets(self, aggregator):
        entries = [TimeEntry(total_minutes=30), TimeEntry(total_minutes=15)]

        assert aggregator.group_entries(entries, "project")[0].name == "Unassigned"
        assert aggregator.group_entries(entries, "user")[0].name == "Unknown"
        assert aggregator.group_entries(entries, "date")[0].name == "Unknown"

    @pytest.mark.parametrize("group_by", ["project", "user", "date", "work_type", "none"])
    def test_every_entry_lands_in_exactly_one_group(self, aggregator, sample_entries, group_by):
        entries = sample_entries + [TimeEntry(total_minutes=5)]

        rows = aggregator.group_entries(entries, group_by)

        assert sum(row.entries for row in rows) == len(entries)

    def test_grouping_is_idempotent(self, aggregator, sample_entries):
        assert aggregator.group_entries(sample_entries, "user") == aggregator.group_entries(
            sample_entries, "user"
        )

    def test_unsupported_grouping_raises(self, aggregator, sample_entries):
        with pytest.raises(ValueError, match="Unsupported grouping"):
            aggregator.group_entries(sample_entries, "client")

    def test_empty_input(self, aggregator):
        assert aggregator.group_entries([], "project") == []


class TestSummarize:
    def test_summary(self, aggregator, sample_entries):
        summary = aggregator.summarize(sample_entries)

        assert summary.total_hours == Decimal("14.5")
        assert summary.billable_hours == Decimal("13.5")
        assert summary.total_amount == Decimal("400.00")
        assert summary.approved_count == 3
        assert summary.total_entries == 4

    def test_empty_summary(self, aggregator):
        summary = aggregator.summarize([])

        assert summary.total_hours == Decimal("0.0")
        assert summary.total_entries == 0


class TestFilters:
    """Test suite for entry filters."""

    def test_filter_by_project(self, aggregator, sample_entries):
        entries = sample_entries + [TimeEntry(project_id="p2")]

        assert len(aggregator.filter_by_project(entries, "p2")) == 1

    def test_filter_by_user(self, aggregator, sample_entries):
        filtered = aggregator.filter_by_user(sample_entries, "bob@example.com")

        assert [e.id for e in filtered] == ["e2", "e4"]

    def test_filter_by_date_range_is_inclusive(self, aggregator, sample_entries):
        filtered = aggregator.filter_by_date_range(
            sample_entries + [TimeEntry(id="undated")], dt.date(2024, 6, 4), dt.date(2024, 6, 5)
        )

        assert [e.id for e in filtered] == ["e2", "e3"]


class TestWeeklyHours:
    """Test suite for weekly aggregation."""

    def test_calculate_weekly_hours(self, aggregator, sample_entries):
        weekly = {w.user: w for w in aggregator.calculate_weekly_hours(sample_entries)}

        ann = weekly["ann@example.com"]
        assert (ann.year, ann.week_number) == (2024, 23)
        assert ann.hours == Decimal("11.00")
        assert ann.billable_hours == Decimal("10.00")
        assert ann.entries_count == 2

    def test_weekly_hours_skip_undated_entries(self, aggregator):
        assert aggregator.calculate_weekly_hours([TimeEntry(total_minutes=60)]) == []

    def test_generate_weekly_matrix(self, aggregator, sample_entries):
        entries = sample_entries + [
            TimeEntry(date=dt.date(2024, 6, 10), user_email="bob@example.com", total_minutes=30)
        ]
        weekly = aggregator.calculate_weekly_hours(entries)

        matrix = aggregator.generate_weekly_matrix(weekly)

        assert list(matrix.columns) == ["2024-W23", "2024-W24"]
        assert list(matrix.index) == ["ann@example.com", "bob@example.com"]
        assert matrix.loc["ann@example.com", "2024-W23"] == 11.0
        assert matrix.loc["ann@example.com", "2024-W24"] == 0.0
        assert matrix.loc["bob@example.com", "2024-W24"] == 0.5

    def test_empty_matrix(self, aggregator):
        matrix = aggregator.generate_weekly_matrix([])

        assert isinstance(matrix, pd.DataFrame)
        assert matrix.empty
