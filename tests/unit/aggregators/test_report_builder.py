"""Tests for the custom report builder."""

import pytest

from project_insights.aggregators.report_builder import (
    PIE_COLORS,
    ReportBuilder,
    ReportConfig,
    ReportConfigurationError,
    build_table,
    count_by_group,
)
from project_insights.models import Project


@pytest.fixture
def builder(snapshot_data):
    return ReportBuilder(snapshot_data)


class TestReportConfig:
    """Test configuration validation."""

    def test_valid_table(self):
        ReportConfig("projects", ["name", "status"]).validate()

    def test_unknown_source(self):
        with pytest.raises(ReportConfigurationError, match="Unknown data source"):
            ReportConfig("invoices", ["name"]).validate()

    def test_no_fields(self):
        with pytest.raises(ReportConfigurationError, match="at least one field"):
            ReportConfig("projects", []).validate()

    def test_unknown_field(self):
        with pytest.raises(ReportConfigurationError, match="salary"):
            ReportConfig("users", ["email", "salary"]).validate()

    def test_unknown_visualization(self):
        with pytest.raises(ReportConfigurationError, match="Unknown visualization"):
            ReportConfig("projects", ["name"], "scatter", "status").validate()

    def test_chart_requires_group_by(self):
        with pytest.raises(ReportConfigurationError, match="group-by"):
            ReportConfig("projects", ["name"], "bar").validate()

    def test_chart_group_by_must_be_known(self):
        with pytest.raises(ReportConfigurationError, match="Unknown group-by"):
            ReportConfig("projects", ["name"], "pie", "owner").validate()

    def test_configuration_error_is_a_value_error(self):
        assert issubclass(ReportConfigurationError, ValueError)


class TestBuildTable:
    def test_missing_values_show_na(self):
        rows = build_table(
            [{"name": "Alpha", "budget": None, "status": "", "priority": []}],
            ["name", "budget", "status", "priority", "deadline"],
        )

        assert rows == [
            {"name": "Alpha", "budget": "N/A", "status": "N/A", "priority": "N/A", "deadline": "N/A"}
        ]

    def test_zero_and_false_are_kept(self):
        rows = build_table([{"progress": 0, "is_billable": False}], ["progress", "is_billable"])

        assert rows == [{"progress": 0, "is_billable": False}]

    def test_models_are_accepted(self):
        rows = build_table([Project(name="Alpha", progress=10)], ["name", "progress"])

        assert rows == [{"name": "Alpha", "progress": 10}]


class TestCountByGroup:
    def test_first_seen_order_and_unknown_bucket(self):
        records = [{"status": "active"}, {}, {"status": "active"}, {"status": None}]

        assert count_by_group(records, "status") == [
            {"name": "active", "value": 2},
            {"name": "Unknown", "value": 2},
        ]

    def test_list_values_are_joined(self):
        records = [{"assigned_to": ["a@x.com", "b@x.com"]}]

        assert count_by_group(records, "assigned_to") == [{"name": "a@x.com, b@x.com", "value": 1}]

    def test_counts_add_up_to_record_count(self, snapshot_data):
        data = count_by_group(snapshot_data["tasks"], "priority")

        assert sum(item["value"] for item in data) == len(snapshot_data["tasks"])


class TestReportBuilder:
    """Test suite for ReportBuilder.generate."""

    def test_table(self, builder):
        rows = builder.generate(ReportConfig("users", ["full_name", "role"]))

        assert rows == [
            {"full_name": "Ann Lee", "role": "admin"},
            {"full_name": "Bob Roy", "role": "user"},
        ]

    def test_bar_chart(self, builder):
        data = builder.generate(ReportConfig("tasks", ["title"], "bar", "status"))

        assert data == [{"name": "completed", "value": 1}, {"name": "in_progress", "value": 1}]

    def test_pie_chart_colors_cycle(self):
        records = [{"status": str(i)} for i in range(len(PIE_COLORS) + 1)]
        builder = ReportBuilder({"projects": records})

        data = builder.generate(ReportConfig("projects", ["name"], "pie", "status"))

        assert data[0]["color"] == PIE_COLORS[0]
        assert data[-1]["color"] == PIE_COLORS[0]

    def test_missing_source_gives_empty_dataset(self):
        assert ReportBuilder({}).generate(ReportConfig("projects", ["name"])) == []

    def test_invalid_config_raises(self, builder):
        with pytest.raises(ReportConfigurationError):
            builder.generate(ReportConfig("projects", ["nope"]))
