"""Aggregators that roll raw records up into chart and report datasets."""

from project_insights.aggregators.project_analytics import (
    ProjectAnalytics,
    build_project_analytics,
)
from project_insights.aggregators.report_builder import (
    ReportBuilder,
    ReportConfig,
    ReportConfigurationError,
)
from project_insights.aggregators.resource_utilization import (
    UserUtilization,
    UtilizationSummary,
    calculate_resource_utilization,
    calculate_user_utilization,
)
from project_insights.aggregators.timesheet_aggregator import (
    GroupedHours,
    TimesheetAggregator,
    TimesheetSummary,
    WeeklyHours,
)

__all__ = [
    "ProjectAnalytics",
    "build_project_analytics",
    "ReportBuilder",
    "ReportConfig",
    "ReportConfigurationError",
    "UserUtilization",
    "UtilizationSummary",
    "calculate_resource_utilization",
    "calculate_user_utilization",
    "GroupedHours",
    "TimesheetAggregator",
    "TimesheetSummary",
    "WeeklyHours",
]
