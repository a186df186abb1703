"""CLI commands."""

from project_insights.cli.commands.analytics import health, profitability, utilization
from project_insights.cli.commands.ask import ask
from project_insights.cli.commands.export import export_pdf
from project_insights.cli.commands.report import custom_report
from project_insights.cli.commands.validate import validate

__all__ = [
    "ask",
    "custom_report",
    "export_pdf",
    "health",
    "profitability",
    "utilization",
    "validate",
]
