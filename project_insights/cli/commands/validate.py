"""Validate records command."""

import logging
import sys

import click

from project_insights.cli.context import AppContext
from project_insights.cli.error_handlers import ErrorHandler
from project_insights.cli.utils.formatters import (
    format_error,
    format_info,
    format_success,
    format_warning,
)
from project_insights.validators import RecordValidator, ValidationSeverity

logger = logging.getLogger(__name__)

MAX_ISSUES_SHOWN = 20


@click.command(name="validate")
@click.option(
    "--severity",
    type=click.Choice(["error", "warning", "info"], case_sensitive=False),
    default="warning",
    help="Minimum severity level to display (default: warning)",
)
@click.pass_obj
def validate(app: AppContext, severity: str):
    """Check loaded records for data-quality issues.

    Checks for:
    - Records that could not be parsed and were skipped
    - Time entries and expenses referencing unknown projects
    - Days with more than 24 hours logged
    - Tasks assigned to unknown users

    Returns non-zero exit code if records were skipped.

    Example:
        insights validate
        insights --snapshot data.json validate --severity info
    """
    with ErrorHandler(app.debug):
        click.echo(format_info("Validating records..."))
        severity_level = ValidationSeverity[severity.upper()]

        repo = app.repository()
        projects = repo.projects()
        entries = repo.time_entries()
        tasks = repo.tasks()
        users = repo.users()
        expenses = repo.expenses()

        report = RecordValidator().validate_all(projects, entries, tasks, users, expenses)
        report.merge(repo.report)
        report.log(logger)

        click.echo()
        click.echo("=" * 60)
        click.echo("Validation Summary")
        click.echo("=" * 60)
        click.echo(f"Projects:     {len(projects)}")
        click.echo(f"Time entries: {len(entries)}")
        click.echo(f"Tasks:        {len(tasks)}")
        click.echo(f"Users:        {len(users)}")
        click.echo(f"Expenses:     {len(expenses)}")
        click.echo(f"Errors:       {report.error_count}")
        click.echo(f"Warnings:     {report.warning_count}")
        click.echo(f"Info:         {report.info_count}")

        styles = {
            ValidationSeverity.ERROR: format_error,
            ValidationSeverity.WARNING: format_warning,
            ValidationSeverity.INFO: format_info,
        }
        for sev in (ValidationSeverity.ERROR, ValidationSeverity.WARNING, ValidationSeverity.INFO):
            if sev < severity_level:
                continue
            issues = [i for i in report.issues if i.severity == sev]
            if not issues:
                continue
            click.echo()
            click.echo(f"{sev.name}S ({len(issues)}):")
            for issue in issues[:MAX_ISSUES_SHOWN]:
                click.echo(styles[sev](f"  {issue}"))
            if len(issues) > MAX_ISSUES_SHOWN:
                click.echo(f"  ... and {len(issues) - MAX_ISSUES_SHOWN} more")

        click.echo()
        if report.has_errors():
            click.echo(format_error(f"Validation failed: {report.summary()}"))
            sys.exit(1)
        click.echo(format_success(f"Validation passed: {report.summary()}"))
