"""Analytics commands: profitability, utilization and health."""

from typing import Optional

import click

from project_insights.aggregators.resource_utilization import (
    calculate_resource_utilization,
)
from project_insights.calculators.currency import RateTable
from project_insights.calculators.health_calculator import assess_projects, summarize_health
from project_insights.calculators.profitability_calculator import calculate_profitability
from project_insights.calculators.risk_calculator import assess_risk
from project_insights.calculators.timeline_calculator import predict_timeline
from project_insights.cli.context import AppContext
from project_insights.cli.error_handlers import ErrorHandler
from project_insights.cli.utils.formatters import (
    format_frame,
    format_info,
    format_success,
    format_table,
    format_warning,
)
from project_insights.cli.utils.progress import ProgressTracker
from project_insights.services.currency_service import CurrencyService
from project_insights.writers.csv_writer import rows_to_csv
from project_insights.writers.export_files import csv_filename, save_export
from project_insights.writers.frame_builder import (
    health_frame,
    profitability_frame,
    utilization_frame,
)


def _write_frame_csv(df, output_dir: str, app: AppContext) -> None:
    rows = df.to_dict("records")
    path = save_export(rows_to_csv(rows), output_dir, csv_filename(app.now()))
    click.echo(format_success(f"CSV written to {path}"))


@click.command(name="profitability")
@click.option(
    "--currency",
    type=str,
    default=None,
    help="Reporting currency (default: DEFAULT_CURRENCY from config)",
)
@click.option("--project", "project_id", type=str, default=None, help="Restrict to one project id")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Also write the table as CSV into this directory",
)
@click.pass_obj
def profitability(
    app: AppContext, currency: Optional[str], project_id: Optional[str], output_dir: Optional[str]
):
    """Show revenue, cost, profit and margin per project.

    Example:
        insights profitability --currency USD
        insights --snapshot data.json profitability --project p1
    """
    with ErrorHandler(app.debug):
        target = (currency or app.config.default_currency).upper()
        tracker = ProgressTracker(
            ["Loading records", "Fetching exchange rates", "Calculating profitability"]
        )
        repo = app.repository()

        tracker.start()
        projects = repo.projects()
        entries = repo.time_entries()
        users = repo.users()
        expenses = repo.expenses()
        tracker.advance(f"Loaded {len(projects)} projects and {len(entries)} time entries")

        tracker.start()
        if app.offline:
            rates = RateTable(target)
            tracker.advance("Snapshot mode: foreign amounts are not converted")
        else:
            rates = CurrencyService(app.client()).build_rate_table(
                target, projects, users, expenses
            )
            tracker.advance(f"{len(rates)} exchange rates available")

        tracker.start()
        report = calculate_profitability(
            projects,
            entries,
            rates,
            expenses=expenses,
            users=users,
            tasks=repo.tasks(),
            sprints=repo.sprints(),
            project_id=project_id,
        )
        tracker.advance()

        click.echo()
        df = profitability_frame(report)
        if df.empty:
            click.echo(format_info("No projects with logged time or approved expenses."))
            return
        click.echo(format_frame(df))

        portfolio = report.portfolio
        click.echo()
        click.echo(f"Portfolio ({portfolio.target_currency}, {portfolio.project_count} projects):")
        click.echo(f"  Revenue:    {portfolio.total_revenue}")
        click.echo(f"  Total cost: {portfolio.total_cost}")
        click.echo(f"  Profit:     {portfolio.total_profit}")
        click.echo(f"  Margin:     {portfolio.overall_margin}%")
        click.echo(f"  Leakage:    {portfolio.total_leakage}")
        if portfolio.is_estimate:
            click.echo(
                format_warning("Some amounts could not be converted and are estimates (*)")
            )

        if output_dir:
            _write_frame_csv(df, output_dir, app)


@click.command(name="utilization")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Also write the table as CSV into this directory",
)
@click.pass_obj
def utilization(app: AppContext, output_dir: Optional[str]):
    """Show workload and logged hours per team member.

    Example:
        insights utilization
    """
    with ErrorHandler(app.debug):
        repo = app.repository()
        summary = calculate_resource_utilization(
            repo.users(), repo.tasks(), repo.time_entries(), app.today
        )

        df = utilization_frame(summary)
        if df.empty:
            click.echo(format_info("No team members found."))
            return
        click.echo(format_frame(df))
        click.echo()
        click.echo(f"Team size:          {summary.total_team}")
        click.echo(f"Overloaded:         {summary.overloaded_users}")
        click.echo(f"Underutilized:      {summary.underutilized_users}")
        click.echo(f"Active tasks:       {summary.total_active_tasks}")
        click.echo(f"Total logged hours: {summary.total_logged_hours}")

        if summary.top_performers:
            click.echo()
            click.echo("Top performers:")
            for performer in summary.top_performers:
                click.echo(f"  {performer['name']}: {performer['hours']} hours in 30 days")

        if output_dir:
            _write_frame_csv(df, output_dir, app)


@click.command(name="health")
@click.option(
    "--details",
    is_flag=True,
    default=False,
    help="Also show risk score and completion forecast per project",
)
@click.pass_obj
def health(app: AppContext, details: bool):
    """Show health scores, budget status and overdue work per project.

    Example:
        insights health --details
        insights --today 2024-06-30 health
    """
    with ErrorHandler(app.debug):
        repo = app.repository()
        projects = repo.projects()
        tasks = repo.tasks()

        results = assess_projects(projects, tasks, app.today)
        if not results:
            click.echo(format_info("No projects found."))
            return
        click.echo(format_frame(health_frame(results)))

        summary = summarize_health(results)
        click.echo()
        click.echo(
            f"Critical: {summary.critical_projects}  At risk: {summary.at_risk_projects}  "
            f"Healthy: {summary.healthy_projects}  Budget issues: {summary.budget_issues}"
        )

        if not details:
            return

        activities = repo.activities()
        rows = []
        for project in projects:
            project_tasks = [t for t in tasks if t.project_id == project.id]
            risk = assess_risk(project, project_tasks, app.today)
            project_activities = [a for a in activities if a.project_id == project.id]
            forecast = predict_timeline(project, project_tasks, project_activities, app.today)
            rows.append(
                [
                    project.name,
                    f"{risk.score:g}",
                    risk.level,
                    forecast.predicted_date.isoformat(),
                    forecast.status,
                    forecast.confidence,
                ]
            )
        click.echo()
        click.echo(
            format_table(
                ["Project", "Risk", "Level", "Forecast", "Timeline", "Confidence"], rows
            )
        )
