"""PDF export commands."""

import datetime as dt
from pathlib import Path
from typing import Optional

import click

from project_insights.aggregators.project_analytics import build_project_analytics
from project_insights.aggregators.timesheet_aggregator import TimesheetAggregator
from project_insights.cli.context import AppContext
from project_insights.cli.error_handlers import DataValidationError, ErrorHandler
from project_insights.cli.utils.dates import date_option_callback
from project_insights.cli.utils.formatters import format_info, format_success, format_warning
from project_insights.models import Project
from project_insights.renderers import (
    DocumentMetadata,
    RenderedDocument,
    render_branded_document,
    render_executive_report,
    render_project_report,
    render_sprint_report,
    render_timesheet_report,
)
from project_insights.renderers.branded_document import fetch_logo
from project_insights.services.insight_service import InsightService
from project_insights.services.report_store import ReportStore
from project_insights.writers.export_files import (
    document_filename,
    executive_report_filename,
    report_filename,
    save_export,
    sprint_report_filename,
    timesheet_report_filename,
)

output_dir_option = click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=".",
    show_default=True,
    help="Directory the PDF is written into",
)


def _save_pdf(document: RenderedDocument, output_dir: str, filename: str) -> Path:
    path = save_export(document.data, output_dir, filename)
    pages = "page" if document.page_count == 1 else "pages"
    click.echo(format_success(f"PDF written to {path} ({document.page_count} {pages})"))
    if document.truncated:
        click.echo(format_warning("Content was shortened to fit the page"))
    return path


def _find_project(app: AppContext, project_id: str) -> Project:
    project = app.repository().project(project_id)
    if project is None:
        raise DataValidationError(
            f"Project '{project_id}' not found", "Check the project id in the backend"
        )
    return project


def _read_text(path: Optional[str]) -> Optional[str]:
    if path is None:
        return None
    return Path(path).read_text(encoding="utf-8")


@click.group(name="export-pdf")
def export_pdf():
    """Export reports and documents as A4 PDF files."""


@export_pdf.command(name="project")
@click.argument("project_id")
@click.option(
    "--ai-summary",
    is_flag=True,
    default=False,
    help="Ask the backend LLM for an executive summary page",
)
@output_dir_option
@click.pass_obj
def export_project(app: AppContext, project_id: str, ai_summary: bool, output_dir: str):
    """Project summary report: overview, metrics, team and recent activity.

    Example:
        insights export-pdf project p1 --ai-summary
    """
    with ErrorHandler(app.debug):
        repo = app.repository()
        project = _find_project(app, project_id)
        tasks = [t for t in repo.tasks() if t.project_id == project.id]
        activities = [a for a in repo.activities() if a.project_id == project.id]
        analytics = build_project_analytics(tasks, activities, app.today)

        summary = None
        if ai_summary:
            if app.offline:
                click.echo(format_warning("AI summary needs the backend; skipped"))
            else:
                summary = InsightService(app.client()).project_report(
                    project, analytics, activities, app.today
                )
                if summary is None:
                    click.echo(format_warning("No insights returned; summary page omitted"))

        users = {u.email: u for u in repo.users()}
        document = render_project_report(project, analytics, app.now(), users, summary)
        _save_pdf(document, output_dir, report_filename(project.name, app.today))


@export_pdf.command(name="executive")
@click.argument("project_id")
@click.option(
    "--content-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Markdown report to render instead of asking the backend LLM",
)
@click.option(
    "--save/--no-save",
    default=False,
    help="Store the generated report in the backend",
)
@click.option("--generated-by", type=str, default="insights-cli", help="Author stored with the report")
@output_dir_option
@click.pass_obj
def export_executive(
    app: AppContext,
    project_id: str,
    content_file: Optional[str],
    save: bool,
    generated_by: str,
    output_dir: str,
):
    """One-page AI executive report for a project.

    Example:
        insights export-pdf executive p1 --save
        insights --snapshot data.json export-pdf executive p1 --content-file report.md
    """
    with ErrorHandler(app.debug):
        repo = app.repository()
        project = _find_project(app, project_id)
        content = _read_text(content_file)

        if content is None:
            if app.offline:
                raise DataValidationError(
                    "No report content", "Pass --content-file when reading a snapshot"
                )
            tasks = [t for t in repo.tasks() if t.project_id == project.id]
            activities = [a for a in repo.activities() if a.project_id == project.id]
            analytics = build_project_analytics(tasks, activities, app.today)
            content = InsightService(app.client()).project_report(
                project, analytics, activities, app.today
            )
            if content is None:
                click.echo(format_warning("No insights returned by the backend"))
                return

        document = render_executive_report(
            project.name, content, app.today, max_chars=app.config.report_max_chars
        )
        _save_pdf(document, output_dir, executive_report_filename(project.name, app.today))

        if save and not app.offline:
            result = ReportStore.from_config(app.client(), app.config).save_project_report(
                project.id, project.name, content, generated_by
            )
            if result.saved:
                click.echo(format_success("Report saved to the backend"))
            else:
                click.echo(format_warning("Report could not be saved"))


@export_pdf.command(name="sprint")
@click.argument("sprint_id")
@output_dir_option
@click.pass_obj
def export_sprint(app: AppContext, sprint_id: str, output_dir: str):
    """Sprint report: task table grouped by status.

    Example:
        insights export-pdf sprint s1
    """
    with ErrorHandler(app.debug):
        repo = app.repository()
        sprint = next((s for s in repo.sprints() if s.id == sprint_id), None)
        if sprint is None:
            raise DataValidationError(f"Sprint '{sprint_id}' not found")

        tasks = [t for t in repo.tasks() if t.sprint_id == sprint.id]
        project_ids = {t.project_id for t in tasks if t.project_id}
        project = repo.project(next(iter(project_ids))) if len(project_ids) == 1 else None
        users = {u.email: u for u in repo.users()}

        document = render_sprint_report(sprint, tasks, app.now(), project, users)
        _save_pdf(document, output_dir, sprint_report_filename(sprint.name))


@export_pdf.command(name="timesheet")
@click.option(
    "--start", required=True, callback=date_option_callback, help="Period start (YYYY-MM-DD or YYYY-MM)"
)
@click.option(
    "--end", required=True, callback=date_option_callback, help="Period end (YYYY-MM-DD or YYYY-MM)"
)
@click.option("--user", "user_email", type=str, default=None, help="Only this user's entries")
@click.option("--project", "project_id", type=str, default=None, help="Only this project's entries")
@output_dir_option
@click.pass_obj
def export_timesheet(
    app: AppContext,
    start: dt.date,
    end: dt.date,
    user_email: Optional[str],
    project_id: Optional[str],
    output_dir: str,
):
    """Timesheet table for a period.

    Example:
        insights export-pdf timesheet --start 2024-05 --end 2024-05 --user a@x.com
    """
    with ErrorHandler(app.debug):
        if start > end:
            raise DataValidationError("--start must be before or equal to --end")

        repo = app.repository()
        aggregator = TimesheetAggregator()
        entries = aggregator.filter_by_date_range(repo.time_entries(), start, end)
        name = "All"
        if user_email:
            entries = aggregator.filter_by_user(entries, user_email)
            user = next((u for u in repo.users() if u.email == user_email), None)
            name = user.display_name if user else user_email
        if project_id:
            entries = aggregator.filter_by_project(entries, project_id)

        if not entries:
            click.echo(format_info("No time entries in this period; writing an empty report"))

        document = render_timesheet_report(entries, start, end, app.now())
        _save_pdf(document, output_dir, timesheet_report_filename(name, start, end))


@export_pdf.command(name="document")
@click.argument("html_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--title", required=True, help="Document title")
@click.option("--author", default="", help="Author shown in the metadata line")
@click.option("--category", default=None, help="Document category")
@click.option("--company", "company_name", default=None, help="Organization name in the header")
@click.option("--logo-url", default=None, help="Logo image URL (fetched best effort)")
@output_dir_option
@click.pass_obj
def export_document(
    app: AppContext,
    html_file: str,
    title: str,
    author: str,
    category: Optional[str],
    company_name: Optional[str],
    logo_url: Optional[str],
    output_dir: str,
):
    """Branded document from an HTML body.

    Example:
        insights export-pdf document notes.html --title "Kickoff Notes" --company Acme
    """
    with ErrorHandler(app.debug):
        metadata = DocumentMetadata(
            title=title,
            author=author,
            category=category,
            company_name=company_name,
            logo_url=logo_url,
        )
        html = _read_text(html_file)
        loader = (lambda url: fetch_logo(url, app.config.request_timeout)) if logo_url else None
        document = render_branded_document(html, metadata, app.today, logo_loader=loader)
        _save_pdf(document, output_dir, document_filename(title))
