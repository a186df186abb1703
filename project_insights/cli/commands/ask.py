"""Free-form AI question command."""

from typing import Optional

import click

from project_insights.cli.context import AppContext
from project_insights.cli.error_handlers import ConfigurationError, ErrorHandler
from project_insights.cli.utils.formatters import format_success, format_warning
from project_insights.cli.utils.typewriter import Typewriter, stream_text
from project_insights.renderers import render_question_report
from project_insights.services.insight_service import InsightService, build_question_context
from project_insights.services.report_store import ReportStore
from project_insights.writers.export_files import report_filename, save_export

PORTFOLIO_QUESTION = "Organization-wide insights"


@click.command(name="ask")
@click.argument("question", required=False)
@click.option(
    "--save/--no-save",
    default=False,
    help="Store the answer in the backend as an insights report",
)
@click.option("--generated-by", type=str, default="insights-cli", help="Author stored with the report")
@click.option(
    "--pdf-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Also write the answer as a one-page PDF into this directory",
)
@click.option(
    "--no-stream",
    is_flag=True,
    default=False,
    help="Print the answer at once instead of typing it out",
)
@click.pass_obj
def ask(
    app: AppContext,
    question: Optional[str],
    save: bool,
    generated_by: str,
    pdf_dir: Optional[str],
    no_stream: bool,
):
    """Ask a question about projects, tasks and the team.

    Without a question, generates organization-wide insights instead.

    Example:
        insights ask
        insights ask "Which projects are at risk this month?"
        insights ask "Who is overloaded?" --save --pdf-dir reports
    """
    with ErrorHandler(app.debug):
        if app.offline:
            raise ConfigurationError(
                "Questions need the backend LLM",
                "Run without --snapshot and set API_BASE_URL",
            )

        repo = app.repository()
        service = InsightService(app.client())
        context = build_question_context(repo.projects(), repo.tasks(), repo.users(), app.today)
        if question:
            answer = service.ask(question, context)
        else:
            question = PORTFOLIO_QUESTION
            answer = service.portfolio_insights(
                repo.projects(), repo.tasks(), repo.users(), repo.time_entries(), app.today
            )

        if answer is None:
            click.echo(format_warning("No insights returned. Try rephrasing the question."))
            return

        if no_stream:
            click.echo(answer)
        else:
            stream_text(Typewriter(answer))

        if save:
            result = ReportStore.from_config(app.client(), app.config).save_question_report(
                question, answer, generated_by, context_data=context["summary"]
            )
            if result.saved:
                click.echo(format_success("Answer saved to the backend"))
            else:
                click.echo(format_warning("Answer could not be saved"))

        if pdf_dir:
            document = render_question_report(question, answer, generated_by, app.today)
            path = save_export(
                document.data, pdf_dir, report_filename("AI Insights", app.today)
            )
            click.echo(format_success(f"PDF written to {path}"))
