"""Custom report command."""

from typing import Optional, Tuple

import click

from project_insights.aggregators.report_builder import (
    DATA_SOURCE_FIELDS,
    VISUALIZATION_TYPES,
    ReportBuilder,
    ReportConfig,
    ReportConfigurationError,
)
from project_insights.cli.context import AppContext
from project_insights.cli.error_handlers import DataValidationError, ErrorHandler
from project_insights.cli.utils.formatters import format_frame, format_info, format_success
from project_insights.writers.csv_writer import rows_to_csv
from project_insights.writers.export_files import csv_filename, save_export
from project_insights.writers.frame_builder import rows_frame


@click.command(name="report")
@click.option(
    "--source",
    "data_source",
    type=click.Choice(list(DATA_SOURCE_FIELDS)),
    required=True,
    help="Collection to report on",
)
@click.option(
    "--field",
    "fields",
    multiple=True,
    help="Field to include (repeatable)",
)
@click.option(
    "--visualization",
    type=click.Choice(list(VISUALIZATION_TYPES)),
    default="table",
    show_default=True,
    help="Table rows or a count-by-group chart dataset",
)
@click.option("--group-by", type=str, default=None, help="Field to count by (charts only)")
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Write the dataset as CSV into this directory",
)
@click.pass_obj
def custom_report(
    app: AppContext,
    data_source: str,
    fields: Tuple[str, ...],
    visualization: str,
    group_by: Optional[str],
    output_dir: Optional[str],
):
    """Build a custom report dataset and optionally export it as CSV.

    Example:
        insights report --source projects --field name --field status
        insights report --source tasks --field title --visualization pie --group-by status
    """
    with ErrorHandler(app.debug):
        config = ReportConfig(data_source, list(fields), visualization, group_by)
        try:
            config.validate()
        except ReportConfigurationError as e:
            available = ", ".join(DATA_SOURCE_FIELDS[data_source])
            raise DataValidationError(str(e), f"Available fields: {available}") from e

        builder = ReportBuilder(app.repository().report_sources())
        rows = builder.generate(config)

        if not rows:
            click.echo(format_info(f"No {data_source} records found."))
            return
        click.echo(format_frame(rows_frame(rows)))
        click.echo()
        click.echo(format_info(f"{len(rows)} rows"))

        if output_dir:
            path = save_export(rows_to_csv(rows), output_dir, csv_filename(app.now()))
            click.echo(format_success(f"CSV written to {path}"))
