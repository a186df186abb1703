"""Project Insights CLI.

This module provides a command-line interface for the insights engine.
It includes commands for profitability, utilization and health analytics,
custom reports, PDF exports, record validation and free-form AI questions.
"""

import datetime as dt
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from project_insights import __version__
from project_insights.cli.commands import (
    ask,
    custom_report,
    export_pdf,
    health,
    profitability,
    utilization,
    validate,
)
from project_insights.cli.context import AppContext
from project_insights.cli.error_handlers import ConfigurationError, ErrorHandler
from project_insights.config.logging_config import LoggingConfig, configure_logging
from project_insights.config.settings import get_config
from project_insights.utils.logging_utils import LogContext, generate_correlation_id


@click.group(
    help="Project Insights CLI - Profitability, health and AI reports for project portfolios"
)
@click.version_option(version=__version__)
@click.option(
    "--snapshot",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read records from a JSON snapshot instead of the backend",
)
@click.option(
    "--today",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Reference date for date-sensitive calculations (default: today)",
)
@click.option("--debug", is_flag=True, default=False, help="Show full stack traces on errors")
@click.pass_context
def cli(ctx: click.Context, snapshot: Optional[Path], today: Optional[dt.datetime], debug: bool):
    """Project Insights CLI main entry point."""
    with ErrorHandler(debug):
        try:
            config = get_config()
        except ValidationError as e:
            raise ConfigurationError(
                f"Invalid configuration: {e.errors()[0]['msg']}",
                "Check the values in your .env file",
            ) from e

        configure_logging(LoggingConfig.from_settings(config))
        ctx.with_resource(LogContext(correlation_id=generate_correlation_id()))
        ctx.obj = AppContext(
            config,
            today.date() if today else dt.date.today(),
            snapshot=snapshot,
            debug=debug or config.debug,
        )


# Register commands
cli.add_command(profitability)
cli.add_command(utilization)
cli.add_command(health)
cli.add_command(custom_report)
cli.add_command(export_pdf)
cli.add_command(ask)
cli.add_command(validate)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
