"""
Main CLI interface for the multi-cloud unified overview.

Builds the overview from fixture-backed collaborators and prints it as
text or JSON.
"""

import asyncio
import logging
import sys

import click

from .config.settings import get_config
from .core.overview import OverviewService
from .formatting import OutputFormat, OverviewFormatConfig, OverviewTextFormatter
from .providers.base import CloudProviderError
from .providers.static import load_fixture_providers

# Set up logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity settings."""
    # Default is quiet (only show results)
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        logging.getLogger().setLevel(logging.ERROR)

    # Configure library loggers to reduce noise
    for logger_name in ["asyncio", "dynaconf", "urllib3"]:
        logging.getLogger(logger_name).setLevel(logging.INFO if verbose else logging.ERROR)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging and debug output")
@click.pass_context
def cli(ctx, verbose):
    """Multi-Cloud Unified Overview - one view of AWS, Azure, and GCP."""
    setup_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose

    try:
        ctx.obj["config"] = get_config()
    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--fixtures",
    "fixtures_dir",
    required=True,
    type=click.Path(exists=True, file_okay=False),
    help="Directory of provider snapshot JSON files",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["plain", "colored", "json"]),
    default="colored",
    help="Output format",
)
@click.option("--timeout", type=float, help="Per-provider deadline in seconds (0 disables)")
@click.option("--timeline-days", type=int, help="Timeline rows to print in text output")
@click.pass_context
def overview(ctx, fixtures_dir, output_format, timeout, timeline_days):
    """Build and print the unified overview."""
    config = ctx.obj["config"]
    config.override_from_cli({"timeout": timeout})

    try:
        aws, azure, gcp = load_fixture_providers(fixtures_dir)
    except CloudProviderError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    async def _overview():
        service = OverviewService(aws, azure, gcp, config=config)
        return await service.get_unified_overview()

    result = asyncio.run(_overview())

    format_config = OverviewFormatConfig(
        **({"timeline_rows": timeline_days} if timeline_days is not None else {})
    )
    formatter = OverviewTextFormatter(format_config)
    click.echo(formatter.format_overview(result, OutputFormat(output_format)))

    # Exit 2 when no provider returned cost data
    if all(getattr(result.cost_totals, p) is None for p in ("aws", "azure", "gcp")):
        sys.exit(2)


if __name__ == "__main__":
    cli()
