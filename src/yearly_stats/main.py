"""
Yearly stats CLI - GitHub usage by month and npm downloads per year
"""

import sys
from datetime import datetime, timezone

import click
from dotenv import load_dotenv

from ..shared_utilities import get_logger
from ..shared_utilities.base_output_formatter import OutputFormat
from ..shared_utilities.cli_base import ClickCommand, configure_cli_logging
from ..shared_utilities.config import AppConfig, ConfigurationError, load_config
from ..shared_utilities.github_client import GitHubClient
from ..shared_utilities.npm_client import NpmClient
from ..shared_utilities.output_manager import OutputManager
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.telemetry import trace_function, trace_operation
from .collector import YearlyStatsCollector, yearly_json_path, years_to_process
from .output_formatter import YearlyStatsFormatter

# Load environment variables from .env file
load_dotenv()
logger = get_logger(__name__)


def run(config: AppConfig, now: datetime | None = None) -> int:
    """
    Regenerate the yearly statistics for every year since 2024.

    Returns:
        Process exit code
    """
    try:
        config.require("github_token")
        now = now or datetime.now(timezone.utc)

        store = SnapshotStore(config.output_root)
        output_manager = OutputManager(config.output_root)
        collector = YearlyStatsCollector(
            config, GitHubClient(config.github_token), NpmClient(), store, now
        )
        formatter = YearlyStatsFormatter()

        for year in years_to_process(now):
            with trace_operation("yearly_stats.collect_year", {"year": year}):
                logger.info(f"Processing year {year}")
                stats = collector.collect_year(year)

            store.save_json(yearly_json_path(year), stats)
            formatter.save(
                stats,
                output_manager.markdown_path("mesh-stats", f"{year}.md"),
                OutputFormat.MARKDOWN,
            )

        logger.info("Yearly stats generated successfully")
        return 0

    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Error generating yearly stats: {e}")
        return 1


@click.command()
@ClickCommand.add_common_options()
@trace_function("yearly_stats_main")
def main(output_dir: str, config_file: str, quiet: bool, verbose: bool) -> None:
    """
    Generate yearly Mesh SDK usage statistics.

    Writes mesh-stats/yearly/<year>.json and mesh-stats/markdown/<year>.md for
    every year from 2024 to the current year.
    """
    configure_cli_logging(verbose, quiet)
    try:
        config = load_config(config_file, output_root=output_dir)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    sys.exit(run(config))


if __name__ == "__main__":
    main()
