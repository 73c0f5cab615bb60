"""
Contributors CLI - yearly contributor rosters for the MeshJS organisation
"""

import sys
from datetime import datetime, timezone

import click
from dotenv import load_dotenv

from ..shared_utilities import get_logger
from ..shared_utilities.cli_base import ClickCommand, configure_cli_logging
from ..shared_utilities.config import AppConfig, ConfigurationError, load_config
from ..shared_utilities.github_client import GitHubClient
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.telemetry import trace_function, trace_operation
from .scanner import ContributorScanner, contributors_path, years_to_update

# Load environment variables from .env file
load_dotenv()
logger = get_logger(__name__)


def run(
    config: AppConfig,
    github_client: GitHubClient | None = None,
    now: datetime | None = None,
) -> int:
    """
    Write contributors-<year>.json for each year that needs updating.

    Returns:
        Process exit code
    """
    try:
        config.require("github_token")
        now = now or datetime.now(timezone.utc)
        store = SnapshotStore(config.output_root)
        scanner = ContributorScanner(
            github_client or GitHubClient(config.github_token), config.github_org
        )

        repositories = scanner.list_repositories()
        if not repositories:
            logger.error(f"No repositories found for {config.github_org}")
            return 1

        for year in years_to_update(store, repositories, now):
            with trace_operation("contributors.scan_year", {"year": year}):
                roster = scanner.scan(repositories, year)
            store.save_json(contributors_path(year), {"year": year, **roster})
            logger.info(f"Saved contributors for {year}")

        return 0

    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Error collecting contributors: {e}")
        return 1


@click.command()
@ClickCommand.add_common_options()
@trace_function("contributors_main")
def main(output_dir: str, config_file: str, quiet: bool, verbose: bool) -> None:
    """
    Collect yearly contributor statistics.

    The first run backfills every year since the oldest repository was
    created; later runs only refresh the current year.
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
