"""
Rationales CLI - fill the rationale cache from governance vote-context files
"""

import sys
from datetime import datetime, timezone

import click
from dotenv import load_dotenv

from ..shared_utilities import get_logger
from ..shared_utilities.cli_base import ClickCommand, configure_cli_logging
from ..shared_utilities.config import AppConfig, ConfigurationError, load_config
from ..shared_utilities.github_client import GitHubClient
from ..shared_utilities.koios_client import KoiosClient
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.telemetry import trace_function, trace_operation
from .collector import RationaleCache, discover_rationales, proposal_titles
from .vote_context import VoteContextSource

# Load environment variables from .env file
load_dotenv()
logger = get_logger(__name__)


def run(
    config: AppConfig,
    koios_client: KoiosClient | None = None,
    github_client: GitHubClient | None = None,
    now: datetime | None = None,
) -> int:
    """
    Add newly published rationales of the current year to the cache.

    Returns:
        Process exit code
    """
    try:
        config.require("drep_id", "koios_api_key")
        year = (now or datetime.now(timezone.utc)).year

        koios_client = koios_client or KoiosClient(config.koios_api_key)
        source = VoteContextSource(
            github_client or GitHubClient(config.github_token), config.governance_repo
        )
        cache = RationaleCache(
            SnapshotStore(config.rationales_file.parent), config.rationales_file.name
        )

        with trace_operation("rationales.discover", {"year": year}):
            titles = proposal_titles(koios_client.voter_proposal_list(config.drep_id))
            discovered = discover_rationales(source, titles, year)

        added = cache.merge(discovered)
        logger.info(f"{len(added)} rationales added to {config.rationales_file}")
        return 0

    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Error updating rationales: {e}")
        return 1


@click.command()
@ClickCommand.add_common_options()
@trace_function("rationales_main")
def main(output_dir: str, config_file: str, quiet: bool, verbose: bool) -> None:
    """
    Fetch vote rationales missing from on-chain metadata.

    Existing cache entries are never modified.
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
