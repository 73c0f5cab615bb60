"""
DRep voting CLI - yearly vote records, pages and the index's annual records
"""

import sys

import click
from dotenv import load_dotenv

from ..rationales.vote_context import VoteContextSource
from ..shared_utilities import get_logger
from ..shared_utilities.base_output_formatter import OutputFormat
from ..shared_utilities.cli_base import ClickCommand, configure_cli_logging
from ..shared_utilities.config import AppConfig, ConfigurationError, load_config
from ..shared_utilities.github_client import GitHubClient
from ..shared_utilities.koios_client import KoiosClient
from ..shared_utilities.output_manager import OutputManager
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.telemetry import trace_function, trace_operation
from .output_formatter import VotingHistoryFormatter, update_annual_records
from .votes import VoteProcessor, VotesUnavailable

# Load environment variables from .env file
load_dotenv()
logger = get_logger(__name__)

TOOL_DIR = "drep-voting"
INDEX_PAGE = f"{TOOL_DIR}/markdown/index.md"


def refresh_index(store: SnapshotStore) -> bool:
    """Rewrite the Annual Records list of the index page if it exists."""
    index = store.load_text(INDEX_PAGE)
    if index is None:
        logger.warning(f"No index page at {store.path(INDEX_PAGE)}, annual records not updated")
        return False

    pages = [p.name for p in store.list_files(f"{TOOL_DIR}/markdown", "*.md")]
    store.save_text(INDEX_PAGE, update_annual_records(index, pages))
    logger.info("Updated Annual Records section in index page")
    return True


def run(
    config: AppConfig,
    koios_client: KoiosClient | None = None,
    github_client: GitHubClient | None = None,
) -> int:
    """
    Write <year>_voting.json and <year>.md for every year with votes.

    Returns:
        Process exit code
    """
    try:
        config.require("drep_id", "organization_name", "koios_api_key")
        store = SnapshotStore(config.output_root)
        output_manager = OutputManager(config.output_root)
        rationale_cache = SnapshotStore(config.rationales_file.parent).load_json(
            config.rationales_file.name, default={}
        )

        processor = VoteProcessor(
            koios_client or KoiosClient(config.koios_api_key),
            VoteContextSource(
                github_client or GitHubClient(config.github_token),
                config.governance_repo,
            ),
            rationale_cache,
        )
        with trace_operation("drep_voting.process_votes", {"drep_id": config.drep_id}):
            votes_by_year = processor.votes_by_year(config.drep_id)

        formatter = VotingHistoryFormatter(config.organization_name)
        for year, votes in sorted(votes_by_year.items()):
            formatter.save(
                votes, output_manager.json_path(TOOL_DIR, f"{year}_voting.json")
            )
            formatter.save(
                {"year": year, "votes": votes},
                output_manager.markdown_path(TOOL_DIR, f"{year}.md"),
                OutputFormat.MARKDOWN,
            )

        refresh_index(store)
        logger.info("All votes processed and organized by year")
        return 0

    except (ConfigurationError, VotesUnavailable) as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Error processing DRep votes: {e}")
        return 1


@click.command()
@ClickCommand.add_common_options()
@trace_function("drep_voting_main")
def main(output_dir: str, config_file: str, quiet: bool, verbose: bool) -> None:
    """Generate the DRep voting history from on-chain votes."""
    configure_cli_logging(verbose, quiet)
    try:
        config = load_config(config_file, output_root=output_dir)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    sys.exit(run(config))


if __name__ == "__main__":
    main()
