"""
Catalyst proposals CLI - project progress data, overview and fund pages
"""

import sys
from collections import defaultdict
from datetime import datetime, timezone

import click
from dotenv import load_dotenv

from ..shared_utilities import get_logger
from ..shared_utilities.base_output_formatter import OutputFormat
from ..shared_utilities.cli_base import ClickCommand, configure_cli_logging
from ..shared_utilities.config import AppConfig, ConfigurationError, load_config
from ..shared_utilities.output_manager import OutputManager
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.telemetry import trace_function, trace_operation
from .catalog import load_catalog
from .collector import CATALYST_DATA_PATH, CatalystCollector, fund_number
from .output_formatter import (
    OVERVIEW_PAGE,
    CatalystOverviewFormatter,
    FundPageFormatter,
    fund_page_name,
)
from .supabase_client import SupabaseClient
from .voting import CatalystVotingClient

# Load environment variables from .env file
load_dotenv()
logger = get_logger(__name__)

TOOL_DIR = "catalyst-proposals"


def run(
    config: AppConfig,
    voting_client: CatalystVotingClient | None = None,
    supabase_client: SupabaseClient | None = None,
    now: datetime | None = None,
) -> int:
    """
    Write catalyst-data.json, the overview page and every fund page.

    Returns:
        Process exit code
    """
    try:
        now = now or datetime.now(timezone.utc)
        store = SnapshotStore(config.output_root)
        output_manager = OutputManager(config.output_root)
        catalog = load_catalog(config.catalyst_catalog_path)

        project_ids = config.project_ids or list(catalog)
        if not project_ids:
            raise ConfigurationError(
                "No project ids: set README_PROJECT_IDS or provide a project catalogue"
            )

        if supabase_client is None and not config.use_mock_catalyst_data:
            supabase_client = SupabaseClient(config.supabase_url, config.supabase_key)
        collector = CatalystCollector(
            catalog, voting_client or CatalystVotingClient(), supabase_client
        )
        logger.info(f"Using mock data: {collector.use_mock_data}")

        with trace_operation("catalyst.collect", {"projects": len(project_ids)}):
            projects = collector.collect(project_ids)

        store.save_json(
            CATALYST_DATA_PATH,
            {
                "timestamp": now.isoformat(),
                "useMockData": collector.use_mock_data,
                "projects": projects,
            },
        )

        overview_path = output_manager.markdown_path(TOOL_DIR, OVERVIEW_PAGE)
        CatalystOverviewFormatter(
            store.load_text(f"{TOOL_DIR}/markdown/{OVERVIEW_PAGE}"),
            collector.use_mock_data,
            now,
        ).save({"projects": projects}, overview_path, OutputFormat.MARKDOWN)

        by_fund: dict[str, list] = defaultdict(list)
        for project in projects:
            by_fund[fund_number(project["projectDetails"]["project_id"])].append(project)

        for fund, fund_projects in sorted(by_fund.items()):
            page = fund_page_name(fund)
            FundPageFormatter(
                config.milestones_base_url,
                store.load_text(f"{TOOL_DIR}/markdown/{page}"),
            ).save(
                {"fund": fund, "projects": fund_projects},
                output_manager.markdown_path(TOOL_DIR, page),
                OutputFormat.MARKDOWN,
            )

        logger.info("Catalyst data has been processed and saved")
        return 0

    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Error processing Catalyst data: {e}")
        return 1


@click.command()
@ClickCommand.add_common_options()
@trace_function("catalyst_proposals_main")
def main(output_dir: str, config_file: str, quiet: bool, verbose: bool) -> None:
    """
    Update the Catalyst proposal progress pages.

    Without Supabase credentials the project catalogue provides all data.
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
