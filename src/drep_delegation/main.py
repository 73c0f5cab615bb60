"""
DRep delegation CLI - delegator snapshot and epoch timeline
"""

import sys

import click
from dotenv import load_dotenv

from ..shared_utilities import get_logger
from ..shared_utilities.cli_base import ClickCommand, configure_cli_logging
from ..shared_utilities.config import AppConfig, ConfigurationError, load_config
from ..shared_utilities.koios_client import KoiosClient
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.telemetry import trace_function, trace_operation
from .tracker import DelegationDataUnavailable, DelegationTracker

# Load environment variables from .env file
load_dotenv()
logger = get_logger(__name__)


def run(config: AppConfig, koios_client: KoiosClient | None = None) -> int:
    """
    Update drep-delegation-info.json and delegation-timeline.json.

    Returns:
        Process exit code
    """
    try:
        config.require("drep_id", "koios_api_key")
        tracker = DelegationTracker(
            koios_client or KoiosClient(config.koios_api_key),
            SnapshotStore(config.output_root),
            config.drep_id,
        )
        with trace_operation("drep_delegation.update", {"drep_id": config.drep_id}):
            timeline = tracker.update()

        logger.info(f"Delegation timeline updated for epoch {timeline['currentEpoch']}")
        return 0

    except (ConfigurationError, DelegationDataUnavailable) as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Error updating delegation data: {e}")
        return 1


@click.command()
@ClickCommand.add_common_options()
@trace_function("drep_delegation_main")
def main(output_dir: str, config_file: str, quiet: bool, verbose: bool) -> None:
    """Record DRep delegators and per-epoch delegation changes."""
    configure_cli_logging(verbose, quiet)
    try:
        config = load_config(config_file, output_root=output_dir)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    sys.exit(run(config))


if __name__ == "__main__":
    main()
