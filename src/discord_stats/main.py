"""
Discord stats CLI - monthly member and message counts
"""

import sys
from datetime import datetime, timezone

import click
from dotenv import load_dotenv

from ..shared_utilities import get_logger
from ..shared_utilities.cli_base import ClickCommand, configure_cli_logging
from ..shared_utilities.config import AppConfig, ConfigurationError, load_config
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.telemetry import trace_function, trace_operation
from .collector import STATS_PATH, DiscordStatsCollector, merge_stats
from .discord_client import DiscordClient

# Load environment variables from .env file
load_dotenv()
logger = get_logger(__name__)


def run(
    config: AppConfig,
    backfill_year: int | None = None,
    client: DiscordClient | None = None,
    now: datetime | None = None,
) -> int:
    """
    Merge the previous month (or a backfill year) into stats.json.

    Returns:
        Process exit code
    """
    try:
        config.require("discord_token", "guild_id")
        now = now or datetime.now(timezone.utc)
        store = SnapshotStore(config.output_root)
        collector = DiscordStatsCollector(
            client or DiscordClient(config.discord_token), config.guild_id
        )

        with trace_operation("discord_stats.collect", {"backfill": bool(backfill_year)}):
            records = collector.collect(now, backfill_year)

        outcome = merge_stats(store.load_json(STATS_PATH, default={}), records, now)
        store.save_json(STATS_PATH, outcome.snapshot)
        logger.info(
            f"Discord stats: {len(outcome.inserted)} months added, "
            f"{len(outcome.updated)} updated, {len(outcome.unchanged)} unchanged"
        )
        return 0

    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Error collecting Discord stats: {e}")
        return 1


@click.command()
@click.option(
    "--backfill-year",
    type=int,
    default=None,
    help="Count every month of this year up to the last full month",
)
@ClickCommand.add_common_options()
@trace_function("discord_stats_main")
def main(
    backfill_year: int | None,
    output_dir: str,
    config_file: str,
    quiet: bool,
    verbose: bool,
) -> None:
    """Record monthly Discord server activity."""
    configure_cli_logging(verbose, quiet)
    try:
        config = load_config(config_file, output_root=output_dir)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    sys.exit(run(config, backfill_year))


if __name__ == "__main__":
    main()
