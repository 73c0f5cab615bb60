"""
Mesh stats CLI - current usage snapshot and current.md
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
from .collector import MESH_STATS_PATH, MeshStatsCollector
from .output_formatter import MeshStatsFormatter

# Load environment variables from .env file
load_dotenv()
logger = get_logger(__name__)


def run(config: AppConfig, now: datetime | None = None) -> int:
    """
    Collect the current stats and write mesh_stats.json and current.md.

    Returns:
        Process exit code
    """
    try:
        config.require("github_token")
        now = now or datetime.now(timezone.utc)
        store = SnapshotStore(config.output_root)
        output_manager = OutputManager(config.output_root)

        collector = MeshStatsCollector(
            config, GitHubClient(config.github_token), NpmClient(), store, now=now
        )
        with trace_operation("mesh_stats.collect"):
            stats = collector.collect()

        store.save_json(MESH_STATS_PATH, stats)
        MeshStatsFormatter(generated_at=now).save(
            stats,
            output_manager.markdown_path("mesh-stats", "current.md"),
            OutputFormat.MARKDOWN,
        )

        logger.info("Mesh stats generated successfully")
        return 0

    except ConfigurationError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user")
        return 130
    except Exception as e:
        logger.error(f"Error generating mesh stats: {e}")
        return 1


@click.command()
@ClickCommand.add_common_options()
@trace_function("mesh_stats_main")
def main(output_dir: str, config_file: str, quiet: bool, verbose: bool) -> None:
    """Generate the current Mesh SDK usage statistics."""
    configure_cli_logging(verbose, quiet)
    try:
        config = load_config(config_file, output_root=output_dir)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)
    sys.exit(run(config))


if __name__ == "__main__":
    main()
