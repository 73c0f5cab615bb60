"""
Shared CLI utilities for consistent command-line interfaces across all tools.

Every tool is a Click command that accepts the same output, configuration and
verbosity options.
"""

import click

from .config import DEFAULT_CONFIG_FILE, DEFAULT_OUTPUT_ROOT
from .logging_config import configure_logging


class ClickCommand:
    """
    Base class for creating consistent Click commands.

    Provides helper methods to add common option sets to Click commands.
    """

    @staticmethod
    def add_common_options(exclude: list[str] | None = None):
        """Decorator that adds common options to a Click command."""
        exclude = exclude or []

        def decorator(func):
            # Add options in reverse order since decorators are applied bottom-up
            if "verbose" not in exclude:
                func = click.option(
                    "-v", "--verbose", is_flag=True, help="Enable verbose logging"
                )(func)

            if "quiet" not in exclude:
                func = click.option(
                    "-q", "--quiet", is_flag=True, help="Only log warnings and errors"
                )(func)

            if "config" not in exclude:
                func = click.option(
                    "-c",
                    "--config",
                    "config_file",
                    type=click.Path(dir_okay=False),
                    default=str(DEFAULT_CONFIG_FILE),
                    help="Path to config.json (drepId, organizationName)",
                    show_default=True,
                )(func)

            if "output_dir" not in exclude:
                func = click.option(
                    "-o",
                    "--output-dir",
                    type=click.Path(file_okay=False),
                    default=str(DEFAULT_OUTPUT_ROOT),
                    help="Root directory for snapshots and generated pages",
                    show_default=True,
                )(func)

            return func

        return decorator


def configure_cli_logging(verbose: bool = False, quiet: bool = False) -> None:
    """Apply the --verbose / --quiet flags to the logging configuration."""
    if verbose:
        configure_logging(level="DEBUG")
    elif quiet:
        configure_logging(level="WARNING")
    else:
        configure_logging()
