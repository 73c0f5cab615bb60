"""
Centralized logging configuration for the governance update tools.

Every scheduled job logs through loguru with a consistent console format and an
optional rotating file sink.
"""

import os
import sys
from pathlib import Path
from typing import Any

from loguru import logger

SERVICE_NAME = "mesh-gov-updates"


class LoggingManager:
    """Manages centralized logging configuration across the tools."""

    def __init__(self, service_name: str = SERVICE_NAME):
        """
        Initialize logging manager.

        Args:
            service_name: Name of the service for logging identification
        """
        self.service_name = service_name
        self._configured = False

    @property
    def configured(self) -> bool:
        return self._configured

    def configure_logging(
        self,
        level: str = "INFO",
        enable_file_logging: bool = False,
        log_file_path: Path | None = None,
        structured_format: bool = False,
    ) -> None:
        """
        Configure logging for the entire application.

        Calling this again replaces the existing sinks, so a later ``--verbose``
        flag can lower the level after import-time configuration.

        Args:
            level: Logging level (DEBUG, INFO, WARNING, ERROR)
            enable_file_logging: Whether to enable file logging
            log_file_path: Path for log file (auto-generated if None)
            structured_format: Whether to append bound extras to each line
        """
        logger.remove()

        logger.add(
            sys.stderr,
            format=self._get_console_format(structured_format),
            level=level,
            colorize=True,
            backtrace=True,
            diagnose=False,
        )

        if enable_file_logging:
            if log_file_path is None:
                log_file_path = Path.cwd() / "logs" / f"{self.service_name}.log"

            log_file_path.parent.mkdir(parents=True, exist_ok=True)

            logger.add(
                str(log_file_path),
                format=self._get_file_format(),
                level=level,
                rotation="10 MB",
                retention="30 days",
                compression="gz",
                backtrace=True,
                diagnose=False,
                serialize=structured_format,
            )

        logger.configure(
            extra={"component": self.service_name, "service_name": self.service_name}
        )

        self._configured = True
        logger.debug(
            "Logging configured",
            service=self.service_name,
            level=level,
            file_logging=enable_file_logging,
        )

    def _get_console_format(self, structured: bool) -> str:
        """Get console logging format."""
        base = (
            "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{extra[component]}</cyan> - "
            "<level>{message}</level>"
        )
        if structured:
            return base + " | {extra}"
        return base

    def _get_file_format(self) -> str:
        """Get file logging format."""
        return (
            "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
            "{name}:{function}:{line} | {message} | {extra}"
        )

    def get_logger(self, name: str) -> Any:
        """
        Get a logger instance with the given name.

        Args:
            name: Logger name (usually __name__)

        Returns:
            Logger bound to the component name
        """
        return logger.bind(component=name)


_logging_manager: LoggingManager | None = None


def get_logging_manager() -> LoggingManager:
    """Get or create the global logging manager instance."""
    global _logging_manager
    if _logging_manager is None:
        _logging_manager = LoggingManager()
    return _logging_manager


def configure_logging(
    level: str | None = None,
    structured: bool = False,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure application logging with environment-driven defaults.

    Args:
        level: Logging level, defaults to LOG_LEVEL or INFO
        structured: Append bound extras to console lines
        enable_file_logging: Enable file logging, defaults to ENABLE_FILE_LOGGING
    """
    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO").upper()

    if enable_file_logging is None:
        enable_file_logging = (
            os.getenv("ENABLE_FILE_LOGGING", "false").lower() == "true"
        )

    get_logging_manager().configure_logging(
        level=level,
        structured_format=structured,
        enable_file_logging=enable_file_logging,
    )


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the given component.

    Args:
        name: Component name (usually __name__)

    Returns:
        Configured logger instance
    """
    return get_logging_manager().get_logger(name)


# Bound records always carry a component so the console format can render it.
logger.configure(extra={"component": SERVICE_NAME})
