"""
Common utilities shared across tools
"""

from .base_output_formatter import BaseOutputFormatter, OutputFormat
from .config import AppConfig, ConfigurationError, load_config
from .http_client import HttpClient
from .logging_config import configure_logging, get_logger, get_logging_manager
from .output_manager import OutputManager
from .paginator import PaginatedResult, RateLimitedPaginator, RateLimitExceededError
from .rate_limit_manager import RateLimitManager, RateLimitStatus
from .snapshot_store import SnapshotStore
from .telemetry import get_telemetry_manager, trace_function, trace_operation

__all__ = [
    "configure_logging",
    "get_logger",
    "get_logging_manager",
    "get_telemetry_manager",
    "trace_function",
    "trace_operation",
    "AppConfig",
    "ConfigurationError",
    "load_config",
    "HttpClient",
    "RateLimitManager",
    "RateLimitStatus",
    "RateLimitedPaginator",
    "RateLimitExceededError",
    "PaginatedResult",
    "SnapshotStore",
    "BaseOutputFormatter",
    "OutputFormat",
    "OutputManager",
]
