"""
Base output formatter for the JSON and Markdown reports.

Each tool subclasses BaseOutputFormatter and implements ``_format_markdown``;
JSON output is shared. Formatting is deterministic: identical input produces
byte-identical output.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from .logging_config import get_logger

logger = get_logger(__name__)


class OutputFormat:
    """Enumeration of supported output formats."""

    JSON = "json"
    MARKDOWN = "markdown"


class BaseOutputFormatter(ABC):
    """
    Abstract base class for all output formatters.

    Provides a consistent interface for rendering report data as JSON or
    Markdown and writing it to disk.
    """

    def __init__(self):
        """Initialize the formatter with format handlers."""
        self._format_handlers = {
            OutputFormat.JSON: self._format_json,
            OutputFormat.MARKDOWN: self._format_markdown,
        }

    def format(
        self, data: dict[str, Any], format_type: str = OutputFormat.MARKDOWN, **kwargs
    ) -> str:
        """
        Format data according to the specified format type.

        Args:
            data: Data to format
            format_type: Output format type
            **kwargs: Additional format-specific options

        Returns:
            Formatted string output
        """
        handler = self._format_handlers.get(format_type)
        if not handler:
            raise ValueError(f"Unsupported format type: {format_type}")

        return handler(data, **kwargs)

    def save(
        self,
        data: dict[str, Any],
        output_path: str | Path,
        format_type: str = OutputFormat.JSON,
        **kwargs,
    ) -> Path:
        """
        Save formatted data to a file.

        Args:
            data: Data to save
            output_path: Path to save the file
            format_type: Output format type
            **kwargs: Additional format-specific options

        Returns:
            Path of the written file
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        content = self.format(data, format_type, **kwargs)
        output_path.write_text(content, encoding="utf-8")
        logger.info(f"Saved {format_type} output to {output_path}")
        return output_path

    def _format_json(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as JSON, preserving key insertion order."""
        indent = kwargs.get("indent", 2)
        sort_keys = kwargs.get("sort_keys", False)
        return (
            json.dumps(
                data,
                indent=indent,
                sort_keys=sort_keys,
                ensure_ascii=False,
                default=str,
            )
            + "\n"
        )

    @abstractmethod
    def _format_markdown(self, data: dict[str, Any], **kwargs) -> str:
        """Format data as a Markdown page."""
        pass
