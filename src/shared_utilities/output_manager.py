"""
Output directory management for the mesh-gov-updates tree.

Each tool owns one directory below the output root, with rendered Markdown
pages in a ``markdown`` subdirectory.
"""

from pathlib import Path

from .logging_config import get_logger

logger = get_logger(__name__)

MARKDOWN_SUBDIR = "markdown"


class OutputManager:
    """Manages output directory structure for tools."""

    def __init__(self, base_output_dir: str | Path = "mesh-gov-updates"):
        """
        Initialize the output manager.

        Args:
            base_output_dir: Base directory for all outputs
        """
        self.base_dir = Path(base_output_dir)

    def get_output_path(
        self,
        tool_dir: str,
        filename: str,
        subdir: str | None = None,
        create_dirs: bool = True,
    ) -> Path:
        """
        Get the full output path for a file, creating directories if needed.

        Directory structure: {base}/{tool_dir}[/{subdir}]/{filename}

        Args:
            tool_dir: Tool directory (e.g., "drep-voting")
            filename: Output filename
            subdir: Optional nested directory (e.g., "yearly")
            create_dirs: Whether to create directories if they don't exist

        Returns:
            Full path to the output file
        """
        output_path = self.base_dir / tool_dir
        if subdir:
            output_path = output_path / subdir
        output_path = output_path / filename

        if create_dirs:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            logger.debug(f"Ensured output directory: {output_path.parent}")

        return output_path

    def json_path(self, tool_dir: str, filename: str, subdir: str | None = None) -> Path:
        return self.get_output_path(tool_dir, filename, subdir=subdir)

    def markdown_path(self, tool_dir: str, filename: str) -> Path:
        return self.get_output_path(tool_dir, filename, subdir=MARKDOWN_SUBDIR)
