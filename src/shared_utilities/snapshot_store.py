"""
Persistence for keyed JSON snapshots and generated Markdown pages.

Snapshots are read once at the start of a run and rewritten in full once the
merged result is computed; nothing is appended or partially written.
"""

import json
from pathlib import Path
from typing import Any

from .logging_config import get_logger


class SnapshotStore:
    """Reads and writes snapshot files below a root directory."""

    def __init__(self, root: Path | str):
        """
        Initialize snapshot store.

        Args:
            root: Directory all relative snapshot paths resolve against
        """
        self.logger = get_logger(__name__)
        self.root = Path(root)

    def path(self, *parts: str) -> Path:
        """Absolute path of a snapshot below the root."""
        return self.root.joinpath(*parts)

    def exists(self, relative: str) -> bool:
        return self.path(relative).exists()

    def list_files(self, relative_dir: str, pattern: str = "*") -> list[Path]:
        """List files in a snapshot directory matching a glob pattern."""
        directory = self.path(relative_dir)
        if not directory.is_dir():
            return []
        return sorted(p for p in directory.glob(pattern) if p.is_file())

    def load_json(self, relative: str, default: Any = None) -> Any:
        """
        Load a JSON snapshot.

        Args:
            relative: Path relative to the root
            default: Returned when the file is missing or malformed

        Returns:
            Decoded snapshot or the default
        """
        snapshot_path = self.path(relative)
        if not snapshot_path.exists():
            self.logger.debug(f"No snapshot at {snapshot_path}")
            return default

        try:
            with open(snapshot_path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning(
                "Failed to load snapshot, using default",
                path=str(snapshot_path),
                error=str(e),
            )
            return default

        self.logger.debug("Snapshot loaded", path=str(snapshot_path))
        return data

    def save_json(self, relative: str, data: Any, indent: int = 2) -> Path:
        """
        Write a JSON snapshot in full, creating parent directories.

        Key order follows insertion order so identical input produces
        byte-identical output.

        Args:
            relative: Path relative to the root
            data: JSON-serializable snapshot
            indent: Indentation width

        Returns:
            Path of the written file
        """
        snapshot_path = self.path(relative)
        snapshot_path.parent.mkdir(parents=True, exist_ok=True)

        with open(snapshot_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
            f.write("\n")

        self.logger.info("Snapshot saved", path=str(snapshot_path))
        return snapshot_path

    def load_text(self, relative: str) -> str | None:
        """Load a text file, or None if it does not exist."""
        text_path = self.path(relative)
        if not text_path.exists():
            return None
        return text_path.read_text(encoding="utf-8")

    def save_text(self, relative: str, content: str) -> Path:
        """Write a text file in full, creating parent directories."""
        text_path = self.path(relative)
        text_path.parent.mkdir(parents=True, exist_ok=True)
        text_path.write_text(content, encoding="utf-8")
        self.logger.info("File written", path=str(text_path))
        return text_path
