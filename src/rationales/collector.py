"""
Discovery of vote rationales that are missing from on-chain metadata.
"""

from typing import Any

from ..shared_utilities.logging_config import get_logger
from ..shared_utilities.snapshot_merger import merge_first_write_wins
from ..shared_utilities.snapshot_store import SnapshotStore
from .vote_context import VoteContextSource

logger = get_logger(__name__)


def proposal_titles(proposals: dict[str, dict]) -> dict[str, str]:
    """Title of every proposal from its anchor metadata."""
    return {
        proposal_id: ((proposal.get("meta_json") or {}).get("body") or {}).get("title")
        or "Unknown Proposal"
        for proposal_id, proposal in proposals.items()
    }


def discover_rationales(
    source: VoteContextSource, titles: dict[str, str], year: int
) -> dict[str, dict[str, str]]:
    """
    Match vote-context folders of a year to proposals by id suffix.

    Each proposal is matched at most once; the first folder yielding a
    comment wins.

    Returns:
        Mapping of proposal id to {"title", "rationale"}
    """
    discovered: dict[str, dict[str, str]] = {}

    for _, short_id, folder_name in source.folders(year):
        for proposal_id, title in titles.items():
            if proposal_id in discovered or not proposal_id.endswith(short_id):
                continue
            rationale = source.fetch_comment(year, folder_name)
            if rationale:
                discovered[proposal_id] = {"title": title, "rationale": rationale}
                break

    logger.info(f"Found {len(discovered)} rationales in vote-context/{year}")
    return discovered


class RationaleCache:
    """The rationale cache file; existing entries are never overwritten."""

    def __init__(self, store: SnapshotStore, filename: str):
        self.store = store
        self.filename = filename

    def load(self) -> dict[str, Any]:
        return self.store.load_json(self.filename, default={}) or {}

    def merge(self, discovered: dict[str, dict[str, str]]) -> list[str]:
        """
        Add discovered rationales for proposals not yet in the cache.

        The file is only rewritten when at least one entry was added.

        Returns:
            Proposal ids that were added
        """
        merged, added = merge_first_write_wins(self.load(), discovered)
        for proposal_id in added:
            logger.info(f"Added rationale for proposal {proposal_id}")

        if added:
            self.store.save_json(self.filename, merged, indent=4)
        else:
            logger.info("No new rationales to add")
        return added
