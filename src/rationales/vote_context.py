"""
Vote context files published in the governance repository.

Each vote gets a ``vote-context/<year>/<epoch>_<shortId>/Vote_Context.jsonId``
document whose ``comment`` field holds the rationale; ``shortId`` is the last
four characters of the governance action id.
"""

from ..shared_utilities.github_client import GitHubClient
from ..shared_utilities.logging_config import get_logger
from ..shared_utilities.text_extraction import (
    extract_vote_context_comment,
    parse_vote_context_folder,
)

logger = get_logger(__name__)

RAW_URL_TEMPLATE = "https://raw.githubusercontent.com/{repo}/refs/heads/main/vote-context"
VOTE_CONTEXT_FILE = "Vote_Context.jsonId"


class VoteContextSource:
    """Looks up rationales in the governance repository's vote-context tree."""

    def __init__(self, github_client: GitHubClient, governance_repo: str):
        self.github_client = github_client
        self.governance_repo = governance_repo
        self.base_url = RAW_URL_TEMPLATE.format(repo=governance_repo)
        self._folders: dict[int, list[tuple[int, str, str]]] = {}

    def folders(self, year: int) -> list[tuple[int, str, str]]:
        """
        Vote-context folders of a year as (epoch, short id, folder name).

        Listings are cached per year for the lifetime of the source.
        """
        if year not in self._folders:
            entries = self.github_client.list_directory(
                self.governance_repo, f"vote-context/{year}"
            )
            folders = []
            for entry in entries:
                if entry["type"] != "dir":
                    continue
                parsed = parse_vote_context_folder(entry["name"])
                if parsed:
                    folders.append((parsed[0], parsed[1], entry["name"]))
            logger.debug(f"{len(folders)} vote-context folders for {year}")
            self._folders[year] = folders
        return self._folders[year]

    def fetch_comment(self, year: int, folder_name: str) -> str | None:
        raw = self.github_client.fetch_raw(
            f"{self.base_url}/{year}/{folder_name}/{VOTE_CONTEXT_FILE}"
        )
        if raw is None:
            return None
        return extract_vote_context_comment(raw)

    def find_rationale(self, proposal_id: str, year: int) -> str | None:
        """First non-empty comment of a folder whose short id ends the proposal id."""
        for _, short_id, folder_name in self.folders(year):
            if not proposal_id.endswith(short_id):
                continue
            comment = self.fetch_comment(year, folder_name)
            if comment:
                return comment
        return None
