"""
Contribution scanning across every repository of a GitHub organisation.
"""

import re
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from ..shared_utilities.github_client import GitHubClient
from ..shared_utilities.logging_config import get_logger
from ..shared_utilities.snapshot_merger import (
    ContributionEvent,
    build_contributor_roster,
)
from ..shared_utilities.snapshot_store import SnapshotStore

logger = get_logger(__name__)

CONTRIBUTIONS_DIR = "mesh-stats/contributions"
YEARLY_FILE_PATTERN = re.compile(r"contributors-(\d{4})\.json$")


def contributors_path(year: int) -> str:
    return f"{CONTRIBUTIONS_DIR}/contributors-{year}.json"


def _timestamp(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")


class ContributorScanner:
    """Turns commits and merged pull requests into contribution events."""

    def __init__(self, github_client: GitHubClient, org: str):
        self.github_client = github_client
        self.org = org

    def list_repositories(self) -> list[dict[str, Any]]:
        return self.github_client.list_org_repositories(self.org)

    def commit_events(
        self,
        repo_name: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> list[ContributionEvent]:
        events = []
        for commit in self.github_client.iter_commits(repo_name, since, until):
            # Commits without a linked GitHub account are not attributable
            author = commit.author
            if author is None or not author.login:
                continue
            events.append(
                ContributionEvent(
                    login=author.login,
                    avatar_url=author.avatar_url,
                    repository=repo_name.split("/")[-1],
                    kind="commit",
                    timestamp=_timestamp(commit.commit.author.date),
                )
            )
        return events

    def pull_request_events(
        self, repo_name: str, year: int | None = None
    ) -> list[ContributionEvent]:
        events = []
        for pull in self.github_client.iter_merged_pulls(repo_name, year):
            user = pull.user
            if user is None or not user.login:
                continue
            events.append(
                ContributionEvent(
                    login=user.login,
                    avatar_url=user.avatar_url,
                    repository=repo_name.split("/")[-1],
                    kind="pull_request",
                    timestamp=_timestamp(pull.merged_at),
                )
            )
        return events

    def scan(
        self, repositories: Iterable[dict[str, Any]], year: int | None = None
    ) -> dict[str, Any]:
        """
        Build a contributor roster over all repositories.

        Args:
            repositories: Repository records from the organisation listing
            year: Restrict to one calendar year, None for all time

        Returns:
            Contributor roster
        """
        since = until = None
        if year is not None:
            since = datetime(year, 1, 1, tzinfo=timezone.utc)
            until = datetime(year + 1, 1, 1, tzinfo=timezone.utc)

        events: list[ContributionEvent] = []
        for repo in repositories:
            full_name = repo["full_name"]
            logger.debug(f"Scanning {full_name}")
            events.extend(self.commit_events(full_name, since, until))
            events.extend(self.pull_request_events(full_name, year))

        roster = build_contributor_roster(events)
        logger.info(
            f"{roster['unique_count']} contributors, "
            f"{roster['total_contributions']} contributions"
            + (f" in {year}" if year is not None else "")
        )
        return roster


def existing_years(store: SnapshotStore) -> list[int]:
    """Years that already have a yearly contributors file."""
    years = []
    for path in store.list_files(CONTRIBUTIONS_DIR, "contributors-*.json"):
        match = YEARLY_FILE_PATTERN.search(path.name)
        if match:
            years.append(int(match.group(1)))
    return sorted(years)


def years_to_update(
    store: SnapshotStore, repositories: Iterable[dict[str, Any]], now: datetime
) -> list[int]:
    """
    Years whose contributors file should be (re)written.

    Once any yearly file exists only the current year changes; the first run
    backfills from the year the oldest repository was created.
    """
    if existing_years(store):
        return [now.year]

    created = [
        int(repo["created_at"][:4])
        for repo in repositories
        if repo.get("created_at")
    ]
    first = min(created, default=now.year)
    return list(range(first, now.year + 1))
