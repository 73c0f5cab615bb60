"""
GitHub API client for code search and organisation traversal
"""

from collections.abc import Iterator
from datetime import datetime
from typing import Any

import requests
from github import Github, GithubException
from github.Commit import Commit
from github.PullRequest import PullRequest

from .http_client import HttpClient, github_headers
from .logging_config import get_logger
from .paginator import RateLimitedPaginator
from .rate_limit_manager import RateLimitManager

logger = get_logger(__name__)

GITHUB_API_URL = "https://api.github.com"
CODE_SEARCH_URL = f"{GITHUB_API_URL}/search/code"


class GitHubClient:
    """Client for interacting with GitHub API."""

    def __init__(
        self,
        token: str | None = None,
        paginator: RateLimitedPaginator | None = None,
    ):
        """
        Initialize GitHub client with optional token.

        Args:
            token: Personal access token; unauthenticated requests are heavily
                rate limited and cannot use code search
            paginator: Paginator used for search endpoints
        """
        self.token = token
        if token:
            logger.debug("Using authenticated GitHub client")
            self.github = Github(token)
        else:
            logger.warning("Using unauthenticated GitHub client (rate limited)")
            self.github = Github()

        self.http_client = HttpClient(headers=github_headers(token))
        self.paginator = paginator or RateLimitedPaginator(
            self.http_client, RateLimitManager()
        )

    def search_code_count(self, query: str) -> int:
        """
        Return the number of code search hits for a query.

        Args:
            query: GitHub code search query

        Returns:
            The reported total_count
        """
        total = self.paginator.count(CODE_SEARCH_URL, {"q": query})
        logger.info(f"Code search '{query}': {total} results")
        return total

    def list_org_repositories(self, org: str) -> list[dict[str, Any]]:
        """
        List every repository of an organisation.

        Args:
            org: Organisation login

        Returns:
            Repository records as returned by the REST API (empty on failure)
        """
        url = f"{GITHUB_API_URL}/orgs/{org}/repos"
        try:
            result = self.paginator.paginate(url, {"type": "all"}, items_key=None)
        except requests.RequestException as e:
            logger.error(f"Failed to list repositories for {org}: {e}")
            return []

        logger.info(f"Found {len(result.items)} repositories in the {org} organization")
        return result.items

    def iter_commits(
        self,
        repo_name: str,
        since: datetime | None = None,
        until: datetime | None = None,
    ) -> Iterator[Commit]:
        """
        Yield commits, optionally in a time window, skipping unreadable repositories.

        Args:
            repo_name: Repository name in format "owner/repo"
            since: Window start (inclusive), None for the first commit
            until: Window end, None for now
        """
        window = {}
        if since is not None:
            window["since"] = since
        if until is not None:
            window["until"] = until

        repo = self.github.get_repo(repo_name, lazy=True)
        try:
            yield from repo.get_commits(**window)
        except GithubException as e:
            self._handle_github_exception(e, repo_name, "commits")

    def iter_merged_pulls(
        self, repo_name: str, year: int | None = None
    ) -> Iterator[PullRequest]:
        """
        Yield merged pull requests of a repository.

        Args:
            repo_name: Repository name in format "owner/repo"
            year: Only pull requests merged in this calendar year, None for all
        """
        repo = self.github.get_repo(repo_name, lazy=True)
        try:
            for pull in repo.get_pulls(state="closed"):
                merged_at = pull.merged_at
                if merged_at is None:
                    continue
                if year is None or merged_at.year == year:
                    yield pull
        except GithubException as e:
            self._handle_github_exception(e, repo_name, "pull requests")

    def list_directory(self, repo_name: str, path: str) -> list[dict[str, str]]:
        """
        List the entries of a repository directory.

        Args:
            repo_name: Repository name in format "owner/repo"
            path: Directory path within the repository

        Returns:
            List of {"name", "path", "type"} entries (empty if the path is missing)
        """
        try:
            contents = self.github.get_repo(repo_name).get_contents(path)
        except GithubException as e:
            self._handle_github_exception(e, repo_name, path)
            return []

        if not isinstance(contents, list):
            contents = [contents]

        return [
            {"name": item.name, "path": item.path, "type": item.type}
            for item in contents
        ]

    def fetch_raw(self, url: str) -> str | None:
        """Fetch a raw file, returning None when it cannot be retrieved."""
        return self.http_client.get_text_or_default(url)

    def _handle_github_exception(
        self, e: GithubException, repo_name: str, what: str
    ) -> None:
        """Log a per-repository failure so the scan can continue."""
        if e.status == 404:
            logger.warning(
                f"Repository {repo_name} might be private or not exist. Skipping {what}."
            )
        elif e.status == 403:
            logger.warning(
                f"API rate limit exceeded or insufficient permissions for "
                f"{repo_name}. Skipping {what}."
            )
        else:
            logger.error(f"Error fetching {what} for {repo_name}: {e}")
