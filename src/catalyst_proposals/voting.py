"""
Catalyst voting results from projectcatalyst.io Next.js data endpoints
"""

from typing import Any

import requests

from ..shared_utilities.http_client import HttpClient
from ..shared_utilities.logging_config import get_logger
from ..shared_utilities.text_extraction import extract_next_build_id, extract_next_data

logger = get_logger(__name__)

CATALYST_URL = "https://projectcatalyst.io"
DEFAULT_BUILD_ID = "pJZYf0Bzp4nPDQmwjxLiJ"


def _amount(option: dict | None) -> Any:
    return option.get("amount") if option else None


def voting_summary(voting: dict[str, Any]) -> dict[str, Any]:
    """Reduce a project's voting block to yes/no/abstain amounts and votes cast."""
    return {
        "yes": _amount(voting.get("yes")),
        "no": _amount(voting.get("no")),
        "abstain": _amount(voting.get("abstain")),
        "votesCast": voting.get("votesCast"),
    }


class CatalystVotingClient:
    """Looks up a funded project's voting results on the Catalyst site."""

    def __init__(self, http_client: HttpClient | None = None):
        self.http_client = http_client or HttpClient()
        self._build_ids: dict[tuple[str, str], str] = {}

    def build_id(self, fund_id: str, challenge_slug: str) -> str:
        """
        Next.js build id scraped from the challenge page.

        Falls back to a known build id when the page cannot be read.
        """
        key = (fund_id, challenge_slug)
        if key not in self._build_ids:
            html = self.http_client.get_text_or_default(
                f"{CATALYST_URL}/funds/{fund_id}/{challenge_slug}"
            )
            build_id = extract_next_build_id(html) if html else None
            if not build_id:
                logger.warning(f"Could not read build id, using default {DEFAULT_BUILD_ID}")
                build_id = DEFAULT_BUILD_ID
            self._build_ids[key] = build_id
        return self._build_ids[key]

    def challenge_data(self, fund_id: str, challenge_slug: str) -> dict[str, Any]:
        build_id = self.build_id(fund_id, challenge_slug)
        return self.http_client.get_json(
            f"{CATALYST_URL}/_next/data/{build_id}/en/funds/{fund_id}/{challenge_slug}.json",
            params={"fundId": fund_id, "challengeSlug": challenge_slug},
        )

    def project_page_voting(self, project_url: str) -> dict[str, Any] | None:
        """Voting block embedded in the project page's ``__NEXT_DATA__``."""
        html = self.http_client.get_text_or_default(project_url)
        data = extract_next_data(html) if html else None
        voting = (((data or {}).get("props") or {}).get("pageProps") or {}).get("voting")
        return voting_summary(voting) if isinstance(voting, dict) else None

    def project_voting(
        self,
        fund_id: str,
        challenge_slug: str,
        funding_id: str,
        project_url: str | None = None,
    ) -> dict[str, Any] | None:
        """
        Voting results of one project.

        The challenge data endpoint is tried first; the project page is read
        when the endpoint fails or does not list the project.

        Returns:
            {"yes", "no", "abstain", "votesCast"} or None
        """
        try:
            data = self.challenge_data(fund_id, challenge_slug)
            projects = ((data.get("pageProps") or {}).get("data") or {}).get("projects") or []
            for project in projects:
                if str(project.get("_fundingId")) == str(funding_id):
                    return voting_summary(project.get("voting") or {})
            logger.warning(f"Project with fundingId={funding_id} not found in {challenge_slug}")
        except (requests.RequestException, ValueError) as e:
            logger.error(f"Error fetching voting for project {funding_id}: {e}")

        if project_url:
            return self.project_page_voting(project_url)
        return None
