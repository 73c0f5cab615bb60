"""
Tests for Catalyst voting lookups.
"""

import json
from unittest.mock import Mock

import requests

from src.catalyst_proposals.voting import (
    CATALYST_URL,
    DEFAULT_BUILD_ID,
    CatalystVotingClient,
    voting_summary,
)

VOTING = {
    "yes": {"amount": 120000000},
    "no": {"amount": 3000000},
    "abstain": None,
    "votesCast": 321,
}


def next_data_page(voting):
    blob = json.dumps({"props": {"pageProps": {"voting": voting}}})
    return f'<html><script id="__NEXT_DATA__" type="application/json">{blob}</script></html>'


def test_voting_summary():
    assert voting_summary(VOTING) == {
        "yes": 120000000,
        "no": 3000000,
        "abstain": None,
        "votesCast": 321,
    }


class TestCatalystVotingClient:
    def setup_method(self):
        self.http_client = Mock()
        self.client = CatalystVotingClient(http_client=self.http_client)

    def test_build_id_scraped_and_cached(self):
        self.http_client.get_text_or_default.return_value = (
            '<a href="/_next/data/abc123/en/funds/10/osde.json">'
        )

        assert self.client.build_id("10", "osde") == "abc123"
        assert self.client.build_id("10", "osde") == "abc123"
        self.http_client.get_text_or_default.assert_called_once_with(
            f"{CATALYST_URL}/funds/10/osde"
        )

    def test_build_id_default(self):
        self.http_client.get_text_or_default.return_value = None
        assert self.client.build_id("10", "osde") == DEFAULT_BUILD_ID

    def test_project_found_in_challenge_data(self):
        self.http_client.get_text_or_default.return_value = None
        self.http_client.get_json.return_value = {
            "pageProps": {"data": {"projects": [{"_fundingId": 1000107, "voting": VOTING}]}}
        }

        assert self.client.project_voting("10", "osde", "1000107")["votesCast"] == 321

    def test_falls_back_to_project_page(self):
        """A failing challenge endpoint falls back to the project page."""
        self.http_client.get_json.side_effect = requests.HTTPError("404")
        self.http_client.get_text_or_default.side_effect = [
            None,
            next_data_page(VOTING),
        ]

        voting = self.client.project_voting("10", "osde", "1000107", "https://project.test")

        assert voting["yes"] == 120000000

    def test_no_fallback_url(self):
        self.http_client.get_text_or_default.return_value = None
        self.http_client.get_json.return_value = {"pageProps": {"data": {"projects": []}}}

        assert self.client.project_voting("10", "osde", "1000107") is None
