"""
Tests for rationale discovery and the rationale cache.
"""

import json
from unittest.mock import Mock

import pytest

from src.rationales.collector import RationaleCache, discover_rationales, proposal_titles
from src.rationales.main import run
from src.rationales.vote_context import VoteContextSource
from src.shared_utilities.snapshot_store import SnapshotStore

VOTE_CONTEXT_DOC = '{"@context": {}, "comment": "We support this\nproposal", "hashAlgorithm": "blake2b-256"}'


@pytest.fixture
def github_client():
    client = Mock()
    client.list_directory.return_value = [
        {"name": "506_phgh", "path": "vote-context/2025/506_phgh", "type": "dir"},
        {"name": "507_zzzz", "path": "vote-context/2025/507_zzzz", "type": "dir"},
        {"name": "README.md", "path": "vote-context/2025/README.md", "type": "file"},
    ]
    client.fetch_raw.return_value = VOTE_CONTEXT_DOC
    return client


@pytest.fixture
def source(github_client):
    return VoteContextSource(github_client, "MeshJS/governance")


class TestVoteContextSource:
    def test_folders_parsed_and_cached(self, source, github_client):
        assert source.folders(2025) == [(506, "phgh", "506_phgh"), (507, "zzzz", "507_zzzz")]
        source.folders(2025)
        github_client.list_directory.assert_called_once_with(
            "MeshJS/governance", "vote-context/2025"
        )

    def test_fetch_comment_url(self, source, github_client):
        assert source.fetch_comment(2025, "506_phgh") == "We support this\nproposal"
        github_client.fetch_raw.assert_called_once_with(
            "https://raw.githubusercontent.com/MeshJS/governance/refs/heads/main/"
            "vote-context/2025/506_phgh/Vote_Context.jsonId"
        )

    def test_find_rationale_no_match(self, source):
        assert source.find_rationale("gov_action1aaaa", 2025) is None


class TestDiscovery:
    def test_proposal_titles(self):
        titles = proposal_titles(
            {
                "gov1phgh": {"meta_json": {"body": {"title": "Budget"}}},
                "gov1none": {"meta_json": None},
            }
        )
        assert titles == {"gov1phgh": "Budget", "gov1none": "Unknown Proposal"}

    def test_matches_by_short_id(self, source):
        discovered = discover_rationales(
            source, {"gov1phgh": "Budget", "gov1abcd": "Other"}, 2025
        )

        assert discovered == {
            "gov1phgh": {"title": "Budget", "rationale": "We support this\nproposal"}
        }

    def test_empty_comment_not_discovered(self, source, github_client):
        github_client.fetch_raw.return_value = '{"comment": ""}'
        assert discover_rationales(source, {"gov1phgh": "Budget"}, 2025) == {}


class TestRationaleCache:
    def test_existing_entries_are_kept(self, tmp_path):
        cache_file = tmp_path / "rationales.json"
        cache_file.write_text(
            json.dumps({"gov1phgh": {"title": "Budget", "rationale": "original"}})
        )
        cache = RationaleCache(SnapshotStore(tmp_path), "rationales.json")

        added = cache.merge(
            {
                "gov1phgh": {"title": "Budget", "rationale": "replacement"},
                "gov1zzzz": {"title": "New", "rationale": "new"},
            }
        )

        assert added == ["gov1zzzz"]
        saved = json.loads(cache_file.read_text())
        assert saved["gov1phgh"]["rationale"] == "original"
        assert saved["gov1zzzz"]["rationale"] == "new"

    def test_nothing_added_leaves_file_untouched(self, tmp_path):
        cache_file = tmp_path / "rationales.json"
        original = '{"gov1phgh": {"title": "Budget", "rationale": "original"}}'
        cache_file.write_text(original)
        cache = RationaleCache(SnapshotStore(tmp_path), "rationales.json")

        assert cache.merge({"gov1phgh": {"title": "Budget", "rationale": "x"}}) == []
        assert cache_file.read_text() == original


class TestRun:
    def test_adds_current_year_rationales(self, app_config, github_client, fixed_now):
        koios_client = Mock()
        koios_client.voter_proposal_list.return_value = {
            "gov1phgh": {"meta_json": {"body": {"title": "Budget"}}}
        }

        code = run(app_config, koios_client=koios_client, github_client=github_client, now=fixed_now)

        assert code == 0
        saved = json.loads(app_config.rationales_file.read_text())
        assert saved["gov1phgh"]["title"] == "Budget"

    def test_missing_koios_key(self, app_config):
        app_config.koios_api_key = None
        assert run(app_config, koios_client=Mock(), github_client=Mock()) == 1
