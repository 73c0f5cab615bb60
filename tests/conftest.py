"""
Pytest configuration and shared fixtures.
"""

import json
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from src.shared_utilities.config import AppConfig
from src.shared_utilities.snapshot_store import SnapshotStore


def make_response(
    status_code: int = 200,
    json_data=None,
    text: str | None = None,
    headers: dict | None = None,
    url: str = "https://api.example.test/resource",
) -> requests.Response:
    """Build a real requests.Response without touching the network."""
    response = requests.Response()
    response.status_code = status_code
    response.url = url
    response.encoding = "utf-8"
    response.headers.update(headers or {})
    if json_data is not None:
        response._content = json.dumps(json_data).encode("utf-8")
    else:
        response._content = (text or "").encode("utf-8")
    return response


@pytest.fixture
def response_factory():
    """Factory for canned HTTP responses."""
    return make_response


@pytest.fixture
def fixed_now():
    """A run timestamp in the middle of March 2025."""
    return datetime(2025, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store(tmp_path):
    """Snapshot store rooted in a temporary output directory."""
    return SnapshotStore(tmp_path / "mesh-gov-updates")


@pytest.fixture
def app_config(tmp_path):
    """Fully populated configuration writing below tmp_path."""
    return AppConfig(
        output_root=tmp_path / "mesh-gov-updates",
        github_token="gh-token",
        koios_api_key="koios-key",
        discord_token="discord-token",
        guild_id="123",
        drep_id="drep1test",
        organization_name="MeshJS",
        rationales_file=tmp_path / "voting-history" / "rationales.json",
    )


@pytest.fixture
def mock_http_client():
    """HttpClient double with every helper mocked."""
    return Mock()
