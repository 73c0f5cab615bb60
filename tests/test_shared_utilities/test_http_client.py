"""
Tests for the HTTP client wrapper.
"""

from unittest.mock import Mock

import pytest
import requests
from requests.structures import CaseInsensitiveDict

from src.shared_utilities.http_client import (
    DEFAULT_TIMEOUT,
    USER_AGENT,
    HttpClient,
    discord_headers,
    github_headers,
    koios_headers,
    supabase_headers,
)


@pytest.fixture
def session():
    """Mock session with real header storage."""
    mock_session = Mock(spec=requests.Session)
    mock_session.headers = CaseInsensitiveDict()
    return mock_session


class TestHeaders:
    def test_github_headers_with_token(self):
        headers = github_headers("abc")
        assert headers["Authorization"] == "token abc"
        assert headers["Accept"] == "application/vnd.github.v3+json"

    def test_github_headers_without_token(self):
        assert "Authorization" not in github_headers(None)

    def test_koios_headers(self):
        assert koios_headers("k")["Authorization"] == "Bearer k"

    def test_supabase_headers(self):
        headers = supabase_headers("anon")
        assert headers["apikey"] == "anon"
        assert headers["Content-Profile"] == "public"

    def test_discord_headers(self):
        assert discord_headers("t") == {"Authorization": "Bot t"}


class TestHttpClient:
    """Test request helpers and default-on-failure variants."""

    def test_session_headers(self, session):
        HttpClient(headers={"X-Test": "1"}, session=session)
        assert session.headers["User-Agent"] == USER_AGENT
        assert session.headers["X-Test"] == "1"

    def test_request_uses_timeout(self, session, response_factory):
        session.request.return_value = response_factory(json_data={"ok": True})
        client = HttpClient(session=session)

        assert client.get_json("https://x.test", params={"a": 1}) == {"ok": True}
        session.request.assert_called_once_with(
            "GET",
            "https://x.test",
            params={"a": 1},
            json=None,
            headers=None,
            timeout=DEFAULT_TIMEOUT,
        )

    def test_get_raises_on_error_status(self, session, response_factory):
        session.request.return_value = response_factory(500)
        client = HttpClient(session=session)

        with pytest.raises(requests.HTTPError):
            client.get("https://x.test")

    def test_get_json_or_default_on_http_error(self, session, response_factory):
        session.request.return_value = response_factory(404)
        client = HttpClient(session=session)

        assert client.get_json_or_default("https://x.test", default=[]) == []

    def test_get_json_or_default_on_invalid_json(self, session, response_factory):
        session.request.return_value = response_factory(text="<html>")
        client = HttpClient(session=session)

        assert client.get_json_or_default("https://x.test", default={}) == {}

    def test_get_text_or_default_on_connection_error(self, session):
        session.request.side_effect = requests.ConnectionError("down")
        client = HttpClient(session=session)

        assert client.get_text_or_default("https://x.test") is None

    def test_post_json_or_default(self, session, response_factory):
        session.request.return_value = response_factory(json_data=[{"amount": "5"}])
        client = HttpClient(session=session)

        result = client.post_json_or_default("https://x.test", default=None, json={"a": 1})

        assert result == [{"amount": "5"}]
        assert session.request.call_args.args[0] == "POST"
        assert session.request.call_args.kwargs["json"] == {"a": 1}
