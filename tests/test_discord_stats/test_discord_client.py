"""
Tests for the Discord REST client.
"""

from unittest.mock import Mock

import pytest
import requests

from src.discord_stats.discord_client import DISCORD_API_URL, DiscordClient


def page(start, size):
    return [{"id": str(i), "timestamp": "2025-02-10T00:00:00Z"} for i in range(start, start + size)]


@pytest.fixture
def http_client():
    return Mock()


@pytest.fixture
def client(http_client):
    return DiscordClient("bot-token", http_client=http_client, page_delay=0, sleep=Mock())


class TestDiscordClient:
    def test_member_count(self, client, http_client):
        http_client.get_json.return_value = {"approximate_member_count": 1500}

        assert client.member_count("123") == 1500
        http_client.get_json.assert_called_once_with(
            f"{DISCORD_API_URL}/guilds/123", params={"with_counts": "true"}
        )

    def test_text_channels(self, client, http_client):
        http_client.get_json.return_value = [
            {"id": "1", "type": 0},
            {"id": "2", "type": 2},
            {"id": "3", "type": 5},
        ]
        assert [c["id"] for c in client.text_channels("123")] == ["1", "3"]

    def test_iter_messages_pages_with_before_cursor(self, client, http_client):
        http_client.get_json.side_effect = [page(0, 100), page(100, 20)]

        messages = list(client.iter_messages("42"))

        assert len(messages) == 120
        second_params = http_client.get_json.call_args_list[1].kwargs["params"]
        assert second_params == {"limit": 100, "before": "99"}

    def test_iter_messages_skips_forbidden_channel(self, client, http_client, response_factory):
        error = requests.HTTPError("forbidden", response=response_factory(403))
        http_client.get_json.side_effect = error

        assert list(client.iter_messages("42")) == []

    def test_iter_messages_raises_server_errors(self, client, http_client, response_factory):
        error = requests.HTTPError("boom", response=response_factory(500))
        http_client.get_json.side_effect = error

        with pytest.raises(requests.HTTPError):
            list(client.iter_messages("42"))


class TestRateLimits:
    """Test waiting out Discord 429 responses."""

    def test_retries_page_after_429(self, client, http_client, response_factory):
        limited = response_factory(429, json_data={"retry_after": 1.5, "global": False})
        http_client.get_json.side_effect = [
            requests.HTTPError("rate limited", response=limited),
            page(0, 3),
        ]

        messages = list(client.iter_messages("42"))

        assert len(messages) == 3
        client.sleep.assert_called_once_with(1.5)
        first, second = http_client.get_json.call_args_list
        assert first == second

    def test_retry_after_header_fallback(self, client, http_client, response_factory):
        limited = response_factory(429, text="", headers={"Retry-After": "2"})
        http_client.get_json.side_effect = [
            requests.HTTPError("rate limited", response=limited),
            {"approximate_member_count": 10},
        ]

        assert client.member_count("123") == 10
        client.sleep.assert_called_once_with(2.0)

    def test_gives_up_after_max_retries(self, http_client, response_factory):
        limited = response_factory(429, json_data={"retry_after": 0.1})
        http_client.get_json.side_effect = requests.HTTPError("rate limited", response=limited)
        client = DiscordClient("bot-token", http_client=http_client, max_retries=3, sleep=Mock())

        with pytest.raises(requests.HTTPError):
            client.text_channels("123")

        assert http_client.get_json.call_count == 3
        assert client.sleep.call_count == 2
