"""
Tests for monthly Discord activity collection.
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import pytest
import requests

from src.discord_stats.collector import (
    STATS_PATH,
    DiscordStatsCollector,
    merge_stats,
    previous_month_window,
)
from src.discord_stats.discord_client import DISCORD_API_URL, DiscordClient
from src.discord_stats.main import run


def message(timestamp, author):
    return {"id": timestamp, "timestamp": timestamp, "author": {"id": author}}


# Newest first, as returned by the message history endpoint
CHANNEL_MESSAGES = {
    "1": [
        message("2025-03-02T10:00:00.000000+00:00", "u1"),
        message("2025-02-20T10:00:00.000000+00:00", "u1"),
        message("2025-02-03T10:00:00.000000+00:00", "u2"),
        message("2025-01-31T23:59:00.000000+00:00", "u3"),
        message("2024-12-31T10:00:00.000000+00:00", "u3"),
    ],
    "2": [message("2025-02-14T10:00:00.000000+00:00", "u1")],
}


@pytest.fixture
def discord_client():
    client = Mock()
    client.member_count.return_value = 1500
    client.text_channels.return_value = [{"id": "1"}, {"id": "2"}]
    client.iter_messages.side_effect = lambda channel_id: iter(CHANNEL_MESSAGES[channel_id])
    return client


class TestPreviousMonthWindow:
    def test_mid_year(self, fixed_now):
        assert previous_month_window(fixed_now) == (
            datetime(2025, 2, 1, tzinfo=timezone.utc),
            datetime(2025, 3, 1, tzinfo=timezone.utc),
        )

    def test_january(self):
        start, end = previous_month_window(datetime(2025, 1, 10, tzinfo=timezone.utc))
        assert (start.year, start.month, end.year, end.month) == (2024, 12, 2025, 1)


class TestDiscordStatsCollector:
    def test_previous_month(self, discord_client, fixed_now):
        records = DiscordStatsCollector(discord_client, "123").collect(fixed_now)

        assert records == {
            "2025-02": {"memberCount": 1500, "totalMessages": 3, "uniquePosters": 2}
        }

    def test_backfill_zero_fills_and_stops_at_current_month(self, discord_client, fixed_now):
        records = DiscordStatsCollector(discord_client, "123").collect(
            fixed_now, backfill_year=2025
        )

        assert list(records) == ["2025-01", "2025-02"]
        assert records["2025-01"]["totalMessages"] == 1

    def test_backfill_past_year(self, discord_client, fixed_now):
        records = DiscordStatsCollector(discord_client, "123").collect(
            fixed_now, backfill_year=2024
        )

        assert len(records) == 12
        assert records["2024-12"]["totalMessages"] == 1
        assert records["2024-06"]["totalMessages"] == 0


class TestMergeStats:
    def test_no_regression(self, fixed_now):
        stored = {"2025-02": {"memberCount": 1600, "totalMessages": 10, "uniquePosters": 4}}
        records = {"2025-02": {"memberCount": 1500, "totalMessages": 3, "uniquePosters": 2}}

        outcome = merge_stats(stored, records, fixed_now)

        assert outcome.snapshot == stored
        assert outcome.unchanged == ["2025-02"]

    def test_older_month_moves_forward(self, fixed_now):
        """Backfills may raise months other than the previous one."""
        stored = {"2024-06": {"memberCount": 1000, "totalMessages": 0, "uniquePosters": 0}}
        records = {"2024-06": {"memberCount": 1000, "totalMessages": 12, "uniquePosters": 3}}

        outcome = merge_stats(stored, records, fixed_now)

        assert outcome.updated == ["2024-06"]
        assert outcome.snapshot["2024-06"]["totalMessages"] == 12


class TestRun:
    def test_writes_stats(self, app_config, discord_client, store, fixed_now):
        assert run(app_config, client=discord_client, now=fixed_now) == 0
        assert store.load_json(STATS_PATH)["2025-02"]["totalMessages"] == 3

    def test_missing_guild(self, app_config, discord_client):
        app_config.guild_id = None
        assert run(app_config, client=discord_client) == 1

    def test_rate_limited_page_still_writes(self, app_config, store, fixed_now, response_factory):
        limited = response_factory(429, json_data={"retry_after": 0.5})
        pending_limits = {"1": 1}

        def get_json(url, params=None):
            if url.endswith("/guilds/123"):
                return {"approximate_member_count": 1500}
            if url.endswith("/guilds/123/channels"):
                return [{"id": "1", "type": 0}, {"id": "2", "type": 0}]
            channel_id = url.split("/channels/")[1].split("/")[0]
            if pending_limits.get(channel_id):
                pending_limits[channel_id] -= 1
                raise requests.HTTPError("rate limited", response=limited)
            return CHANNEL_MESSAGES[channel_id]

        http_client = Mock()
        http_client.get_json.side_effect = get_json
        client = DiscordClient("bot-token", http_client=http_client, page_delay=0, sleep=Mock())

        assert run(app_config, client=client, now=fixed_now) == 0
        assert store.load_json(STATS_PATH)["2025-02"]["totalMessages"] == 3
        client.sleep.assert_any_call(0.5)
        assert http_client.get_json.call_args_list[2].args[0] == (
            f"{DISCORD_API_URL}/channels/1/messages"
        )
