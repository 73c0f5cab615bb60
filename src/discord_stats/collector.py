"""
Monthly Discord activity: member count, message count and unique posters.
"""

from collections import defaultdict
from datetime import datetime, timezone

from ..shared_utilities.logging_config import get_logger
from ..shared_utilities.snapshot_merger import (
    MergeOutcome,
    merge_monotonic,
    previous_month_key,
)
from .discord_client import DiscordClient

logger = get_logger(__name__)

STATS_PATH = "discord-stats/stats.json"
DISCORD_METRICS = ("memberCount", "totalMessages", "uniquePosters")


def month_start(year: int, month: int) -> datetime:
    return datetime(year, month, 1, tzinfo=timezone.utc)


def previous_month_window(now: datetime) -> tuple[datetime, datetime]:
    """[start, end) of the calendar month before ``now``."""
    end = month_start(now.year, now.month)
    if now.month == 1:
        return month_start(now.year - 1, 12), end
    return month_start(now.year, now.month - 1), end


def message_time(message: dict) -> datetime:
    return datetime.fromisoformat(message["timestamp"].replace("Z", "+00:00"))


class DiscordStatsCollector:
    """Buckets guild messages by calendar month."""

    def __init__(self, client: DiscordClient, guild_id: str):
        self.client = client
        self.guild_id = guild_id

    def count_messages(
        self, start: datetime, end: datetime
    ) -> dict[str, dict[str, int]]:
        """
        Count messages and distinct authors per ``YYYY-MM`` in [start, end).

        History is read newest first, so a channel is abandoned at its first
        message older than ``start``.
        """
        totals: dict[str, int] = defaultdict(int)
        posters: dict[str, set] = defaultdict(set)

        for channel in self.client.text_channels(self.guild_id):
            for message in self.client.iter_messages(channel["id"]):
                created = message_time(message)
                if created < start:
                    break
                if created >= end:
                    continue
                key = created.strftime("%Y-%m")
                totals[key] += 1
                author = (message.get("author") or {}).get("id")
                if author:
                    posters[key].add(author)

        return {
            key: {"totalMessages": totals[key], "uniquePosters": len(posters[key])}
            for key in sorted(totals)
        }

    def collect(self, now: datetime, backfill_year: int | None = None) -> dict[str, dict]:
        """
        Monthly records for the previous month, or a whole backfill year.

        In backfill mode every month of ``backfill_year`` that ended before the
        current month gets a record, zero-filled when nothing was posted.
        """
        member_count = self.client.member_count(self.guild_id)

        if backfill_year is None:
            start, end = previous_month_window(now)
            keys = [start.strftime("%Y-%m")]
        else:
            start = month_start(backfill_year, 1)
            end = min(month_start(now.year, now.month), month_start(backfill_year + 1, 1))
            keys = [
                f"{backfill_year:04d}-{month:02d}"
                for month in range(1, 13)
                if month_start(backfill_year, month) < end
            ]
            logger.info(f"Backfilling {len(keys)} months of {backfill_year}")

        counts = self.count_messages(start, end)
        records = {}
        for key in keys:
            month = counts.get(key, {"totalMessages": 0, "uniquePosters": 0})
            records[key] = {"memberCount": member_count, **month}
            logger.info(
                f"{key}: {month['totalMessages']} messages, "
                f"{month['uniquePosters']} posters, {member_count} members"
            )
        return records


def merge_stats(stored: dict | None, records: dict[str, dict], now: datetime) -> MergeOutcome:
    """Merge monthly records; any month may move forward, none may regress."""
    return merge_monotonic(
        stored,
        records,
        DISCORD_METRICS,
        current_key=previous_month_key(now),
        freeze_past=False,
    )
