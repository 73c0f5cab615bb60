"""
Discord REST client for guild, channel and message history lookups
"""

import time
from collections.abc import Callable, Iterator
from typing import Any

import requests

from ..shared_utilities.http_client import HttpClient, discord_headers
from ..shared_utilities.logging_config import get_logger

logger = get_logger(__name__)

DISCORD_API_URL = "https://discord.com/api/v10"
MESSAGE_PAGE_SIZE = 100
# Guild text and announcement channels
TEXT_CHANNEL_TYPES = (0, 5)
# Used when a 429 carries neither a body nor a Retry-After header
DEFAULT_RETRY_AFTER = 1.0


class DiscordClient:
    """Sequential Discord REST client using a bot token."""

    def __init__(
        self,
        token: str,
        http_client: HttpClient | None = None,
        page_delay: float = 0.5,
        max_retries: int = 5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the client.

        Args:
            token: Bot token
            http_client: Optional pre-built HTTP client
            page_delay: Seconds to pause between message history pages
            max_retries: Attempts per request while Discord answers 429
            sleep: Sleep function, injectable for tests
        """
        self.http_client = http_client or HttpClient(headers=discord_headers(token))
        self.page_delay = page_delay
        self.max_retries = max_retries
        self.sleep = sleep

    @staticmethod
    def _retry_after(response: requests.Response | None) -> float:
        """Seconds Discord asks us to wait, from the body or the header."""
        if response is None:
            return DEFAULT_RETRY_AFTER
        try:
            body = response.json()
        except ValueError:
            body = {}
        value = body.get("retry_after") if isinstance(body, dict) else None
        if value is None:
            value = response.headers.get("Retry-After")
        try:
            return max(0.0, float(value))
        except (TypeError, ValueError):
            return DEFAULT_RETRY_AFTER

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET a JSON resource, waiting out 429 responses.

        Raises:
            requests.HTTPError: For other error statuses, or once every
                attempt was rate limited
        """
        for attempt in range(1, self.max_retries + 1):
            try:
                return self.http_client.get_json(url, params=params)
            except requests.HTTPError as e:
                if getattr(e.response, "status_code", None) != 429:
                    raise
                if attempt == self.max_retries:
                    logger.error(f"Still rate limited on {url} after {attempt} attempts")
                    raise
                delay = self._retry_after(e.response)
                logger.warning(
                    f"Rate limited on {url}, retrying in {delay:.1f}s "
                    f"(attempt {attempt}/{self.max_retries})"
                )
                self.sleep(delay)

    def member_count(self, guild_id: str) -> int:
        guild = self._get_json(
            f"{DISCORD_API_URL}/guilds/{guild_id}", params={"with_counts": "true"}
        )
        return int(guild.get("approximate_member_count") or 0)

    def text_channels(self, guild_id: str) -> list[dict[str, Any]]:
        channels = self._get_json(f"{DISCORD_API_URL}/guilds/{guild_id}/channels")
        text_channels = [c for c in channels if c.get("type") in TEXT_CHANNEL_TYPES]
        logger.info(f"Found {len(text_channels)} text channels")
        return text_channels

    def iter_messages(self, channel_id: str) -> Iterator[dict[str, Any]]:
        """
        Yield a channel's messages newest first, 100 per request.

        Channels the bot cannot read end the iteration with a warning.
        """
        before = None
        while True:
            params: dict[str, Any] = {"limit": MESSAGE_PAGE_SIZE}
            if before:
                params["before"] = before

            try:
                messages = self._get_json(
                    f"{DISCORD_API_URL}/channels/{channel_id}/messages", params=params
                )
            except requests.HTTPError as e:
                status = getattr(e.response, "status_code", None)
                if status in (401, 403, 404):
                    logger.warning(f"Skipping unreadable channel {channel_id} ({status})")
                    return
                raise

            if not messages:
                return
            yield from messages

            before = messages[-1]["id"]
            if len(messages) < MESSAGE_PAGE_SIZE:
                return
            self.sleep(self.page_delay)
