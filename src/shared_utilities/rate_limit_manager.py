"""
Rate limit tracking for GitHub API requests.
Reads GitHub's X-RateLimit headers and suspends the caller until the window
resets once the remaining quota drops below a threshold.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

import requests

from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitStatus:
    """Current rate limit status from GitHub API."""

    limit: int  # Total requests allowed per window
    remaining: int  # Requests remaining in current window
    reset_time: int  # Unix timestamp when limit resets
    used: int  # Requests used in current window

    def seconds_until_reset(self, now: float) -> float:
        """Seconds from ``now`` until the window resets, never negative."""
        return max(0.0, self.reset_time - now)

    @property
    def usage_percentage(self) -> float:
        """Percentage of rate limit used (0.0 to 1.0)."""
        if self.limit == 0:
            return 0.0
        return (self.limit - self.remaining) / self.limit


class RateLimitManager:
    """
    Tracks GitHub rate limit headers and sleeps until reset when quota is low.

    The clock and sleep functions are injectable so callers and tests can
    control time.
    """

    def __init__(
        self,
        threshold: int = 10,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize rate limit manager.

        Args:
            threshold: Sleep until reset when remaining drops below this
            clock: Returns the current Unix time
            sleep: Suspends the caller for the given number of seconds
        """
        self.threshold = threshold
        self.clock = clock
        self.sleep = sleep
        self.last_status: RateLimitStatus | None = None

    def extract_rate_limit_status(
        self, response: requests.Response
    ) -> RateLimitStatus | None:
        """
        Extract rate limit information from GitHub API response headers.

        Args:
            response: requests.Response object from GitHub API

        Returns:
            RateLimitStatus object or None if headers not present
        """
        headers = {key.lower(): value for key, value in response.headers.items()}
        if "x-ratelimit-remaining" not in headers:
            return None

        try:
            remaining = int(headers["x-ratelimit-remaining"])
            # Without a limit header the remaining quota is the best known bound
            limit = int(headers.get("x-ratelimit-limit", remaining))
            reset_time = int(headers.get("x-ratelimit-reset", 0))
            used = int(headers.get("x-ratelimit-used", limit - remaining))
        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to parse rate limit headers: {e}")
            return None

        return RateLimitStatus(
            limit=limit, remaining=remaining, reset_time=reset_time, used=used
        )

    def record(self, response: requests.Response) -> RateLimitStatus | None:
        """Remember the rate limit status carried by a response."""
        status = self.extract_rate_limit_status(response)
        if status:
            self.last_status = status
            logger.debug(self.format_status_summary())
        return status

    def wait_if_needed(self) -> float:
        """
        Sleep until the window resets if the last known quota is below threshold.

        Returns:
            Seconds slept (0 when no wait was necessary)
        """
        status = self.last_status
        if status is None or status.remaining >= self.threshold:
            return 0.0

        delay = status.seconds_until_reset(self.clock())
        if delay > 0:
            logger.info(
                f"Rate limit low ({status.remaining} remaining), "
                f"waiting {delay:.0f}s for reset"
            )
            self.sleep(delay)
        return delay

    @staticmethod
    def retry_after(response: requests.Response) -> float | None:
        """Seconds announced by a Retry-After header, if it carries a number."""
        value = response.headers.get("Retry-After")
        if value is None:
            return None
        try:
            return max(0.0, float(value))
        except ValueError:
            logger.warning(f"Ignoring non-numeric Retry-After header: {value}")
            return None

    def is_rate_limited(self, response: requests.Response) -> bool:
        """
        Tell a rate limit apart from other refusals.

        GitHub answers 429 for secondary limits. A 403 is only a rate limit
        when the primary quota is exhausted or a Retry-After header is sent;
        any other 403 is a permission problem.
        """
        if response.status_code == 429:
            return True
        if response.status_code != 403:
            return False
        if "Retry-After" in response.headers:
            return True
        status = self.extract_rate_limit_status(response)
        return status is not None and status.remaining == 0

    def wait_for_reset(self, response: requests.Response) -> float:
        """
        Sleep until a rate-limited response allows the next attempt.

        A Retry-After header takes precedence over the primary reset time.

        Args:
            response: A 403 or 429 response from the API

        Returns:
            Seconds slept
        """
        status = self.record(response)
        delay = self.retry_after(response)
        if delay is None:
            if status is None:
                return 0.0
            delay = status.seconds_until_reset(self.clock())
        if delay > 0:
            logger.warning(f"Rate limit exceeded, waiting {delay:.0f}s for reset")
            self.sleep(delay)
        return delay

    def format_status_summary(self) -> str:
        """Get a formatted summary of current rate limit status."""
        if self.last_status is None:
            return "Rate limit status: Unknown"

        status = self.last_status
        return (
            f"Rate limit: {status.remaining}/{status.limit} remaining "
            f"({status.usage_percentage:.1%} used), "
            f"resets in {status.seconds_until_reset(self.clock()) / 60:.1f} minutes"
        )
