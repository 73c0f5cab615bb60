"""
Rate-limit-aware pagination for GitHub search and listing endpoints.
"""

from dataclasses import dataclass, field
from typing import Any

import requests

from .http_client import HttpClient
from .logging_config import get_logger
from .rate_limit_manager import RateLimitManager

logger = get_logger(__name__)


class RateLimitExceededError(requests.HTTPError):
    """Raised when a page is still rate limited after the retry budget."""

    pass


@dataclass
class PaginatedResult:
    """Concatenated items of every fetched page."""

    items: list[Any] = field(default_factory=list)
    total_count: int = 0
    pages: int = 0


class RateLimitedPaginator:
    """
    Fetches every page of a paginated endpoint, one request at a time.

    Pages are requested until one comes back shorter than ``per_page``. Before
    each request the rate limit manager may suspend the caller, and a rate
    limited page is retried after the reset time.
    """

    def __init__(
        self,
        http_client: HttpClient,
        rate_limit_manager: RateLimitManager | None = None,
        per_page: int = 100,
        max_retries: int = 3,
    ):
        """
        Initialize the paginator.

        Args:
            http_client: Client carrying the provider's auth headers
            rate_limit_manager: Tracks X-RateLimit headers between requests
            per_page: Page size, the API maximum by default
            max_retries: Attempts per page when rate limited
        """
        self.http_client = http_client
        self.rate_limit_manager = rate_limit_manager or RateLimitManager()
        self.per_page = per_page
        self.max_retries = max_retries

    def fetch_page(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        Fetch one page, retrying while the response is rate limited.

        Args:
            url: Endpoint URL
            params: Query parameters including paging

        Returns:
            Decoded JSON body

        Raises:
            RateLimitExceededError: If every attempt was rate limited
            requests.HTTPError: For any other error status, without retry
        """
        response = None
        for attempt in range(1, self.max_retries + 1):
            self.rate_limit_manager.wait_if_needed()
            response = self.http_client.request("GET", url, params=params)
            self.rate_limit_manager.record(response)

            if not self.rate_limit_manager.is_rate_limited(response):
                response.raise_for_status()
                return response.json()

            logger.warning(
                f"Rate limited on {url} (attempt {attempt}/{self.max_retries})"
            )
            if attempt < self.max_retries:
                self.rate_limit_manager.wait_for_reset(response)

        raise RateLimitExceededError(
            f"Rate limit still exceeded after {self.max_retries} attempts: {url}",
            response=response,
        )

    def paginate(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        items_key: str | None = "items",
        max_pages: int | None = None,
    ) -> PaginatedResult:
        """
        Retrieve the complete result set of a paginated endpoint.

        Args:
            url: Endpoint URL
            params: Query parameters (page and per_page are added)
            items_key: Key of the item list in each page, None for bare arrays
            max_pages: Optional safety cap on the number of pages

        Returns:
            PaginatedResult with every item and the reported total count
        """
        result = PaginatedResult()
        reported_total = None
        page = 1

        while max_pages is None or page <= max_pages:
            page_params = {**(params or {}), "per_page": self.per_page, "page": page}
            data = self.fetch_page(url, page_params)

            if items_key is None:
                items = data or []
            else:
                items = data.get(items_key) or []
                reported_total = data.get("total_count", reported_total)

            result.items.extend(items)
            result.pages = page
            logger.debug(f"Page {page} of {url}: {len(items)} items")

            if len(items) < self.per_page:
                break
            page += 1

        result.total_count = (
            reported_total if reported_total is not None else len(result.items)
        )
        return result

    def count(self, url: str, params: dict[str, Any] | None = None) -> int:
        """
        Return the provider's total_count without downloading every page.

        Args:
            url: Search endpoint URL
            params: Query parameters

        Returns:
            The reported total count (0 when absent)
        """
        data = self.fetch_page(url, {**(params or {}), "per_page": 1, "page": 1})
        return int(data.get("total_count", 0))
