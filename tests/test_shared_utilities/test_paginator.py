"""
Tests for the rate-limit-aware paginator.
"""

from unittest.mock import Mock

import pytest
import requests

from src.shared_utilities.paginator import RateLimitedPaginator, RateLimitExceededError
from src.shared_utilities.rate_limit_manager import RateLimitManager


def search_page(count, total=237):
    return {"total_count": total, "items": [{"id": i} for i in range(count)]}


@pytest.fixture
def rate_limit_manager():
    """Rate limit manager with a frozen clock and a recording sleep."""
    return RateLimitManager(clock=lambda: 1000.0, sleep=Mock())


class TestPaginate:
    """Test complete result retrieval."""

    def test_stops_after_short_page(self, response_factory, rate_limit_manager):
        """Pages of 100, 100 and 37 items yield 237 items in three calls."""
        http_client = Mock()
        http_client.request.side_effect = [
            response_factory(json_data=search_page(100)),
            response_factory(json_data=search_page(100)),
            response_factory(json_data=search_page(37)),
        ]
        paginator = RateLimitedPaginator(http_client, rate_limit_manager)

        result = paginator.paginate("https://api.github.com/search/code", {"q": "x"})

        assert len(result.items) == 237
        assert result.total_count == 237
        assert result.pages == 3
        assert http_client.request.call_count == 3
        last_params = http_client.request.call_args.kwargs["params"]
        assert last_params == {"q": "x", "per_page": 100, "page": 3}

    def test_bare_array_pages(self, response_factory, rate_limit_manager):
        http_client = Mock()
        http_client.request.side_effect = [
            response_factory(json_data=[{"name": "a"}, {"name": "b"}]),
        ]
        paginator = RateLimitedPaginator(http_client, rate_limit_manager, per_page=5)

        result = paginator.paginate("https://api.github.com/orgs/x/repos", items_key=None)

        assert [r["name"] for r in result.items] == ["a", "b"]
        assert result.total_count == 2

    def test_max_pages_cap(self, response_factory, rate_limit_manager):
        http_client = Mock()
        http_client.request.return_value = response_factory(json_data=search_page(2))
        paginator = RateLimitedPaginator(http_client, rate_limit_manager, per_page=2)

        result = paginator.paginate("https://api.github.com/search/code", max_pages=2)

        assert http_client.request.call_count == 2
        assert len(result.items) == 4

    def test_count_requests_single_item(self, response_factory, rate_limit_manager):
        http_client = Mock()
        http_client.request.return_value = response_factory(json_data=search_page(1, 4321))
        paginator = RateLimitedPaginator(http_client, rate_limit_manager)

        assert paginator.count("https://api.github.com/search/code", {"q": "x"}) == 4321
        params = http_client.request.call_args.kwargs["params"]
        assert params["per_page"] == 1


class TestRateLimitRetry:
    """Test retry behaviour on rate limited pages."""

    def test_retries_after_403(self, response_factory, rate_limit_manager):
        limited = response_factory(
            403,
            json_data={"message": "API rate limit exceeded"},
            headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1060"},
        )
        http_client = Mock()
        http_client.request.side_effect = [limited, response_factory(json_data=search_page(3))]
        paginator = RateLimitedPaginator(http_client, rate_limit_manager)

        result = paginator.paginate("https://api.github.com/search/code")

        assert len(result.items) == 3
        rate_limit_manager.sleep.assert_called_with(60.0)

    def test_exhausted_retries_raise(self, response_factory, rate_limit_manager):
        http_client = Mock()
        http_client.request.return_value = response_factory(
            403,
            json_data={},
            headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1010"},
        )
        paginator = RateLimitedPaginator(http_client, rate_limit_manager, max_retries=3)

        with pytest.raises(RateLimitExceededError) as excinfo:
            paginator.fetch_page("https://api.github.com/search/code")

        assert http_client.request.call_count == 3
        assert excinfo.value.response.status_code == 403

    def test_other_errors_not_retried(self, response_factory, rate_limit_manager):
        http_client = Mock()
        http_client.request.return_value = response_factory(500, json_data={})
        paginator = RateLimitedPaginator(http_client, rate_limit_manager)

        with pytest.raises(requests.HTTPError):
            paginator.fetch_page("https://api.github.com/search/code")

        assert http_client.request.call_count == 1

    def test_waits_before_request_when_quota_low(self, response_factory, rate_limit_manager):
        http_client = Mock()
        http_client.request.side_effect = [
            response_factory(
                json_data=search_page(100),
                headers={
                    "X-RateLimit-Limit": "30",
                    "X-RateLimit-Remaining": "1",
                    "X-RateLimit-Reset": "1030",
                },
            ),
            response_factory(json_data=search_page(0)),
        ]
        paginator = RateLimitedPaginator(http_client, rate_limit_manager)

        paginator.paginate("https://api.github.com/search/code")

        rate_limit_manager.sleep.assert_called_once_with(30.0)

    def test_permission_403_not_retried(self, response_factory, rate_limit_manager):
        """A 403 with quota left is a permission error, surfaced at once."""
        http_client = Mock()
        http_client.request.return_value = response_factory(
            403,
            json_data={"message": "Resource not accessible by integration"},
            headers={"X-RateLimit-Remaining": "4999", "X-RateLimit-Reset": "4600"},
        )
        paginator = RateLimitedPaginator(http_client, rate_limit_manager)

        with pytest.raises(requests.HTTPError) as excinfo:
            paginator.fetch_page("https://api.github.com/repos/x/y/contents")

        assert not isinstance(excinfo.value, RateLimitExceededError)
        assert excinfo.value.response.status_code == 403
        assert http_client.request.call_count == 1
        rate_limit_manager.sleep.assert_not_called()

    def test_retry_after_header_sets_wait(self, response_factory, rate_limit_manager):
        """A secondary limit waits for Retry-After, not the primary reset."""
        limited = response_factory(
            403,
            json_data={"message": "You have exceeded a secondary rate limit"},
            headers={
                "Retry-After": "7",
                "X-RateLimit-Remaining": "4000",
                "X-RateLimit-Reset": "4600",
            },
        )
        http_client = Mock()
        http_client.request.side_effect = [limited, response_factory(json_data=search_page(2))]
        paginator = RateLimitedPaginator(http_client, rate_limit_manager)

        result = paginator.paginate("https://api.github.com/search/code")

        assert len(result.items) == 2
        rate_limit_manager.sleep.assert_called_once_with(7.0)

    def test_retries_after_429(self, response_factory, rate_limit_manager):
        http_client = Mock()
        http_client.request.side_effect = [
            response_factory(429, json_data={}),
            response_factory(json_data=search_page(1)),
        ]
        paginator = RateLimitedPaginator(http_client, rate_limit_manager)

        assert paginator.count("https://api.github.com/search/code") == 237
        assert http_client.request.call_count == 2
