"""
Thin HTTP client used by every fetcher.

Wraps a requests.Session, raises on HTTP errors and offers ``*_or_default``
variants for call sites where a failed fetch is logged and replaced by a safe
default instead of aborting the run.
"""

from typing import Any

import requests

from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 30
USER_AGENT = "mesh-gov-updates"


def github_headers(token: str | None) -> dict[str, str]:
    """Headers for the GitHub REST API."""
    headers = {"Accept": "application/vnd.github.v3+json"}
    if token:
        headers["Authorization"] = f"token {token}"
    return headers


def koios_headers(api_key: str) -> dict[str, str]:
    """Headers for the Koios REST API."""
    return {"Authorization": f"Bearer {api_key}", "accept": "application/json"}


def supabase_headers(key: str) -> dict[str, str]:
    """Headers for Supabase PostgREST tables and RPC endpoints."""
    return {
        "apikey": key,
        "Authorization": f"Bearer {key}",
        "Content-Type": "application/json",
        "Content-Profile": "public",
    }


def discord_headers(token: str) -> dict[str, str]:
    """Headers for the Discord REST API using a bot token."""
    return {"Authorization": f"Bot {token}"}


class HttpClient:
    """Sequential HTTP client with JSON, text and default-on-failure helpers."""

    def __init__(
        self,
        headers: dict[str, str] | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ):
        """
        Initialize the client.

        Args:
            headers: Headers sent with every request
            timeout: Per-request timeout in seconds
            session: Optional pre-built session (used by tests)
        """
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)
        if headers:
            self.session.headers.update(headers)
        self.timeout = timeout

    def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """Issue a request without raising on HTTP error status."""
        logger.debug(f"{method} {url}")
        return self.session.request(
            method,
            url,
            params=params,
            json=json,
            headers=headers,
            timeout=self.timeout,
        )

    def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """GET a URL and raise requests.HTTPError on a 4xx/5xx status."""
        response = self.request("GET", url, params=params, headers=headers)
        response.raise_for_status()
        return response

    def post(
        self,
        url: str,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> requests.Response:
        """POST a JSON body and raise requests.HTTPError on a 4xx/5xx status."""
        response = self.request("POST", url, json=json, headers=headers)
        response.raise_for_status()
        return response

    def get_json(self, url: str, params=None, headers=None) -> Any:
        return self.get(url, params=params, headers=headers).json()

    def get_text(self, url: str, params=None, headers=None) -> str:
        return self.get(url, params=params, headers=headers).text

    def post_json(self, url: str, json: Any = None, headers=None) -> Any:
        return self.post(url, json=json, headers=headers).json()

    def get_json_or_default(
        self, url: str, default: Any, params=None, headers=None
    ) -> Any:
        """
        GET JSON, logging the failure and returning ``default`` on any error.

        Args:
            url: Request URL
            default: Value returned when the request or decoding fails
            params: Query parameters
            headers: Extra headers

        Returns:
            Decoded JSON body or the default
        """
        try:
            return self.get_json(url, params=params, headers=headers)
        except (requests.RequestException, ValueError) as e:
            _log_failure("GET", url, e)
            return default

    def get_text_or_default(
        self, url: str, default: str | None = None, params=None, headers=None
    ) -> str | None:
        """GET text, logging the failure and returning ``default`` on any error."""
        try:
            return self.get_text(url, params=params, headers=headers)
        except requests.RequestException as e:
            _log_failure("GET", url, e)
            return default

    def post_json_or_default(
        self, url: str, default: Any, json: Any = None, headers=None
    ) -> Any:
        """POST JSON, logging the failure and returning ``default`` on any error."""
        try:
            return self.post_json(url, json=json, headers=headers)
        except (requests.RequestException, ValueError) as e:
            _log_failure("POST", url, e)
            return default


def _log_failure(method: str, url: str, error: Exception) -> None:
    status = getattr(getattr(error, "response", None), "status_code", None)
    if status == 404:
        logger.debug(f"{method} {url} returned 404")
    else:
        logger.warning(f"{method} {url} failed: {error}")
