"""
Current Mesh SDK usage snapshot: GitHub usage, npm downloads and contributors.
"""

from datetime import date, datetime, timedelta, timezone
from typing import Any

import requests

from ..contributors.scanner import ContributorScanner
from ..shared_utilities.config import AppConfig
from ..shared_utilities.github_client import GitHubClient
from ..shared_utilities.http_client import HttpClient
from ..shared_utilities.logging_config import get_logger
from ..shared_utilities.npm_client import NpmClient
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.text_extraction import extract_dependents_count

logger = get_logger(__name__)

DEPENDENTS_URL = (
    "https://github.com/MeshJS/mesh/network/dependents"
    "?dependent_type=REPOSITORY&package_id=UGFja2FnZS0zNDczNjUyOTU4"
)
DEPENDENTS_FALLBACK_PATH = "mesh-stats/core-in-repositories.json"
MESH_STATS_PATH = "mesh-stats/mesh_stats.json"
BROWSER_USER_AGENT = "Mozilla/5.0"

# Output key for the last-year downloads of each non-core package
PACKAGE_DOWNLOAD_KEYS = {
    "react": "react_package_downloads",
    "transaction": "transaction_package_downloads",
    "wallet": "wallet_package_downloads",
    "provider": "provider_package_downloads",
    "coreCsl": "core_csl_package_downloads",
    "coreCst": "core_cst_package_downloads",
}


def download_periods(today: date) -> dict[str, tuple[date, date]]:
    """
    Date windows for the core package download counts.

    Returns:
        Mapping of last_day, last_week (Monday to Sunday of the week seven days
        ago), last_month (previous calendar month) and last_year (previous
        calendar year) to (start, end) pairs
    """
    week_ago = today - timedelta(days=7)
    week_start = week_ago - timedelta(days=week_ago.weekday())

    last_month_end = today.replace(day=1) - timedelta(days=1)
    last_month_start = last_month_end.replace(day=1)

    return {
        "last_day": (today - timedelta(days=1), today),
        "last_week": (week_start, week_start + timedelta(days=6)),
        "last_month": (last_month_start, last_month_end),
        "last_year": (date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)),
    }


def _one_year_ago(today: date) -> date:
    if today.month == 2 and today.day == 29:
        return date(today.year - 1, 3, 1)
    return today.replace(year=today.year - 1)


def send_discord_notification(
    http_client: HttpClient, webhook_url: str | None, message: str
) -> bool:
    """
    Post a message to a Discord webhook.

    Returns:
        True when the message was delivered
    """
    if not webhook_url:
        logger.warning("Discord webhook URL not set, notification skipped")
        return False

    try:
        http_client.post(webhook_url, json={"content": message})
        return True
    except requests.RequestException as e:
        logger.error(f"Failed to send Discord notification: {e}")
        return False


class MeshStatsCollector:
    """Collects the current usage snapshot rendered as current.md."""

    def __init__(
        self,
        config: AppConfig,
        github_client: GitHubClient,
        npm_client: NpmClient,
        store: SnapshotStore,
        http_client: HttpClient | None = None,
        now: datetime | None = None,
    ):
        self.config = config
        self.github_client = github_client
        self.npm_client = npm_client
        self.store = store
        self.http_client = http_client or HttpClient()
        self.now = now or datetime.now(timezone.utc)

    def fetch_dependents_count(self) -> int:
        """
        Repositories depending on the core package, scraped from GitHub.

        A successful scrape refreshes the fallback file; on failure the
        webhook is notified and the last stored count is used.
        """
        fallback = self.store.load_json(
            DEPENDENTS_FALLBACK_PATH,
            default={"last_updated": "", "core_in_repositories": 0},
        )

        failure = None
        try:
            html = self.http_client.get_text(
                DEPENDENTS_URL, headers={"User-Agent": BROWSER_USER_AGENT}
            )
            count = extract_dependents_count(html)
            if count is None:
                failure = "the dependents count could not be read from the page"
        except requests.RequestException as e:
            count = None
            failure = f"Error: {e}"

        if count is None:
            send_discord_notification(
                self.http_client,
                self.config.discord_webhook_url,
                f"⚠️ Failed to fetch dependents count from GitHub. {failure}",
            )
            stored = int(fallback.get("core_in_repositories") or 0)
            logger.info(f"Using stored dependents count: {stored}")
            return stored

        logger.info(f"Fetched dependents count: {count}")
        self.store.save_json(
            DEPENDENTS_FALLBACK_PATH,
            {"last_updated": self.now.isoformat(), "core_in_repositories": count},
        )
        return count

    def collect_github(self) -> dict[str, int]:
        package = self.config.core_package
        # The scraped dependents count backs both repository metrics
        dependents = self.fetch_dependents_count()
        return {
            "core_in_package_json": dependents,
            "core_in_any_file": self.github_client.search_code_count(f'"{package}"'),
            "core_in_repositories": dependents,
        }

    def collect_npm(self) -> dict[str, Any]:
        today = self.now.date()
        core = self.config.core_package

        downloads = {
            period: self.npm_client.downloads(core, start, end)
            for period, (start, end) in download_periods(today).items()
        }
        downloads["core_package_last_12_months"] = self.npm_client.downloads_last_year(core)

        npm: dict[str, Any] = {"downloads": downloads}
        for key, output_key in PACKAGE_DOWNLOAD_KEYS.items():
            package = self.config.packages.get(key)
            npm[output_key] = (
                self.npm_client.downloads_last_year(package) if package else 0
            )
        npm["latest_version"] = self.npm_client.latest_version(core)
        npm["dependents_count"] = self.npm_client.dependents_count(core)
        return npm

    def stat_urls(self) -> dict[str, str]:
        today = self.now.date()
        start = _one_year_ago(today)
        compare = [self.config.core_package, self.config.packages.get("react", "@meshsdk/react")]
        return {
            "npm_stat_url": NpmClient.npm_stat_url([self.config.core_package], start, today),
            "npm_stat_compare_url": NpmClient.npm_stat_url(compare, start, today),
        }

    def collect(self) -> dict[str, Any]:
        """Assemble the full current-stats record."""
        logger.info("Fetching GitHub statistics")
        github = self.collect_github()

        logger.info("Fetching npm statistics")
        npm = self.collect_npm()

        logger.info("Fetching organisation contributors")
        scanner = ContributorScanner(self.github_client, self.config.github_org)
        contributors = scanner.scan(scanner.list_repositories())

        return {
            "github": github,
            "npm": npm,
            "urls": self.stat_urls(),
            "contributors": contributors,
        }
