"""
Yearly Mesh SDK usage statistics: GitHub usage by month and npm downloads.
"""

import calendar
from datetime import datetime, timezone

from ..shared_utilities.config import AppConfig
from ..shared_utilities.github_client import GitHubClient
from ..shared_utilities.logging_config import get_logger
from ..shared_utilities.npm_client import NpmClient
from ..shared_utilities.snapshot_merger import current_month_name, merge_monotonic
from ..shared_utilities.snapshot_store import SnapshotStore
from ..shared_utilities.text_extraction import extract_github_usage_table

logger = get_logger(__name__)

MONTH_NAMES = list(calendar.month_name)[1:]
FIRST_YEAR = 2024
GITHUB_METRICS = ("core_in_package_json", "core_in_any_file")
STAR_THRESHOLD = 20000


def yearly_json_path(year: int) -> str:
    return f"mesh-stats/yearly/{year}.json"


def yearly_markdown_path(year: int) -> str:
    return f"mesh-stats/markdown/{year}.md"


def years_to_process(now: datetime) -> list[int]:
    return list(range(FIRST_YEAR, now.year + 1))


def package_rating(total: int) -> str:
    return "🌟" if total > STAR_THRESHOLD else "⭐"


def download_trends(core: list[dict], year: int, now: datetime) -> list[str]:
    """
    Month-over-month trend indicator for each month of the core package.

    The peak month gets 🔥; later months compare against the previous month.
    Months that have not started yet are flat.
    """
    peak = max((m["downloads"] for m in core), default=0)
    trends = []
    for index, entry in enumerate(core):
        month = entry["month"]
        if (year, month) > (now.year, now.month):
            trends.append("➡️")
            continue

        previous = core[index - 1]["downloads"] if index > 0 else None
        if peak and entry["downloads"] == peak:
            trends.append("🔥")
        elif previous is not None and entry["downloads"] > previous:
            trends.append("📈")
        elif previous is not None and entry["downloads"] < previous:
            trends.append("📉")
        else:
            trends.append("➡️")
    return trends


def process_yearly_stats(
    year: int,
    monthly_downloads: dict[str, list[dict]],
    github_stats: dict[str, dict],
    packages: dict[str, str],
    now: datetime,
) -> dict:
    """
    Build the yearly statistics record rendered to JSON and Markdown.

    Args:
        year: Calendar year
        monthly_downloads: Package key -> twelve {"month", "downloads"} records
        github_stats: Month name -> GitHub usage counts
        packages: Package key -> npm package name
        now: Run timestamp

    Returns:
        Yearly statistics record
    """
    yearly_totals = {
        key: sum(m["downloads"] for m in months)
        for key, months in monthly_downloads.items()
    }

    core = monthly_downloads.get("core", [])
    trends = download_trends(core, year, now)
    core_trend = [
        {
            "month": MONTH_NAMES[m["month"] - 1],
            "downloads": m["downloads"],
            "trend": trend,
        }
        for m, trend in zip(core, trends, strict=True)
    ]

    peak_month = None
    if core:
        peak = max(core, key=lambda m: m["downloads"])
        peak_month = {
            "name": MONTH_NAMES[peak["month"] - 1],
            "downloads": peak["downloads"],
        }

    return {
        "year": year,
        "yearlyTotals": yearly_totals,
        "packageRatings": [
            {
                "key": key,
                "name": packages[key],
                "downloads": total,
                "rating": package_rating(total),
            }
            for key, total in yearly_totals.items()
        ],
        "monthlyDownloads": {
            key: [
                {"month": MONTH_NAMES[m["month"] - 1], "downloads": m["downloads"]}
                for m in months
            ]
            for key, months in monthly_downloads.items()
        },
        "coreMonthlyTrend": core_trend,
        "peakMonth": peak_month,
        "githubStats": [
            {
                "month": month,
                "projects": github_stats.get(month, {}).get("core_in_package_json", 0),
                "files": github_stats.get(month, {}).get("core_in_any_file", 0),
            }
            for month in MONTH_NAMES
        ],
        "githubMonthly": {
            month: github_stats[month] for month in MONTH_NAMES if month in github_stats
        },
        "lastUpdated": now.isoformat(),
    }


class YearlyStatsCollector:
    """Collects one yearly statistics record per year."""

    def __init__(
        self,
        config: AppConfig,
        github_client: GitHubClient,
        npm_client: NpmClient,
        store: SnapshotStore,
        now: datetime | None = None,
    ):
        self.config = config
        self.github_client = github_client
        self.npm_client = npm_client
        self.store = store
        self.now = now or datetime.now(timezone.utc)

    def load_github_usage(self, year: int) -> dict[str, dict]:
        """
        Load stored monthly GitHub usage for a year.

        The JSON snapshot is preferred; older years only exist as the rendered
        Markdown table, which is parsed instead.
        """
        snapshot = self.store.load_json(yearly_json_path(year))
        if isinstance(snapshot, dict) and isinstance(snapshot.get("githubMonthly"), dict):
            return snapshot["githubMonthly"]

        page = self.store.load_text(yearly_markdown_path(year))
        if page:
            stats = extract_github_usage_table(page)
            if stats is not None:
                logger.info(f"Recovered GitHub usage for {year} from Markdown")
                return stats
            logger.warning(f"No GitHub usage table found in {year} page")
        return {}

    def fetch_github_usage(self) -> dict[str, int]:
        """Current code-search counts for the core package."""
        package = self.config.core_package
        return {
            "core_in_package_json": self.github_client.search_code_count(
                f'"{package}" in:file filename:package.json'
            ),
            "core_in_any_file": self.github_client.search_code_count(f'"{package}"'),
        }

    def collect_year(self, year: int) -> dict:
        """
        Merge GitHub usage and fetch npm downloads for one year.

        Only the current year queries code search; its current month is
        updated when the new counts move forward, every other month is frozen.
        """
        github_stats = self.load_github_usage(year)

        if year == self.now.year:
            month = current_month_name(self.now)
            outcome = merge_monotonic(
                github_stats,
                {month: self.fetch_github_usage()},
                GITHUB_METRICS,
                current_key=month,
            )
            if outcome.changed:
                logger.info(f"Updated GitHub usage for {month} {year}")
            github_stats = outcome.snapshot

        today = self.now.date()
        monthly_downloads = {
            key: self.npm_client.monthly_downloads(package, year, today)
            for key, package in self.config.packages.items()
        }

        return process_yearly_stats(
            year, monthly_downloads, github_stats, self.config.packages, self.now
        )
