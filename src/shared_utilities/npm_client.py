"""
npm registry and download-stats client
"""

import calendar
from datetime import date

from .http_client import HttpClient
from .logging_config import get_logger

logger = get_logger(__name__)

DOWNLOADS_API_URL = "https://api.npmjs.org/downloads/point"
REGISTRY_URL = "https://registry.npmjs.org"
NPM_STAT_URL = "https://npm-stat.com/charts.html"


class NpmClient:
    """Client for npm download counts and registry metadata."""

    def __init__(self, http_client: HttpClient | None = None):
        self.http_client = http_client or HttpClient()

    def downloads(self, package: str, start: date, end: date) -> int:
        """
        Total downloads of a package between two dates (inclusive).

        Returns:
            Download count, 0 when the request fails
        """
        url = f"{DOWNLOADS_API_URL}/{start.isoformat()}:{end.isoformat()}/{package}"
        data = self.http_client.get_json_or_default(url, default={})
        return int(data.get("downloads") or 0)

    def downloads_last_year(self, package: str) -> int:
        """Downloads over the trailing 365 days, 0 when the request fails."""
        url = f"{DOWNLOADS_API_URL}/last-year/{package}"
        data = self.http_client.get_json_or_default(url, default={})
        return int(data.get("downloads") or 0)

    def monthly_downloads(self, package: str, year: int, today: date) -> list[dict]:
        """
        Downloads per calendar month of a year.

        Months after ``today`` are reported as 0 without a request.

        Args:
            package: Package name
            year: Calendar year
            today: Reference date separating past and future months

        Returns:
            Twelve {"month": 1-12, "downloads": n} records
        """
        months = []
        for month in range(1, 13):
            if (year, month) > (today.year, today.month):
                months.append({"month": month, "downloads": 0})
                continue

            last_day = calendar.monthrange(year, month)[1]
            count = self.downloads(
                package, date(year, month, 1), date(year, month, last_day)
            )
            months.append({"month": month, "downloads": count})

        logger.debug(f"{package} {year}: {sum(m['downloads'] for m in months)} downloads")
        return months

    def latest_version(self, package: str) -> str | None:
        """The ``latest`` dist-tag of a package."""
        data = self.http_client.get_json_or_default(
            f"{REGISTRY_URL}/{package}", default={}
        )
        return (data.get("dist-tags") or {}).get("latest")

    def dependents_count(self, package: str) -> int:
        """Number of registry packages declaring a dependency on ``package``."""
        data = self.http_client.get_json_or_default(
            f"{REGISTRY_URL}/-/v1/search",
            default={},
            params={"text": f"dependencies:{package}", "size": 1},
        )
        return int(data.get("total") or 0)

    @staticmethod
    def npm_stat_url(packages: list[str], start: date, end: date) -> str:
        """Link to the npm-stat chart for one or more packages."""
        return (
            f"{NPM_STAT_URL}?package={','.join(packages)}"
            f"&from={start.isoformat()}&to={end.isoformat()}"
        )
