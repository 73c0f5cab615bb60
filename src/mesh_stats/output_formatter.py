"""
Current usage statistics page
"""

from datetime import datetime
from typing import Any

from ..shared_utilities.base_output_formatter import BaseOutputFormatter
from ..shared_utilities.markdown import front_matter, table

RIGHT = ["left", "right"]


class MeshStatsFormatter(BaseOutputFormatter):
    """Renders the current stats record as current.md."""

    def __init__(self, generated_at: datetime | None = None):
        super().__init__()
        self.generated_at = generated_at

    def _format_markdown(self, data: dict[str, Any], **kwargs) -> str:
        github = data["github"]
        npm = data["npm"]
        downloads = npm["downloads"]
        generated_at = self.generated_at or datetime.now()
        updated = f"{generated_at:%B} {generated_at.day}, {generated_at.year}"

        sections = [
            front_matter(
                "Mesh SDK Usage Statistics",
                "Current statistics and usage metrics for Mesh SDK packages",
                "Current Stats",
            ),
            "# 📊 Mesh SDK Usage Statistics",
            f"Last updated: {updated}",
            "",
            "## 👥 GitHub Organization Contributor Statistics",
            table(
                ["Metric" + "&nbsp;" * 78, "Value"],
                [
                    [
                        "Total Unique Contributors in MeshJS",
                        data["contributors"]["unique_count"],
                    ]
                ],
                RIGHT,
            ),
            "",
            "## 🔍 GitHub Usage",
            table(
                ["Repository Metric" + "&nbsp;" * 58, "Count"],
                [
                    ["Repositories that depend on @meshsdk/core", github["core_in_package_json"]],
                    [
                        "Public Files containing @meshsdk/core references",
                        github["core_in_any_file"],
                    ],
                ],
                RIGHT,
            ),
            "",
            "## 📦 Monthly NPM Package Downloads",
            table(
                ["Package" + "&nbsp;" * 50, "Monthly Downloads"],
                [
                    ["@meshsdk/core", downloads["last_month"]],
                    ["@meshsdk/react", npm["react_package_downloads"]],
                    ["@meshsdk/transaction", npm["transaction_package_downloads"]],
                    ["@meshsdk/wallet", npm["wallet_package_downloads"]],
                    ["@meshsdk/provider", npm["provider_package_downloads"]],
                    ["@meshsdk/core-csl", npm["core_csl_package_downloads"]],
                    ["@meshsdk/core-cst", npm["core_cst_package_downloads"]],
                ],
                RIGHT,
            ),
            "",
            "## 📈 Download Statistics for @meshsdk/core",
            table(
                ["Time Period" + "&nbsp;" * 49, "Download Count"],
                [
                    ["Last Week", downloads["last_week"]],
                    ["Last Month", downloads["last_month"]],
                    ["Last Year", downloads["last_year"]],
                ],
                RIGHT,
            ),
            "",
            "## 🔗 Useful Links",
            f"- [NPM Stats Chart]({data['urls']['npm_stat_url']})",
            f"- [NPM Stats Comparison]({data['urls']['npm_stat_compare_url']})",
        ]
        return "\n".join(sections) + "\n"
