"""
Yearly usage statistics page
"""

from typing import Any

from ..shared_utilities.base_output_formatter import BaseOutputFormatter
from ..shared_utilities.markdown import format_number, front_matter, table


class YearlyStatsFormatter(BaseOutputFormatter):
    """Renders a yearly statistics record as a documentation page."""

    def _format_markdown(self, data: dict[str, Any], **kwargs) -> str:
        year = data["year"]
        lines = [
            front_matter(
                f"{year} Mesh SDK Usage Statistics",
                f"Historical statistics and usage metrics for Mesh SDK packages in {year}",
                f"{year} Stats",
            ),
            f"# 📊 Mesh SDK Usage Statistics {year}",
            "",
            "## 📈 Monthly Download Statistics for @meshsdk/core",
            "",
            table(
                ["Month" + "&nbsp;" * 35, "Download Count", "Performance"],
                [
                    [m["month"], format_number(m["downloads"]), m["trend"]]
                    for m in data["coreMonthlyTrend"]
                ],
                ["left", "right", "right"],
            ),
            "",
        ]

        peak = data.get("peakMonth")
        if peak:
            lines.append(
                f"**Peak Month**: {peak['name']} with "
                f"{format_number(peak['downloads'])} downloads"
            )
            lines.append("")

        lines.extend(
            [
                "## 📦 Yearly Package Download Totals",
                "",
                table(
                    ["Package Name" + "&nbsp;" * 32, "Total Downloads", "Rating"],
                    [
                        [p["name"], format_number(p["downloads"]), p["rating"]]
                        for p in data["packageRatings"]
                    ],
                    ["left", "right", "right"],
                ),
                "",
                "## 🔍 GitHub Usage Statistics",
                "",
                table(
                    ["Month" + "&nbsp;" * 62, "Projects", "Files"],
                    [
                        [s["month"], format_number(s["projects"]), format_number(s["files"])]
                        for s in data["githubStats"]
                    ],
                    ["left", "right", "right"],
                ),
            ]
        )
        return "\n".join(lines) + "\n"
