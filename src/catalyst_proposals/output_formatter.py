"""
Catalyst proposal pages: the overview page and one page per fund
"""

import re
from datetime import datetime
from typing import Any

from ..shared_utilities.base_output_formatter import BaseOutputFormatter
from ..shared_utilities.markdown import (
    format_number,
    front_matter,
    milestone_status_emoji,
    percent_of,
    progress_bar,
    wrap_text,
)
from ..shared_utilities.text_extraction import (
    FRONT_MATTER_PATTERN,
    extract_front_matter,
    normalize_newlines,
)
from .collector import fund_number

OVERVIEW_PAGE = "0001.md"
OVERVIEW_HEADER_PATTERN = re.compile(
    r"# Project Catalyst Proposals[\s\S]*?\n## MeshJS Proposal Overview"
)
OVERVIEW_TRAILER_PATTERN = re.compile(r"\n### Documentation Organization[\s\S]*$")
FUND_TITLE_PATTERN = re.compile(r"^# Fund \d+", re.MULTILINE)


def fund_page_name(fund: str) -> str:
    return f"{fund.zfill(4)}.md"


def _progress(project: dict[str, Any]) -> tuple[int, int]:
    details = project["projectDetails"]
    milestones = percent_of(project["milestonesCompleted"], details.get("milestones_qty") or 0)
    funding = percent_of(details.get("funds_distributed") or 0, details.get("budget") or 0)
    return milestones, funding


def _existing_front_matter(page: str | None) -> str | None:
    """Raw front matter block of an existing page, if it parses."""
    if not page or extract_front_matter(page) is None:
        return None
    return FRONT_MATTER_PATTERN.match(normalize_newlines(page)).group(0)


def project_table(project: dict[str, Any], milestones_base_url: str) -> str:
    """Anchor heading and field table of a single project."""
    details = project["projectDetails"]
    completed = project["milestonesCompleted"]
    project_id = details["project_id"]
    budget = details.get("budget") or 0
    distributed = details.get("funds_distributed") or 0
    milestone_percent, fund_percent = _progress(project)
    category = details.get("category") or ""

    rows = [
        f"| Field | Value{'&nbsp;' * 115} |",
        "|:---|:---|",
        f"| **Project ID** | {project_id} |",
        f"| **Name** | {wrap_text(details.get('name'), 70)} |",
        f"| **Link** | [Open full project]({details.get('url')}) |",
        f"| **Milestones** | [Milestones]({milestones_base_url}/projects/{project_id}) |",
        f"| **{'Challenge' if 'Challenge' in category else 'Funding Category'}** "
        f"| {wrap_text(category, 50)} |",
        f"| **Proposal Budget** | ADA {format_number(budget)} |",
        f"| **Status** | {milestone_status_emoji(milestone_percent)} {details.get('status')} |",
        f"| **Milestones completed** | {completed}/{details.get('milestones_qty') or 0} "
        f"({milestone_percent}%) |",
        f"| **Funds distributed** | ADA {format_number(distributed)} of "
        f"{format_number(budget)} ({fund_percent}%) |",
        f"| **Funding Progress** | `{progress_bar(fund_percent)}` |",
    ]
    if details.get("finished"):
        rows.append(f"| **Finished** | {details['finished']} |")

    return f"###### {project_id}\n\n" + "\n".join(rows) + "\n"


def summary_table(projects: list[dict[str, Any]]) -> str:
    """Milestone and funding bars for every project, grouped by fund."""
    lines = [
        "### Overview of All Proposals",
        "",
        "| Project | ID | Milestones | Funding |",
        "|:--------|:---|:-----------|:--------|",
    ]
    for project in sorted(projects, key=lambda p: fund_number(p["projectDetails"]["project_id"])):
        details = project["projectDetails"]
        project_id = details["project_id"]
        fund = fund_number(project_id)
        milestone_percent, fund_percent = _progress(project)
        lines.append(
            f"| F{fund} - {details.get('name')} "
            f"| [{project_id}](/en/catalyst-proposals/{fund.zfill(4)}#{project_id}) "
            f"| `{progress_bar(milestone_percent)}` {milestone_percent}% "
            f"| `{progress_bar(fund_percent)}` {fund_percent}% |"
        )
    return "\n".join(lines) + "\n"


def overall_progress(projects: list[dict[str, Any]]) -> str:
    total_milestones = sum(p["projectDetails"].get("milestones_qty") or 0 for p in projects)
    completed = sum(p["milestonesCompleted"] for p in projects)
    budget = sum(p["projectDetails"].get("budget") or 0 for p in projects)
    distributed = sum(p["projectDetails"].get("funds_distributed") or 0 for p in projects)
    milestone_percent = percent_of(completed, total_milestones)
    fund_percent = percent_of(distributed, budget)

    return "\n".join(
        [
            "### Overall Progress",
            "",
            "| Milestones | Funding |",
            "|:-----------|:--------|",
            f"| Total completed: {completed}/{total_milestones} ({milestone_percent}%)"
            f"<br>`{progress_bar(milestone_percent)}` {milestone_percent}% "
            f"| Total distributed: ADA {format_number(distributed)}/{format_number(budget)} "
            f"({fund_percent}%)<br>`{progress_bar(fund_percent)}` {fund_percent}% |",
        ]
    ) + "\n"


def proposals_by_fund(projects: list[dict[str, Any]]) -> str:
    lines = ["### Proposals by Fund", ""]
    funds = sorted({fund_number(p["projectDetails"]["project_id"]) for p in projects})
    for fund in funds:
        lines.append(f"#### [Fund {fund}](/en/catalyst-proposals/{fund.zfill(4)})")
        for project in projects:
            details = project["projectDetails"]
            if fund_number(details["project_id"]) == fund:
                lines.append(f"- {wrap_text(details.get('name'), 50)} ({details['project_id']})")
        lines.append("")
    return "\n".join(lines) + "\n"


class CatalystOverviewFormatter(BaseOutputFormatter):
    """
    Renders the overview page (0001.md).

    The front matter, the introduction up to "## MeshJS Proposal Overview" and
    everything from "### Documentation Organization" on are taken from the
    existing page when present; the progress sections are regenerated.
    """

    def __init__(
        self,
        existing_page: str | None = None,
        use_mock_data: bool = False,
        generated_at: datetime | None = None,
    ):
        super().__init__()
        self.existing_page = normalize_newlines(existing_page) if existing_page else None
        self.use_mock_data = use_mock_data
        self.generated_at = generated_at or datetime.now()

    def _header(self) -> str:
        header = _existing_front_matter(self.existing_page)
        intro = OVERVIEW_HEADER_PATTERN.search(self.existing_page or "")
        if header is None:
            header = front_matter(
                "Project Catalyst Proposals",
                "Progress of MeshJS proposals funded by Project Catalyst",
                "Catalyst Proposals",
            ).rstrip("\n")
        intro_text = (
            intro.group(0)
            if intro
            else "# Project Catalyst Proposals\n\n## MeshJS Proposal Overview"
        )
        return f"{header}\n\n{intro_text}\n\n"

    def _format_markdown(self, data: dict[str, Any], **kwargs) -> str:
        projects = data["projects"]
        moment = self.generated_at
        timestamp = f"{moment:%B} {moment.day}, {moment.year} at {moment:%I:%M %p} UTC"
        source = (
            "Mock data (Credentials not available)"
            if self.use_mock_data
            else "Real data from Catalyst"
        )

        content = self._header()
        content += f"> **Data Source**: {source}\n"
        content += f"> **Last Updated**: {timestamp}\n\n"
        content += overall_progress(projects) + "\n"
        content += summary_table(projects) + "\n"
        content += proposals_by_fund(projects)

        trailer = OVERVIEW_TRAILER_PATTERN.search(self.existing_page or "")
        if trailer:
            content += trailer.group(0)
        return content


class FundPageFormatter(BaseOutputFormatter):
    """Renders one fund page with a project table per project."""

    def __init__(self, milestones_base_url: str, existing_page: str | None = None):
        super().__init__()
        self.milestones_base_url = milestones_base_url.rstrip("/")
        self.existing_page = normalize_newlines(existing_page) if existing_page else None

    def _format_markdown(self, data: dict[str, Any], **kwargs) -> str:
        fund = data["fund"]
        header = _existing_front_matter(self.existing_page)
        if header is None:
            header = front_matter(
                f"Fund {fund}",
                f"MeshJS proposals funded in Project Catalyst Fund {fund}",
                f"Fund {fund}",
            ).rstrip("\n")
        title = FUND_TITLE_PATTERN.search(self.existing_page or "")
        title_text = title.group(0) if title else f"# Fund {fund}"

        content = f"{header}\n\n{title_text}\n\n"
        for project in data["projects"]:
            content += project_table(project, self.milestones_base_url) + "\n\n"
        return content
