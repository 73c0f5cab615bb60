"""
DRep voting history pages
"""

import re
from datetime import datetime
from typing import Any

from ..shared_utilities.base_output_formatter import BaseOutputFormatter
from ..shared_utilities.markdown import escape_table_cell, front_matter, vote_emoji

ANNUAL_RECORDS_PATTERN = re.compile(r"## Annual Records\n\n[\s\S]*?(?=\n##|$)")
VOTE_SEPARATOR = "\n\n---\n\n"
# Page slot reserved for a non-year page in the same directory
RESERVED_PAGES = {"1001.md"}


def submitted_date(block_time: str | None) -> str:
    """Vote date as month/day/year, e.g. 1/15/2025."""
    if not block_time:
        return "N/A"
    moment = datetime.fromisoformat(block_time.replace("Z", "+00:00"))
    return f"{moment.month}/{moment.day}/{moment.year}"


def vote_table(vote: dict[str, Any], organization_name: str) -> str:
    """Two-column table describing a single vote."""
    tx_hash = vote.get("proposalTxHash") or "N/A"
    rationale = escape_table_cell(vote.get("rationale")) or "No rationale available"

    return "\n".join(
        [
            f"| {organization_name}      | Cardano Governance Actions |",
            "| -------------- | ------------------------------------------------------- |",
            f"| Proposal Title | [{vote.get('proposalTitle')}](https://adastat.net/governances/{tx_hash}) |",
            f"| Hash           | {tx_hash} |",
            f"| Action ID      | {vote.get('proposalId') or 'N/A'} |",
            f"| Type           | {vote.get('proposalType') or 'Unknown'} |",
            f"| Proposed Epoch | {vote.get('proposedEpoch') or 'N/A'} |",
            f"| Expires Epoch  | {vote.get('expirationEpoch') or 'N/A'} |",
            f"| Vote           | {vote_emoji(vote['vote'])}{vote['vote']} |",
            f"| Vote Submitted | {submitted_date(vote.get('blockTime'))} |",
            f"| Rationale      | {rationale} |",
            f"| Link           | [adastat tx link](https://adastat.net/transactions/{vote.get('voteTxHash') or 'N/A'}) |",
        ]
    )


def update_annual_records(index: str, page_names: list[str]) -> str:
    """
    Replace the "Annual Records" section of the index page.

    Args:
        index: Current index page
        page_names: File names in the voting Markdown directory

    Returns:
        Index page with one link per year page, newest first
    """
    years = sorted(
        (
            int(name[:-3])
            for name in page_names
            if name.endswith(".md")
            and name not in RESERVED_PAGES
            and name[:-3].isdigit()
        ),
        reverse=True,
    )
    links = "\n".join(f"- [{year} Voting History](./{year}.md)" for year in years)
    section = f"## Annual Records\n\n{links}\n\n"
    return ANNUAL_RECORDS_PATTERN.sub(lambda _: section, index, count=1)


class VotingHistoryFormatter(BaseOutputFormatter):
    """Renders one year of votes, newest first."""

    def __init__(self, organization_name: str):
        super().__init__()
        self.organization_name = organization_name

    def _format_markdown(self, data: dict[str, Any], **kwargs) -> str:
        year = data["year"]
        votes = sorted(data["votes"], key=lambda v: v["blockTime"], reverse=True)

        header = front_matter(
            f"{year} DRep Voting History",
            f"Voting history and rationales for {year}",
            f"{year} Votes",
        )
        tables = VOTE_SEPARATOR.join(
            vote_table(vote, self.organization_name) + "\n" for vote in votes
        )
        return f"{header}\n# DRep Voting History for {year}\n\n{tables}"
