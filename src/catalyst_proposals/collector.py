"""
Catalyst proposal progress: details, milestones and voting per project.
"""

import re
from typing import Any
from urllib.parse import urlparse

from ..shared_utilities.logging_config import get_logger
from .supabase_client import SupabaseClient
from .voting import CatalystVotingClient

logger = get_logger(__name__)

CATALYST_DATA_PATH = "catalyst-proposals/catalyst-data.json"


def fund_number(project_id: str) -> str:
    """Fund of a project: the first two digits of its id, e.g. "1100271" -> "11"."""
    return str(project_id)[:2]


def parse_project_url(url: str | None) -> tuple[str, str] | None:
    """
    Fund id and challenge slug of a project URL.

    ``/funds/10/f10-osde-open-source-dev-ecosystem/...`` gives
    ``("10", "osde-open-source-dev-ecosystem")``.
    """
    if not url:
        return None
    segments = [s for s in urlparse(url).path.split("/") if s]
    if len(segments) < 3 or segments[0] != "funds":
        return None
    fund_id = segments[1]
    challenge_slug = re.sub(rf"^f{re.escape(fund_id)}-", "", segments[2])
    if not challenge_slug:
        return None
    return fund_id, challenge_slug


def milestones_completed(snapshot: list[dict[str, Any]]) -> int:
    """Milestones signed off by both the SoM and the PoA reviewers."""
    return sum(
        1
        for milestone in snapshot
        if (milestone.get("som_signoff_count") or 0) > 0
        and (milestone.get("poa_signoff_count") or 0) > 0
    )


class CatalystCollector:
    """Assembles one progress record per tracked project."""

    def __init__(
        self,
        catalog: dict[str, dict],
        voting_client: CatalystVotingClient,
        supabase_client: SupabaseClient | None = None,
    ):
        """
        Initialize the collector.

        Args:
            catalog: Supplementary project catalogue keyed by project id
            voting_client: Client for Catalyst voting results
            supabase_client: Proposal source; None runs on catalogue data only
        """
        self.catalog = catalog
        self.voting_client = voting_client
        self.supabase_client = supabase_client

    @property
    def use_mock_data(self) -> bool:
        return self.supabase_client is None

    def project_details(self, project_id: str) -> dict[str, Any] | None:
        info = self.catalog.get(project_id)

        if self.use_mock_data:
            if info is None:
                logger.warning(f"Project {project_id} is not in the catalogue")
                return None
            return {
                "id": info["id"],
                "title": info.get("name"),
                "budget": info.get("budget") or 0,
                "milestones_qty": info.get("milestones_qty") or 0,
                "funds_distributed": info.get("funds_distributed") or 0,
                "project_id": str(info["id"]),
                "name": info.get("name"),
                "category": info.get("category") or "",
                "url": info.get("url") or "",
                "status": info.get("status") or "In Progress",
                "finished": info.get("finished") or "",
            }

        row = self.supabase_client.proposal(project_id)
        if row is None:
            return None
        info = info or {}
        return {
            **row,
            "name": info.get("name") or row.get("title"),
            "category": info.get("category") or "",
            "url": info.get("url") or "",
            "status": info.get("status") or "In Progress",
            "finished": info.get("finished") or "",
        }

    def completed_milestones(self, project_id: str) -> int:
        if self.use_mock_data:
            return int((self.catalog.get(project_id) or {}).get("milestonesCompleted") or 0)
        return milestones_completed(self.supabase_client.proposal_snapshot(project_id))

    def collect_project(self, project_id: str) -> dict[str, Any] | None:
        details = self.project_details(project_id)
        if details is None:
            return None

        voting = None
        parsed = parse_project_url(details["url"])
        if parsed:
            fund_id, challenge_slug = parsed
            voting = self.voting_client.project_voting(
                fund_id, challenge_slug, project_id, details["url"]
            )
        else:
            logger.warning(f"Could not parse URL for project {project_id}, skipping voting")

        return {
            "projectDetails": {**details, "voting": voting},
            "milestonesCompleted": self.completed_milestones(project_id),
        }

    def collect(self, project_ids: list[str]) -> list[dict[str, Any]]:
        """Progress records for every project that could be resolved, by fund."""
        projects = []
        for project_id in project_ids:
            logger.info(f"Getting proposal details for project {project_id}")
            record = self.collect_project(project_id)
            if record is not None:
                projects.append(record)

        projects.sort(key=lambda p: fund_number(p["projectDetails"]["project_id"]))
        logger.info(f"Collected {len(projects)} of {len(project_ids)} projects")
        return projects
