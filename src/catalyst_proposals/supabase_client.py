"""
Supabase PostgREST client for Catalyst proposals and milestone snapshots
"""

from typing import Any

from ..shared_utilities.http_client import HttpClient, supabase_headers
from ..shared_utilities.logging_config import get_logger

logger = get_logger(__name__)

PROPOSAL_FIELDS = "id,title,budget,milestones_qty,funds_distributed,project_id"


class SupabaseClient:
    """Reads the proposals table and the getproposalsnapshot RPC."""

    def __init__(self, url: str, key: str, http_client: HttpClient | None = None):
        self.base_url = url.rstrip("/")
        self.http_client = http_client or HttpClient(headers=supabase_headers(key))

    def proposal(self, project_id: str) -> dict[str, Any] | None:
        """The proposals row of a project, or None when missing or on error."""
        rows = self.http_client.get_json_or_default(
            f"{self.base_url}/rest/v1/proposals",
            default=None,
            params={"select": PROPOSAL_FIELDS, "project_id": f"eq.{project_id}"},
        )
        if not isinstance(rows, list) or not rows:
            logger.error(f"No proposal details for project {project_id}")
            return None
        return rows[0]

    def proposal_snapshot(self, project_id: str) -> list[dict[str, Any]]:
        """Milestone sign-off snapshot of a project (empty on error)."""
        snapshot = self.http_client.post_json_or_default(
            f"{self.base_url}/rest/v1/rpc/getproposalsnapshot",
            default=[],
            json={"_project_id": project_id},
        )
        return snapshot if isinstance(snapshot, list) else []
