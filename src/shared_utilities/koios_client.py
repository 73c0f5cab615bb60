"""
Koios (Cardano chain indexer) REST client
"""

from typing import Any

from .http_client import HttpClient, koios_headers
from .logging_config import get_logger

logger = get_logger(__name__)

KOIOS_API_URL = "https://api.koios.rest/api/v1"


class KoiosClient:
    """
    Client for the DRep related Koios endpoints.

    List endpoints return None when the request fails so callers can tell an
    outage apart from an empty result.
    """

    def __init__(self, api_key: str, http_client: HttpClient | None = None):
        self.http_client = http_client or HttpClient(headers=koios_headers(api_key))

    def _get_list(self, endpoint: str, params: dict[str, Any]) -> list[dict] | None:
        data = self.http_client.get_json_or_default(
            f"{KOIOS_API_URL}/{endpoint}", default=None, params=params
        )
        if data is None:
            return None
        if not isinstance(data, list):
            logger.error(f"Invalid {endpoint} response: expected an array")
            return None
        return data

    def drep_delegators(self, drep_id: str) -> list[dict] | None:
        """Current delegators of a DRep ({stake_address, amount, epoch_no, ...})."""
        delegators = self._get_list("drep_delegators", {"_drep_id": drep_id})
        if delegators is not None:
            logger.info(f"Found {len(delegators)} delegators for DRep {drep_id}")
        return delegators

    def drep_info(self, drep_id: str) -> dict | None:
        """Registration details and voting power of a DRep."""
        data = self.http_client.post_json_or_default(
            f"{KOIOS_API_URL}/drep_info", default=None, json={"_drep_ids": [drep_id]}
        )
        if not isinstance(data, list) or not data:
            logger.error(f"DRep {drep_id} not found in drep_info")
            return None
        return data[0]

    def current_epoch(self) -> int | None:
        """Epoch number of the chain tip."""
        data = self.http_client.get_json_or_default(f"{KOIOS_API_URL}/tip", default=None)
        if isinstance(data, list) and data and "epoch_no" in data[0]:
            return int(data[0]["epoch_no"])
        logger.error("Could not read the current epoch from tip")
        return None

    def drep_votes(self, drep_id: str) -> list[dict] | None:
        """Every vote cast by a DRep."""
        return self._get_list("drep_votes", {"_drep_id": drep_id})

    def voter_proposal_list(self, voter_id: str) -> dict[str, dict]:
        """
        Proposals a voter has voted on, keyed by proposal id.

        Returns:
            Mapping of proposal_id to proposal record (empty on failure)
        """
        proposals = self._get_list("voter_proposal_list", {"_voter_id": voter_id}) or []

        proposal_map = {}
        for proposal in proposals:
            proposal_id = proposal.get("proposal_id")
            if not proposal_id:
                logger.warning("Found proposal without proposal_id, skipping")
                continue
            proposal_map[proposal_id] = proposal

        logger.info(f"Mapped {len(proposal_map)} proposals")
        return proposal_map
