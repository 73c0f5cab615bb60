"""
DRep vote processing: validation, proposal details and rationale resolution.
"""

from collections import defaultdict
from datetime import datetime, timezone
from typing import Any

from ..rationales.vote_context import VoteContextSource
from ..shared_utilities.http_client import HttpClient
from ..shared_utilities.koios_client import KoiosClient
from ..shared_utilities.logging_config import get_logger

logger = get_logger(__name__)

VALID_VOTES = ("Yes", "No", "Abstain")
REQUIRED_FIELDS = ("proposal_id", "vote", "block_time")

UNKNOWN_TITLE = "Unknown Proposal"
NO_RATIONALE = "No rationale available"


class VotesUnavailable(Exception):
    """Raised when the vote list cannot be fetched."""

    pass


def validate_vote(vote: dict[str, Any]) -> bool:
    """Check required fields and the vote value, logging why a vote is skipped."""
    missing = [name for name in REQUIRED_FIELDS if not vote.get(name)]
    if missing:
        logger.error(f"Invalid vote data: missing {', '.join(missing)}")
        return False
    if vote["vote"] not in VALID_VOTES:
        logger.error(
            f"Invalid vote value: {vote['vote']}. "
            f"Must be one of: {', '.join(VALID_VOTES)}"
        )
        return False
    return True


def block_time_iso(seconds: int | float) -> str:
    """Unix block time as an ISO-8601 UTC timestamp with millisecond precision."""
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def _body(document: Any) -> dict:
    if not isinstance(document, dict):
        return {}
    body = document.get("body")
    return body if isinstance(body, dict) else {}


class VoteProcessor:
    """Turns raw Koios votes into the records rendered per year."""

    def __init__(
        self,
        koios_client: KoiosClient,
        vote_context: VoteContextSource,
        rationale_cache: dict[str, dict] | None = None,
        http_client: HttpClient | None = None,
    ):
        """
        Initialize the processor.

        Args:
            koios_client: Source of votes and proposal details
            vote_context: Governance repository lookup used as the last resort
            rationale_cache: Cached {"title", "rationale"} entries by proposal id
            http_client: Client used to fetch vote metadata documents
        """
        self.koios_client = koios_client
        self.vote_context = vote_context
        self.rationale_cache = rationale_cache or {}
        self.http_client = http_client or HttpClient()

    def fetch_metadata(self, meta_url: str | None) -> dict | None:
        if not meta_url:
            return None
        metadata = self.http_client.get_json_or_default(meta_url, default=None)
        return metadata if isinstance(metadata, dict) else None

    def resolve_rationale(
        self, proposal_id: str, metadata: dict | None, year: int
    ) -> str | None:
        """
        Rationale of a vote from the first source that has one.

        Order: vote metadata ``body.comment``, then ``body.rationale``, then the
        rationale cache, then the governance repository's vote-context files.
        """
        body = _body(metadata)
        if body.get("comment"):
            return body["comment"]
        if body.get("rationale"):
            return body["rationale"]

        cached = self.rationale_cache.get(proposal_id) or {}
        if cached.get("rationale"):
            return cached["rationale"]

        return self.vote_context.find_rationale(proposal_id, year)

    def process_vote(self, vote: dict[str, Any], proposal: dict[str, Any]) -> dict[str, Any]:
        """Build the output record of one validated vote."""
        proposal_id = vote["proposal_id"]
        tx_hash = vote.get("proposal_tx_hash")
        record = {
            "proposalId": proposal_id,
            # adastat addresses a governance action by tx hash plus a two-digit index
            "proposalTxHash": f"{tx_hash}00" if tx_hash else None,
            "proposalIndex": vote.get("proposal_index"),
            "voteTxHash": vote.get("vote_tx_hash"),
            "blockTime": block_time_iso(vote["block_time"]),
            "vote": vote["vote"],
            "metaUrl": vote.get("meta_url"),
            "metaHash": vote.get("meta_hash"),
        }

        year = datetime.fromtimestamp(vote["block_time"], tz=timezone.utc).year
        metadata = self.fetch_metadata(record["metaUrl"])
        rationale = self.resolve_rationale(proposal_id, metadata, year)

        cached = self.rationale_cache.get(proposal_id) or {}
        record["proposalTitle"] = (
            _body(proposal.get("meta_json")).get("title")
            or cached.get("title")
            or UNKNOWN_TITLE
        )
        record["proposalType"] = proposal.get("proposal_type") or "Unknown"
        record["proposedEpoch"] = proposal.get("proposed_epoch") or "N/A"
        record["expirationEpoch"] = proposal.get("expiration") or "N/A"
        record["rationale"] = rationale or NO_RATIONALE
        return record

    def votes_by_year(self, drep_id: str) -> dict[int, list[dict[str, Any]]]:
        """
        Fetch, validate and process every vote, grouped by block-time year.

        Raises:
            VotesUnavailable: If Koios does not return the vote list
        """
        proposals = self.koios_client.voter_proposal_list(drep_id)
        votes = self.koios_client.drep_votes(drep_id)
        if votes is None:
            raise VotesUnavailable(f"Could not fetch votes for DRep {drep_id}")

        grouped: dict[int, list[dict[str, Any]]] = defaultdict(list)
        for vote in votes:
            if not validate_vote(vote):
                continue
            record = self.process_vote(vote, proposals.get(vote["proposal_id"], {}))
            grouped[int(record["blockTime"][:4])].append(record)

        logger.info(
            f"Processed {sum(len(v) for v in grouped.values())} votes "
            f"across {len(grouped)} years"
        )
        return dict(grouped)
