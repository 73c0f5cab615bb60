"""
DRep delegation snapshot and per-epoch timeline
"""

from datetime import datetime, timezone
from typing import Any

from ..shared_utilities.koios_client import KoiosClient
from ..shared_utilities.logging_config import get_logger
from ..shared_utilities.snapshot_merger import merge_delegation_timeline
from ..shared_utilities.snapshot_store import SnapshotStore

logger = get_logger(__name__)

DELEGATION_INFO_PATH = "drep-voting/drep-delegation-info.json"
DELEGATION_TIMELINE_PATH = "drep-voting/delegation-timeline.json"


class DelegationDataUnavailable(Exception):
    """Raised when Koios does not return the delegator roster or the tip."""

    pass


def build_delegation_info(
    drep_id: str,
    delegators: list[dict],
    drep_info: dict | None,
    now: datetime,
) -> dict[str, Any]:
    """
    Summary of the current delegation to a DRep.

    The delegator total is kept as a string since lovelace sums exceed the
    range JSON consumers can represent exactly.
    """
    total = sum(int(d.get("amount") or 0) for d in delegators)
    return {
        "timestamp": now.isoformat(),
        "drepId": drep_id,
        "totalDelegators": len(delegators),
        "totalDelegationFromDelegators": str(total),
        "totalAmountDelegatedToDRep": (drep_info or {}).get("amount") or "N/A",
        "drepInfo": drep_info,
        "delegators": delegators,
    }


class DelegationTracker:
    """Fetches the delegator roster and folds it into the stored timeline."""

    def __init__(
        self,
        koios_client: KoiosClient,
        store: SnapshotStore,
        drep_id: str,
        now: datetime | None = None,
    ):
        self.koios_client = koios_client
        self.store = store
        self.drep_id = drep_id
        self.now = now or datetime.now(timezone.utc)

    def update(self) -> dict[str, Any]:
        """
        Refresh both delegation files.

        Raises:
            DelegationDataUnavailable: If the roster or current epoch cannot
                be fetched; nothing is written in that case
        """
        delegators = self.koios_client.drep_delegators(self.drep_id)
        if delegators is None:
            raise DelegationDataUnavailable(
                f"Could not fetch delegators for DRep {self.drep_id}"
            )
        epoch_no = self.koios_client.current_epoch()
        if epoch_no is None:
            raise DelegationDataUnavailable("Could not fetch the current epoch")
        drep_info = self.koios_client.drep_info(self.drep_id)

        info = build_delegation_info(self.drep_id, delegators, drep_info, self.now)
        self.store.save_json(DELEGATION_INFO_PATH, info)
        logger.info(
            f"{info['totalDelegators']} delegators, "
            f"{info['totalDelegationFromDelegators']} lovelace delegated"
        )

        stored = self.store.load_json(DELEGATION_TIMELINE_PATH, default={})
        timeline, _ = merge_delegation_timeline(stored, delegators, epoch_no, self.now)
        self.store.save_json(DELEGATION_TIMELINE_PATH, timeline)
        return timeline
