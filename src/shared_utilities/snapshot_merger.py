"""
Reconciliation of freshly fetched records with persisted snapshots.

Three policies are used by the update tools:

* monotonic merge for periodic counters (``merge_monotonic``): absent keys
  are inserted, past periods are frozen, and the current period only moves
  forward;
* diff-and-accumulate for the DRep delegator timeline
  (``merge_delegation_timeline``): the roster is replaced wholesale while a
  per-epoch summary is kept forever;
* first-write-wins for the rationale cache (``merge_first_write_wins``).

Contributor rosters are not merged at all; ``build_contributor_roster``
recomputes them from the raw events of a run.
"""

import calendar
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class MergeOutcome:
    """Merged snapshot plus the keys touched by the merge."""

    snapshot: dict[str, Any]
    inserted: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    unchanged: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.inserted or self.updated)


def _now(now: datetime | None) -> datetime:
    return now or datetime.now(timezone.utc)


def current_month_name(now: datetime | None = None) -> str:
    """English month name of ``now`` (wall clock by default), e.g. "March"."""
    return calendar.month_name[_now(now).month]


def current_month_key(now: datetime | None = None) -> str:
    """``YYYY-MM`` key of the month containing ``now``."""
    return _now(now).strftime("%Y-%m")


def previous_month_key(now: datetime | None = None) -> str:
    """``YYYY-MM`` key of the calendar month before ``now``."""
    now = _now(now)
    year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
    return f"{year:04d}-{month:02d}"


def _moves_forward(stored: Mapping, fetched: Mapping, metrics: Iterable[str]) -> bool:
    """True when no metric shrinks and at least one grows."""
    grew = False
    for metric in metrics:
        old = stored.get(metric) or 0
        new = fetched.get(metric) or 0
        if new < old:
            return False
        if new > old:
            grew = True
    return grew


def merge_monotonic(
    stored: Mapping[str, dict] | None,
    fetched: Mapping[str, dict],
    metrics: Iterable[str],
    current_key: str | None,
    freeze_past: bool = True,
) -> MergeOutcome:
    """
    Merge periodic counters without ever regressing a stored value.

    Args:
        stored: Previously persisted snapshot keyed by period
        fetched: Newly observed records keyed by period
        metrics: Numeric fields compared when deciding to overwrite
        current_key: Key of the period still in progress
        freeze_past: When False every key follows the current-period rule

    Returns:
        MergeOutcome whose snapshot keeps stored key order, new keys appended
    """
    metrics = list(metrics)
    snapshot = {key: dict(value) for key, value in (stored or {}).items()}
    outcome = MergeOutcome(snapshot=snapshot)

    for key, record in fetched.items():
        if key not in snapshot:
            snapshot[key] = dict(record)
            outcome.inserted.append(key)
            continue

        if freeze_past and key != current_key:
            outcome.unchanged.append(key)
            continue

        if _moves_forward(snapshot[key], record, metrics):
            logger.debug(f"Updating {key}: {snapshot[key]} -> {record}")
            snapshot[key] = {**snapshot[key], **record}
            outcome.updated.append(key)
        else:
            outcome.unchanged.append(key)

    return outcome


@dataclass
class DelegationDiff:
    """Roster changes between two runs, keyed by stake address."""

    new: list[dict] = field(default_factory=list)
    removed: list[dict] = field(default_factory=list)
    retained: list[dict] = field(default_factory=list)

    @property
    def new_amount(self) -> int:
        return sum(int(d.get("amount") or 0) for d in self.new)

    @property
    def removed_amount(self) -> int:
        return sum(int(d.get("amount") or 0) for d in self.removed)


def diff_delegators(old: Iterable[dict], new: Iterable[dict]) -> DelegationDiff:
    """
    Classify delegators as new, removed or retained.

    Args:
        old: Previously stored roster entries with ``stake_address``
        new: Latest roster entries with ``stake_address``

    Returns:
        DelegationDiff with entries in roster order
    """
    old_by_address = {d["stake_address"]: d for d in old}
    new_addresses = set()
    diff = DelegationDiff()

    for delegator in new:
        address = delegator["stake_address"]
        new_addresses.add(address)
        if address in old_by_address:
            diff.retained.append(delegator)
        else:
            diff.new.append(delegator)

    diff.removed = [d for a, d in old_by_address.items() if a not in new_addresses]
    return diff


def merge_delegation_timeline(
    timeline: Mapping[str, Any] | None,
    delegators: list[dict],
    epoch_no: int,
    now: datetime | None = None,
) -> tuple[dict[str, Any], DelegationDiff]:
    """
    Fold the latest delegator roster into the timeline.

    The ``delegations`` list is replaced by the latest roster. The ``epochs``
    map only ever gains entries; a rerun within the same epoch adds its deltas
    to that epoch's summary, and the cumulative total is recomputed from the
    latest roster.

    Args:
        timeline: Stored timeline (``delegations`` and ``epochs``)
        delegators: Latest roster with ``stake_address`` and ``amount``
        epoch_no: Current chain epoch
        now: Timestamp recorded as ``lastUpdated``

    Returns:
        Tuple of (new timeline, diff against the stored roster)
    """
    timeline = dict(timeline or {})
    epochs = {key: dict(value) for key, value in timeline.get("epochs", {}).items()}
    diff = diff_delegators(timeline.get("delegations", []), delegators)
    total_amount = sum(int(d.get("amount") or 0) for d in delegators)

    key = str(epoch_no)
    summary = epochs.get(key) or {
        "epoch_no": epoch_no,
        "new_delegations": 0,
        "new_delegation_amount": 0,
        "removed_delegations": 0,
        "removed_delegation_amount": 0,
    }
    summary["new_delegations"] += len(diff.new)
    summary["new_delegation_amount"] += diff.new_amount
    summary["removed_delegations"] += len(diff.removed)
    summary["removed_delegation_amount"] += diff.removed_amount
    summary["total_delegators"] = len(delegators)
    summary["total_delegation_amount"] = total_amount
    epochs[key] = summary

    timeline["lastUpdated"] = _now(now).isoformat()
    timeline["currentEpoch"] = epoch_no
    timeline["delegations"] = [
        {
            "stake_address": d["stake_address"],
            "amount": int(d.get("amount") or 0),
            "epoch_no": d.get("epoch_no"),
        }
        for d in delegators
    ]
    timeline["epochs"] = dict(sorted(epochs.items(), key=lambda item: int(item[0])))

    logger.info(
        f"Epoch {epoch_no}: {len(diff.new)} new, {len(diff.removed)} removed, "
        f"total {total_amount} lovelace"
    )
    return timeline, diff


def merge_first_write_wins(
    cache: Mapping[str, Any] | None, discovered: Mapping[str, Any]
) -> tuple[dict[str, Any], list[str]]:
    """
    Insert discovered entries whose key is absent; never touch existing ones.

    Returns:
        Tuple of (merged cache, keys that were added)
    """
    merged = dict(cache or {})
    added = []
    for key, value in discovered.items():
        if key in merged:
            continue
        merged[key] = value
        added.append(key)
    return merged, added


@dataclass
class ContributionEvent:
    """A single commit or merged pull request attributed to a login."""

    login: str
    avatar_url: str | None
    repository: str
    kind: str  # "commit" or "pull_request"
    timestamp: str


def build_contributor_roster(events: Iterable[ContributionEvent]) -> dict[str, Any]:
    """
    Recompute the contributor roster from scratch by summation.

    Args:
        events: Every contribution observed in this run

    Returns:
        Roster with contributors sorted by contributions and totals
    """
    by_login: dict[str, dict] = {}

    for event in events:
        contributor = by_login.setdefault(
            event.login,
            {
                "login": event.login,
                "avatar_url": event.avatar_url,
                "commits": 0,
                "pull_requests": 0,
                "contributions": 0,
                "repositories": {},
            },
        )
        repo = contributor["repositories"].setdefault(
            event.repository,
            {
                "name": event.repository,
                "commits": 0,
                "pull_requests": 0,
                "contributions": 0,
                "commit_timestamps": [],
                "pr_timestamps": [],
            },
        )

        if event.kind == "commit":
            contributor["commits"] += 1
            repo["commits"] += 1
            repo["commit_timestamps"].append(event.timestamp)
        else:
            contributor["pull_requests"] += 1
            repo["pull_requests"] += 1
            repo["pr_timestamps"].append(event.timestamp)
        contributor["contributions"] += 1
        repo["contributions"] += 1

    contributors = []
    for contributor in by_login.values():
        repositories = list(contributor["repositories"].values())
        for repo in repositories:
            repo["commit_timestamps"].sort(reverse=True)
            repo["pr_timestamps"].sort(reverse=True)
        repositories.sort(key=lambda r: (-r["contributions"], r["name"]))
        contributors.append({**contributor, "repositories": repositories})

    contributors.sort(key=lambda c: (-c["contributions"], c["login"]))

    return {
        "unique_count": len(contributors),
        "contributors": contributors,
        "total_pull_requests": sum(c["pull_requests"] for c in contributors),
        "total_commits": sum(c["commits"] for c in contributors),
        "total_contributions": sum(c["contributions"] for c in contributors),
    }
