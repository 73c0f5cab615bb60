"""
Tests for the DRep delegation tracker.
"""

from unittest.mock import Mock

import pytest

from src.drep_delegation.main import run
from src.drep_delegation.tracker import (
    DELEGATION_INFO_PATH,
    DELEGATION_TIMELINE_PATH,
    DelegationDataUnavailable,
    DelegationTracker,
    build_delegation_info,
)


def delegator(address, amount, epoch_no=500):
    return {"stake_address": address, "amount": str(amount), "epoch_no": epoch_no}


@pytest.fixture
def koios_client():
    client = Mock()
    client.drep_delegators.return_value = [delegator("stake1a", 100), delegator("stake1b", 250)]
    client.current_epoch.return_value = 541
    client.drep_info.return_value = {"drep_id": "drep1test", "amount": "400"}
    return client


class TestBuildDelegationInfo:
    def test_totals(self, fixed_now):
        info = build_delegation_info(
            "drep1test", [delegator("stake1a", 100)], {"amount": "400"}, fixed_now
        )

        assert info["totalDelegators"] == 1
        assert info["totalDelegationFromDelegators"] == "100"
        assert info["totalAmountDelegatedToDRep"] == "400"

    def test_missing_drep_info(self, fixed_now):
        info = build_delegation_info("drep1test", [], None, fixed_now)
        assert info["totalAmountDelegatedToDRep"] == "N/A"
        assert info["totalDelegationFromDelegators"] == "0"


class TestDelegationTracker:
    def test_first_run(self, koios_client, store, fixed_now):
        timeline = DelegationTracker(koios_client, store, "drep1test", fixed_now).update()

        assert timeline["currentEpoch"] == 541
        assert timeline["epochs"]["541"]["new_delegations"] == 2
        assert timeline["epochs"]["541"]["total_delegation_amount"] == 350
        assert store.load_json(DELEGATION_INFO_PATH)["totalDelegators"] == 2

    def test_rerun_accumulates_epoch_deltas(self, koios_client, store, fixed_now):
        tracker = DelegationTracker(koios_client, store, "drep1test", fixed_now)
        tracker.update()

        koios_client.drep_delegators.return_value = [
            delegator("stake1b", 250),
            delegator("stake1c", 75),
        ]
        timeline = tracker.update()

        summary = timeline["epochs"]["541"]
        assert summary["new_delegations"] == 3
        assert summary["new_delegation_amount"] == 425
        assert summary["removed_delegations"] == 1
        assert summary["removed_delegation_amount"] == 100
        assert summary["total_delegators"] == 2
        assert [d["stake_address"] for d in timeline["delegations"]] == ["stake1b", "stake1c"]

    def test_older_epochs_are_kept(self, koios_client, store, fixed_now):
        tracker = DelegationTracker(koios_client, store, "drep1test", fixed_now)
        tracker.update()
        koios_client.current_epoch.return_value = 542

        timeline = tracker.update()

        assert list(timeline["epochs"]) == ["541", "542"]
        assert timeline["epochs"]["542"]["new_delegations"] == 0

    @pytest.mark.parametrize("failing", ["drep_delegators", "current_epoch"])
    def test_unavailable_data_writes_nothing(self, koios_client, store, fixed_now, failing):
        getattr(koios_client, failing).return_value = None

        with pytest.raises(DelegationDataUnavailable):
            DelegationTracker(koios_client, store, "drep1test", fixed_now).update()

        assert not store.exists(DELEGATION_INFO_PATH)
        assert not store.exists(DELEGATION_TIMELINE_PATH)


class TestRun:
    def test_success(self, app_config, koios_client):
        assert run(app_config, koios_client=koios_client) == 0

    def test_outage_exits_nonzero(self, app_config, koios_client):
        koios_client.drep_delegators.return_value = None
        assert run(app_config, koios_client=koios_client) == 1

    def test_missing_drep_id(self, app_config, koios_client):
        app_config.drep_id = None
        assert run(app_config, koios_client=koios_client) == 1
