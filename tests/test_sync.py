"""Tests for sync planning and application."""

from unittest.mock import MagicMock

import pytest

from aws_secrets.store import SecretStoreAdapter
from aws_secrets.sync import SyncMode, plan_sync, sync_secrets

LOCAL = {"A": "1"}
REMOTE = {"A": "0", "B": "2"}


def _store(remote):
    store = MagicMock(spec=SecretStoreAdapter)
    store.fetch.return_value = dict(remote)
    return store


def test_merge_keeps_remote_only_keys():
    plan = plan_sync(LOCAL, REMOTE, SyncMode.MERGE)

    assert plan.target == {"A": "1", "B": "2"}
    assert plan.changed == ["A"]
    assert plan.added == []
    assert plan.removed == []


def test_overwrite_drops_remote_only_keys():
    plan = plan_sync(LOCAL, REMOTE, SyncMode.OVERWRITE)

    assert plan.target == {"A": "1"}
    assert plan.changed == ["A"]
    assert plan.removed == ["B"]


def test_diff_classification():
    """Every local key is added, changed or unchanged."""
    local = {"NEW": "x", "SAME": "s", "DIFF": "d2", "EMPTY": ""}
    remote = {"SAME": "s", "DIFF": "d1", "EMPTY": "", "GONE": "g"}

    plan = plan_sync(local, remote, "merge")

    assert plan.added == ["NEW"]
    assert plan.changed == ["DIFF"]
    assert plan.unchanged == ["SAME", "EMPTY"]
    assert plan.modified_count == 2
    assert plan.has_changes


def test_empty_remote_value_counts_as_present():
    plan = plan_sync({"K": "v"}, {"K": ""}, SyncMode.OVERWRITE)
    assert plan.changed == ["K"]
    assert plan.added == []


def test_no_changes():
    plan = plan_sync({"A": "1"}, {"A": "1"}, SyncMode.MERGE)
    assert not plan.has_changes
    assert plan.modified_count == 0


def test_invalid_mode_rejected():
    with pytest.raises(ValueError):
        plan_sync(LOCAL, REMOTE, "replace")


def test_sync_updates_once():
    store = _store(REMOTE)

    plan = sync_secrets(store, LOCAL, SyncMode.MERGE)

    store.fetch.assert_called_once_with()
    store.update.assert_called_once_with({"A": "1", "B": "2"})
    assert plan.target == {"A": "1", "B": "2"}


def test_overwrite_sync_reads_remote_for_removals():
    store = _store(REMOTE)

    plan = sync_secrets(store, LOCAL, SyncMode.OVERWRITE)

    store.update.assert_called_once_with({"A": "1"})
    assert plan.removed == ["B"]


@pytest.mark.parametrize("mode", [SyncMode.MERGE, SyncMode.OVERWRITE])
def test_dry_run_never_writes(mode):
    store = _store(REMOTE)

    dry = sync_secrets(store, LOCAL, mode, dry_run=True)
    store.update.assert_not_called()

    real = sync_secrets(_store(REMOTE), LOCAL, mode)
    assert dry == real


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
