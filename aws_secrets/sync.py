"""Reconciling a local ``.env`` mapping with the remote secret."""

import logging
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, Field

from .store import SecretStoreAdapter

logger = logging.getLogger(__name__)


class SyncMode(str, Enum):
    """How local entries are applied to the remote secret."""

    MERGE = "merge"
    OVERWRITE = "overwrite"


class SyncPlan(BaseModel):
    """Outcome of one sync: the map to write and what differs from the remote."""

    mode: SyncMode
    target: Dict[str, str] = Field(default_factory=dict)
    added: List[str] = Field(default_factory=list)
    changed: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)
    unchanged: List[str] = Field(default_factory=list)

    @property
    def modified_count(self) -> int:
        """Number of keys added or changed."""
        return len(self.added) + len(self.changed)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.changed or self.removed)


def plan_sync(local: Dict[str, str], remote: Dict[str, str], mode: SyncMode) -> SyncPlan:
    """
    Compute the target mapping and diff for a sync.

    Merge overlays local onto remote and never removes anything. Overwrite
    makes the target exactly ``local`` and reports remote-only keys as removed.
    """
    mode = SyncMode(mode)
    plan = SyncPlan(mode=mode)

    for key, value in local.items():
        if key not in remote:
            plan.added.append(key)
        elif remote[key] != value:
            plan.changed.append(key)
        else:
            plan.unchanged.append(key)

    if mode == SyncMode.MERGE:
        plan.target = {**remote, **local}
    else:
        plan.target = dict(local)
        plan.removed = [key for key in remote if key not in local]

    return plan


def sync_secrets(
    store: SecretStoreAdapter,
    local: Dict[str, str],
    mode: SyncMode = SyncMode.MERGE,
    dry_run: bool = False,
) -> SyncPlan:
    """
    Push ``local`` to the remote secret.

    The remote snapshot is read in both modes so the diff is accurate. Unless
    ``dry_run`` is set, the target is written with exactly one update call.
    """
    remote = store.fetch()
    plan = plan_sync(local, remote, mode)
    logger.debug(
        "Sync plan (%s): %d added, %d changed, %d removed",
        plan.mode.value,
        len(plan.added),
        len(plan.changed),
        len(plan.removed),
    )

    if dry_run:
        return plan

    store.update(plan.target)
    return plan
