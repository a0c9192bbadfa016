"""Lifecycle status of a group from its latest change snapshot.

Pure and total: every input, including a missing snapshot or one with all
counters unset, maps to exactly one status. No I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from storage.models import GroupStatusSnapshot


class GroupStatus(Enum):
    """Lifecycle labels shown on group cards."""
    NEW = "New"
    SCALING = "Scaling"
    INACTIVE = "Inactive"
    STABLE = "Stable"


@dataclass(frozen=True)
class StatusRules:
    """Thresholds for classification.

    Attributes:
        new_window_days: A group younger than this without a prior
            snapshot is New.
        inactive_cycles: Snapshot cycles without growth before a group is
            Inactive.
    """

    new_window_days: int = 7
    inactive_cycles: int = 3


@dataclass(frozen=True)
class StatusResult:
    """Classification outcome with the delta to display."""

    status: GroupStatus
    diff_count: int = 0


def classify(
    snapshot: Optional[GroupStatusSnapshot],
    created_at: Optional[datetime],
    now: datetime,
    rules: StatusRules = StatusRules(),
) -> StatusResult:
    """Classify a group.

    Rules are checked in order:
        1. New: no prior snapshot and created within the rolling window.
        2. Scaling: members were added since the previous snapshot.
        3. Inactive: no growth for rules.inactive_cycles cycles.
        4. Stable: everything else.

    Args:
        snapshot: Latest snapshot, or None if the job has not seen the group.
        created_at: Group creation time, if known.
        now: Reference time for the rolling window.
        rules: Classification thresholds.

    Returns:
        StatusResult with the status and the delta count (0 unless Scaling).
    """
    has_prior = snapshot is not None and snapshot.previous_snapshot_at is not None
    if not has_prior and _is_recent(created_at, now, rules.new_window_days):
        return StatusResult(GroupStatus.NEW)

    if snapshot is None:
        return StatusResult(GroupStatus.STABLE)

    new_count = snapshot.new_count or 0
    if new_count > 0:
        diff = snapshot.diff_count if snapshot.diff_count is not None else new_count
        return StatusResult(GroupStatus.SCALING, diff_count=diff)

    if snapshot.stale_cycles is not None and snapshot.stale_cycles >= rules.inactive_cycles:
        return StatusResult(GroupStatus.INACTIVE)

    return StatusResult(GroupStatus.STABLE)


def _is_recent(created_at: Optional[datetime], now: datetime, window_days: int) -> bool:
    if created_at is None:
        return False
    return _naive_utc(created_at) >= _naive_utc(now) - timedelta(days=window_days)


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
