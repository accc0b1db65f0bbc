"""
Scheduler component models.

Version groups, selections and the per-pass report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal

from version_publisher.core.entities import Revision
from version_publisher.core.services.notify import NotificationStatus

# --- Group ---


@dataclass(frozen=True)
class VersionGroup:
    """All non-deleted revisions of one item, as read at the start of its reconciliation."""

    item_id: int
    revisions: tuple[Revision, ...]

    @property
    def published(self) -> tuple[Revision, ...]:
        return tuple(r for r in self.revisions if r.published is not None)


# --- Selection ---


@dataclass(frozen=True)
class Selection:
    """Result of choosing the live revision of a group."""

    winner: Revision
    losers: tuple[Revision, ...]
    pending: tuple[Revision, ...] = ()


# --- Outcomes ---


GroupAction = Literal["no_action", "demoted_only", "activated", "unchanged", "failed"]


@dataclass(frozen=True)
class GroupOutcome:
    """What one pass did to one item."""

    item_id: int
    action: GroupAction
    winner_version: int | None = None
    demoted_versions: tuple[int, ...] = ()
    notification: NotificationStatus = NotificationStatus.NOT_TRIGGERED
    error: str | None = None


@dataclass(frozen=True)
class PassReport:
    """Summary of one run_once invocation."""

    started_at: datetime
    outcomes: tuple[GroupOutcome, ...] = ()
    finished_at: datetime | None = None
    error: str | None = None

    @property
    def groups_scanned(self) -> int:
        return len(self.outcomes)

    @property
    def activated(self) -> int:
        return sum(1 for o in self.outcomes if o.action == "activated")

    @property
    def demoted(self) -> int:
        return sum(len(o.demoted_versions) for o in self.outcomes)

    @property
    def failed(self) -> int:
        return sum(1 for o in self.outcomes if o.action == "failed")

    @property
    def notified(self) -> int:
        return sum(1 for o in self.outcomes if o.notification == NotificationStatus.SENT)

    def outcome_for(self, item_id: int) -> GroupOutcome | None:
        for outcome in self.outcomes:
            if outcome.item_id == item_id:
                return outcome
        return None


@dataclass(frozen=True)
class SchedulerValidationError:
    """Scheduler error surfaced to callers of the entry points."""

    code: str
    message: str
    item_id: int | None = None


@dataclass(frozen=True)
class RunOnceOutput:
    """Output for the run_once entry point."""

    report: PassReport
    errors: list[SchedulerValidationError] = field(default_factory=list)
    success: bool = True
