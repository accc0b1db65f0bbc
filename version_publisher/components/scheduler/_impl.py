"""
PublishScheduler - reconciles scheduled revisions into the live read path.

Each pass:
1. Resolve the items that have two or more published revisions
2. Per item (concurrently, isolated): re-read the group, select the winner,
   then in one transaction demote the other due revisions and materialize the
   winner with its catalog entry; notify the author when the live version
   actually changed

Key behaviors:
- No locks: selection is a pure function of persisted values, demotion is
  idempotent and conditional, activation is a compare-and-set on the stored
  live version. Overlapping passes converge to the same state.
- Demotion and materialization commit together. A failed item keeps its
  published revisions, so the next pass still lists it and completes it.
- A failure in one item is logged and reported; other items proceed.
- A failed or slow notification never undoes committed state.
- Cancellation is not swallowed; an interrupted item heals on the next pass.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from uuid import UUID

from version_publisher.components.scheduler.models import (
    GroupOutcome,
    PassReport,
    VersionGroup,
)
from version_publisher.components.scheduler.selector import select_activation
from version_publisher.core.entities import Revision
from version_publisher.core.ports.db import (
    AuthorDirectoryPort,
    Demotion,
    LivePageRepoPort,
    RevisionRepoPort,
)
from version_publisher.core.ports.email import EmailPort
from version_publisher.core.ports.time import ClockPort
from version_publisher.core.services.catalog import CatalogSynchronizer
from version_publisher.core.services.materialize import PageMaterializer
from version_publisher.core.services.notify import (
    NotificationConfig,
    NotificationDispatcher,
)

logger = logging.getLogger(__name__)

# An item needs reconciling once two revisions are published at the same time
MIN_PUBLISHED_REVISIONS = 2


# --- Configuration ---


@dataclass(frozen=True)
class SchedulerConfig:
    """Scheduler configuration from rules."""

    max_concurrent_groups: int = 8
    summary_max_length: int = 512
    notifications: NotificationConfig = field(default_factory=NotificationConfig)


DEFAULT_CONFIG = SchedulerConfig()


# --- Version-Set Resolver ---


class VersionSetResolver:
    """Finds items needing reconciliation and loads their revisions."""

    def __init__(self, revisions: RevisionRepoPort) -> None:
        self._revisions = revisions

    async def list_candidates(self) -> list[int]:
        """Item ids with two or more non-deleted published revisions."""
        item_ids = await self._revisions.list_reconcilable_item_ids(MIN_PUBLISHED_REVISIONS)
        return sorted(set(item_ids))

    async def load_group(self, item_id: int) -> VersionGroup | None:
        """
        Load the current revisions of one item.

        Returns None if the item no longer qualifies (a concurrent pass or an
        author action changed it since it was listed).
        """
        revisions = [r for r in await self._revisions.list_by_item(item_id) if not r.is_deleted]
        group = VersionGroup(item_id=item_id, revisions=tuple(revisions))
        if len(group.published) < MIN_PUBLISHED_REVISIONS:
            return None
        return group


# --- State Mutator ---


class StateMutator:
    """
    Plans the demotion of superseded revisions.

    Each demotion carries the published value the pass read, so the store
    clears it only if no author action or newer pass changed it since. The
    writes themselves commit with the activation.
    """

    def demotions_for(self, losers: Iterable[Revision]) -> tuple[Demotion, ...]:
        return tuple(
            Demotion(revision_id=r.id, expected_published=r.published)
            for r in losers
            if r.published is not None
        )

    def demoted_versions(
        self, losers: Iterable[Revision], demoted_ids: Iterable[UUID]
    ) -> tuple[int, ...]:
        """Version numbers of the losers the store actually cleared, ascending."""
        cleared = set(demoted_ids)
        return tuple(sorted(r.version_number for r in losers if r.id in cleared))


# --- Orchestrator ---


class PublishScheduler:
    """
    Orchestrates one reconciliation pass over a single tenant store.

    All collaborators are injected; run_once() is safe to call repeatedly
    and concurrently.
    """

    def __init__(
        self,
        *,
        revisions: RevisionRepoPort,
        pages: LivePageRepoPort,
        directory: AuthorDirectoryPort,
        sender: EmailPort,
        clock: ClockPort | None = None,
        config: SchedulerConfig | None = None,
    ) -> None:
        self._clock = clock
        self._config = config or DEFAULT_CONFIG

        self._resolver = VersionSetResolver(revisions)
        self._mutator = StateMutator()
        self._materializer = PageMaterializer(
            pages, CatalogSynchronizer(self._config.summary_max_length)
        )
        self._notifier = NotificationDispatcher(
            directory, sender, pages, self._config.notifications
        )

    @property
    def config(self) -> SchedulerConfig:
        return self._config

    def _now_utc(self) -> datetime:
        if self._clock:
            return self._clock.now_utc()
        return datetime.now(UTC)

    async def run_once(self) -> PassReport:
        """
        Run one reconciliation pass.

        Returns:
            PassReport with one outcome per item examined. Errors are
            reported, not raised.
        """
        now = self._now_utc()
        logger.info("Publisher pass starting at %s", now.isoformat())

        try:
            item_ids = await self._resolver.list_candidates()
        except Exception as e:
            logger.exception("Publisher pass could not list candidate items")
            return PassReport(started_at=now, finished_at=self._now_utc(), error=str(e))

        semaphore = asyncio.Semaphore(self._config.max_concurrent_groups)

        async def guarded(item_id: int) -> GroupOutcome:
            async with semaphore:
                return await self._process_group(item_id, now)

        outcomes = await asyncio.gather(*(guarded(item_id) for item_id in item_ids))

        report = PassReport(
            started_at=now,
            outcomes=tuple(outcomes),
            finished_at=self._now_utc(),
        )
        logger.info(
            "Publisher pass finished: %d items, %d activated, %d demoted, %d failed",
            report.groups_scanned,
            report.activated,
            report.demoted,
            report.failed,
        )
        return report

    async def _process_group(self, item_id: int, now: datetime) -> GroupOutcome:
        """
        Isolation boundary for one item.

        Everything a failed item would have written rolls back with its
        activation commit, so the failure record carries no demotions.
        """
        try:
            return await self._reconcile(item_id, now)
        except Exception as e:
            logger.exception("Item %s: reconciliation failed", item_id)
            return GroupOutcome(item_id=item_id, action="failed", error=str(e))

    async def _reconcile(self, item_id: int, now: datetime) -> GroupOutcome:
        group = await self._resolver.load_group(item_id)
        if group is None:
            return GroupOutcome(item_id=item_id, action="no_action")

        selection = select_activation(group.revisions, now)
        if selection is None:
            logger.debug("Item %s: all published versions are scheduled for the future", item_id)
            return GroupOutcome(item_id=item_id, action="no_action")

        winner = selection.winner
        result = await self._materializer.materialize(
            winner, now, self._mutator.demotions_for(selection.losers)
        )
        demoted = self._mutator.demoted_versions(selection.losers, result.demoted)

        outcome = GroupOutcome(
            item_id=item_id,
            action="demoted_only" if demoted else "unchanged",
            winner_version=winner.version_number,
            demoted_versions=demoted,
        )
        if not result.transitioned:
            return outcome

        logger.info(
            "Item %s: activated version %s (published %s, previously %s)",
            item_id,
            winner.version_number,
            winner.published.isoformat() if winner.published else None,
            result.previous_version,
        )

        notification = await self._notifier.notify_activation(winner)
        return replace(outcome, action="activated", notification=notification)
