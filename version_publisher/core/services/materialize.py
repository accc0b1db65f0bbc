"""
Page materializer.

Copies the winning revision into the read-optimized live page for its item,
and commits the demotion of the other due revisions in the same unit of work.

The stored version number is the idempotency key: if the live page already
mirrors the winner and there is nothing to demote, nothing is written and no
activation is reported, so repeated passes never re-notify. The repository
re-checks the same condition inside its transaction, so only one of several
overlapping passes reports the transition.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from version_publisher.core.entities import CatalogEntry, LivePage, Revision
from version_publisher.core.ports.db import Demotion, LivePageRepoPort
from version_publisher.core.services.catalog import CatalogSynchronizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MaterializeResult:
    """Outcome of materializing one winner."""

    transitioned: bool
    previous_version: int | None = None
    page: LivePage | None = None
    entry: CatalogEntry | None = None
    demoted: tuple[UUID, ...] = ()


class PageMaterializer:
    def __init__(self, pages: LivePageRepoPort, catalog: CatalogSynchronizer) -> None:
        self._pages = pages
        self._catalog = catalog

    def build_page(self, winner: Revision, now: datetime) -> LivePage:
        return LivePage(
            item_id=winner.item_id,
            url_path=winner.url_path,
            title=winner.title,
            content=winner.content,
            version_number=winner.version_number,
            status="active",
            published=winner.published,
            updated_at=now,
        )

    async def materialize(
        self,
        winner: Revision,
        now: datetime,
        demotions: Sequence[Demotion] = (),
    ) -> MaterializeResult:
        """
        Upsert the live page (and catalog entry) for winner if it is not live yet.

        Args:
            winner: The selected revision; must have published set.
            now: Instant of the current pass.
            demotions: Losers to clear in the same transaction.

        Returns:
            MaterializeResult; transitioned is True only when this call
            changed the live version, demoted lists the losers it cleared.
        """
        if winner.published is None:
            raise ValueError(f"Revision {winner.id} has no published time to materialize")

        current = await self._pages.get_by_item(winner.item_id)
        previous_version = current.version_number if current else None

        if previous_version == winner.version_number and not demotions:
            return MaterializeResult(transitioned=False, previous_version=previous_version)

        page = self.build_page(winner, now)
        entry = self._catalog.entry_for(winner, now)

        commit = await self._pages.commit_activation(
            page,
            entry,
            winner_id=winner.id,
            winner_published=winner.published,
            demotions=demotions,
        )
        if not commit.transitioned:
            if previous_version != winner.version_number:
                # Another pass got there first, or the winner changed under us
                logger.debug(
                    "Item %s: activation of version %s already applied elsewhere",
                    winner.item_id,
                    winner.version_number,
                )
            return MaterializeResult(
                transitioned=False,
                previous_version=previous_version,
                demoted=commit.demoted,
            )

        return MaterializeResult(
            transitioned=True,
            previous_version=previous_version,
            page=page,
            entry=entry,
            demoted=commit.demoted,
        )
