"""
Persistence ports.

Each repository is scoped to one resolved tenant store; callers pass the
handle explicitly instead of resolving it from ambient state.

Concurrency contract:
- commit_activation() is one atomic unit of work. Nothing is written unless
  the winner still holds the selected published value. Each demotion clears
  published only if the loser still holds the value the caller read; a lost
  race skips that loser and is not an error. The live page and catalog entry
  are upserted only if the stored version differs from the winner's.
- A failure rolls back the whole unit, so the item still has its published
  revisions and the next pass redoes the work.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol
from uuid import UUID

from version_publisher.core.entities import (
    Author,
    CatalogEntry,
    LivePage,
    Revision,
)


@dataclass(frozen=True)
class Demotion:
    """Clear published on revision_id if it still equals expected_published."""

    revision_id: UUID
    expected_published: datetime


@dataclass(frozen=True)
class ActivationCommit:
    """What commit_activation actually wrote."""

    transitioned: bool = False
    demoted: tuple[UUID, ...] = ()


class RevisionRepoPort(Protocol):
    async def list_reconcilable_item_ids(self, min_published: int = 2) -> list[int]:
        """Items with at least min_published non-deleted revisions that have published set."""
        ...

    async def list_by_item(self, item_id: int) -> list[Revision]:
        """All non-deleted revisions of one item."""
        ...

    async def get_by_id(self, revision_id: UUID) -> Revision | None:
        ...

    async def save(self, revision: Revision) -> Revision:
        ...


class LivePageRepoPort(Protocol):
    async def get_by_item(self, item_id: int) -> LivePage | None:
        ...

    async def get_by_url_path(self, url_path: str) -> LivePage | None:
        ...

    async def commit_activation(
        self,
        page: LivePage,
        entry: CatalogEntry,
        winner_id: UUID,
        winner_published: datetime,
        demotions: Sequence[Demotion] = (),
    ) -> ActivationCommit:
        """Atomically demote the losers, materialize the winner and sync its catalog entry."""
        ...


class CatalogRepoPort(Protocol):
    async def get_by_item(self, item_id: int) -> CatalogEntry | None:
        ...

    async def list_entries(self, limit: int = 50, offset: int = 0) -> list[CatalogEntry]:
        ...


class AuthorDirectoryPort(Protocol):
    async def lookup(self, author_id: str) -> Author | None:
        """Resolve an author by id; None if unknown."""
        ...
