"""
Activation selector.

Pure function: given the revisions of one item and the current instant,
choose the single revision that should be live.

- Due: published <= now (inclusive)
- Pending: published > now; never touched
- Winner: latest published among Due; ties go to the higher version number
- Losers: every other Due revision

Deleted and unpublished revisions are ignored. The result depends only on
the revisions' values, never on their order.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import cast

from version_publisher.components.scheduler.models import Selection
from version_publisher.core.entities import Revision


def _activation_key(revision: Revision) -> tuple[datetime, int, str]:
    """Sort key for due revisions; partition() only yields ones with published set."""
    # id is a last resort so equal (published, version) pairs stay deterministic
    return (cast(datetime, revision.published), revision.version_number, str(revision.id))


def _version_key(revision: Revision) -> tuple[int, str]:
    return (revision.version_number, str(revision.id))


def partition(
    revisions: Iterable[Revision],
    now: datetime,
) -> tuple[list[Revision], list[Revision]]:
    """Split published, non-deleted revisions into (due, pending)."""
    due: list[Revision] = []
    pending: list[Revision] = []
    for revision in revisions:
        if revision.published is None or revision.is_deleted:
            continue
        if revision.published <= now:
            due.append(revision)
        else:
            pending.append(revision)
    return due, pending


def select_activation(revisions: Iterable[Revision], now: datetime) -> Selection | None:
    """
    Choose the live revision of a group.

    Returns:
        Selection, or None when no revision is due yet.
    """
    due, pending = partition(revisions, now)
    if not due:
        return None

    winner = max(due, key=_activation_key)
    losers = sorted((r for r in due if r.id != winner.id), key=_version_key)

    return Selection(
        winner=winner,
        losers=tuple(losers),
        pending=tuple(sorted(pending, key=_version_key)),
    )
