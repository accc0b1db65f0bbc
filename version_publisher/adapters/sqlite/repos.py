"""
SQLite repositories for the publisher.

sqlite3 is blocking, so every public method is async and runs its work in a
worker thread via asyncio.to_thread. Each call opens its own connection.

Activation (loser demotion plus live page and catalog upsert) runs in one
BEGIN IMMEDIATE transaction so the checks and the writes see the same rows.
"""

from __future__ import annotations

import asyncio
import sqlite3
from collections.abc import Callable, Sequence
from datetime import UTC, datetime
from typing import Any, TypeVar
from uuid import UUID

from version_publisher.core.entities import (
    Author,
    CatalogEntry,
    LivePage,
    Revision,
)
from version_publisher.core.errors import StoreError
from version_publisher.core.ports.db import ActivationCommit, Demotion

T = TypeVar("T")


# Helper to convert sqlite rows to dicts
def dict_factory(cursor: sqlite3.Cursor, row: Any) -> dict[str, Any]:
    d = {}
    for idx, col in enumerate(cursor.description):
        d[col[0]] = row[idx]
    return d


def format_dt(dt: datetime | None) -> str | None:
    """Store instants as UTC isoformat; naive values are taken as UTC."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat()


def parse_dt(s: str | None) -> datetime | None:
    if not s:
        return None
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt


class SQLiteRepoBase:
    def __init__(self, db_path: str, timeout: float = 5.0):
        self.db_path = db_path
        self.timeout = timeout

    def _get_conn(self) -> sqlite3.Connection:
        # Autocommit mode; write paths open their own transactions
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    async def _run(self, operation: str, fn: Callable[..., T], *args: Any) -> T:
        try:
            return await asyncio.to_thread(fn, *args)
        except sqlite3.Error as e:
            raise StoreError(operation, str(e)) from e


# --- Revisions ---


class SQLiteRevisionRepo(SQLiteRepoBase):
    def _row_to_revision(self, row: dict[str, Any]) -> Revision:
        return Revision(
            id=UUID(row["id"]),
            item_id=row["item_id"],
            version_number=row["version_number"],
            title=row["title"],
            content=row["content"] or "",
            url_path=row["url_path"],
            introduction=row["introduction"] or "",
            published=parse_dt(row["published"]),
            status=row["status"],
            author_id=row["author_id"],
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )

    async def list_reconcilable_item_ids(self, min_published: int = 2) -> list[int]:
        return await self._run(
            "list_reconcilable_item_ids", self._list_reconcilable_item_ids, min_published
        )

    def _list_reconcilable_item_ids(self, min_published: int) -> list[int]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT item_id FROM revisions
                WHERE status != 'deleted' AND published IS NOT NULL
                GROUP BY item_id
                HAVING COUNT(*) >= ?
                ORDER BY item_id ASC
            """,
                (min_published,),
            ).fetchall()
            return [row["item_id"] for row in rows]
        finally:
            conn.close()

    async def list_by_item(self, item_id: int) -> list[Revision]:
        return await self._run("list_by_item", self._list_by_item, item_id)

    def _list_by_item(self, item_id: int) -> list[Revision]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM revisions
                WHERE item_id = ? AND status != 'deleted'
                ORDER BY version_number ASC
            """,
                (item_id,),
            ).fetchall()
            return [self._row_to_revision(row) for row in rows]
        finally:
            conn.close()

    async def get_by_id(self, revision_id: UUID) -> Revision | None:
        return await self._run("get_revision", self._get_by_id, revision_id)

    def _get_by_id(self, revision_id: UUID) -> Revision | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM revisions WHERE id = ?", (str(revision_id),)
            ).fetchone()
            return self._row_to_revision(row) if row else None
        finally:
            conn.close()

    async def save(self, revision: Revision) -> Revision:
        return await self._run("save_revision", self._save, revision)

    def _save(self, revision: Revision) -> Revision:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO revisions (
                    id, item_id, version_number, title, content, url_path,
                    introduction, published, status, author_id, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    item_id=excluded.item_id,
                    version_number=excluded.version_number,
                    title=excluded.title,
                    content=excluded.content,
                    url_path=excluded.url_path,
                    introduction=excluded.introduction,
                    published=excluded.published,
                    status=excluded.status,
                    author_id=excluded.author_id,
                    updated_at=excluded.updated_at
            """,
                (
                    str(revision.id),
                    revision.item_id,
                    revision.version_number,
                    revision.title,
                    revision.content,
                    revision.url_path,
                    revision.introduction,
                    format_dt(revision.published),
                    revision.status,
                    revision.author_id,
                    format_dt(revision.updated_at),
                ),
            )
            return revision
        finally:
            conn.close()


def _holds_published(conn: sqlite3.Connection, revision_id: UUID, expected: datetime) -> bool:
    """True if the revision is not deleted and still has the expected published instant."""
    row = conn.execute(
        "SELECT published, status FROM revisions WHERE id = ?",
        (str(revision_id),),
    ).fetchone()
    # Compare parsed instants so legacy text formats still match
    return (
        row is not None
        and row["status"] != "deleted"
        and parse_dt(row["published"]) == parse_dt(format_dt(expected))
    )


# --- Live pages ---


class SQLiteLivePageRepo(SQLiteRepoBase):
    def _row_to_page(self, row: dict[str, Any]) -> LivePage:
        return LivePage(
            item_id=row["item_id"],
            url_path=row["url_path"],
            title=row["title"],
            content=row["content"] or "",
            version_number=row["version_number"],
            status=row["status"],
            published=parse_dt(row["published"]),
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
        )

    async def get_by_item(self, item_id: int) -> LivePage | None:
        return await self._run("get_live_page", self._get_by_item, item_id)

    def _get_by_item(self, item_id: int) -> LivePage | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM live_pages WHERE item_id = ?", (item_id,)
            ).fetchone()
            return self._row_to_page(row) if row else None
        finally:
            conn.close()

    async def get_by_url_path(self, url_path: str) -> LivePage | None:
        return await self._run("get_live_page_by_url", self._get_by_url_path, url_path)

    def _get_by_url_path(self, url_path: str) -> LivePage | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM live_pages WHERE url_path = ? ORDER BY item_id ASC LIMIT 1",
                (url_path,),
            ).fetchone()
            return self._row_to_page(row) if row else None
        finally:
            conn.close()

    async def commit_activation(
        self,
        page: LivePage,
        entry: CatalogEntry,
        winner_id: UUID,
        winner_published: datetime,
        demotions: Sequence[Demotion] = (),
    ) -> ActivationCommit:
        return await self._run(
            "commit_activation",
            self._commit_activation,
            page,
            entry,
            winner_id,
            winner_published,
            tuple(demotions),
        )

    def _commit_activation(
        self,
        page: LivePage,
        entry: CatalogEntry,
        winner_id: UUID,
        winner_published: datetime,
        demotions: tuple[Demotion, ...],
    ) -> ActivationCommit:
        conn = self._get_conn()
        try:
            conn.execute("BEGIN IMMEDIATE")
            try:
                # A newer pass demoted or the author rescheduled our winner
                if not _holds_published(conn, winner_id, winner_published):
                    conn.execute("ROLLBACK")
                    return ActivationCommit()

                demoted: list[UUID] = []
                for demotion in demotions:
                    if not _holds_published(
                        conn, demotion.revision_id, demotion.expected_published
                    ):
                        continue
                    conn.execute(
                        "UPDATE revisions SET published = NULL WHERE id = ?",
                        (str(demotion.revision_id),),
                    )
                    demoted.append(demotion.revision_id)

                current = conn.execute(
                    "SELECT version_number FROM live_pages WHERE item_id = ?",
                    (page.item_id,),
                ).fetchone()
                if current is not None and current["version_number"] == page.version_number:
                    conn.execute("COMMIT")
                    return ActivationCommit(transitioned=False, demoted=tuple(demoted))

                conn.execute(
                    """
                    INSERT INTO live_pages (
                        item_id, url_path, title, content, version_number,
                        status, published, updated_at
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(item_id) DO UPDATE SET
                        url_path=excluded.url_path,
                        title=excluded.title,
                        content=excluded.content,
                        version_number=excluded.version_number,
                        status=excluded.status,
                        published=excluded.published,
                        updated_at=excluded.updated_at
                """,
                    (
                        page.item_id,
                        page.url_path,
                        page.title,
                        page.content,
                        page.version_number,
                        page.status,
                        format_dt(page.published),
                        format_dt(page.updated_at),
                    ),
                )
                conn.execute(
                    """
                    INSERT INTO catalog_entries (
                        item_id, title, summary, status, updated_at,
                        published_at, url_path
                    ) VALUES (?, ?, ?, ?, ?, ?, ?)
                    ON CONFLICT(item_id) DO UPDATE SET
                        title=excluded.title,
                        summary=excluded.summary,
                        status=excluded.status,
                        updated_at=excluded.updated_at,
                        published_at=excluded.published_at,
                        url_path=excluded.url_path
                """,
                    (
                        entry.item_id,
                        entry.title,
                        entry.summary,
                        entry.status,
                        format_dt(entry.updated_at),
                        format_dt(entry.published_at),
                        entry.url_path,
                    ),
                )
                conn.execute("COMMIT")
                return ActivationCommit(transitioned=True, demoted=tuple(demoted))
            except Exception:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise
        finally:
            conn.close()

    async def save(self, page: LivePage) -> LivePage:
        """Unconditional upsert, for seeding existing sites."""
        return await self._run("save_live_page", self._save, page)

    def _save(self, page: LivePage) -> LivePage:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO live_pages (
                    item_id, url_path, title, content, version_number,
                    status, published, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
                (
                    page.item_id,
                    page.url_path,
                    page.title,
                    page.content,
                    page.version_number,
                    page.status,
                    format_dt(page.published),
                    format_dt(page.updated_at),
                ),
            )
            return page
        finally:
            conn.close()


# --- Catalog ---


class SQLiteCatalogRepo(SQLiteRepoBase):
    def _row_to_entry(self, row: dict[str, Any]) -> CatalogEntry:
        return CatalogEntry(
            item_id=row["item_id"],
            title=row["title"],
            summary=row["summary"] or "",
            status=row["status"],
            updated_at=parse_dt(row["updated_at"]) or datetime.min.replace(tzinfo=UTC),
            published_at=parse_dt(row["published_at"]),
            url_path=row["url_path"],
        )

    async def get_by_item(self, item_id: int) -> CatalogEntry | None:
        return await self._run("get_catalog_entry", self._get_by_item, item_id)

    def _get_by_item(self, item_id: int) -> CatalogEntry | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM catalog_entries WHERE item_id = ?", (item_id,)
            ).fetchone()
            return self._row_to_entry(row) if row else None
        finally:
            conn.close()

    async def list_entries(self, limit: int = 50, offset: int = 0) -> list[CatalogEntry]:
        return await self._run("list_catalog_entries", self._list_entries, limit, offset)

    def _list_entries(self, limit: int, offset: int) -> list[CatalogEntry]:
        conn = self._get_conn()
        try:
            rows = conn.execute(
                """
                SELECT * FROM catalog_entries
                ORDER BY published_at DESC, item_id ASC
                LIMIT ? OFFSET ?
            """,
                (limit, offset),
            ).fetchall()
            return [self._row_to_entry(row) for row in rows]
        finally:
            conn.close()


# --- Authors ---


class SQLiteAuthorDirectory(SQLiteRepoBase):
    def _row_to_author(self, row: dict[str, Any]) -> Author:
        return Author(
            id=row["id"],
            email=row["email"],
            display_name=row["display_name"] or "",
            email_confirmed=bool(row["email_confirmed"]),
            status=row["status"],
        )

    async def lookup(self, author_id: str) -> Author | None:
        return await self._run("lookup_author", self._lookup, author_id)

    def _lookup(self, author_id: str) -> Author | None:
        conn = self._get_conn()
        try:
            row = conn.execute("SELECT * FROM authors WHERE id = ?", (author_id,)).fetchone()
            return self._row_to_author(row) if row else None
        finally:
            conn.close()

    async def save(self, author: Author) -> Author:
        return await self._run("save_author", self._save, author)

    def _save(self, author: Author) -> Author:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO authors (id, email, display_name, email_confirmed, status)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    display_name=excluded.display_name,
                    email_confirmed=excluded.email_confirmed,
                    status=excluded.status
            """,
                (
                    author.id,
                    author.email,
                    author.display_name,
                    int(author.email_confirmed),
                    author.status,
                ),
            )
            return author
        finally:
            conn.close()
