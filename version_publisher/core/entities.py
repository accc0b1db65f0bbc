"""
Domain entities for version publishing.

- Revision: one version row of a logical content item (grouped by item_id)
- LivePage: read-optimized mirror of the live revision, one per item
- CatalogEntry: denormalized listing row, one per item
- Author: directory record used to address activation notices
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

# --- Enums / Literals ---
RevisionStatus = Literal["active", "inactive", "deleted"]
AuthorStatus = Literal["active", "disabled"]


def utc_now() -> datetime:
    return datetime.now(UTC)


def as_utc(value: datetime | None) -> datetime | None:
    """Naive datetimes are taken as UTC; aware ones keep their offset."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# --- Revisions ---


class Revision(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    item_id: int
    version_number: int
    title: str
    content: str = ""
    url_path: str
    introduction: str = ""

    # None = draft / not scheduled; set = "go live at" chosen by the author
    published: datetime | None = None
    status: RevisionStatus = "active"

    author_id: str | None = None
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("published", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Compare against an aware now without offset-naive errors."""
        return as_utc(v)

    @property
    def is_deleted(self) -> bool:
        return self.status == "deleted"


# --- Read path ---


class LivePage(BaseModel):
    item_id: int
    url_path: str
    title: str
    content: str = ""
    version_number: int
    status: RevisionStatus = "active"
    published: datetime | None = None
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("published", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


class CatalogEntry(BaseModel):
    item_id: int
    title: str
    summary: str = ""
    status: RevisionStatus = "active"
    updated_at: datetime = Field(default_factory=utc_now)
    published_at: datetime | None = None
    url_path: str

    @field_validator("updated_at", "published_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)


# --- Authors ---


class Author(BaseModel):
    id: str
    email: str | None = None
    display_name: str = ""
    email_confirmed: bool = False
    status: AuthorStatus = "active"

    @property
    def is_usable(self) -> bool:
        """Whether activation notices can be addressed to this author."""
        if self.status != "active" or not self.email:
            return False
        email = self.email.strip()
        return bool(email) and "@" in email
