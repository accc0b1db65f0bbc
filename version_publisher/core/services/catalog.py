"""
Catalog synchronizer.

Derives the denormalized listing row for an activated revision. The row is
written by the live page repository in the same transaction as the
materialized page, so the catalog never describes a version that is not live.

Summary derivation:
- the revision's own introduction when the author wrote one
- otherwise the text of the first non-empty paragraph of the content,
  entities decoded, whitespace collapsed, truncated to the configured length
"""

from __future__ import annotations

import html
import re
from datetime import datetime

from version_publisher.core.entities import CatalogEntry, Revision

DEFAULT_SUMMARY_MAX_LENGTH = 512

PARAGRAPH_PATTERN = re.compile(r"<p(?:\s[^>]*)?>(.*?)</p\s*>", re.IGNORECASE | re.DOTALL)
TAG_PATTERN = re.compile(r"<[^>]+>")
WHITESPACE_PATTERN = re.compile(r"\s+")


def _plain_text(fragment: str) -> str:
    text = TAG_PATTERN.sub(" ", fragment)
    text = html.unescape(text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def extract_summary(content: str | None, max_length: int = DEFAULT_SUMMARY_MAX_LENGTH) -> str:
    """
    Extract a listing summary from HTML content.

    Returns the first paragraph with visible text, or "" when there is none.
    """
    if not content or not content.strip():
        return ""

    for match in PARAGRAPH_PATTERN.finditer(content):
        text = _plain_text(match.group(1))
        if text:
            return text[:max_length]

    return ""


class CatalogSynchronizer:
    def __init__(self, summary_max_length: int = DEFAULT_SUMMARY_MAX_LENGTH) -> None:
        self._summary_max_length = summary_max_length

    def summarize(self, revision: Revision) -> str:
        intro = revision.introduction.strip()
        if intro:
            return intro[: self._summary_max_length]
        return extract_summary(revision.content, self._summary_max_length)

    def entry_for(self, winner: Revision, now: datetime) -> CatalogEntry:
        """Build the catalog entry reflecting winner as the live revision."""
        return CatalogEntry(
            item_id=winner.item_id,
            title=winner.title,
            summary=self.summarize(winner),
            status=winner.status,
            updated_at=now,
            published_at=winner.published,
            url_path=winner.url_path,
        )
