"""Tests for catalog summary derivation."""

from datetime import UTC, datetime

from version_publisher.core.entities import Revision
from version_publisher.core.services.catalog import CatalogSynchronizer, extract_summary


def test_first_non_empty_paragraph_is_used():
    content = "<h2>Intro</h2><p>\n  </p><p class='lead'>Hello <b>world</b></p><p>Later</p>"
    assert extract_summary(content) == "Hello world"


def test_entities_are_decoded_and_whitespace_collapsed():
    assert extract_summary("<p>Fish&nbsp;&amp;\n\n   chips</p>") == "Fish & chips"


def test_summary_is_truncated():
    content = "<p>" + "x" * 600 + "</p>"
    assert len(extract_summary(content)) == 512
    assert extract_summary(content, max_length=10) == "x" * 10


def test_empty_or_paragraphless_content_gives_empty_summary():
    assert extract_summary("") == ""
    assert extract_summary(None) == ""
    assert extract_summary("<div>No paragraphs here</div>") == ""


def test_introduction_wins_over_content():
    sync = CatalogSynchronizer(summary_max_length=5)
    revision = Revision(
        item_id=1,
        version_number=1,
        title="T",
        url_path="t",
        content="<p>Body</p>",
        introduction="  Teaser text  ",
    )
    assert sync.summarize(revision) == "Tease"


def test_entry_mirrors_winner():
    now = datetime(2024, 1, 2, tzinfo=UTC)
    published = datetime(2024, 1, 1, tzinfo=UTC)
    revision = Revision(
        item_id=4,
        version_number=3,
        title="Release notes",
        url_path="notes/4",
        content="<p>All the news</p>",
        status="inactive",
        published=published,
    )

    entry = CatalogSynchronizer().entry_for(revision, now)

    assert entry.item_id == 4
    assert entry.title == "Release notes"
    assert entry.summary == "All the news"
    assert entry.status == "inactive"
    assert entry.updated_at == now
    assert entry.published_at == published
    assert entry.url_path == "notes/4"
