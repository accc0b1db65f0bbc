"""
Activation notification dispatcher.

Emails the author of a revision once it has become the live version of its
item. Called only for activation transitions reported by the materializer.

Policy:
- Author not found -> warning, skipped
- Author has no usable email -> warning, skipped
- Sender raises EmailSendError -> error logged with its retriable flag, failed
- Sender raises anything else, returns FAILED, or exceeds the timeout -> error, not raised

Nothing here can undo the state already committed for the group, and
nothing here raises into the orchestrator.
"""

from __future__ import annotations

import asyncio
import html
import logging
from dataclasses import dataclass
from enum import Enum

from version_publisher.core.entities import Revision
from version_publisher.core.ports.db import AuthorDirectoryPort, LivePageRepoPort
from version_publisher.core.ports.email import EmailPort, EmailSendError

logger = logging.getLogger(__name__)


class NotificationStatus(str, Enum):
    """Outcome of an activation notice."""

    SENT = "sent"
    SKIPPED_NO_AUTHOR = "skipped_no_author"
    SKIPPED_NO_EMAIL = "skipped_no_email"
    FAILED = "failed"
    TIMEOUT = "timeout"
    DISABLED = "disabled"
    NOT_TRIGGERED = "not_triggered"


@dataclass(frozen=True)
class NotificationConfig:
    enabled: bool = True
    timeout_seconds: float = 30.0
    subject_phrase: str = "is now live"
    default_site_name: str = "Website"
    public_base_url: str = ""
    home_url_path: str = "root"


DEFAULT_NOTIFICATION_CONFIG = NotificationConfig()


# --- Composition ---


def compose_subject(title: str, phrase: str = DEFAULT_NOTIFICATION_CONFIG.subject_phrase) -> str:
    return f'"{title}" {phrase}'


def build_item_url(url_path: str, base_url: str = "") -> str:
    """Join the public base URL (if any) and the item's route."""
    if not base_url:
        return url_path
    return f"{base_url.rstrip('/')}/{url_path.lstrip('/')}"


def compose_body(revision: Revision, site_name: str, item_url: str) -> str:
    """Render the HTML body of an activation notice."""
    title = html.escape(revision.title)
    site = html.escape(site_name)
    url = html.escape(item_url)

    return (
        "<html>\n"
        '<body style="font-family: sans-serif;">\n'
        f"<h2>Your content on {site} is now live</h2>\n"
        f"<p>The scheduled version of <em>{title}</em> has been published.</p>\n"
        "<ul>\n"
        f"<li><strong>Title:</strong> {title}</li>\n"
        f"<li><strong>Item Number:</strong> {revision.item_id}</li>\n"
        f"<li><strong>Version:</strong> {revision.version_number}</li>\n"
        f'<li><strong>URL:</strong> <a href="{url}">{url}</a></li>\n'
        "</ul>\n"
        f"<p>{site}</p>\n"
        "</body>\n"
        "</html>\n"
    )


# --- Dispatcher ---


class NotificationDispatcher:
    def __init__(
        self,
        directory: AuthorDirectoryPort,
        sender: EmailPort,
        pages: LivePageRepoPort,
        config: NotificationConfig | None = None,
    ) -> None:
        self._directory = directory
        self._sender = sender
        self._pages = pages
        self._config = config or DEFAULT_NOTIFICATION_CONFIG

    async def resolve_site_name(self) -> str:
        """Site display name is the title of the home page."""
        home = await self._pages.get_by_url_path(self._config.home_url_path)
        if home and home.title.strip():
            return home.title.strip()
        return self._config.default_site_name

    async def notify_activation(self, winner: Revision) -> NotificationStatus:
        """
        Tell the winner's author that it is live.

        Returns:
            NotificationStatus describing what happened; never raises
            (except cancellation).
        """
        if not self._config.enabled:
            return NotificationStatus.DISABLED

        try:
            return await self._notify(winner)
        except Exception:
            logger.exception(
                "Item %s: failed to send activation notice for version %s",
                winner.item_id,
                winner.version_number,
            )
            return NotificationStatus.FAILED

    async def _notify(self, winner: Revision) -> NotificationStatus:
        author = await self._directory.lookup(winner.author_id) if winner.author_id else None
        if author is None:
            logger.warning(
                "Item %s: author %s not found, skipping activation notice",
                winner.item_id,
                winner.author_id,
            )
            return NotificationStatus.SKIPPED_NO_AUTHOR

        if not author.is_usable or author.email is None:
            logger.warning(
                "Item %s: author %s has no usable email, skipping activation notice",
                winner.item_id,
                author.id,
            )
            return NotificationStatus.SKIPPED_NO_EMAIL

        site_name = await self.resolve_site_name()
        item_url = build_item_url(winner.url_path, self._config.public_base_url)
        subject = compose_subject(winner.title, self._config.subject_phrase)
        body = compose_body(winner, site_name, item_url)

        try:
            result = await asyncio.wait_for(
                self._sender.send_email(author.email.strip(), subject, body),
                timeout=self._config.timeout_seconds,
            )
        except TimeoutError:
            logger.error(
                "Item %s: activation notice to %s timed out after %.1fs",
                winner.item_id,
                author.email,
                self._config.timeout_seconds,
            )
            return NotificationStatus.TIMEOUT
        except EmailSendError as e:
            logger.error(
                "Item %s: activation notice to %s failed (retriable=%s): %s",
                winner.item_id,
                e.recipient,
                e.retriable,
                e.error,
            )
            return NotificationStatus.FAILED

        if not result.ok:
            logger.error(
                "Item %s: activation notice to %s failed: %s",
                winner.item_id,
                author.email,
                result.error,
            )
            return NotificationStatus.FAILED

        logger.info(
            "Item %s: notified %s that version %s is live",
            winner.item_id,
            author.email,
            winner.version_number,
        )
        return NotificationStatus.SENT
