"""
Email sender port.

Protocol-based interface for sending transactional emails.
Used by the notification dispatcher to tell authors their content is live.

Implementation strategies:
1. DevEmailAdapter: Logs emails and keeps them in memory (dev/test)
2. SMTP or provider API adapters (deployment concern, not shipped here)

Senders report failure by returning a FAILED result or raising
EmailSendError; any other exception is treated as a failure too. The
dispatcher never lets them escape a pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol

from version_publisher.core.errors import PublisherError


class EmailStatus(Enum):
    """Email send result status."""

    SENT = "sent"
    FAILED = "failed"
    SKIPPED = "skipped"  # Dev adapter or dry-run


@dataclass
class EmailResult:
    """Result of an email send attempt."""

    status: EmailStatus
    message_id: str | None = None  # Provider's message ID
    error: str | None = None
    sent_at: datetime | None = None
    recipient: str = ""

    @property
    def ok(self) -> bool:
        return self.status != EmailStatus.FAILED

    @classmethod
    def success(cls, recipient: str, message_id: str | None = None) -> EmailResult:
        """Create a successful send result."""
        return cls(
            status=EmailStatus.SENT,
            message_id=message_id,
            recipient=recipient,
            sent_at=datetime.now(UTC),
        )

    @classmethod
    def skipped(cls, recipient: str, reason: str = "Dev mode") -> EmailResult:
        """Create a skipped result (dev adapter)."""
        return cls(
            status=EmailStatus.SKIPPED,
            recipient=recipient,
            error=reason,
        )

    @classmethod
    def failed(cls, recipient: str, error: str) -> EmailResult:
        """Create a failed result."""
        return cls(
            status=EmailStatus.FAILED,
            recipient=recipient,
            error=error,
        )


class EmailPort(Protocol):
    """Email sending interface."""

    async def send_email(
        self,
        recipient: str,
        subject: str,
        body_html: str,
    ) -> EmailResult:
        """
        Send a transactional email.

        Args:
            recipient: Email address of recipient
            subject: Email subject line
            body_html: HTML body content

        Returns:
            EmailResult with send outcome
        """
        ...


# --- Error Types ---


class EmailSendError(PublisherError):
    """
    Failed to send email.

    Senders raise this for failures they can classify; retriable tells the
    operator whether the next activation notice to this address may succeed.
    """

    def __init__(self, recipient: str, error: str, retriable: bool = True) -> None:
        self.recipient = recipient
        self.error = error
        self.retriable = retriable
        super().__init__(f"Failed to send email to {recipient}: {error}")
