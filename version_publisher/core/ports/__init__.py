# version-publisher - Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from version_publisher.core.ports.db import (
    ActivationCommit,
    AuthorDirectoryPort,
    CatalogRepoPort,
    Demotion,
    LivePageRepoPort,
    RevisionRepoPort,
)
from version_publisher.core.ports.email import (
    EmailPort,
    EmailResult,
    EmailSendError,
    EmailStatus,
)
from version_publisher.core.ports.time import ClockPort

__all__ = [
    # Persistence
    "ActivationCommit",
    "AuthorDirectoryPort",
    "CatalogRepoPort",
    "Demotion",
    "LivePageRepoPort",
    "RevisionRepoPort",
    # Email
    "EmailPort",
    "EmailResult",
    "EmailSendError",
    "EmailStatus",
    # Time
    "ClockPort",
]
