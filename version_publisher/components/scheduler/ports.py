"""
Scheduler component port definitions.

The scheduler depends only on these interfaces; adapters live in
version_publisher.adapters.
"""

from __future__ import annotations

from typing import Protocol

from version_publisher.core.ports.db import (
    AuthorDirectoryPort,
    LivePageRepoPort,
    RevisionRepoPort,
)
from version_publisher.core.ports.email import EmailPort
from version_publisher.core.ports.time import ClockPort
from version_publisher.rules.models import NotificationRules, SchedulerRules


class RulesPort(Protocol):
    """Rules interface for scheduler configuration."""

    @property
    def scheduler(self) -> SchedulerRules:
        ...

    @property
    def notifications(self) -> NotificationRules:
        ...


__all__ = [
    "AuthorDirectoryPort",
    "ClockPort",
    "EmailPort",
    "LivePageRepoPort",
    "RevisionRepoPort",
    "RulesPort",
]
