"""
Scheduler component - entry points for reconciliation passes.

Guarantees:
- At most one revision per item is live after a pass
- Pending revisions (published in the future) are never mutated
- Deleted revisions are never selected or touched
- An activation notifies the author at most once
- Overlapping passes converge to the state of one sequential pass
- A failed item is left unchanged and is completed by a later pass
"""

from __future__ import annotations

from ._impl import PublishScheduler, SchedulerConfig
from .models import RunOnceOutput, SchedulerValidationError
from .ports import (
    AuthorDirectoryPort,
    ClockPort,
    EmailPort,
    LivePageRepoPort,
    RevisionRepoPort,
    RulesPort,
)
from version_publisher.core.services.notify import NotificationConfig


def _build_config(rules: RulesPort | None) -> SchedulerConfig:
    """Build scheduler config from rules port."""
    if rules is None:
        return SchedulerConfig()

    sched = rules.scheduler
    notes = rules.notifications
    return SchedulerConfig(
        max_concurrent_groups=sched.max_concurrent_groups,
        summary_max_length=sched.summary_max_length,
        notifications=NotificationConfig(
            enabled=notes.enabled,
            timeout_seconds=notes.timeout_seconds,
            subject_phrase=notes.subject_phrase,
            default_site_name=notes.default_site_name,
            public_base_url=notes.public_base_url,
            home_url_path=sched.home_url_path,
        ),
    )


def create_publish_scheduler(
    *,
    revisions: RevisionRepoPort,
    pages: LivePageRepoPort,
    directory: AuthorDirectoryPort,
    sender: EmailPort,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> PublishScheduler:
    """Create a PublishScheduler from ports and rules."""
    return PublishScheduler(
        revisions=revisions,
        pages=pages,
        directory=directory,
        sender=sender,
        clock=clock,
        config=_build_config(rules),
    )


# --- Component Entry Points ---


async def run_once(
    *,
    revisions: RevisionRepoPort,
    pages: LivePageRepoPort,
    directory: AuthorDirectoryPort,
    sender: EmailPort,
    clock: ClockPort | None = None,
    rules: RulesPort | None = None,
) -> RunOnceOutput:
    """
    Run one reconciliation pass over a single tenant store.

    Args:
        revisions: Revision repository port.
        pages: Live page repository port (also writes catalog entries).
        directory: Author directory port.
        sender: Email sender port.
        clock: Optional clock port; system UTC time if omitted.
        rules: Optional rules for configuration.

    Returns:
        RunOnceOutput with the pass report. Failed items are listed as
        errors; success is False if any item or the pass itself failed.
    """
    scheduler = create_publish_scheduler(
        revisions=revisions,
        pages=pages,
        directory=directory,
        sender=sender,
        clock=clock,
        rules=rules,
    )
    report = await scheduler.run_once()

    errors: list[SchedulerValidationError] = []
    if report.error:
        errors.append(SchedulerValidationError(code="pass_failed", message=report.error))
    for outcome in report.outcomes:
        if outcome.action == "failed":
            errors.append(
                SchedulerValidationError(
                    code="item_failed",
                    message=outcome.error or "Unknown error",
                    item_id=outcome.item_id,
                )
            )

    return RunOnceOutput(report=report, errors=errors, success=not errors)
