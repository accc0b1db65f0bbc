"""
Admin publisher API routes.

Lets an operator trigger one reconciliation pass on demand. Recurring
invocation belongs to whatever hosts the process (cron, a job runner).
"""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from version_publisher.api.deps import get_scheduler
from version_publisher.components.scheduler import GroupOutcome, PassReport, PublishScheduler

router = APIRouter()


# --- Response Models ---


class GroupOutcomeResponse(BaseModel):
    item_id: int
    action: str
    winner_version: int | None = None
    demoted_versions: list[int] = []
    notification: str
    error: str | None = None


class PassReportResponse(BaseModel):
    """One pass, as returned to the operator."""

    started_at: datetime
    finished_at: datetime | None = None
    groups_scanned: int
    activated: int
    demoted: int
    failed: int
    notified: int
    error: str | None = None
    outcomes: list[GroupOutcomeResponse]


def outcome_to_response(outcome: GroupOutcome) -> GroupOutcomeResponse:
    return GroupOutcomeResponse(
        item_id=outcome.item_id,
        action=outcome.action,
        winner_version=outcome.winner_version,
        demoted_versions=list(outcome.demoted_versions),
        notification=outcome.notification.value,
        error=outcome.error,
    )


def report_to_response(report: PassReport) -> PassReportResponse:
    return PassReportResponse(
        started_at=report.started_at,
        finished_at=report.finished_at,
        groups_scanned=report.groups_scanned,
        activated=report.activated,
        demoted=report.demoted,
        failed=report.failed,
        notified=report.notified,
        error=report.error,
        outcomes=[outcome_to_response(o) for o in report.outcomes],
    )


# --- Routes ---


@router.post("/run", response_model=PassReportResponse)
async def run_publisher(
    scheduler: PublishScheduler = Depends(get_scheduler),
) -> PassReportResponse:
    """Run one reconciliation pass and return its report."""
    report = await scheduler.run_once()
    return report_to_response(report)
