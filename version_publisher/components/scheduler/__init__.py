"""
Scheduler component - reconciles scheduled revisions into the live read path.
"""

from ._impl import (
    DEFAULT_CONFIG,
    PublishScheduler,
    SchedulerConfig,
    StateMutator,
    VersionSetResolver,
)
from .component import create_publish_scheduler, run_once
from .models import (
    GroupAction,
    GroupOutcome,
    PassReport,
    RunOnceOutput,
    SchedulerValidationError,
    Selection,
    VersionGroup,
)
from .ports import (
    AuthorDirectoryPort,
    ClockPort,
    EmailPort,
    LivePageRepoPort,
    RevisionRepoPort,
    RulesPort,
)
from .selector import partition, select_activation

__all__ = [
    # Entry points
    "create_publish_scheduler",
    "run_once",
    # Services
    "DEFAULT_CONFIG",
    "PublishScheduler",
    "SchedulerConfig",
    "StateMutator",
    "VersionSetResolver",
    # Selection
    "partition",
    "select_activation",
    # Models
    "GroupAction",
    "GroupOutcome",
    "PassReport",
    "RunOnceOutput",
    "SchedulerValidationError",
    "Selection",
    "VersionGroup",
    # Ports
    "AuthorDirectoryPort",
    "ClockPort",
    "EmailPort",
    "LivePageRepoPort",
    "RevisionRepoPort",
    "RulesPort",
]
