import os
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from version_publisher.adapters.clock import SystemClock
from version_publisher.adapters.dev_email import DevEmailAdapter, create_dev_email_adapter
from version_publisher.adapters.sqlite.repos import (
    SQLiteAuthorDirectory,
    SQLiteLivePageRepo,
    SQLiteRevisionRepo,
)
from version_publisher.components.scheduler import PublishScheduler, create_publish_scheduler
from version_publisher.rules.loader import load_rules
from version_publisher.rules.models import Rules


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.data_dir = Path(os.environ.get("PUBLISHER_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "publisher.db")
        self.rules_path = Path(os.environ.get("PUBLISHER_RULES_PATH", "./rules.yaml"))
        self.migrations_dir = Path(os.environ.get("PUBLISHER_MIGRATIONS_DIR", "./migrations"))


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


@lru_cache
def _load_rules_cached(path: Path) -> Rules:
    return load_rules(path)


# --- Adapters ---
@lru_cache
def get_email_sender() -> DevEmailAdapter:
    return create_dev_email_adapter()


# --- Scheduler ---
def get_scheduler(
    settings: Settings = Depends(get_settings),
    rules: Rules = Depends(get_rules),
    sender: DevEmailAdapter = Depends(get_email_sender),
) -> PublishScheduler:
    return create_publish_scheduler(
        revisions=SQLiteRevisionRepo(settings.db_path),
        pages=SQLiteLivePageRepo(settings.db_path),
        directory=SQLiteAuthorDirectory(settings.db_path),
        sender=sender,
        clock=SystemClock(),
        rules=rules,
    )
