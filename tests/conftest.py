import os
from pathlib import Path

import pytest

from version_publisher.adapters.dev_email import DevEmailAdapter
from version_publisher.adapters.sqlite.migrator import SQLiteMigrator
from version_publisher.adapters.sqlite.repos import (
    SQLiteAuthorDirectory,
    SQLiteCatalogRepo,
    SQLiteLivePageRepo,
    SQLiteRevisionRepo,
)
from version_publisher.rules.loader import load_rules
from version_publisher.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parents[1]
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"
RULES_PATH = PROJECT_ROOT / "rules.yaml"


@pytest.fixture
def migrations_dir() -> str:
    return str(MIGRATIONS_DIR)


@pytest.fixture
def db_path(tmp_path, migrations_dir) -> str:
    """A migrated, empty SQLite database in a temp dir."""
    path = os.path.join(str(tmp_path), "publisher.db")
    SQLiteMigrator(path, migrations_dir).run_migrations()
    return path


@pytest.fixture
def rules() -> Rules:
    """The REAL rules from the project root."""
    if not RULES_PATH.exists():
        raise FileNotFoundError(f"Rules not found at {RULES_PATH}")
    return load_rules(RULES_PATH)


@pytest.fixture
def revision_repo(db_path) -> SQLiteRevisionRepo:
    return SQLiteRevisionRepo(db_path)


@pytest.fixture
def page_repo(db_path) -> SQLiteLivePageRepo:
    return SQLiteLivePageRepo(db_path)


@pytest.fixture
def catalog_repo(db_path) -> SQLiteCatalogRepo:
    return SQLiteCatalogRepo(db_path)


@pytest.fixture
def author_directory(db_path) -> SQLiteAuthorDirectory:
    return SQLiteAuthorDirectory(db_path)


@pytest.fixture
def dev_email() -> DevEmailAdapter:
    return DevEmailAdapter()
