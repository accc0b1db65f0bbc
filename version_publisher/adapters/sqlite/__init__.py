from version_publisher.adapters.sqlite.migrator import SQLiteMigrator
from version_publisher.adapters.sqlite.repos import (
    SQLiteAuthorDirectory,
    SQLiteCatalogRepo,
    SQLiteLivePageRepo,
    SQLiteRevisionRepo,
)

__all__ = [
    "SQLiteAuthorDirectory",
    "SQLiteCatalogRepo",
    "SQLiteLivePageRepo",
    "SQLiteMigrator",
    "SQLiteRevisionRepo",
]
