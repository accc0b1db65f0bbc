import asyncio
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

from version_publisher.adapters.sqlite.repos import (
    SQLiteAuthorDirectory,
    SQLiteLivePageRepo,
    SQLiteRevisionRepo,
)
from version_publisher.app_shell.cli import main
from version_publisher.core.entities import Author, Revision

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=UTC)
RULES_PATH = Path(__file__).resolve().parents[2] / "rules.yaml"


@pytest.fixture
def cli_env(tmp_path, monkeypatch, migrations_dir):
    monkeypatch.setenv("PUBLISHER_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("PUBLISHER_MIGRATIONS_DIR", migrations_dir)
    monkeypatch.setenv("PUBLISHER_RULES_PATH", str(RULES_PATH))
    return tmp_path / "data" / "publisher.db"


async def seed(db_path: str) -> None:
    revisions = SQLiteRevisionRepo(db_path)
    for version, published in ((1, NOW - timedelta(days=1)), (2, NOW - timedelta(hours=1))):
        await revisions.save(
            Revision(
                item_id=1,
                version_number=version,
                title="Hello",
                url_path="hello",
                published=published,
                author_id="alice",
            )
        )
    await SQLiteAuthorDirectory(db_path).save(Author(id="alice", email="alice@example.com"))


def test_migrate_creates_database(cli_env, capsys):
    assert main(["migrate"]) == 0

    assert cli_env.exists()
    assert "Applied 1 migrations" in capsys.readouterr().out


def test_run_once_reports_summary(cli_env, capsys):
    main(["migrate"])
    asyncio.run(seed(str(cli_env)))

    code = main(["run-once", "--at", NOW.isoformat()])

    assert code == 0
    assert "Scanned 1 items: 1 activated, 1 demoted, 1 notified, 0 failed." in capsys.readouterr().out
    page = asyncio.run(SQLiteLivePageRepo(str(cli_env)).get_by_item(1))
    assert page is not None
    assert page.version_number == 2


def test_run_once_without_rules_fails(cli_env, tmp_path):
    main(["migrate"])

    assert main(["--rules", str(tmp_path / "missing.yaml"), "run-once"]) == 1


def test_run_once_missing_required_env_fails(cli_env, tmp_path, monkeypatch):
    main(["migrate"])
    rules_path = tmp_path / "rules.yaml"
    rules_path.write_text("ops:\n  required_env: [PUBLISHER_TEST_SECRET]\n")
    monkeypatch.delenv("PUBLISHER_TEST_SECRET", raising=False)

    assert main(["--rules", str(rules_path), "run-once"]) == 1
