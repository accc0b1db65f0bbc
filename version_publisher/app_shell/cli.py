import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from version_publisher.adapters.clock import FixedClock, SystemClock
from version_publisher.adapters.dev_email import create_dev_email_adapter
from version_publisher.adapters.sqlite.migrator import SQLiteMigrator
from version_publisher.adapters.sqlite.repos import (
    SQLiteAuthorDirectory,
    SQLiteLivePageRepo,
    SQLiteRevisionRepo,
)
from version_publisher.api.deps import Settings
from version_publisher.app_shell.config import validate_ops_rules
from version_publisher.components.scheduler import RunOnceOutput, run_once
from version_publisher.core.errors import PublisherError
from version_publisher.core.ports.time import ClockPort
from version_publisher.rules.loader import load_rules

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings) -> None:
    Path(settings.db_path).parent.mkdir(parents=True, exist_ok=True)
    migrator = SQLiteMigrator(settings.db_path, str(settings.migrations_dir))
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migrations to {settings.db_path}.")


def handle_run_once(settings: Settings, args: argparse.Namespace) -> int:
    if not settings.rules_path.exists():
        logger.error("Rules file %s not found.", settings.rules_path)
        return 1

    rules = load_rules(settings.rules_path)
    validate_ops_rules(rules)

    clock: ClockPort = SystemClock()
    if args.at:
        clock = FixedClock(datetime.fromisoformat(args.at))

    output: RunOnceOutput = asyncio.run(
        run_once(
            revisions=SQLiteRevisionRepo(settings.db_path),
            pages=SQLiteLivePageRepo(settings.db_path),
            directory=SQLiteAuthorDirectory(settings.db_path),
            sender=create_dev_email_adapter(),
            clock=clock,
            rules=rules,
        )
    )

    report = output.report
    print(
        f"Scanned {report.groups_scanned} items: "
        f"{report.activated} activated, {report.demoted} demoted, "
        f"{report.notified} notified, {report.failed} failed."
    )
    for error in output.errors:
        print(f"  [{error.code}] item={error.item_id}: {error.message}", file=sys.stderr)

    return 0 if output.success else 1


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Version Publisher CLI")
    parser.add_argument("--db", help="SQLite database path (overrides PUBLISHER_DATA_DIR)")
    parser.add_argument("--rules", help="rules.yaml path (overrides PUBLISHER_RULES_PATH)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending SQL migrations")

    # run-once
    run_parser = subparsers.add_parser("run-once", help="Run one reconciliation pass")
    run_parser.add_argument(
        "--at", help="Evaluate the pass as of this ISO-8601 instant (default: now, UTC)"
    )

    args = parser.parse_args(argv)

    settings = Settings()
    if args.db:
        settings.db_path = args.db
    if args.rules:
        settings.rules_path = Path(args.rules)

    try:
        if args.command == "migrate":
            handle_migrate(settings)
            return 0
        if args.command == "run-once":
            return handle_run_once(settings, args)
    except (PublisherError, ValueError) as e:
        logger.error("%s", e)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
