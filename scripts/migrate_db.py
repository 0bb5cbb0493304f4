# =============================================================================
# MongoDB Schema Migration Runner
# =============================================================================
# Applies the numbered trust ledger migrations in services/mongodb/migrations/
# in order and records each applied version in schema_migrations, so a rerun
# only applies what is new. Supports listing status and reverting the latest
# applied migration.
# =============================================================================

import argparse
import importlib.util
import logging
import re
import sys
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from types import ModuleType
from typing import Callable, Optional

from pymongo import DESCENDING, MongoClient
from pymongo.database import Database

from trust_ledger.models import MongoSettings

logger = logging.getLogger("migrate_db")

MIGRATIONS_COLLECTION = "schema_migrations"
MIGRATION_FILE = re.compile(r"^(\d{3})_\w+\.py$")
DEFAULT_MIGRATIONS_DIR = Path(__file__).resolve().parent.parent / "services" / "mongodb" / "migrations"


@dataclass(frozen=True)
class Migration:
    """A loaded migration module."""

    version: str
    name: str
    up: Callable[[Database], None]
    down: Optional[Callable[[Database], None]] = None


def discover_migrations(migrations_dir: Path) -> list[tuple[str, Path]]:
    """
    Find NNN_name.py files, sorted by version.

    Raises:
        ValueError: If the directory is missing or two files share a version
    """
    if not migrations_dir.is_dir():
        raise ValueError(f"Migrations directory does not exist: {migrations_dir}")

    found: dict[str, Path] = {}
    for path in sorted(migrations_dir.glob("*.py")):
        match = MIGRATION_FILE.match(path.name)
        if match is None:
            if not path.name.startswith("__"):
                logger.warning("Skipping %s: not named NNN_<name>.py", path.name)
            continue
        version = match.group(1)
        if version in found:
            raise ValueError(
                f"Duplicate migration version '{version}': {found[version].name} and {path.name}"
            )
        found[version] = path

    return sorted(found.items())


def _import_file(path: Path) -> ModuleType:
    spec = importlib.util.spec_from_file_location(f"migration_{path.stem}", path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load migration module from {path}")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def load_migration(path: Path) -> Migration:
    """
    Import a migration file and check its VERSION, up() and optional down().

    Raises:
        ValueError: If the module does not match the migration interface or its
            VERSION disagrees with the filename
    """
    module = _import_file(path)

    version = getattr(module, "VERSION", None)
    if not isinstance(version, str):
        raise ValueError(f"Migration '{path.name}' needs a string VERSION constant")
    if not path.name.startswith(f"{version}_"):
        raise ValueError(
            f"Migration '{path.name}' VERSION '{version}' does not match its filename"
        )

    up = getattr(module, "up", None)
    if not callable(up):
        raise ValueError(f"Migration '{path.name}' needs a callable up(db)")

    down = getattr(module, "down", None)
    if down is not None and not callable(down):
        raise ValueError(f"Migration '{path.name}' down must be callable")

    return Migration(version=version, name=path.stem, up=up, down=down)


def applied_versions(db: Database) -> set[str]:
    return {doc["version"] for doc in db[MIGRATIONS_COLLECTION].find({}, {"version": 1})}


def run_migrations(db: Database, migrations_dir: Path = DEFAULT_MIGRATIONS_DIR) -> list[str]:
    """
    Apply every pending migration in version order.

    A migration is recorded only after its up() returns, so a failed
    migration is retried on the next run.

    Returns:
        Versions applied by this run
    """
    db[MIGRATIONS_COLLECTION].create_index("version", unique=True, name="version_unique")
    done = applied_versions(db)

    applied: list[str] = []
    for version, path in discover_migrations(migrations_dir):
        if version in done:
            logger.debug("Migration %s already applied", version)
            continue

        migration = load_migration(path)
        started = time.monotonic()
        logger.info("Applying migration %s", migration.name)
        migration.up(db)
        db[MIGRATIONS_COLLECTION].insert_one(
            {
                "version": version,
                "name": migration.name,
                "applied_at": datetime.now(timezone.utc),
                "duration_ms": int((time.monotonic() - started) * 1000),
            }
        )
        applied.append(version)

    logger.info("%d migration(s) applied", len(applied))
    return applied


def revert_latest(db: Database, migrations_dir: Path = DEFAULT_MIGRATIONS_DIR) -> Optional[str]:
    """
    Run down() of the most recently applied migration and forget it.

    Returns:
        The reverted version, or None if nothing is applied

    Raises:
        ValueError: If the migration file is gone or has no down()
    """
    latest = db[MIGRATIONS_COLLECTION].find_one(sort=[("version", DESCENDING)])
    if latest is None:
        logger.info("No migrations applied")
        return None

    version = latest["version"]
    paths = dict(discover_migrations(migrations_dir))
    if version not in paths:
        raise ValueError(f"Applied migration {version} has no file in {migrations_dir}")

    migration = load_migration(paths[version])
    if migration.down is None:
        raise ValueError(f"Migration {version} cannot be reverted: no down()")

    logger.info("Reverting migration %s", migration.name)
    migration.down(db)
    db[MIGRATIONS_COLLECTION].delete_one({"version": version})
    return version


def migration_status(db: Database, migrations_dir: Path = DEFAULT_MIGRATIONS_DIR) -> list[tuple[str, bool]]:
    """(version, applied) for every migration file."""
    done = applied_versions(db)
    return [(version, version in done) for version, _ in discover_migrations(migrations_dir)]


def main(argv: Optional[list[str]] = None) -> int:
    """
    Command-line entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = argparse.ArgumentParser(description="Apply trust ledger MongoDB migrations")
    parser.add_argument("--status", action="store_true", help="List migrations and exit")
    parser.add_argument("--down", action="store_true", help="Revert the latest migration")
    parser.add_argument("--migrations-dir", type=Path, default=DEFAULT_MIGRATIONS_DIR)
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")

    settings = MongoSettings()
    client = MongoClient(settings.connection_string, serverSelectionTimeoutMS=10000)
    try:
        db = client[settings.database]
        if args.status:
            for version, applied in migration_status(db, args.migrations_dir):
                print(f"{version}  {'applied' if applied else 'pending'}")
        elif args.down:
            revert_latest(db, args.migrations_dir)
        else:
            run_migrations(db, args.migrations_dir)
        return 0
    except Exception:
        logger.exception("Migration failed")
        return 1
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
