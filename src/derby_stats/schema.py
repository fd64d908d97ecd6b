"""
Database schema management for the derby stats database.

Handles initialization, migrations, and schema version tracking.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .pg_connection import PostgresDB

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).parent / "migrations"


def get_migration_files() -> list[Path]:
    """Get all SQL migration files in order."""
    if not MIGRATIONS_DIR.exists():
        return []

    return sorted(MIGRATIONS_DIR.glob("*.sql"))


def run_migrations(db: "PostgresDB", force: bool = False) -> int:
    """
    Run all pending migrations.

    Args:
        db: Database connection
        force: If True, run all migrations even if already applied

    Returns:
        Number of migrations applied
    """
    migration_files = get_migration_files()
    if not migration_files:
        logger.warning("No migration files found in %s", MIGRATIONS_DIR)
        return 0

    applied = 0

    for migration_file in migration_files:
        migration_name = migration_file.stem

        if not force and db.is_initialized():
            if db.get_meta(f"migration_{migration_name}"):
                logger.debug("Skipping already applied migration: %s", migration_name)
                continue

        logger.info("Applying migration: %s", migration_name)
        db.executescript(migration_file.read_text())
        db.set_meta(f"migration_{migration_name}", "applied")
        applied += 1

    return applied


def init_database(db: "PostgresDB") -> int:
    """
    Initialize the database, applying any pending migrations.

    Returns:
        Number of migrations applied
    """
    applied = run_migrations(db)
    logger.info("Database initialized (%d migrations applied)", applied)
    return applied
