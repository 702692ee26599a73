"""Lightweight SQL migrations runner.

Applies .sql files in lexical order from `survey_app/db/migrations/`. Skips
rollback files and records applied filenames in a `schema_migrations` table
so a migration is never reapplied to the same database. Intended for local
development and CI; production environments may use Alembic instead.
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Connection, Engine

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

_JOURNAL_DDL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
    filename TEXT PRIMARY KEY,
    applied_at TEXT NOT NULL
)
"""


def _iter_sql_files(root: Path) -> Iterable[Path]:
    for p in sorted(root.glob("*.sql")):
        if "rollback" in p.name.lower():
            continue
        yield p


def _split_statements(sql: str) -> list[str]:
    """Split a migration file into statements.

    Comment-only lines are dropped; files must not contain ';' inside string
    literals.
    """
    lines = [ln for ln in sql.splitlines() if not ln.strip().startswith("--")]
    return [s.strip() for s in "\n".join(lines).split(";") if s.strip()]


def _applied(conn: Connection) -> set[str]:
    rows = conn.execute(sql_text("SELECT filename FROM schema_migrations")).fetchall()
    return {str(r[0]) for r in rows}


def apply_migrations(engine: Engine, migrations_dir: str | os.PathLike[str] | None = None) -> list[str]:
    """Apply pending migrations and return the filenames applied in this run."""
    root = Path(migrations_dir) if migrations_dir else MIGRATIONS_DIR
    if not root.exists():
        logger.warning("migrations_dir_missing path=%s", root)
        return []

    newly_applied: list[str] = []
    with engine.begin() as conn:
        conn.execute(sql_text(_JOURNAL_DDL))
        applied = _applied(conn)
        for sql_path in _iter_sql_files(root):
            fname = sql_path.name
            if fname in applied:
                continue
            for stmt in _split_statements(sql_path.read_text(encoding="utf-8")):
                conn.exec_driver_sql(stmt)
            conn.execute(
                sql_text("INSERT INTO schema_migrations (filename, applied_at) VALUES (:f, :at)"),
                {
                    "f": fname,
                    "at": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
                },
            )
            newly_applied.append(fname)
            logger.info("migration_applied file=%s", fname)
    return newly_applied


__all__ = ["apply_migrations", "MIGRATIONS_DIR"]
