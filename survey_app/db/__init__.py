"""Database bootstrap utilities for the Survey Service.

Convenience imports for engine construction and the SQL migrations runner
that applies files from the `migrations/` directory.
"""

from survey_app.db.base import dispose_engine, get_engine
from survey_app.db.migrations_runner import apply_migrations

__all__ = [
    "get_engine",
    "dispose_engine",
    "apply_migrations",
]
