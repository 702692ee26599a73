"""SQLAlchemy engine construction.

The service targets PostgreSQL in production and SQLite for local
development and tests. No declarative models are defined here; this module
only manages connection lifecycle. Repositories issue `text()` statements
against the shared engine.
"""

from __future__ import annotations

import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from survey_app.config import load_config

logger = logging.getLogger(__name__)


def _db_url() -> str:
    return load_config().database.dsn


# Module-level cached Engine so repositories share one pool
_ENGINE: Engine | None = None
_ENGINE_URL: str | None = None


def get_engine(url: str | None = None) -> Engine:
    """Return a singleton SQLAlchemy Engine for the given URL.

    A new Engine is built only when the resolved URL changes. For SQLite
    in-memory URLs a StaticPool keeps a single connection alive across
    sessions and threads.
    """
    global _ENGINE, _ENGINE_URL
    resolved_url = url or _db_url()

    if _ENGINE is None or _ENGINE_URL != resolved_url:
        kwargs: dict = {"future": True, "pool_pre_ping": True}
        if resolved_url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in resolved_url:
                kwargs["poolclass"] = StaticPool
        if _ENGINE is not None:
            _ENGINE.dispose()
        _ENGINE = create_engine(resolved_url, **kwargs)
        _ENGINE_URL = resolved_url
        logger.info("db_engine_created dialect=%s", _ENGINE.dialect.name)

    return _ENGINE


def dispose_engine() -> None:
    """Dispose the cached Engine (used on shutdown and between test sessions)."""
    global _ENGINE, _ENGINE_URL
    if _ENGINE is not None:
        _ENGINE.dispose()
    _ENGINE = None
    _ENGINE_URL = None


__all__ = ["get_engine", "dispose_engine"]
