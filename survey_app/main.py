from __future__ import annotations

import logging
from typing import Callable

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import text as sql_text
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from survey_app.config import load_config
from survey_app.db.base import get_engine
from survey_app.db.migrations_runner import apply_migrations
from survey_app.http.problem import (
    handle_http_exception,
    handle_request_validation_error,
    handle_survey_app_error,
    handle_unexpected_error,
)
from survey_app.http.request_id import RequestIdMiddleware
from survey_app.logging_setup import configure_logging
from survey_app.logic.errors import SurveyAppError
from survey_app.middleware.cors import apply_cors
from survey_app.routes import api_router

logger = logging.getLogger(__name__)


def _health_check() -> Callable[[], dict]:
    def check() -> dict:
        try:
            with get_engine().connect() as conn:
                conn.execute(sql_text("SELECT 1")).scalar()
            return {"status": "ok", "db": True}
        except SQLAlchemyError as e:
            logger.error("Health DB check failed", exc_info=True)
            return {"status": "degraded", "db": False, "reason": str(e)}

    return check


def create_app() -> FastAPI:
    cfg = load_config()
    configure_logging(cfg.server.log_level)
    app = FastAPI(title="Survey Service")

    app.add_exception_handler(SurveyAppError, handle_survey_app_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.add_middleware(RequestIdMiddleware)
    apply_cors(app, origins=cfg.server.cors_origins)

    # Migrations run on startup rather than import to avoid side effects
    @app.on_event("startup")
    def _apply_migrations() -> None:
        if not cfg.server.auto_apply_migrations:
            logger.info("AUTO_APPLY_MIGRATIONS disabled; skipping migrations at startup")
            return
        applied = apply_migrations(get_engine())
        logger.info("startup_migrations_applied count=%d", len(applied))

    app.include_router(api_router, prefix="/api/v1")

    health_check = _health_check()

    @app.get("/health")
    def health():  # pragma: no cover - trivial
        return health_check()

    return app


# Intentionally do not instantiate the app at import time to prevent side effects.
