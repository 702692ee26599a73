"""FastAPI application package for the Survey Service.

Exposes the application factory. Cross-cutting middleware (request id, CORS)
and problem+json handlers are wired in `survey_app.main`; business logic
lives in `survey_app/logic/` and route handlers in `survey_app/routes/`.
"""

from __future__ import annotations

from survey_app.main import create_app

__all__ = ["create_app"]
