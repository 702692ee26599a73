"""APIRouter registration for the Survey Service."""

from __future__ import annotations

from fastapi import APIRouter

from survey_app.routes.auth import router as auth_router
from survey_app.routes.responses import router as responses_router
from survey_app.routes.surveys import router as surveys_router

api_router = APIRouter()
api_router.include_router(surveys_router, tags=["Surveys"])
api_router.include_router(responses_router, tags=["Responses"])
api_router.include_router(auth_router, tags=["Auth"])

__all__ = ["api_router"]
