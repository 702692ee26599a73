"""FastAPI dependency providers for repositories.

Route handlers receive repositories through `Depends` so tests can swap in
alternative implementations with `app.dependency_overrides`.
"""

from __future__ import annotations

from survey_app.config import AppConfig, load_config
from survey_app.logic.repository_responses import ResponseRepository, SqlResponseRepository
from survey_app.logic.repository_surveys import SqlSurveyRepository


def get_response_repository() -> ResponseRepository:
    return SqlResponseRepository()


def get_survey_repository() -> SqlSurveyRepository:
    return SqlSurveyRepository()


def get_app_config() -> AppConfig:
    # Read per request so configuration changes apply without a restart
    return load_config()


__all__ = ["get_response_repository", "get_survey_repository", "get_app_config"]
