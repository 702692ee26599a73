"""Problem+JSON utilities and global exception handlers.

Defines the RFC 7807 media type and handler callables that turn domain
errors, HTTP errors, request validation failures and unexpected exceptions
into application/problem+json responses.
"""

from __future__ import annotations

import logging

from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from survey_app.logic.errors import SurveyAppError

PROBLEM_MEDIA_TYPE = "application/problem+json"

logger = logging.getLogger(__name__)


def problem_response(problem: dict, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(
        problem,
        status_code=int(problem.get("status", 500)),
        media_type=PROBLEM_MEDIA_TYPE,
        headers=headers,
    )


async def handle_survey_app_error(request: Request, exc: SurveyAppError) -> JSONResponse:
    logger.info(
        "error_handler.handle code=%s status=%s path=%s", exc.code, exc.status, request.url.path
    )
    return problem_response(exc.to_problem())


async def handle_http_exception(request: Request, exc: HTTPException) -> JSONResponse:
    status = int(exc.status_code or 500)
    if isinstance(exc.detail, dict):
        problem = {"status": status, **exc.detail}
    else:
        problem = {"title": "Error", "status": status, "detail": str(exc.detail or "")}
    headers = {str(k): str(v) for k, v in (exc.headers or {}).items()}
    return problem_response(problem, headers=headers or None)


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    problem = {
        "title": "Invalid Request",
        "status": 422,
        "detail": "Request validation failed",
        "code": "REQUEST_VALIDATION_FAILED",
        "errors": jsonable_encoder(exc.errors()),
    }
    return problem_response(problem)


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error("unexpected_error path=%s", request.url.path, exc_info=exc)
    return problem_response({"title": "Internal Server Error", "status": 500})


__all__ = [
    "PROBLEM_MEDIA_TYPE",
    "problem_response",
    "handle_survey_app_error",
    "handle_http_exception",
    "handle_request_validation_error",
    "handle_unexpected_error",
]
