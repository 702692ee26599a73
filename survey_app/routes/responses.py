"""Response submission, listing and CSV export endpoints."""

from __future__ import annotations

import logging
import time

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from survey_app.logic.csv_io import build_export_csv, export_filename
from survey_app.logic.errors import NoResponsesError
from survey_app.logic.repository_responses import ResponseRepository
from survey_app.logic.repository_surveys import SqlSurveyRepository
from survey_app.logic.submission import submit_to_link
from survey_app.models.response import RespondentInfo, ResponseSubmission, SubmissionReceipt
from survey_app.routes.dependencies import get_response_repository, get_survey_repository

router = APIRouter(prefix="/surveys")
logger = logging.getLogger(__name__)

SESSION_HEADER = "X-Session-Id"


def respondent_from_request(request: Request) -> RespondentInfo:
    """Collect unauthenticated respondent signals from the request.

    The first X-Forwarded-For hop wins over the socket peer address.
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    address = forwarded.split(",")[0].strip() or (request.client.host if request.client else None)
    session_id = request.headers.get(SESSION_HEADER) or f"{address}-{int(time.time() * 1000)}"
    return RespondentInfo(
        address=address,
        user_agent=request.headers.get("user-agent"),
        session_id=session_id,
    )


@router.post(
    "/public/{unique_link}/responses",
    status_code=201,
    response_model=SubmissionReceipt,
    summary="Submit a response to a survey",
    operation_id="submitResponse",
)
def submit_survey_response(
    unique_link: str,
    payload: ResponseSubmission,
    request: Request,
    surveys: SqlSurveyRepository = Depends(get_survey_repository),
    responses: ResponseRepository = Depends(get_response_repository),
) -> SubmissionReceipt:
    stored = submit_to_link(unique_link, payload.answers, respondent_from_request(request), responses, surveys)
    return SubmissionReceipt(response_id=stored.response_id, submitted_at=stored.submitted_at)


@router.get("/{survey_id}/responses", summary="List responses for a survey", operation_id="listResponses")
def list_survey_responses(
    survey_id: str,
    surveys: SqlSurveyRepository = Depends(get_survey_repository),
    responses: ResponseRepository = Depends(get_response_repository),
) -> dict:
    survey = surveys.get(survey_id)
    items = responses.list_for_survey(survey_id)
    return {
        "count": len(items),
        "survey": {
            "survey_id": survey.survey_id,
            "title": survey.title,
            "questions": [q.model_dump(mode="json") for q in survey.questions],
        },
        "responses": [r.model_dump(mode="json") for r in items],
    }


@router.get("/{survey_id}/export", summary="Export responses as CSV", operation_id="exportResponses")
def export_survey_responses(
    survey_id: str,
    surveys: SqlSurveyRepository = Depends(get_survey_repository),
    responses: ResponseRepository = Depends(get_response_repository),
) -> Response:
    survey = surveys.get(survey_id)
    items = responses.list_for_survey(survey_id)
    if not items:
        raise NoResponsesError("no responses to export")
    logger.info("responses_exported survey_id=%s rows=%d", survey_id, len(items))
    return Response(
        content=build_export_csv(survey, items),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(survey_id)}"'},
    )


__all__ = ["router", "respondent_from_request"]
