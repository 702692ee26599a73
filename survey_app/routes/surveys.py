"""Survey CRUD endpoints and the public survey view."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response

from survey_app.logic.errors import SurveyNotFoundError
from survey_app.logic.repository_surveys import SqlSurveyRepository
from survey_app.logic.submission import check_survey_open
from survey_app.models.survey import Survey, SurveyCreate, SurveyUpdate
from survey_app.routes.dependencies import get_survey_repository

router = APIRouter(prefix="/surveys")
logger = logging.getLogger(__name__)


def public_survey_link(request: Request, survey: Survey) -> str:
    return f"{str(request.base_url).rstrip('/')}/survey/{survey.unique_link}"


@router.post("", status_code=201, summary="Create a survey", operation_id="createSurvey")
def create_survey(
    payload: SurveyCreate,
    request: Request,
    surveys: SqlSurveyRepository = Depends(get_survey_repository),
) -> dict:
    survey = surveys.create(payload)
    return {
        "survey": survey.model_dump(mode="json"),
        "survey_link": public_survey_link(request, survey),
    }


@router.get("", summary="List surveys", operation_id="listSurveys")
def list_surveys(surveys: SqlSurveyRepository = Depends(get_survey_repository)) -> dict:
    items = surveys.list()
    return {"count": len(items), "surveys": [s.model_dump(mode="json") for s in items]}


@router.get("/public/{unique_link}", summary="Get an open survey by its public link", operation_id="getPublicSurvey")
def get_public_survey(unique_link: str, surveys: SqlSurveyRepository = Depends(get_survey_repository)) -> dict:
    survey = surveys.get_by_link(unique_link)
    if survey is None or not survey.is_active:
        raise SurveyNotFoundError("survey not found or inactive")
    check_survey_open(survey)
    return {"survey": survey.model_dump(mode="json")}


@router.get("/{survey_id}", summary="Get a survey", operation_id="getSurvey")
def get_survey(survey_id: str, surveys: SqlSurveyRepository = Depends(get_survey_repository)) -> dict:
    return {"survey": surveys.get(survey_id).model_dump(mode="json")}


@router.put("/{survey_id}", summary="Update a survey", operation_id="updateSurvey")
def update_survey(
    survey_id: str,
    changes: SurveyUpdate,
    surveys: SqlSurveyRepository = Depends(get_survey_repository),
) -> dict:
    return {"survey": surveys.update(survey_id, changes).model_dump(mode="json")}


@router.delete("/{survey_id}", status_code=204, summary="Delete a survey and its responses", operation_id="deleteSurvey")
def delete_survey(survey_id: str, surveys: SqlSurveyRepository = Depends(get_survey_repository)) -> Response:
    surveys.delete(survey_id)
    return Response(status_code=204)


__all__ = ["router"]
