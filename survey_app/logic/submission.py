"""Public response submission flow.

Checks the survey is open, applies the one-response-per-address rule when
the survey forbids repeats, enforces required (visible) questions, snapshots
question text/type onto each answer, persists the response and closes the
survey once its participant limit is reached.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from survey_app.logic.errors import (
    DuplicateResponseError,
    SubmissionError,
    SurveyClosedError,
    SurveyNotFoundError,
)
from survey_app.logic.repository_responses import ResponseRepository
from survey_app.logic.repository_surveys import SqlSurveyRepository
from survey_app.logic.skip_logic import is_question_visible
from survey_app.models.response import Answer, NewResponse, RespondentInfo, StoredResponse, SubmissionAnswer
from survey_app.models.survey import Survey

logger = logging.getLogger(__name__)


def _is_empty(value: Any) -> bool:
    """Unanswered: None, "", False, 0, NaN or an empty selection list."""
    if isinstance(value, list):
        return len(value) == 0
    if isinstance(value, float) and math.isnan(value):
        return True
    return value is None or value == "" or value is False or value == 0


def _normalise_answers(survey: Survey, answers: Sequence[SubmissionAnswer]) -> List[Answer]:
    processed: List[Answer] = []
    for submitted in answers:
        question = survey.question_by_id(submitted.question_id)
        if question is None:
            logger.info("answer_dropped_unknown_question question_id=%s", submitted.question_id)
            continue
        value = submitted.value
        if question.type == "radio" and isinstance(value, list):
            raise SubmissionError(f'question "{question.text}" accepts a single answer')
        if question.type == "checkbox" and not isinstance(value, list):
            value = [value]
        processed.append(
            Answer(
                question_id=question.question_id,
                question_text=question.text,
                question_type=question.type,
                value=value,
            )
        )
    return processed


def check_survey_open(survey: Survey, now: Optional[datetime] = None) -> None:
    if not survey.is_active:
        raise SurveyClosedError("survey is not active")
    if survey.is_closed(now):
        raise SurveyClosedError("survey closing date has passed")


def submit_response(
    survey: Survey,
    answers: Sequence[SubmissionAnswer],
    respondent: RespondentInfo,
    responses: ResponseRepository,
    surveys: SqlSurveyRepository,
    now: Optional[datetime] = None,
) -> StoredResponse:
    if not answers:
        raise SubmissionError("answers are required")
    check_survey_open(survey, now)

    if not survey.allow_multiple_responses:
        duplicates = responses.find_candidate_duplicates(survey.survey_id, respondent.address)
        if duplicates:
            logger.info(
                "duplicate_response_rejected survey_id=%s previous=%s",
                survey.survey_id,
                duplicates[0].response_id,
            )
            raise DuplicateResponseError("a response from this respondent already exists")

    by_question: Dict[str, Any] = {a.question_id: a.value for a in answers}
    for question in survey.questions:
        if not question.required or not is_question_visible(question, survey, by_question):
            continue
        if _is_empty(by_question.get(question.question_id)):
            raise SubmissionError(f'question "{question.text}" is required')

    stored = responses.create(
        NewResponse(
            survey_id=survey.survey_id,
            answers=_normalise_answers(survey, answers),
            respondent_info=respondent,
            submitted_at=now or datetime.now(timezone.utc),
        )
    )

    if survey.participant_limit:
        total = responses.count_for_survey(survey.survey_id)
        if total >= survey.participant_limit:
            surveys.set_active(survey.survey_id, False)
            logger.info(
                "survey_closed_participant_limit survey_id=%s limit=%d",
                survey.survey_id,
                survey.participant_limit,
            )
    return stored


def submit_to_link(
    unique_link: str,
    answers: Sequence[SubmissionAnswer],
    respondent: RespondentInfo,
    responses: ResponseRepository,
    surveys: SqlSurveyRepository,
) -> StoredResponse:
    """Resolve the public link, then run `submit_response`."""
    survey = surveys.get_by_link(unique_link)
    if survey is None:
        raise SurveyNotFoundError("survey not found")
    return submit_response(survey, answers, respondent, responses, surveys)


__all__ = ["check_survey_open", "submit_response", "submit_to_link"]
