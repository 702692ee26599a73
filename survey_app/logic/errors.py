"""Domain exceptions for the Survey Service.

Each exception carries the HTTP status, a stable machine-readable code and a
title. `survey_app.http.problem.handle_survey_app_error` renders them as
problem+json, so route handlers simply let them propagate.
"""

from __future__ import annotations


class SurveyAppError(Exception):
    status: int = 500
    code: str = "INTERNAL_ERROR"
    title: str = "Internal Server Error"

    def __init__(self, detail: str = "") -> None:
        super().__init__(detail)
        self.detail = detail

    def to_problem(self) -> dict:
        return {
            "type": "about:blank",
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
            "code": self.code,
        }


class InvalidDocumentError(SurveyAppError):
    """A document was rejected by the store; nothing was written."""

    status = 422
    code = "INVALID_DOCUMENT"
    title = "Invalid Document"


class SurveyNotFoundError(SurveyAppError):
    status = 404
    code = "SURVEY_NOT_FOUND"
    title = "Survey not found"


class SurveyClosedError(SurveyAppError):
    status = 400
    code = "SURVEY_CLOSED"
    title = "Survey closed"


class SubmissionError(SurveyAppError):
    status = 400
    code = "SUBMISSION_INVALID"
    title = "Invalid Submission"


class DuplicateResponseError(SurveyAppError):
    status = 409
    code = "DUPLICATE_RESPONSE"
    title = "Duplicate Response"


class NoResponsesError(SurveyAppError):
    status = 404
    code = "NO_RESPONSES"
    title = "No responses"


__all__ = [
    "SurveyAppError",
    "InvalidDocumentError",
    "SurveyNotFoundError",
    "SurveyClosedError",
    "SubmissionError",
    "DuplicateResponseError",
    "NoResponsesError",
]
