"""Pydantic records for survey responses.

These shapes are independent of the storage engine; the SQL repository maps
them onto the `response` and `response_answer` tables.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator


class Answer(BaseModel):
    """One submitted value plus a snapshot of the question it answers."""

    model_config = {"frozen": True}

    question_id: str = Field(min_length=1)
    question_text: Optional[str] = None
    question_type: Optional[str] = None
    # Scalar, list of values or any other JSON shape depending on question_type
    value: Any = None


class RespondentInfo(BaseModel):
    """Best-effort, unauthenticated respondent signals."""

    model_config = {"frozen": True}

    address: Optional[str] = None
    user_agent: Optional[str] = None
    session_id: Optional[str] = None


class NewResponse(BaseModel):
    survey_id: str = Field(min_length=1)
    answers: List[Answer] = Field(default_factory=list)
    respondent_info: Optional[RespondentInfo] = None
    submitted_at: Optional[datetime] = None
    is_complete: bool = True

    @field_validator("survey_id")
    @classmethod
    def survey_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("survey_id must be a non-empty string")
        return v


class StoredResponse(BaseModel):
    model_config = {"frozen": True}

    response_id: str
    survey_id: str
    answers: List[Answer]
    respondent_info: Optional[RespondentInfo] = None
    submitted_at: datetime
    is_complete: bool = True


class SubmissionAnswer(BaseModel):
    question_id: str
    value: Any = Field(default=None, validation_alias=AliasChoices("value", "answer"))


class ResponseSubmission(BaseModel):
    """Public submission payload: answers keyed by question id."""

    answers: List[SubmissionAnswer] = Field(default_factory=list)


class SubmissionReceipt(BaseModel):
    response_id: str
    submitted_at: datetime


__all__ = [
    "Answer",
    "RespondentInfo",
    "NewResponse",
    "StoredResponse",
    "SubmissionAnswer",
    "ResponseSubmission",
    "SubmissionReceipt",
]
