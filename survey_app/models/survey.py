"""Pydantic models for surveys and their questions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from survey_app.logic.validation import validate_survey_description, validate_survey_title

QuestionType = Literal["radio", "checkbox", "text", "textarea", "rating"]
SkipOperator = Literal["equals", "not_equals", "contains", "not_contains", "is_answered"]


def _new_question_id() -> str:
    return uuid4().hex


def _as_utc(v: Optional[datetime]) -> Optional[datetime]:
    # Naive datetimes are taken to be UTC
    if v is None:
        return None
    if v.tzinfo is None:
        return v.replace(tzinfo=timezone.utc)
    return v.astimezone(timezone.utc)


def _check_title(v: str) -> str:
    if not validate_survey_title(v):
        raise ValueError("title must contain between 1 and 200 characters")
    return v.strip()


def _check_description(v: Optional[str]) -> Optional[str]:
    if not validate_survey_description(v):
        raise ValueError("description must not exceed 1000 characters")
    return v.strip() if v is not None else None


class QuestionOption(BaseModel):
    text: Optional[str] = None
    value: Optional[str] = None


class SkipCondition(BaseModel):
    # Either an id or, at authoring time, the index of the source question
    question_id: Optional[str] = None
    question_index: Optional[int] = None
    operator: SkipOperator = "equals"
    value: Any = None


class SkipLogic(BaseModel):
    enabled: bool = False
    condition: Optional[SkipCondition] = None


class Question(BaseModel):
    question_id: str = Field(default_factory=_new_question_id)
    text: str
    type: QuestionType
    options: List[QuestionOption] = Field(default_factory=list)
    required: bool = False
    order: Optional[int] = None
    skip_logic: Optional[SkipLogic] = None

    @field_validator("text")
    @classmethod
    def text_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("question text is required")
        return v.strip()


class SurveyCreate(BaseModel):
    title: str
    description: Optional[str] = None
    questions: List[Question] = Field(min_length=1)
    closing_date: Optional[datetime] = None
    allow_multiple_responses: bool = False
    participant_limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def title_valid(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("description")
    @classmethod
    def description_valid(cls, v: Optional[str]) -> Optional[str]:
        return _check_description(v)

    @field_validator("closing_date")
    @classmethod
    def closing_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class SurveyUpdate(BaseModel):
    """Partial update; fields left unset keep their stored value."""

    title: Optional[str] = None
    description: Optional[str] = None
    questions: Optional[List[Question]] = Field(default=None, min_length=1)
    closing_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    allow_multiple_responses: Optional[bool] = None
    participant_limit: Optional[int] = Field(default=None, ge=1)

    @field_validator("title")
    @classmethod
    def title_valid(cls, v: Optional[str]) -> Optional[str]:
        return _check_title(v) if v is not None else None

    @field_validator("description")
    @classmethod
    def description_valid(cls, v: Optional[str]) -> Optional[str]:
        return _check_description(v)

    @field_validator("closing_date")
    @classmethod
    def closing_date_utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v)


class Survey(BaseModel):
    survey_id: str
    title: str
    description: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)
    unique_link: str
    is_active: bool = True
    closing_date: Optional[datetime] = None
    allow_multiple_responses: bool = False
    participant_limit: Optional[int] = None
    created_at: datetime
    updated_at: datetime

    def is_closed(self, now: Optional[datetime] = None) -> bool:
        """True once the closing date has passed."""
        if self.closing_date is None:
            return False
        current = now or datetime.now(timezone.utc)
        return current > _as_utc(self.closing_date)

    def question_by_id(self, question_id: str) -> Optional[Question]:
        for q in self.questions:
            if q.question_id == question_id:
                return q
        return None


__all__ = [
    "QuestionType",
    "SkipOperator",
    "QuestionOption",
    "SkipCondition",
    "SkipLogic",
    "Question",
    "SurveyCreate",
    "SurveyUpdate",
    "Survey",
]
