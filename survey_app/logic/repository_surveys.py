"""Survey data access helpers.

Surveys are stored one row per survey with the ordered question list held
as JSON text. Public links are random base36 tokens guarded by a unique
index; a collision is retried with a fresh token.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
import uuid
from datetime import datetime, timezone
from typing import Any, List, Mapping, Optional

from sqlalchemy import text as sql_text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

from survey_app.db.base import get_engine
from survey_app.logic.errors import InvalidDocumentError, SurveyNotFoundError
from survey_app.logic.repository_responses import delete_responses, format_timestamp, parse_timestamp
from survey_app.logic.skip_logic import resolve_question_indexes
from survey_app.models.survey import Question, Survey, SurveyCreate, SurveyUpdate

logger = logging.getLogger(__name__)

UNIQUE_LINK_ALPHABET = string.digits + string.ascii_lowercase
UNIQUE_LINK_LENGTH = 26
_LINK_ATTEMPTS = 3

_SELECT_SURVEY = """
    SELECT survey_id, title, description, questions, unique_link, is_active, closing_date,
           allow_multiple_responses, participant_limit, created_at, updated_at
    FROM survey
"""


def generate_unique_link() -> str:
    return "".join(secrets.choice(UNIQUE_LINK_ALPHABET) for _ in range(UNIQUE_LINK_LENGTH))


def _prepare_questions(questions: List[Question]) -> List[Question]:
    """Fill missing `order` values by position and resolve skip-logic indexes."""
    ordered = [
        q if q.order is not None else q.model_copy(update={"order": pos})
        for pos, q in enumerate(questions)
    ]
    return resolve_question_indexes(ordered)


def _dump_questions(questions: List[Question]) -> str:
    return json.dumps([q.model_dump(mode="json") for q in questions], ensure_ascii=False)


def _row_to_survey(row: Mapping[str, Any]) -> Survey:
    return Survey(
        survey_id=str(row["survey_id"]),
        title=row["title"],
        description=row["description"],
        questions=[Question.model_validate(q) for q in json.loads(row["questions"] or "[]")],
        unique_link=row["unique_link"],
        is_active=bool(row["is_active"]),
        closing_date=parse_timestamp(row["closing_date"]) if row["closing_date"] else None,
        allow_multiple_responses=bool(row["allow_multiple_responses"]),
        participant_limit=row["participant_limit"],
        created_at=parse_timestamp(row["created_at"]),
        updated_at=parse_timestamp(row["updated_at"]),
    )


class SqlSurveyRepository:
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine or get_engine()

    def create(self, payload: SurveyCreate) -> Survey:
        now = datetime.now(timezone.utc)
        survey_id = uuid.uuid4().hex
        questions = _prepare_questions(payload.questions)
        for attempt in range(1, _LINK_ATTEMPTS + 1):
            link = generate_unique_link()
            try:
                with self.engine.begin() as conn:
                    conn.execute(
                        sql_text(
                            """
                            INSERT INTO survey (
                                survey_id, title, description, questions, unique_link, is_active,
                                closing_date, allow_multiple_responses, participant_limit,
                                created_at, updated_at
                            ) VALUES (
                                :sid, :title, :description, :questions, :link, :active,
                                :closing, :multi, :limit, :created, :updated
                            )
                            """
                        ),
                        {
                            "sid": survey_id,
                            "title": payload.title,
                            "description": payload.description,
                            "questions": _dump_questions(questions),
                            "link": link,
                            "active": True,
                            "closing": format_timestamp(payload.closing_date) if payload.closing_date else None,
                            "multi": bool(payload.allow_multiple_responses),
                            "limit": payload.participant_limit,
                            "created": format_timestamp(now),
                            "updated": format_timestamp(now),
                        },
                    )
                break
            except IntegrityError as exc:
                logger.warning("survey_insert_conflict attempt=%d error=%s", attempt, exc.orig)
                if attempt == _LINK_ATTEMPTS:
                    raise InvalidDocumentError("survey document rejected by the store") from exc
        logger.info("survey_created survey_id=%s questions=%d", survey_id, len(questions))
        return self.get(survey_id)

    def get(self, survey_id: str) -> Survey:
        with self.engine.connect() as conn:
            row = conn.execute(
                sql_text(_SELECT_SURVEY + " WHERE survey_id = :sid"),
                {"sid": survey_id},
            ).mappings().fetchone()
        if not row:
            raise SurveyNotFoundError(f"survey {survey_id} not found")
        return _row_to_survey(row)

    def get_by_link(self, unique_link: str) -> Optional[Survey]:
        with self.engine.connect() as conn:
            row = conn.execute(
                sql_text(_SELECT_SURVEY + " WHERE unique_link = :link"),
                {"link": unique_link},
            ).mappings().fetchone()
        return _row_to_survey(row) if row else None

    def list(self) -> List[Survey]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                sql_text(_SELECT_SURVEY + " ORDER BY created_at DESC, survey_id ASC")
            ).mappings().all()
        return [_row_to_survey(r) for r in rows]

    def update(self, survey_id: str, changes: SurveyUpdate) -> Survey:
        current = self.get(survey_id)
        fields = changes.model_dump(exclude_unset=True)
        # Explicit nulls for required columns are ignored
        for key in ("title", "questions", "is_active", "allow_multiple_responses"):
            if fields.get(key) is None:
                fields.pop(key, None)
        if "questions" in fields:
            fields["questions"] = _prepare_questions(changes.questions or [])
        merged = current.model_copy(update=fields)
        with self.engine.begin() as conn:
            conn.execute(
                sql_text(
                    """
                    UPDATE survey SET
                        title = :title,
                        description = :description,
                        questions = :questions,
                        is_active = :active,
                        closing_date = :closing,
                        allow_multiple_responses = :multi,
                        participant_limit = :limit,
                        updated_at = :updated
                    WHERE survey_id = :sid
                    """
                ),
                {
                    "sid": survey_id,
                    "title": merged.title,
                    "description": merged.description,
                    "questions": _dump_questions(merged.questions),
                    "active": bool(merged.is_active),
                    "closing": format_timestamp(merged.closing_date) if merged.closing_date else None,
                    "multi": bool(merged.allow_multiple_responses),
                    "limit": merged.participant_limit,
                    "updated": format_timestamp(datetime.now(timezone.utc)),
                },
            )
        logger.info("survey_updated survey_id=%s fields=%s", survey_id, sorted(fields))
        return self.get(survey_id)

    def set_active(self, survey_id: str, active: bool) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                sql_text("UPDATE survey SET is_active = :active, updated_at = :updated WHERE survey_id = :sid"),
                {"sid": survey_id, "active": bool(active), "updated": format_timestamp(datetime.now(timezone.utc))},
            )
        logger.info("survey_active_changed survey_id=%s active=%s", survey_id, active)

    def delete(self, survey_id: str) -> int:
        """Delete a survey and its responses in one transaction; return responses removed."""
        with self.engine.begin() as conn:
            removed = delete_responses(conn, survey_id)
            result = conn.execute(
                sql_text("DELETE FROM survey WHERE survey_id = :sid"),
                {"sid": survey_id},
            )
            if not result.rowcount:
                # raising inside the block rolls the response delete back
                raise SurveyNotFoundError(f"survey {survey_id} not found")
        logger.info("survey_deleted survey_id=%s responses=%d", survey_id, removed)
        return removed


__all__ = ["SqlSurveyRepository", "generate_unique_link", "UNIQUE_LINK_LENGTH"]
