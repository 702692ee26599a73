"""Response persistence.

`ResponseRepository` is the storage-facing contract used by submission and
export flows; `SqlResponseRepository` implements it with SQLAlchemy `text()`
statements over the `response` and `response_answer` tables.

The `(survey_id, respondent_address)` index only speeds up
`find_candidate_duplicates`. It is not unique: inserting two responses with
the same pair succeeds, and one-response-per-respondent rules belong to the
caller.
"""

from __future__ import annotations

import abc
import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Iterable, List, Mapping

from pydantic import ValidationError as PydanticValidationError
from pydantic_core import PydanticSerializationError, to_jsonable_python
from sqlalchemy import bindparam, text as sql_text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError

from survey_app.db.base import get_engine
from survey_app.logic.errors import InvalidDocumentError
from survey_app.models.response import Answer, NewResponse, RespondentInfo, StoredResponse

logger = logging.getLogger(__name__)


def format_timestamp(dt: datetime) -> str:
    """UTC ISO-8601 with microseconds; sorts lexically in time order."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def parse_timestamp(value: str) -> datetime:
    dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def dump_value(value: Any) -> str:
    """JSON text for an answer value; dates, decimals and the like become strings."""
    return json.dumps(to_jsonable_python(value), ensure_ascii=False)


def delete_responses(conn: Connection, survey_id: str) -> int:
    """Delete a survey's responses and their answers on an open connection."""
    conn.execute(
        sql_text(
            """
            DELETE FROM response_answer
            WHERE response_id IN (SELECT response_id FROM response WHERE survey_id = :sid)
            """
        ),
        {"sid": survey_id},
    )
    result = conn.execute(sql_text("DELETE FROM response WHERE survey_id = :sid"), {"sid": survey_id})
    return int(result.rowcount or 0)


class ResponseRepository(abc.ABC):
    @abc.abstractmethod
    def create(self, new: NewResponse | Mapping[str, Any]) -> StoredResponse:
        """Insert one immutable response; raise InvalidDocumentError on rejection."""

    @abc.abstractmethod
    def find_candidate_duplicates(self, survey_id: str, address: str | None) -> List[StoredResponse]:
        """Responses to `survey_id` from the same respondent address."""

    @abc.abstractmethod
    def list_for_survey(self, survey_id: str) -> List[StoredResponse]:
        """All responses to a survey, newest first."""

    @abc.abstractmethod
    def count_for_survey(self, survey_id: str) -> int:
        ...

    @abc.abstractmethod
    def delete_for_survey(self, survey_id: str) -> int:
        ...


def _coerce(new: NewResponse | Mapping[str, Any]) -> NewResponse:
    if isinstance(new, NewResponse):
        return new
    try:
        return NewResponse.model_validate(dict(new or {}))
    except PydanticValidationError as exc:
        fields = sorted({".".join(str(p) for p in e.get("loc", ())) for e in exc.errors()})
        raise InvalidDocumentError(f"response document rejected: invalid fields {fields}") from exc


class SqlResponseRepository(ResponseRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine

    @property
    def engine(self) -> Engine:
        return self._engine or get_engine()

    def create(self, new: NewResponse | Mapping[str, Any]) -> StoredResponse:
        doc = _coerce(new)
        if not doc.survey_id.strip():
            raise InvalidDocumentError("survey_id is required")
        respondent = doc.respondent_info or RespondentInfo()
        stored = StoredResponse(
            response_id=uuid.uuid4().hex,
            survey_id=doc.survey_id,
            answers=list(doc.answers),
            respondent_info=doc.respondent_info,
            submitted_at=doc.submitted_at or datetime.now(timezone.utc),
            is_complete=doc.is_complete,
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(
                    sql_text(
                        """
                        INSERT INTO response (
                            response_id, survey_id, respondent_address, respondent_user_agent,
                            respondent_session_id, submitted_at, is_complete
                        ) VALUES (:rid, :sid, :addr, :ua, :sess, :at, :complete)
                        """
                    ),
                    {
                        "rid": stored.response_id,
                        "sid": stored.survey_id,
                        "addr": respondent.address,
                        "ua": respondent.user_agent,
                        "sess": respondent.session_id,
                        "at": format_timestamp(stored.submitted_at),
                        "complete": bool(stored.is_complete),
                    },
                )
                if stored.answers:
                    conn.execute(
                        sql_text(
                            """
                            INSERT INTO response_answer (
                                response_id, position, question_id, question_text, question_type, value_json
                            ) VALUES (:rid, :pos, :qid, :qtext, :qtype, :value)
                            """
                        ),
                        [
                            {
                                "rid": stored.response_id,
                                "pos": pos,
                                "qid": a.question_id,
                                "qtext": a.question_text,
                                "qtype": a.question_type,
                                "value": dump_value(a.value),
                            }
                            for pos, a in enumerate(stored.answers)
                        ],
                    )
        except IntegrityError as exc:
            logger.warning("response_insert_rejected survey_id=%s error=%s", stored.survey_id, exc.orig)
            raise InvalidDocumentError("response document rejected by the store") from exc
        except (PydanticSerializationError, TypeError, ValueError) as exc:
            logger.warning("response_value_unserialisable survey_id=%s error=%s", stored.survey_id, exc)
            raise InvalidDocumentError("answer value cannot be stored") from exc
        logger.info(
            "response_created response_id=%s survey_id=%s answers=%d",
            stored.response_id,
            stored.survey_id,
            len(stored.answers),
        )
        return stored

    def find_candidate_duplicates(self, survey_id: str, address: str | None) -> List[StoredResponse]:
        if not address:
            return []
        with self.engine.connect() as conn:
            rows = conn.execute(
                sql_text(
                    """
                    SELECT response_id, survey_id, respondent_address, respondent_user_agent,
                           respondent_session_id, submitted_at, is_complete
                    FROM response
                    WHERE survey_id = :sid AND respondent_address = :addr
                    ORDER BY submitted_at DESC
                    """
                ),
                {"sid": survey_id, "addr": address},
            ).mappings().all()
            return self._hydrate(conn, rows)

    def list_for_survey(self, survey_id: str) -> List[StoredResponse]:
        with self.engine.connect() as conn:
            rows = conn.execute(
                sql_text(
                    """
                    SELECT response_id, survey_id, respondent_address, respondent_user_agent,
                           respondent_session_id, submitted_at, is_complete
                    FROM response
                    WHERE survey_id = :sid
                    ORDER BY submitted_at DESC, response_id ASC
                    """
                ),
                {"sid": survey_id},
            ).mappings().all()
            return self._hydrate(conn, rows)

    def count_for_survey(self, survey_id: str) -> int:
        with self.engine.connect() as conn:
            count = conn.execute(
                sql_text("SELECT COUNT(*) FROM response WHERE survey_id = :sid"),
                {"sid": survey_id},
            ).scalar()
        return int(count or 0)

    def delete_for_survey(self, survey_id: str) -> int:
        with self.engine.begin() as conn:
            deleted = delete_responses(conn, survey_id)
        logger.info("responses_deleted survey_id=%s count=%d", survey_id, deleted)
        return deleted

    def _hydrate(self, conn: Connection, rows: Iterable[Mapping[str, Any]]) -> List[StoredResponse]:
        rows = list(rows)
        if not rows:
            return []
        answers_by_response: dict[str, list[Answer]] = {str(r["response_id"]): [] for r in rows}
        answer_rows = conn.execute(
            sql_text(
                """
                SELECT a.response_id, a.position, a.question_id, a.question_text, a.question_type, a.value_json
                FROM response_answer a
                WHERE a.response_id IN :ids
                ORDER BY a.response_id ASC, a.position ASC
                """
            ).bindparams(bindparam("ids", expanding=True)),
            {"ids": list(answers_by_response)},
        ).mappings().all()
        for a in answer_rows:
            bucket = answers_by_response.get(str(a["response_id"]))
            if bucket is None:
                continue
            raw = a["value_json"]
            bucket.append(
                Answer(
                    question_id=str(a["question_id"]),
                    question_text=a["question_text"],
                    question_type=a["question_type"],
                    value=json.loads(raw) if raw is not None else None,
                )
            )
        result: List[StoredResponse] = []
        for r in rows:
            info = RespondentInfo(
                address=r["respondent_address"],
                user_agent=r["respondent_user_agent"],
                session_id=r["respondent_session_id"],
            )
            has_info = any(v is not None for v in (info.address, info.user_agent, info.session_id))
            result.append(
                StoredResponse(
                    response_id=str(r["response_id"]),
                    survey_id=str(r["survey_id"]),
                    answers=answers_by_response[str(r["response_id"])],
                    respondent_info=info if has_info else None,
                    submitted_at=parse_timestamp(r["submitted_at"]),
                    is_complete=bool(r["is_complete"]),
                )
            )
        return result


__all__ = [
    "ResponseRepository",
    "SqlResponseRepository",
    "delete_responses",
    "dump_value",
    "format_timestamp",
    "parse_timestamp",
]
