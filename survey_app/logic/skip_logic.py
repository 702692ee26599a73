"""Conditional question visibility.

A question with enabled skip logic is shown only when its condition holds
against the answer given to the source question. Conditions authored with a
`question_index` are rewritten to the source question's id when the survey
is saved.
"""

from __future__ import annotations

import logging
import math
from typing import Any, List, Mapping

from survey_app.models.survey import Question, Survey

logger = logging.getLogger(__name__)


def resolve_question_indexes(questions: List[Question]) -> List[Question]:
    """Replace `condition.question_index` with the referenced question's id.

    Out-of-range indexes are left untouched.
    """
    resolved: List[Question] = []
    for q in questions:
        cond = q.skip_logic.condition if q.skip_logic and q.skip_logic.enabled else None
        idx = cond.question_index if cond is not None else None
        if idx is not None and 0 <= idx < len(questions):
            new_cond = cond.model_copy(update={"question_id": questions[idx].question_id, "question_index": None})
            new_skip = q.skip_logic.model_copy(update={"condition": new_cond})
            q = q.model_copy(update={"skip_logic": new_skip})
        resolved.append(q)
    return resolved


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(value: Any) -> float:
    # NaN for anything non-numeric so comparisons mirror numeric coercion
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return 0.0
        try:
            return float(text)
        except ValueError:
            return math.nan
    return math.nan


def _unanswered(value: Any) -> bool:
    return value is None or value == "" or value is False


def _equals(actual: Any, expected: Any) -> bool:
    if _is_number(actual) or _is_number(expected):
        return _to_number(actual) == _to_number(expected)
    return actual == expected


def is_question_visible(question: Question, survey: Survey, answers: Mapping[str, Any]) -> bool:
    """Evaluate `question`'s skip logic against submitted answers by question id."""
    skip = question.skip_logic
    if skip is None or not skip.enabled or skip.condition is None:
        return True
    cond = skip.condition
    if not cond.question_id or survey.question_by_id(cond.question_id) is None:
        logger.warning(
            "skip_logic_source_missing question_id=%s source=%s", question.question_id, cond.question_id
        )
        return True

    actual = answers.get(cond.question_id)
    op = cond.operator
    if op == "equals":
        return False if _unanswered(actual) else _equals(actual, cond.value)
    if op == "not_equals":
        return False if _unanswered(actual) else not _equals(actual, cond.value)
    if op == "contains":
        return isinstance(actual, list) and cond.value in actual
    if op == "not_contains":
        return cond.value not in actual if isinstance(actual, list) else True
    if op == "is_answered":
        if isinstance(actual, list):
            return len(actual) > 0
        return actual is not None and actual != ""
    return True


__all__ = ["is_question_visible", "resolve_question_indexes"]
