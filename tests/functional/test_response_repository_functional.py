"""Functional tests for response persistence (SqlResponseRepository)."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy import event

from survey_app.logic.errors import InvalidDocumentError, SurveyNotFoundError
from survey_app.logic.repository_responses import SqlResponseRepository
from survey_app.logic.repository_surveys import SqlSurveyRepository
from survey_app.models.response import Answer, NewResponse, RespondentInfo

SURVEY_ID = "survey-under-test"


@pytest.fixture
def repo() -> SqlResponseRepository:
    return SqlResponseRepository()


def _new(address: str | None = "10.0.0.1", **kwargs) -> NewResponse:
    return NewResponse(
        survey_id=kwargs.pop("survey_id", SURVEY_ID),
        answers=kwargs.pop(
            "answers",
            [
                Answer(question_id="q1", question_text="Colour?", question_type="radio", value="blue"),
                Answer(question_id="q2", question_text="Pets?", question_type="checkbox", value=["cat", "dog"]),
                Answer(question_id="q3", question_text="Rate us", question_type="rating", value=4),
            ],
        ),
        respondent_info=RespondentInfo(address=address, user_agent="pytest", session_id="s-1"),
        **kwargs,
    )


def test_create_persists_answers_in_order_with_defaults(repo) -> None:
    stored = repo.create(_new())

    assert stored.response_id
    assert stored.is_complete is True
    assert stored.submitted_at is not None

    [loaded] = repo.list_for_survey(SURVEY_ID)
    assert loaded.response_id == stored.response_id
    assert [a.question_id for a in loaded.answers] == ["q1", "q2", "q3"]
    assert [a.value for a in loaded.answers] == ["blue", ["cat", "dog"], 4]
    assert loaded.answers[1].question_text == "Pets?"
    assert loaded.respondent_info == RespondentInfo(address="10.0.0.1", user_agent="pytest", session_id="s-1")


def test_create_without_survey_id_fails_and_writes_nothing(repo) -> None:
    with pytest.raises(InvalidDocumentError):
        repo.create({"answers": [{"question_id": "q1", "value": "x"}]})
    with pytest.raises(InvalidDocumentError):
        repo.create({"survey_id": "   ", "answers": []})

    assert repo.count_for_survey("") == 0
    assert repo.count_for_survey("   ") == 0


def test_create_rejects_answer_without_question_id(repo) -> None:
    with pytest.raises(InvalidDocumentError):
        repo.create({"survey_id": SURVEY_ID, "answers": [{"value": "orphan"}]})
    assert repo.count_for_survey(SURVEY_ID) == 0


def test_same_survey_and_address_both_persist(repo) -> None:
    first_at = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
    first = repo.create(_new(submitted_at=first_at))
    second = repo.create(_new(submitted_at=first_at + timedelta(minutes=5)))

    assert first.response_id != second.response_id
    assert repo.count_for_survey(SURVEY_ID) == 2

    candidates = repo.find_candidate_duplicates(SURVEY_ID, "10.0.0.1")
    assert [c.response_id for c in candidates] == [second.response_id, first.response_id]


def test_candidate_lookup_is_scoped_to_survey_and_address(repo) -> None:
    repo.create(_new(address="10.0.0.1"))
    repo.create(_new(address="10.0.0.2"))
    repo.create(_new(address="10.0.0.1", survey_id="another-survey"))

    assert len(repo.find_candidate_duplicates(SURVEY_ID, "10.0.0.1")) == 1
    assert repo.find_candidate_duplicates(SURVEY_ID, "10.9.9.9") == []
    assert repo.find_candidate_duplicates(SURVEY_ID, None) == []


def test_list_is_newest_first_and_delete_cascades_answers(repo) -> None:
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    older = repo.create(_new(address="a", submitted_at=base))
    newer = repo.create(_new(address="b", submitted_at=base + timedelta(days=1)))

    assert [r.response_id for r in repo.list_for_survey(SURVEY_ID)] == [newer.response_id, older.response_id]

    assert repo.delete_for_survey(SURVEY_ID) == 2
    assert repo.list_for_survey(SURVEY_ID) == []


def test_response_without_respondent_info_round_trips_as_none(repo) -> None:
    repo.create(NewResponse(survey_id=SURVEY_ID, answers=[Answer(question_id="q1", value=None)]))
    [loaded] = repo.list_for_survey(SURVEY_ID)
    assert loaded.respondent_info is None
    assert loaded.answers[0].value is None


def test_candidate_lookup_loads_answers_only_for_matching_responses(repo) -> None:
    for i in range(5):
        repo.create(_new(address=f"10.0.1.{i}"))
    answer_queries: list = []

    def _capture(conn, cursor, statement, parameters, context, executemany) -> None:
        if "FROM response_answer" in statement:
            answer_queries.append(parameters)

    event.listen(repo.engine, "after_cursor_execute", _capture)
    try:
        [candidate] = repo.find_candidate_duplicates(SURVEY_ID, "10.0.1.3")
    finally:
        event.remove(repo.engine, "after_cursor_execute", _capture)

    assert [a.question_id for a in candidate.answers] == ["q1", "q2", "q3"]
    assert len(answer_queries) == 1
    assert list(answer_queries[0]) == [candidate.response_id]


def test_non_json_values_are_stored_as_text(repo) -> None:
    repo.create(
        _new(
            answers=[
                Answer(question_id="q1", value=date(2024, 3, 9)),
                Answer(question_id="q2", value=[date(2024, 3, 10)]),
            ]
        )
    )
    [loaded] = repo.list_for_survey(SURVEY_ID)
    assert [a.value for a in loaded.answers] == ["2024-03-09", ["2024-03-10"]]


def test_unstorable_value_rolls_back_the_response_row(repo) -> None:
    # the response row is inserted before the answer values are serialised
    with pytest.raises(InvalidDocumentError):
        repo.create(_new(answers=[Answer(question_id="q1", value="ok"), Answer(question_id="q2", value=object())]))

    assert repo.count_for_survey(SURVEY_ID) == 0
    assert repo.find_candidate_duplicates(SURVEY_ID, "10.0.0.1") == []


def test_survey_delete_of_unknown_survey_keeps_responses(repo) -> None:
    repo.create(_new(address="a"))
    repo.create(_new(address="b"))

    with pytest.raises(SurveyNotFoundError):
        SqlSurveyRepository().delete(SURVEY_ID)

    assert repo.count_for_survey(SURVEY_ID) == 2
