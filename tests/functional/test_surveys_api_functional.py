"""Functional tests for survey CRUD and the public survey view."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from survey_app.logic.repository_surveys import UNIQUE_LINK_LENGTH

PROBLEM = "application/problem+json"


def test_create_survey_returns_link_and_defaults(client, survey_payload) -> None:
    resp = client.post("/api/v1/surveys", json=survey_payload)

    assert resp.status_code == 201
    assert resp.headers.get("X-Request-Id")
    body = resp.json()
    survey = body["survey"]
    assert survey["title"] == "Team lunch"
    assert survey["is_active"] is True
    assert survey["allow_multiple_responses"] is False
    assert survey["participant_limit"] is None
    assert len(survey["unique_link"]) == UNIQUE_LINK_LENGTH
    assert body["survey_link"].endswith(f"/survey/{survey['unique_link']}")
    assert [q["order"] for q in survey["questions"]] == [0, 1, 2]
    assert all(q["question_id"] for q in survey["questions"])


def test_create_survey_rejects_blank_or_long_title(client, survey_payload) -> None:
    for title in ("   ", "a" * 201):
        resp = client.post("/api/v1/surveys", json={**survey_payload, "title": title})
        assert resp.status_code == 422
        assert resp.headers["content-type"].startswith(PROBLEM)
        assert resp.json()["code"] == "REQUEST_VALIDATION_FAILED"


def test_create_survey_requires_questions(client, survey_payload) -> None:
    resp = client.post("/api/v1/surveys", json={**survey_payload, "questions": []})
    assert resp.status_code == 422


def test_create_survey_trims_title(client, survey_payload) -> None:
    resp = client.post("/api/v1/surveys", json={**survey_payload, "title": "  Padded  "})
    assert resp.json()["survey"]["title"] == "Padded"


def test_skip_logic_index_resolved_on_save(client, survey_payload) -> None:
    questions = survey_payload["questions"] + [
        {
            "text": "Why Thai?",
            "type": "text",
            "skip_logic": {"enabled": True, "condition": {"question_index": 0, "operator": "equals", "value": "thai"}},
        }
    ]
    survey = client.post("/api/v1/surveys", json={**survey_payload, "questions": questions}).json()["survey"]

    condition = survey["questions"][3]["skip_logic"]["condition"]
    assert condition["question_id"] == survey["questions"][0]["question_id"]
    assert condition["question_index"] is None


def test_list_and_get_surveys(client, create_survey) -> None:
    first = create_survey(title="First")
    second = create_survey(title="Second")

    listed = client.get("/api/v1/surveys").json()
    assert listed["count"] == 2
    assert {s["survey_id"] for s in listed["surveys"]} == {first["survey_id"], second["survey_id"]}

    got = client.get(f"/api/v1/surveys/{first['survey_id']}")
    assert got.status_code == 200
    assert got.json()["survey"]["title"] == "First"


def test_get_unknown_survey_is_problem_404(client) -> None:
    resp = client.get("/api/v1/surveys/does-not-exist")
    assert resp.status_code == 404
    assert resp.headers["content-type"].startswith(PROBLEM)
    assert resp.json()["code"] == "SURVEY_NOT_FOUND"


def test_update_survey_is_partial(client, create_survey) -> None:
    survey = create_survey()

    resp = client.put(
        f"/api/v1/surveys/{survey['survey_id']}",
        json={"title": "Renamed", "allow_multiple_responses": True, "participant_limit": 10},
    )

    assert resp.status_code == 200
    updated = resp.json()["survey"]
    assert updated["title"] == "Renamed"
    assert updated["allow_multiple_responses"] is True
    assert updated["participant_limit"] == 10
    assert updated["description"] == survey["description"]
    assert updated["questions"] == survey["questions"]
    assert updated["unique_link"] == survey["unique_link"]


def test_update_rejects_invalid_participant_limit(client, create_survey) -> None:
    survey = create_survey()
    resp = client.put(f"/api/v1/surveys/{survey['survey_id']}", json={"participant_limit": 0})
    assert resp.status_code == 422


def test_delete_survey_removes_it_and_its_responses(client, create_survey) -> None:
    survey = create_survey()
    question_id = survey["questions"][0]["question_id"]
    submitted = client.post(
        f"/api/v1/surveys/public/{survey['unique_link']}/responses",
        json={"answers": [{"question_id": question_id, "value": "thai"}]},
    )
    assert submitted.status_code == 201

    resp = client.delete(f"/api/v1/surveys/{survey['survey_id']}")
    assert resp.status_code == 204

    assert client.get(f"/api/v1/surveys/{survey['survey_id']}").status_code == 404
    assert client.delete(f"/api/v1/surveys/{survey['survey_id']}").status_code == 404

    from survey_app.logic.repository_responses import SqlResponseRepository

    assert SqlResponseRepository().count_for_survey(survey["survey_id"]) == 0


def test_public_view_of_open_survey(client, create_survey) -> None:
    survey = create_survey()
    resp = client.get(f"/api/v1/surveys/public/{survey['unique_link']}")
    assert resp.status_code == 200
    assert resp.json()["survey"]["survey_id"] == survey["survey_id"]


def test_public_view_hides_inactive_and_closed_surveys(client, create_survey) -> None:
    inactive = create_survey()
    client.put(f"/api/v1/surveys/{inactive['survey_id']}", json={"is_active": False})
    assert client.get(f"/api/v1/surveys/public/{inactive['unique_link']}").status_code == 404

    past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
    closed = create_survey(closing_date=past)
    resp = client.get(f"/api/v1/surveys/public/{closed['unique_link']}")
    assert resp.status_code == 400
    assert resp.json()["code"] == "SURVEY_CLOSED"

    assert client.get("/api/v1/surveys/public/no-such-link").status_code == 404
