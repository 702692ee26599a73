from __future__ import annotations

"""Functional test bootstrap.

Points the application at a file-backed SQLite database before any
`survey_app` import resolves an engine, applies migrations once per session
and empties the tables between tests. Database tests share one database and
must run sequentially (no pytest-xdist).
"""

import os
import pathlib

import pytest

_ROOT = pathlib.Path(__file__).resolve().parents[2]
_DB_FILE = _ROOT / "tmp" / "functional_tests.db"
_DB_FILE.parent.mkdir(parents=True, exist_ok=True)
if _DB_FILE.exists():
    _DB_FILE.unlink()

os.environ["TEST_DATABASE_URL"] = f"sqlite+pysqlite:///{_DB_FILE}"
os.environ["AUTO_APPLY_MIGRATIONS"] = "0"
os.environ.pop("API_BASE_URL", None)
os.environ.pop("LOG_LEVEL", None)

_TABLES = ("response_answer", "response", "survey")


@pytest.fixture(scope="session", autouse=True)
def functional_sqlite_bootstrap():
    """Session-level bootstrap: apply migrations once for the shared DB."""
    from survey_app.db.base import dispose_engine, get_engine
    from survey_app.db.migrations_runner import apply_migrations

    apply_migrations(get_engine())
    yield
    dispose_engine()


@pytest.fixture(autouse=True)
def clean_tables():
    from sqlalchemy import text as sql_text

    from survey_app.db.base import get_engine

    yield
    with get_engine().begin() as conn:
        for table in _TABLES:
            conn.execute(sql_text(f"DELETE FROM {table}"))


@pytest.fixture
def client():
    from fastapi.testclient import TestClient

    from survey_app import create_app

    with TestClient(create_app()) as c:
        yield c


@pytest.fixture
def survey_payload() -> dict:
    return {
        "title": "Team lunch",
        "description": "Where should we eat on Friday?",
        "questions": [
            {
                "text": "Preferred cuisine",
                "type": "radio",
                "required": True,
                "options": [{"text": "Thai", "value": "thai"}, {"text": "Pizza", "value": "pizza"}],
            },
            {
                "text": "Dietary needs",
                "type": "checkbox",
                "options": [{"text": "Vegan", "value": "vegan"}, {"text": "Gluten free", "value": "gf"}],
            },
            {"text": "Anything else?", "type": "textarea"},
        ],
    }


@pytest.fixture
def create_survey(client, survey_payload):
    """Create a survey through the API and return its JSON representation."""

    def _create(**overrides) -> dict:
        payload = {**survey_payload, **overrides}
        resp = client.post("/api/v1/surveys", json=payload)
        assert resp.status_code == 201, resp.text
        return resp.json()["survey"]

    return _create
