"""Functional tests for the input validation predicates."""

from __future__ import annotations

import pytest

from survey_app.logic.validation import (
    validate_email,
    validate_password,
    validate_survey_description,
    validate_survey_title,
)


@pytest.mark.parametrize(
    "email",
    ["user@example.com", "test.user@domain.co.uk", "name+tag@gmail.com", "a@b.c"],
)
def test_validate_email_accepts_local_domain_tld(email: str) -> None:
    assert validate_email(email) is True


@pytest.mark.parametrize(
    "email",
    [
        "",
        "invalid-email",
        "@example.com",
        "user@",
        "user@example",
        "user @example.com",
        "user@exa mple.com",
        "user@@example.com",
        "user@example.com\n",
        "user@.com",
    ],
)
def test_validate_email_rejects_malformed_addresses(email: str) -> None:
    assert validate_email(email) is False


def test_validate_email_is_total_over_non_strings() -> None:
    assert validate_email(None) is False
    assert validate_email(42) is False


def test_validate_password_requires_six_characters() -> None:
    assert validate_password("123456") is True
    assert validate_password("password123") is True
    assert validate_password("a" * 1000) is True
    assert validate_password("12345") is False
    assert validate_password("") is False
    assert validate_password(None) is False


def test_validate_survey_title_bounds_after_trimming() -> None:
    assert validate_survey_title("Survey 2024") is True
    assert validate_survey_title("  padded  ") is True
    assert validate_survey_title("a" * 200) is True
    assert validate_survey_title(" " + "a" * 200 + " ") is True
    assert validate_survey_title("a" * 201) is False
    assert validate_survey_title("") is False
    assert validate_survey_title("   ") is False
    assert validate_survey_title(None) is False


def test_validate_survey_description_limit() -> None:
    assert validate_survey_description(None) is True
    assert validate_survey_description("") is True
    assert validate_survey_description("x" * 1000) is True
    assert validate_survey_description("x" * 1001) is False
