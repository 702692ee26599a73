"""Input validation predicates.

Pure, total functions over primitive input. Invalid input (including values
of the wrong type) yields False; nothing here raises.
"""

from __future__ import annotations

import re
from typing import Any

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PASSWORD_MIN_LENGTH = 6
SURVEY_TITLE_MAX_LENGTH = 200
SURVEY_DESCRIPTION_MAX_LENGTH = 1000


def validate_email(email: Any) -> bool:
    """Return True for `local@domain.tld` shaped strings without whitespace."""
    if not isinstance(email, str):
        return False
    return EMAIL_PATTERN.fullmatch(email) is not None


def validate_password(password: Any) -> bool:
    if not isinstance(password, str):
        return False
    return len(password) >= PASSWORD_MIN_LENGTH


def validate_survey_title(title: Any) -> bool:
    """Trimmed title must contain between 1 and 200 characters."""
    if not isinstance(title, str):
        return False
    return 0 < len(title.strip()) <= SURVEY_TITLE_MAX_LENGTH


def validate_survey_description(description: Any) -> bool:
    if description is None:
        return True
    if not isinstance(description, str):
        return False
    return len(description.strip()) <= SURVEY_DESCRIPTION_MAX_LENGTH


__all__ = [
    "validate_email",
    "validate_password",
    "validate_survey_title",
    "validate_survey_description",
]
