"""Input validation shared by the HTTP controllers.

Every helper returns ``None`` when the value is acceptable and a user-facing
message otherwise, so routers can turn failures into HTTP 400 responses
before any transaction is opened.
"""
from __future__ import annotations

import re
from datetime import date

from email_validator import EmailNotValidError, validate_email as _validate_email_address

from ..constants import (
    MAX_AGE_YEARS,
    MAX_DESCRIPTION_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_NAME_LENGTH,
    MAX_PASSWORD_LENGTH,
    MIN_EMAIL_LENGTH,
    MIN_NAME_LENGTH,
    MIN_PASSWORD_LENGTH,
)

_WHITESPACE = re.compile(r"\s+")
# Letters from any script plus space, dot, apostrophe and hyphen.
_NAME_PATTERN = re.compile(r"^[^\W\d_](?:[^\W\d_]|[\s.'-])*$")
_VALID_GENDERS = {"male", "female"}


def normalize_name(name: str | None) -> str:
    """Trim a display name and collapse inner whitespace runs."""

    if not isinstance(name, str):
        return ""
    return _WHITESPACE.sub(" ", name).strip()


def normalize_email(email: str) -> str:
    return email.strip().lower()


def validate_email(email: str | None) -> str | None:
    candidate = email.strip() if isinstance(email, str) else ""
    if not candidate:
        return "Please enter an email address."
    if len(candidate) < MIN_EMAIL_LENGTH or len(candidate) > MAX_EMAIL_LENGTH:
        return "Please enter a valid email address."
    try:
        _validate_email_address(candidate, check_deliverability=False)
    except EmailNotValidError:
        return "Please enter a valid email address."
    return None


def validate_password(password: str | None) -> str | None:
    candidate = password.strip() if isinstance(password, str) else ""
    if not candidate:
        return "Please enter a password."
    if len(candidate) < MIN_PASSWORD_LENGTH:
        return f"Passwords must be at least {MIN_PASSWORD_LENGTH} characters long."
    if len(candidate) > MAX_PASSWORD_LENGTH:
        return f"Passwords must be at most {MAX_PASSWORD_LENGTH} characters long."
    if not candidate.isascii():
        return "Passwords may only contain ASCII characters."
    return None


def validate_name(name: str | None) -> str | None:
    normalized = normalize_name(name)
    if not normalized:
        return "Please enter a name."
    if len(normalized) < MIN_NAME_LENGTH:
        return f"Names must be at least {MIN_NAME_LENGTH} characters long."
    if len(normalized) > MAX_NAME_LENGTH:
        return f"Names must be at most {MAX_NAME_LENGTH} characters long."
    if not _NAME_PATTERN.match(normalized):
        return "Please enter a name in a valid format."
    return None


def validate_gender(gender: str | None) -> str | None:
    if gender not in _VALID_GENDERS:
        return "Please choose a valid gender."
    return None


def validate_birthdate(birthdate: date | None, *, paradox_flag: bool = False, today: date | None = None) -> str | None:
    """Reject future birthdates and implausible ages unless the user overrode the check."""

    if birthdate is None:
        return "Please enter a birthdate."
    if paradox_flag:
        return None
    today = today or date.today()
    if birthdate > today:
        return "Birthdates in the future are not allowed."
    age = today.year - birthdate.year - ((today.month, today.day) < (birthdate.month, birthdate.day))
    if age > MAX_AGE_YEARS:
        return f"Ages above {MAX_AGE_YEARS} years are not allowed."
    return None


def validate_description(description: str | None) -> str | None:
    candidate = description.strip() if isinstance(description, str) else ""
    if len(candidate) > MAX_DESCRIPTION_LENGTH:
        return f"Descriptions must be at most {MAX_DESCRIPTION_LENGTH} characters long."
    return None


__all__ = [
    "normalize_name",
    "normalize_email",
    "validate_email",
    "validate_password",
    "validate_name",
    "validate_gender",
    "validate_birthdate",
    "validate_description",
]
