"""Shared validation utilities for request payloads.

Every rule here raises ``ValueError`` so it can be used directly inside
pydantic field and model validators.
"""

import re
from datetime import datetime, timezone

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MAX_NAME_LENGTH = 200


def require_text(value: str | None, field_name: str) -> str:
    """Strip a required text field and reject blanks."""
    normalized = (value or "").strip()
    if not normalized:
        raise ValueError(f"{field_name} is required.")
    if len(normalized) > MAX_NAME_LENGTH:
        raise ValueError(f"{field_name} must be {MAX_NAME_LENGTH} characters or fewer.")
    return normalized


def optional_text(value: str | None, field_name: str) -> str | None:
    if value is None or not value.strip():
        return None
    return require_text(value, field_name)


def validate_email(email: str | None) -> str:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    normalized = (email or "").strip().lower()
    if not normalized:
        raise ValueError("Email is required.")
    if not EMAIL_PATTERN.match(normalized):
        raise ValueError("Email must be a valid email address.")
    return normalized


def validate_identifier(value: int, field_name: str) -> int:
    """Record identifiers are positive integers."""
    if isinstance(value, bool) or value < 1:
        raise ValueError(f'"{field_name}" should be a valid identifier')
    return value


def to_naive_utc(value: datetime) -> datetime:
    """Drop the offset of an aware timestamp after converting it to UTC.

    Stored clinic times are naive wall-clock values.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def validate_time_order(start: datetime, end: datetime, start_name: str, end_name: str) -> None:
    if start == end:
        raise ValueError(f'"{start_name}" and "{end_name}" cannot be the same')
    if end < start:
        raise ValueError(f'"{end_name}" must be greater than "{start_name}"')
