"""Validation helpers for user supplied values."""
from __future__ import annotations

import re

_EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}$")

_MAX_EMAIL_LENGTH = 254  # RFC 5321 path limit; checked before the regex


def normalize_email(email: str) -> str:
    """Return *email* trimmed and lower-cased, the form stored and compared."""
    return email.strip().lower()


def validate_email(email: str) -> bool:
    """Return True if email has a valid format."""
    if not email or not isinstance(email, str):
        return False
    if len(email) > _MAX_EMAIL_LENGTH:
        return False
    return bool(_EMAIL_RE.match(email))


def emails_match(left: str, right: str) -> bool:
    """Case-insensitive comparison of two addresses after normalisation."""
    return normalize_email(left) == normalize_email(right)


__all__ = [
    "emails_match",
    "normalize_email",
    "validate_email",
]
