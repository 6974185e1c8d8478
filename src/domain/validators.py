"""
Input validators - Pure functions for email and password rules.

Password length is not checked here; the registration guard enforces
the minimum length so it can report it as a separate error.
"""

import re
from collections.abc import Iterable

MIN_PASSWORD_LENGTH = 8

SPECIAL_CHARACTERS = "!@#$%^&*()_+-=[]{};':\"\\|,.<>/?"

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@([^\s@]+\.[^\s@]+)$")
_SPECIAL_CHARACTER_PATTERN = re.compile("[" + re.escape(SPECIAL_CHARACTERS) + "]")


def normalize_email(email: str) -> str:
    """
    Normalize email address for consistent storage and lookup.

    Applies: strip whitespace + lowercase
    """
    return email.strip().lower()


def is_email_valid(email: str, allowed_domains: Iterable[str] = ()) -> bool:
    """
    Check that ``email`` has the ``localpart@domain`` shape.

    Args:
        email: Email address to check
        allowed_domains: Domains accepted after the ``@``. Empty accepts
            any domain.
    """
    match = _EMAIL_PATTERN.match(email)
    if match is None:
        return False

    allowed = {domain.strip().lower() for domain in allowed_domains}
    if not allowed:
        return True
    return match.group(1).lower() in allowed


def is_password_valid(password: str) -> bool:
    """Check that ``password`` contains at least one special character."""
    return _SPECIAL_CHARACTER_PATTERN.search(password) is not None
