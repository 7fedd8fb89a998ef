"""
Password complexity validation helper.
"""

import re
from dataclasses import dataclass
from typing import List


@dataclass
class PasswordRequirements:
    """Password complexity requirements configuration."""

    min_length: int = 8
    max_length: int = 72  # bcrypt ignores everything past 72 bytes
    require_letter: bool = True
    require_digit: bool = True


DEFAULT_REQUIREMENTS = PasswordRequirements()


def validate_password_complexity(
    password: str,
    requirements: PasswordRequirements = DEFAULT_REQUIREMENTS,
) -> tuple[bool, List[str]]:
    """
    Validate password against complexity requirements.

    Args:
        password: Password to validate
        requirements: Password requirements configuration

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors: List[str] = []

    if len(password) < requirements.min_length:
        errors.append(
            f"Password must be at least {requirements.min_length} characters long"
        )

    if len(password.encode("utf-8")) > requirements.max_length:
        errors.append(
            f"Password must be at most {requirements.max_length} bytes long"
        )

    if requirements.require_letter and not re.search(r"[A-Za-z]", password):
        errors.append("Password must contain at least one letter")

    if requirements.require_digit and not re.search(r"\d", password):
        errors.append("Password must contain at least one digit")

    return len(errors) == 0, errors
