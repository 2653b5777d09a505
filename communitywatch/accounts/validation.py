"""
Sign-up form validation.
"""

import re
from typing import Dict, Optional

from communitywatch.core.constants import ALERT_MESSAGES
from communitywatch.crowdsource.validation import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
SPECIAL_CHARACTERS = re.compile(r"[!@#$%^&*(),.?\":{}|<>]")

MIN_PASSWORD_LENGTH = 6

REQUIRED_FIELDS: Dict[str, str] = {
    "firstName": "first name",
    "lastName": "last name",
    "email": "email",
}


def validate_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


def validate_password(password: Optional[str]) -> bool:
    """At least 6 characters with upper, lower, digit and special characters."""
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        return False
    return (
        re.search(r"[A-Z]", password) is not None
        and re.search(r"[a-z]", password) is not None
        and re.search(r"\d", password) is not None
        and SPECIAL_CHARACTERS.search(password) is not None
    )


def validate_sign_up(
    details: Dict[str, str],
    password: str,
    confirm_password: Optional[str] = None,
) -> None:
    """
    Check a sign-up form in the order the questions are asked.

    Raises:
        ValidationError: with the alert for the first failing answer
    """
    for key, label in REQUIRED_FIELDS.items():
        if not (details.get(key) or "").strip():
            raise ValidationError(f"Please enter your {label}.")

    if not validate_email(details.get("email")):
        raise ValidationError(ALERT_MESSAGES["invalid_email"])

    if not validate_password(password):
        raise ValidationError(ALERT_MESSAGES["weak_password"])

    if confirm_password is not None and confirm_password != password:
        raise ValidationError("Passwords do not match.")
