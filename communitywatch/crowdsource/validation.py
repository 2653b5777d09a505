"""
Report submission validation
Checks a report form before it is written to Firestore.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from communitywatch.core.constants import ALERT_MESSAGES, MAX_DESCRIPTION_LENGTH, REPORT_TYPES
from communitywatch.core.geo_utils import Coordinates

logger = logging.getLogger(__name__)


class ValidationError(ValueError):
    """Form input rejected; ``str(error)`` is the message shown to the user."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = errors or []


@dataclass
class ValidationResult:
    """Outcome of validating a report form."""
    valid: bool
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": self.errors}


class ReportValidator:
    """
    Validates report submissions.

    A report needs a known type, a location label and a description no longer
    than the card can show; coordinates must be on the globe.
    """

    def __init__(self, max_description_length: int = MAX_DESCRIPTION_LENGTH):
        self.max_description_length = max_description_length

    def validate(
        self,
        report_type: Optional[str],
        location: Optional[str],
        description: Optional[str],
        coords: Optional[Coordinates] = None,
    ) -> ValidationResult:
        errors = []

        if not report_type:
            errors.append("report type is required")
        elif report_type not in REPORT_TYPES:
            errors.append(f"unknown report type: {report_type}")

        if not location or not location.strip():
            errors.append("location is required")

        if not description or not description.strip():
            errors.append("description is required")
        elif len(description) > self.max_description_length:
            errors.append(f"description must be at most {self.max_description_length} characters")

        if coords is not None and not coords.is_valid:
            errors.append("coordinates are out of range")

        return ValidationResult(valid=not errors, errors=errors)


def validate_report(
    report_type: Optional[str],
    location: Optional[str],
    description: Optional[str],
    coords: Optional[Coordinates] = None,
) -> None:
    """
    Raise ValidationError if the report form is incomplete.

    The raised message is the alert the app shows; the individual problems are
    on ``error.errors``.
    """
    result = ReportValidator().validate(report_type, location, description, coords)
    if not result.valid:
        logger.info(f"Report rejected: {', '.join(result.errors)}")
        raise ValidationError(ALERT_MESSAGES["report_incomplete"], result.errors)
