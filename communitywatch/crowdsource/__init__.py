"""
CommunityWatch - Crowdsource Module
Handles community incident reports, feed ranking and feedback.
"""

from communitywatch.crowdsource.report_handler import (
    ReportStore,
    Report,
    ReportType,
    StoreState,
)
from communitywatch.crowdsource.ranking import (
    rank_reports,
    parse_time_of_day,
)
from communitywatch.crowdsource.validation import (
    ReportValidator,
    ValidationError,
    ValidationResult,
    validate_report,
)
from communitywatch.crowdsource.feedback import submit_feedback

__all__ = [
    # Report Handler
    "ReportStore",
    "Report",
    "ReportType",
    "StoreState",
    # Ranking
    "rank_reports",
    "parse_time_of_day",
    # Validation
    "ReportValidator",
    "ValidationError",
    "ValidationResult",
    "validate_report",
    # Feedback
    "submit_feedback",
]
