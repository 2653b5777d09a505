"""
Date and time formatting helpers.

Reports are keyed by a day-level string (``dd-mm-yy``) so "today's reports"
is a plain equality query, and carry the time of day as a free-form string
that starts with ``HH:MM``.
"""

import re
from datetime import datetime
from typing import Optional

from communitywatch.core.constants import (
    DATE_JOINED_FORMAT,
    DISPLAY_DATE_FORMAT,
    NO_TIME_AVAILABLE,
    REPORT_DATE_FORMAT,
)

TIME_OF_DAY_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})(?::(\d{2}))?")


def get_formatted_date(now: Optional[datetime] = None) -> str:
    """Today's report date key, e.g. ``19-10-26``."""
    return (now or datetime.now()).strftime(REPORT_DATE_FORMAT)


def current_time_string(now: Optional[datetime] = None) -> str:
    """
    Time of day stamped on new reports, e.g. ``14:35:12 GMT+0200``.

    Naive datetimes are treated as local time.
    """
    now = now or datetime.now()
    if now.tzinfo is None:
        now = now.astimezone()
    return now.strftime("%H:%M:%S GMT%z")


def date_joined(now: Optional[datetime] = None) -> str:
    """Month and year a user signed up, e.g. ``Oct 2026``."""
    return (now or datetime.now()).strftime(DATE_JOINED_FORMAT)


def format_date(value: str, date_format: Optional[str] = None) -> str:
    """
    Format an ISO-8601 date string for display.

    Raises:
        ValueError: if ``value`` is not ISO-8601
    """
    parsed = datetime.fromisoformat(value)
    return parsed.strftime(date_format or DISPLAY_DATE_FORMAT)


def format_to_local_time(value: Optional[str]) -> str:
    """Shorten a report time string to ``HH:MM``."""
    if not value:
        return NO_TIME_AVAILABLE

    match = TIME_OF_DAY_PATTERN.match(value)
    if not match:
        return NO_TIME_AVAILABLE

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        return NO_TIME_AVAILABLE

    return f"{hours:02d}:{minutes:02d}"
