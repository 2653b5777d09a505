"""
CommunityWatch - Constants and Reference Data
Static values used throughout the application.
"""

from typing import Dict, List, Tuple

# =============================================================================
# REPORT TYPES
# =============================================================================

REPORT_TYPES: List[str] = [
    "Crime",
    "Suspicious Activity",
    "Be Alert",
]

# Icon, card background and text colour per report type
REPORT_TYPE_STYLES: Dict[str, Dict[str, str]] = {
    "crime": {
        "icon": "alert-octagon",
        "background": "rgba(239, 68, 68, 0.1)",
        "color": "#DC2626",
    },
    "suspicious activity": {
        "icon": "alert",
        "background": "rgba(234, 179, 8, 0.1)",
        "color": "#B45309",
    },
    "default": {
        "icon": "information",
        "background": "rgba(59, 130, 246, 0.1)",
        "color": "#2563EB",
    },
}

MAX_DESCRIPTION_LENGTH: int = 250

# =============================================================================
# DATES AND TIMES
# =============================================================================

# Day-level key stored on every report, e.g. "19-10-26"
REPORT_DATE_FORMAT: str = "%d-%m-%y"

DISPLAY_DATE_FORMAT: str = "%b %d, %Y"

# "Oct 2026"
DATE_JOINED_FORMAT: str = "%b %Y"

NO_TIME_AVAILABLE: str = "No time available"

# =============================================================================
# MAP
# =============================================================================

HEAT_MAP_POINT_WEIGHT: int = 10

HEAT_MAP_GRADIENT: Dict[float, str] = {
    0.2: "blue",
    0.4: "lime",
    0.6: "yellow",
    0.8: "orange",
    1.0: "red",
}

NULL_ISLAND: Tuple[float, float] = (0.0, 0.0)

# =============================================================================
# EXTERNAL SERVICES
# =============================================================================

# Firestore rejects "in" filters with more values than this
FIRESTORE_IN_QUERY_LIMIT: int = 30

FIREBASE_AUTH_REST_URL: str = "https://identitytoolkit.googleapis.com/v1"

MIN_GEOCODING_QUERY_LENGTH: int = 3

API_RATE_LIMITS: Dict[str, Dict[str, int]] = {
    "nominatim": {"requests": 1, "period_seconds": 1},
}

# =============================================================================
# USER-FACING MESSAGES
# =============================================================================

ALERT_MESSAGES: Dict[str, str] = {
    "report_failed": "There was a problem making your report. Please try again later.",
    "report_incomplete": "Please make sure all the values are filled in.",
    "reports_unavailable": "Could not load reports. Pull to refresh and try again.",
    "location_denied": "Could not find location. Please make sure the app has permission",
    "verification_sent": "Please check your email to complete the verification process",
    "generic_error": "An error occurred, please try again later.",
    "invalid_email": "Please enter a valid email address.",
    "weak_password": (
        "Password must be at least 6 characters and contain an uppercase letter, "
        "a lowercase letter, a number and a special character."
    ),
    "locations_failed": "Unable to fetch locations",
}
