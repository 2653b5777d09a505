"""
CommunityWatch - Core Utilities
Central configuration, logging, and utility functions.
"""

from communitywatch.core.config import settings
from communitywatch.core.constants import (
    REPORT_TYPES,
    REPORT_TYPE_STYLES,
    ALERT_MESSAGES,
)
from communitywatch.core.geo_utils import (
    Coordinates,
    haversine_distance,
    distance_between,
    calculate_centroid,
)
from communitywatch.core.date_utils import (
    get_formatted_date,
    current_time_string,
    format_to_local_time,
)

__all__ = [
    "settings",
    "REPORT_TYPES",
    "REPORT_TYPE_STYLES",
    "ALERT_MESSAGES",
    "Coordinates",
    "haversine_distance",
    "distance_between",
    "calculate_centroid",
    "get_formatted_date",
    "current_time_string",
    "format_to_local_time",
]
