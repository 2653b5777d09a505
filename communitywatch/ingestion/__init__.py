"""
CommunityWatch - Location Module
Geocoding and device position lookup.
"""

from communitywatch.ingestion.nominatim_client import (
    NominatimClient,
    LocationSuggestion,
    GeocodingError,
    search_locations,
)
from communitywatch.ingestion.geolocation import (
    LocationPermissionError,
    QueryLocationProvider,
    get_current_position,
    try_get_position,
)

__all__ = [
    # Nominatim
    "NominatimClient",
    "LocationSuggestion",
    "GeocodingError",
    "search_locations",
    # Geolocation
    "LocationPermissionError",
    "QueryLocationProvider",
    "get_current_position",
    "try_get_position",
]
