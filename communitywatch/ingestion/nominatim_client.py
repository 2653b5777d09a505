"""
CommunityWatch - Nominatim Client
Forward and reverse geocoding against OpenStreetMap's Nominatim service,
used for the location subscription search.
"""

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from communitywatch.core.config import settings
from communitywatch.core.constants import MIN_GEOCODING_QUERY_LENGTH

logger = logging.getLogger(__name__)

# Most specific address parts first
LABEL_ADDRESS_KEYS = ("suburb", "city_district", "town")
REVERSE_LABEL_ADDRESS_KEYS = LABEL_ADDRESS_KEYS + ("neighbourhood", "village", "city")


class GeocodingError(Exception):
    """Nominatim request failed."""


@dataclass
class LocationSuggestion:
    """A place offered to the user when picking a location label."""
    name: str
    full_address: str
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "full_address": self.full_address,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }


def location_label(item: Dict[str, Any], keys=LABEL_ADDRESS_KEYS) -> str:
    """
    Pick a short label for a Nominatim result.

    Uses the first of the address keys that is present, falling back to the
    first part of ``display_name``.
    """
    address = item.get("address") or {}
    for key in keys:
        if address.get(key):
            return address[key]
    display_name = item.get("display_name") or ""
    return display_name.split(",")[0].strip()


class NominatimClient:
    """
    Client for the Nominatim geocoding API.
    Rate limited to 1 request per second per the public usage policy.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        user_agent: Optional[str] = None,
        country_codes: Optional[str] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the Nominatim client.

        Args:
            base_url: Nominatim server URL
            user_agent: User-Agent header; Nominatim rejects anonymous clients
            country_codes: Comma-separated ISO country codes to search in
            limit: Maximum number of search results
            timeout: Request timeout in seconds
        """
        self.base_url = (base_url or settings.nominatim_url).rstrip("/")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.country_codes = settings.geocoding_country_codes if country_codes is None else country_codes
        self.limit = limit or settings.geocoding_result_limit
        self.timeout = timeout or settings.geocoding_timeout_seconds
        self._client: Optional[httpx.Client] = None
        self._last_request_time = 0.0

    def __enter__(self):
        self._get_client()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            )
        return self._client

    def _rate_limit(self):
        """Ensure we don't exceed rate limits."""
        elapsed = time.time() - self._last_request_time
        if elapsed < 1.0:
            time.sleep(1.0 - elapsed)
        self._last_request_time = time.time()

    def _get(self, path: str, params: Dict[str, Any]) -> Any:
        self._rate_limit()
        try:
            response = self._get_client().get(f"{self.base_url}/{path}", params=params)
            response.raise_for_status()
            return response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Location Search Error: {e}")
            raise GeocodingError(str(e) or "Unable to fetch locations") from e

    def search(self, query: str) -> List[LocationSuggestion]:
        """
        Geocode a free-text place name.

        Args:
            query: Suburb, street or place name

        Returns:
            Matching places; empty for queries under three characters
        """
        if not query or len(query.strip()) < MIN_GEOCODING_QUERY_LENGTH:
            return []

        params = {
            "q": query.strip(),
            "format": "json",
            "addressdetails": 1,
            "limit": self.limit,
        }
        if self.country_codes:
            params["countrycodes"] = self.country_codes

        data = self._get("search", params) or []

        suggestions = []
        for item in data:
            try:
                latitude = float(item["lat"]) if item.get("lat") is not None else None
                longitude = float(item["lon"]) if item.get("lon") is not None else None
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping Nominatim result with bad coordinates: {e}")
                continue

            suggestions.append(LocationSuggestion(
                name=location_label(item),
                full_address=item.get("display_name", ""),
                latitude=latitude,
                longitude=longitude,
            ))

        logger.debug(f"Nominatim returned {len(suggestions)} result(s) for {query!r}")
        return suggestions

    def reverse_geocode(self, latitude: float, longitude: float) -> str:
        """
        Best-effort location label for coordinates.

        Returns:
            Suburb-level label, or an empty string if Nominatim has none
        """
        params = {
            "lat": latitude,
            "lon": longitude,
            "format": "json",
            "addressdetails": 1,
        }

        data = self._get("reverse", params) or {}
        if "error" in data:
            logger.info(f"No address for ({latitude}, {longitude}): {data['error']}")
            return ""

        return location_label(data, REVERSE_LABEL_ADDRESS_KEYS)


def search_locations(query: str, timeout: Optional[float] = None) -> List[LocationSuggestion]:
    """
    Convenience function for a one-off location search.

    Args:
        query: Place name
        timeout: Request timeout

    Returns:
        List of LocationSuggestion
    """
    with NominatimClient(timeout=timeout) as client:
        return client.search(query)
