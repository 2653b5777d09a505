"""
Device position lookup.

Positions come from the client device and are gated by the user's location
permission. A provider is any callable returning Coordinates or raising
LocationPermissionError.
"""

import logging
from typing import Callable, Optional

from communitywatch.core.constants import NULL_ISLAND
from communitywatch.core.geo_utils import Coordinates, is_valid_coordinate

logger = logging.getLogger(__name__)

PositionProvider = Callable[[], Coordinates]


class LocationPermissionError(Exception):
    """The user did not grant access to their location."""


class QueryLocationProvider:
    """Position the client sent along with its request."""

    def __init__(self, latitude: Optional[float], longitude: Optional[float]):
        self.latitude = latitude
        self.longitude = longitude

    def __call__(self) -> Coordinates:
        if self.latitude is None or self.longitude is None:
            raise LocationPermissionError("Permission to access location was denied")
        if not is_valid_coordinate(self.latitude, self.longitude):
            raise ValueError(f"Invalid position: ({self.latitude}, {self.longitude})")
        return Coordinates(lat=self.latitude, lng=self.longitude)


def get_current_position(
    provider: PositionProvider,
    fallback: Optional[Coordinates] = None,
) -> Coordinates:
    """
    Ask a provider for the current position.

    Falls back to ``fallback`` (default 0,0) when permission is denied, the
    way the map keeps working without a location fix.
    """
    try:
        return provider()
    except LocationPermissionError as e:
        logger.warning(f"Location unavailable: {e}")
        return fallback or Coordinates(*NULL_ISLAND)


def try_get_position(provider: PositionProvider) -> Optional[Coordinates]:
    """Current position, or None if the user has not shared it."""
    try:
        return provider()
    except LocationPermissionError:
        return None
