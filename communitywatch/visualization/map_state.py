"""
Map display mode: heat map of today's reports, or pin placement for a new one.
"""

import logging
from enum import Enum
from typing import Any, Dict, Union

from communitywatch.core.constants import NULL_ISLAND
from communitywatch.core.geo_utils import Coordinates, is_valid_coordinate

logger = logging.getLogger(__name__)


class MapState(str, Enum):
    """Map interaction mode."""
    PIN = "Pin"
    HEAT_MAP = "HeatMap"


class MapStore:
    """Transient map mode and pin position for one user; never persisted."""

    def __init__(self):
        self.map_state: MapState = MapState.HEAT_MAP
        self.pin: Coordinates = Coordinates(*NULL_ISLAND)

    def set_map_state(self, state: Union[MapState, str]) -> MapState:
        """Switch mode; anything unrecognised falls back to the heat map."""
        try:
            self.map_state = MapState(state)
        except ValueError:
            logger.warning(f"Unknown map state {state!r}, showing heat map")
            self.map_state = MapState.HEAT_MAP
        return self.map_state

    def toggle(self) -> MapState:
        """Flip between pin placement and the heat map."""
        if self.map_state == MapState.HEAT_MAP:
            return self.set_map_state(MapState.PIN)
        return self.set_map_state(MapState.HEAT_MAP)

    def set_pin(self, lat: Any, lng: Any) -> Coordinates:
        """Place the pin; invalid coordinates reset it to 0,0."""
        if is_valid_coordinate(lat, lng):
            self.pin = Coordinates(lat=float(lat), lng=float(lng))
        else:
            logger.error(f"Failed to set pin: invalid coordinates ({lat}, {lng})")
            self.pin = Coordinates(*NULL_ISLAND)
        return self.pin

    def fetch_pin(self) -> Coordinates:
        return self.pin

    def to_dict(self) -> Dict[str, Any]:
        return {
            "map_state": self.map_state.value,
            "pin": self.pin.to_dict(),
        }
