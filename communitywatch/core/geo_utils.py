"""
CommunityWatch - Geospatial Utilities
Coordinate handling and great-circle distances for report ranking and maps.
"""

import math
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Coordinates:
    """Geographic point stored the way Firestore documents hold it: {lat, lng}."""
    lat: float
    lng: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Coordinates":
        """Build from a ``{"lat", "lng"}`` or ``{"latitude", "longitude"}`` mapping."""
        if "lat" in data:
            return cls(lat=float(data["lat"]), lng=float(data["lng"]))
        return cls(lat=float(data["latitude"]), lng=float(data["longitude"]))

    def to_dict(self) -> Dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    def to_tuple(self) -> Tuple[float, float]:
        return (self.lat, self.lng)

    @property
    def is_valid(self) -> bool:
        return is_valid_coordinate(self.lat, self.lng)


def is_valid_coordinate(lat: Any, lng: Any) -> bool:
    """Check that lat/lng are finite numbers inside their ranges."""
    if isinstance(lat, bool) or isinstance(lng, bool):
        return False
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return False
    if math.isnan(lat) or math.isnan(lng):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0


def haversine_distance(
    lat1: float, lon1: float,
    lat2: float, lon2: float
) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Args:
        lat1, lon1: First point coordinates in decimal degrees
        lat2, lon2: Second point coordinates in decimal degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(delta_lat / 2) ** 2 +
        math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def distance_between(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in kilometers between two Coordinates."""
    return haversine_distance(a.lat, a.lng, b.lat, b.lng)


def calculate_centroid(
    points: Sequence[Tuple[float, float]]
) -> Optional[Tuple[float, float]]:
    """
    Average of a set of (lat, lng) points.

    Returns None for an empty set so callers can pick their own default center.
    """
    if not points:
        return None

    lat_sum = sum(p[0] for p in points)
    lng_sum = sum(p[1] for p in points)
    n = len(points)

    return (lat_sum / n, lng_sum / n)


def bounding_box(
    points: List[Tuple[float, float]]
) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """South-west and north-east corners around a set of (lat, lng) points."""
    if not points:
        return None
    lats = [p[0] for p in points]
    lngs = [p[1] for p in points]
    return ((min(lats), min(lngs)), (max(lats), max(lngs)))
