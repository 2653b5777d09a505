"""
CommunityWatch - Map Module
Map display mode and heat map rendering.
"""

from communitywatch.visualization.map_state import MapState, MapStore
from communitywatch.visualization.map_generator import create_heat_map, save_heat_map

__all__ = [
    "MapState",
    "MapStore",
    "create_heat_map",
    "save_heat_map",
]
