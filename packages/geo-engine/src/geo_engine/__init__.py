"""Geo engine core package."""

from geo_engine.distance import EARTH_RADIUS_METERS, haversine_distance_meters
from geo_engine.models import GeoPoint
from geo_engine.movement import is_significant_movement

__all__ = [
    "EARTH_RADIUS_METERS",
    "GeoPoint",
    "haversine_distance_meters",
    "is_significant_movement",
]
