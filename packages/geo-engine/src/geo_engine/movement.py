from geo_engine.distance import haversine_distance_meters
from geo_engine.models import GeoPoint


def is_significant_movement(previous: GeoPoint, current: GeoPoint, threshold_meters: float) -> bool:
    if threshold_meters < 0:
        raise ValueError("threshold_meters must be >= 0")
    return haversine_distance_meters(previous, current) >= threshold_meters
