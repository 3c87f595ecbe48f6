"""Great-circle distance on a spherical Earth."""

import math

from geo_engine.models import GeoPoint

EARTH_RADIUS_METERS = 6_371_000


def haversine_distance_meters(start: GeoPoint, end: GeoPoint) -> float:
    phi_start = math.radians(start.lat)
    phi_end = math.radians(end.lat)
    half_delta_phi = math.radians(end.lat - start.lat) / 2
    half_delta_lambda = math.radians(end.lng - start.lng) / 2

    h = math.sin(half_delta_phi) ** 2 + math.cos(phi_start) * math.cos(phi_end) * math.sin(half_delta_lambda) ** 2
    central_angle = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * central_angle
