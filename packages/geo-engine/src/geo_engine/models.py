import math
from dataclasses import dataclass


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.lat) or not -90 <= self.lat <= 90:
            raise ValueError("lat must be between -90 and 90")
        if not math.isfinite(self.lng) or not -180 <= self.lng <= 180:
            raise ValueError("lng must be between -180 and 180")
