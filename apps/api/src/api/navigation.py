from __future__ import annotations

import logging
from urllib.parse import urlencode

from geo_engine.models import GeoPoint

logger = logging.getLogger(__name__)

GOOGLE_MAPS_DIRECTIONS_URL = "https://www.google.com/maps/dir/"


class GoogleMapsDeepLinkNavigator:
    """Hands a route off to Google Maps by deep link; no in-app routing."""

    def __init__(self, travel_mode: str = "driving") -> None:
        self._travel_mode = travel_mode
        self.last_link: str | None = None

    def directions_url(self, origin: GeoPoint, destination: GeoPoint) -> str:
        query = urlencode(
            {
                "api": "1",
                "origin": f"{origin.lat},{origin.lng}",
                "destination": f"{destination.lat},{destination.lng}",
                "travelmode": self._travel_mode,
            }
        )
        return f"{GOOGLE_MAPS_DIRECTIONS_URL}?{query}"

    def open_external_route(self, origin: GeoPoint, destination: GeoPoint) -> None:
        self.last_link = self.directions_url(origin, destination)
        logger.info("navigation_handoff", extra={"component": "api", "link": self.last_link})
