from __future__ import annotations

from collections.abc import Callable
from typing import Any

import httpx
from geo_engine.models import GeoPoint

from live_location.errors import SearchFailedError
from live_location.models import FacilityCandidate

STATUS_OK = "OK"
STATUS_ZERO_RESULTS = "ZERO_RESULTS"


class GooglePlacesClient:
    """Nearby Search adapter for the Google Places web service."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://maps.googleapis.com/maps/api/place",
        timeout_seconds: float = 5.0,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._timeout_seconds = timeout_seconds
        self._client_factory = client_factory

    async def search(
        self,
        origin: GeoPoint,
        radius_meters: int,
        category: str,
        keyword: str,
    ) -> list[FacilityCandidate]:
        params: dict[str, Any] = {
            "location": f"{origin.lat},{origin.lng}",
            "radius": radius_meters,
            "type": category,
            "keyword": keyword,
            "key": self._api_key,
        }

        try:
            factory = self._client_factory or (lambda: httpx.AsyncClient(timeout=self._timeout_seconds))
            async with factory() as client:
                response = await client.get(f"{self._base_url}/nearbysearch/json", params=params)
                response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise SearchFailedError("places search timed out") from exc
        except httpx.HTTPStatusError as exc:
            raise SearchFailedError(f"places search returned HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise SearchFailedError("places search request failed") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            raise SearchFailedError("places search returned a non-JSON body") from exc
        if not isinstance(payload, dict):
            raise SearchFailedError("places search returned an unexpected payload")

        status = payload.get("status")
        if status == STATUS_ZERO_RESULTS:
            return []
        if status != STATUS_OK:
            raise SearchFailedError(f"places search status {status}")
        results = payload.get("results")
        if not isinstance(results, list):
            raise SearchFailedError("places search results are missing")
        return [_to_candidate(row) for row in results if isinstance(row, dict)]


def _to_candidate(row: dict[str, Any]) -> FacilityCandidate:
    place_id = row.get("place_id")
    return FacilityCandidate(
        id=str(place_id) if place_id else None,
        name=row.get("name"),
        location=_to_point((row.get("geometry") or {}).get("location")),
        address=row.get("vicinity") or row.get("formatted_address"),
    )


def _to_point(location: Any) -> GeoPoint | None:
    if not isinstance(location, dict):
        return None
    lat, lng = location.get("lat"), location.get("lng")
    if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
        return None
    try:
        return GeoPoint(lat=float(lat), lng=float(lng))
    except ValueError:
        return None
