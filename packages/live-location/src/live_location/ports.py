from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Protocol

from geo_engine.models import GeoPoint

from live_location.models import FacilityCandidate, PositionOptions, PositionReport


class PositionSource(Protocol):
    def subscribe(self, options: PositionOptions, on_report: Callable[[PositionReport], None]) -> Hashable: ...

    def unsubscribe(self, handle: Hashable) -> None: ...


class FacilitySearch(Protocol):
    async def search(
        self,
        origin: GeoPoint,
        radius_meters: int,
        category: str,
        keyword: str,
    ) -> list[FacilityCandidate]: ...


class NavigationHandoff(Protocol):
    def open_external_route(self, origin: GeoPoint, destination: GeoPoint) -> None: ...
