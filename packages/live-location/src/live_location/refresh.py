from __future__ import annotations

import asyncio
from collections.abc import Callable
from datetime import datetime
import logging
from time import perf_counter

from geo_engine.models import GeoPoint
from opentelemetry import trace

from live_location.errors import LocationUnavailableError, SearchFailedError, SelectionNotFoundError
from live_location.metrics import InMemoryLiveLocationMetrics
from live_location.models import (
    ADDRESS_NOT_AVAILABLE,
    UNNAMED_FACILITY,
    Facility,
    FacilityCandidate,
    FacilitySnapshot,
    FetchStatus,
    SelectedRoute,
    utc_now,
)
from live_location.ports import FacilitySearch, NavigationHandoff
from live_location.selection import RouteSelection

logger = logging.getLogger(__name__)

DEFAULT_RADIUS_METERS = 15_000
DEFAULT_CATEGORY = "hospital"
DEFAULT_KEYWORD = "multi specialty hospital"


def to_facilities(candidates: list[FacilityCandidate]) -> list[Facility]:
    """Drop rows without id or coordinates and repeated ids, keeping provider order."""
    seen: set[str] = set()
    facilities: list[Facility] = []
    for candidate in candidates:
        if not candidate.id or candidate.location is None:
            continue
        if candidate.id in seen:
            continue
        seen.add(candidate.id)
        facilities.append(
            Facility(
                id=candidate.id,
                name=candidate.name or UNNAMED_FACILITY,
                location=candidate.location,
                address=candidate.address or ADDRESS_NOT_AVAILABLE,
            )
        )
    return facilities


class FacilityRefreshController:
    """Keeps the nearby facility list in sync with the latest accepted location.

    Every accepted location issues a new search. Completions are applied only
    when they belong to the most recently issued request; anything older, or
    anything that lands after :meth:`detach`, is dropped.
    """

    def __init__(
        self,
        search: FacilitySearch,
        navigator: NavigationHandoff | None = None,
        *,
        radius_meters: int = DEFAULT_RADIUS_METERS,
        category: str = DEFAULT_CATEGORY,
        keyword: str = DEFAULT_KEYWORD,
        clock: Callable[[], datetime] = utc_now,
        metrics: InMemoryLiveLocationMetrics | None = None,
    ) -> None:
        if radius_meters <= 0:
            raise ValueError("radius_meters must be > 0")
        self._search = search
        self._navigator = navigator
        self._radius_meters = radius_meters
        self._category = category
        self._keyword = keyword
        self._clock = clock
        self._metrics = metrics
        self._selection = RouteSelection()
        self._tracer = trace.get_tracer("live_location")
        self._sequence = 0
        self._detached = False
        self._pending: set[asyncio.Task] = set()
        self._snapshot = FacilitySnapshot(status=FetchStatus.LOADING)

    @property
    def status(self) -> FetchStatus:
        return self._snapshot.status

    @property
    def facilities(self) -> tuple[Facility, ...]:
        return self._snapshot.facilities

    @property
    def selection(self) -> SelectedRoute:
        return self._selection.current

    def snapshot(self) -> FacilitySnapshot:
        return self._snapshot

    def on_location_accepted(self, point: GeoPoint) -> asyncio.Task:
        request_id = self._begin(point)
        task = asyncio.get_running_loop().create_task(self._run_search(request_id, point))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def refresh(self) -> FacilitySnapshot:
        origin = self._snapshot.origin
        if origin is None:
            raise LocationUnavailableError("no location has been accepted yet")
        request_id = self._begin(origin)
        await self._run_search(request_id, origin)
        return self._snapshot

    def select_facility(self, facility_id: str) -> SelectedRoute:
        facility = next((item for item in self._snapshot.facilities if item.id == facility_id), None)
        if facility is None:
            raise SelectionNotFoundError(facility_id)
        selected = self._selection.target(facility)
        origin = self._snapshot.origin
        if self._navigator is not None and origin is not None:
            try:
                self._navigator.open_external_route(origin, facility.location)
            except Exception:
                logger.exception(
                    "navigation_handoff_failed",
                    extra={"component": "live_location", "facility_id": facility_id},
                )
        return selected

    def clear_selection(self) -> SelectedRoute:
        return self._selection.clear()

    def attach(self) -> None:
        self._detached = False

    def detach(self) -> None:
        self._detached = True
        self._sequence += 1

    def _begin(self, origin: GeoPoint) -> int:
        self._sequence += 1
        self._snapshot = FacilitySnapshot(
            status=FetchStatus.LOADING,
            facilities=self._snapshot.facilities,
            origin=origin,
            updated_at=self._snapshot.updated_at,
        )
        return self._sequence

    async def _run_search(self, request_id: int, origin: GeoPoint) -> None:
        started = perf_counter()
        with self._tracer.start_as_current_span("facility.search") as span:
            span.set_attribute("facility.request_id", request_id)
            span.set_attribute("facility.radius_meters", self._radius_meters)
            try:
                candidates = await self._search.search(
                    origin=origin,
                    radius_meters=self._radius_meters,
                    category=self._category,
                    keyword=self._keyword,
                )
            except Exception as exc:
                span.set_attribute("facility.outcome", FetchStatus.ERROR.value)
                self._apply(request_id, origin, [], FetchStatus.ERROR, started, exc)
                return
            facilities = to_facilities(candidates)
            status = FetchStatus.SUCCESS if facilities else FetchStatus.EMPTY
            span.set_attribute("facility.outcome", status.value)
            self._apply(request_id, origin, facilities, status, started, None)

    def _apply(
        self,
        request_id: int,
        origin: GeoPoint,
        facilities: list[Facility],
        status: FetchStatus,
        started: float,
        error: Exception | None,
    ) -> None:
        duration_ms = (perf_counter() - started) * 1000.0
        if self._detached or request_id != self._sequence:
            if self._metrics:
                self._metrics.record_stale_result()
            logger.info(
                "facility_search_discarded",
                extra={"component": "live_location", "request_id": request_id, "latest": self._sequence},
            )
            return
        if self._metrics:
            self._metrics.record_search(status.value, duration_ms)
        if error is not None:
            level = logging.WARNING if isinstance(error, SearchFailedError) else logging.ERROR
            logger.log(
                level,
                "facility_search_failed",
                exc_info=None if isinstance(error, SearchFailedError) else error,
                extra={"component": "live_location", "request_id": request_id, "reason": str(error)},
            )
        self._snapshot = FacilitySnapshot(
            status=status,
            facilities=tuple(facilities),
            origin=origin,
            updated_at=self._clock(),
        )
        self._selection.invalidate(item.id for item in facilities)
        logger.info(
            "facility_search_applied",
            extra={
                "component": "live_location",
                "request_id": request_id,
                "status": status.value,
                "count": len(facilities),
                "duration_ms": round(duration_ms, 2),
            },
        )
