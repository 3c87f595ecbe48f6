from __future__ import annotations

from collections.abc import Iterable
import logging

from live_location.models import Facility, RouteState, SelectedRoute

logger = logging.getLogger(__name__)


class RouteSelection:
    """Navigation target held for the session: ``idle`` or ``targeting`` one facility."""

    def __init__(self) -> None:
        self._current = SelectedRoute()

    @property
    def current(self) -> SelectedRoute:
        return self._current

    @property
    def state(self) -> RouteState:
        return self._current.state

    def target(self, facility: Facility) -> SelectedRoute:
        self._current = SelectedRoute(facility=facility)
        logger.info("route_targeted", extra={"component": "live_location", "facility_id": facility.id})
        return self._current

    def clear(self) -> SelectedRoute:
        self._current = SelectedRoute()
        return self._current

    def invalidate(self, facility_ids: Iterable[str]) -> SelectedRoute:
        facility = self._current.facility
        if facility is not None and facility.id not in set(facility_ids):
            logger.info("route_invalidated", extra={"component": "live_location", "facility_id": facility.id})
            self._current = SelectedRoute()
        return self._current
