from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
import logging
from uuid import uuid4

from geo_engine.models import GeoPoint

from live_location.errors import classify_geolocation_error, unsupported_capability
from live_location.models import LocationSample, PositionOptions, PositionReport, utc_now

logger = logging.getLogger(__name__)


class ReportedPositionSource:
    """Position source fed by the dashboard's ``watchPosition`` callbacks.

    The browser owns the sensor; each callback it receives is posted to the API
    and fanned out here to every subscriber, in arrival order. The browser reads
    its watch options from ``GET /v1/location/options``.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, Callable[[PositionReport], None]] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, options: PositionOptions, on_report: Callable[[PositionReport], None]) -> str:
        handle = uuid4().hex
        self._subscribers[handle] = on_report
        return handle

    def unsubscribe(self, handle: str) -> None:
        self._subscribers.pop(handle, None)

    def report_position(
        self,
        lat: float,
        lng: float,
        accuracy_meters: float | None = None,
        observed_at: datetime | None = None,
    ) -> None:
        sample = LocationSample(
            point=GeoPoint(lat=lat, lng=lng),
            observed_at=observed_at or utc_now(),
            accuracy_meters=accuracy_meters,
        )
        self._publish(sample)

    def report_failure(self, code: int | None, message: str = "", unsupported: bool = False) -> None:
        if unsupported:
            self._publish(unsupported_capability())
            return
        self._publish(classify_geolocation_error(code or 0, message))

    def _publish(self, report: PositionReport) -> None:
        if not self._subscribers:
            logger.warning("position_report_without_subscriber", extra={"component": "api"})
        for callback in list(self._subscribers.values()):
            callback(report)
