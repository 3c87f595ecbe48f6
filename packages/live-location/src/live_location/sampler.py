from __future__ import annotations

from collections.abc import Callable, Hashable
from dataclasses import dataclass
from datetime import datetime
import logging

from geo_engine.distance import haversine_distance_meters
from geo_engine.movement import is_significant_movement

from live_location.errors import LocationFailure, unsupported_capability
from live_location.metrics import InMemoryLiveLocationMetrics
from live_location.models import LocationSample, PositionOptions, PositionReport, SamplerSnapshot, utc_now
from live_location.ports import PositionSource

logger = logging.getLogger(__name__)

SampleListener = Callable[[LocationSample], None]
ErrorListener = Callable[[LocationFailure], None]


@dataclass
class SamplerHandle:
    source_handle: Hashable | None
    active: bool = True


class LocationSampler:
    """Turns a noisy position stream into significant-movement events.

    The first sample is always accepted. Later samples are accepted only when
    they are at least ``threshold_meters`` away from the last accepted one.
    Failures are classified and published without touching the last accepted
    sample, so the dashboard keeps showing the last known good position.
    """

    def __init__(
        self,
        source: PositionSource | None,
        threshold_meters: float = 100.0,
        options: PositionOptions | None = None,
        clock: Callable[[], datetime] = utc_now,
        metrics: InMemoryLiveLocationMetrics | None = None,
    ) -> None:
        if threshold_meters < 0:
            raise ValueError("threshold_meters must be >= 0")
        self._source = source
        self._threshold_meters = threshold_meters
        self._options = options or PositionOptions()
        self._clock = clock
        self._metrics = metrics
        self._listeners: list[SampleListener] = []
        self._error_listeners: list[ErrorListener] = []
        self._handle: SamplerHandle | None = None
        self._last_accepted: LocationSample | None = None
        self._last_update: datetime | None = None
        self._location_error: LocationFailure | None = None

    @property
    def threshold_meters(self) -> float:
        return self._threshold_meters

    @property
    def options(self) -> PositionOptions:
        return self._options

    @property
    def last_accepted(self) -> LocationSample | None:
        return self._last_accepted

    @property
    def location_error(self) -> LocationFailure | None:
        return self._location_error

    @property
    def active(self) -> bool:
        return self._handle is not None and self._handle.active

    def add_listener(self, listener: SampleListener) -> None:
        self._listeners.append(listener)

    def add_error_listener(self, listener: ErrorListener) -> None:
        self._error_listeners.append(listener)

    def snapshot(self) -> SamplerSnapshot:
        return SamplerSnapshot(
            last_accepted=self._last_accepted,
            last_update=self._last_update,
            location_error=self._location_error,
            active=self.active,
        )

    def start(self) -> SamplerHandle:
        if self._handle is not None and self._handle.active:
            return self._handle
        if self._source is None:
            if self._handle is None:
                self._handle = SamplerHandle(source_handle=None, active=False)
                self._fail(unsupported_capability())
            return self._handle
        self._handle = SamplerHandle(source_handle=None)
        self._handle.source_handle = self._source.subscribe(self._options, self.handle_report)
        logger.info(
            "location_sampler_started",
            extra={"component": "live_location", "threshold_meters": self._threshold_meters},
        )
        return self._handle

    def stop(self, handle: SamplerHandle | None = None) -> None:
        handle = handle or self._handle
        if handle is None or not handle.active:
            return
        handle.active = False
        if self._source is not None and handle.source_handle is not None:
            self._source.unsubscribe(handle.source_handle)
        logger.info("location_sampler_stopped", extra={"component": "live_location"})

    def handle_report(self, report: PositionReport) -> bool:
        """Process one raw report; returns True when a sample was accepted."""
        if self._handle is not None and not self._handle.active:
            return False
        if isinstance(report, LocationFailure):
            self._fail(report)
            return False
        return self._offer(report)

    def _offer(self, sample: LocationSample) -> bool:
        previous = self._last_accepted
        if previous is not None and not is_significant_movement(
            previous.point, sample.point, self._threshold_meters
        ):
            if self._metrics:
                self._metrics.record_sample(accepted=False)
            logger.debug(
                "location_sample_ignored",
                extra={
                    "component": "live_location",
                    "distance_meters": round(haversine_distance_meters(previous.point, sample.point), 2),
                },
            )
            return False

        self._last_accepted = sample
        self._last_update = self._clock()
        self._location_error = None
        if self._metrics:
            self._metrics.record_sample(accepted=True)
        logger.info(
            "location_sample_accepted",
            extra={"component": "live_location", "lat": sample.point.lat, "lng": sample.point.lng},
        )
        for listener in list(self._listeners):
            try:
                listener(sample)
            except Exception:
                logger.exception("location_listener_failed", extra={"component": "live_location"})
        return True

    def _fail(self, failure: LocationFailure) -> None:
        self._location_error = failure
        if self._metrics:
            self._metrics.record_location_error(failure.kind.value)
        logger.warning(
            "location_error",
            extra={"component": "live_location", "kind": failure.kind.value},
        )
        for listener in list(self._error_listeners):
            try:
                listener(failure)
            except Exception:
                logger.exception("location_error_listener_failed", extra={"component": "live_location"})
        if failure.is_fatal:
            self.stop()
