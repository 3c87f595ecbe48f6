from __future__ import annotations

import math
from datetime import UTC, datetime

import pytest

from geo_engine.models import GeoPoint
from live_location.errors import LocationErrorKind, LocationFailure, classify_geolocation_error
from live_location.metrics import InMemoryLiveLocationMetrics
from live_location.models import LocationSample, PositionOptions
from live_location.sampler import LocationSampler

FIXED_NOW = datetime(2026, 1, 1, 9, 30, tzinfo=UTC)
ORIGIN = GeoPoint(lat=17.3850, lng=78.4867)


class RecordingSource:
    def __init__(self) -> None:
        self.subscriptions: dict[int, object] = {}
        self.options: list[PositionOptions] = []
        self.unsubscribed: list[int] = []
        self._next_id = 0

    def subscribe(self, options, on_report):
        self._next_id += 1
        self.subscriptions[self._next_id] = on_report
        self.options.append(options)
        return self._next_id

    def unsubscribe(self, handle) -> None:
        self.unsubscribed.append(handle)
        self.subscriptions.pop(handle, None)

    def emit(self, report) -> None:
        for callback in list(self.subscriptions.values()):
            callback(report)


def _north_of(point: GeoPoint, meters: float) -> GeoPoint:
    return GeoPoint(lat=point.lat + math.degrees(meters / 6_371_000), lng=point.lng)


def _sample(point: GeoPoint) -> LocationSample:
    return LocationSample(point=point, observed_at=FIXED_NOW, accuracy_meters=12.0)


def build_sampler(source=None, **kwargs) -> tuple[LocationSampler, list[LocationSample]]:
    sampler = LocationSampler(source, clock=lambda: FIXED_NOW, **kwargs)
    accepted: list[LocationSample] = []
    sampler.add_listener(accepted.append)
    return sampler, accepted


def test_first_sample_is_always_accepted() -> None:
    sampler, accepted = build_sampler(threshold_meters=10_000_000)

    assert sampler.handle_report(_sample(ORIGIN)) is True

    assert accepted == [_sample(ORIGIN)]
    assert sampler.last_accepted == _sample(ORIGIN)
    assert sampler.snapshot().last_update == FIXED_NOW


def test_sample_within_threshold_is_not_emitted() -> None:
    sampler, accepted = build_sampler()
    sampler.handle_report(_sample(ORIGIN))

    assert sampler.handle_report(_sample(_north_of(ORIGIN, 99))) is False

    assert len(accepted) == 1
    assert sampler.last_accepted.point == ORIGIN


def test_sample_beyond_threshold_becomes_last_accepted() -> None:
    sampler, accepted = build_sampler()
    sampler.handle_report(_sample(ORIGIN))
    moved = _north_of(ORIGIN, 101)

    assert sampler.handle_report(_sample(moved)) is True

    assert [item.point for item in accepted] == [ORIGIN, moved]
    assert sampler.last_accepted.point == moved


def test_default_threshold_is_100_meters() -> None:
    sampler, _ = build_sampler()
    assert sampler.threshold_meters == 100.0


def test_threshold_compares_against_last_accepted_not_last_seen() -> None:
    sampler, accepted = build_sampler()
    sampler.handle_report(_sample(ORIGIN))
    sampler.handle_report(_sample(_north_of(ORIGIN, 60)))
    sampler.handle_report(_sample(_north_of(ORIGIN, 120)))

    assert len(accepted) == 2
    assert sampler.last_accepted.point == _north_of(ORIGIN, 120)


def test_failure_keeps_last_accepted_and_accept_clears_error() -> None:
    sampler, _ = build_sampler()
    errors: list[LocationFailure] = []
    sampler.add_error_listener(errors.append)
    sampler.handle_report(_sample(ORIGIN))

    sampler.handle_report(classify_geolocation_error(3, "Timeout expired"))

    assert sampler.last_accepted.point == ORIGIN
    assert sampler.location_error.kind is LocationErrorKind.TIMEOUT
    assert errors[0].message == "Location Error: Timeout expired"

    sampler.handle_report(_sample(_north_of(ORIGIN, 500)))
    assert sampler.location_error is None


def test_failure_does_not_clear_error_on_rejected_sample() -> None:
    sampler, _ = build_sampler()
    sampler.handle_report(_sample(ORIGIN))
    sampler.handle_report(classify_geolocation_error(2, "unavailable"))

    sampler.handle_report(_sample(ORIGIN))

    assert sampler.location_error is not None


def test_start_subscribes_with_position_options_and_stop_is_idempotent() -> None:
    source = RecordingSource()
    sampler, accepted = build_sampler(source)

    handle = sampler.start()
    source.emit(_sample(ORIGIN))
    sampler.stop(handle)
    sampler.stop(handle)
    sampler.stop()

    assert source.options == [PositionOptions(high_accuracy=True, timeout_ms=10_000, max_cache_age_ms=0)]
    assert source.unsubscribed == [handle.source_handle]
    assert len(accepted) == 1
    assert sampler.active is False


def test_reports_after_stop_are_ignored() -> None:
    source = RecordingSource()
    sampler, accepted = build_sampler(source)
    handle = sampler.start()
    callback = source.subscriptions[handle.source_handle]
    sampler.stop(handle)

    callback(_sample(ORIGIN))

    assert accepted == []


def test_missing_source_reports_unsupported_once() -> None:
    sampler, _ = build_sampler(None)
    errors: list[LocationFailure] = []
    sampler.add_error_listener(errors.append)

    handle = sampler.start()
    sampler.start()

    assert handle.active is False
    assert [item.kind for item in errors] == [LocationErrorKind.UNSUPPORTED_CAPABILITY]
    assert sampler.location_error.message == "Geolocation is not supported by your browser."


def test_unsupported_failure_from_source_stops_sampler() -> None:
    source = RecordingSource()
    sampler, accepted = build_sampler(source)
    handle = sampler.start()

    source.emit(LocationFailure(kind=LocationErrorKind.UNSUPPORTED_CAPABILITY, message="no sensor"))
    source.emit(_sample(ORIGIN))

    assert sampler.active is False
    assert source.unsubscribed == [handle.source_handle]
    assert accepted == []


def test_failing_listener_does_not_block_other_listeners() -> None:
    sampler = LocationSampler(None, clock=lambda: FIXED_NOW)
    accepted: list[LocationSample] = []

    def broken(_: LocationSample) -> None:
        raise RuntimeError("listener failure")

    sampler.add_listener(broken)
    sampler.add_listener(accepted.append)
    sampler.handle_report(_sample(ORIGIN))

    assert accepted == [_sample(ORIGIN)]


def test_transient_failures_keep_subscription_active() -> None:
    source = RecordingSource()
    sampler, accepted = build_sampler(source)
    handle = sampler.start()

    source.emit(classify_geolocation_error(3, "Timeout expired"))
    source.emit(classify_geolocation_error(2))

    assert sampler.active is True
    assert handle.active is True
    assert source.unsubscribed == []
    assert sampler.location_error.kind is LocationErrorKind.POSITION_UNAVAILABLE

    source.emit(_sample(ORIGIN))

    assert accepted == [_sample(ORIGIN)]
    assert sampler.location_error is None


def test_restart_after_stop_subscribes_again() -> None:
    source = RecordingSource()
    sampler, accepted = build_sampler(source)
    first = sampler.start()
    sampler.stop()

    second = sampler.start()
    source.emit(_sample(ORIGIN))

    assert first.active is False
    assert second.active is True
    assert source.unsubscribed == [first.source_handle]
    assert accepted == [_sample(ORIGIN)]


def test_metrics_count_accepted_rejected_and_errors() -> None:
    metrics = InMemoryLiveLocationMetrics()
    sampler, _ = build_sampler(metrics=metrics)

    sampler.handle_report(_sample(ORIGIN))
    sampler.handle_report(_sample(ORIGIN))
    sampler.handle_report(classify_geolocation_error(1))

    assert metrics.samples_total["accepted"] == 1
    assert metrics.samples_total["rejected"] == 1
    assert metrics.location_errors_total["permission_denied"] == 1


def test_negative_threshold_raises() -> None:
    with pytest.raises(ValueError):
        LocationSampler(None, threshold_meters=-1)
