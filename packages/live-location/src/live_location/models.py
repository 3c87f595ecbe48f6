from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from geo_engine.models import GeoPoint

from live_location.errors import LocationFailure

UNNAMED_FACILITY = "Unnamed facility"
ADDRESS_NOT_AVAILABLE = "Address not available"


def utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class LocationSample:
    point: GeoPoint
    observed_at: datetime
    accuracy_meters: float | None = None


PositionReport = LocationSample | LocationFailure


@dataclass(frozen=True)
class PositionOptions:
    high_accuracy: bool = True
    timeout_ms: int = 10_000
    max_cache_age_ms: int = 0


@dataclass(frozen=True)
class FacilityCandidate:
    id: str | None
    name: str | None
    location: GeoPoint | None
    address: str | None = None


@dataclass(frozen=True)
class Facility:
    id: str
    name: str
    location: GeoPoint
    address: str


class FetchStatus(str, Enum):
    LOADING = "loading"
    SUCCESS = "success"
    EMPTY = "empty"
    ERROR = "error"


class RouteState(str, Enum):
    IDLE = "idle"
    TARGETING = "targeting"


@dataclass(frozen=True)
class SelectedRoute:
    facility: Facility | None = None

    @property
    def state(self) -> RouteState:
        return RouteState.IDLE if self.facility is None else RouteState.TARGETING


@dataclass(frozen=True)
class FacilitySnapshot:
    status: FetchStatus
    facilities: tuple[Facility, ...] = ()
    origin: GeoPoint | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class SamplerSnapshot:
    last_accepted: LocationSample | None = None
    last_update: datetime | None = None
    location_error: LocationFailure | None = None
    active: bool = False


@dataclass(frozen=True)
class DashboardSnapshot:
    sampler: SamplerSnapshot
    facilities: FacilitySnapshot
    selection: SelectedRoute = field(default_factory=SelectedRoute)
