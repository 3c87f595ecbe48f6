"""Live location significance filter and nearby facility refresh pipeline."""

from live_location.errors import (
    LiveLocationError,
    LocationErrorKind,
    LocationFailure,
    LocationUnavailableError,
    SearchFailedError,
    SelectionNotFoundError,
    classify_geolocation_error,
)
from live_location.metrics import InMemoryLiveLocationMetrics
from live_location.models import (
    DashboardSnapshot,
    Facility,
    FacilityCandidate,
    FacilitySnapshot,
    FetchStatus,
    LocationSample,
    PositionOptions,
    RouteState,
    SamplerSnapshot,
    SelectedRoute,
)
from live_location.pipeline import LiveLocationPipeline
from live_location.refresh import FacilityRefreshController
from live_location.sampler import LocationSampler, SamplerHandle
from live_location.selection import RouteSelection

__all__ = [
    "DashboardSnapshot",
    "Facility",
    "FacilityCandidate",
    "FacilityRefreshController",
    "FacilitySnapshot",
    "FetchStatus",
    "InMemoryLiveLocationMetrics",
    "LiveLocationError",
    "LiveLocationPipeline",
    "LocationErrorKind",
    "LocationFailure",
    "LocationSample",
    "LocationSampler",
    "LocationUnavailableError",
    "PositionOptions",
    "RouteSelection",
    "RouteState",
    "SamplerHandle",
    "SamplerSnapshot",
    "SearchFailedError",
    "SelectedRoute",
    "SelectionNotFoundError",
    "classify_geolocation_error",
]
