from __future__ import annotations

from datetime import datetime

from geo_engine.models import GeoPoint
from pydantic import BaseModel, Field

from live_location.models import (
    DashboardSnapshot,
    Facility,
    FacilitySnapshot,
    PositionOptions,
    SamplerSnapshot,
    SelectedRoute,
)


class LocationReportRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    accuracy_meters: float | None = Field(default=None, ge=0)
    observed_at: datetime | None = None


class LocationErrorRequest(BaseModel):
    code: int | None = Field(default=None, ge=0)
    message: str = ""
    unsupported: bool = False


class RouteSelectionRequest(BaseModel):
    facility_id: str = Field(..., min_length=1)


class WatchOptionsView(BaseModel):
    high_accuracy: bool
    timeout_ms: int
    max_cache_age_ms: int

    @classmethod
    def from_options(cls, options: PositionOptions) -> WatchOptionsView:
        return cls(
            high_accuracy=options.high_accuracy,
            timeout_ms=options.timeout_ms,
            max_cache_age_ms=options.max_cache_age_ms,
        )


class PointView(BaseModel):
    lat: float
    lng: float

    @classmethod
    def from_point(cls, point: GeoPoint | None) -> PointView | None:
        if point is None:
            return None
        return cls(lat=point.lat, lng=point.lng)


class LocationView(BaseModel):
    lat: float
    lng: float
    accuracy_meters: float | None
    observed_at: datetime


class LocationErrorView(BaseModel):
    kind: str
    message: str


class SamplerView(BaseModel):
    tracking: bool
    location: LocationView | None
    last_update: datetime | None
    location_error: LocationErrorView | None

    @classmethod
    def from_snapshot(cls, snapshot: SamplerSnapshot) -> SamplerView:
        sample = snapshot.last_accepted
        error = snapshot.location_error
        return cls(
            tracking=snapshot.active,
            location=(
                LocationView(
                    lat=sample.point.lat,
                    lng=sample.point.lng,
                    accuracy_meters=sample.accuracy_meters,
                    observed_at=sample.observed_at,
                )
                if sample
                else None
            ),
            last_update=snapshot.last_update,
            location_error=LocationErrorView(kind=error.kind.value, message=error.message) if error else None,
        )


class FacilityView(BaseModel):
    id: str
    name: str
    lat: float
    lng: float
    address: str

    @classmethod
    def from_facility(cls, facility: Facility) -> FacilityView:
        return cls(
            id=facility.id,
            name=facility.name,
            lat=facility.location.lat,
            lng=facility.location.lng,
            address=facility.address,
        )


class FacilityListView(BaseModel):
    status: str
    items: list[FacilityView]
    origin: PointView | None
    updated_at: datetime | None

    @classmethod
    def from_snapshot(cls, snapshot: FacilitySnapshot) -> FacilityListView:
        return cls(
            status=snapshot.status.value,
            items=[FacilityView.from_facility(item) for item in snapshot.facilities],
            origin=PointView.from_point(snapshot.origin),
            updated_at=snapshot.updated_at,
        )


class SelectionView(BaseModel):
    state: str
    facility: FacilityView | None
    navigation_url: str | None = None

    @classmethod
    def from_selection(cls, selection: SelectedRoute, navigation_url: str | None = None) -> SelectionView:
        return cls(
            state=selection.state.value,
            facility=FacilityView.from_facility(selection.facility) if selection.facility else None,
            navigation_url=navigation_url if selection.facility else None,
        )


class DashboardView(BaseModel):
    location: SamplerView
    facilities: FacilityListView
    selection: SelectionView

    @classmethod
    def from_snapshot(cls, snapshot: DashboardSnapshot, navigation_url: str | None = None) -> DashboardView:
        return cls(
            location=SamplerView.from_snapshot(snapshot.sampler),
            facilities=FacilityListView.from_snapshot(snapshot.facilities),
            selection=SelectionView.from_selection(snapshot.selection, navigation_url),
        )
