from __future__ import annotations

import asyncio

from live_location.pipeline import LiveLocationPipeline

from api.navigation import GoogleMapsDeepLinkNavigator
from api.position_feed import ReportedPositionSource
from api.schemas.dashboard import (
    DashboardView,
    FacilityListView,
    LocationErrorRequest,
    LocationReportRequest,
    SelectionView,
    WatchOptionsView,
)


class DashboardService:
    def __init__(
        self,
        pipeline: LiveLocationPipeline,
        position_source: ReportedPositionSource,
        navigator: GoogleMapsDeepLinkNavigator,
    ) -> None:
        self._pipeline = pipeline
        self._position_source = position_source
        self._navigator = navigator

    def dashboard(self) -> DashboardView:
        snapshot = self._pipeline.snapshot()
        return DashboardView.from_snapshot(snapshot, navigation_url=self._current_navigation_url())

    def watch_options(self) -> WatchOptionsView:
        return WatchOptionsView.from_options(self._pipeline.sampler.options)

    async def report_position(self, report: LocationReportRequest) -> DashboardView:
        previous = self._pipeline.last_refresh
        self._position_source.report_position(
            lat=report.lat,
            lng=report.lng,
            accuracy_meters=report.accuracy_meters,
            observed_at=report.observed_at,
        )
        triggered = self._pipeline.last_refresh
        if triggered is not None and triggered is not previous:
            await asyncio.shield(triggered)
        return self.dashboard()

    def report_failure(self, report: LocationErrorRequest) -> DashboardView:
        self._position_source.report_failure(code=report.code, message=report.message, unsupported=report.unsupported)
        return self.dashboard()

    async def refresh_facilities(self) -> FacilityListView:
        snapshot = await self._pipeline.controller.refresh()
        return FacilityListView.from_snapshot(snapshot)

    def select_facility(self, facility_id: str) -> SelectionView:
        selection = self._pipeline.controller.select_facility(facility_id)
        return SelectionView.from_selection(selection, navigation_url=self._navigator.last_link)

    def clear_selection(self) -> SelectionView:
        return SelectionView.from_selection(self._pipeline.controller.clear_selection())

    def _current_navigation_url(self) -> str | None:
        controller = self._pipeline.controller
        facility = controller.selection.facility
        origin = controller.snapshot().origin
        if facility is None or origin is None:
            return None
        return self._navigator.directions_url(origin, facility.location)
