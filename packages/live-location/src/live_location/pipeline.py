from __future__ import annotations

import asyncio
import logging

from live_location.models import DashboardSnapshot, LocationSample
from live_location.refresh import FacilityRefreshController
from live_location.sampler import LocationSampler, SamplerHandle

logger = logging.getLogger(__name__)


class LiveLocationPipeline:
    """Wires a sampler to a refresh controller for one dashboard session."""

    def __init__(self, sampler: LocationSampler, controller: FacilityRefreshController) -> None:
        self._sampler = sampler
        self._controller = controller
        self._handle: SamplerHandle | None = None
        self._last_refresh: asyncio.Task | None = None
        self._sampler.add_listener(self._on_sample)

    @property
    def sampler(self) -> LocationSampler:
        return self._sampler

    @property
    def controller(self) -> FacilityRefreshController:
        return self._controller

    @property
    def last_refresh(self) -> asyncio.Task | None:
        return self._last_refresh

    def start(self) -> SamplerHandle:
        self._controller.attach()
        self._handle = self._sampler.start()
        return self._handle

    def stop(self) -> None:
        self._sampler.stop(self._handle)
        self._controller.detach()

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            sampler=self._sampler.snapshot(),
            facilities=self._controller.snapshot(),
            selection=self._controller.selection,
        )

    def _on_sample(self, sample: LocationSample) -> None:
        self._last_refresh = self._controller.on_location_accepted(sample.point)
