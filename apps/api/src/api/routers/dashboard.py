from __future__ import annotations

from fastapi import APIRouter, Depends

from live_location.errors import LocationUnavailableError

from api.dependencies import get_dashboard_service
from api.errors import location_unavailable
from api.response import success_response
from api.services.dashboard_service import DashboardService

router = APIRouter(prefix="/v1", tags=["dashboard"])


@router.get("/dashboard")
async def dashboard(service: DashboardService = Depends(get_dashboard_service)) -> dict:
    return success_response(service.dashboard().model_dump(mode="json"))


@router.post("/facilities/refresh")
async def refresh_facilities(service: DashboardService = Depends(get_dashboard_service)) -> dict:
    try:
        view = await service.refresh_facilities()
    except LocationUnavailableError as exc:
        raise location_unavailable(exc) from exc
    return success_response(view.model_dump(mode="json"))
