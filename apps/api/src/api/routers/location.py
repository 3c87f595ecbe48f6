from __future__ import annotations

from fastapi import APIRouter, Depends

from api.dependencies import get_dashboard_service
from api.response import success_response
from api.schemas.dashboard import LocationErrorRequest, LocationReportRequest
from api.services.dashboard_service import DashboardService

router = APIRouter(prefix="/v1/location", tags=["location"])


@router.get("/options")
async def watch_options(service: DashboardService = Depends(get_dashboard_service)) -> dict:
    return success_response(service.watch_options().model_dump(mode="json"))


@router.post("/reports")
async def report_position(
    payload: LocationReportRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    view = await service.report_position(payload)
    return success_response(view.model_dump(mode="json"))


@router.post("/errors")
async def report_failure(
    payload: LocationErrorRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    view = service.report_failure(payload)
    return success_response(view.model_dump(mode="json"))
