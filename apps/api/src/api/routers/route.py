from __future__ import annotations

from fastapi import APIRouter, Depends

from live_location.errors import SelectionNotFoundError

from api.dependencies import get_dashboard_service
from api.errors import selection_not_found
from api.response import success_response
from api.schemas.dashboard import RouteSelectionRequest
from api.services.dashboard_service import DashboardService

router = APIRouter(prefix="/v1/route", tags=["route"])


@router.post("/selection")
async def select_facility(
    payload: RouteSelectionRequest,
    service: DashboardService = Depends(get_dashboard_service),
) -> dict:
    try:
        view = service.select_facility(payload.facility_id)
    except SelectionNotFoundError as exc:
        raise selection_not_found(exc) from exc
    return success_response(view.model_dump(mode="json"))


@router.delete("/selection")
async def clear_selection(service: DashboardService = Depends(get_dashboard_service)) -> dict:
    return success_response(service.clear_selection().model_dump(mode="json"))
