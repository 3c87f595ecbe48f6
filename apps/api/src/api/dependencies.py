from __future__ import annotations

from fastapi import Request

from api.services.dashboard_service import DashboardService


def get_dashboard_service(request: Request) -> DashboardService:
    return request.app.state.dashboard_service
