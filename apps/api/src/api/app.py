from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
import logging

from devkit.config import ServiceSettings, load_settings
from devkit.observability import configure_logging, configure_otel, configure_probe_access_log_filter
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from live_location.metrics import InMemoryLiveLocationMetrics
from live_location.models import PositionOptions
from live_location.pipeline import LiveLocationPipeline
from live_location.ports import FacilitySearch
from live_location.refresh import FacilityRefreshController
from live_location.sampler import LocationSampler

from api.clients.places_client import GooglePlacesClient
from api.errors import ApiError
from api.middleware import ObservabilityMiddleware
from api.navigation import GoogleMapsDeepLinkNavigator
from api.observability import CompositeApiMetricsCollector, InMemoryApiMetricsCollector, PrometheusMetricsExporter
from api.position_feed import ReportedPositionSource
from api.response import error_response, success_response
from api.routers.dashboard import router as dashboard_router
from api.routers.location import router as location_router
from api.routers.route import router as route_router
from api.services.dashboard_service import DashboardService

logger = logging.getLogger(__name__)


def build_pipeline(
    settings: ServiceSettings,
    position_source: ReportedPositionSource,
    search: FacilitySearch,
    navigator: GoogleMapsDeepLinkNavigator,
    metrics: InMemoryLiveLocationMetrics,
) -> LiveLocationPipeline:
    sampler = LocationSampler(
        position_source,
        threshold_meters=settings.MOVEMENT_THRESHOLD_METERS,
        options=PositionOptions(
            high_accuracy=settings.POSITION_HIGH_ACCURACY,
            timeout_ms=settings.POSITION_TIMEOUT_MS,
            max_cache_age_ms=settings.POSITION_MAX_CACHE_AGE_MS,
        ),
        metrics=metrics,
    )
    controller = FacilityRefreshController(
        search,
        navigator,
        radius_meters=settings.FACILITY_SEARCH_RADIUS_METERS,
        category=settings.FACILITY_CATEGORY,
        keyword=settings.FACILITY_KEYWORD,
        metrics=metrics,
    )
    return LiveLocationPipeline(sampler=sampler, controller=controller)


def create_app(
    settings: ServiceSettings | None = None,
    search: FacilitySearch | None = None,
) -> FastAPI:
    settings = settings or load_settings("vitalroute-api")
    configure_logging(settings.LOG_LEVEL)
    configure_otel(service_name=settings.SERVICE_NAME)
    configure_probe_access_log_filter()

    if search is None:
        if not settings.GOOGLE_MAPS_API_KEY:
            logger.warning("places_api_key_missing", extra={"component": "api"})
        search = GooglePlacesClient(
            api_key=settings.GOOGLE_MAPS_API_KEY,
            base_url=settings.PLACES_BASE_URL,
            timeout_seconds=settings.PLACES_TIMEOUT_SECONDS,
        )
    position_source = ReportedPositionSource()
    navigator = GoogleMapsDeepLinkNavigator(travel_mode=settings.NAVIGATION_TRAVEL_MODE)
    live_metrics = InMemoryLiveLocationMetrics()
    pipeline = build_pipeline(settings, position_source, search, navigator, live_metrics)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        pipeline.start()
        try:
            yield
        finally:
            pipeline.stop()

    app = FastAPI(title="Vitalroute Dispatch API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.pipeline = pipeline
    app.state.position_source = position_source
    app.state.live_metrics = live_metrics
    app.state.dashboard_service = DashboardService(pipeline, position_source, navigator)
    app.state.api_metrics = InMemoryApiMetricsCollector()
    app.state.prom_metrics = PrometheusMetricsExporter(live_metrics)
    app.add_middleware(
        ObservabilityMiddleware,
        collector=CompositeApiMetricsCollector([app.state.api_metrics, app.state.prom_metrics]),
    )
    app.include_router(location_router)
    app.include_router(dashboard_router)
    app.include_router(route_router)

    @app.get("/healthz")
    async def healthz() -> dict:
        return success_response({"status": "ok"})

    @app.get("/readyz")
    async def readyz() -> dict:
        return success_response({"status": "ready", "tracking": pipeline.sampler.active})

    @app.get("/metrics")
    async def metrics() -> Response:
        payload = app.state.prom_metrics.render()
        return Response(content=payload, media_type="text/plain; version=0.0.4")

    @app.exception_handler(ApiError)
    async def handle_api_error(_: Request, exc: ApiError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=error_response(exc.code, exc.message))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
        message = "; ".join(err["msg"] for err in exc.errors())
        return JSONResponse(status_code=422, content=error_response("VALIDATION_ERROR", message))

    return app


app = create_app()
