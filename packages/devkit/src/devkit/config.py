from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(extra="ignore")

    SERVICE_NAME: str = "service"
    LOG_LEVEL: str = "INFO"

    GOOGLE_MAPS_API_KEY: str = ""
    PLACES_BASE_URL: str = "https://maps.googleapis.com/maps/api/place"
    PLACES_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    MOVEMENT_THRESHOLD_METERS: float = Field(default=100.0, ge=0)
    FACILITY_SEARCH_RADIUS_METERS: int = Field(default=15_000, gt=0, le=50_000)
    FACILITY_CATEGORY: str = "hospital"
    FACILITY_KEYWORD: str = "multi specialty hospital"

    POSITION_HIGH_ACCURACY: bool = True
    POSITION_TIMEOUT_MS: int = Field(default=10_000, gt=0)
    POSITION_MAX_CACHE_AGE_MS: int = Field(default=0, ge=0)

    NAVIGATION_TRAVEL_MODE: str = "driving"


def load_settings(service_name: str) -> ServiceSettings:
    return ServiceSettings(SERVICE_NAME=service_name)
