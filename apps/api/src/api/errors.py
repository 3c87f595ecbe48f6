from __future__ import annotations

from dataclasses import dataclass

from live_location.errors import LocationUnavailableError, SelectionNotFoundError


@dataclass
class ApiError(Exception):
    code: str
    message: str
    status_code: int


def selection_not_found(exc: SelectionNotFoundError) -> ApiError:
    return ApiError("SELECTION_NOT_FOUND", f"Facility {exc.facility_id} is not in the nearby list", 404)


def location_unavailable(exc: LocationUnavailableError) -> ApiError:
    return ApiError("LOCATION_UNAVAILABLE", str(exc), 409)
