from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

PERMISSION_DENIED_MESSAGE = "Location access denied. Please enable it in your browser settings."
UNSUPPORTED_MESSAGE = "Geolocation is not supported by your browser."

# W3C GeolocationPositionError codes
GEOLOCATION_PERMISSION_DENIED = 1
GEOLOCATION_POSITION_UNAVAILABLE = 2
GEOLOCATION_TIMEOUT = 3


class LiveLocationError(Exception):
    """Base live-location exception."""


class SearchFailedError(LiveLocationError):
    """Raised when a nearby facility search failed or returned malformed data."""


class LocationUnavailableError(LiveLocationError):
    """Raised when an operation needs a location and none has been accepted yet."""


class SelectionNotFoundError(LiveLocationError):
    def __init__(self, facility_id: str) -> None:
        super().__init__(f"facility {facility_id!r} is not in the current list")
        self.facility_id = facility_id


class LocationErrorKind(str, Enum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED_CAPABILITY = "unsupported_capability"


@dataclass(frozen=True)
class LocationFailure:
    kind: LocationErrorKind
    message: str

    @property
    def is_fatal(self) -> bool:
        return self.kind is LocationErrorKind.UNSUPPORTED_CAPABILITY


def unsupported_capability() -> LocationFailure:
    return LocationFailure(kind=LocationErrorKind.UNSUPPORTED_CAPABILITY, message=UNSUPPORTED_MESSAGE)


def classify_geolocation_error(code: int, message: str = "") -> LocationFailure:
    if code == GEOLOCATION_PERMISSION_DENIED:
        return LocationFailure(kind=LocationErrorKind.PERMISSION_DENIED, message=PERMISSION_DENIED_MESSAGE)
    if code == GEOLOCATION_TIMEOUT:
        return LocationFailure(kind=LocationErrorKind.TIMEOUT, message=f"Location Error: {message or 'timeout'}")
    # anything unrecognised is treated as a transient sensor failure
    return LocationFailure(
        kind=LocationErrorKind.POSITION_UNAVAILABLE,
        message=f"Location Error: {message or 'position unavailable'}",
    )
