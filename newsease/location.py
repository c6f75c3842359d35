"""Location collaborator: permission state, current fix and distance helpers.

The feed only ever asks whether location is authorized and, if so, for the
current coordinate. Device services and geocoding live outside this package;
``StaticLocationProvider`` stands in for them.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone

from newsease.models import Coordinate

logger = logging.getLogger(__name__)

NOT_DETERMINED = "not_determined"
DENIED = "denied"
RESTRICTED = "restricted"
AUTHORIZED = "authorized"

AUTHORIZATION_STATES = (NOT_DETERMINED, DENIED, RESTRICTED, AUTHORIZED)

EARTH_RADIUS_KM = 6371.0088

MAX_READING_AGE_SECONDS = 5.0
MAX_READING_ACCURACY_M = 100.0

ERROR_MESSAGES = {
    "not_determined": "Location permission has not been granted yet.",
    "denied": (
        "Location access is required for local news. "
        "Please enable location services in Settings."
    ),
    "restricted": (
        "Location access is required for local news. "
        "Please enable location services in Settings."
    ),
    "disabled": "Location services are disabled. Please enable them in Settings.",
    "unknown": "Unable to determine location. Please try again.",
    "network": "Network error while getting location. Please check your connection.",
    "stale": "Location reading is out of date. Please try again.",
    "inaccurate": "Location reading is not accurate enough. Please try again.",
}


class LocationError(Exception):
    """Non-fatal location failure carrying a user-facing message."""

    def __init__(self, reason: str, message: str | None = None):
        self.reason = reason
        self.message = message or ERROR_MESSAGES.get(
            reason, f"Location error: {reason}",
        )
        super().__init__(self.message)


class LocationReading:
    """A raw fix as reported by a device, before validation."""

    def __init__(
        self,
        coordinate: Coordinate,
        timestamp: datetime,
        horizontal_accuracy: float,
    ):
        self.coordinate = coordinate
        self.timestamp = timestamp
        self.horizontal_accuracy = horizontal_accuracy


def validate_reading(reading: LocationReading, now: datetime | None = None) -> Coordinate:
    """Reject readings that are stale or not precise enough."""
    now = now or datetime.now(timezone.utc)
    age = (now - reading.timestamp).total_seconds()
    if age > MAX_READING_AGE_SECONDS:
        raise LocationError("stale")
    if reading.horizontal_accuracy >= MAX_READING_ACCURACY_M:
        raise LocationError("inaccurate")
    return reading.coordinate


class BaseLocationProvider:
    """Base for location providers. Subclasses set status and the fix."""

    def __init__(self):
        self.status = NOT_DETERMINED
        self.current_location: Coordinate | None = None
        self.current_address: str | None = None
        self.error_message: str | None = None

    @property
    def is_authorized(self) -> bool:
        return self.status == AUTHORIZED

    def set_status(self, status: str) -> None:
        if status not in AUTHORIZATION_STATES:
            raise ValueError(f"Unknown authorization status: {status}")
        self.status = status
        if status in (DENIED, RESTRICTED):
            self.current_location = None
            self.error_message = ERROR_MESSAGES[status]
        elif status == AUTHORIZED:
            self.error_message = None

    def update(self, reading: LocationReading, now: datetime | None = None) -> bool:
        """Accept a new reading. Invalid readings are dropped, not raised."""
        try:
            self.current_location = validate_reading(reading, now)
        except LocationError as exc:
            logger.debug("Ignoring location reading: %s", exc.reason)
            return False
        self.error_message = None
        return True

    def require_location(self) -> Coordinate:
        """Return the current fix or raise ``LocationError``."""
        if not self.is_authorized:
            raise LocationError(self.status)
        if self.current_location is None:
            raise LocationError("unknown")
        return self.current_location


class StaticLocationProvider(BaseLocationProvider):
    """Fixed location, typically taken from config."""

    def __init__(
        self,
        status: str = NOT_DETERMINED,
        coordinate: Coordinate | None = None,
        address: str | None = None,
    ):
        super().__init__()
        self.set_status(status)
        if self.is_authorized:
            self.current_location = coordinate
        self.current_address = address

    @classmethod
    def from_config(cls, config: dict) -> StaticLocationProvider:
        from newsease.config import get_location_config

        cfg = get_location_config(config)
        coordinate = None
        if cfg["latitude"] is not None and cfg["longitude"] is not None:
            coordinate = Coordinate(cfg["latitude"], cfg["longitude"])
        return cls(cfg["status"], coordinate, cfg["address"])


def distance_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle (haversine) distance in kilometres."""
    lat1, lat2 = math.radians(a.latitude), math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    )
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def is_within_radius(point: Coordinate, center: Coordinate, radius_km: float) -> bool:
    return distance_km(point, center) <= radius_km


def format_coordinate(coordinate: Coordinate) -> str:
    return f"{coordinate.latitude:.6f}, {coordinate.longitude:.6f}"


def format_distance(km: float) -> str:
    if km < 1:
        return f"{round(km * 1000)} m"
    if km < 10:
        return f"{km:.1f} km"
    return f"{round(km)} km"
