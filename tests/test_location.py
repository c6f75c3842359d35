"""Tests for the location provider and distance helpers."""

from __future__ import annotations

from datetime import timedelta

import pytest

from newsease.location import (
    AUTHORIZED,
    DENIED,
    ERROR_MESSAGES,
    LocationError,
    LocationReading,
    StaticLocationProvider,
    distance_km,
    format_coordinate,
    format_distance,
    is_within_radius,
    validate_reading,
)
from newsease.models import Coordinate

SF = Coordinate(37.7749, -122.4194)
LA = Coordinate(34.0522, -118.2437)


def test_authorized_provider_returns_fix():
    """An authorized provider hands out its coordinate."""
    provider = StaticLocationProvider(AUTHORIZED, SF)
    assert provider.is_authorized
    assert provider.require_location() == SF


def test_denied_provider_raises_with_message():
    """Denied access raises with the settings message."""
    provider = StaticLocationProvider(DENIED, SF)
    assert provider.current_location is None
    with pytest.raises(LocationError) as exc_info:
        provider.require_location()
    assert exc_info.value.reason == DENIED
    assert exc_info.value.message == ERROR_MESSAGES[DENIED]


def test_authorized_without_fix():
    """Authorized but without a fix raises 'unknown'."""
    provider = StaticLocationProvider(AUTHORIZED)
    with pytest.raises(LocationError) as exc_info:
        provider.require_location()
    assert exc_info.value.reason == "unknown"


def test_revoking_permission_clears_fix():
    """Revoking permission drops the stored coordinate."""
    provider = StaticLocationProvider(AUTHORIZED, SF)
    provider.set_status(DENIED)
    assert provider.current_location is None
    assert provider.error_message == ERROR_MESSAGES[DENIED]


def test_unknown_status():
    with pytest.raises(ValueError):
        StaticLocationProvider("maybe")


def test_from_config(sample_config):
    """The provider is built from the location section."""
    provider = StaticLocationProvider.from_config(sample_config)
    assert provider.require_location() == SF
    assert provider.current_address == "San Francisco, CA"


def test_from_empty_config():
    """No location section means permission is not determined."""
    provider = StaticLocationProvider.from_config({})
    assert not provider.is_authorized


def test_validate_reading(now):
    """Stale and inaccurate readings are rejected."""
    good = LocationReading(SF, now - timedelta(seconds=2), horizontal_accuracy=20)
    assert validate_reading(good, now) == SF

    stale = LocationReading(SF, now - timedelta(seconds=30), horizontal_accuracy=20)
    with pytest.raises(LocationError, match="out of date"):
        validate_reading(stale, now)

    vague = LocationReading(SF, now, horizontal_accuracy=150)
    with pytest.raises(LocationError) as exc_info:
        validate_reading(vague, now)
    assert exc_info.value.reason == "inaccurate"


def test_update_drops_bad_readings(now):
    """Bad readings are ignored instead of raising."""
    provider = StaticLocationProvider(AUTHORIZED)
    assert not provider.update(LocationReading(LA, now, 500), now)
    assert provider.current_location is None
    assert provider.update(LocationReading(LA, now, 10), now)
    assert provider.require_location() == LA


def test_distance():
    """Haversine distance between San Francisco and Los Angeles."""
    assert distance_km(SF, SF) == 0
    assert distance_km(SF, LA) == pytest.approx(559, rel=0.01)
    assert is_within_radius(LA, SF, 600)
    assert not is_within_radius(LA, SF, 100)


def test_formatting():
    assert format_coordinate(SF) == "37.774900, -122.419400"
    assert format_distance(0.25) == "250 m"
    assert format_distance(3.456) == "3.5 km"
    assert format_distance(559.2) == "559 km"
