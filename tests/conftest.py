"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample drone envelopes and weather snapshots
- Sample zone features (Polygon, MultiPolygon, unsupported and malformed geometry)
- Mock collaborator clients
- FastAPI test client
"""
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from flysafe.main import app
from flysafe.domain.models import (
    DroneEnvelope,
    PrecipitationType,
    WeatherReport,
    WeatherSnapshot,
    Zone,
)
from flysafe.infrastructure.elevation_client import ElevationClient
from flysafe.infrastructure.weather_client import WeatherClient
from flysafe.infrastructure.zone_client import ZoneDataClient


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def mini_envelope() -> DroneEnvelope:
    """DJI Mini 4 Pro style envelope."""
    return DroneEnvelope(
        name="DJI Mini 4 Pro",
        max_wind_speed=10.7,
        min_temperature=-10,
        max_temperature=40,
    )


@pytest.fixture
def calm_weather() -> WeatherSnapshot:
    """Comfortable flying conditions."""
    return WeatherSnapshot(
        temperature=20,
        wind_speed=3,
        wind_gust=4,
        precipitation_type=PrecipitationType.NONE,
    )


@pytest.fixture
def square_feature() -> dict:
    """Square zone with corners (lat 50.80, lon 4.30) - (lat 50.90, lon 4.40)."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "Polygon",
            "coordinates": [[
                [4.30, 50.80],  # lon, lat format
                [4.40, 50.80],
                [4.40, 50.90],
                [4.30, 50.90],
                [4.30, 50.80],  # Close the ring
            ]],
        },
        "properties": {
            "OBJECTID": 1,
            "name": "Brussels Square",
            "categoryType": "PROHIBITED",
            "status": "ACTIVE",
            "lowerLimit": 0,
            "lowerAltitudeUnit": "FT",
            "lowerAltitudeReference": "AGL",
            "upperLimit": 500,
            "upperAltitudeUnit": "FT",
            "upperAltitudeReference": "AGL",
        },
    }


@pytest.fixture
def multipolygon_feature() -> dict:
    """Two disjoint squares around Liège (lat ~50.6, lon ~5.5)."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "MultiPolygon",
            "coordinates": [
                [[[5.50, 50.60], [5.52, 50.60], [5.52, 50.62], [5.50, 50.62], [5.50, 50.60]]],
                [[[5.60, 50.70], [5.62, 50.70], [5.62, 50.72], [5.60, 50.72], [5.60, 50.70]]],
            ],
        },
        "properties": {
            "OBJECTID": 2,
            "name": "Liège Twin",
            "categoryType": "RESTRICTED",
            "status": "ACTIVE",
        },
    }


@pytest.fixture
def point_feature() -> dict:
    """Zone with a geometry type the locator does not support."""
    return {
        "type": "Feature",
        "geometry": {"type": "Point", "coordinates": [4.35, 50.85]},
        "properties": {"OBJECTID": 3, "name": "Beacon"},
    }


@pytest.fixture
def malformed_feature() -> dict:
    """Polygon zone whose ring holds a position without a latitude."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "Polygon",
            "coordinates": [[[4.30], [4.40, 50.80], [4.40, 50.90], [4.30, 50.80]]],
        },
        "properties": {"OBJECTID": 4, "name": "Broken Ring"},
    }


@pytest.fixture
def sample_zones(square_feature, multipolygon_feature, point_feature) -> list[Zone]:
    """Unsupported zone first, so the scan must skip it."""
    return [
        Zone.from_feature(point_feature),
        Zone.from_feature(square_feature),
        Zone.from_feature(multipolygon_feature),
    ]


# ============================================================
# Mock Client Fixtures
# ============================================================

@pytest.fixture
def mock_weather_client(calm_weather):
    """Weather client returning calm conditions."""
    mock_client = AsyncMock(spec=WeatherClient)
    mock_client.get_weather.return_value = WeatherReport(
        latitude=50.85,
        longitude=4.35,
        provider="open-meteo",
        current=calm_weather,
    )
    return mock_client


@pytest.fixture
def mock_zone_client(sample_zones):
    """Zone client returning the sample zones."""
    mock_client = AsyncMock(spec=ZoneDataClient)
    mock_client.get_zones.return_value = sample_zones
    return mock_client


@pytest.fixture
def mock_elevation_client():
    """Elevation client returning a fixed elevation."""
    mock_client = AsyncMock(spec=ElevationClient)
    mock_client.get_elevation.return_value = 75.0
    return mock_client


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)
