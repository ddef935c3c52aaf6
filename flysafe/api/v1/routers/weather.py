"""
API router for weather and elevation lookups.
"""
from fastapi import APIRouter, HTTPException, Query
from typing import Annotated

from flysafe.api.dependencies import ElevationClientDep, WeatherClientDep
from flysafe.api.v1.models.responses import ElevationResponse
from flysafe.domain.models import WeatherReport
from flysafe.infrastructure.external_api_client import ExternalAPIError


router = APIRouter(
    tags=["weather"],
)

Latitude = Annotated[float, Query(ge=-90, le=90, description="Latitude in degrees")]
Longitude = Annotated[float, Query(ge=-180, le=180, description="Longitude in degrees")]


@router.get(
    "/weather",
    response_model=WeatherReport,
    summary="Get current weather at a point",
    responses={
        404: {"description": "No current weather data for this location"},
        503: {"description": "All weather services unavailable"},
    },
)
async def get_weather(
    lat: Latitude,
    lon: Longitude,
    weather_client: WeatherClientDep,
) -> WeatherReport:
    """
    Get current weather, trying the fallback provider if needed.

    Raises:
        HTTPException: If no provider answered or none had current data
    """
    try:
        report = await weather_client.get_weather(lat, lon)
    except ExternalAPIError as e:
        raise HTTPException(status_code=e.status_code, detail=f"Weather data unavailable: {e.message}")

    if report.current is None:
        raise HTTPException(status_code=404, detail="No current weather data available for this location")
    return report


@router.get(
    "/elevation",
    response_model=ElevationResponse,
    summary="Get ground elevation at a point",
    responses={
        503: {"description": "Elevation service unavailable or not configured"},
    },
)
async def get_elevation(
    lat: Latitude,
    lon: Longitude,
    elevation_client: ElevationClientDep,
) -> ElevationResponse:
    """
    Get ground elevation in meters (null when the service has no data).

    Raises:
        HTTPException: If the elevation service failed
    """
    try:
        elevation = await elevation_client.get_elevation(lat, lon)
    except ExternalAPIError as e:
        raise HTTPException(status_code=e.status_code, detail=f"Elevation unavailable: {e.message}")
    return ElevationResponse(latitude=lat, longitude=lon, elevation=elevation)
