"""
API router for combined flight checks.
"""
from fastapi import APIRouter, HTTPException, Query, Request
from typing import Annotated, Optional

from flysafe.api.dependencies import FlightCheckServiceDep
from flysafe.api.rate_limit import DEFAULT_LIMIT, limiter
from flysafe.api.v1.models.responses import FlightCheckResponse, ZoneSummary
from flysafe.domain.errors import InvalidInputError
from flysafe.domain.models import Coordinates, DroneEnvelope
from flysafe.domain.profiles import get_profile


router = APIRouter(
    prefix="/flight-check",
    tags=["flight-check"],
)


def resolve_envelope(
    profile: Optional[str],
    max_wind_speed: Optional[float],
    min_temperature: Optional[float],
    max_temperature: Optional[float],
) -> DroneEnvelope:
    """
    Pick a preset envelope by name, or build a custom one.

    Raises:
        InvalidInputError: If neither a known preset nor a full custom envelope is given
    """
    if profile:
        return get_profile(profile)
    if None in (max_wind_speed, min_temperature, max_temperature):
        raise InvalidInputError(
            "Provide either a drone profile or max_wind_speed, min_temperature and max_temperature"
        )
    try:
        return DroneEnvelope(
            max_wind_speed=max_wind_speed,
            min_temperature=min_temperature,
            max_temperature=max_temperature,
        )
    except ValueError as e:
        raise InvalidInputError(str(e))


@router.get(
    "",
    response_model=FlightCheckResponse,
    summary="Check whether it is safe to fly at a point",
    description="""
    Fetch weather, zones and elevation for a point and evaluate them.

    The verdict is always present. When weather data is unavailable, invalid
    or too slow to arrive, `status` says so and the verdict is a RED
    fail-safe. When zone data is unavailable, `zones_available` is false.
    """,
    responses={
        400: {"description": "Invalid drone envelope or unknown profile"},
        429: {"description": "Rate limit exceeded"},
    },
)
@limiter.limit(DEFAULT_LIMIT)
async def flight_check(
    request: Request,
    lat: Annotated[float, Query(ge=-90, le=90, description="Latitude in degrees")],
    lon: Annotated[float, Query(ge=-180, le=180, description="Longitude in degrees")],
    service: FlightCheckServiceDep,
    profile: Annotated[Optional[str], Query(description="Preset drone name")] = None,
    max_wind_speed: Optional[float] = None,
    min_temperature: Optional[float] = None,
    max_temperature: Optional[float] = None,
    active_only: Annotated[bool, Query(description="Only consider zones active now")] = False,
) -> FlightCheckResponse:
    """
    Run a full flight check.

    Raises:
        HTTPException: If the drone envelope cannot be resolved
    """
    try:
        envelope = resolve_envelope(profile, max_wind_speed, min_temperature, max_temperature)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    result = await service.check(Coordinates(lat=lat, lon=lon), envelope, active_only=active_only)

    return FlightCheckResponse(
        latitude=lat,
        longitude=lon,
        drone=result.drone,
        status=result.status,
        verdict=result.verdict,
        weather=result.weather.model_dump(mode="json") if result.weather else None,
        elevation=result.elevation,
        zones_available=result.zones_available,
        zone=ZoneSummary.from_zone(result.zone) if result.zone else None,
    )
