"""
API router for drone presets.
"""
from fastapi import APIRouter

from flysafe.api.v1.models.responses import DroneProfilesResponse
from flysafe.domain.profiles import DEFAULT_DRONE_PROFILES


router = APIRouter(
    prefix="/drones",
    tags=["drones"],
)


@router.get(
    "/profiles",
    response_model=DroneProfilesResponse,
    summary="List preset drone envelopes",
)
async def list_profiles() -> DroneProfilesResponse:
    """Return the preset drone envelopes."""
    return DroneProfilesResponse(profiles=DEFAULT_DRONE_PROFILES)
