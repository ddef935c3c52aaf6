"""
API router for UAV zones.
"""
from datetime import datetime
from fastapi import APIRouter, HTTPException, Query
from typing import Annotated, Literal, Optional, Union

from flysafe.api.dependencies import ZoneClientDep
from flysafe.api.v1.models.requests import ZoneLocateRequest
from flysafe.api.v1.models.responses import (
    FeatureCollectionResponse,
    ZoneLocateResponse,
    ZoneSummary,
)
from flysafe.domain.models import Zone
from flysafe.infrastructure.external_api_client import ExternalAPIError
from flysafe.services.domain.zone_locator import ZoneLocator


router = APIRouter(
    prefix="/zones",
    tags=["zones"],
)


@router.get(
    "",
    response_model=FeatureCollectionResponse,
    summary="List UAV zones",
    responses={
        503: {"description": "Zone service unavailable"},
    },
)
async def list_zones(
    zone_client: ZoneClientDep,
    active: Annotated[bool, Query(description="Only zones active now")] = False,
    time: Annotated[
        Optional[Union[Literal["now"], datetime]],
        Query(description="Only zones active at this instant (ISO 8601, or \"now\")"),
    ] = None,
) -> FeatureCollectionResponse:
    """
    Return UAV zones as a GeoJSON FeatureCollection.

    Passing `time` implies `active`. Instants without an offset are read as UTC.

    Raises:
        HTTPException: If the zone service failed
    """
    try:
        if time is None:
            zones = await zone_client.get_zones(active_only=active)
        else:
            at = None if time == "now" else time
            zones = await zone_client.get_zones(active_only=True, at=at)
    except ExternalAPIError as e:
        raise HTTPException(status_code=e.status_code, detail=f"Zone data unavailable: {e.message}")
    return FeatureCollectionResponse(features=[zone.to_feature() for zone in zones])


@router.post(
    "/locate",
    response_model=ZoneLocateResponse,
    summary="Find the zone containing a point",
    description="""
    Return the first zone of the supplied FeatureCollection whose Polygon or
    MultiPolygon contains the point. Points on a zone edge count as inside.
    Features with other geometry types are ignored.
    """,
)
async def locate_zone(body: ZoneLocateRequest) -> ZoneLocateResponse:
    """Locate a point within a caller-supplied zone collection."""
    zones = [Zone.from_feature(feature) for feature in body.zones.features]
    # Request-supplied zones bypass the shared geometry cache
    zone = ZoneLocator().locate(body.point, zones, active_only=body.active_only)
    return ZoneLocateResponse(
        inside_zone=zone is not None,
        zone=ZoneSummary.from_zone(zone) if zone is not None else None,
    )
