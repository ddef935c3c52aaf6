"""
API response models using Pydantic.
"""
from typing import Any, List, Optional
from pydantic import BaseModel, Field

from flysafe.domain.models import DroneEnvelope, SafetyVerdict, Zone


class DroneProfilesResponse(BaseModel):
    """Response model for the drone presets endpoint."""
    profiles: List[DroneEnvelope] = Field(
        description="Preset drone envelopes"
    )


class ElevationResponse(BaseModel):
    """Response model for the elevation endpoint."""
    latitude: float
    longitude: float
    elevation: Optional[float] = Field(
        description="Ground elevation in meters, null when unknown"
    )


class ZoneSummary(BaseModel):
    """Zone attributes shown to the pilot."""
    name: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    lower_limit: Optional[float] = None
    lower_unit: Optional[str] = None
    lower_reference: Optional[str] = None
    upper_limit: Optional[float] = None
    upper_unit: Optional[str] = None
    upper_reference: Optional[str] = None
    reason: Optional[str] = None
    restriction: Optional[str] = None
    additional_info: Optional[str] = None

    @classmethod
    def from_zone(cls, zone: Zone) -> "ZoneSummary":
        return cls(**zone.model_dump(exclude={"zone_id", "geometry", "properties"}))


class ZoneLocateResponse(BaseModel):
    """Response model for the zone locate endpoint."""
    inside_zone: bool = Field(
        description="Whether the point lies inside a zone"
    )
    zone: Optional[ZoneSummary] = Field(
        default=None,
        description="First zone containing the point"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "inside_zone": True,
                "zone": {
                    "name": "EBBR CTR",
                    "category": "CTR",
                    "status": "ACTIVE",
                    "lower_limit": 0,
                    "lower_unit": "FT",
                    "lower_reference": "AGL",
                    "upper_limit": 1500,
                    "upper_unit": "FT",
                    "upper_reference": "AMSL",
                },
            }
        }


class FeatureCollectionResponse(BaseModel):
    """GeoJSON FeatureCollection of zones."""
    type: str = "FeatureCollection"
    features: List[dict[str, Any]]


class FlightCheckResponse(BaseModel):
    """Response model for the combined flight check endpoint."""
    latitude: float
    longitude: float
    drone: DroneEnvelope
    status: str = Field(
        description="ok, weather_unavailable, invalid_input or timeout"
    )
    verdict: SafetyVerdict
    weather: Optional[dict[str, Any]] = None
    elevation: Optional[float] = None
    zones_available: bool = Field(
        description="False when zone data could not be fetched"
    )
    zone: Optional[ZoneSummary] = None

    class Config:
        json_schema_extra = {
            "example": {
                "latitude": 50.655,
                "longitude": 5.385,
                "drone": {
                    "name": "DJI Mini 4 Pro",
                    "max_wind_speed": 10.7,
                    "min_temperature": -10,
                    "max_temperature": 40,
                    "notes": None,
                },
                "status": "ok",
                "verdict": {
                    "safe_to_fly": True,
                    "indicator_color": "GREEN",
                    "message": "Safe to fly. Conditions are well within the limits of DJI Mini 4 Pro.",
                },
                "elevation": 180.0,
                "zones_available": True,
                "zone": None,
            }
        }
