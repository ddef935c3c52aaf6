"""
API request models using Pydantic.
"""
from typing import Any, List
from pydantic import BaseModel, Field

from flysafe.domain.models import Coordinates, DroneEnvelope, WeatherSnapshot


class SafetyEvaluationRequest(BaseModel):
    """Request body for the safety evaluation endpoint."""
    weather: WeatherSnapshot
    envelope: DroneEnvelope

    class Config:
        json_schema_extra = {
            "example": {
                "weather": {
                    "temperature": 20,
                    "wind_speed": 3,
                    "wind_gust": 4,
                    "precipitation_type": "none",
                },
                "envelope": {
                    "name": "DJI Mini 4 Pro",
                    "max_wind_speed": 10.7,
                    "min_temperature": -10,
                    "max_temperature": 40,
                },
            }
        }


class FeatureCollection(BaseModel):
    """GeoJSON FeatureCollection as delivered by the zone service."""
    type: str = "FeatureCollection"
    features: List[dict[str, Any]] = Field(default_factory=list)


class ZoneLocateRequest(BaseModel):
    """Request body for the zone locate endpoint."""
    point: Coordinates
    zones: FeatureCollection
    active_only: bool = Field(
        default=False,
        description="Whether `zones` has already been filtered to active zones"
    )
