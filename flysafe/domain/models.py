"""
Domain models for flight safety evaluation and airspace zones.

These models represent the core domain entities and should be independent
of any infrastructure concerns (API clients, databases, etc.).
"""
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field, field_validator, model_validator


class PrecipitationType(str, Enum):
    """Precipitation categories reported by the weather providers."""
    NONE = "none"
    RAIN = "rain"
    SNOW = "snow"
    OTHER = "other"


class IndicatorColor(str, Enum):
    """Three-tier safety indicator."""
    GREEN = "GREEN"
    ORANGE = "ORANGE"
    RED = "RED"


class Coordinates(BaseModel):
    """A WGS84 point in degrees."""
    lat: float = Field(ge=-90, le=90, allow_inf_nan=False, description="Latitude in degrees")
    lon: float = Field(ge=-180, le=180, allow_inf_nan=False, description="Longitude in degrees")

    class Config:
        frozen = True


class DroneEnvelope(BaseModel):
    """Weather limits within which a drone is rated to operate."""
    name: str = "Custom"
    max_wind_speed: float = Field(ge=0, allow_inf_nan=False, description="Maximum mean wind speed in m/s")
    min_temperature: float = Field(allow_inf_nan=False, description="Minimum operating temperature in °C")
    max_temperature: float = Field(allow_inf_nan=False, description="Maximum operating temperature in °C")
    notes: Optional[str] = None

    class Config:
        frozen = True

    @model_validator(mode="after")
    def _check_temperature_range(self) -> "DroneEnvelope":
        if self.min_temperature >= self.max_temperature:
            raise ValueError(
                f"min_temperature ({self.min_temperature}) must be lower than "
                f"max_temperature ({self.max_temperature})"
            )
        return self


class WeatherSnapshot(BaseModel):
    """Current conditions at a point, as reported by a weather provider."""
    temperature: float = Field(description="Air temperature in °C")
    wind_speed: float = Field(description="Mean wind speed in m/s")
    wind_gust: float = Field(description="Wind gust in m/s")
    precipitation_type: PrecipitationType = PrecipitationType.NONE
    visibility: Optional[float] = Field(default=None, description="Horizontal visibility in meters")
    cloud_cover: Optional[float] = Field(default=None, description="Cloud cover in percent")
    cloud_base_height: Optional[float] = Field(
        default=None, description="Cloud base height above ground in meters"
    )
    summary: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("precipitation_type", mode="before")
    @classmethod
    def _coerce_precipitation(cls, value: Any) -> Any:
        # Providers report free-form categories; anything unknown counts as "other".
        if value is None:
            return PrecipitationType.NONE
        if isinstance(value, str):
            try:
                return PrecipitationType(value.strip().lower())
            except ValueError:
                return PrecipitationType.OTHER
        return value


class SafetyVerdict(BaseModel):
    """Outcome of a safety evaluation."""
    safe_to_fly: bool
    indicator_color: IndicatorColor
    message: str

    class Config:
        frozen = True


class HourlyForecast(BaseModel):
    """Forecast conditions for one forecast step."""
    time: str = Field(description="Start of the step, ISO 8601 as reported by the provider")
    temperature: Optional[float] = None
    wind_speed: Optional[float] = Field(default=None, description="Mean wind speed in m/s")
    wind_gust: Optional[float] = Field(default=None, description="Wind gust in m/s")
    precipitation: Optional[float] = Field(default=None, description="Precipitation in mm")
    precipitation_type: PrecipitationType = PrecipitationType.NONE
    precipitation_probability: Optional[float] = Field(default=None, description="Percent")
    visibility: Optional[float] = None
    cloud_cover: Optional[float] = None
    cloud_base_height: Optional[float] = None
    summary: Optional[str] = None

    class Config:
        frozen = True


class DailyForecast(BaseModel):
    """Forecast aggregates for one calendar day."""
    date: str = Field(description="Day as YYYY-MM-DD")
    summary: Optional[str] = None
    temperature_min: Optional[float] = None
    temperature_max: Optional[float] = None
    wind_speed_max: Optional[float] = None
    wind_gust_max: Optional[float] = None
    precipitation_sum: Optional[float] = None
    precipitation_probability_max: Optional[float] = None
    sunrise: Optional[str] = None
    sunset: Optional[str] = None

    class Config:
        frozen = True


class WeatherReport(BaseModel):
    """
    Weather lookup result for a point.

    `current` is None when the provider had no data. Forecast lists are empty
    when the provider returned none.
    """
    latitude: float
    longitude: float
    elevation: Optional[float] = None
    timezone: Optional[str] = None
    provider: str
    current: Optional[WeatherSnapshot] = None
    hourly: list[HourlyForecast] = Field(default_factory=list)
    daily: list[DailyForecast] = Field(default_factory=list)

    class Config:
        frozen = True


class Zone(BaseModel):
    """
    Regulated airspace zone.

    `geometry` is kept as GeoJSON, with ring vertices in (longitude, latitude)
    order as delivered by the zone service.
    """
    name: Optional[str] = None
    zone_id: Optional[str] = Field(
        default=None, description="Identifier linking the zone to its time rules"
    )
    geometry: Optional[dict] = None
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
    properties: dict = Field(default_factory=dict)

    class Config:
        frozen = True

    @property
    def geometry_type(self) -> Optional[str]:
        if not self.geometry:
            return None
        return self.geometry.get("type")

    @classmethod
    def from_feature(cls, feature: dict) -> "Zone":
        """
        Build a zone from a GeoJSON feature of the zone service.

        Args:
            feature: GeoJSON feature with `geometry` and `properties`

        Returns:
            Zone instance
        """
        props = feature.get("properties") or {}
        zone_id = props.get("uidAmsl") or props.get("OBJECTID")
        return cls(
            name=props.get("name"),
            zone_id=str(zone_id) if zone_id is not None else None,
            geometry=feature.get("geometry"),
            category=props.get("categoryType"),
            status=props.get("status"),
            lower_limit=props.get("lowerLimit"),
            lower_unit=props.get("lowerAltitudeUnit"),
            lower_reference=props.get("lowerAltitudeReference"),
            upper_limit=props.get("upperLimit"),
            upper_unit=props.get("upperAltitudeUnit"),
            upper_reference=props.get("upperAltitudeReference"),
            reason=props.get("reason"),
            restriction=props.get("restriction"),
            additional_info=props.get("additionalInfo"),
            properties=dict(props),
        )

    def to_feature(self) -> dict:
        """Serialize back to a GeoJSON feature."""
        return {
            "type": "Feature",
            "geometry": self.geometry,
            "properties": self.properties,
        }


class GeneralTimeRule(BaseModel):
    """Date-range or permanent activation rule for a zone."""
    parent_id: Optional[str] = None
    child_id: Optional[str] = None
    permanent: Optional[str] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    status: Optional[str] = None
    name: Optional[str] = None


class SpecificTimeRule(BaseModel):
    """Weekday/time-of-day activation rule for a zone."""
    parent_id: Optional[str] = None
    child_id: Optional[str] = None
    days: Optional[str] = Field(default=None, description="Comma separated weekdays, e.g. 'MON,TUE'")
    written_start_time: Optional[str] = Field(default=None, description="HHMM")
    written_end_time: Optional[str] = Field(default=None, description="HHMM")
    time_unit: Optional[str] = None
    status: Optional[str] = None
    name: Optional[str] = None


class FlightCheck(BaseModel):
    """Combined flight check for a point."""
    coordinates: Coordinates
    drone: DroneEnvelope
    status: str = Field(
        description="ok, weather_unavailable, invalid_input or timeout"
    )
    verdict: SafetyVerdict
    weather: Optional[WeatherSnapshot] = None
    elevation: Optional[float] = None
    zone: Optional[Zone] = None
    zones_available: bool = True
    active_only: bool = False
