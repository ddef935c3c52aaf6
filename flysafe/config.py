"""
Application configuration using Pydantic settings.
"""
from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Weather providers
    open_meteo_base_url: str = Field(
        default="https://api.open-meteo.com",
        description="Base URL for the Open-Meteo API (primary weather provider)"
    )
    openweathermap_base_url: str = Field(
        default="https://api.openweathermap.org",
        description="Base URL for the OpenWeatherMap API (fallback weather provider)"
    )
    openweathermap_api_key: str = Field(
        default="",
        description="OpenWeatherMap API key; the fallback is disabled when empty"
    )

    # Elevation provider
    elevation_api_base_url: str = Field(
        default="https://maps.googleapis.com",
        description="Base URL for the Google Elevation API"
    )
    elevation_api_key: str = Field(
        default="",
        description="Google Maps API key used for elevation lookups"
    )

    # UAV zone services (ArcGIS FeatureServer layers)
    zone_geometry_service_url: str = Field(
        default="https://services3.arcgis.com/om3vWi08kAyoBbj3/arcgis/rest/services/Geozone_Download_Prod/FeatureServer/0",
        description="FeatureServer layer holding the zone geometries"
    )
    zone_general_time_service_url: str = Field(
        default="https://services3.arcgis.com/om3vWi08kAyoBbj3/arcgis/rest/services/General_Time_Download_Prod/FeatureServer/0",
        description="FeatureServer layer holding the general (date range) time rules"
    )
    zone_specific_time_service_url: str = Field(
        default="https://services3.arcgis.com/om3vWi08kAyoBbj3/arcgis/rest/services/Specific_Time_Download_Prod/FeatureServer/0",
        description="FeatureServer layer holding the specific (weekday/hour) time rules"
    )
    zone_record_count: int = Field(
        default=2000,
        description="Maximum number of records requested per zone service query"
    )
    zone_cache_ttl_seconds: float = Field(
        default=300.0,
        description="How long fetched zones and time rules are reused; 0 disables caching"
    )
    zone_locator_cache_size: int = Field(
        default=10000,
        description="Zones whose converted geometry is kept before the cache is emptied"
    )

    # HTTP client
    http_timeout: float = Field(
        default=30.0,
        description="Timeout in seconds for outbound HTTP requests"
    )

    # Retry Configuration
    max_retry_attempts: int = Field(
        default=3,
        description="Maximum number of retry attempts for API calls"
    )
    retry_backoff_multiplier: int = Field(
        default=1,
        description="Multiplier for exponential backoff"
    )
    retry_min_wait: int = Field(
        default=4,
        description="Minimum wait time in seconds between retries"
    )
    retry_max_wait: int = Field(
        default=10,
        description="Maximum wait time in seconds between retries"
    )

    # Safety evaluation parameters
    evaluation_timeout_seconds: float = Field(
        default=10.0,
        description="Upper bound for a complete safety evaluation before failing safe"
    )
    wind_margin_ratio: float = Field(
        default=0.1,
        description="Wind within this fraction of the drone limit is marginal"
    )
    temperature_margin_c: float = Field(
        default=2.0,
        description="Temperature within this many degrees of a limit is marginal"
    )
    freezing_point_c: float = Field(
        default=0.0,
        description="Temperatures near or below this value trigger a battery caution"
    )
    min_visibility_m: float = Field(
        default=2000.0,
        description="Minimum horizontal visibility for visual line of sight"
    )
    visibility_margin_ratio: float = Field(
        default=0.1,
        description="Visibility within this fraction above the minimum is marginal"
    )
    min_cloud_base_m: float = Field(
        default=120.0,
        description="Minimum cloud base height above ground"
    )
    cloud_cover_caution_pct: float = Field(
        default=90.0,
        description="Cloud cover above this percentage is marginal"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)"
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins (use specific origins in production)"
    )

    # Rate Limiting
    rate_limit_requests: int = Field(
        default=100,
        description="Maximum requests per minute per client"
    )

    # Application Settings
    app_name: str = Field(
        default="FlySafe Drone Flight Check",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    debug: bool = Field(
        default=False,
        description="Debug mode"
    )

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
