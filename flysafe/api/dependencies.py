"""
Dependency injection for FastAPI.

The zone locator and the flight check service are shared by all requests,
like the upstream clients, so converted zone geometry outlives a request.
"""
from typing import Annotated, Optional
from fastapi import Depends

from flysafe.config import settings
from flysafe.infrastructure.elevation_client import ElevationClient, get_elevation_client
from flysafe.infrastructure.weather_client import WeatherClient, get_weather_client
from flysafe.infrastructure.zone_client import ZoneDataClient, get_zone_client
from flysafe.services.domain.safety_evaluator import SafetyEvaluator
from flysafe.services.domain.zone_locator import ZoneLocator
from flysafe.services.application.flight_check_service import FlightCheckService


def get_safety_evaluator() -> SafetyEvaluator:
    """
    Dependency factory for SafetyEvaluator.

    Returns:
        SafetyEvaluator instance
    """
    return SafetyEvaluator()


# Singleton instances
_zone_locator: Optional[ZoneLocator] = None
_flight_check_service: Optional[FlightCheckService] = None


def get_zone_locator() -> ZoneLocator:
    """
    Get or create the shared zone locator.

    Returns:
        ZoneLocator instance
    """
    global _zone_locator
    if _zone_locator is None:
        _zone_locator = ZoneLocator(max_cached_zones=settings.zone_locator_cache_size)
    return _zone_locator


def get_flight_check_service() -> FlightCheckService:
    """
    Get or create the shared flight check service.

    Returns:
        FlightCheckService wired to the shared clients and locator
    """
    global _flight_check_service
    if _flight_check_service is None:
        _flight_check_service = FlightCheckService(
            weather_client=get_weather_client(),
            zone_client=get_zone_client(),
            elevation_client=get_elevation_client(),
            evaluator=get_safety_evaluator(),
            locator=get_zone_locator(),
        )
    return _flight_check_service


# Type aliases for cleaner route signatures
SafetyEvaluatorDep = Annotated[SafetyEvaluator, Depends(get_safety_evaluator)]
WeatherClientDep = Annotated[WeatherClient, Depends(get_weather_client)]
ZoneClientDep = Annotated[ZoneDataClient, Depends(get_zone_client)]
ElevationClientDep = Annotated[ElevationClient, Depends(get_elevation_client)]
FlightCheckServiceDep = Annotated[FlightCheckService, Depends(get_flight_check_service)]
