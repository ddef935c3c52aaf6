"""
Application service: Orchestration layer for flight checks.
"""
from typing import Optional, Tuple
import asyncio
import logging

from flysafe.config import settings
from flysafe.domain.errors import EvaluationTimeoutError, InvalidInputError
from flysafe.domain.models import (
    Coordinates,
    DroneEnvelope,
    FlightCheck,
    SafetyVerdict,
    WeatherSnapshot,
    Zone,
)
from flysafe.infrastructure.elevation_client import ElevationClient
from flysafe.infrastructure.external_api_client import ExternalAPIError
from flysafe.infrastructure.weather_client import WeatherClient
from flysafe.infrastructure.zone_client import ZoneDataClient
from flysafe.services.application.evaluation_gate import LatestEvaluationGate
from flysafe.services.domain.safety_evaluator import SafetyEvaluator, fail_safe_verdict
from flysafe.services.domain.zone_locator import ZoneLocator

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_WEATHER_UNAVAILABLE = "weather_unavailable"
STATUS_INVALID_INPUT = "invalid_input"
STATUS_TIMEOUT = "timeout"


class FlightCheckService:
    """
    Application service for flight checks at a point.

    Orchestrates data fetching and evaluation. No business rules live
    here: they belong to SafetyEvaluator and ZoneLocator. What this layer
    adds is the failure policy: any evaluation failure produces a RED
    fail-safe verdict, never a missing or stale one.
    """

    def __init__(
        self,
        weather_client: WeatherClient,
        zone_client: ZoneDataClient,
        elevation_client: ElevationClient,
        evaluator: SafetyEvaluator,
        locator: ZoneLocator,
        evaluation_timeout: Optional[float] = None,
    ):
        """
        Initialize the service with dependencies.

        Args:
            weather_client: Weather data source
            zone_client: Zone data source
            elevation_client: Elevation data source
            evaluator: Safety evaluator
            locator: Zone locator
            evaluation_timeout: Bound in seconds for weather fetch + evaluation
        """
        self.weather_client = weather_client
        self.zone_client = zone_client
        self.elevation_client = elevation_client
        self.evaluator = evaluator
        self.locator = locator
        self.evaluation_timeout = evaluation_timeout or settings.evaluation_timeout_seconds
        self.gate = LatestEvaluationGate()

    async def _fetch_and_evaluate(
        self,
        point: Coordinates,
        envelope: DroneEnvelope,
    ) -> Tuple[Optional[WeatherSnapshot], Optional[SafetyVerdict]]:
        report = await self.weather_client.get_weather(point.lat, point.lon)
        if report.current is None:
            return None, None
        return report.current, self.evaluator.evaluate(report.current, envelope)

    async def evaluate_point(
        self,
        point: Coordinates,
        envelope: DroneEnvelope,
    ) -> Tuple[Optional[WeatherSnapshot], Optional[SafetyVerdict]]:
        """
        Fetch weather for a point and evaluate it, within the time bound.

        Returns:
            (snapshot, verdict); both None when the provider had no current data

        Raises:
            ExternalAPIError: If the weather services failed
            InvalidInputError: If the weather data is not usable
            EvaluationTimeoutError: If the time bound was exceeded
        """
        try:
            return await asyncio.wait_for(
                self._fetch_and_evaluate(point, envelope),
                timeout=self.evaluation_timeout,
            )
        except asyncio.TimeoutError:
            raise EvaluationTimeoutError(self.evaluation_timeout)

    async def assess_safety(
        self,
        point: Coordinates,
        envelope: DroneEnvelope,
    ) -> Tuple[str, SafetyVerdict, Optional[WeatherSnapshot]]:
        """
        Evaluate safety at a point, converting every failure into a fail-safe verdict.

        Returns:
            (status, verdict, snapshot)
        """
        try:
            snapshot, verdict = await self.evaluate_point(point, envelope)
        except EvaluationTimeoutError as e:
            logger.warning(str(e))
            return STATUS_TIMEOUT, fail_safe_verdict("the evaluation timed out"), None
        except InvalidInputError as e:
            logger.warning(f"Invalid weather input: {e}")
            return STATUS_INVALID_INPUT, fail_safe_verdict(f"invalid weather data ({e})"), None
        except ExternalAPIError as e:
            logger.error(f"Weather data unavailable: {e}")
            return STATUS_WEATHER_UNAVAILABLE, fail_safe_verdict("weather data unavailable"), None

        if verdict is None:
            return (
                STATUS_WEATHER_UNAVAILABLE,
                fail_safe_verdict("no current weather data for this location"),
                None,
            )

        logger.info(
            f"Verdict at ({point.lat}, {point.lon}) for {envelope.name}: "
            f"{verdict.indicator_color.value}"
        )
        return STATUS_OK, verdict, snapshot

    async def find_zone(
        self,
        point: Coordinates,
        active_only: bool = False,
    ) -> Tuple[Optional[Zone], bool]:
        """
        Locate the zone containing a point.

        Returns:
            (zone or None, whether zone data was available)
        """
        try:
            zones = await self.zone_client.get_zones(active_only=active_only)
        except ExternalAPIError as e:
            logger.error(f"Zone data unavailable: {e}")
            return None, False
        return self.locator.locate(point, zones, active_only=active_only), True

    async def _elevation_or_none(self, point: Coordinates) -> Optional[float]:
        try:
            return await self.elevation_client.get_elevation(point.lat, point.lon)
        except ExternalAPIError as e:
            logger.warning(f"Elevation unavailable: {e}")
            return None

    async def check(
        self,
        point: Coordinates,
        envelope: DroneEnvelope,
        active_only: bool = False,
    ) -> FlightCheck:
        """
        Run a full flight check for a point.

        Weather, zones and elevation are fetched concurrently. Elevation and
        zone failures degrade the result; weather failures give a RED
        fail-safe verdict.

        Args:
            point: Selected coordinates
            envelope: Drone operating limits
            active_only: Only consider zones active now

        Returns:
            FlightCheck
        """
        (status, verdict, snapshot), (zone, zones_available), elevation = await asyncio.gather(
            self.assess_safety(point, envelope),
            self.find_zone(point, active_only),
            self._elevation_or_none(point),
        )
        return FlightCheck(
            coordinates=point,
            drone=envelope,
            status=status,
            verdict=verdict,
            weather=snapshot,
            elevation=elevation,
            zone=zone,
            zones_available=zones_available,
            active_only=active_only,
        )

    async def recheck(
        self,
        point: Coordinates,
        envelope: DroneEnvelope,
        active_only: bool = False,
    ) -> Optional[FlightCheck]:
        """
        Run a flight check through the last-input-wins gate.

        Returns:
            The FlightCheck, or None if a newer recheck superseded this one
        """
        return await self.gate.submit(self.check(point, envelope, active_only))
