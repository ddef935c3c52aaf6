"""
Unit tests for the flight check application service.

Tests cover:
- Combined weather, zone and elevation results
- Fail-safe verdicts when weather is unavailable, invalid or late
- Degraded results when zones or elevation fail
- Last-input-wins evaluation gate
"""
import asyncio
import math
import pytest

from flysafe.domain.models import (
    Coordinates,
    IndicatorColor,
    WeatherReport,
    WeatherSnapshot,
    Zone,
)
from flysafe.infrastructure.external_api_client import (
    ExternalAPIError,
    UpstreamUnavailableError,
)
from flysafe.services.application.evaluation_gate import LatestEvaluationGate
from flysafe.services.application.flight_check_service import (
    FlightCheckService,
    STATUS_INVALID_INPUT,
    STATUS_OK,
    STATUS_TIMEOUT,
    STATUS_WEATHER_UNAVAILABLE,
)
from flysafe.services.domain.safety_evaluator import EvaluationConfig, SafetyEvaluator
from flysafe.services.domain.zone_locator import ZoneLocator

BRUSSELS = Coordinates(lat=50.85, lon=4.35)
OPEN_SEA = Coordinates(lat=51.50, lon=2.50)


@pytest.fixture
def service(mock_weather_client, mock_zone_client, mock_elevation_client) -> FlightCheckService:
    return FlightCheckService(
        weather_client=mock_weather_client,
        zone_client=mock_zone_client,
        elevation_client=mock_elevation_client,
        evaluator=SafetyEvaluator(config=EvaluationConfig()),
        locator=ZoneLocator(),
        evaluation_timeout=1,
    )


# ============================================================
# Successful Check Tests
# ============================================================

class TestCheck:
    """Tests for a complete flight check."""

    @pytest.mark.asyncio
    async def test_check_inside_zone(self, service, mini_envelope):
        """Calm weather inside the square zone."""
        result = await service.check(BRUSSELS, mini_envelope)

        assert result.status == STATUS_OK
        assert result.verdict.indicator_color == IndicatorColor.GREEN
        assert result.weather.temperature == 20
        assert result.elevation == 75.0
        assert result.zone.name == "Brussels Square"
        assert result.zones_available is True

    @pytest.mark.asyncio
    async def test_check_outside_zones(self, service, mini_envelope):
        result = await service.check(OPEN_SEA, mini_envelope)

        assert result.zone is None
        assert result.zones_available is True

    @pytest.mark.asyncio
    async def test_clients_called_with_point(
        self, service, mini_envelope, mock_weather_client, mock_zone_client, mock_elevation_client
    ):
        await service.check(BRUSSELS, mini_envelope, active_only=True)

        mock_weather_client.get_weather.assert_called_once_with(50.85, 4.35)
        mock_elevation_client.get_elevation.assert_called_once_with(50.85, 4.35)
        mock_zone_client.get_zones.assert_called_once_with(active_only=True)

    @pytest.mark.asyncio
    async def test_red_weather_reported(self, service, mini_envelope, mock_weather_client):
        mock_weather_client.get_weather.return_value = WeatherReport(
            latitude=50.85,
            longitude=4.35,
            provider="open-meteo",
            current=WeatherSnapshot(
                temperature=5, wind_speed=12, wind_gust=14, precipitation_type="none"
            ),
        )

        result = await service.check(BRUSSELS, mini_envelope)

        assert result.status == STATUS_OK
        assert result.verdict.indicator_color == IndicatorColor.RED
        assert "10.7 m/s" in result.verdict.message


# ============================================================
# Fail-Safe Tests
# ============================================================

class TestFailSafe:
    """Every evaluation failure should produce a RED verdict."""

    @pytest.mark.asyncio
    async def test_weather_service_down(self, service, mini_envelope, mock_weather_client):
        mock_weather_client.get_weather.side_effect = UpstreamUnavailableError("down")

        result = await service.check(BRUSSELS, mini_envelope)

        assert result.status == STATUS_WEATHER_UNAVAILABLE
        assert result.verdict.indicator_color == IndicatorColor.RED
        assert result.verdict.safe_to_fly is False
        assert result.weather is None
        # The rest of the check still completes
        assert result.zone.name == "Brussels Square"

    @pytest.mark.asyncio
    async def test_no_current_weather(self, service, mini_envelope, mock_weather_client):
        mock_weather_client.get_weather.return_value = WeatherReport(
            latitude=50.85, longitude=4.35, provider="open-meteo", current=None
        )

        result = await service.check(BRUSSELS, mini_envelope)

        assert result.status == STATUS_WEATHER_UNAVAILABLE
        assert result.verdict.indicator_color == IndicatorColor.RED
        assert "no current weather data" in result.verdict.message

    @pytest.mark.asyncio
    async def test_invalid_weather(self, service, mini_envelope, mock_weather_client):
        mock_weather_client.get_weather.return_value = WeatherReport(
            latitude=50.85,
            longitude=4.35,
            provider="open-meteo",
            current=WeatherSnapshot(
                temperature=math.nan, wind_speed=3, wind_gust=4, precipitation_type="none"
            ),
        )

        result = await service.check(BRUSSELS, mini_envelope)

        assert result.status == STATUS_INVALID_INPUT
        assert result.verdict.indicator_color == IndicatorColor.RED
        assert "temperature" in result.verdict.message

    @pytest.mark.asyncio
    async def test_timeout(self, mock_weather_client, mock_zone_client, mock_elevation_client, mini_envelope):
        """A slow weather service should give a RED timeout verdict."""
        async def slow_weather(*args, **kwargs):
            await asyncio.sleep(5)

        mock_weather_client.get_weather.side_effect = slow_weather
        service = FlightCheckService(
            weather_client=mock_weather_client,
            zone_client=mock_zone_client,
            elevation_client=mock_elevation_client,
            evaluator=SafetyEvaluator(config=EvaluationConfig()),
            locator=ZoneLocator(),
            evaluation_timeout=0.05,
        )

        result = await service.check(BRUSSELS, mini_envelope)

        assert result.status == STATUS_TIMEOUT
        assert result.verdict.indicator_color == IndicatorColor.RED
        assert "timed out" in result.verdict.message


# ============================================================
# Degraded Result Tests
# ============================================================

class TestDegradedResults:
    """Zone and elevation failures should not fail the check."""

    @pytest.mark.asyncio
    async def test_zone_service_down(self, service, mini_envelope, mock_zone_client):
        mock_zone_client.get_zones.side_effect = ExternalAPIError("zones down")

        result = await service.check(BRUSSELS, mini_envelope)

        assert result.zone is None
        assert result.zones_available is False
        assert result.verdict.indicator_color == IndicatorColor.GREEN

    @pytest.mark.asyncio
    async def test_elevation_service_down(self, service, mini_envelope, mock_elevation_client):
        mock_elevation_client.get_elevation.side_effect = UpstreamUnavailableError("no key")

        result = await service.check(BRUSSELS, mini_envelope)

        assert result.elevation is None
        assert result.status == STATUS_OK

    @pytest.mark.asyncio
    async def test_malformed_zone_does_not_fail_check(
        self, service, mini_envelope, mock_zone_client, malformed_feature, square_feature
    ):
        """A zone with broken coordinates ahead of the match should be skipped."""
        mock_zone_client.get_zones.return_value = [
            Zone.from_feature(malformed_feature),
            Zone.from_feature(square_feature),
        ]

        result = await service.check(BRUSSELS, mini_envelope)

        assert result.status == STATUS_OK
        assert result.verdict.indicator_color == IndicatorColor.GREEN
        assert result.zone.name == "Brussels Square"
        assert result.zones_available is True

    @pytest.mark.asyncio
    async def test_find_zone(self, service):
        zone, available = await service.find_zone(BRUSSELS)

        assert zone.name == "Brussels Square"
        assert available is True


# ============================================================
# Evaluation Gate Tests
# ============================================================

class TestLatestEvaluationGate:
    """Tests for last-input-wins publication."""

    @pytest.mark.asyncio
    async def test_single_submission(self):
        gate = LatestEvaluationGate()

        async def evaluation():
            return "verdict"

        assert await gate.submit(evaluation()) == "verdict"
        assert gate.latest == "verdict"
        assert gate.generation == 1

    @pytest.mark.asyncio
    async def test_newer_submission_supersedes(self):
        """An older, slower evaluation must never overwrite a newer result."""
        gate = LatestEvaluationGate()

        async def slow():
            await asyncio.sleep(1)
            return "old"

        async def fast():
            return "new"

        first = asyncio.create_task(gate.submit(slow()))
        await asyncio.sleep(0)

        second = await gate.submit(fast())

        assert second == "new"
        assert await first is None
        assert gate.latest == "new"

    @pytest.mark.asyncio
    async def test_error_propagates(self):
        gate = LatestEvaluationGate()

        async def failing():
            raise ValueError("bad input")

        with pytest.raises(ValueError, match="bad input"):
            await gate.submit(failing())
        assert gate.latest is None

    @pytest.mark.asyncio
    async def test_recheck_publishes_latest(self, service, mini_envelope):
        result = await service.recheck(BRUSSELS, mini_envelope)

        assert result is not None
        assert service.gate.latest is result


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
