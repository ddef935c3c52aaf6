"""
Infrastructure layer: Weather client with provider fallback.

Open-Meteo is queried first. When it fails or has no current conditions and
an OpenWeatherMap key is configured, OpenWeatherMap is used instead. Both
providers also deliver hourly and daily forecasts.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import logging

from flysafe.config import settings
from flysafe.domain.models import (
    DailyForecast,
    HourlyForecast,
    PrecipitationType,
    WeatherReport,
    WeatherSnapshot,
)
from flysafe.infrastructure.api_constants import WeatherAPIEndpoints, describe_wmo_code
from flysafe.infrastructure.external_api_client import (
    ExternalAPIClient,
    ExternalAPIError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)


def _at(series: Dict[str, Any], key: str, index: int) -> Any:
    values = series.get(key) or []
    return values[index] if index < len(values) else None


def parse_open_meteo_hourly(data: Dict[str, Any]) -> List[HourlyForecast]:
    """Build the next hours of forecast from Open-Meteo's `hourly` arrays."""
    hourly = data.get("hourly") or {}
    times = (hourly.get("time") or [])[:WeatherAPIEndpoints.OPEN_METEO_HOURLY_STEPS]

    forecasts = []
    for i, time in enumerate(times):
        summary, precipitation_type = describe_wmo_code(_at(hourly, "weather_code", i))
        forecasts.append(HourlyForecast(
            time=time,
            temperature=_at(hourly, "temperature_2m", i),
            wind_speed=_at(hourly, "wind_speed_10m", i),
            wind_gust=_at(hourly, "wind_gusts_10m", i),
            precipitation=_at(hourly, "precipitation", i),
            precipitation_type=precipitation_type,
            precipitation_probability=_at(hourly, "precipitation_probability", i),
            visibility=_at(hourly, "visibility", i),
            cloud_cover=_at(hourly, "cloud_cover", i),
            cloud_base_height=_at(hourly, "cloud_base_height", i),
            summary=summary,
        ))
    return forecasts


def parse_open_meteo_daily(data: Dict[str, Any]) -> List[DailyForecast]:
    """Build the daily forecast from Open-Meteo's `daily` arrays."""
    daily = data.get("daily") or {}
    days = (daily.get("time") or [])[:WeatherAPIEndpoints.MAX_DAILY_ENTRIES]

    forecasts = []
    for i, date in enumerate(days):
        summary, _ = describe_wmo_code(_at(daily, "weather_code", i))
        forecasts.append(DailyForecast(
            date=date,
            summary=summary,
            temperature_min=_at(daily, "temperature_2m_min", i),
            temperature_max=_at(daily, "temperature_2m_max", i),
            wind_speed_max=_at(daily, "wind_speed_10m_max", i),
            wind_gust_max=_at(daily, "wind_gusts_10m_max", i),
            precipitation_sum=_at(daily, "precipitation_sum", i),
            precipitation_probability_max=_at(daily, "precipitation_probability_max", i),
            sunrise=_at(daily, "sunrise", i),
            sunset=_at(daily, "sunset", i),
        ))
    return forecasts


def parse_open_meteo(data: Dict[str, Any], lat: float, lon: float) -> WeatherReport:
    """
    Convert an Open-Meteo response into a WeatherReport.

    Args:
        data: Decoded Open-Meteo JSON (requested with wind speeds in m/s)
        lat: Requested latitude
        lon: Requested longitude

    Returns:
        WeatherReport; `current` is None when temperature or wind is missing
    """
    current = data.get("current") or {}
    snapshot = None

    temperature = current.get("temperature_2m")
    wind_speed = current.get("wind_speed_10m")
    if temperature is not None and wind_speed is not None:
        summary, precipitation_type = describe_wmo_code(current.get("weather_code"))
        gust = current.get("wind_gusts_10m")
        snapshot = WeatherSnapshot(
            temperature=temperature,
            wind_speed=wind_speed,
            wind_gust=gust if gust is not None else wind_speed,
            precipitation_type=precipitation_type,
            visibility=current.get("visibility"),
            cloud_cover=current.get("cloud_cover"),
            cloud_base_height=current.get("cloud_base_height"),
            summary=summary,
        )

    return WeatherReport(
        latitude=lat,
        longitude=lon,
        elevation=data.get("elevation"),
        timezone=data.get("timezone"),
        provider="open-meteo",
        current=snapshot,
        hourly=parse_open_meteo_hourly(data),
        daily=parse_open_meteo_daily(data),
    )


def owm_precipitation_type(data: Dict[str, Any]) -> PrecipitationType:
    """Derive the precipitation type from an OpenWeatherMap payload."""
    if data.get("snow"):
        return PrecipitationType.SNOW
    if data.get("rain"):
        return PrecipitationType.RAIN

    conditions = data.get("weather") or []
    if conditions:
        main = (conditions[0].get("main") or "").lower()
        if "snow" in main:
            return PrecipitationType.SNOW
        if any(word in main for word in ("rain", "drizzle", "thunderstorm")):
            return PrecipitationType.RAIN
    return PrecipitationType.NONE


def owm_precipitation_amount(data: Dict[str, Any]) -> Optional[float]:
    """Rain plus snow in mm over the step, or None when there was none."""
    amount = 0.0
    for kind in ("rain", "snow"):
        block = data.get(kind) or {}
        value = block.get("3h", block.get("1h"))
        if value:
            amount += value
    return amount or None


def _owm_step_time(item: Dict[str, Any]) -> str:
    # dt_txt is UTC, "YYYY-MM-DD HH:MM:SS"
    dt_txt = item.get("dt_txt")
    if dt_txt:
        return dt_txt.replace(" ", "T") + "Z"
    return datetime.fromtimestamp(item["dt"], timezone.utc).isoformat()


def _owm_summary(item: Dict[str, Any]) -> Optional[str]:
    conditions = item.get("weather") or []
    return conditions[0].get("description") if conditions else None


def _owm_hourly(item: Dict[str, Any]) -> HourlyForecast:
    main = item.get("main") or {}
    wind = item.get("wind") or {}
    pop = item.get("pop")
    return HourlyForecast(
        time=_owm_step_time(item),
        temperature=main.get("temp"),
        wind_speed=wind.get("speed"),
        wind_gust=wind.get("gust"),
        precipitation=owm_precipitation_amount(item),
        precipitation_type=owm_precipitation_type(item),
        precipitation_probability=pop * 100 if pop is not None else None,
        visibility=item.get("visibility"),
        cloud_cover=(item.get("clouds") or {}).get("all"),
        summary=_owm_summary(item),
    )


def _owm_daily(date: str, steps: List[HourlyForecast]) -> DailyForecast:
    temperatures = [s.temperature for s in steps if s.temperature is not None]
    speeds = [s.wind_speed for s in steps if s.wind_speed is not None]
    gusts = [s.wind_gust for s in steps if s.wind_gust is not None] or speeds
    amounts = [s.precipitation for s in steps if s.precipitation is not None]
    probabilities = [
        s.precipitation_probability for s in steps if s.precipitation_probability is not None
    ]

    # Midday conditions describe the day; otherwise the middle step does
    midday = [i for i, s in enumerate(steps) if s.time[11:13] == "12"]
    representative = steps[midday[0] if midday else len(steps) // 2]

    return DailyForecast(
        date=date,
        summary=representative.summary,
        temperature_min=min(temperatures) if temperatures else None,
        temperature_max=max(temperatures) if temperatures else None,
        wind_speed_max=max(speeds) if speeds else None,
        wind_gust_max=max(gusts) if gusts else None,
        precipitation_sum=sum(amounts) if amounts else None,
        precipitation_probability_max=max(probabilities) if probabilities else None,
    )


def parse_openweathermap_forecast(
    data: Dict[str, Any],
) -> Tuple[List[HourlyForecast], List[DailyForecast]]:
    """
    Convert an OpenWeatherMap 5 day / 3 hour forecast.

    The first steps form the hourly forecast. Daily entries aggregate all
    steps falling on the same UTC date.

    Args:
        data: Decoded OpenWeatherMap forecast JSON (metric units)

    Returns:
        (hourly, daily) forecasts
    """
    items = data.get("list") or []
    steps = [_owm_hourly(item) for item in items]

    by_date: Dict[str, List[HourlyForecast]] = {}
    for step in steps:
        by_date.setdefault(step.time[:10], []).append(step)

    daily = [_owm_daily(date, day_steps) for date, day_steps in by_date.items()]
    return (
        steps[:WeatherAPIEndpoints.OPENWEATHERMAP_HOURLY_STEPS],
        daily[:WeatherAPIEndpoints.MAX_DAILY_ENTRIES],
    )


def parse_openweathermap(
    data: Dict[str, Any],
    lat: float,
    lon: float,
    forecast: Optional[Dict[str, Any]] = None,
) -> WeatherReport:
    """
    Convert an OpenWeatherMap current weather response into a WeatherReport.

    Args:
        data: Decoded OpenWeatherMap JSON (metric units)
        lat: Requested latitude
        lon: Requested longitude
        forecast: Decoded forecast JSON, if it was fetched

    Returns:
        WeatherReport; `current` is None when temperature or wind is missing
    """
    main = data.get("main") or {}
    wind = data.get("wind") or {}
    conditions = data.get("weather") or []
    snapshot = None

    if main.get("temp") is not None and wind.get("speed") is not None:
        gust = wind.get("gust")
        snapshot = WeatherSnapshot(
            temperature=main["temp"],
            wind_speed=wind["speed"],
            wind_gust=gust if gust is not None else wind["speed"],
            precipitation_type=owm_precipitation_type(data),
            visibility=data.get("visibility"),
            cloud_cover=(data.get("clouds") or {}).get("all"),
            summary=conditions[0].get("description") if conditions else None,
        )

    hourly, daily = parse_openweathermap_forecast(forecast) if forecast else ([], [])

    offset = data.get("timezone")
    return WeatherReport(
        latitude=lat,
        longitude=lon,
        timezone=f"UTC{offset / 3600:+g}" if isinstance(offset, (int, float)) else None,
        provider="openweathermap",
        current=snapshot,
        hourly=hourly,
        daily=daily,
    )


class WeatherClient:
    """
    Client for current weather and forecasts at a point.
    """

    def __init__(
        self,
        open_meteo: Optional[ExternalAPIClient] = None,
        openweathermap: Optional[ExternalAPIClient] = None,
        openweathermap_api_key: Optional[str] = None,
    ):
        self.open_meteo = open_meteo or ExternalAPIClient(settings.open_meteo_base_url)
        self.openweathermap_api_key = (
            settings.openweathermap_api_key
            if openweathermap_api_key is None
            else openweathermap_api_key
        )
        self.openweathermap = openweathermap
        if self.openweathermap is None and self.openweathermap_api_key:
            self.openweathermap = ExternalAPIClient(settings.openweathermap_base_url)

    async def close(self):
        """Close the underlying HTTP clients."""
        await self.open_meteo.close()
        if self.openweathermap is not None:
            await self.openweathermap.close()

    async def _fetch_open_meteo(self, lat: float, lon: float) -> WeatherReport:
        data = await self.open_meteo.get_json(
            WeatherAPIEndpoints.OPEN_METEO_FORECAST,
            params={
                "latitude": lat,
                "longitude": lon,
                "current": WeatherAPIEndpoints.OPEN_METEO_CURRENT_FIELDS,
                "hourly": WeatherAPIEndpoints.OPEN_METEO_HOURLY_FIELDS,
                "daily": WeatherAPIEndpoints.OPEN_METEO_DAILY_FIELDS,
                "forecast_days": WeatherAPIEndpoints.OPEN_METEO_FORECAST_DAYS,
                "wind_speed_unit": "ms",
                "timezone": "auto",
            },
        )
        return parse_open_meteo(data, lat, lon)

    async def _fetch_openweathermap(self, lat: float, lon: float) -> WeatherReport:
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.openweathermap_api_key,
            "units": "metric",
            "lang": "en",
        }
        data = await self.openweathermap.get_json(
            WeatherAPIEndpoints.OPENWEATHERMAP_CURRENT, params=params
        )

        forecast = None
        try:
            forecast = await self.openweathermap.get_json(
                WeatherAPIEndpoints.OPENWEATHERMAP_FORECAST,
                params={**params, "cnt": WeatherAPIEndpoints.OPENWEATHERMAP_FORECAST_STEPS},
            )
        except ExternalAPIError as e:
            logger.warning(f"OpenWeatherMap forecast request failed, keeping current only: {e}")
        return parse_openweathermap(data, lat, lon, forecast)

    async def get_weather(self, lat: float, lon: float) -> WeatherReport:
        """
        Fetch current weather and forecasts for a point.

        Args:
            lat: Latitude in degrees
            lon: Longitude in degrees

        Returns:
            WeatherReport; `current` is None when no provider had current data

        Raises:
            UpstreamUnavailableError: If every configured provider failed
        """
        report = None
        try:
            report = await self._fetch_open_meteo(lat, lon)
            if report.current is not None:
                return report
            logger.warning("Open-Meteo returned no current conditions")
        except ExternalAPIError as e:
            logger.warning(f"Open-Meteo request failed: {e}")

        if self.openweathermap is None:
            if report is not None:
                return report
            raise UpstreamUnavailableError(
                "Primary weather service unavailable and no fallback is configured"
            )

        logger.info("Falling back to OpenWeatherMap")
        try:
            fallback = await self._fetch_openweathermap(lat, lon)
        except ExternalAPIError as e:
            logger.error(f"OpenWeatherMap request failed: {e}")
            if report is not None:
                return report
            raise UpstreamUnavailableError("All weather services failed")
        return fallback


# Singleton instance
_weather_client: Optional[WeatherClient] = None


def get_weather_client() -> WeatherClient:
    """
    Get or create the singleton weather client instance.

    Returns:
        WeatherClient instance
    """
    global _weather_client
    if _weather_client is None:
        _weather_client = WeatherClient()
    return _weather_client
