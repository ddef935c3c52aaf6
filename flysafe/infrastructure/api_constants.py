"""
External API endpoint constants and provider code tables.

This module contains the endpoint paths, query fields and lookup tables of
the weather, elevation and zone services.
"""


class WeatherAPIEndpoints:
    """Weather provider endpoint paths."""

    OPEN_METEO_FORECAST = "/v1/metno"
    OPENWEATHERMAP_CURRENT = "/data/2.5/weather"
    OPENWEATHERMAP_FORECAST = "/data/2.5/forecast"

    OPEN_METEO_CURRENT_FIELDS = ",".join([
        "temperature_2m",
        "relative_humidity_2m",
        "precipitation",
        "weather_code",
        "cloud_cover",
        "wind_speed_10m",
        "wind_direction_10m",
        "wind_gusts_10m",
        "visibility",
        "cloud_base_height",
    ])

    OPEN_METEO_HOURLY_FIELDS = ",".join([
        "temperature_2m",
        "precipitation_probability",
        "precipitation",
        "weather_code",
        "cloud_cover",
        "visibility",
        "wind_speed_10m",
        "wind_gusts_10m",
        "cloud_base_height",
    ])

    OPEN_METEO_DAILY_FIELDS = ",".join([
        "weather_code",
        "temperature_2m_max",
        "temperature_2m_min",
        "sunrise",
        "sunset",
        "precipitation_sum",
        "precipitation_probability_max",
        "wind_speed_10m_max",
        "wind_gusts_10m_max",
    ])

    # Hourly steps kept from Open-Meteo, and days requested
    OPEN_METEO_HOURLY_STEPS = 24
    OPEN_METEO_FORECAST_DAYS = 8

    # OpenWeatherMap forecasts come in 3 hour steps; 40 steps cover five days
    OPENWEATHERMAP_FORECAST_STEPS = 40
    OPENWEATHERMAP_HOURLY_STEPS = 8
    MAX_DAILY_ENTRIES = 8


class ElevationAPIEndpoints:
    """Elevation provider endpoint paths."""

    ELEVATION = "/maps/api/elevation/json"


class ZoneAPIEndpoints:
    """ArcGIS FeatureServer endpoints for zone data."""

    QUERY = "/query"

    @classmethod
    def query_url(cls, layer_url: str) -> str:
        """
        Get the query endpoint of a FeatureServer layer.

        Args:
            layer_url: FeatureServer layer URL

        Returns:
            Absolute query URL
        """
        return f"{layer_url.rstrip('/')}{cls.QUERY}"


# WMO weather interpretation codes -> (summary, precipitation type)
WMO_WEATHER_CODES = {
    0: ("Clear sky", "none"),
    1: ("Mainly clear", "none"),
    2: ("Partly cloudy", "none"),
    3: ("Overcast", "none"),
    45: ("Fog", "none"),
    48: ("Depositing rime fog", "none"),
    51: ("Light drizzle", "rain"),
    53: ("Moderate drizzle", "rain"),
    55: ("Dense drizzle", "rain"),
    56: ("Light freezing drizzle", "rain"),
    57: ("Dense freezing drizzle", "rain"),
    61: ("Slight rain", "rain"),
    63: ("Moderate rain", "rain"),
    65: ("Heavy rain", "rain"),
    66: ("Light freezing rain", "rain"),
    67: ("Heavy freezing rain", "rain"),
    71: ("Slight snow fall", "snow"),
    73: ("Moderate snow fall", "snow"),
    75: ("Heavy snow fall", "snow"),
    77: ("Snow grains", "snow"),
    80: ("Slight rain showers", "rain"),
    81: ("Moderate rain showers", "rain"),
    82: ("Violent rain showers", "rain"),
    85: ("Slight snow showers", "snow"),
    86: ("Heavy snow showers", "snow"),
    95: ("Thunderstorm", "rain"),
    96: ("Thunderstorm with slight hail", "rain"),
    99: ("Thunderstorm with heavy hail", "rain"),
}


def describe_wmo_code(code) -> tuple[str, str]:
    """
    Map a WMO weather code to a summary and a precipitation type.

    Args:
        code: WMO code, or None when the provider did not report one

    Returns:
        (summary, precipitation type); unknown codes map to "other"
    """
    if code is None:
        return "Weather data unavailable", "none"
    return WMO_WEATHER_CODES.get(int(code), (f"Unknown WMO code {code}", "other"))


class APIConstants:
    """General API configuration constants."""

    # ArcGIS output formats
    FORMAT_GEOJSON = "geojson"
    FORMAT_JSON = "json"
    WGS84_WKID = "4326"
