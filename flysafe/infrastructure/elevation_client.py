"""
Infrastructure layer: Ground elevation lookups (Google Elevation API).
"""
from typing import Optional
import logging

from flysafe.config import settings
from flysafe.infrastructure.api_constants import ElevationAPIEndpoints
from flysafe.infrastructure.external_api_client import (
    ExternalAPIClient,
    ExternalAPIError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)


class ElevationClient(ExternalAPIClient):
    """Client for ground elevation at a point."""

    def __init__(self, api_key: Optional[str] = None):
        super().__init__(settings.elevation_api_base_url)
        self.api_key = settings.elevation_api_key if api_key is None else api_key

    async def get_elevation(self, lat: float, lon: float) -> Optional[float]:
        """
        Fetch ground elevation.

        Args:
            lat: Latitude in degrees
            lon: Longitude in degrees

        Returns:
            Elevation in meters, or None when the service has no data

        Raises:
            UpstreamUnavailableError: If no API key is configured or the
                service is unreachable
            ExternalAPIError: If the service rejects the request
        """
        if not self.api_key:
            raise UpstreamUnavailableError("Elevation API key is not configured")

        data = await self.get_json(
            ElevationAPIEndpoints.ELEVATION,
            params={"locations": f"{lat},{lon}", "key": self.api_key},
        )

        status = data.get("status")
        results = data.get("results") or []
        if status == "OK" and results:
            return float(results[0]["elevation"])
        if status == "ZERO_RESULTS":
            logger.info(f"No elevation data for ({lat}, {lon})")
            return None

        message = data.get("error_message") or f"Elevation request failed with status {status}"
        raise ExternalAPIError(message)


# Singleton instance
_elevation_client: Optional[ElevationClient] = None


def get_elevation_client() -> ElevationClient:
    """
    Get or create the singleton elevation client instance.

    Returns:
        ElevationClient instance
    """
    global _elevation_client
    if _elevation_client is None:
        _elevation_client = ElevationClient()
    return _elevation_client
