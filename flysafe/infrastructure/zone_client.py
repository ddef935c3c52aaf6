"""
Infrastructure layer: UAV zone data from ArcGIS FeatureServer layers.

Zone geometries come from one layer as GeoJSON (WGS84, lon/lat order).
Time rules come from two more layers as plain ArcGIS JSON, where each
feature carries its fields under `attributes`.
"""
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple
import asyncio
import logging
import time

from flysafe.config import settings
from flysafe.domain.models import GeneralTimeRule, SpecificTimeRule, Zone
from flysafe.infrastructure.api_constants import APIConstants, ZoneAPIEndpoints
from flysafe.infrastructure.external_api_client import ExternalAPIClient
from flysafe.services.domain.zone_schedule import filter_active_zones

logger = logging.getLogger(__name__)


def _epoch_ms_to_datetime(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)


def _as_str(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


def parse_general_rule(attributes: Dict[str, Any]) -> GeneralTimeRule:
    """Build a GeneralTimeRule from ArcGIS attributes."""
    return GeneralTimeRule(
        parent_id=_as_str(attributes.get("ParentID")),
        child_id=_as_str(attributes.get("childID")),
        permanent=_as_str(attributes.get("permanent")),
        start=_epoch_ms_to_datetime(attributes.get("startDateTime")),
        end=_epoch_ms_to_datetime(attributes.get("endDateTime")),
        status=attributes.get("status"),
        name=attributes.get("name"),
    )


def parse_specific_rule(attributes: Dict[str, Any]) -> SpecificTimeRule:
    """Build a SpecificTimeRule from ArcGIS attributes."""
    return SpecificTimeRule(
        parent_id=_as_str(attributes.get("ParentID")),
        child_id=_as_str(attributes.get("childID")),
        days=attributes.get("days"),
        written_start_time=_as_str(attributes.get("writtenStartTime")),
        written_end_time=_as_str(attributes.get("writtenEndTime")),
        time_unit=attributes.get("TimeUnit"),
        status=attributes.get("status"),
        name=attributes.get("name"),
    )


class ZoneDataClient(ExternalAPIClient):
    """
    Client for UAV zone geometries and their activation rules.

    Zones and time rules are kept for `cache_ttl` seconds. Reusing the same
    Zone objects lets a shared ZoneLocator reuse their converted geometry.
    """

    def __init__(
        self,
        geometry_url: Optional[str] = None,
        general_time_url: Optional[str] = None,
        specific_time_url: Optional[str] = None,
        cache_ttl: Optional[float] = None,
    ):
        super().__init__()
        self.geometry_url = geometry_url or settings.zone_geometry_service_url
        self.general_time_url = general_time_url or settings.zone_general_time_service_url
        self.specific_time_url = specific_time_url or settings.zone_specific_time_service_url
        self.cache_ttl = settings.zone_cache_ttl_seconds if cache_ttl is None else cache_ttl
        self._cache: Dict[str, Tuple[float, Any]] = {}

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _cached(self, key: str, load: Callable[[], Awaitable[Any]]) -> Any:
        entry = self._cache.get(key)
        if entry is not None and time.monotonic() - entry[0] < self.cache_ttl:
            return entry[1]
        value = await load()
        if self.cache_ttl > 0:
            self._cache[key] = (time.monotonic(), value)
        return value

    async def _load_zones(self) -> List[Zone]:
        features = await self.get_zone_features()
        zones = [Zone.from_feature(feature) for feature in features]
        logger.info(f"Fetched {len(zones)} zones")
        return zones

    async def _query(self, layer_url: str, output_format: str) -> List[Dict[str, Any]]:
        params = {
            "where": "1=1",
            "outFields": "*",
            "f": output_format,
            "resultRecordCount": str(settings.zone_record_count),
        }
        if output_format == APIConstants.FORMAT_GEOJSON:
            params["outSR"] = APIConstants.WGS84_WKID
        data = await self.get_json(ZoneAPIEndpoints.query_url(layer_url), params=params)
        return data.get("features") or []

    async def get_zone_features(self) -> List[Dict[str, Any]]:
        """
        Fetch the raw GeoJSON zone features.

        Raises:
            ExternalAPIError: If the geometry service fails
        """
        return await self._query(self.geometry_url, APIConstants.FORMAT_GEOJSON)

    async def get_time_rules(self) -> tuple[List[GeneralTimeRule], List[SpecificTimeRule]]:
        """
        Fetch general and specific time rules.

        Raises:
            ExternalAPIError: If either rule service fails
        """
        general_raw, specific_raw = await asyncio.gather(
            self._query(self.general_time_url, APIConstants.FORMAT_JSON),
            self._query(self.specific_time_url, APIConstants.FORMAT_JSON),
        )
        general = [parse_general_rule(f.get("attributes") or {}) for f in general_raw]
        specific = [parse_specific_rule(f.get("attributes") or {}) for f in specific_raw]
        return general, specific

    async def get_zones(
        self,
        active_only: bool = False,
        at: Optional[datetime] = None,
    ) -> List[Zone]:
        """
        Fetch the zone collection, reusing the cached copy within the TTL.

        Args:
            active_only: Keep only zones active at `at`
            at: Instant for the activity filter (default: now, UTC)

        Returns:
            Zones in service order

        Raises:
            ExternalAPIError: If a zone service fails
        """
        zones = await self._cached("zones", self._load_zones)

        if not active_only:
            return list(zones)

        general, specific = await self._cached("time_rules", self.get_time_rules)
        return filter_active_zones(zones, general, specific, at)


# Singleton instance
_zone_client: Optional[ZoneDataClient] = None


def get_zone_client() -> ZoneDataClient:
    """
    Get or create the singleton zone client instance.

    Returns:
        ZoneDataClient instance
    """
    global _zone_client
    if _zone_client is None:
        _zone_client = ZoneDataClient()
    return _zone_client
