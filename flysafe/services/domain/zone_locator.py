"""
Domain service: Locate the airspace zone containing a point.

Zones are scanned in collection order and the first zone whose geometry
contains the point wins. Zone geometries are GeoJSON, so ring vertices
arrive as (longitude, latitude); they are converted to (latitude, longitude)
before any containment math and the query point is used in the same order.
"""
from typing import Iterable, Optional, Sequence
import logging

from shapely import prepare
from shapely.errors import ShapelyError
from shapely.geometry import Point, Polygon

from flysafe.domain.errors import UnsupportedGeometryError
from flysafe.domain.models import Coordinates, Zone

logger = logging.getLogger(__name__)

SUPPORTED_GEOMETRY_TYPES = ("Polygon", "MultiPolygon")


def ring_to_latlon(ring: Sequence[Sequence[float]]) -> list[tuple[float, float]]:
    """
    Convert a GeoJSON ring from [lon, lat(, alt)] to (lat, lon) tuples.

    Args:
        ring: List of [longitude, latitude] positions

    Returns:
        List of (latitude, longitude) tuples
    """
    return [(float(position[1]), float(position[0])) for position in ring]


def _ring_to_polygon(ring: Sequence[Sequence[float]]) -> Optional[Polygon]:
    coords = ring_to_latlon(ring)
    if len(set(coords)) < 3:
        return None
    polygon = Polygon(coords)
    prepare(polygon)
    return polygon


def zone_polygons(zone: Zone) -> list[Polygon]:
    """
    Build the polygons to test for a zone.

    A Polygon contributes its outer ring; a MultiPolygon contributes the
    outer ring of each member polygon, in order. Degenerate rings with fewer
    than three distinct vertices are dropped.

    Args:
        zone: Zone with a GeoJSON geometry

    Returns:
        List of shapely polygons in (lat, lon) space

    Raises:
        UnsupportedGeometryError: If the geometry is missing, not a
            Polygon/MultiPolygon, or has malformed positions
    """
    geometry_type = zone.geometry_type
    if geometry_type not in SUPPORTED_GEOMETRY_TYPES:
        raise UnsupportedGeometryError(geometry_type)

    coordinates = zone.geometry.get("coordinates") or []
    try:
        if geometry_type == "Polygon":
            rings = coordinates[:1]
        else:
            rings = [polygon[0] for polygon in coordinates if polygon]

        polygons = []
        for ring in rings:
            polygon = _ring_to_polygon(ring)
            if polygon is not None:
                polygons.append(polygon)
    except (IndexError, KeyError, TypeError, ValueError, ShapelyError) as e:
        raise UnsupportedGeometryError(geometry_type, reason=str(e) or type(e).__name__)
    return polygons


class ZoneLocator:
    """
    Point-in-zone lookup over an ordered zone collection.

    Points lying exactly on a ring edge or vertex count as inside the zone.
    Converted polygons are cached per zone object, so a zone fetched once is
    only converted once no matter how many points are queried. When
    `max_cached_zones` is set the cache is emptied once it reaches that size.
    """

    def __init__(self, max_cached_zones: Optional[int] = None):
        self.max_cached_zones = max_cached_zones
        self._polygon_cache: dict[int, tuple[Zone, list[Polygon]]] = {}

    def prepare(self, zones: Iterable[Zone]) -> None:
        """Convert and cache the geometry of every zone up front."""
        for zone in zones:
            self._polygons_for(zone)

    def clear(self) -> None:
        self._polygon_cache.clear()

    def _polygons_for(self, zone: Zone) -> list[Polygon]:
        cached = self._polygon_cache.get(id(zone))
        if cached is not None and cached[0] is zone:
            return cached[1]
        polygons = zone_polygons(zone)
        if self.max_cached_zones and len(self._polygon_cache) >= self.max_cached_zones:
            logger.debug(f"Geometry cache full ({len(self._polygon_cache)} zones), clearing")
            self.clear()
        self._polygon_cache[id(zone)] = (zone, polygons)
        return polygons

    def locate(
        self,
        point: Coordinates,
        zones: Sequence[Zone],
        active_only: bool = False,
    ) -> Optional[Zone]:
        """
        Find the first zone containing a point.

        The collection is used as given: when `active_only` is set the
        caller is expected to pass zones already filtered to those active
        now, and no time filtering happens here.

        Args:
            point: Selected coordinates
            zones: Zones in precedence order
            active_only: Whether `zones` holds only active zones

        Returns:
            The first containing zone, or None
        """
        query = Point(point.lat, point.lon)
        skipped = 0

        for zone in zones:
            try:
                polygons = self._polygons_for(zone)
            except UnsupportedGeometryError as e:
                skipped += 1
                logger.debug(f"Skipping zone {zone.name!r}: {e}")
                continue

            if any(polygon.covers(query) for polygon in polygons):
                logger.debug(
                    f"Point ({point.lat}, {point.lon}) is inside zone {zone.name!r} "
                    f"(active_only={active_only})"
                )
                return zone

        if skipped:
            logger.debug(f"Skipped {skipped} zone(s) with unsupported geometry")
        return None
