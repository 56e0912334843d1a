import logging
import math
from typing import Optional, Sequence

import numpy as np

from .models import Coordinate, MapRegion

EARTH_RADIUS_METERS = 6_371_000

logger = logging.getLogger(__name__)


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Great-circle distance between two coordinates

    Args:
        lat1, lon1: First coordinate in degrees
        lat2, lon2: Second coordinate in degrees

    Returns:
        Distance in meters on a spherical earth
    """
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)

    a = (
        math.sin(d_lat / 2.0) ** 2
        + math.cos(math.radians(lat1))
        * math.cos(math.radians(lat2))
        * math.sin(d_lon / 2.0) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def route_region(
    coordinates: Sequence[Coordinate],
    padding: float = 1.2,
    minimum_span: float = 0.01,
    max_latitude_span: float = 170.0,
    max_longitude_span: float = 350.0,
) -> Optional[MapRegion]:
    """
    Map region that fits every coordinate of a route

    Spans are padded, kept above ``minimum_span`` so a single point still
    produces a usable zoom level, and capped below the full globe.

    Returns:
        MapRegion, or None when there is no finite in-range coordinate
    """
    points = [
        c
        for c in coordinates
        if math.isfinite(c.latitude)
        and math.isfinite(c.longitude)
        and abs(c.latitude) <= 90.0
        and abs(c.longitude) <= 180.0
    ]
    if not points:
        return None

    lats = np.array([c.latitude for c in points])
    lons = np.array([c.longitude for c in points])
    min_lat, max_lat = float(lats.min()), float(lats.max())
    min_lon, max_lon = float(lons.min()), float(lons.max())

    lon_delta = max_lon - min_lon
    center_lon = (min_lon + max_lon) / 2.0
    wrapped = (min_lon + 360.0) - max_lon
    if lon_delta > 180.0 and wrapped < lon_delta:
        # Route crosses the date line: measure the span the short way round
        lon_delta = wrapped
        center_lon = (min_lon + 360.0 + max_lon) / 2.0
        if center_lon > 180.0:
            center_lon -= 360.0

    lat_span = min(max((max_lat - min_lat) * padding, minimum_span), max_latitude_span)
    lon_span = min(max(lon_delta * padding, minimum_span), max_longitude_span)

    center_lat = max(-90.0, min(90.0, (min_lat + max_lat) / 2.0))
    center_lon = max(-180.0, min(180.0, center_lon))

    logger.debug(f"Route region center=({center_lat:.6f}, {center_lon:.6f})")
    return MapRegion(
        center=Coordinate(latitude=center_lat, longitude=center_lon),
        latitude_span=lat_span,
        longitude_span=lon_span,
    )
