from __future__ import annotations

import logging
import math
from typing import Iterable

from ..common.validators import require_coordinate
from ..core.constants import DEFAULT_RADIUS_METERS, EARTH_RADIUS_METERS
from ..policies.model import GeoPoint, OfficeLocation

logger = logging.getLogger(__name__)


def _checked(point: GeoPoint) -> tuple[float, float]:
    return require_coordinate(point.lat, "lat", 90), require_coordinate(point.lng, "lng", 180)


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle distance in metres between two points."""

    lat1, lng1 = _checked(a)
    lat2, lng2 = _checked(b)

    d_lat = math.radians(lat2 - lat1)
    d_lng = math.radians(lng2 - lng1)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lng / 2) ** 2
    )
    h = min(1.0, h)
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def within_office(point: GeoPoint, office: OfficeLocation) -> bool:
    radius = office.radius_meters or DEFAULT_RADIUS_METERS
    distance = haversine_distance(point, GeoPoint(office.lat, office.lng))
    logger.debug("Location check: %s distance=%.0fm radius=%sm", office.name, distance, radius)
    return distance <= radius


def within_any_office(point: GeoPoint, offices: Iterable[OfficeLocation]) -> bool:
    """True if ``point`` lies inside at least one office radius.

    An empty ``offices`` returns False; callers decide whether that means
    "skip the check" (it does for attendance, see AttendanceService).
    """

    return any(within_office(point, office) for office in offices)
