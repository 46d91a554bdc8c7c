"""Great-circle distance helpers."""

from __future__ import annotations

import math

from nextcut.core.constants import (
    EARTH_RADIUS_KM,
    MAX_LATITUDE,
    MAX_LONGITUDE,
    MIN_LATITUDE,
    MIN_LONGITUDE,
)
from nextcut.core.exceptions import InvalidArgumentError


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres between two (lat, lon) points on a sphere."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlam = math.radians(lon2 - lon1)
    a = (math.sin(dphi / 2) ** 2
         + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def validate_coordinates(lat: float, lon: float) -> None:
    """Raise InvalidArgumentError unless (lat, lon) is a real point."""
    if lat is None or lon is None or math.isnan(lat) or math.isnan(lon):
        raise InvalidArgumentError("Latitude and longitude are required",
                                   {"lat": lat, "long": lon})
    if not MIN_LATITUDE <= lat <= MAX_LATITUDE:
        raise InvalidArgumentError(f"Latitude out of range: {lat}", {"lat": lat})
    if not MIN_LONGITUDE <= lon <= MAX_LONGITUDE:
        raise InvalidArgumentError(f"Longitude out of range: {lon}", {"long": lon})
