from __future__ import annotations
from dataclasses import dataclass, field
from math import atan2, cos, isfinite, radians, sin, sqrt
from typing import Any

"""
Spherical geometry helpers.

Distances are great-circle distances on a sphere of Earth's mean radius. Only the
ordering of distances matters to the index, but kilometres keep values readable.
"""

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class GeoPoint:
    """One dataset record: a stable id, a coordinate in decimal degrees, and opaque data."""

    id: int
    lat: float
    lng: float
    region: str | None = None
    payload: dict[str, Any] = field(default_factory=dict, compare=False, hash=False)


def normalize_lng(lng: float) -> float:
    """Wrap a longitude into [-180, 180]; in-range values are returned unchanged."""
    lng = float(lng)
    if -180.0 <= lng <= 180.0:
        return lng
    return (lng + 180.0) % 360.0 - 180.0


def lng_delta_deg(lng1: float, lng2: float) -> float:
    """Smallest absolute longitude difference in degrees (179 and -179 are 2 apart)."""
    d = abs(normalize_lng(lng1) - normalize_lng(lng2))
    return min(d, 360.0 - d)


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Compute great-circle distance in kilometres between two lat/lng pairs."""
    phi1 = radians(lat1)
    phi2 = radians(lat2)
    dphi = radians(lat2 - lat1)
    dlam = radians(lng_delta_deg(lng1, lng2))

    a = sin(dphi / 2) ** 2 + cos(phi1) * cos(phi2) * sin(dlam / 2) ** 2
    # Rounding can push `a` a hair outside [0, 1] for near-antipodal points; NaN passes through.
    if isfinite(a):
        a = min(1.0, max(0.0, a))
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(a), sqrt(1 - a))
