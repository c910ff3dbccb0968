"""
Heatmap bucket aggregation.

This is the coarse density grid the globe's heatmap layer draws from: coordinates
are rounded to the nearest `cell_deg` and counted. It is unrelated to the spatial
index's pruning grid.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable

from wildsphere.core.errors import InvalidArgument
from wildsphere.core.geo import GeoPoint


@dataclass(frozen=True)
class HeatCell:
    lat: float
    lng: float
    weight: int


def _round_half_up(value: float, step: float) -> float:
    # Half-up like the web client (0.5 -> 1, -0.5 -> 0); Python's round() is half-even.
    r = math.floor(value / step + 0.5) * step
    return r + 0.0  # normalize -0.0


def aggregate_heatmap(points: Iterable[GeoPoint], *, cell_deg: float = 1.0) -> list[HeatCell]:
    """Count points per rounded (lat, lng) bucket, in first-seen order."""
    if not math.isfinite(cell_deg) or cell_deg <= 0:
        raise InvalidArgument(f"cell_deg must be a finite number > 0, got {cell_deg}")

    counts: dict[tuple[float, float], int] = {}
    for p in points:
        key = (_round_half_up(p.lat, cell_deg), _round_half_up(p.lng, cell_deg))
        counts[key] = counts.get(key, 0) + 1
    return [HeatCell(lat=lat, lng=lng, weight=w) for (lat, lng), w in counts.items()]
