"""
Click-selection policy.

When the user clicks the globe the host first classifies the click into a region
(country or ocean name, outside this package). We then:
1. prefer points whose region matches exactly,
2. avoid repeating the previously shown point when another match exists,
3. fall back to a random pick among the nearest few points when the region has none.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Literal

from wildsphere.core.geo import GeoPoint
from wildsphere.core.point_store import PointStore
from wildsphere.core.spatial_index import SpatialGridIndex

DEFAULT_NEAREST_K = 5


@dataclass(frozen=True)
class Selection:
    point: GeoPoint
    source: Literal["region", "nearest"]
    candidates: tuple[int, ...] = field(default_factory=tuple)


def region_matches(store: PointStore, region: str | None) -> list[GeoPoint]:
    """Points whose region label equals `region` exactly (empty for no region)."""
    if not region:
        return []
    return [p for p in store.all() if p.region == region]


def select_for_location(
    index: SpatialGridIndex,
    *,
    lat: float,
    lng: float,
    region: str | None = None,
    previous_id: int | None = None,
    nearest_k: int = DEFAULT_NEAREST_K,
    rng: random.Random | None = None,
) -> Selection:
    """Pick the point to show for a click at (lat, lng) classified as `region`."""
    rng = rng or random.Random()

    matches = region_matches(index.store, region)
    if len(matches) > 1 and previous_id is not None:
        matches = [p for p in matches if p.id != previous_id]
    if matches:
        return Selection(
            point=rng.choice(matches),
            source="region",
            candidates=tuple(p.id for p in matches),
        )

    nearest = index.nearest(lat, lng, nearest_k)
    return Selection(
        point=rng.choice(nearest),
        source="nearest",
        candidates=tuple(p.id for p in nearest),
    )


def select_random(store: PointStore, *, rng: random.Random | None = None) -> GeoPoint:
    """Uniform random point; the host replays a click at its location."""
    rng = rng or random.Random()
    return rng.choice(store.all())
