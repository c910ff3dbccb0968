"""
Process-wide index holder.

`build_index` constructs a brand-new store + index and only then swaps the module
reference in a single assignment. Queries that already hold the previous index keep
running against it; nothing is ever mutated in place, so reads need no locking.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping, Sequence

from wildsphere.core.errors import IndexNotReady
from wildsphere.core.geo import GeoPoint
from wildsphere.core.point_store import PointStore
from wildsphere.core.spatial_index import SpatialGridIndex
from wildsphere.domain.models import PointRecord

logger = logging.getLogger(__name__)

_current: SpatialGridIndex | None = None


def build_index(
    points: Sequence[Mapping[str, Any] | PointRecord],
    *,
    cell_size_deg: float | None = None,
    target_points_per_cell: float = 4.0,
) -> SpatialGridIndex:
    """Build a new index from raw records and make it the current one.

    On failure the previously current index (if any) stays in place.
    """
    global _current
    t0 = time.monotonic()
    store = PointStore.build(points)
    index = SpatialGridIndex(
        store,
        cell_size_deg=cell_size_deg,
        target_points_per_cell=target_points_per_cell,
    )
    _current = index
    rows, cols = index.shape
    logger.info(
        "Built spatial index: points=%s cell_size_deg=%.3f grid=%sx%s occupied_cells=%s build_ms=%s",
        len(store),
        index.cell_size_deg,
        rows,
        cols,
        index.occupied_cells,
        int((time.monotonic() - t0) * 1000),
    )
    return index


def current_index() -> SpatialGridIndex:
    index = _current
    if index is None:
        raise IndexNotReady("no spatial index has been built yet")
    return index


def find_nearest(lat: float, lng: float, k: int) -> list[GeoPoint]:
    """Return the k points nearest to (lat, lng) from the current index."""
    return current_index().nearest(lat, lng, k)


def reset_index() -> None:
    """Forget the current index (used by tests and before a forced reload)."""
    global _current
    _current = None
