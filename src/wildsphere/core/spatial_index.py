"""
Spatial indexing (lat/lng grid bucket) for nearest-K queries on the sphere.

The grid only prunes: every candidate is ranked by exact haversine distance, and
the expanding-ring search stops only once no unvisited cell can hold a point
closer than the current k-th best. Results therefore match a brute-force scan
exactly, including tie order (distance, then id).
"""

from __future__ import annotations

import logging
import math
from typing import Iterator

from wildsphere.core.errors import InvalidArgument
from wildsphere.core.geo import EARTH_RADIUS_KM, GeoPoint, haversine_km, normalize_lng
from wildsphere.core.point_store import PointStore

logger = logging.getLogger(__name__)

_MIN_AUTO_CELL_DEG = 0.5
_MAX_AUTO_CELL_DEG = 90.0
_SPHERE_AREA_DEG2 = 180.0 * 360.0
# Subtracted from the pruning bound (km) so float rounding never lets it overtake a true distance.
_BOUND_SLACK_KM = 1e-6


def _check_k(k: int) -> int:
    if isinstance(k, bool) or not isinstance(k, int):
        raise InvalidArgument(f"k must be an integer, got {k!r}")
    if k < 1:
        raise InvalidArgument(f"k must be >= 1, got {k}")
    return k


def _check_query(lat: float, lng: float) -> tuple[float, float]:
    try:
        lat_f = float(lat)
        lng_f = float(lng)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"query coordinates must be numbers: ({lat!r}, {lng!r})") from e
    if not (math.isfinite(lat_f) and math.isfinite(lng_f)):
        raise InvalidArgument(f"query coordinates must be finite: ({lat_f}, {lng_f})")
    if not -90.0 <= lat_f <= 90.0:
        raise InvalidArgument(f"query latitude must be within [-90, 90], got {lat_f}")
    return lat_f, normalize_lng(lng_f)


def _rank(points: list[GeoPoint], lat: float, lng: float, k: int) -> list[GeoPoint]:
    scored = [(haversine_km(lat, lng, p.lat, p.lng), p.id, p) for p in points]
    scored.sort(key=lambda t: (t[0], t[1]))
    return [p for _, _, p in scored[:k]]


def nearest_linear(store: PointStore, lat: float, lng: float, k: int) -> list[GeoPoint]:
    """Brute-force reference: rank every point by (distance, id) and return the first k."""
    k = _check_k(k)
    lat_f, lng_f = _check_query(lat, lng)
    return _rank(list(store.all()), lat_f, lng_f, min(k, len(store)))


def auto_cell_size_deg(point_count: int, *, target_points_per_cell: float = 4.0) -> float:
    """Pick a cell size so an evenly spread dataset holds about `target_points_per_cell` per cell."""
    if point_count <= 0 or target_points_per_cell <= 0:
        return _MAX_AUTO_CELL_DEG
    size = math.sqrt(_SPHERE_AREA_DEG2 * float(target_points_per_cell) / float(point_count))
    return min(_MAX_AUTO_CELL_DEG, max(_MIN_AUTO_CELL_DEG, size))


class SpatialGridIndex:
    def __init__(
        self,
        store: PointStore,
        *,
        cell_size_deg: float | None = None,
        target_points_per_cell: float = 4.0,
    ):
        if cell_size_deg is None:
            cell_size_deg = auto_cell_size_deg(len(store), target_points_per_cell=target_points_per_cell)
        try:
            size = float(cell_size_deg)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"cell_size_deg must be a number, got {cell_size_deg!r}") from e
        if not math.isfinite(size) or size <= 0:
            raise InvalidArgument("cell_size_deg must be > 0")

        self._store = store
        self._cell_size_deg = size
        # Snap to a whole number of rows/columns so every cell has the same extent.
        self._n_rows = max(1, int(round(180.0 / size)))
        self._n_cols = max(1, int(round(360.0 / size)))
        self._row_deg = 180.0 / self._n_rows
        self._col_deg = 360.0 / self._n_cols
        self._cells: dict[tuple[int, int], list[int]] = {}

        for p in store.all():
            self._cells.setdefault(self._cell_key(p.lat, p.lng), []).append(p.id)

    @property
    def store(self) -> PointStore:
        return self._store

    @property
    def cell_size_deg(self) -> float:
        return self._cell_size_deg

    @property
    def shape(self) -> tuple[int, int]:
        return (self._n_rows, self._n_cols)

    @property
    def occupied_cells(self) -> int:
        return len(self._cells)

    def __len__(self) -> int:
        return len(self._store)

    def _cell_key(self, lat: float, lng: float) -> tuple[int, int]:
        row = min(int(math.floor((lat + 90.0) / self._row_deg)), self._n_rows - 1)
        col = int(math.floor((lng + 180.0) / self._col_deg)) % self._n_cols
        return (max(row, 0), col)

    def _ring(self, row0: int, col0: int, r: int) -> Iterator[tuple[int, int]]:
        """Yield cells at Chebyshev distance r from (row0, col0), clamped at the poles."""
        if r == 0:
            yield (row0, col0)
            return
        for dr in (-r, r):
            row = row0 + dr
            if 0 <= row < self._n_rows:
                for dc in range(-r, r + 1):
                    yield (row, (col0 + dc) % self._n_cols)
        for dc in (-r, r):
            col = (col0 + dc) % self._n_cols
            for dr in range(-r + 1, r):
                row = row0 + dr
                if 0 <= row < self._n_rows:
                    yield (row, col)

    def _unvisited_bound_km(self, lat: float, row0: int, r: int) -> float:
        """Lower bound on the distance to any cell beyond ring r (inf when none remain)."""
        bound = math.inf
        if row0 - r > 0 or row0 + r < self._n_rows - 1:
            # Great-circle distance is never shorter than the latitude difference.
            bound = math.radians(r * self._row_deg) * EARTH_RADIUS_KM
        if 2 * r + 1 < self._n_cols:
            # Distance to the nearest meridian r columns away; the pole caps it past 90 degrees.
            dlam = math.radians(min(r * self._col_deg, 90.0))
            s = min(1.0, math.sin(dlam) * math.cos(math.radians(lat)))
            bound = min(bound, math.asin(max(0.0, s)) * EARTH_RADIUS_KM)
        return bound - _BOUND_SLACK_KM

    def nearest(self, lat: float, lng: float, k: int) -> list[GeoPoint]:
        """Return the min(k, N) points closest to (lat, lng), ordered by (distance, id)."""
        k = _check_k(k)
        lat_f, lng_f = _check_query(lat, lng)
        n = len(self._store)
        k = min(k, n)
        if k == 0:
            return []

        # Nothing to prune when the grid is one cell or every point is wanted.
        if self._n_rows * self._n_cols == 1 or k >= n:
            return _rank(list(self._store.all()), lat_f, lng_f, k)

        row0, col0 = self._cell_key(lat_f, lng_f)
        seen: set[tuple[int, int]] = set()
        best: list[tuple[float, int]] = []
        max_r = max(self._n_rows, self._n_cols)

        for r in range(max_r + 1):
            for key in self._ring(row0, col0, r):
                if key in seen:
                    continue
                seen.add(key)
                for pid in self._cells.get(key, ()):
                    p = self._store.get(pid)
                    best.append((haversine_km(lat_f, lng_f, p.lat, p.lng), pid))

            bound = self._unvisited_bound_km(lat_f, row0, r)
            if bound == math.inf:
                break
            if len(best) >= k:
                best.sort()
                del best[k:]
                if bound > best[k - 1][0]:
                    break

        best.sort()
        logger.debug("nearest(%s, %s, k=%s): %s cells visited", lat_f, lng_f, k, len(seen))
        return [self._store.get(pid) for _, pid in best[:k]]
