"""
API routes.

Endpoints:
- GET  `/api/points/nearest`: nearest-K points to a coordinate.
- POST `/api/discover`: pick the point to show for a globe click.
- GET  `/api/points/random`: random discovery point.
- GET  `/api/heatmap`: degree-bucket density for the heatmap layer.
- GET  `/api/index`: index stats.
- POST `/api/index/reload`: rebuild from the configured dataset and swap it in.
"""

from __future__ import annotations

import random

from fastapi import APIRouter, HTTPException

from wildsphere.aggregation.heatmap import aggregate_heatmap
from wildsphere.catalog.loader import load_index_from_path
from wildsphere.config.settings import get_settings
from wildsphere.core.errors import DataError, IndexNotReady, InvalidArgument, NotFound
from wildsphere.core.geo import haversine_km
from wildsphere.core.spatial_index import SpatialGridIndex
from wildsphere.discovery import service
from wildsphere.discovery.selection import select_for_location, select_random
from wildsphere.domain.models import (
    DiscoverRequest,
    HeatCellOut,
    IndexStats,
    NearestResponse,
    PointOut,
    SelectionOut,
)

router = APIRouter()


def _reload_index() -> SpatialGridIndex:
    settings = get_settings()
    try:
        return load_index_from_path(
            settings.dataset.path,
            cell_size_deg=settings.index.cell_size_deg,
            target_points_per_cell=settings.index.target_points_per_cell,
        )
    except DataError as e:
        raise HTTPException(status_code=500, detail={"code": "DATASET_INVALID", "message": str(e)}) from e
    except OSError as e:
        raise HTTPException(status_code=500, detail={"code": "DATASET_UNAVAILABLE", "message": str(e)}) from e


def _index() -> SpatialGridIndex:
    """Return the current index, building it from the configured dataset on first use."""
    try:
        return service.current_index()
    except IndexNotReady:
        return _reload_index()


def _bad_request(e: Exception) -> HTTPException:
    return HTTPException(status_code=400, detail={"code": "INVALID_ARGUMENT", "message": str(e)})


def _stats(index: SpatialGridIndex) -> IndexStats:
    rows, cols = index.shape
    return IndexStats(
        point_count=len(index),
        cell_size_deg=index.cell_size_deg,
        rows=rows,
        columns=cols,
        occupied_cells=index.occupied_cells,
    )


@router.get("/api/points/nearest", response_model=NearestResponse)
def get_nearest(lat: float, lng: float, k: int | None = None) -> NearestResponse:
    """Return the k nearest points (default: the configured fallback k)."""
    index = _index()
    k = get_settings().selection.nearest_k if k is None else k
    try:
        points = index.nearest(lat, lng, k)
    except InvalidArgument as e:
        raise _bad_request(e) from e
    return NearestResponse(
        query={"lat": lat, "lng": lng},
        k=k,
        results=[PointOut.from_point(p, distance_km=haversine_km(lat, lng, p.lat, p.lng)) for p in points],
    )


@router.get("/api/points/{point_id}", response_model=PointOut)
def get_point(point_id: int) -> PointOut:
    index = _index()
    try:
        return PointOut.from_point(index.store.get(point_id))
    except NotFound as e:
        raise HTTPException(status_code=404, detail={"code": "NOT_FOUND", "message": str(e)}) from e


@router.post("/api/discover", response_model=SelectionOut)
def post_discover(req: DiscoverRequest) -> SelectionOut:
    """Choose the point to show for a click; `seed` makes the random pick reproducible."""
    index = _index()
    rng = random.Random(req.seed) if req.seed is not None else None
    try:
        selection = select_for_location(
            index,
            lat=req.lat,
            lng=req.lng,
            region=req.region,
            previous_id=req.previous_id,
            nearest_k=get_settings().selection.nearest_k,
            rng=rng,
        )
    except InvalidArgument as e:
        raise _bad_request(e) from e
    p = selection.point
    return SelectionOut(
        point=PointOut.from_point(p, distance_km=haversine_km(req.lat, req.lng, p.lat, p.lng)),
        source=selection.source,
        candidates=list(selection.candidates),
    )


@router.get("/api/random", response_model=PointOut)
def get_random(seed: int | None = None) -> PointOut:
    """Return a random point; the frontend then replays a click at its location."""
    rng = random.Random(seed) if seed is not None else None
    return PointOut.from_point(select_random(_index().store, rng=rng))


@router.get("/api/heatmap", response_model=list[HeatCellOut])
def get_heatmap(cell_deg: float | None = None) -> list[HeatCellOut]:
    cell = get_settings().heatmap.cell_deg if cell_deg is None else cell_deg
    try:
        cells = aggregate_heatmap(_index().store.all(), cell_deg=cell)
    except InvalidArgument as e:
        raise _bad_request(e) from e
    return [HeatCellOut(lat=c.lat, lng=c.lng, weight=c.weight) for c in cells]


@router.get("/api/index", response_model=IndexStats)
def get_index_stats() -> IndexStats:
    return _stats(_index())


@router.post("/api/index/reload", response_model=IndexStats)
def post_index_reload() -> IndexStats:
    """Rebuild from the configured dataset; in-flight queries finish on the old index."""
    return _stats(_reload_index())
