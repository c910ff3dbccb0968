"""
Domain models (Pydantic).

These types are the contract between layers:
- dataset ingest (`PointRecord`)
- API/CLI outputs (`PointOut`, `SelectionOut`, `HeatCellOut`, `IndexStats`)
- API inputs (`DiscoverRequest`)

The core index itself works on the frozen `wildsphere.core.geo.GeoPoint`
dataclass; these models only validate what crosses the boundary.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from wildsphere.core.geo import GeoPoint

# Keys consumed by the index; everything else in a raw record is payload.
_COORDINATE_KEYS = frozenset({"lat", "lng", "lon", "region", "country", "payload"})


class PointRecord(BaseModel):
    """One raw dataset record (e.g. an animal sighting)."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., validation_alias=AliasChoices("lng", "lon"), allow_inf_nan=False)
    region: str | None = Field(default=None, validation_alias=AliasChoices("region", "country"))
    payload: dict[str, Any] | None = None

    def payload_dict(self) -> dict[str, Any]:
        """Return the explicit payload, or every non-coordinate field of the record."""
        if self.payload is not None:
            return dict(self.payload)
        extra = self.model_extra or {}
        return {k: v for k, v in extra.items() if k not in _COORDINATE_KEYS}


class PointOut(BaseModel):
    """A point as returned to API/CLI consumers."""

    id: int
    lat: float
    lng: float
    region: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    distance_km: float | None = None

    @classmethod
    def from_point(cls, point: GeoPoint, *, distance_km: float | None = None) -> "PointOut":
        return cls(
            id=point.id,
            lat=point.lat,
            lng=point.lng,
            region=point.region,
            payload=dict(point.payload),
            distance_km=distance_km,
        )


class NearestResponse(BaseModel):
    query: dict[str, float]
    k: int
    results: list[PointOut]


class DiscoverRequest(BaseModel):
    """A map click: the clicked coordinate plus what the host already knows about it."""

    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., allow_inf_nan=False)
    region: str | None = None
    previous_id: int | None = None
    seed: int | None = None


class SelectionOut(BaseModel):
    point: PointOut
    source: Literal["region", "nearest"]
    candidates: list[int] = Field(default_factory=list)


class HeatCellOut(BaseModel):
    lat: float
    lng: float
    weight: int = Field(..., ge=1)


class IndexStats(BaseModel):
    point_count: int
    cell_size_deg: float
    rows: int
    columns: int
    occupied_cells: int
