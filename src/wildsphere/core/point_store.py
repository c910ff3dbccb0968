"""
Point Store: the immutable, ordered collection the spatial index is built over.

A point's id is its position in the ingested sequence, so `get(id)` is a list
lookup and the index only needs to keep integers.
"""

from __future__ import annotations

from typing import Any, Iterator, Mapping, Sequence

from pydantic import ValidationError

from wildsphere.core.errors import DataError, NotFound
from wildsphere.core.geo import GeoPoint, normalize_lng
from wildsphere.domain.models import PointRecord


def _to_record(raw: Any, position: int) -> PointRecord:
    if isinstance(raw, PointRecord):
        return raw
    if not isinstance(raw, Mapping):
        raise DataError(f"record {position}: expected a mapping, got {type(raw).__name__}")
    try:
        return PointRecord.model_validate(dict(raw))
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'record'}: {err['msg']}" for err in e.errors()
        )
        raise DataError(f"record {position}: {problems}") from e


class PointStore:
    def __init__(self, points: Sequence[GeoPoint]):
        self._points: tuple[GeoPoint, ...] = tuple(points)

    @classmethod
    def build(cls, records: Sequence[Mapping[str, Any] | PointRecord]) -> "PointStore":
        """Validate raw records and assign sequential ids in input order.

        Raises `DataError` for an empty dataset or any malformed record; nothing is
        returned for a partially valid dataset.
        """
        records = list(records)
        if not records:
            raise DataError("cannot build a point store from an empty dataset")

        points: list[GeoPoint] = []
        for position, raw in enumerate(records):
            rec = _to_record(raw, position)
            points.append(
                GeoPoint(
                    id=position,
                    lat=float(rec.lat),
                    lng=normalize_lng(rec.lng),
                    region=rec.region,
                    payload=rec.payload_dict(),
                )
            )
        return cls(points)

    def get(self, point_id: int) -> GeoPoint:
        """O(1) lookup by id."""
        if isinstance(point_id, bool) or not isinstance(point_id, int):
            raise NotFound(f"invalid point id: {point_id!r}")
        if point_id < 0 or point_id >= len(self._points):
            raise NotFound(f"no point with id {point_id}")
        return self._points[point_id]

    def all(self) -> tuple[GeoPoint, ...]:
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[GeoPoint]:
        return iter(self._points)
