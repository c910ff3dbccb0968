"""
Dataset loader.

The dataset is a local JSON array (default: `data/animals.json`) of animal records
with coordinates, a region label and display fields. We validate it into
`PointRecord` models so the point store can assume a consistent shape.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from wildsphere.core.env import resolve_project_path
from wildsphere.core.errors import DataError
from wildsphere.core.spatial_index import SpatialGridIndex
from wildsphere.discovery.service import build_index
from wildsphere.domain.models import PointRecord

logger = logging.getLogger(__name__)

_RECORDS_ADAPTER = TypeAdapter(list[PointRecord])


def load_point_records(path: str | Path) -> list[PointRecord]:
    """Load and validate a dataset JSON file."""
    resolved = resolve_project_path(path)
    try:
        payload = json.loads(resolved.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise DataError(f"{resolved}: invalid JSON ({e})") from e
    if not isinstance(payload, list):
        raise DataError(f"{resolved}: expected a JSON array of point records")
    try:
        records = _RECORDS_ADAPTER.validate_python(payload)
    except ValidationError as e:
        raise DataError(f"{resolved}: {e.error_count()} invalid record field(s): {e}") from e
    logger.info("Loaded %s point records from %s", len(records), resolved)
    return records


def load_index_from_path(
    path: str | Path,
    *,
    cell_size_deg: float | None = None,
    target_points_per_cell: float = 4.0,
) -> SpatialGridIndex:
    """Load a dataset file and make its index the current one."""
    records = load_point_records(path)
    return build_index(records, cell_size_deg=cell_size_deg, target_points_per_cell=target_points_per_cell)
