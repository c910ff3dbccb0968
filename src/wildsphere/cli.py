"""
WildSphere CLI entrypoint.

This CLI is intended for quick local checks of the dataset and the index without
the globe frontend. It delegates to `wildsphere.discovery` and `wildsphere.aggregation`.
"""

from __future__ import annotations

import argparse
import json
import random
import sys
from typing import Any

from wildsphere.aggregation.heatmap import aggregate_heatmap
from wildsphere.catalog.loader import load_index_from_path
from wildsphere.config.settings import get_settings
from wildsphere.core.errors import WildSphereError
from wildsphere.core.geo import GeoPoint, haversine_km
from wildsphere.core.logging import configure_logging
from wildsphere.core.spatial_index import SpatialGridIndex
from wildsphere.discovery.selection import select_for_location, select_random
from wildsphere.domain.models import PointOut


def _load(args: argparse.Namespace) -> SpatialGridIndex:
    settings = get_settings()
    cell = args.cell_size if args.cell_size is not None else settings.index.cell_size_deg
    return load_index_from_path(
        args.dataset or settings.dataset.path,
        cell_size_deg=cell,
        target_points_per_cell=settings.index.target_points_per_cell,
    )


def _rng(args: argparse.Namespace) -> random.Random | None:
    return random.Random(args.seed) if args.seed is not None else None


def _label(p: GeoPoint) -> str:
    name = p.payload.get("name") or p.payload.get("title") or f"#{p.id}"
    return f"{name} [{p.region or '-'}] ({p.lat:.3f}, {p.lng:.3f})"


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, ensure_ascii=False, indent=2))


def _cmd_nearest(args: argparse.Namespace) -> int:
    index = _load(args)
    points = index.nearest(args.lat, args.lng, int(args.k))
    if args.json:
        _print_json(
            [
                PointOut.from_point(p, distance_km=haversine_km(args.lat, args.lng, p.lat, p.lng)).model_dump(
                    mode="json"
                )
                for p in points
            ]
        )
        return 0
    for i, p in enumerate(points, start=1):
        d = haversine_km(args.lat, args.lng, p.lat, p.lng)
        print(f"{i:>2}. {_label(p)}  {d:,.1f} km")
    return 0


def _cmd_discover(args: argparse.Namespace) -> int:
    settings = get_settings()
    index = _load(args)
    selection = select_for_location(
        index,
        lat=args.lat,
        lng=args.lng,
        region=args.region,
        previous_id=args.previous_id,
        nearest_k=int(args.k if args.k is not None else settings.selection.nearest_k),
        rng=_rng(args),
    )
    if args.json:
        _print_json(
            {
                "point": PointOut.from_point(selection.point).model_dump(mode="json"),
                "source": selection.source,
                "candidates": list(selection.candidates),
            }
        )
        return 0
    print(f"{_label(selection.point)}  (via {selection.source}, {len(selection.candidates)} candidates)")
    return 0


def _cmd_random(args: argparse.Namespace) -> int:
    index = _load(args)
    p = select_random(index.store, rng=_rng(args))
    if args.json:
        _print_json(PointOut.from_point(p).model_dump(mode="json"))
        return 0
    print(_label(p))
    return 0


def _cmd_heatmap(args: argparse.Namespace) -> int:
    settings = get_settings()
    index = _load(args)
    cell_deg = args.cell_deg if args.cell_deg is not None else settings.heatmap.cell_deg
    cells = aggregate_heatmap(index.store.all(), cell_deg=cell_deg)
    if args.json:
        _print_json([{"lat": c.lat, "lng": c.lng, "weight": c.weight} for c in cells])
        return 0
    for c in sorted(cells, key=lambda c: (-c.weight, c.lat, c.lng)):
        print(f"{c.lat:>7.1f} {c.lng:>7.1f}  {c.weight}")
    return 0


def _cmd_stats(args: argparse.Namespace) -> int:
    index = _load(args)
    rows, cols = index.shape
    stats = {
        "point_count": len(index),
        "cell_size_deg": index.cell_size_deg,
        "rows": rows,
        "columns": cols,
        "occupied_cells": index.occupied_cells,
        "regions": len({p.region for p in index.store.all() if p.region}),
    }
    if args.json:
        _print_json(stats)
        return 0
    for k, v in stats.items():
        print(f"{k}: {v}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the WildSphere CLI."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--dataset", type=str, default=None, help="Dataset JSON (default from config)")
    common.add_argument("--cell-size", type=float, default=None, help="Index cell size in degrees")
    common.add_argument("--json", action="store_true", help="Output machine-readable JSON")

    parser = argparse.ArgumentParser(prog="wildsphere")
    sub = parser.add_subparsers(dest="command", required=True)

    near = sub.add_parser("nearest", parents=[common], help="List the points nearest to a coordinate.")
    near.add_argument("--lat", required=True, type=float)
    near.add_argument("--lng", required=True, type=float)
    near.add_argument("-k", type=int, default=5)
    near.set_defaults(func=_cmd_nearest)

    disc = sub.add_parser("discover", parents=[common], help="Pick the point shown for a click.")
    disc.add_argument("--lat", required=True, type=float)
    disc.add_argument("--lng", required=True, type=float)
    disc.add_argument("--region", type=str, default=None, help="Region label the click falls in")
    disc.add_argument("--previous-id", type=int, default=None, help="Id of the point shown last")
    disc.add_argument("-k", type=int, default=None, help="Nearest-K fallback size")
    disc.add_argument("--seed", type=int, default=None)
    disc.set_defaults(func=_cmd_discover)

    rnd = sub.add_parser("random", parents=[common], help="Pick a random point.")
    rnd.add_argument("--seed", type=int, default=None)
    rnd.set_defaults(func=_cmd_random)

    heat = sub.add_parser("heatmap", parents=[common], help="Aggregate points into degree buckets.")
    heat.add_argument("--cell-deg", type=float, default=None)
    heat.set_defaults(func=_cmd_heatmap)

    stats = sub.add_parser("stats", parents=[common], help="Dataset and index summary.")
    stats.set_defaults(func=_cmd_stats)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m wildsphere.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (WildSphereError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
