from __future__ import annotations

import argparse
import random
import time

from wildsphere.catalog.loader import load_point_records
from wildsphere.core.env import resolve_project_path
from wildsphere.core.errors import DataError
from wildsphere.core.point_store import PointStore
from wildsphere.core.spatial_index import SpatialGridIndex, nearest_linear


DISPLAY_FIELDS = ("name", "fact")


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Validate a WildSphere dataset and cross-check the index (offline).")
    p.add_argument("--dataset", type=str, default="data/animals.json")
    p.add_argument("--cell-size", type=float, default=None, help="Grid cell size in degrees (default: auto)")
    p.add_argument("--queries", type=int, default=200, help="Random queries to compare against a linear scan")
    p.add_argument("-k", type=int, default=5)
    p.add_argument("--seed", type=int, default=0)
    args = p.parse_args(argv)

    path = resolve_project_path(args.dataset)
    try:
        store = PointStore.build(load_point_records(path))
    except DataError as e:
        print("Invalid dataset:", e)
        return 2

    missing_fields = []
    names: dict[str, int] = {}
    for pt in store.all():
        for f in DISPLAY_FIELDS:
            v = pt.payload.get(f)
            if not (isinstance(v, str) and v.strip()):
                missing_fields.append(f"{pt.id}:{f}")
        name = str(pt.payload.get("name") or "")
        if name:
            names[name] = names.get(name, 0) + 1
    duplicates = sorted(n for n, c in names.items() if c > 1)
    no_region = [pt.id for pt in store.all() if not pt.region]

    index = SpatialGridIndex(store, cell_size_deg=args.cell_size)
    rows, cols = index.shape
    rng = random.Random(args.seed)
    mismatches = 0
    t_grid = 0.0
    t_linear = 0.0
    for _ in range(max(0, args.queries)):
        lat = rng.uniform(-90.0, 90.0)
        lng = rng.uniform(-180.0, 180.0)
        t0 = time.perf_counter()
        got = index.nearest(lat, lng, args.k)
        t1 = time.perf_counter()
        want = nearest_linear(store, lat, lng, args.k)
        t2 = time.perf_counter()
        t_grid += t1 - t0
        t_linear += t2 - t1
        if [x.id for x in got] != [x.id for x in want]:
            mismatches += 1

    print("Dataset:", path)
    print("Points:", len(store))
    print("Regions:", len({pt.region for pt in store.all() if pt.region}))
    print(f"Grid: {rows}x{cols} cells of {index.cell_size_deg:.2f} deg, occupied={index.occupied_cells}")
    if args.queries > 0:
        n = args.queries
        print(f"Queries: {n} k={args.k} grid_avg_us={t_grid / n * 1e6:.1f} linear_avg_us={t_linear / n * 1e6:.1f}")
    if no_region:
        print("Points without region:", len(no_region), "example:", ", ".join(str(i) for i in no_region[:8]))
    if missing_fields:
        print("Missing display fields:", len(missing_fields), "example:", ", ".join(missing_fields[:8]))
    if duplicates:
        print("Duplicate names:", len(duplicates), "example:", ", ".join(duplicates[:8]))
    if mismatches:
        print("Grid/linear mismatches:", mismatches)
        return 2
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
