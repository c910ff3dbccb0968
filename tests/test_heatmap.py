import pytest

from wildsphere.aggregation.heatmap import HeatCell, aggregate_heatmap
from wildsphere.core.errors import InvalidArgument
from wildsphere.core.point_store import PointStore


def test_aggregate_counts_per_rounded_degree_in_first_seen_order():
    # Three of these round to the same (10, 20) bucket; one sits far away.
    store = PointStore.build(
        [
            {"lat": 10.4, "lng": 20.4},
            {"lat": -5.0, "lng": 100.0},
            {"lat": 9.6, "lng": 19.5},
            {"lat": 10.0, "lng": 20.0},
        ]
    )

    # Default bucket is 1 degree.
    cells = aggregate_heatmap(store.all())

    # Buckets come out in the order their first point was seen, not sorted by weight.
    assert cells == [
        HeatCell(lat=10.0, lng=20.0, weight=3),
        HeatCell(lat=-5.0, lng=100.0, weight=1),
    ]

    # Every point lands in exactly one bucket.
    assert sum(c.weight for c in cells) == len(store)


def test_rounding_is_half_up():
    # Halves round toward +infinity, including negative halves (-1.5 -> -1, -0.5 -> 0).
    store = PointStore.build([{"lat": 0.5, "lng": -0.5}, {"lat": -1.5, "lng": 2.5}])
    cells = aggregate_heatmap(store.all())
    assert [(c.lat, c.lng) for c in cells] == [(1.0, 0.0), (-1.0, 3.0)]


def test_custom_cell_size():
    # With 10-degree buckets both points snap to (10, 10).
    store = PointStore.build([{"lat": 12, "lng": 14}, {"lat": 8, "lng": 6}])
    cells = aggregate_heatmap(store.all(), cell_deg=10)
    assert [(c.lat, c.lng, c.weight) for c in cells] == [(10, 10, 2)]


@pytest.mark.parametrize("cell_deg", [0, -1, float("nan"), float("inf"), float("-inf")])
def test_invalid_cell_size(cell_deg):
    # Non-positive and non-finite sizes would divide by zero or yield NaN buckets, so reject them up front.
    store = PointStore.build([{"lat": 1, "lng": 2}])
    with pytest.raises(InvalidArgument, match="cell_deg"):
        aggregate_heatmap(store.all(), cell_deg=cell_deg)
