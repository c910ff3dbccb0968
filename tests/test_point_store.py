import pytest

from wildsphere.core.errors import DataError, NotFound
from wildsphere.core.point_store import PointStore
from wildsphere.domain.models import PointRecord


def test_build_assigns_ids_in_input_order_and_normalizes():
    # Mixed spellings: `country`/`lng` on one record, `region`/`lon` on the other, plus an out-of-range longitude.
    store = PointStore.build(
        [
            {"name": "Walrus", "country": "Russia", "lat": 66.0, "lng": 190.0, "fact": "tusks"},
            {"name": "Kiwi", "region": "New Zealand", "lat": -41.3, "lon": 174.8},
        ]
    )

    # Ids are input positions.
    assert len(store) == 2
    walrus, kiwi = store.all()
    assert (walrus.id, kiwi.id) == (0, 1)
    # 190 wraps to -170; unknown fields become the display payload.
    assert walrus.lng == -170.0
    assert walrus.region == "Russia"
    assert walrus.payload == {"name": "Walrus", "fact": "tusks"}
    assert kiwi.lng == 174.8
    assert kiwi.region == "New Zealand"
    assert store.get(1) is kiwi


def test_build_uses_explicit_payload_and_accepts_records():
    # Already-validated records pass through; an explicit `payload` is used as is.
    rec = PointRecord(lat=1, lng=2, region="X", payload={"name": "n"})
    store = PointStore.build([rec, {"lat": 0, "lng": 0, "payload": {"k": [1, 2]}}])
    assert store.get(0).payload == {"name": "n"}
    assert store.get(1).payload == {"k": [1, 2]}
    assert store.get(1).region is None


def test_build_rejects_empty_dataset():
    # An index over nothing cannot answer any query.
    with pytest.raises(DataError):
        PointStore.build([])


@pytest.mark.parametrize(
    "bad",
    [
        {"lng": 10},
        {"lat": 10},
        {"lat": 90.5, "lng": 0},
        {"lat": -91, "lng": 0},
        {"lat": "north", "lng": 0},
        {"lat": float("nan"), "lng": 0},
        {"lat": 0, "lng": float("inf")},
    ],
)
def test_build_rejects_malformed_records_with_position(bad):
    # Missing, out-of-range, non-numeric and non-finite coordinates all fail, naming the bad record.
    with pytest.raises(DataError, match="record 1"):
        PointStore.build([{"lat": 0, "lng": 0}, bad])


def test_build_rejects_non_mapping_record():
    # A bare coordinate pair is not a record.
    with pytest.raises(DataError, match="expected a mapping"):
        PointStore.build([(1.0, 2.0)])


def test_data_error_is_a_value_error():
    # Callers that only know about builtins can still catch ingest failures.
    with pytest.raises(ValueError):
        PointStore.build([])


def test_get_out_of_range_raises_not_found():
    store = PointStore.build([{"lat": 0, "lng": 0}])

    # Past the end, negative (no Python-style indexing from the back) and non-int ids are unknown.
    with pytest.raises(NotFound):
        store.get(1)
    with pytest.raises(NotFound):
        store.get(-1)
    with pytest.raises(NotFound):
        store.get("0")


def test_all_is_read_only_and_ordered():
    store = PointStore.build([{"lat": i, "lng": -i} for i in range(5)])
    pts = store.all()
    # A tuple cannot be mutated by callers; both access paths keep id order.
    assert isinstance(pts, tuple)
    assert [p.id for p in pts] == [0, 1, 2, 3, 4]
    assert [p.id for p in store] == [0, 1, 2, 3, 4]
