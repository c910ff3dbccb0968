import pytest

from wildsphere.core.errors import DataError, IndexNotReady
from wildsphere.discovery import service


POINTS = [
    {"name": "a", "lat": 10, "lng": 170},
    {"name": "b", "lat": 10, "lng": -170},
    {"name": "c", "lat": -40, "lng": 0},
]


@pytest.fixture(autouse=True)
def _fresh_index():
    # The index is a process-wide reference; isolate each test from the others.
    service.reset_index()
    yield
    service.reset_index()


def test_query_before_build_raises():
    # Nothing has been built yet, so a query is a state error, not an empty result.
    with pytest.raises(IndexNotReady):
        service.find_nearest(0, 0, 1)


def test_build_then_find_nearest():
    # Building returns the new index and makes it current.
    index = service.build_index(POINTS, cell_size_deg=5.0)
    assert service.current_index() is index

    # The module-level query goes through the current index.
    result = service.find_nearest(10, 179, 2)
    assert [p.payload["name"] for p in result] == ["a", "b"]


def test_rebuild_swaps_reference_and_old_index_stays_usable():
    # Build twice; the second build replaces the reference in one assignment.
    old = service.build_index(POINTS)
    new = service.build_index([{"lat": -40.5, "lng": 0.5, "name": "d"}])

    assert service.current_index() is new
    assert old is not new
    # A caller still holding the previous index keeps getting its answers.
    assert [p.payload["name"] for p in old.nearest(-40, 0, 1)] == ["c"]
    assert [p.payload["name"] for p in service.find_nearest(-40, 0, 1)] == ["d"]


def test_failed_build_keeps_previous_index():
    index = service.build_index(POINTS)
    with pytest.raises(DataError):
        service.build_index([])
    # Neither an empty dataset nor an out-of-range record may replace a working index.
    with pytest.raises(DataError):
        service.build_index([{"lat": 100, "lng": 0}])
    assert service.current_index() is index
