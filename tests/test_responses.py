import pytest

from valhalla_routing.naming import DocumentError
from valhalla_routing.responses import (
    decode_locate,
    decode_route,
    decode_status,
    decode_trace_attributes,
    decode_trace_route,
)

TRIP = {"legs": [], "summary": {"length": 1.0, "time": 60}, "units": "kilometers"}


def test_raw_is_an_independent_copy():
    document = {"trip": TRIP, "id": "r1"}
    response = decode_route(document)

    document["trip"]["units"] = "miles"

    assert response.raw["trip"]["units"] == "kilometers"
    assert response.trip.units == "kilometers"


def test_non_object_alternates_are_reported_and_skipped():
    messages = []
    response = decode_route({"trip": TRIP, "alternates": [42, {"trip": TRIP}, {}]}, messages.append)

    assert len(response.trips) == 2
    assert len(messages) == 1
    assert messages[0].startswith("Failed to deserialize alternate trip")


def test_broken_primary_trip_is_a_document_error():
    with pytest.raises(DocumentError, match="primary 'trip'"):
        decode_route({"trip": {"legs": 7}})


def test_status_ignores_non_integer_tileset_timestamp():
    response = decode_status({"tileset_last_modified": "yesterday", "bbox": {"type": "FeatureCollection"}})
    assert response.tileset_last_modified is None
    assert response.bbox == {"type": "FeatureCollection"}
    assert response.has_live_traffic is None


def test_locate_rejects_scalars():
    with pytest.raises(DocumentError):
        decode_locate("nope")


def test_locate_without_results_array():
    response = decode_locate({"id": "x", "results": None})
    assert response.results is None
    assert response.id == "x"


def test_trace_route_null_trip():
    assert decode_trace_route({"trip": None}).trip is None


def test_trace_attributes_empty_arrays_stay_empty():
    response = decode_trace_attributes({"edges": [], "matched_points": []})
    assert response.edges == []
    assert response.matched_points == []
    assert response.coordinates() == []
