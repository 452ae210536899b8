from datetime import datetime, timezone

import pytest

from valhalla_routing.models import (
    Costing,
    DateTimeOptions,
    DateTimeType,
    EdgeInfo,
    Location,
    TracePoint,
    Trip,
)
from valhalla_routing.naming import DocumentError, from_document, to_document, to_snake_case
from valhalla_routing.request_models import RouteRequest


@pytest.mark.parametrize(
    "name, expected",
    [
        ("RoadClass", "road_class"),
        ("HTTPStatus", "http_status"),
        ("", ""),
        ("lat", "lat"),
        ("HasLiveTraffic", "has_live_traffic"),
        ("WayId", "way_id"),
        ("ID", "id"),
        ("getHTTPResponseCode", "get_http_response_code"),
        ("already_snake_case", "already_snake_case"),
    ],
)
def test_to_snake_case(name, expected):
    assert to_snake_case(name) == expected


def test_to_snake_case_passes_none_through():
    assert to_snake_case(None) is None


def test_to_document_omits_none_and_flattens_enums():
    request = RouteRequest(
        locations=[Location(lat=47.6, lon=-122.3), Location(lat=47.61, lon=-122.31, type="break")],
        costing=Costing.AUTO,
        date_time=DateTimeOptions(type=DateTimeType.DEPART_AT, value="2026-10-18T08:00"),
        alternates=2,
    )

    document = to_document(request)

    assert document == {
        "locations": [{"lat": 47.6, "lon": -122.3}, {"lat": 47.61, "lon": -122.31, "type": "break"}],
        "costing": "auto",
        "date_time": {"type": 1, "value": "2026-10-18T08:00"},
        "alternates": 2,
    }
    assert all(value is not None for value in document.values())


def test_to_document_writes_trace_point_time_as_epoch_seconds():
    point = TracePoint(lat=1.0, lon=2.0, time=datetime(2024, 1, 1, tzinfo=timezone.utc))
    assert to_document(point) == {"lat": 1.0, "lon": 2.0, "time": 1704067200}


def test_to_document_keeps_free_form_json_as_is():
    request = RouteRequest(
        locations=[Location(lat=0, lon=0), Location(lat=1, lon=1)],
        costing="auto",
        costing_options={"auto": {"use_highways": 0.5, "exclude_unpaved": None}},
    )
    assert to_document(request)["costing_options"] == {"auto": {"use_highways": 0.5, "exclude_unpaved": None}}


def test_from_document_builds_nested_records():
    trip = from_document(
        Trip,
        {
            "legs": [{"shape": "abc", "summary": {"length": 1.5, "time": 90}, "maneuvers": []}],
            "summary": {"has_toll": False, "length": 1.5},
            "units": "kilometers",
            "locations": [{"lat": 47.6, "lon": -122.3, "type": "break"}],
            "status_message": "Found route between points",
        },
    )

    assert trip.units == "kilometers"
    assert trip.legs[0].summary.time == 90.0
    assert isinstance(trip.legs[0].summary.time, float)
    assert trip.summary.has_toll is False
    assert trip.locations[0] == Location(lat=47.6, lon=-122.3, type="break")


def test_from_document_matches_keys_through_the_naming_policy_and_case_insensitively():
    info = from_document(EdgeInfo, {"RoadClass": "primary", "SPEED": 50, "Road_Class": "ignored-duplicate"})
    assert info.road_class == "primary"
    assert info.speed == 50

    drifted = from_document(EdgeInfo, {"Road_Class": "secondary"})
    assert drifted.road_class == "secondary"


def test_from_document_null_means_absent():
    info = from_document(EdgeInfo, {"names": None, "toll": None})
    assert info.names is None
    assert info.toll is None


@pytest.mark.parametrize(
    "document",
    [
        {"legs": "not-a-list"},
        {"legs": [{"summary": {"length": "far"}}]},
        {"summary": {"has_toll": 1}},
        {"units": 5},
        {"legs": [{"maneuvers": [{"type": 1.5}]}]},
    ],
)
def test_from_document_rejects_wrong_json_types(document):
    with pytest.raises(DocumentError):
        from_document(Trip, document)


def test_from_document_requires_an_object():
    with pytest.raises(DocumentError, match="expected object"):
        from_document(Trip, ["not", "an", "object"])


def test_from_document_reports_missing_required_fields():
    with pytest.raises(DocumentError, match="lat"):
        from_document(Location, {"lon": 1.0})
