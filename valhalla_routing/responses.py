"""
Purpose: Response envelopes + one decoder per endpoint.
What it does:
- Every envelope keeps `raw` (its own copy of the parsed JSON document) next to the
  typed fields, so callers can read anything the typed projection does not expose.
- decode_status / decode_locate / decode_route / decode_trace_route /
  decode_trace_attributes each understand exactly the shapes Valhalla sends for
  that endpoint (bare arrays vs objects, optional alternates, optional trip, ...).

Decoders raise naming.DocumentError on a shape they cannot accept; the client turns
that into errors.DecodeError with the endpoint attached.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from . import polyline
from .models import LocateResult, MatchedPoint, TraceEdge, Trip
from .naming import DocumentError, from_document

# receives a message for each alternate trip that had to be dropped
AlternateErrorHandler = Callable[[str], None]


@dataclass(frozen=True)
class StatusResponse:
    raw: Any
    version: Optional[str] = None
    tileset_last_modified: Optional[int] = None
    has_tiles: Optional[bool] = None
    has_admins: Optional[bool] = None
    has_timezones: Optional[bool] = None
    has_live_traffic: Optional[bool] = None
    bbox: Optional[Any] = None


@dataclass(frozen=True)
class LocateResponse:
    raw: Any
    results: Optional[List[LocateResult]] = None
    warnings: Optional[List[str]] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class RouteResponse:
    """trips[0] is the primary trip, the rest are alternates in server order."""
    raw: Any
    trips: List[Trip]
    id: Optional[str] = None

    @property
    def trip(self) -> Trip:
        return self.trips[0]

    @property
    def alternates(self) -> List[Trip]:
        return self.trips[1:]


@dataclass(frozen=True)
class TraceRouteResponse:
    """trip is None when the trace could not be matched to anything."""
    raw: Any
    trip: Optional[Trip] = None
    id: Optional[str] = None


@dataclass(frozen=True)
class TraceAttributesResponse:
    raw: Any
    id: Optional[str] = None
    units: Optional[str] = None
    shape: Optional[str] = None
    matched_points: Optional[List[MatchedPoint]] = None
    edges: Optional[List[TraceEdge]] = None

    def coordinates(self, precision: int = polyline.DEFAULT_PRECISION) -> List[polyline.LatLon]:
        """Decoded (lat, lon) points of the matched shape ([] when absent)."""
        if not self.shape:
            return []
        return polyline.decode(self.shape, precision)


#----------------
# helpers over the generic JSON view
#----------------

def _require_object(document: Any, what: str) -> dict:
    if not isinstance(document, dict):
        raise DocumentError(f"Expected a JSON object for the {what} response.")
    return document


def _string(document: dict, key: str) -> Optional[str]:
    value = document.get(key)
    return value if isinstance(value, str) else None


def _tri_state(document: dict, key: str) -> Optional[bool]:
    #present but not a JSON boolean reads as "unknown"
    value = document.get(key)
    return value if isinstance(value, bool) else None


def _integer(document: dict, key: str) -> Optional[int]:
    value = document.get(key)
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _record_list(cls, values: List[Any], path: str) -> list:
    return [from_document(cls, item, path=f"{path}[{i}]") for i, item in enumerate(values)]


#----------------
# per-endpoint decoders
#----------------

def decode_status(document: Any) -> StatusResponse:
    root = _require_object(document, "status")
    bbox = root.get("bbox")
    return StatusResponse(
        raw=copy.deepcopy(root),
        version=_string(root, "version"),
        tileset_last_modified=_integer(root, "tileset_last_modified"),
        has_tiles=_tri_state(root, "has_tiles"),
        has_admins=_tri_state(root, "has_admins"),
        has_timezones=_tri_state(root, "has_timezones"),
        has_live_traffic=_tri_state(root, "has_live_traffic"),
        bbox=copy.deepcopy(bbox) if bbox is not None else None,
    )


def decode_locate(document: Any) -> LocateResponse:
    """
    Valhalla answers /locate with either a bare array of results or
    {"results": [...], "warnings": [...], "id": "..."}.
    """
    if isinstance(document, list):
        return LocateResponse(
            raw=copy.deepcopy(document),
            results=_record_list(LocateResult, document, "results"),
        )

    root = _require_object(document, "locate")
    results = None
    if isinstance(root.get("results"), list):
        results = _record_list(LocateResult, root["results"], "results")

    warnings = None
    if isinstance(root.get("warnings"), list):
        warnings = [w for w in root["warnings"] if isinstance(w, str)]

    return LocateResponse(
        raw=copy.deepcopy(root),
        results=results,
        warnings=warnings,
        id=_string(root, "id"),
    )


def decode_route(document: Any, on_alternate_error: Optional[AlternateErrorHandler] = None) -> RouteResponse:
    """
    Primary `trip` is required; `alternates[*].trip` are optional extras.

    A broken alternate is reported through on_alternate_error and skipped,
    a missing/broken primary trip raises DocumentError.
    """
    root = _require_object(document, "route")

    trip_document = root.get("trip")
    if trip_document is None:
        raise DocumentError("Route response is missing required 'trip' property.")
    try:
        primary = from_document(Trip, trip_document, path="trip")
    except DocumentError as exc:
        raise DocumentError(f"Failed to deserialize primary 'trip' from route response: {exc}") from exc

    trips = [primary]
    alternates = root.get("alternates")
    if isinstance(alternates, list):
        for i, alternate in enumerate(alternates):
            try:
                if not isinstance(alternate, dict):
                    raise DocumentError(f"alternates[{i}]: expected object")
                if alternate.get("trip") is None:
                    continue
                trips.append(from_document(Trip, alternate["trip"], path=f"alternates[{i}].trip"))
            except DocumentError as exc:
                if on_alternate_error is not None:
                    on_alternate_error(f"Failed to deserialize alternate trip: {exc}")

    return RouteResponse(raw=copy.deepcopy(root), trips=trips, id=_string(root, "id"))


def decode_trace_route(document: Any) -> TraceRouteResponse:
    root = _require_object(document, "trace_route")
    trip = None
    if root.get("trip") is not None:
        trip = from_document(Trip, root["trip"], path="trip")
    return TraceRouteResponse(raw=copy.deepcopy(root), trip=trip, id=_string(root, "id"))


def decode_trace_attributes(document: Any) -> TraceAttributesResponse:
    root = _require_object(document, "trace_attributes")

    matched_points = None
    if isinstance(root.get("matched_points"), list):
        matched_points = _record_list(MatchedPoint, root["matched_points"], "matched_points")

    edges = None
    if isinstance(root.get("edges"), list):
        edges = _record_list(TraceEdge, root["edges"], "edges")

    return TraceAttributesResponse(
        raw=copy.deepcopy(root),
        id=_string(root, "id"),
        units=_string(root, "units"),
        shape=_string(root, "shape"),
        matched_points=matched_points,
        edges=edges,
    )
