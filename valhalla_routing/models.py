"""
Purpose: Value types shared by Valhalla requests and responses.
What it does:
- Request-side building blocks: Location, SearchFilter, DateTimeOptions, TracePoint,
  TraceOptions, FilterAttributes, Costing constants.
- Response-side records: Trip, Leg, Maneuver, summaries, locate candidates,
  map-matching points and edges.

Field names are the snake_case wire names, so naming.to_document/from_document
map them one-to-one.

Rule: No HTTP calls here. Models (and their own validation) only.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, List, Optional

from . import polyline
from .errors import InvalidArgumentError


class Costing(str, Enum):
    """Costing models understood by Valhalla (the `costing` request field)."""
    AUTO = "auto"
    BICYCLE = "bicycle"
    PEDESTRIAN = "pedestrian"
    MOTORCYCLE = "motorcycle"
    MOTOR_SCOOTER = "motor_scooter"
    BUS = "bus"
    TRUCK = "truck"
    TAXI = "taxi"
    MULTIMODAL = "multimodal"
    BIKESHARE = "bikeshare"


class DateTimeType(IntEnum):
    CURRENT = 0
    DEPART_AT = 1
    ARRIVE_BY = 2
    INVARIANT = 3


def _check_lat_lon(lat: float, lon: float) -> None:
    if lat is None or math.isnan(lat) or lat < -90 or lat > 90:
        raise InvalidArgumentError(f"Latitude must be between -90 and 90 degrees, got {lat}.")
    if lon is None or math.isnan(lon) or lon < -180 or lon > 180:
        raise InvalidArgumentError(f"Longitude must be between -180 and 180 degrees, got {lon}.")


#----------------
# request-side types
#----------------

@dataclass(frozen=True)
class SearchFilter:
    """Edge filters applied when Valhalla snaps a location to the road network."""
    exclude_tunnel: Optional[bool] = None
    exclude_bridge: Optional[bool] = None
    exclude_ramp: Optional[bool] = None
    exclude_closures: Optional[bool] = None
    exclude_toll: Optional[bool] = None
    exclude_ferry: Optional[bool] = None
    exclude_cash_only_tolls: Optional[bool] = None
    min_road_class: Optional[str] = None
    max_road_class: Optional[str] = None


@dataclass(frozen=True)
class Location:
    """
    A point to route through / locate.
    Only lat and lon are required, everything else tunes how the point is snapped.
    """
    lat: float
    lon: float
    type: Optional[str] = None  # break, through, via, break_through
    name: Optional[str] = None
    heading: Optional[float] = None
    heading_tolerance: Optional[float] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    display_lat: Optional[float] = None
    display_lon: Optional[float] = None
    preferred_side: Optional[str] = None
    radius: Optional[float] = None
    minimum_reachability: Optional[int] = None
    rank_candidates: Optional[bool] = None
    search_cutoff: Optional[float] = None
    node_snap_tolerance: Optional[float] = None
    street_side_tolerance: Optional[float] = None
    search_filter: Optional[SearchFilter] = None
    preferred_layer: Optional[int] = None
    waiting: Optional[int] = None

    def validate(self) -> None:
        _check_lat_lon(self.lat, self.lon)


@dataclass(frozen=True)
class DateTimeOptions:
    """
    When the route should be computed for.
    `value` is an ISO-8601 local time ("2026-10-18T08:00") and is required for
    DEPART_AT and ARRIVE_BY.
    """
    type: DateTimeType
    value: Optional[str] = None

    def validate(self) -> None:
        try:
            kind = DateTimeType(self.type)
        except ValueError:
            raise InvalidArgumentError(f"DateTimeType must be between 0 and 3, but was {self.type!r}.") from None
        if kind in (DateTimeType.DEPART_AT, DateTimeType.ARRIVE_BY) and not (self.value or "").strip():
            raise InvalidArgumentError(f"Value is required when type is {kind.name}.")


@dataclass(frozen=True)
class TracePoint:
    """One GPS sample of a trace. `time` goes over the wire as epoch seconds."""
    lat: float
    lon: float
    type: Optional[str] = None
    time: Optional[datetime] = None
    radius: Optional[float] = None

    def validate(self) -> None:
        _check_lat_lon(self.lat, self.lon)
        if self.radius is not None and (self.radius < 0 or self.radius > 100):
            raise InvalidArgumentError(f"Radius must be between 0 and 100 meters, got {self.radius}.")


@dataclass(frozen=True)
class TraceOptions:
    search_radius: Optional[float] = None
    gps_accuracy: Optional[float] = None
    breakage_distance: Optional[float] = None
    interpolation_distance: Optional[float] = None


@dataclass(frozen=True)
class FilterAttributes:
    """trace_attributes filter: which attributes to include / exclude from the answer."""
    attributes: Optional[List[str]] = None
    action: Optional[str] = None  # "include" | "exclude"


#----------------
# response-side types
#----------------

@dataclass(frozen=True)
class Maneuver:
    type: Optional[int] = None
    instruction: Optional[str] = None
    length: Optional[float] = None
    time: Optional[float] = None
    begin_shape_index: Optional[int] = None
    end_shape_index: Optional[int] = None
    street_names: Optional[List[str]] = None


@dataclass(frozen=True)
class LegSummary:
    length: Optional[float] = None  # in the request's units (km by default)
    time: Optional[float] = None  # in seconds
    min_lat: Optional[float] = None
    min_lon: Optional[float] = None
    max_lat: Optional[float] = None
    max_lon: Optional[float] = None


@dataclass(frozen=True)
class Leg:
    maneuvers: Optional[List[Maneuver]] = None
    summary: Optional[LegSummary] = None
    shape: Optional[str] = None

    def coordinates(self, precision: int = polyline.DEFAULT_PRECISION) -> List[polyline.LatLon]:
        """Decoded (lat, lon) points of this leg's shape ([] when the server sent none)."""
        if not self.shape:
            return []
        return polyline.decode(self.shape, precision)


@dataclass(frozen=True)
class TripSummary:
    length: Optional[float] = None
    time: Optional[float] = None
    min_lat: Optional[float] = None
    min_lon: Optional[float] = None
    max_lat: Optional[float] = None
    max_lon: Optional[float] = None
    has_time_restrictions: Optional[bool] = None
    has_toll: Optional[bool] = None
    has_highway: Optional[bool] = None
    has_ferry: Optional[bool] = None


@dataclass(frozen=True)
class Trip:
    """One computed route: legs (with maneuvers and shape) plus an overall summary."""
    legs: Optional[List[Leg]] = None
    summary: Optional[TripSummary] = None
    units: Optional[str] = None
    language: Optional[str] = None
    locations: Optional[List[Location]] = None


@dataclass(frozen=True)
class EdgeInfo:
    names: Optional[List[str]] = None
    road_class: Optional[str] = None
    speed: Optional[int] = None
    use: Optional[str] = None
    length: Optional[float] = None
    bridge: Optional[bool] = None
    tunnel: Optional[bool] = None
    toll: Optional[bool] = None


@dataclass(frozen=True)
class EdgeCandidate:
    way_id: Optional[int] = None
    correlated_lat: Optional[float] = None
    correlated_lon: Optional[float] = None
    side_of_street: Optional[str] = None
    percent_along: Optional[float] = None
    distance: Optional[float] = None
    edge_info: Optional[EdgeInfo] = None


@dataclass(frozen=True)
class NodeCandidate:
    lat: Optional[float] = None
    lon: Optional[float] = None
    distance: Optional[float] = None


@dataclass(frozen=True)
class LocateResult:
    input_lat: Optional[float] = None
    input_lon: Optional[float] = None
    edges: Optional[List[EdgeCandidate]] = None
    nodes: Optional[List[NodeCandidate]] = None
    warnings: Optional[List[str]] = None


@dataclass(frozen=True)
class MatchedPoint:
    lat: Optional[float] = None
    lon: Optional[float] = None
    type: Optional[str] = None  # matched, interpolated, unmatched
    edge_index: Optional[int] = None
    distance_along_edge: Optional[float] = None
    distance_from_trace_point: Optional[float] = None


@dataclass(frozen=True)
class TraceEdge:
    names: Optional[List[str]] = None
    length: Optional[float] = None
    speed: Optional[float] = None
    road_class: Optional[str] = None
    begin_shape_index: Optional[int] = None
    end_shape_index: Optional[int] = None
    traffic_segments: Optional[Any] = None
