"""
Purpose: One request record per Valhalla endpoint.
What it does:
- StatusRequest, LocateRequest, RouteRequest, TraceRouteRequest, TraceAttributesRequest
- Each record owns validate(); the client calls it before anything goes on the wire,
  so an invalid request never reaches the network.

Rule: Immutable value records. Serialization lives in naming.to_document.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional

from .errors import InvalidArgumentError
from .models import (
    DateTimeOptions,
    FilterAttributes,
    Location,
    TraceOptions,
    TracePoint,
)


def _require_costing(costing: Optional[str]) -> None:
    if costing is None or not str(getattr(costing, "value", costing)).strip():
        raise InvalidArgumentError("Costing is required.")


def _validate_trace_input(
    shape: Optional[List[TracePoint]],
    encoded_polyline: Optional[str],
    trace_options: Optional[TraceOptions],
) -> None:
    has_polyline = bool(encoded_polyline and encoded_polyline.strip())
    if shape is None and not has_polyline:
        raise InvalidArgumentError("Either shape or encoded_polyline must be provided.")
    if shape is not None and has_polyline:
        raise InvalidArgumentError("Cannot provide both shape and encoded_polyline. Provide only one.")

    if shape is not None:
        if len(shape) < 2:
            raise InvalidArgumentError("Shape must contain at least 2 trace points.")
        for point in shape:
            point.validate()

    if trace_options is not None and trace_options.search_radius is not None:
        radius = trace_options.search_radius
        if radius < 0 or radius > 100:
            raise InvalidArgumentError(f"search_radius must be between 0 and 100 meters, got {radius}.")


@dataclass(frozen=True)
class StatusRequest:
    verbose: bool = False

    def validate(self) -> None:
        #every field is optional
        return None


@dataclass(frozen=True)
class LocateRequest:
    locations: List[Location]
    costing: str
    costing_options: Optional[Any] = None
    verbose: Optional[bool] = None
    units: Optional[str] = None
    id: Optional[str] = None

    def validate(self) -> None:
        if not self.locations:
            raise InvalidArgumentError("At least one location is required.")
        _require_costing(self.costing)
        for location in self.locations:
            location.validate()


@dataclass(frozen=True)
class RouteRequest:
    """
    Turn-by-turn route through two or more locations.
    Set `alternates` > 0 to ask Valhalla for alternative trips as well.
    """
    locations: List[Location]
    costing: str
    units: Optional[str] = None
    language: Optional[str] = None
    directions_type: Optional[str] = None
    format: Optional[str] = None
    costing_options: Optional[Any] = None
    date_time: Optional[DateTimeOptions] = None
    exclude_locations: Optional[List[Location]] = None
    exclude_polygons: Optional[Any] = None
    id: Optional[str] = None
    alternates: Optional[int] = None
    elevation_interval: Optional[int] = None
    roundabout_exits: Optional[bool] = None
    linear_references: Optional[bool] = None

    def validate(self) -> None:
        if not self.locations or len(self.locations) < 2:
            raise InvalidArgumentError("At least 2 locations are required for routing.")
        _require_costing(self.costing)

        for location in self.locations:
            location.validate()
            if location.heading is not None and (location.heading < 0 or location.heading > 360):
                raise InvalidArgumentError(
                    f"Heading must be between 0 and 360 degrees, got {location.heading}."
                )
            if location.heading_tolerance is not None and (
                location.heading_tolerance < 0 or location.heading_tolerance > 180
            ):
                raise InvalidArgumentError(
                    f"heading_tolerance must be between 0 and 180 degrees, got {location.heading_tolerance}."
                )
            if location.radius is not None and location.radius < 0:
                raise InvalidArgumentError(
                    f"Radius must be greater than or equal to 0, got {location.radius}."
                )

        if self.date_time is not None:
            self.date_time.validate()

        if self.alternates is not None and self.alternates < 0:
            raise InvalidArgumentError(
                f"Alternates must be greater than or equal to 0, got {self.alternates}."
            )


@dataclass(frozen=True)
class TraceRouteRequest:
    """Map-match a GPS trace and get a route (trip) along the matched path."""
    costing: str
    shape: Optional[List[TracePoint]] = None
    encoded_polyline: Optional[str] = None
    begin_time: Optional[int] = None
    durations: Optional[List[int]] = None
    use_timestamps: Optional[bool] = None
    shape_match: Optional[str] = None  # edge_walk, map_snap, walk_or_snap
    trace_options: Optional[TraceOptions] = None
    costing_options: Optional[Any] = None
    format: Optional[str] = None
    units: Optional[str] = None
    language: Optional[str] = None
    directions_type: Optional[str] = None
    linear_references: Optional[bool] = None
    id: Optional[str] = None

    def validate(self) -> None:
        _require_costing(self.costing)
        _validate_trace_input(self.shape, self.encoded_polyline, self.trace_options)


@dataclass(frozen=True)
class TraceAttributesRequest:
    """Map-match a GPS trace and get per-edge attributes plus matched points."""
    costing: str
    shape: Optional[List[TracePoint]] = None
    encoded_polyline: Optional[str] = None
    begin_time: Optional[int] = None
    durations: Optional[List[int]] = None
    use_timestamps: Optional[bool] = None
    shape_match: Optional[str] = None
    trace_options: Optional[TraceOptions] = None
    costing_options: Optional[Any] = None
    filters: Optional[FilterAttributes] = None
    id: Optional[str] = None

    def validate(self) -> None:
        _require_costing(self.costing)
        _validate_trace_input(self.shape, self.encoded_polyline, self.trace_options)

        if self.filters is not None and self.filters.action is not None:
            if self.filters.action.lower() not in ("include", "exclude"):
                raise InvalidArgumentError(
                    "filters.action must be 'include' or 'exclude' (case-insensitive)."
                )
