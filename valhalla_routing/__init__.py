#Marks valhalla_routing as a package.
#Re-exports the public API (client, builder, config, requests, responses, errors, codec)
#so callers import from valhalla_routing without knowing internal file names.
#No business logic.

from . import polyline
from .builder import ValhallaClientBuilder
from .client import ValhallaClient
from .config import ClientConfig
from .errors import (
    ConfigurationError,
    DecodeError,
    InvalidArgumentError,
    PolylineFormatError,
    RequestCancelledError,
    RequestTimeoutError,
    ResponseTooLargeError,
    ServiceError,
    TransportError,
    ValhallaError,
)
from .log_events import LogEvent, LoggingEventSink
from .models import (
    Costing,
    DateTimeOptions,
    DateTimeType,
    FilterAttributes,
    Location,
    SearchFilter,
    TraceOptions,
    TracePoint,
    Trip,
)
from .request_models import (
    LocateRequest,
    RouteRequest,
    StatusRequest,
    TraceAttributesRequest,
    TraceRouteRequest,
)
from .responses import (
    LocateResponse,
    RouteResponse,
    StatusResponse,
    TraceAttributesResponse,
    TraceRouteResponse,
)
from .settings import load_config
from .transport import CancellationToken, RequestsTransport, Transport

__all__ = [
    "polyline",
    "ValhallaClient",
    "ValhallaClientBuilder",
    "ClientConfig",
    "load_config",
    "CancellationToken",
    "Transport",
    "RequestsTransport",
    "LogEvent",
    "LoggingEventSink",
    "Costing",
    "DateTimeOptions",
    "DateTimeType",
    "FilterAttributes",
    "Location",
    "SearchFilter",
    "TraceOptions",
    "TracePoint",
    "Trip",
    "StatusRequest",
    "LocateRequest",
    "RouteRequest",
    "TraceRouteRequest",
    "TraceAttributesRequest",
    "StatusResponse",
    "LocateResponse",
    "RouteResponse",
    "TraceRouteResponse",
    "TraceAttributesResponse",
    "ValhallaError",
    "InvalidArgumentError",
    "ConfigurationError",
    "PolylineFormatError",
    "TransportError",
    "RequestCancelledError",
    "RequestTimeoutError",
    "ResponseTooLargeError",
    "ServiceError",
    "DecodeError",
]
