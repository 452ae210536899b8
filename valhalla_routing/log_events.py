"""
Purpose: Structured log events emitted by the Valhalla client pipeline.
What it does:
- LogEvent: the fixed event list (stable id, level, message template).
- One small typed function per event; the pipeline calls these directly with the
  structured fields and never builds log strings itself.
- EventSink: the logging port. Any callable (event, fields) -> None works.
  LoggingEventSink adapts the port onto the standard `logging` module.

Rule: Emitting must never raise into the caller and never carries header values.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class LogEvent(Enum):
    REQUEST_STARTING = (1, logging.DEBUG, "Sending {method} request to {endpoint}")
    REQUEST_COMPLETED = (2, logging.INFO, "Request to {endpoint} completed in {elapsed_ms}ms with status {status_code}")
    REQUEST_FAILED = (3, logging.WARNING, "Request to {endpoint} failed with status {status_code}: {error_message}")
    INSECURE_TRANSPORT_WARNING = (
        4,
        logging.WARNING,
        "API key is configured but the base URL uses HTTP instead of HTTPS. "
        "Credentials may be transmitted insecurely.",
    )
    CUSTOM_TRANSPORT_WARNING = (
        5,
        logging.WARNING,
        "Custom transport provided. Caller is responsible for its lifecycle, "
        "connection pooling and DNS change handling.",
    )
    REQUEST_BODY = (6, logging.DEBUG, "Request body: {request_body}")
    RESPONSE_BODY = (7, logging.DEBUG, "Response body: {response_body}")
    REQUEST_TIMED_OUT = (8, logging.WARNING, "Request to {endpoint} timed out after {timeout_ms}ms")
    DESERIALIZATION_ERROR = (9, logging.ERROR, "Failed to deserialize response from {endpoint}: {error_message}")

    def __init__(self, event_id: int, level: int, template: str):
        self.event_id = event_id
        self.level = level
        self.template = template


# The logging port: receives the event and its structured fields.
EventSink = Callable[[LogEvent, Dict[str, Any]], None]


def null_sink(event: LogEvent, fields: Dict[str, Any]) -> None:
    return None


class LoggingEventSink:
    """
    Forwards events to a stdlib logger.

    The message is rendered from the event template here (the collaborator's job),
    the raw fields travel in `extra` as `valhalla_event`, `valhalla_event_id`
    and `valhalla_fields` for structured handlers.
    """

    def __init__(self, log: Optional[logging.Logger] = None):
        self.log = log or logging.getLogger("valhalla_routing.client")

    def __call__(self, event: LogEvent, fields: Dict[str, Any]) -> None:
        if not self.log.isEnabledFor(event.level):
            return
        self.log.log(
            event.level,
            event.template.format(**fields),
            extra={
                "valhalla_event": event.name.lower(),
                "valhalla_event_id": event.event_id,
                "valhalla_fields": dict(fields),
            },
        )


def _emit(sink: EventSink, event: LogEvent, **fields: Any) -> None:
    try:
        sink(event, fields)
    except Exception:
        #a broken sink must not break the request
        logger.exception("Log sink failed while emitting %s", event.name)


#----------------
# typed emitters (one per event)
#----------------

def request_starting(sink: EventSink, method: str, endpoint: str) -> None:
    _emit(sink, LogEvent.REQUEST_STARTING, method=method, endpoint=endpoint)


def request_completed(sink: EventSink, endpoint: str, elapsed_ms: int, status_code: int) -> None:
    _emit(sink, LogEvent.REQUEST_COMPLETED, endpoint=endpoint, elapsed_ms=elapsed_ms, status_code=status_code)


def request_failed(sink: EventSink, endpoint: str, status_code: int, error_message: str) -> None:
    _emit(sink, LogEvent.REQUEST_FAILED, endpoint=endpoint, status_code=status_code, error_message=error_message)


def insecure_transport_warning(sink: EventSink) -> None:
    _emit(sink, LogEvent.INSECURE_TRANSPORT_WARNING)


def custom_transport_warning(sink: EventSink) -> None:
    _emit(sink, LogEvent.CUSTOM_TRANSPORT_WARNING)


def request_body(sink: EventSink, body: str) -> None:
    _emit(sink, LogEvent.REQUEST_BODY, request_body=body)


def response_body(sink: EventSink, body: str) -> None:
    _emit(sink, LogEvent.RESPONSE_BODY, response_body=body)


def request_timed_out(sink: EventSink, endpoint: str, timeout_ms: int) -> None:
    _emit(sink, LogEvent.REQUEST_TIMED_OUT, endpoint=endpoint, timeout_ms=timeout_ms)


def deserialization_error(sink: EventSink, endpoint: str, error_message: str) -> None:
    _emit(sink, LogEvent.DESERIALIZATION_ERROR, endpoint=endpoint, error_message=error_message)
