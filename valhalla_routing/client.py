#Purpose: The Valhalla "adapter/client".
#Sole responsibility: talk to a Valhalla server over HTTP and return typed responses.
#Encapsulates Valhalla-specific details:
#snake_case JSON request bodies (POST to status, locate, route, trace_route, trace_attributes)
#size / timeout / cancellation bounds on every call
#error classification (service error document vs. generic HTTP failure)
#parsing response JSON into the envelopes of responses.py
#It does not compute routes and it does not retry.

from __future__ import annotations

import json
import threading
import time
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import urljoin

from . import log_events
from .config import ClientConfig
from .errors import (
    ConfigurationError,
    DecodeError,
    InvalidArgumentError,
    RequestCancelledError,
    RequestTimeoutError,
    ResponseTooLargeError,
    ServiceError,
    TransportError,
)
from .log_events import EventSink, LoggingEventSink
from .naming import DocumentError, to_document
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
    decode_locate,
    decode_route,
    decode_status,
    decode_trace_attributes,
    decode_trace_route,
)
from .transport import (
    CancellationToken,
    RequestsTransport,
    Transport,
    TransportCancelled,
    TransportResponse,
    TransportTimeout,
)

MAX_RESPONSE_SIZE_BYTES = 10 * 1024 * 1024  # 10 MiB
MAX_RAW_RESPONSE_CHARS = 8 * 1024  # body kept on errors / written to logs
READ_CHUNK_SIZE_BYTES = 8 * 1024

R = TypeVar("R")


def _truncate(text: str, marker: str = "") -> str:
    if len(text) <= MAX_RAW_RESPONSE_CHARS:
        return text
    return text[:MAX_RAW_RESPONSE_CHARS] + marker


class ValhallaClient:
    """
    Valhalla HTTP client

    Sole responsibility:
    - validate the request, serialize it, POST it
    - read at most 10 MiB of response within the configured timeout
    - classify failures and decode successes per endpoint

    Safe to share between threads: the only state is the immutable config,
    the transport (which owns pooling) and the event sink.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport: Optional[Transport] = None,
        event_sink: Optional[EventSink] = None,
    ):
        if not isinstance(config, ClientConfig):
            raise ConfigurationError("config must be a ClientConfig instance.")

        self.config = config
        self._events: EventSink = event_sink or LoggingEventSink()
        self._owns_transport = transport is None
        self._transport = transport or RequestsTransport()

        if config.is_insecure:
            log_events.insecure_transport_warning(self._events)
        if transport is not None:
            log_events.custom_transport_warning(self._events)

    def __enter__(self) -> "ValhallaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this client created it. Caller-supplied transports are left alone."""
        if self._owns_transport:
            self._transport.close()

    #----------------
    # Public methods, one per endpoint
    #----------------

    def status(
        self,
        request: Optional[StatusRequest] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> StatusResponse:
        """Server health / version / tileset info. `request` defaults to StatusRequest(verbose=False)."""
        return self._execute("status", request or StatusRequest(), decode_status, cancel_token)

    def locate(
        self,
        request: LocateRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> LocateResponse:
        """Nearest road-network edges / nodes for each location."""
        return self._execute("locate", request, decode_locate, cancel_token)

    def route(
        self,
        request: RouteRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RouteResponse:
        """
        Compute a route. The primary trip comes first in RouteResponse.trips,
        followed by any alternates that could be decoded.
        """
        def on_alternate_error(message: str) -> None:
            log_events.deserialization_error(self._events, "route", message)

        return self._execute(
            "route",
            request,
            lambda document: decode_route(document, on_alternate_error),
            cancel_token,
        )

    def trace_route(
        self,
        request: TraceRouteRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> TraceRouteResponse:
        """Map-match a GPS trace into a trip."""
        return self._execute("trace_route", request, decode_trace_route, cancel_token)

    def trace_attributes(
        self,
        request: TraceAttributesRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> TraceAttributesResponse:
        """Map-match a GPS trace and return per-edge attributes and matched points."""
        return self._execute("trace_attributes", request, decode_trace_attributes, cancel_token)

    #----------------
    # Internal pipeline: serialize -> send -> bounded read -> classify -> decode
    #----------------

    def _execute(
        self,
        endpoint: str,
        request: Any,
        decoder: Callable[[Any], R],
        token: Optional[CancellationToken],
    ) -> R:
        if request is None:
            raise InvalidArgumentError(f"A request is required for {endpoint}.")
        request.validate()

        body = self._serialize(request)
        text = self._send(endpoint, body, token)
        return self._decode(endpoint, text, decoder)

    def _serialize(self, request: Any) -> str:
        try:
            body = json.dumps(to_document(request), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError) as exc:
            raise InvalidArgumentError(f"Request cannot be serialized to JSON: {exc}") from exc

        if self.config.sensitive_logging:
            log_events.request_body(self._events, body)
        return body

    def _headers(self) -> dict:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json; charset=utf-8",
        }
        if self.config.has_api_key:
            headers[self.config.api_key_header_name] = self.config.api_key_header_value
        return headers

    def _send(self, endpoint: str, body: str, token: Optional[CancellationToken]) -> str:
        url = urljoin(self.config.base_url, endpoint)
        log_events.request_starting(self._events, "POST", endpoint)

        started = time.monotonic()
        deadline = started + self.config.timeout
        try:
            response = self._transport.send(
                "POST", url, self._headers(), body.encode("utf-8"), self.config.timeout, token
            )
        except TransportCancelled as exc:
            raise RequestCancelledError(endpoint) from exc
        except TransportTimeout as exc:
            if token is not None and token.cancelled:
                raise RequestCancelledError(endpoint) from exc
            raise self._timed_out(endpoint) from exc
        except TransportError as exc:
            exc.endpoint = endpoint
            raise

        try:
            status_code = response.status_code
            self._check_declared_length(endpoint, response)
            raw_body = self._read_body(endpoint, response, token, deadline)
        finally:
            response.close()
        elapsed_ms = int((time.monotonic() - started) * 1000)

        if not 200 <= status_code < 300:
            #error pages from proxies are not always UTF-8; they still classify as ServiceError
            text = raw_body.decode("utf-8", errors="replace")
            self._log_response_body(text)
            raise self._service_error(endpoint, status_code, text)

        try:
            text = raw_body.decode("utf-8")
        except UnicodeDecodeError as exc:
            message = f"Failed to read response body: {exc}"
            log_events.deserialization_error(self._events, endpoint, message)
            raise DecodeError(endpoint, message) from exc

        self._log_response_body(text)
        log_events.request_completed(self._events, endpoint, elapsed_ms, status_code)
        return text

    def _log_response_body(self, text: str) -> None:
        if self.config.sensitive_logging:
            log_events.response_body(self._events, _truncate(text, "... (truncated)"))

    def _check_declared_length(self, endpoint: str, response: TransportResponse) -> None:
        declared = response.headers.get("Content-Length")
        if declared is None:
            return
        try:
            content_length = int(declared)
        except (TypeError, ValueError):
            return
        if content_length > MAX_RESPONSE_SIZE_BYTES:
            log_events.request_failed(
                self._events, endpoint, response.status_code, "Response size exceeds 10MB limit"
            )
            raise ResponseTooLargeError(
                endpoint, response.status_code, MAX_RESPONSE_SIZE_BYTES, content_length
            )

    def _read_body(
        self,
        endpoint: str,
        response: TransportResponse,
        token: Optional[CancellationToken],
        deadline: float,
    ) -> bytes:
        """
        Stream the body under the size cap.

        A server that trickles bytes keeps every socket read under the per-read
        timeout, so the overall deadline is enforced by a timer that aborts the
        in-flight read. The same abort runs when the caller cancels.
        """
        expired = threading.Event()

        def on_deadline() -> None:
            expired.set()
            response.abort()

        timer = threading.Timer(max(deadline - time.monotonic(), 0.0), on_deadline)
        timer.daemon = True
        unregister = token.register(response.abort) if token is not None else (lambda: None)

        buffer = bytearray()
        chunks = response.iter_chunks(READ_CHUNK_SIZE_BYTES)
        try:
            self._check_interrupted(endpoint, token, deadline, expired)
            timer.start()
            for chunk in chunks:
                if len(buffer) + len(chunk) > MAX_RESPONSE_SIZE_BYTES:
                    log_events.request_failed(
                        self._events, endpoint, response.status_code, "Response size exceeds 10MB limit"
                    )
                    raise ResponseTooLargeError(endpoint, response.status_code, MAX_RESPONSE_SIZE_BYTES)
                buffer += chunk
                self._check_interrupted(endpoint, token, deadline, expired)
            #an aborted stream may also just end early
            self._check_interrupted(endpoint, token, deadline, expired)
        except TransportCancelled as exc:
            raise RequestCancelledError(endpoint) from exc
        except (TransportTimeout, TransportError) as exc:
            if token is not None and token.cancelled:
                raise RequestCancelledError(endpoint) from exc
            if isinstance(exc, TransportTimeout) or expired.is_set():
                raise self._timed_out(endpoint) from exc
            exc.endpoint = endpoint
            raise
        finally:
            timer.cancel()
            unregister()
            close = getattr(chunks, "close", None)
            if close is not None:
                close()
        return bytes(buffer)

    def _check_interrupted(
        self,
        endpoint: str,
        token: Optional[CancellationToken],
        deadline: float,
        expired: Optional[threading.Event] = None,
    ) -> None:
        #cancellation is checked first: a cancelled call is never reported as a timeout
        if token is not None and token.cancelled:
            raise RequestCancelledError(endpoint)
        if (expired is not None and expired.is_set()) or time.monotonic() > deadline:
            raise self._timed_out(endpoint)

    def _timed_out(self, endpoint: str) -> RequestTimeoutError:
        log_events.request_timed_out(self._events, endpoint, int(self.config.timeout * 1000))
        return RequestTimeoutError(endpoint, self.config.timeout)

    def _service_error(self, endpoint: str, status_code: int, text: str) -> ServiceError:
        """
        Non-2xx: use the Valhalla error document when there is one,
            {"error_code": 154, "error": "No path could be found", "status": "Bad Request"}
        otherwise fall back to a generic message. Never assumes the body is valid.
        """
        error_code = None
        error_message = None
        status = None
        try:
            document = json.loads(text)
        except ValueError:
            document = None

        if isinstance(document, dict):
            code = document.get("error_code")
            if isinstance(code, int) and not isinstance(code, bool):
                error_code = code
            if isinstance(document.get("error"), str):
                error_message = document["error"]
            if isinstance(document.get("status"), str):
                status = document["status"]

        message = error_message or f"Request failed with status {status_code}"
        log_events.request_failed(self._events, endpoint, status_code, message)
        return ServiceError(
            endpoint,
            status_code,
            message,
            error_code=error_code,
            status=status,
            raw_response=_truncate(text),
        )

    def _decode(self, endpoint: str, text: str, decoder: Callable[[Any], R]) -> R:
        try:
            document = json.loads(text)
        except ValueError as exc:
            message = f"Failed to deserialize response: {exc}"
            log_events.deserialization_error(self._events, endpoint, message)
            raise DecodeError(endpoint, message, _truncate(text)) from exc

        try:
            return decoder(document)
        except DocumentError as exc:
            log_events.deserialization_error(self._events, endpoint, str(exc))
            raise DecodeError(endpoint, str(exc), _truncate(text)) from exc
