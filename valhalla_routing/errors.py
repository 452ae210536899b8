"""
Purpose: Error taxonomy surfaced to callers of the Valhalla client.
What it does:
- One base class (ValhallaError) so callers can catch everything from this package.
- One subclass per failure kind, each carrying the structured context a caller
  needs to decide on a retry (endpoint, status code, truncated body).

Rule: No I/O here. Errors are raised by the pipeline, never formatted for humans
beyond the message.
"""

from __future__ import annotations

from typing import Optional


class ValhallaError(Exception):
    """Base class for every error raised by valhalla_routing."""
    pass


class InvalidArgumentError(ValhallaError, ValueError):
    """A request record or codec argument is malformed (raised before any network I/O)."""
    pass


class ConfigurationError(ValhallaError, ValueError):
    """Client configuration is invalid (raised at construction time)."""
    pass


class PolylineFormatError(ValhallaError, ValueError):
    """Encoded polyline text is malformed or truncated."""
    pass


class TransportError(ValhallaError):
    """The transport could not complete the exchange (connection refused, reset, ...)."""

    def __init__(self, message: str, endpoint: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint


class RequestCancelledError(ValhallaError):
    """The caller cancelled the request through its CancellationToken."""

    def __init__(self, endpoint: str, message: str = "Request was cancelled."):
        super().__init__(message)
        self.endpoint = endpoint


class RequestTimeoutError(ValhallaError, TimeoutError):
    """The configured timeout elapsed before the response was fully read."""

    def __init__(self, endpoint: str, timeout: float):
        super().__init__(f"Request to {endpoint} timed out after {timeout:g}s.")
        self.endpoint = endpoint
        self.timeout = timeout


class ResponseTooLargeError(ValhallaError):
    """Declared (Content-Length) or actual response body exceeds the size cap."""

    def __init__(
        self,
        endpoint: str,
        status_code: int,
        limit: int,
        content_length: Optional[int] = None,
    ):
        if content_length is not None:
            message = (
                f"Response size ({content_length} bytes) exceeds maximum allowed size ({limit} bytes)"
            )
        else:
            message = f"Response size exceeds maximum allowed size ({limit} bytes)"
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code
        self.limit = limit
        self.content_length = content_length


class ServiceError(ValhallaError):
    """
    Non-2xx answer from the routing service.

    error_code / status are only set when the body was a Valhalla error document:
        {"error_code": 154, "error": "No path could be found", "status": "Bad Request"}
    """

    def __init__(
        self,
        endpoint: str,
        status_code: int,
        message: str,
        error_code: Optional[int] = None,
        status: Optional[str] = None,
        raw_response: Optional[str] = None,
    ):
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code
        self.message = message
        self.error_code = error_code
        self.status = status
        self.raw_response = raw_response


class DecodeError(ValhallaError):
    """A successful response body could not be decoded into the expected shape."""

    def __init__(self, endpoint: str, message: str, raw_response: Optional[str] = None):
        super().__init__(message)
        self.endpoint = endpoint
        self.message = message
        self.raw_response = raw_response
