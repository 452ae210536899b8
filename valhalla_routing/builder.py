"""
Purpose: Fluent construction of a ValhallaClient.

client = (
    ValhallaClientBuilder()
    .with_base_url("https://valhalla.example.com")
    .with_timeout(30)
    .with_api_key("X-Api-Key", "secret")
    .build()
)

Rule: Only wiring. Validation is delegated to ClientConfig.
"""

from __future__ import annotations

import logging
from typing import Optional

from .client import ValhallaClient
from .config import DEFAULT_TIMEOUT_SECONDS, ClientConfig, normalize_base_url
from .errors import ConfigurationError
from .log_events import EventSink, LoggingEventSink
from .transport import Transport


class ValhallaClientBuilder:
    def __init__(self):
        self._base_url: Optional[str] = None
        self._timeout: float = DEFAULT_TIMEOUT_SECONDS
        self._api_key_header_name: Optional[str] = None
        self._api_key_header_value: Optional[str] = None
        self._sensitive_logging = False
        self._transport: Optional[Transport] = None
        self._event_sink: Optional[EventSink] = None

    def with_base_url(self, base_url: str) -> "ValhallaClientBuilder":
        self._base_url = normalize_base_url(base_url)
        return self

    def with_timeout(self, seconds: float) -> "ValhallaClientBuilder":
        if isinstance(seconds, bool) or not isinstance(seconds, (int, float)) or not seconds > 0:
            raise ConfigurationError("Timeout must be greater than zero.")
        self._timeout = float(seconds)
        return self

    def with_api_key(self, header_name: str, header_value: str) -> "ValhallaClientBuilder":
        if not header_name or not header_name.strip():
            raise ConfigurationError("API key header name cannot be empty.")
        if not header_value or not header_value.strip():
            raise ConfigurationError("API key header value cannot be empty.")
        self._api_key_header_name = header_name
        self._api_key_header_value = header_value
        return self

    def with_sensitive_logging(self, enabled: bool = True) -> "ValhallaClientBuilder":
        self._sensitive_logging = enabled
        return self

    def with_transport(self, transport: Transport) -> "ValhallaClientBuilder":
        """Use a caller-owned transport; the built client will not close it."""
        if transport is None:
            raise ConfigurationError("transport cannot be None.")
        self._transport = transport
        return self

    def with_event_sink(self, sink: EventSink) -> "ValhallaClientBuilder":
        if sink is None:
            raise ConfigurationError("event sink cannot be None.")
        self._event_sink = sink
        return self

    def with_logger(self, logger: logging.Logger) -> "ValhallaClientBuilder":
        return self.with_event_sink(LoggingEventSink(logger))

    def build(self) -> ValhallaClient:
        if self._base_url is None:
            raise ConfigurationError("Base URL must be set before building the client. Call with_base_url() first.")

        config = ClientConfig(
            base_url=self._base_url,
            timeout=self._timeout,
            api_key_header_name=self._api_key_header_name,
            api_key_header_value=self._api_key_header_value,
            sensitive_logging=self._sensitive_logging,
        )
        return ValhallaClient(config, transport=self._transport, event_sink=self._event_sink)
