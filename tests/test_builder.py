import logging

import pytest

from conftest import FakeTransport
from valhalla_routing.builder import ValhallaClientBuilder
from valhalla_routing.client import ValhallaClient
from valhalla_routing.errors import ConfigurationError
from valhalla_routing.log_events import LogEvent, LoggingEventSink


def test_build_requires_a_base_url():
    with pytest.raises(ConfigurationError, match="Base URL"):
        ValhallaClientBuilder().build()


def test_build_wires_the_configuration(sink):
    transport = FakeTransport()
    client = (
        ValhallaClientBuilder()
        .with_base_url("https://example.com/valhalla")
        .with_timeout(30)
        .with_api_key("X-Api-Key", "secret")
        .with_sensitive_logging()
        .with_transport(transport)
        .with_event_sink(sink)
        .build()
    )

    assert isinstance(client, ValhallaClient)
    assert client.config.base_url == "https://example.com/valhalla/"
    assert client.config.timeout == 30.0
    assert client.config.api_key_header_name == "X-Api-Key"
    assert client.config.sensitive_logging is True
    # a caller-supplied transport is flagged and left open
    assert len(sink.of(LogEvent.CUSTOM_TRANSPORT_WARNING)) == 1
    client.close()
    assert transport.closed is False


def test_default_transport_is_not_flagged(sink):
    ValhallaClientBuilder().with_base_url("http://localhost:8002").with_event_sink(sink).build()
    assert sink.of(LogEvent.CUSTOM_TRANSPORT_WARNING) == []


def test_insecure_api_key_is_flagged_at_build(sink):
    (
        ValhallaClientBuilder()
        .with_base_url("http://localhost:8002")
        .with_api_key("X-Api-Key", "secret")
        .with_event_sink(sink)
        .build()
    )
    assert len(sink.of(LogEvent.INSECURE_TRANSPORT_WARNING)) == 1


@pytest.mark.parametrize(
    "configure",
    [
        lambda b: b.with_base_url("not a url"),
        lambda b: b.with_timeout(0),
        lambda b: b.with_timeout(-5),
        lambda b: b.with_api_key("", "secret"),
        lambda b: b.with_api_key("X-Api-Key", "  "),
        lambda b: b.with_transport(None),
        lambda b: b.with_event_sink(None),
    ],
)
def test_invalid_settings_fail_immediately(configure):
    with pytest.raises(ConfigurationError):
        configure(ValhallaClientBuilder())


def test_with_logger_routes_events_to_that_logger(caplog):
    app_logger = logging.getLogger("my.app")
    caplog.set_level(logging.WARNING, logger="my.app")

    (
        ValhallaClientBuilder()
        .with_base_url("https://localhost:8002")
        .with_transport(FakeTransport())
        .with_logger(app_logger)
        .build()
    )

    assert any(r.name == "my.app" and "Custom transport" in r.getMessage() for r in caplog.records)


def test_default_sink_is_a_logging_sink():
    client = ValhallaClientBuilder().with_base_url("http://localhost:8002").build()
    assert isinstance(client._events, LoggingEventSink)
    client.close()
