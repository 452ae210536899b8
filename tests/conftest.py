import json
import threading
from types import SimpleNamespace

import pytest
from requests.structures import CaseInsensitiveDict

from valhalla_routing.client import ValhallaClient
from valhalla_routing.config import ClientConfig


class FakeResponse:
    """Headers-first response that hands out its body in chunks and counts them."""

    def __init__(self, status_code=200, body=b"", headers=None, on_chunk=None):
        self.status_code = status_code
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        self.headers = CaseInsensitiveDict(headers or {})
        self.on_chunk = on_chunk
        self.chunks_read = 0
        self.closed = False
        self.aborted = threading.Event()

    def iter_chunks(self, chunk_size):
        for start in range(0, len(self.body), chunk_size):
            self.chunks_read += 1
            if self.on_chunk is not None:
                self.on_chunk(self.chunks_read)
            yield self.body[start:start + chunk_size]

    def close(self):
        self.closed = True

    def abort(self):
        self.aborted.set()


class FakeTransport:
    """Records every send() and replays a canned response (or raises a canned error)."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def send(self, method, url, headers, body, timeout, token=None):
        self.calls.append(
            SimpleNamespace(method=method, url=url, headers=dict(headers), body=body, timeout=timeout, token=token)
        )
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


class RecordingSink:
    """EventSink that keeps every (event, fields) pair."""

    def __init__(self):
        self.records = []

    def __call__(self, event, fields):
        self.records.append((event, dict(fields)))

    def of(self, event):
        return [fields for recorded, fields in self.records if recorded is event]


def json_response(document, status_code=200, headers=None, **kwargs):
    return FakeResponse(status_code=status_code, body=json.dumps(document), headers=headers, **kwargs)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def make_client(sink):
    """
    make_client(response, base_url=..., timeout=..., ...) -> (client, transport)
    """
    def _make(response=None, error=None, base_url="https://valhalla.test", event_sink=None, **config_kwargs):
        transport = FakeTransport(response=response, error=error)
        config = ClientConfig(base_url=base_url, **config_kwargs)
        return ValhallaClient(config, transport=transport, event_sink=event_sink or sink), transport

    return _make


@pytest.fixture
def respond():
    """respond(document, status_code=200, headers=None) -> FakeResponse with a JSON body"""
    return json_response


@pytest.fixture
def fake_response():
    return FakeResponse
