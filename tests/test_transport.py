import socket
import threading
from types import SimpleNamespace

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from urllib3.exceptions import ReadTimeoutError

from valhalla_routing.errors import TransportError
from valhalla_routing.transport import (
    CancellationToken,
    RequestsTransport,
    TransportCancelled,
    TransportTimeout,
)


class StubRawResponse:
    def __init__(self, status_code=200, chunks=(), error=None):
        self.status_code = status_code
        self.headers = CaseInsensitiveDict({"Content-Type": "application/json"})
        self.chunks = list(chunks)
        self.error = error
        self.closed = False

    def iter_content(self, chunk_size=1):
        for chunk in self.chunks:
            yield chunk
        if self.error is not None:
            raise self.error

    def close(self):
        self.closed = True


class StubSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.kwargs = None
        self.closed = False

    def request(self, method, url, **kwargs):
        self.kwargs = dict(kwargs, method=method, url=url)
        if self.error is not None:
            raise self.error
        return self.response

    def close(self):
        self.closed = True


#----------------
# CancellationToken
#----------------

def test_token_runs_callbacks_once():
    token = CancellationToken()
    calls = []
    token.register(lambda: calls.append("a"))

    token.cancel()
    token.cancel()

    assert token.cancelled is True
    assert calls == ["a"]


def test_token_unregister():
    token = CancellationToken()
    calls = []
    unregister = token.register(lambda: calls.append("a"))
    unregister()
    token.cancel()
    assert calls == []


def test_register_after_cancel_runs_immediately():
    token = CancellationToken()
    token.cancel()
    calls = []
    token.register(lambda: calls.append("late"))
    assert calls == ["late"]


def test_raise_if_cancelled():
    token = CancellationToken()
    token.raise_if_cancelled()
    token.cancel()
    with pytest.raises(TransportCancelled):
        token.raise_if_cancelled()


def test_token_can_be_cancelled_from_another_thread():
    token = CancellationToken()
    worker = threading.Thread(target=token.cancel)
    worker.start()
    worker.join()
    assert token.cancelled is True


#----------------
# RequestsTransport
#----------------

def test_send_streams_and_forwards_timeout():
    raw = StubRawResponse(chunks=[b'{"a":', b"", b"1}"])
    session = StubSession(response=raw)
    transport = RequestsTransport(session)

    response = transport.send("POST", "https://valhalla.test/route", {"Accept": "application/json"}, b"{}", 3.0)

    assert session.kwargs["stream"] is True
    assert session.kwargs["timeout"] == 3.0
    assert session.kwargs["data"] == b"{}"
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json"
    # empty keep-alive chunks are dropped
    assert list(response.iter_chunks(8192)) == [b'{"a":', b"1}"]


def test_requests_timeout_maps_to_transport_timeout():
    transport = RequestsTransport(StubSession(error=requests.Timeout("connect timed out")))
    with pytest.raises(TransportTimeout):
        transport.send("POST", "https://valhalla.test/route", {}, b"{}", 1.0)


def test_connection_error_maps_to_transport_error():
    transport = RequestsTransport(StubSession(error=requests.ConnectionError("refused")))
    with pytest.raises(TransportError, match="refused"):
        transport.send("POST", "https://valhalla.test/route", {}, b"{}", 1.0)


def test_send_with_cancelled_token_does_not_touch_the_network():
    session = StubSession(response=StubRawResponse())
    token = CancellationToken()
    token.cancel()

    with pytest.raises(TransportCancelled):
        RequestsTransport(session).send("POST", "https://valhalla.test/route", {}, b"{}", 1.0, token)

    assert session.kwargs is None


def test_read_timeout_while_streaming_maps_to_transport_timeout():
    error = requests.exceptions.ConnectionError(ReadTimeoutError(None, "https://valhalla.test", "Read timed out."))
    response = RequestsTransport(StubSession(response=StubRawResponse(chunks=[b"{"], error=error))).send(
        "POST", "https://valhalla.test/route", {}, b"{}", 1.0
    )
    with pytest.raises(TransportTimeout):
        list(response.iter_chunks(8192))


def test_stream_failure_after_cancel_is_a_cancellation():
    token = CancellationToken()
    raw = StubRawResponse(chunks=[b"{"], error=requests.exceptions.ChunkedEncodingError("connection closed"))
    response = RequestsTransport(StubSession(response=raw)).send(
        "POST", "https://valhalla.test/route", {}, b"{}", 1.0, token
    )

    chunks = response.iter_chunks(8192)
    assert next(chunks) == b"{"
    token.cancel()

    with pytest.raises(TransportCancelled):
        next(chunks)
    # cancel closes the underlying response to unblock the read
    assert raw.closed is True


def test_stream_failure_is_a_transport_error():
    raw = StubRawResponse(error=requests.exceptions.ChunkedEncodingError("broken"))
    response = RequestsTransport(StubSession(response=raw)).send("POST", "https://valhalla.test/route", {}, b"{}", 1.0)
    with pytest.raises(TransportError):
        list(response.iter_chunks(8192))


def test_close_only_closes_an_owned_session():
    session = StubSession()
    RequestsTransport(session).close()
    assert session.closed is False

    owned = RequestsTransport()
    owned.close()


class StubSocket:
    def __init__(self):
        self.shutdowns = []

    def shutdown(self, how):
        self.shutdowns.append(how)


def test_abort_shuts_the_socket_down_so_a_blocked_read_returns():
    sock = StubSocket()
    raw = StubRawResponse()
    raw.raw = SimpleNamespace(connection=SimpleNamespace(sock=sock))
    response = RequestsTransport(StubSession(response=raw)).send("POST", "https://valhalla.test/route", {}, b"{}", 1.0)

    response.abort()

    assert sock.shutdowns == [socket.SHUT_RDWR]
    # the pipeline closes the response itself once the read has returned
    assert raw.closed is False


def test_abort_without_a_socket_closes_the_response():
    raw = StubRawResponse()
    response = RequestsTransport(StubSession(response=raw)).send("POST", "https://valhalla.test/route", {}, b"{}", 1.0)
    response.abort()
    assert raw.closed is True
