"""
Purpose: HTTP transport port + the default `requests` implementation.
What it does:
- CancellationToken: caller-owned cancellation signal, checked at every I/O step.
- Transport: the interface the client pipeline needs ("send a request with
  cancellation, give me headers first, stream the body").
- RequestsTransport: Transport on top of a requests.Session with stream=True.

Timeout and caller cancellation are reported as different exceptions
(TransportTimeout / TransportCancelled) so the pipeline never confuses them.

Rule: No JSON, no Valhalla semantics. Bytes in, bytes out.
"""

from __future__ import annotations

import socket
import threading
from typing import Callable, Iterator, List, Mapping, Optional

import requests
from urllib3.exceptions import ReadTimeoutError

from .errors import TransportError


class TransportTimeout(Exception):
    """The transport gave up waiting on the server."""
    pass


class TransportCancelled(Exception):
    """The transport stopped because the caller's token was cancelled."""
    pass


class CancellationToken:
    """
    Cooperative cancellation signal shared between a caller and one or more requests.

    token = CancellationToken()
    threading.Timer(2.0, token.cancel).start()
    client.route(request, cancel_token=token)
    """

    def __init__(self):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def register(self, callback: Callable[[], None]) -> Callable[[], None]:
        """
        Run `callback` on cancel (immediately if already cancelled).
        Returns a function that unregisters it.
        """
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)

                def unregister() -> None:
                    with self._lock:
                        if callback in self._callbacks:
                            self._callbacks.remove(callback)

                return unregister
        callback()
        return lambda: None

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise TransportCancelled("Request was cancelled.")


class TransportResponse:
    """Headers-first response. The body is only read through iter_chunks()."""

    status_code: int
    headers: Mapping[str, str]

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        raise NotImplementedError

    def close(self) -> None:
        raise NotImplementedError

    def abort(self) -> None:
        """
        Stop an in-flight body read from another thread (deadline or cancel).
        The blocked iter_chunks() must then end or raise promptly.
        """
        self.close()


class Transport:
    """
    What the client pipeline needs from an HTTP stack.

    send() must return as soon as the status line and headers are available and
    raise TransportTimeout / TransportCancelled / errors.TransportError.
    """

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
        timeout: float,
        token: Optional[CancellationToken] = None,
    ) -> TransportResponse:
        raise NotImplementedError

    def close(self) -> None:
        return None


class RequestsResponse(TransportResponse):
    def __init__(self, response: requests.Response, token: Optional[CancellationToken] = None):
        self._response = response
        self._token = token
        self.status_code = response.status_code
        self.headers = response.headers

    def iter_chunks(self, chunk_size: int) -> Iterator[bytes]:
        unregister = self._token.register(self.abort) if self._token else (lambda: None)
        try:
            for chunk in self._response.iter_content(chunk_size=chunk_size):
                if self._token is not None:
                    self._token.raise_if_cancelled()
                if chunk:
                    yield chunk
        except requests.exceptions.ConnectionError as exc:
            if self._token is not None and self._token.cancelled:
                raise TransportCancelled("Request was cancelled.") from exc
            if exc.args and isinstance(exc.args[0], ReadTimeoutError):
                raise TransportTimeout(str(exc)) from exc
            raise TransportError(f"Failed to read response body: {exc}") from exc
        except requests.RequestException as exc:
            if self._token is not None and self._token.cancelled:
                raise TransportCancelled("Request was cancelled.") from exc
            raise TransportError(f"Failed to read response body: {exc}") from exc
        finally:
            unregister()

    def close(self) -> None:
        self._response.close()

    def abort(self) -> None:
        #shutting the socket down wakes a blocked recv() with EOF; close() alone may wait for it
        connection = getattr(getattr(self._response, "raw", None), "connection", None)
        sock = getattr(connection, "sock", None)
        if sock is None:
            self._response.close()
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            #already closed by the peer
            self._response.close()


class RequestsTransport(Transport):
    """
    Transport backed by a requests.Session (connection pooling, TLS, proxies).

    A session passed in stays owned by the caller; close() only closes a session
    this transport created.
    """

    def __init__(self, session: Optional[requests.Session] = None):
        self.session = session or requests.Session()
        self._owns_session = session is None

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: bytes,
        timeout: float,
        token: Optional[CancellationToken] = None,
    ) -> TransportResponse:
        if token is not None:
            token.raise_if_cancelled()
        try:
            response = self.session.request(
                method,
                url,
                headers=dict(headers),
                data=body,
                timeout=timeout,
                stream=True,  #headers first, body on demand
            )
        except requests.Timeout as exc:
            if token is not None and token.cancelled:
                raise TransportCancelled("Request was cancelled.") from exc
            raise TransportTimeout(str(exc)) from exc
        except requests.RequestException as exc:
            if token is not None and token.cancelled:
                raise TransportCancelled("Request was cancelled.") from exc
            raise TransportError(f"HTTP request failed: {exc}") from exc

        if token is not None and token.cancelled:
            response.close()
            raise TransportCancelled("Request was cancelled.")
        return RequestsResponse(response, token)

    def close(self) -> None:
        if self._owns_session:
            self.session.close()
