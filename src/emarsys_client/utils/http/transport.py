"""HTTP transport used by the Emarsys client.

A transport is any async callable that takes a prepared ``httpx.Request``
and returns an ``httpx.Response`` (or raises ``httpx.HTTPError``). Tests
swap in a plain coroutine; production uses ``HTTPTransport``, which owns a
pooled ``httpx.AsyncClient`` restricted to TLS 1.2 or newer.

Responses are returned unread (``stream=True``). Draining and closing them
is the caller's job.
"""

import logging
import ssl
from typing import Awaitable, Callable, Optional

import httpx

logger = logging.getLogger(__name__)

Transport = Callable[[httpx.Request], Awaitable[httpx.Response]]

DEFAULT_TIMEOUT = 120.0


def create_timeout(timeout: float = DEFAULT_TIMEOUT) -> httpx.Timeout:
    """Create a timeout configuration applied to every phase of a request.

    :param timeout: Timeout in seconds
    :type timeout: float
    :return: Configured timeout object
    :rtype: httpx.Timeout
    """
    return httpx.Timeout(timeout)


def create_limits(
    max_keepalive_connections: int = 10,
    max_connections: int = 20,
    keepalive_expiry: float = 30.0,
) -> httpx.Limits:
    """Create a connection limits configuration object.

    :param max_keepalive_connections: Maximum number of keepalive connections
    :type max_keepalive_connections: int
    :param max_connections: Maximum total number of connections
    :type max_connections: int
    :param keepalive_expiry: Keepalive connection expiry time in seconds
    :type keepalive_expiry: float
    :return: Configured limits object
    :rtype: httpx.Limits
    """
    return httpx.Limits(
        max_keepalive_connections=max_keepalive_connections,
        max_connections=max_connections,
        keepalive_expiry=keepalive_expiry,
    )


def create_ssl_context() -> ssl.SSLContext:
    """Default certificate-verifying context that refuses anything below TLS 1.2."""
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


class HTTPTransport:
    """Callable transport backed by a pooled ``httpx.AsyncClient``.

    :param timeout: Timeout in seconds for each request
    :type timeout: float
    :param limits: Optional custom connection limits
    :type limits: Optional[httpx.Limits]
    :param client: Optional pre-built client; it is not closed by ``aclose``
    :type client: Optional[httpx.AsyncClient]
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        limits: Optional[httpx.Limits] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=create_timeout(timeout),
            limits=limits or create_limits(),
            verify=create_ssl_context(),
            follow_redirects=True,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        logger.debug(f"=== SEND: {request.method} {request.url}")
        return await self._client.send(request, stream=True)

    async def aclose(self) -> None:
        if self._owns_client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed HTTP transport client")


def create_transport(timeout: float = DEFAULT_TIMEOUT) -> HTTPTransport:
    return HTTPTransport(timeout=timeout)
