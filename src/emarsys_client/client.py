"""Authenticated, retrying client for the Emarsys REST API.

``EmarsysClient.do`` owns the whole lifecycle of one logical request:

1. Sets the JSON content type.
2. For every attempt, signs the request with a fresh ``X-WSSE`` header,
   calls the transport, drains and closes the response, and decodes the
   envelope.
3. Retries errors flagged as retryable (any non-200 status) with
   exponential backoff, and gives up immediately on permanent ones
   (transport failures, HTTP 200 reply errors, malformed 200 envelopes,
   payload mismatches).

Examples:
    >>> async with EmarsysClient("user", "secret") as client:
    ...     settings = await client.request("GET", "/settings", response_type=dict)
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import httpx

from .auth.wsse import WSSE_HEADER, Clock, WSSESigner
from .config.settings import ENDPOINT_URL, PATH_BASE, Settings, resolve_staging
from .exceptions import ConfigurationError, EmarsysError, TransportError
from .models.envelope import decode_response
from .utils.http.retry import RetryPolicy
from .utils.http.transport import (
    DEFAULT_TIMEOUT,
    HTTPTransport,
    Transport,
    create_transport,
)
from .utils.security import sanitize_headers, setup_secure_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

CONTENT_TYPE = "application/json; charset=utf-8"


class EmarsysClient:
    """Client that signs, sends and decodes Emarsys API requests.

    :param user: Emarsys API user name
    :type user: str
    :param secret: Emarsys API secret
    :type secret: str
    :param clock: Fixed clock for tests; also seeds the nonce generator
    :type clock: Optional[Callable[[], datetime]]
    :param transport: Async callable executing a prepared request; defaults
                      to an ``HTTPTransport`` owned by this client
    :type transport: Optional[Transport]
    :param retry_policy: Retry budget and backoff shape
    :type retry_policy: Optional[RetryPolicy]
    :param base_url: API base URL, without the ``/api/v2`` prefix
    :type base_url: str
    :param staging: Flag requests as staging traffic
    :type staging: bool
    :param timeout: Timeout for the default transport, in seconds
    :type timeout: float
    :param sleep: Coroutine used to wait between attempts
    :type sleep: Callable[[float], Awaitable[None]]
    :raises ConfigurationError: If user or secret is empty
    """

    def __init__(
        self,
        user: str,
        secret: str,
        *,
        clock: Optional[Clock] = None,
        transport: Optional[Transport] = None,
        retry_policy: Optional[RetryPolicy] = None,
        base_url: str = ENDPOINT_URL,
        staging: bool = False,
        timeout: float = DEFAULT_TIMEOUT,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if not user or not user.strip():
            raise ConfigurationError("Emarsys API user is required", setting="EMARSYS_USER")
        if not secret:
            raise ConfigurationError(
                "Emarsys API secret is required", setting="EMARSYS_SECRET"
            )

        if clock is not None:
            self._signer = WSSESigner.with_fixed_clock(user, secret, clock)
        else:
            self._signer = WSSESigner(user, secret)

        self._owned_transport: Optional[HTTPTransport] = None
        if transport is None:
            self._owned_transport = create_transport(timeout)
            transport = self._owned_transport
        self._transport = transport

        self.retry_policy = retry_policy or RetryPolicy()
        self.base_url = base_url.rstrip("/")
        self.is_staging = staging
        self._sleep = sleep

    @classmethod
    def from_settings(
        cls,
        settings: Optional[Settings] = None,
        configure_logging: bool = False,
        **kwargs,
    ) -> "EmarsysClient":
        """Build a client from environment-backed settings.

        Keyword arguments override the values derived from ``settings``.
        With ``configure_logging`` the root logger is set up at
        ``settings.log_level`` with credential redaction.

        :raises ConfigurationError: If credentials are missing
        """
        settings = settings or Settings()
        if not settings.has_credentials:
            raise ConfigurationError(
                "Missing Emarsys credentials: set EMARSYS_USER and EMARSYS_SECRET"
            )
        if configure_logging:
            setup_secure_logging(settings.log_level)
        options: Dict[str, Any] = {
            "base_url": settings.api_base_url,
            "staging": settings.staging,
            "timeout": settings.request_timeout,
            "retry_policy": RetryPolicy(max_retries=settings.max_retries),
        }
        options.update(kwargs)
        return cls(settings.user, settings.secret, **options)

    @property
    def user(self) -> str:
        return self._signer.username

    def enable_staging(self, env_var: Optional[str] = None) -> "EmarsysClient":
        """Flag requests as staging traffic.

        Without ``env_var`` staging is switched on. Otherwise the named
        environment variable decides, and an unset or invalid value
        switches it off.

        :param env_var: Name of the environment variable holding the flag
        :type env_var: Optional[str]
        :return: This client
        """
        self.is_staging = resolve_staging(env_var)
        logger.debug(f"Staging traffic {'enabled' if self.is_staging else 'disabled'}")
        return self

    async def __aenter__(self) -> "EmarsysClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the default transport if this client created it."""
        if self._owned_transport is not None:
            await self._owned_transport.aclose()

    def build_url(self, path: str) -> str:
        return f"{self.base_url}{PATH_BASE}/{path.lstrip('/')}"

    async def request(
        self,
        method: str,
        path: str,
        json: Optional[Any] = None,
        params: Optional[Dict[str, Any]] = None,
        response_type: Optional[Type[T]] = None,
    ) -> Optional[T]:
        """Build a request against ``/api/v2`` and execute it with ``do``.

        :param method: HTTP method
        :type method: str
        :param path: Endpoint path relative to ``/api/v2``
        :type path: str
        :param json: Optional JSON request body
        :type json: Optional[Any]
        :param params: Optional query parameters
        :type params: Optional[Dict[str, Any]]
        :param response_type: Type the envelope ``data`` is validated into
        :type response_type: Optional[Type[T]]
        :return: Decoded payload
        """
        request = httpx.Request(method, self.build_url(path), json=json, params=params)
        return await self.do(request, response_type)

    async def do(
        self, request: httpx.Request, response_type: Optional[Type[T]] = None
    ) -> Optional[T]:
        """Execute ``request`` with signing, retries and envelope decoding.

        :param request: Prepared request; its headers are modified in place
        :type request: httpx.Request
        :param response_type: Type the envelope ``data`` is validated into;
                              ``None`` discards the payload
        :type response_type: Optional[Type[T]]
        :return: Decoded payload
        :raises TransportError: If the transport fails (never retried)
        :raises EnvelopeDecodeError: If a response body is not an envelope
        :raises ReplyError: If the API reports an error
        :raises PayloadDecodeError: If ``data`` does not match ``response_type``
        """
        request.headers["Content-Type"] = CONTENT_TYPE
        intervals = self.retry_policy.intervals()
        attempt = 0

        while True:
            attempt += 1
            try:
                result = await self._attempt(request, response_type)
            except EmarsysError as e:
                if not e.retryable:
                    logger.error(
                        f"{request.method} {request.url} failed permanently "
                        f"on attempt {attempt}: {e}"
                    )
                    raise
                delay = next(intervals, None)
                if delay is None:
                    logger.error(
                        f"{request.method} {request.url} failed after "
                        f"{attempt} attempts: {e}"
                    )
                    raise
                logger.info(
                    f"Retry {attempt}/{self.retry_policy.max_retries} after "
                    f"{delay:.2f}s for {request.method} {request.url}: {e}"
                )
                await self._sleep(delay)
                continue

            if attempt > 1:
                logger.info(f"Success after {attempt} attempts for {request.url}")
            return result

    async def _attempt(
        self, request: httpx.Request, response_type: Optional[Type[T]]
    ) -> Optional[T]:
        # signatures are time-bound, so every attempt gets a fresh one
        request.headers[WSSE_HEADER] = self._signer.sign()
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                f"Request headers: {sanitize_headers(dict(request.headers))}"
            )

        try:
            response = await self._transport(request)
        except httpx.HTTPError as e:
            raise TransportError(
                f"emarsys.client: failed to execute HTTP request: {e}",
                original_error=e,
            ) from e

        try:
            body = await response.aread()
        except httpx.HTTPError as e:
            raise TransportError(
                f"emarsys.client: failed to read HTTP response: {e}",
                original_error=e,
            ) from e
        finally:
            await self._close(response)

        logger.debug(f"Response {response.status_code} ({len(body)} bytes)")
        return decode_response(body, response.status_code, response_type)

    @staticmethod
    async def _close(response: httpx.Response) -> None:
        try:
            await response.aclose()
        except httpx.HTTPError as e:
            raise TransportError(
                f"emarsys.client: failed to close HTTP response: {e}",
                original_error=e,
            ) from e
