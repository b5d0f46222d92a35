"""HTTP transport layer with bounded timeouts and connection pooling."""

import asyncio
from typing import Any
from urllib.parse import urlparse, urlunparse

import httpx

from .exceptions import NetworkError, RequestTimeoutError, TransportError

CLIENT_VERSION = "0.1.0"
DEFAULT_TIMEOUT = 15.0


class Transport:
    """Async HTTP access to the messaging backend.

    ``http_transport`` may be any ``httpx.AsyncBaseTransport`` (a mock, an
    ASGI app, or a cancellable transport); by default a pooled
    ``httpx.AsyncHTTPTransport`` is created.
    """

    def __init__(self, base_url: str, token: str = "", timeout: float = DEFAULT_TIMEOUT,
                 http2: bool = True, http_transport: httpx.AsyncBaseTransport | None = None) -> None:
        self._base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._http2 = http2
        self._http_transport = http_transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def origin(self) -> str:
        parsed = urlparse(self._base_url)
        return urlunparse((parsed.scheme, parsed.netloc, "", "", "", ""))

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def has_token(self) -> bool:
        return bool(self._token)

    async def __aenter__(self) -> "Transport":
        if self._http_transport is None:
            self._http_transport = httpx.AsyncHTTPTransport(http2=self._http2,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20))
        self._client = httpx.AsyncClient(transport=self._http_transport, timeout=httpx.Timeout(self._timeout))
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    def url(self, path: str) -> str:
        return f"{self._base_url}/{path.lstrip('/')}" if path else self._base_url

    def _headers(self, send_credentials: bool = True) -> dict[str, str]:
        h = {"Content-Type": "application/json", "Accept": "application/json", "X-Client": f"dmrelay/{CLIENT_VERSION}"}
        if self._token:
            h["x-auth-token"] = self._token
            if send_credentials:
                h["Authorization"] = f"Bearer {self._token}"
        return h

    async def request(self, method: str, url: str, data: Any = None, send_credentials: bool = True) -> tuple[int, str]:
        """Send one request and return ``(status_code, body_text)``.

        Raises RequestTimeoutError or NetworkError; any HTTP status is returned.
        """
        if not self._client:
            raise TransportError("Transport not initialized")
        try:
            resp = await self._client.request(method, url, json=data, headers=self._headers(send_credentials))
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(f"{method} {url} timed out after {self._timeout}s", self._timeout) from e
        except httpx.RequestError as e:
            raise NetworkError(f"{method} {url} failed: {e.__class__.__name__}: {e}") from e
        return resp.status_code, resp.text

    async def raw_get(self, url: str) -> tuple[int, int]:
        """GET ``url`` straight through the HTTP transport.

        Skips the client's default headers, credentials, cookies and
        redirects. Returns ``(status_code, body_length)``.
        """
        if not self._client or self._http_transport is None:
            raise TransportError("Transport not initialized")
        req = httpx.Request("GET", url, extensions={"timeout": httpx.Timeout(self._timeout).as_dict()})
        try:
            resp = await asyncio.wait_for(self._http_transport.handle_async_request(req), self._timeout)
            try:
                body = await resp.aread()
            finally:
                await resp.aclose()
        except (asyncio.TimeoutError, httpx.TimeoutException) as e:
            raise RequestTimeoutError(f"GET {url} timed out after {self._timeout}s", self._timeout) from e
        except httpx.RequestError as e:
            raise NetworkError(f"GET {url} failed: {e.__class__.__name__}: {e}") from e
        return resp.status_code, len(body)
