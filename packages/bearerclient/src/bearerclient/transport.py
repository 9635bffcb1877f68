"""
HTTP transport used by `ApiClient`.

The dispatcher never talks to httpx directly. It hands a `RequestConfig` to
anything implementing the `Transport` protocol and gets an `httpx.Response`
back, or an `HTTPError` whose `status_code` tells it whether a token refresh
is worth trying. `HttpTransport` is the default implementation, built on
`httpx.AsyncClient`.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any, Protocol, runtime_checkable
import logging

import httpx

from .config import ResponseType
from .exceptions import ConfigurationError, HTTPError, ProxyError, RequestTimeoutError
from .params import ParamsSerializer


logger = logging.getLogger(__name__)

# Methods that never carry a request body
_BODYLESS_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})


@dataclass
class RequestConfig:
    """
    Everything needed to issue one request.

    Attributes:
        method: HTTP method, any case.
        url: Endpoint path, resolved against `base_url`, or an absolute URL.
        headers: Request headers.
        params: Query parameters.
        data: JSON body. Ignored for GET, HEAD and OPTIONS.
        params_serializer: Turns `params` into a query string. When None the
            params are handed to httpx as is.
        response_type: How the caller wants the body decoded.
        base_url: Base URL for relative `url` values.
    """

    method: str = "get"
    url: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    params: Mapping[str, Any] | None = None
    data: Any = None
    params_serializer: ParamsSerializer | None = None
    response_type: ResponseType = "json"
    base_url: str | None = None


@runtime_checkable
class Transport(Protocol):
    """What `ApiClient` needs from an HTTP client."""

    async def request(self, config: RequestConfig) -> httpx.Response: ...

    async def post(
        self, path: str, body: Any, config: RequestConfig | None = None
    ) -> httpx.Response: ...


def combine_urls(base_url: str | None, url: str) -> str:
    """
    Resolve `url` against `base_url`.

    Absolute URLs are returned untouched. Otherwise exactly one slash joins
    the two parts, so "https://api.test.com/" + "/users" and
    "https://api.test.com" + "users" both give "https://api.test.com/users".
    """
    if not base_url or url.startswith(("http://", "https://")):
        return url
    if not url:
        return base_url
    return base_url.rstrip("/") + "/" + url.lstrip("/")


def _append_query(url: str, query: str) -> str:
    if not query:
        return url
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}{query}"


def decode_response(response: httpx.Response, response_type: ResponseType = "json") -> Any:
    """
    Decode a response body according to `response_type`.

    Raises:
        ConfigurationError: For an unknown response type.
        HTTPError: If a JSON body can't be parsed.
    """
    if response_type == "json":
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON response (status {response.status_code}): {e}")
            raise HTTPError(
                f"Invalid JSON response: {e}",
                status_code=response.status_code,
                response_body=response.text,
                response=response,
            ) from e
    if response_type == "text":
        return response.text
    if response_type == "bytes":
        return response.content
    raise ConfigurationError(f"Unknown response type: {response_type!r}")


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text or None


class HttpTransport:
    """
    Default `Transport` built on `httpx.AsyncClient`.

    Example:
        >>> async with HttpTransport(proxy="proxy.example.com:8080") as transport:
        ...     config = RequestConfig(url="users", base_url="https://api.test.com")
        ...     response = await transport.request(config)
    """

    def __init__(
        self,
        proxy: str | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
        **kwargs: Any,
    ):
        """
        Initialize the transport.

        Args:
            proxy: Proxy URL in format "host:port" or "http://host:port".
            timeout: Request timeout in seconds. Defaults to 30.0.
            client: Existing httpx client to use. It is not closed by `close()`.
            **kwargs: Additional arguments passed to httpx.AsyncClient when
                the transport creates its own client.

        Raises:
            ConfigurationError: If proxy format is invalid.
        """
        self.proxy = proxy
        self._owns_client = client is None

        if client is None:
            if self.proxy is not None:
                try:
                    proxy_url = (
                        self.proxy
                        if self.proxy.startswith("http")
                        else f"http://{self.proxy}"
                    )
                except AttributeError as e:
                    raise ConfigurationError(f"Invalid proxy configuration: {e}") from e
                kwargs["proxy"] = proxy_url
                logger.debug(f"Proxy configured: {proxy_url}")

            kwargs.setdefault("timeout", timeout)
            client = httpx.AsyncClient(**kwargs)
            client.headers.update({"Accept": "application/json"})

        self.client = client

    async def request(self, config: RequestConfig) -> httpx.Response:
        """
        Perform an HTTP request.

        Args:
            config: The request to send.

        Returns:
            The httpx response, always with a 2xx status.

        Raises:
            HTTPError: If the server answers with an error status, or the
                request fails for any other transport reason.
            ProxyError: If there's a proxy-related connection issue.
            RequestTimeoutError: If the request times out.
        """
        method = config.method.upper()
        url = combine_urls(config.base_url, config.url)

        params = config.params
        if params and config.params_serializer is not None:
            url = _append_query(url, config.params_serializer(params))
            params = None

        request_kwargs: dict[str, Any] = {"headers": config.headers, "params": params}
        if method not in _BODYLESS_METHODS and config.data is not None:
            request_kwargs["json"] = config.data

        try:
            logger.debug(f"{method} {url}")
            response = await self.client.request(method, url, **request_kwargs)
            response.raise_for_status()

            logger.debug(f"Response status: {response.status_code}")
            return response

        except httpx.ProxyError as e:
            logger.error(f"Proxy error: {e}")
            raise ProxyError(f"Proxy connection failed: {e}") from e
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.warning(f"HTTP error {status} for {method} {url}")
            raise HTTPError(
                f"Request failed with status {status}",
                status_code=status,
                response_body=_error_body(e.response),
                response=e.response,
            ) from e
        except httpx.TimeoutException as e:
            logger.error(f"Request timeout: {e}")
            raise RequestTimeoutError(f"Request timed out: {e}") from e
        except httpx.HTTPError as e:
            logger.error(f"Request error: {e}")
            raise HTTPError(f"Request failed: {e}") from e

    async def post(
        self, path: str, body: Any, config: RequestConfig | None = None
    ) -> httpx.Response:
        """Convenience method for POST requests, reusing the settings of `config`."""
        base = config or RequestConfig()
        return await self.request(replace(base, method="post", url=path, data=body))

    async def close(self) -> None:
        """Close the underlying httpx client if this transport created it."""
        if self._owns_client:
            await self.client.aclose()
            logger.debug("Transport closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
