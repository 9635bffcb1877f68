"""
# Bearer token API client

`ApiClient` sends requests through a `Transport`, attaches the stored access
token as `Authorization: bearer <token>`, and recovers from an expired token
once per call: a 401 triggers a refresh grant against the OAuth token endpoint
and the original request is retried a single time.

## Usage:
```python
async with ApiClient(api_url="https://api.example.com/") as api:
    await api.request_oauth_token("user@example.com", "secret")
    projects = await api.get("projects", params={"filter": {"archived": False}})
    await api.post("projects", {"name": "New"})
    await api.sign_out()
```

## Errors:
- `WrongCredentialsError`: the token endpoint answered 401
- `UnauthenticatedError`: a 401 could not be recovered by refreshing
- anything else raised by the transport reaches the caller untouched
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from .config import ClientPaths, ClientSettings
from .cookies import CookieStore
from .credentials import UNSET, CredentialStore, _Unset
from .exceptions import HTTPError, UnauthenticatedError, WrongCredentialsError
from .logging import mask_token
from .models import PasswordGrant, RefreshTokenGrant, TokenResponse
from .params import ParamsSerializer, serialize_params
from .transport import HttpTransport, RequestConfig, Transport, decode_response

logger = logging.getLogger(__name__)

UNAUTHORIZED = 401


class ApiClient:
    """
    # Bearer token API client

    Owns one `CredentialStore` (the session) and one `Transport`.

    ## Attributes:
    - `settings` (ClientSettings): base URL, default headers, paths, response type
    - `credentials` (CredentialStore): access/refresh tokens mirrored to cookies
    - `transport` (Transport): the HTTP client requests are delegated to

    ## Concurrency:
    Calls that hit a 401 while a refresh is already running wait for that
    refresh instead of starting their own. Each call still retries at most once.
    """

    def __init__(
        self,
        access_token: str | None = None,
        refresh_token: str | None = None,
        api_url: str | None = None,
        transport: Transport | None = None,
        headers: Mapping[str, str] | None = None,
        paths: ClientPaths | Mapping[str, str] | None = None,
        cookies: CookieStore | None = None,
        settings: ClientSettings | None = None,
        params_serializer: ParamsSerializer | None = serialize_params,
    ) -> None:
        """
        Initialize the client.

        Args:
            access_token: Initial access token. Falls back to the
                `access_token` cookie.
            refresh_token: Initial refresh token. Falls back to the
                `refresh_token` cookie.
            api_url: Base URL, overrides `settings.base_url`.
            transport: HTTP transport to use. Defaults to an `HttpTransport`
                built from `settings`; an injected transport is not closed
                by `close()`.
            headers: Default headers added to every request.
            paths: Overrides for the token and sign out paths.
            cookies: Cookie store for the tokens. Defaults to an in-memory jar.
            settings: Base configuration. Defaults to `ClientSettings()`.
            params_serializer: Query string serializer. None leaves params
                to the transport.
        """
        self.settings = settings.model_copy(deep=True) if settings else ClientSettings()
        if api_url:
            self.settings.base_url = api_url
        if headers:
            self.settings.headers.update(headers)
        if paths:
            overrides = paths.model_dump() if isinstance(paths, ClientPaths) else dict(paths)
            self.settings.paths = self.settings.paths.model_copy(update=overrides)

        self.credentials = CredentialStore(
            cookies, access_token=access_token, refresh_token=refresh_token
        )

        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpTransport(
            proxy=self.settings.proxy, timeout=self.settings.timeout
        )
        self.params_serializer = params_serializer
        self._refresh_task: asyncio.Future | None = None

        logger.info(f"Client initialized with base URL: {self.settings.base_url}")

    # Credential Store

    @property
    def access_token(self) -> str | None:
        return self.credentials.access_token

    @property
    def refresh_token(self) -> str | None:
        return self.credentials.refresh_token

    @property
    def headers(self) -> dict[str, str]:
        return self.settings.headers

    @property
    def paths(self) -> ClientPaths:
        return self.settings.paths

    @property
    def base_url(self) -> str | None:
        return self.settings.base_url

    def ready(self) -> bool:
        """Check whether an access token is present."""
        return self.credentials.ready()

    def set_credentials(
        self,
        access_token: str | None | _Unset = UNSET,
        refresh_token: str | None | _Unset = UNSET,
    ) -> None:
        """See `CredentialStore.set_credentials`."""
        self.credentials.set_credentials(
            access_token=access_token, refresh_token=refresh_token
        )

    def reset_credentials(self) -> None:
        self.credentials.reset_credentials()

    def rollback_session(self) -> None:
        self.credentials.rollback_session()

    def clear_session(self) -> bool:
        """
        Drop the current tokens, then restore the rollback session if one exists.

        Returns:
            Always True.
        """
        self.reset_credentials()
        if self.credentials.has_rollback():
            self.rollback_session()
        return True

    # Request Dispatcher

    def _request_config(self, **overrides: Any) -> RequestConfig:
        config = RequestConfig(
            headers=dict(self.headers),
            params_serializer=self.params_serializer,
            response_type=self.settings.response_type,
            base_url=self.base_url,
        )
        for key, value in overrides.items():
            setattr(config, key, value)
        return config

    async def get(
        self, endpoint: str, params: Mapping[str, Any] | None = None, **opts: Any
    ) -> Any:
        """Convenience method for GET requests."""
        return await self.send(endpoint, method="get", params=params or {}, **opts)

    async def post(self, endpoint: str, payload: Any = None, **opts: Any) -> Any:
        """Convenience method for POST requests."""
        return await self.send(endpoint, method="post", payload=payload, **opts)

    async def put(self, endpoint: str, payload: Any = None, **opts: Any) -> Any:
        """Convenience method for PUT requests."""
        return await self.send(endpoint, method="put", payload=payload, **opts)

    async def patch(self, endpoint: str, payload: Any = None, **opts: Any) -> Any:
        """Convenience method for PATCH requests."""
        return await self.send(endpoint, method="patch", payload=payload, **opts)

    async def delete(self, endpoint: str, payload: Any = None, **opts: Any) -> Any:
        """Convenience method for DELETE requests."""
        return await self.send(endpoint, method="delete", payload=payload, **opts)

    async def send(
        self,
        endpoint: str,
        method: str = "get",
        params: Mapping[str, Any] | None = None,
        payload: Any = None,
        headers: Mapping[str, str] | None = None,
        authentication: bool | None = None,
        refresh_authentication: bool = True,
    ) -> Any:
        """
        Send a request and return the decoded response body.

        Args:
            endpoint: Path relative to the base URL, or an absolute URL.
            method: HTTP method.
            params: Query parameters, nested mappings and lists allowed.
            payload: JSON body. Defaults to an empty object.
            headers: Extra headers for this request, on top of the defaults.
            authentication: Attach the bearer token. Defaults to whether a
                token is stored when the request is sent.
            refresh_authentication: Refresh and retry once on a 401.

        Returns:
            The response body decoded per `settings.response_type`.

        Raises:
            UnauthenticatedError: A 401 could not be recovered, or
                `authentication=True` was asked for without a token.
            HTTPError: Any other failure, unchanged.
        """
        request = {
            "endpoint": endpoint,
            "method": method,
            "params": params,
            "payload": {} if payload is None else payload,
            "headers": headers,
            "authentication": authentication,
        }

        try:
            return await self._dispatch(**request)
        except HTTPError as error:
            if error.status_code != UNAUTHORIZED or not refresh_authentication:
                raise

            logger.info(f"{method.upper()} {endpoint} returned 401, refreshing token")
            try:
                await self._refresh_once()
                return await self._dispatch(**request)
            except Exception as retry_error:
                logger.warning(f"Could not recover from 401: {retry_error!r}")
                raise UnauthenticatedError(
                    f"{method.upper()} {endpoint} is not authenticated",
                    status_code=error.status_code,
                ) from error

    async def _dispatch(
        self,
        endpoint: str,
        method: str,
        params: Mapping[str, Any] | None,
        payload: Any,
        headers: Mapping[str, str] | None,
        authentication: bool | None,
    ) -> Any:
        request_headers = dict(self.headers)
        if headers:
            request_headers.update(headers)

        if authentication is None:
            authentication = bool(self.access_token)

        if authentication:
            if not self.access_token:
                raise UnauthenticatedError(
                    f"{method.upper()} {endpoint} requires an access token"
                )
            request_headers["Authorization"] = f"bearer {self.access_token}"

        config = self._request_config(
            method=method,
            url=endpoint,
            headers=request_headers,
            params=params,
            data=payload,
        )
        response = await self.transport.request(config)
        return decode_response(response, config.response_type)

    async def _refresh_once(self) -> None:
        # Concurrent 401s share the refresh that is already in flight
        if self._refresh_task is None or self._refresh_task.done():
            self._refresh_task = asyncio.ensure_future(self.refresh_oauth_token())
        else:
            logger.debug("Token refresh already in flight, waiting for it")
        await asyncio.shield(self._refresh_task)

    # OAuth Token Exchange

    async def request_oauth_token(self, email: str, password: str) -> TokenResponse:
        """
        Log in with the password grant and store the returned tokens.

        Raises:
            WrongCredentialsError: The token endpoint answered 401. Stored
                tokens are left untouched.
            HTTPError: Any other failure.
        """
        logger.info(f"Requesting OAuth token for {email}")
        return await self._exchange_token(PasswordGrant(email=email, password=password))

    async def refresh_oauth_token(self) -> TokenResponse:
        """
        Exchange the stored refresh token for new tokens.

        Raises:
            UnauthenticatedError: No refresh token is stored.
            WrongCredentialsError: The token endpoint answered 401.
            HTTPError: Any other failure.
        """
        if not self.refresh_token:
            raise UnauthenticatedError("No refresh token available")

        logger.info(f"Refreshing OAuth token ({mask_token(self.refresh_token)})")
        return await self._exchange_token(
            RefreshTokenGrant(refresh_token=self.refresh_token)
        )

    async def _exchange_token(
        self, grant: PasswordGrant | RefreshTokenGrant
    ) -> TokenResponse:
        config = self._request_config(response_type="json")
        try:
            response = await self.transport.post(
                self.paths.oauth_token_path, grant.model_dump(), config
            )
        except HTTPError as error:
            if error.status_code == UNAUTHORIZED:
                logger.warning(f"Token endpoint rejected the {grant.grant_type} grant")
                raise WrongCredentialsError(status_code=error.status_code) from error
            raise

        body = decode_response(response, "json")
        try:
            tokens = TokenResponse.model_validate(body or {})
        except ValidationError as e:
            raise HTTPError(
                f"Unexpected token response: {e}",
                status_code=response.status_code,
                response_body=body,
                response=response,
            ) from e

        self.set_credentials(**tokens.credentials())
        logger.info("OAuth tokens stored")
        return tokens

    async def sign_out(self) -> bool:
        """
        Tell the server to end the session, then clear it locally.

        The local session is cleared even when the call fails. A 401 means
        the server side session is already gone and is not an error.

        Returns:
            Always True.
        """
        try:
            await self.send(
                self.paths.sign_out_path, method="delete", refresh_authentication=False
            )
        except HTTPError as error:
            if error.status_code != UNAUTHORIZED:
                raise
            logger.info("Server session already expired")
        finally:
            self.clear_session()

        logger.info("Signed out")
        return True

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport and isinstance(self.transport, HttpTransport):
            await self.transport.close()
        logger.info("Client closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
