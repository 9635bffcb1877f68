"""
Custom exceptions for the bearerclient package.

Transport failures are raised as `HTTPError` (or one of its subclasses) and
pass through `ApiClient` unchanged. The two authentication outcomes of the
token lifecycle get their own types so callers can branch on them.
"""

from typing import Any


class ApiClientError(Exception):
    """Base exception for all bearerclient errors."""

    def __init__(self, message: str, *args, **kwargs):
        super().__init__(message, *args)
        self.message = message
        self.details = kwargs


class HTTPError(ApiClientError):
    """Raised when an HTTP request fails."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: Any = None,
        response: Any = None,
    ):
        super().__init__(message, status_code=status_code, response_body=response_body)
        self.status_code = status_code
        self.response_body = response_body
        self.response = response


class ProxyError(HTTPError):
    """Raised when there's an issue with the proxy configuration or connection."""

    pass


class RequestTimeoutError(HTTPError):
    """Raised when a request times out."""

    pass


class ConfigurationError(ApiClientError):
    """Raised when there's an issue with client configuration."""

    pass


class AuthenticationError(ApiClientError):
    """Base class for the token lifecycle errors."""

    type: str = "authentication"


class UnauthenticatedError(AuthenticationError):
    """No valid session: the refresh failed or there is no token to use."""

    type = "unauthenticated"

    def __init__(self, message: str = "Not authenticated", **kwargs):
        super().__init__(message, **kwargs)


class WrongCredentialsError(AuthenticationError):
    """The token endpoint rejected the submitted credentials with a 401."""

    type = "wrong_credentials"

    def __init__(self, message: str = "Wrong credentials", **kwargs):
        super().__init__(message, **kwargs)
