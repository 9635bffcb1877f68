"""
bearerclient - Bearer token API client with transparent token refresh.

Wraps an async HTTP transport (httpx by default) to attach bearer tokens,
persist them in a cookie store, and refresh an expired access token once
when a request comes back 401.
"""

from .client import ApiClient
from .config import ClientPaths, ClientSettings
from .cookies import CookieStore, EncryptedCookieJar, MemoryCookieJar
from .credentials import UNSET, CredentialStore
from .exceptions import (
    ApiClientError,
    AuthenticationError,
    ConfigurationError,
    HTTPError,
    ProxyError,
    RequestTimeoutError,
    UnauthenticatedError,
    WrongCredentialsError,
)
from .logging import setup_logging
from .models import TokenResponse
from .params import serialize_params
from .transport import HttpTransport, RequestConfig, Transport

__version__ = "0.1.0"
__all__ = [
    # Client
    "ApiClient",
    "CredentialStore",
    "UNSET",
    # Collaborators
    "CookieStore",
    "MemoryCookieJar",
    "EncryptedCookieJar",
    "Transport",
    "HttpTransport",
    "RequestConfig",
    "serialize_params",
    # Configuration
    "ClientSettings",
    "ClientPaths",
    "TokenResponse",
    "setup_logging",
    # Exceptions
    "ApiClientError",
    "AuthenticationError",
    "ConfigurationError",
    "HTTPError",
    "ProxyError",
    "RequestTimeoutError",
    "UnauthenticatedError",
    "WrongCredentialsError",
]
