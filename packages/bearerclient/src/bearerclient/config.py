"""
Client settings.

`ClientSettings` gathers everything `ApiClient` and `HttpTransport` need to
know about the API they talk to. Build it directly, or from environment
variables with `ClientSettings.from_env()`:

    BEARERCLIENT_API_URL=https://api.example.com/
    BEARERCLIENT_TIMEOUT=10
    BEARERCLIENT_PROXY=proxy.example.com:8080
    BEARERCLIENT_OAUTH_TOKEN_PATH=oauth/token
    BEARERCLIENT_SIGN_OUT_PATH=sign_out
"""

import logging
import os
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ResponseType = Literal["json", "text", "bytes"]


class ClientPaths(BaseModel):
    """Endpoint paths, relative to the base URL."""

    oauth_token_path: str = "oauth/token"
    sign_out_path: str = "sign_out"


class ClientSettings(BaseModel):
    """
    Configuration shared by the dispatcher and the default transport.

    Attributes:
        base_url: Base URL every endpoint is resolved against.
        headers: Default headers sent with every request.
        paths: Token and sign out endpoint paths.
        response_type: How response bodies are decoded.
        timeout: Request timeout in seconds.
        proxy: Proxy as "host:port" or a full URL.
    """

    base_url: str | None = None
    headers: dict[str, str] = Field(default_factory=dict)
    paths: ClientPaths = Field(default_factory=ClientPaths)
    response_type: ResponseType = "json"
    timeout: float = 30.0
    proxy: str | None = None

    @field_validator("proxy")
    @classmethod
    def _normalize_proxy(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        if not value:
            return None
        return value if value.startswith("http") else f"http://{value}"

    @classmethod
    def from_env(cls, prefix: str = "BEARERCLIENT_") -> "ClientSettings":
        """
        Build settings from environment variables.

        Unset variables fall back to the defaults.

        Raises:
            ConfigurationError: If a variable holds an invalid value.
        """
        values: dict = {}
        paths: dict = {}

        api_url = os.getenv(f"{prefix}API_URL")
        if api_url:
            values["base_url"] = api_url

        timeout = os.getenv(f"{prefix}TIMEOUT")
        if timeout:
            values["timeout"] = timeout

        proxy = os.getenv(f"{prefix}PROXY")
        if proxy:
            values["proxy"] = proxy

        oauth_token_path = os.getenv(f"{prefix}OAUTH_TOKEN_PATH")
        if oauth_token_path:
            paths["oauth_token_path"] = oauth_token_path

        sign_out_path = os.getenv(f"{prefix}SIGN_OUT_PATH")
        if sign_out_path:
            paths["sign_out_path"] = sign_out_path

        if paths:
            values["paths"] = paths

        try:
            settings = cls(**values)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid client settings: {e}") from e

        logger.debug(f"Settings loaded from environment (prefix={prefix})")
        return settings
