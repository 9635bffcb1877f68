"""Pydantic models for the OAuth token endpoint."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict


class APIBaseModel(BaseModel):
    """Base class for all API models."""

    def __str__(self) -> str:
        return self.model_dump_json(indent=2, exclude={"password"})


class PasswordGrant(APIBaseModel):
    """Body of a password grant token request."""

    grant_type: Literal["password"] = "password"
    email: str
    password: str


class RefreshTokenGrant(APIBaseModel):
    """Body of a refresh token grant request."""

    grant_type: Literal["refresh_token"] = "refresh_token"
    refresh_token: str


class TokenResponse(APIBaseModel):
    """
    Token endpoint response.

    Only `access_token` and `refresh_token` are used by the client, the rest
    is kept for callers that want it. Unknown fields are preserved.

    Attributes:
        access_token: New bearer token.
        refresh_token: New refresh token. Servers that don't rotate refresh
            tokens may leave it out.
        token_type: Usually "bearer".
        expires_in: Lifetime of the access token in seconds.
        scope: Granted scope.
        created_at: Unix timestamp the token was issued at.
    """

    model_config = ConfigDict(extra="allow")

    access_token: str | None = None
    refresh_token: str | None = None
    token_type: str | None = None
    expires_in: int | None = None
    scope: str | None = None
    created_at: int | None = None

    def credentials(self) -> dict[str, Any]:
        """The token fields the server actually sent, ready for set_credentials."""
        return self.model_dump(
            include={"access_token", "refresh_token"}, exclude_unset=True
        )
