"""
# Credential Store

Holds the access/refresh token pair of one logical session and mirrors it into
a cookie store.

## Session States:
- **Unauthenticated**: no access token, `ready()` is False
- **Authenticated**: access token present (after a token exchange)
- **Rolled back**: tokens restored from the `rollback_*` cookies, which then
  behaves as either of the above depending on what was saved

## Updating tokens:
`set_credentials` distinguishes three kinds of values per field:
- a string stores the token and writes the cookie
- `None` clears the token and removes the cookie
- `UNSET` (the default) leaves the field and its cookie alone
"""

import enum
import logging
from typing import Final

from .cookies import CookieStore, MemoryCookieJar
from .logging import mask_token

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
ROLLBACK_ACCESS_TOKEN_COOKIE = "rollback_access_token"
ROLLBACK_REFRESH_TOKEN_COOKIE = "rollback_refresh_token"
COOKIE_PATH = "/"

logger = logging.getLogger(__name__)


class _Unset(enum.Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Final = _Unset.UNSET


class CredentialStore:
    """
    Access/refresh token pair backed by a cookie store.

    Attributes:
        access_token: Current bearer token, or None.
        refresh_token: Current refresh token, or None.
        cookies: Cookie store the tokens are mirrored into.

    Example:
        >>> store = CredentialStore(MemoryCookieJar())
        >>> store.set_credentials(access_token="abc", refresh_token="def")
        >>> store.ready()
        True
        >>> store.reset_credentials()
        >>> store.ready()
        False
    """

    def __init__(
        self,
        cookies: CookieStore | None = None,
        access_token: str | None = None,
        refresh_token: str | None = None,
    ) -> None:
        """
        Initialize the store.

        Explicit tokens win; otherwise the values already present in the
        cookie store are picked up. Nothing is written to the cookies here.

        Args:
            cookies: Cookie store to mirror tokens into. Defaults to a new
                `MemoryCookieJar`.
            access_token: Initial access token.
            refresh_token: Initial refresh token.
        """
        self.cookies: CookieStore = cookies if cookies is not None else MemoryCookieJar()
        self.access_token: str | None = (
            access_token or self.cookies.get(ACCESS_TOKEN_COOKIE) or None
        )
        self.refresh_token: str | None = (
            refresh_token or self.cookies.get(REFRESH_TOKEN_COOKIE) or None
        )

        if self.access_token:
            logger.debug(f"Credentials loaded (access={mask_token(self.access_token)})")

    def ready(self) -> bool:
        """Check whether an access token is present."""
        return self.access_token is not None

    def set_credentials(
        self,
        access_token: str | None | _Unset = UNSET,
        refresh_token: str | None | _Unset = UNSET,
    ) -> None:
        """
        Update tokens in memory and in the cookie store.

        Args:
            access_token: New access token, None to clear it, UNSET to keep it.
            refresh_token: New refresh token, None to clear it, UNSET to keep it.
        """
        if access_token is not UNSET:
            self.access_token = access_token
            self._write_cookie(ACCESS_TOKEN_COOKIE, access_token)

        if refresh_token is not UNSET:
            self.refresh_token = refresh_token
            self._write_cookie(REFRESH_TOKEN_COOKIE, refresh_token)

        logger.debug(
            f"Credentials updated (access={mask_token(self.access_token)}, "
            f"refresh={mask_token(self.refresh_token)})"
        )

    def _write_cookie(self, name: str, value: str | None) -> None:
        if value is None:
            self.cookies.remove(name)
        else:
            self.cookies.set(name, value, path=COOKIE_PATH)

    def reset_credentials(self) -> None:
        """Clear both tokens and their cookies."""
        self.set_credentials(access_token=None, refresh_token=None)
        logger.info("Credentials reset")

    def _saved_cookie(self, name: str) -> str | _Unset:
        value = self.cookies.get(name)
        return value if value is not None else UNSET

    def has_rollback(self) -> bool:
        """Check whether a rollback session is saved in the cookies."""
        return bool(self.cookies.get(ROLLBACK_ACCESS_TOKEN_COOKIE))

    def rollback_session(self) -> None:
        """
        Restore the tokens saved in the rollback cookies, then delete them.

        A missing rollback cookie leaves that token as it is.
        """
        self.set_credentials(
            access_token=self._saved_cookie(ROLLBACK_ACCESS_TOKEN_COOKIE),
            refresh_token=self._saved_cookie(ROLLBACK_REFRESH_TOKEN_COOKIE),
        )

        self.cookies.remove(ROLLBACK_ACCESS_TOKEN_COOKIE)
        self.cookies.remove(ROLLBACK_REFRESH_TOKEN_COOKIE)
        logger.info(f"Session rolled back (authenticated={self.ready()})")
