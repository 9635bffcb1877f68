"""
Unit tests for CredentialStore.

Tests cover:
- Initialization from explicit tokens and from cookies
- set_credentials with values, None and UNSET
- reset_credentials and ready()
- Session rollback
"""

from bearerclient.cookies import MemoryCookieJar
from bearerclient.credentials import UNSET, CredentialStore


class TestCredentialStoreInitialization:
    """Tests for CredentialStore initialization."""

    def test_init_empty(self):
        """Test store without tokens or cookies."""
        store = CredentialStore()

        assert store.access_token is None
        assert store.refresh_token is None
        assert isinstance(store.cookies, MemoryCookieJar)
        assert store.ready() is False

    def test_init_from_cookies(self):
        """Test tokens are picked up from existing cookies."""
        jar = MemoryCookieJar({"access_token": "acc", "refresh_token": "ref"})

        store = CredentialStore(jar)

        assert store.access_token == "acc"
        assert store.refresh_token == "ref"
        assert store.ready() is True

    def test_explicit_tokens_win_over_cookies(self):
        """Test explicit tokens take precedence over cookie values."""
        jar = MemoryCookieJar({"access_token": "old", "refresh_token": "old-ref"})

        store = CredentialStore(jar, access_token="new")

        assert store.access_token == "new"
        assert store.refresh_token == "old-ref"

    def test_init_does_not_write_cookies(self):
        """Test explicit tokens are not mirrored until set_credentials."""
        jar = MemoryCookieJar()

        CredentialStore(jar, access_token="acc")

        assert jar.get("access_token") is None


class TestSetCredentials:
    """Tests for set_credentials."""

    def test_set_both_tokens(self):
        """Test values are stored in memory and cookies."""
        jar = MemoryCookieJar()
        store = CredentialStore(jar)

        store.set_credentials(access_token="acc", refresh_token="ref")

        assert store.access_token == "acc"
        assert store.refresh_token == "ref"
        assert jar.get("access_token") == "acc"
        assert jar.get("refresh_token") == "ref"
        assert jar.paths["access_token"] == "/"

    def test_none_clears_token_and_cookie(self):
        """Test None removes the in-memory token and its cookie."""
        jar = MemoryCookieJar()
        store = CredentialStore(jar)
        store.set_credentials(access_token="acc", refresh_token="ref")

        store.set_credentials(access_token=None)

        assert store.access_token is None
        assert "access_token" not in jar
        assert store.refresh_token == "ref"
        assert jar.get("refresh_token") == "ref"

    def test_unset_leaves_token_untouched(self):
        """Test omitted fields keep their current value."""
        jar = MemoryCookieJar()
        store = CredentialStore(jar)
        store.set_credentials(access_token="acc", refresh_token="ref")

        store.set_credentials(refresh_token="ref-2")

        assert store.access_token == "acc"
        assert store.refresh_token == "ref-2"
        assert jar.get("access_token") == "acc"

    def test_explicit_unset(self):
        """Test passing UNSET explicitly is the same as omitting it."""
        store = CredentialStore(access_token="acc")

        store.set_credentials(access_token=UNSET, refresh_token=UNSET)

        assert store.access_token == "acc"
        assert repr(UNSET) == "UNSET"

    def test_reset_credentials(self):
        """Test reset clears both tokens and cookies."""
        jar = MemoryCookieJar()
        store = CredentialStore(jar)
        store.set_credentials(access_token="acc", refresh_token="ref")

        store.reset_credentials()

        assert store.access_token is None
        assert store.refresh_token is None
        assert len(jar) == 0
        assert store.ready() is False

    def test_ready_only_checks_access_token(self):
        """Test ready() ignores the refresh token."""
        store = CredentialStore(refresh_token="ref")

        assert store.ready() is False

        store.set_credentials(access_token="acc")

        assert store.ready() is True


class TestRollbackSession:
    """Tests for rollback_session and has_rollback."""

    def test_rollback_restores_and_deletes_cookies(self):
        """Test rollback cookies are restored then removed."""
        jar = MemoryCookieJar(
            {
                "access_token": "impersonated",
                "rollback_access_token": "admin-acc",
                "rollback_refresh_token": "admin-ref",
            }
        )
        store = CredentialStore(jar)
        assert store.has_rollback() is True

        store.rollback_session()

        assert store.access_token == "admin-acc"
        assert store.refresh_token == "admin-ref"
        assert jar.get("access_token") == "admin-acc"
        assert "rollback_access_token" not in jar
        assert "rollback_refresh_token" not in jar
        assert store.has_rollback() is False

    def test_rollback_without_saved_session(self):
        """Test rolling back with no rollback cookies keeps the current session."""
        jar = MemoryCookieJar({"access_token": "acc", "refresh_token": "ref"})
        store = CredentialStore(jar)

        store.rollback_session()

        assert store.access_token == "acc"
        assert store.refresh_token == "ref"
        assert store.ready() is True
        assert jar.get("access_token") == "acc"
        assert jar.get("refresh_token") == "ref"

    def test_rollback_with_partial_session(self):
        """Test a missing rollback refresh token keeps the current one."""
        jar = MemoryCookieJar(
            {"refresh_token": "ref", "rollback_access_token": "admin-acc"}
        )
        store = CredentialStore(jar)

        store.rollback_session()

        assert store.access_token == "admin-acc"
        assert store.refresh_token == "ref"
        assert jar.get("refresh_token") == "ref"
        assert "rollback_access_token" not in jar
