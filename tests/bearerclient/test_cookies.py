"""
Unit tests for the cookie stores.

Tests cover:
- MemoryCookieJar get/set/remove
- EncryptedCookieJar persistence, encryption and corrupted files
"""

from bearerclient.cookies import CookieStore, EncryptedCookieJar, MemoryCookieJar


class TestMemoryCookieJar:
    """Tests for MemoryCookieJar."""

    def test_set_and_get(self):
        """Test a cookie can be read back."""
        jar = MemoryCookieJar()

        jar.set("access_token", "abc")

        assert jar.get("access_token") == "abc"
        assert jar.paths["access_token"] == "/"

    def test_set_with_path(self):
        """Test the cookie path is recorded."""
        jar = MemoryCookieJar()

        jar.set("access_token", "abc", path="/api")

        assert jar.paths["access_token"] == "/api"

    def test_get_missing(self):
        """Test missing cookies read as None."""
        assert MemoryCookieJar().get("nope") is None

    def test_remove(self):
        """Test remove deletes the cookie and is safe for unknown names."""
        jar = MemoryCookieJar({"access_token": "abc"})

        jar.remove("access_token")
        jar.remove("never_set")

        assert jar.get("access_token") is None
        assert len(jar) == 0

    def test_satisfies_protocol(self):
        """Test the jars implement the CookieStore protocol."""
        assert isinstance(MemoryCookieJar(), CookieStore)


class TestEncryptedCookieJar:
    """Tests for EncryptedCookieJar."""

    def test_creates_storage_files(self, tmp_path):
        """Test the key is created up front and the data file on first write."""
        jar = EncryptedCookieJar(tmp_path / "store")

        assert jar.key_file.exists()
        assert not jar.cookie_file.exists()

        jar.set("access_token", "abc")

        assert jar.cookie_file.exists()

    def test_persists_between_instances(self, tmp_path):
        """Test a new jar on the same directory sees saved cookies."""
        jar = EncryptedCookieJar(tmp_path)
        jar.set("access_token", "abc", path="/")
        jar.set("refresh_token", "def")

        reopened = EncryptedCookieJar(tmp_path)

        assert reopened.get("access_token") == "abc"
        assert reopened.get("refresh_token") == "def"
        assert reopened.paths["access_token"] == "/"

    def test_remove_is_persisted(self, tmp_path):
        """Test removed cookies stay removed after reload."""
        jar = EncryptedCookieJar(tmp_path)
        jar.set("access_token", "abc")
        jar.remove("access_token")

        assert EncryptedCookieJar(tmp_path).get("access_token") is None

    def test_no_plaintext_on_disk(self, tmp_path):
        """Test token values are not written in plaintext."""
        jar = EncryptedCookieJar(tmp_path)
        jar.set("access_token", "super-secret-token")

        raw = jar.cookie_file.read_bytes()

        assert b"super-secret-token" not in raw
        assert b"access_token" not in raw

    def test_reload_picks_up_other_writer(self, tmp_path):
        """Test reload() sees changes made by another jar."""
        reader = EncryptedCookieJar(tmp_path)
        writer = EncryptedCookieJar(tmp_path)

        writer.set("access_token", "abc")
        assert reader.get("access_token") is None

        reader.reload()
        assert reader.get("access_token") == "abc"

    def test_corrupted_file_is_ignored(self, tmp_path):
        """Test an undecryptable file loads as an empty jar."""
        EncryptedCookieJar(tmp_path).set("access_token", "abc")
        (tmp_path / "cookies.enc").write_bytes(b"not a fernet token")

        jar = EncryptedCookieJar(tmp_path)

        assert len(jar) == 0

    def test_clear(self, tmp_path):
        """Test clear() empties the jar and deletes the data file."""
        jar = EncryptedCookieJar(tmp_path)
        jar.set("access_token", "abc")

        jar.clear()

        assert len(jar) == 0
        assert not jar.cookie_file.exists()
        assert jar.key_file.exists()
