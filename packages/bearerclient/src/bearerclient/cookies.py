"""
# Cookie storage for session tokens

`ApiClient` mirrors its tokens into a cookie store so a session survives the
process that created it. Anything with `get`, `set` and `remove` works as a
store; two implementations ship with the package:

- `MemoryCookieJar`: plain dict, lives as long as the object does
- `EncryptedCookieJar`: Fernet encrypted file on disk, shared between runs

## Storage Structure (EncryptedCookieJar):
```
~/.bearerclient/           # Storage directory (mode 0o700)
├── key.enc                # Encryption key (mode 0o600)
└── cookies.enc            # Encrypted cookie data (mode 0o600)
```
"""

import json
import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from cryptography.fernet import Fernet, InvalidToken

# 0o700 = Owner has read/write/execute, others have no access
DIR_PERMISSIONS = 0o700
# 0o600 = Owner has read/write, others have no access
FILE_PERMISSIONS = 0o600

DEFAULT_COOKIE_PATH = "/"

logger = logging.getLogger(__name__)


@runtime_checkable
class CookieStore(Protocol):
    """Minimal cookie storage interface used by `CredentialStore`."""

    def get(self, name: str) -> str | None: ...

    def set(self, name: str, value: str, path: str = DEFAULT_COOKIE_PATH) -> None: ...

    def remove(self, name: str) -> None: ...


class MemoryCookieJar:
    """
    # In-memory Cookie Jar

    Dict backed cookie store. Values are kept together with the path they were
    set for.
    """

    def __init__(self, cookies: dict[str, str] | None = None) -> None:
        self.cookies: dict[str, str] = {}
        self.paths: dict[str, str] = {}
        for name, value in (cookies or {}).items():
            self.set(name, value)

    def get(self, name: str) -> str | None:
        return self.cookies.get(name)

    def set(self, name: str, value: str, path: str = DEFAULT_COOKIE_PATH) -> None:
        self.cookies[name] = value
        self.paths[name] = path
        logger.debug(f"Cookie '{name}' set (path={path})")

    def remove(self, name: str) -> None:
        """Remove a cookie. Safe to call for names that were never set."""
        self.cookies.pop(name, None)
        self.paths.pop(name, None)
        logger.debug(f"Cookie '{name}' removed")

    def __contains__(self, name: object) -> bool:
        return name in self.cookies

    def __len__(self) -> int:
        return len(self.cookies)


class EncryptedCookieJar(MemoryCookieJar):
    """
    # Encrypted On-disk Cookie Jar

    Same interface as `MemoryCookieJar`, but every change is written to disk,
    encrypted with Fernet (AES-128 in CBC mode with HMAC authentication).
    Two jars pointed at the same directory see each other's tokens after a
    `reload()`.

    ## Security Features:
    - **Encryption**: tokens are never written in plaintext
    - **File Permissions**: storage directory and files are owner only (Unix)
    - **Key Management**: key generated on first use and stored next to the data

    ## Example:
    ```python
    jar = EncryptedCookieJar()
    client = ApiClient(api_url="https://api.example.com/", cookies=jar)
    ```
    """

    def __init__(self, storage_dir: str | Path | None = None) -> None:
        """
        Initialize the jar and load any cookies saved by a previous run.

        ## Args:
        - `storage_dir` (str | Path, optional): Directory for the encrypted files.
          Defaults to `~/.bearerclient`.
        """
        super().__init__()
        self.storage_dir = Path(storage_dir or Path.home() / ".bearerclient")
        self.storage_dir.mkdir(parents=True, exist_ok=True, mode=DIR_PERMISSIONS)

        self.cookie_file = self.storage_dir / "cookies.enc"
        self.key_file = self.storage_dir / "key.enc"

        self._initialize_encryption_key()
        self.reload()

    def _initialize_encryption_key(self) -> None:
        if self.key_file.exists():
            with open(self.key_file, "rb") as f:
                self.key = f.read()
        else:
            self.key = Fernet.generate_key()
            with open(self.key_file, "wb") as f:
                f.write(self.key)
            os.chmod(self.key_file, FILE_PERMISSIONS)
            logger.debug("Generated new cookie encryption key")

        self.cipher_suite = Fernet(self.key)

    def reload(self) -> None:
        """
        Replace the in-memory cookies with the ones on disk.

        A missing file means no cookies. A file that can't be decrypted
        (corrupted, or written with another key) is logged and ignored.
        """
        self.cookies = {}
        self.paths = {}

        if not self.cookie_file.exists():
            logger.debug("No saved cookies found in storage")
            return

        with open(self.cookie_file, "rb") as f:
            encrypted_data = f.read()

        try:
            data = json.loads(self.cipher_suite.decrypt(encrypted_data).decode("utf-8"))
        except (InvalidToken, ValueError) as e:
            logger.error(f"Failed to load saved cookies: {e!r}")
            return

        for name, entry in data.items():
            self.cookies[name] = entry["value"]
            self.paths[name] = entry.get("path", DEFAULT_COOKIE_PATH)

        logger.debug(f"Loaded {len(self.cookies)} cookies from encrypted storage")

    def _save(self) -> None:
        data = {
            name: {"value": value, "path": self.paths.get(name, DEFAULT_COOKIE_PATH)}
            for name, value in self.cookies.items()
        }
        encrypted_data = self.cipher_suite.encrypt(json.dumps(data).encode("utf-8"))

        with open(self.cookie_file, "wb") as f:
            f.write(encrypted_data)
        os.chmod(self.cookie_file, FILE_PERMISSIONS)

    def set(self, name: str, value: str, path: str = DEFAULT_COOKIE_PATH) -> None:
        super().set(name, value, path)
        self._save()

    def remove(self, name: str) -> None:
        if name not in self.cookies:
            return
        super().remove(name)
        self._save()

    def clear(self) -> None:
        """Delete every cookie, including the file on disk. Keeps the key."""
        self.cookies = {}
        self.paths = {}
        if self.cookie_file.exists():
            self.cookie_file.unlink()
            logger.debug("Saved cookies deleted from storage")
