"""
CloudMemo Client - Session Credentials
========================================

What:  The bearer token, held by an explicit SessionContext that the API
       client and the editor are both handed.
How:   SessionContext caches the token in memory and mirrors every change
       into a CredentialStore, so a restarted client can pick the session up
       again until the server-side TTL expires it.
"""

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from cloudmemo.client.config import ClientSettings, client_settings

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Persistence for a single session token."""

    @abstractmethod
    def read(self) -> Optional[str]:
        """Return the stored token, or None."""

    @abstractmethod
    def write(self, token: str) -> None:
        """Replace the stored token."""

    @abstractmethod
    def clear(self) -> None:
        """Forget the stored token; a no-op when nothing is stored."""


class MemoryCredentialStore(CredentialStore):
    """Process-lifetime storage. Used by tests and one-shot scripts."""

    def __init__(self, token: Optional[str] = None):
        self._token = token

    def read(self) -> Optional[str]:
        return self._token

    def write(self, token: str) -> None:
        self._token = token

    def clear(self) -> None:
        self._token = None


class FileCredentialStore(CredentialStore):
    """
    Token in a single user-only file (mode 0600).

    An empty or unreadable file reads as "no token"; the user simply logs
    in again.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    def read(self) -> Optional[str]:
        try:
            token = self.path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning("Could not read credential file %s: %s", self.path, e)
            return None
        return token or None

    def write(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Created owner-only; chmod also tightens a pre-existing file
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        os.fchmod(fd, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(token)

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class SessionContext:
    """The client's single source for "who am I logged in as"."""

    def __init__(self, store: Optional[CredentialStore] = None):
        self._store = store or MemoryCredentialStore()
        self._token = self._store.read()

    @classmethod
    def from_settings(cls, settings: Optional[ClientSettings] = None) -> "SessionContext":
        """Session backed by the credential file named in client settings."""
        settings = settings or client_settings
        return cls(FileCredentialStore(settings.credential_path))

    @property
    def token(self) -> Optional[str]:
        return self._token

    @property
    def is_authenticated(self) -> bool:
        return bool(self._token)

    def begin(self, token: str) -> None:
        self._token = token
        self._store.write(token)
        logger.info("Session started")

    def end(self) -> None:
        if self._token is not None:
            logger.info("Session ended")
        self._token = None
        self._store.clear()
