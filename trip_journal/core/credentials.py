"""
Credential persistence.

The auth token lives in the platform's secure store via ``keyring`` (macOS
Keychain, Windows Credential Locker, Secret Service). A plain JSON preference
file (mode 0o600) backs the secondary, plain-text token holder.
"""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import keyring
from keyring.errors import KeyringError, PasswordDeleteError

from trip_journal.core.types import AuthToken

logger = logging.getLogger(__name__)

DEFAULT_SERVICE = "trip_journal"
TOKEN_KEY = "auth_token"


class CredentialStore(ABC):
    """Persists a single auth token."""

    @abstractmethod
    def save(self, token: AuthToken) -> None:
        """Store the token, replacing any previous one."""

    @abstractmethod
    def load(self) -> AuthToken | None:
        """Return the stored token, or None if absent or unreadable."""

    @abstractmethod
    def delete(self) -> None:
        """Remove the stored token (no-op when absent)."""


class KeyringCredentialStore(CredentialStore):
    """Token storage in the OS keyring under a fixed service/key pair."""

    def __init__(self, service: str | None = None, key: str = TOKEN_KEY, backend: Any = None):
        self.service = service or os.environ.get("TRIP_JOURNAL_KEYRING_SERVICE", DEFAULT_SERVICE)
        self.key = key
        self._backend = backend

    @property
    def backend(self) -> Any:
        if self._backend is None:
            self._backend = keyring.get_keyring()
        return self._backend

    def save(self, token: AuthToken) -> None:
        # set_password upserts, so a second save replaces the first
        self.backend.set_password(self.service, self.key, json.dumps(token.to_dict()))

    def load(self) -> AuthToken | None:
        try:
            raw = self.backend.get_password(self.service, self.key)
        except KeyringError as e:
            logger.warning("Could not read token from keyring: %s", e)
            return None
        if raw is None:
            return None
        try:
            return AuthToken.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring corrupt token in keyring: %s", e)
            return None

    def delete(self) -> None:
        try:
            self.backend.delete_password(self.service, self.key)
        except PasswordDeleteError:
            pass


# =============================================================================
# Preferences
# =============================================================================


def default_preferences_path() -> Path:
    """Preference file location (TRIP_JOURNAL_PREFERENCES overrides)."""
    env_path = os.environ.get("TRIP_JOURNAL_PREFERENCES")
    if env_path:
        return Path(env_path)
    return Path.home() / ".trip_journal" / "preferences.json"


class PreferenceStore:
    """
    Small string key/value store kept in a JSON file.

    The file is written with mode 0o600 so only the current user can read it.
    """

    def __init__(self, path: Path | str | None = None):
        self.path = Path(path) if path is not None else default_preferences_path()

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (ValueError, OSError) as e:
            logger.warning("Could not read preferences %s: %s", self.path, e)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        self.path.chmod(0o600)

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)
