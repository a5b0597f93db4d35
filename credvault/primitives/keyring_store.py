"""Structured key store backed by the OS keyring.

Platform Support:
- Linux: Secret Service API (GNOME Keyring, KWallet)
- macOS: Keychain
- Windows: Windows Credential Manager (per-entry size ceiling, see the
  legacy backend)

Entries are keyed by (name, username) exactly as the keyring API keys them.
The keyring API has no enumeration call, so the store keeps an index of the
(name, username) pairs it has written in one extra keyring entry.
"""

from __future__ import annotations

import json
from typing import cast

import keyring
import structlog
from keyring.backends import fail
from keyring.backends.chainer import ChainerBackend
from keyring.errors import KeyringError, PasswordDeleteError

from credvault.exceptions import BackendNotAvailableError, PrimitiveFailure
from credvault.models import StoredEntry

log = structlog.get_logger(__name__)

INDEX_USERNAME = "__index__"
WINDOWS_BACKEND_MODULE = "keyring.backends.Windows"


class KeyringStore:
    """OS-level credential storage using the system keyring.

    Example:
        >>> store = KeyringStore(namespace="credvault")
        >>> store.write("github.com", "alice", "ghp_abc123")
        >>> store.read("github.com", "alice").secret
        'ghp_abc123'
        >>> store.delete("github.com", "alice")
        True
    """

    def __init__(self, namespace: str = "credvault") -> None:
        """Initialize keyring store.

        Args:
            namespace: Prefix for every keyring service name, keeping these
                entries apart from other applications' credentials
        """
        self.namespace = namespace

    @property
    def name(self) -> str:
        return "keyring"

    @property
    def available(self) -> bool:
        """Check if a functional keyring backend is configured.

        Returns False on headless systems where keyring falls back to its
        "fail" backend, or when the backend fails to initialize.
        """
        try:
            backend = keyring.get_keyring()
        except Exception as e:
            log.debug("keyring_unavailable", error=str(e))
            return False
        return not isinstance(backend, fail.Keyring)

    @property
    def uses_credential_manager(self) -> bool:
        """Check if keyring resolves to the Windows Credential Manager.

        That store shares the per-entry size ceiling of ``cmdkey`` entries.
        """
        try:
            backend = keyring.get_keyring()
        except Exception as e:
            log.debug("keyring_unavailable", error=str(e))
            return False

        backends = backend.backends if isinstance(backend, ChainerBackend) else [backend]
        return any(type(b).__module__ == WINDOWS_BACKEND_MODULE for b in backends)

    def _service(self, name: str) -> str:
        return f"{self.namespace}/{name}"

    def _ensure_available(self) -> None:
        if not self.available:
            raise BackendNotAvailableError(
                "Keyring backend is not available",
                suggestion="Install a keyring backend (e.g. keyrings.alt) or use the legacy backend",
            )

    def write(self, name: str, username: str, secret: str) -> None:
        """Store one entry, overwriting any existing entry for (name, username).

        Raises:
            BackendNotAvailableError: If keyring is not available
            PrimitiveFailure: If the keyring operation fails
        """
        self._ensure_available()

        try:
            keyring.set_password(self._service(name), username, secret)
        except KeyringError as e:
            raise PrimitiveFailure(f"Failed to store credential: {e}", reference=f"{name}/{username}") from e

        index = self._load_index()
        if (name, username) not in index:
            index.append((name, username))
            self._save_index(index)

        log.info("keyring_entry_stored", name=name, username=username)

    def read(self, name: str, username: str | None = None) -> StoredEntry | None:
        """Read one entry.

        Without a username, the first credential keyring reports for the
        service is returned.

        Raises:
            BackendNotAvailableError: If keyring is not available
            PrimitiveFailure: If the keyring operation fails
        """
        self._ensure_available()

        try:
            if username is None:
                credential = keyring.get_credential(self._service(name), None)
                if credential is None:
                    return None
                return StoredEntry(name=name, username=credential.username, secret=credential.password)

            secret = cast(str | None, keyring.get_password(self._service(name), username))
        except KeyringError as e:
            raise PrimitiveFailure(f"Keyring operation failed: {e}", reference=name) from e

        if secret is None:
            return None

        log.debug("keyring_entry_read", name=name, username=username)
        return StoredEntry(name=name, username=username, secret=secret)

    def delete(self, name: str, username: str | None = None) -> bool:
        """Delete one entry.

        Returns:
            True if deleted, False if not found

        Raises:
            BackendNotAvailableError: If keyring is not available
            PrimitiveFailure: If the keyring operation fails
        """
        self._ensure_available()

        if username is None:
            existing = self.read(name)
            if existing is None:
                return False
            username = existing.username

        try:
            keyring.delete_password(self._service(name), username)
        except PasswordDeleteError:
            # Credential doesn't exist - not an error
            return False
        except KeyringError as e:
            raise PrimitiveFailure(f"Failed to delete credential: {e}", reference=f"{name}/{username}") from e

        index = self._load_index()
        if (name, username) in index:
            index.remove((name, username))
            self._save_index(index)

        log.info("keyring_entry_deleted", name=name, username=username)
        return True

    def list(self) -> list[StoredEntry]:
        """List indexed entries without exposing their secrets."""
        self._ensure_available()
        return [StoredEntry(name=name, username=username) for name, username in self._load_index()]

    def _load_index(self) -> list[tuple[str, str]]:
        try:
            raw = keyring.get_password(self.namespace, INDEX_USERNAME)
        except KeyringError as e:
            raise PrimitiveFailure(f"Failed to read entry index: {e}", reference=self.namespace) from e

        if not raw:
            return []

        try:
            pairs = json.loads(raw)
            return [(str(name), str(username)) for name, username in pairs]
        except (json.JSONDecodeError, TypeError, ValueError) as e:
            raise PrimitiveFailure(
                "Entry index is corrupted",
                reference=self.namespace,
                suggestion=f"Delete the '{INDEX_USERNAME}' entry of service '{self.namespace}' to rebuild it",
            ) from e

    def _save_index(self, index: list[tuple[str, str]]) -> None:
        try:
            keyring.set_password(self.namespace, INDEX_USERNAME, json.dumps([list(pair) for pair in index]))
        except KeyringError as e:
            raise PrimitiveFailure(f"Failed to update entry index: {e}", reference=self.namespace) from e
