"""Protocols for the single-entry key stores the adapters are built on."""

from __future__ import annotations

from typing import Protocol

from credvault.models import StoredEntry


class KeyStorePrimitive(Protocol):
    """Single-entry read/write/delete against one platform credential store.

    Both the structured store and the legacy command-line store expose this
    shape, so the adapters above them differ only in how they name, split
    and enumerate entries.
    """

    @property
    def name(self) -> str:
        """Store identifier (e.g., 'keyring', 'cmdkey')."""
        ...

    @property
    def available(self) -> bool:
        """Check if this store is usable on the current system."""
        ...

    def write(self, name: str, username: str, secret: str) -> None:
        """Create or overwrite one entry.

        Args:
            name: Entry name
            username: User recorded with the entry
            secret: Plaintext secret

        Raises:
            PrimitiveFailure: If the write fails
        """
        ...

    def read(self, name: str, username: str | None = None) -> StoredEntry | None:
        """Read one entry.

        Args:
            name: Entry name
            username: User half of the key, for stores keyed by (name, user).
                Stores keyed by name alone ignore it.

        Returns:
            The entry, or None if it does not exist

        Raises:
            PrimitiveFailure: If the read fails for any other reason
        """
        ...

    def delete(self, name: str, username: str | None = None) -> bool:
        """Delete one entry.

        Returns:
            True if the entry was deleted, False if it did not exist

        Raises:
            PrimitiveFailure: If the delete fails for any other reason
        """
        ...


class StructuredKeyStore(KeyStorePrimitive, Protocol):
    """Store whose listing is already a sequence of entries."""

    def list(self) -> list[StoredEntry]:
        """List all entries. Secrets may be withheld (``secret=None``)."""
        ...


class TextKeyStore(KeyStorePrimitive, Protocol):
    """Store whose listing is line-oriented text.

    Each record is a block of ``Key: Value`` lines, terminated by a blank
    line.
    """

    def list(self) -> str:
        """Return the raw listing text."""
        ...
