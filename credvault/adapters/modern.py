"""Adapter for structured stores that need no chunking."""

import structlog

from credvault.exceptions import InvalidIdentityError
from credvault.models import CredentialEntry, CredentialIdentity, GetResult, NotFound
from credvault.primitives.base import StructuredKeyStore
from credvault.secure import to_secret

log = structlog.get_logger(__name__)


class ModernAdapter:
    """Maps vault operations 1:1 onto a structured key store.

    Entries are stored under the resource name with the username as the
    second half of the key, so several accounts can share one resource.
    """

    def __init__(self, store: StructuredKeyStore) -> None:
        self.store = store

    def add(self, identity: CredentialIdentity, secret: str) -> None:
        """Store a credential, replacing any existing one for the identity."""
        identity.validate()
        self.store.write(identity.resource, identity.username, secret)
        log.info("credential_stored", reference=str(identity), backend=self.store.name)

    def remove(self, identity: CredentialIdentity) -> bool:
        """Delete a credential. Returns False when nothing was stored."""
        identity.validate()
        removed = self.store.delete(identity.resource, identity.username)
        log.info("credential_removed", reference=str(identity), removed=removed)
        return removed

    def get(self, identity: CredentialIdentity, as_plaintext: bool = False) -> GetResult:
        identity.validate()
        stored = self.store.read(identity.resource, identity.username)
        if stored is None or stored.secret is None:
            return NotFound(identity)

        secret = stored.secret if as_plaintext else to_secret(stored.secret)
        return CredentialEntry(resource=identity.resource, username=identity.username, secret=secret)

    def find(self, resource: str | None = None, username: str | None = None) -> list[CredentialEntry]:
        """Filter stored entries by resource, username, or both.

        Secrets are included only when the store's listing exposes them.

        Raises:
            InvalidIdentityError: If neither filter is given
        """
        if not resource and not username:
            raise InvalidIdentityError(
                "find requires a resource, a username, or both",
                suggestion="Use get() without arguments to enumerate every entry",
            )

        matches = []
        for stored in self.store.list():
            if resource and stored.name != resource:
                continue
            if username and stored.username != username:
                continue
            if stored.secret is None:
                matches.append(CredentialEntry.placeholder(stored.name, stored.username))
            else:
                matches.append(
                    CredentialEntry(resource=stored.name, username=stored.username, secret=to_secret(stored.secret))
                )
        return matches

    def list_entries(self) -> list[CredentialEntry]:
        """Enumerate every entry without exposing secrets."""
        return [CredentialEntry.placeholder(stored.name, stored.username) for stored in self.store.list()]
