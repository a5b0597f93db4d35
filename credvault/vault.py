"""The vault facade: one credential API over whichever backend is active.

The backend is chosen once, when the vault is constructed, from an explicit
:class:`BackendCapability`. Every call is forwarded unchanged to that
backend's adapter; the facade itself never chunks or parses anything.

Example:
    >>> vault = create_vault(VaultSettings())
    >>> vault.add("site.example.com", "alice", "hunter2")
    >>> vault.get("site.example.com", "alice", as_plaintext=True).secret
    'hunter2'
    >>> vault.remove("site.example.com", "alice")
    True
    >>> vault.get("site.example.com", "alice")
    NotFound(identity=CredentialIdentity(resource='site.example.com', username='alice'))
"""

from typing import cast, overload

import structlog
from pydantic import SecretStr

from credvault.adapters.legacy import LegacyAdapter
from credvault.adapters.modern import ModernAdapter
from credvault.chunking import MAX_CHUNK_SIZE
from credvault.config.settings import VaultSettings
from credvault.exceptions import InvalidIdentityError
from credvault.models import BackendCapability, CredentialEntry, CredentialIdentity, GetResult
from credvault.primitives.base import KeyStorePrimitive, StructuredKeyStore, TextKeyStore
from credvault.primitives.cmdkey_store import CmdkeyStore
from credvault.primitives.keyring_store import KeyringStore
from credvault.secure import to_plaintext

log = structlog.get_logger(__name__)


class Vault:
    """Add, remove, find and get credentials through the active backend."""

    def __init__(
        self,
        capability: BackendCapability,
        store: KeyStorePrimitive,
        max_chunk_size: int = MAX_CHUNK_SIZE,
    ) -> None:
        """Initialize the vault and resolve its adapter.

        Args:
            capability: Which adapter services all calls
            store: Key store for that adapter (structured for MODERN, text
                listing for LEGACY)
            max_chunk_size: Entry capacity for the legacy adapter
        """
        self._capability = BackendCapability(capability)
        self._adapter: ModernAdapter | LegacyAdapter
        if self._capability is BackendCapability.LEGACY:
            self._adapter = LegacyAdapter(cast(TextKeyStore, store), max_chunk_size=max_chunk_size)
        else:
            self._adapter = ModernAdapter(cast(StructuredKeyStore, store))

        log.debug("vault_initialized", backend=str(self._capability), store=store.name)

    @property
    def capability(self) -> BackendCapability:
        return self._capability

    @property
    def adapter(self) -> ModernAdapter | LegacyAdapter:
        return self._adapter

    def add(self, resource: str, username: str, secret: str | SecretStr) -> None:
        """Store a credential, replacing any existing one for the identity.

        Raises:
            InvalidIdentityError: If resource or username is empty
            PrimitiveFailure: If the store rejects the write
        """
        self._adapter.add(CredentialIdentity(resource, username), to_plaintext(secret))

    def remove(self, resource: str, username: str) -> bool:
        """Remove a credential. Removing a missing credential is not an error.

        Returns:
            True if anything was deleted
        """
        return self._adapter.remove(CredentialIdentity(resource, username))

    def find(self, resource: str | None = None, username: str | None = None) -> list[CredentialEntry]:
        """Search by resource, username, or both.

        Raises:
            CapabilityError: On the legacy backend, when only one filter is given
            InvalidIdentityError: If neither filter is given
        """
        return self._adapter.find(resource=resource, username=username)

    def list_entries(self) -> list[CredentialEntry]:
        """Enumerate every credential. Secrets are never included."""
        return self._adapter.list_entries()

    @overload
    def get(self, resource: None = None, username: None = None, as_plaintext: bool = False) -> list[CredentialEntry]:
        ...

    @overload
    def get(self, resource: str, username: str, as_plaintext: bool = False) -> GetResult:
        ...

    def get(
        self,
        resource: str | None = None,
        username: str | None = None,
        as_plaintext: bool = False,
    ) -> GetResult | list[CredentialEntry]:
        """Read one credential, or enumerate all of them.

        Args:
            resource: Resource of the credential; omit with ``username`` to enumerate
            username: Username of the credential
            as_plaintext: Return the secret as ``str`` rather than ``SecretStr``

        Returns:
            With no identity, every entry (secrets withheld). With an
            identity, the entry or :class:`NotFound`.

        Raises:
            InvalidIdentityError: If only one of resource and username is given
        """
        if resource is None and username is None:
            return self.list_entries()

        if not resource or not username:
            raise InvalidIdentityError(
                "get requires both a resource and a username, or neither to list all entries",
                reference=resource or username,
            )

        return self._adapter.get(CredentialIdentity(resource, username), as_plaintext=as_plaintext)


def create_store(settings: VaultSettings, capability: BackendCapability) -> KeyStorePrimitive:
    """Build the concrete key store for a capability."""
    if capability is BackendCapability.LEGACY:
        return CmdkeyStore(
            executable=settings.cmdkey_path,
            timeout=settings.command_timeout,
            max_entry_size=settings.max_chunk_size,
        )
    return KeyringStore(namespace=settings.namespace)


def create_vault(settings: VaultSettings | None = None) -> Vault:
    """Resolve the backend once and build a vault for it."""
    settings = settings or VaultSettings()
    capability = settings.capability()
    return Vault(capability, create_store(settings, capability), max_chunk_size=settings.max_chunk_size)
