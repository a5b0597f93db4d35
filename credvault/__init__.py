"""credvault: one credential model over modern and legacy secret stores.

Example:
    >>> from credvault import create_vault
    >>> vault = create_vault()
    >>> vault.add("site.example.com", "alice", "hunter2")
    >>> vault.get("site.example.com", "alice", as_plaintext=True).secret
    'hunter2'
"""

from credvault.chunking import MAX_CHUNK_SIZE
from credvault.config.settings import VaultSettings
from credvault.exceptions import (
    BackendNotAvailableError,
    CapabilityError,
    ConfigurationError,
    CredentialError,
    CredVaultError,
    InvalidIdentityError,
    PrimitiveFailure,
)
from credvault.models import (
    BackendCapability,
    CredentialEntry,
    CredentialIdentity,
    GetResult,
    NotFound,
    StoredEntry,
)
from credvault.secure import plaintext_buffer, to_plaintext, to_secret
from credvault.vault import Vault, create_vault

__version__ = "0.1.0"

__all__ = [
    "MAX_CHUNK_SIZE",
    "BackendCapability",
    "BackendNotAvailableError",
    "CapabilityError",
    "ConfigurationError",
    "CredVaultError",
    "CredentialEntry",
    "CredentialError",
    "CredentialIdentity",
    "GetResult",
    "InvalidIdentityError",
    "NotFound",
    "PrimitiveFailure",
    "StoredEntry",
    "Vault",
    "VaultSettings",
    "create_vault",
    "plaintext_buffer",
    "to_plaintext",
    "to_secret",
]
