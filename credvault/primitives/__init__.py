"""Single-entry key stores that the backend adapters are built on."""

from credvault.primitives.base import KeyStorePrimitive, StructuredKeyStore, TextKeyStore
from credvault.primitives.cmdkey_store import CmdkeyStore
from credvault.primitives.keyring_store import KeyringStore

__all__ = [
    "KeyStorePrimitive",
    "StructuredKeyStore",
    "TextKeyStore",
    "KeyringStore",
    "CmdkeyStore",
]
