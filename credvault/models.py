"""
Domain models for credvault.

These models are the typed results passed between the vault facade, the
backend adapters and the underlying key stores. Every operation returns one
of them instead of a loosely shaped object, so callers always know which
fields are populated.

Example:
    Looking up a credential::

        result = vault.get("github.com", "alice")
        if isinstance(result, NotFound):
            ...
        else:
            token = to_plaintext(result.secret)
"""

from dataclasses import dataclass, field
from enum import Enum

from pydantic import SecretStr

from credvault.exceptions import InvalidIdentityError


class BackendCapability(str, Enum):
    """Which backend adapter services all calls for the life of a vault."""

    MODERN = "modern"
    """Structured secret store with no practical per-entry size limit."""

    LEGACY = "legacy"
    """Line-oriented command-line store with a per-entry size ceiling."""

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class CredentialIdentity:
    """The (resource, username) pair addressing one logical credential.

    Attributes:
        resource: What the credential is for (a URL or any caller-chosen name)
        username: Account name within the resource
    """

    resource: str
    username: str

    def validate(self) -> "CredentialIdentity":
        """Ensure both halves of the identity are present.

        Returns:
            The identity itself, so calls can be chained

        Raises:
            InvalidIdentityError: If resource or username is empty
        """
        missing = [
            label
            for label, value in (("resource", self.resource), ("username", self.username))
            if not value or not value.strip()
        ]
        if missing:
            raise InvalidIdentityError(
                f"Credential identity is missing {' and '.join(missing)}",
                reference=str(self),
                suggestion="Provide both a resource and a username",
            )
        return self

    def __str__(self) -> str:
        return f"{self.resource}/{self.username}"


@dataclass(frozen=True)
class CredentialEntry:
    """A logical credential as returned to callers.

    ``secret`` is a ``SecretStr`` unless plaintext was explicitly requested.
    Entries produced by enumeration carry an empty ``SecretStr`` placeholder
    and have ``is_placeholder`` set; call ``get`` on the identity to read the
    real secret.
    """

    resource: str
    username: str
    secret: SecretStr | str = field(default_factory=lambda: SecretStr(""), repr=False)
    is_placeholder: bool = False

    @property
    def identity(self) -> CredentialIdentity:
        return CredentialIdentity(self.resource, self.username)

    @classmethod
    def placeholder(cls, resource: str, username: str) -> "CredentialEntry":
        """Create a listing entry that does not expose any secret."""
        return cls(resource=resource, username=username, secret=SecretStr(""), is_placeholder=True)


@dataclass(frozen=True)
class NotFound:
    """Explicit absent result for a lookup.

    Falsy, so ``if not result`` reads naturally at call sites.
    """

    identity: CredentialIdentity

    def __bool__(self) -> bool:
        return False


GetResult = CredentialEntry | NotFound


@dataclass(frozen=True)
class StoredEntry:
    """One physical entry in a key store.

    Attributes:
        name: Entry name (resource for structured stores, target name for
            the legacy store)
        username: User recorded with the entry
        secret: Stored secret, or None when the store does not expose it
    """

    name: str
    username: str
    secret: str | None = field(default=None, repr=False)
