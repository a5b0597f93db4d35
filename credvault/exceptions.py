"""Custom exception hierarchy for credvault.

This module defines a structured exception hierarchy that lets callers tell
"operation failed" apart from "operation not supported here" and from bad
input, without string matching on messages.

"Not found" is deliberately absent: a missing credential or chunk is an
ordinary outcome and is returned as :class:`credvault.models.NotFound` (or a
``False``/``None`` from the lower layers), never raised.

Exception Hierarchy:
    CredVaultError (base)
    ├── ConfigurationError
    └── CredentialError
        ├── InvalidIdentityError
        ├── CapabilityError
        └── PrimitiveFailure
            └── BackendNotAvailableError

Example Usage:
    >>> from credvault.exceptions import CapabilityError
    >>> try:
    ...     vault.find(username="alice")
    ... except CapabilityError as e:
    ...     print(e.suggestion)
"""


class CredVaultError(Exception):
    """Base exception for all credvault errors.

    Attributes:
        message: Human-readable error description
    """

    def __init__(self, message: str) -> None:
        """Initialize exception.

        Args:
            message: Error message
        """
        self.message = message
        super().__init__(message)


class ConfigurationError(CredVaultError):
    """Configuration-related errors.

    Examples:
        - Configuration file not found
        - Invalid YAML syntax
        - Invalid configuration values
    """

    pass


class CredentialError(CredVaultError):
    """Credential-related errors.

    This is the base class for every failure raised while storing, reading,
    listing or removing a credential.

    Attributes:
        message: Human-readable error description
        reference: The identity or entry name that failed (e.g., "github.com/alice")
        suggestion: Optional suggestion for resolution
    """

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            reference: The identity or entry name that failed
            suggestion: Optional suggestion for resolution
        """
        self.reference = reference
        self.suggestion = suggestion

        full_message = message
        if reference:
            full_message = f"{message} (reference: {reference})"
        if suggestion:
            full_message = f"{full_message}\nSuggestion: {suggestion}"

        super().__init__(full_message)
        # Preserve original message (super sets self.message to full_message)
        self.message = message


class InvalidIdentityError(CredentialError):
    """Resource or username missing where both are required."""

    pass


class CapabilityError(CredentialError):
    """Operation is not supported by the active backend.

    Raised instead of returning a degraded or partial result, for example
    when a username-only search is requested from the legacy store, which
    only supports exact single-entry lookups.
    """

    pass


class PrimitiveFailure(CredentialError):
    """A read, write, delete or list call on the underlying store failed.

    Raised for every failure other than "not found": process invocation
    failures, malformed tool output, permission denials.

    Attributes:
        chunk_index: Index of the chunk being written or deleted when a
            multi-part operation failed, or None for single-entry operations
    """

    def __init__(
        self,
        message: str,
        reference: str | None = None,
        suggestion: str | None = None,
        chunk_index: int | None = None,
    ) -> None:
        """Initialize exception.

        Args:
            message: Error message
            reference: Entry name or identity that failed
            suggestion: Optional suggestion for resolution
            chunk_index: Failing chunk index for multi-part operations
        """
        self.chunk_index = chunk_index
        if chunk_index is not None and "chunk" not in message.lower():
            message = f"{message} (chunk {chunk_index:02d})"
        super().__init__(message, reference=reference, suggestion=suggestion)


class BackendNotAvailableError(PrimitiveFailure):
    """The platform credential store cannot be used on this system."""

    pass
