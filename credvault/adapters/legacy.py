"""Adapter for the legacy line-oriented store with a per-entry size ceiling.

Secrets larger than one entry are written as a chunk set (see
:mod:`credvault.chunking`). Multi-chunk writes and deletes are sequences of
independent store calls: a failure part-way through leaves the earlier
chunks in place and is reported with the failing chunk index. Nothing is
rolled back.

The store's listing is text in ``cmdkey /list`` form::

    Currently stored credentials:

        Target: LegacyGeneric:target=site.example.com_alice_Chunk00
        Type: Generic
        User: alice
        Local machine persistence

One logical entry is reported per (resource, username), however many
chunks it occupies.
"""

from collections.abc import Iterator
from dataclasses import dataclass

import structlog

from credvault.chunking import (
    MAX_CHUNK_SIZE,
    chunk_name,
    encode,
    entry_name,
    is_chunked,
    reassemble,
    split_entry_name,
)
from credvault.exceptions import (
    BackendNotAvailableError,
    CapabilityError,
    InvalidIdentityError,
    PrimitiveFailure,
)
from credvault.models import CredentialEntry, CredentialIdentity, GetResult, NotFound
from credvault.primitives.base import TextKeyStore
from credvault.secure import to_secret

log = structlog.get_logger(__name__)

GENERIC_TYPE = "generic"


@dataclass(frozen=True)
class ListedRecord:
    """One record of the store's text listing."""

    target: str
    type: str
    user: str

    @property
    def is_generic(self) -> bool:
        return self.type.lower().startswith(GENERIC_TYPE)


def _split_blocks(text: str) -> Iterator[list[str]]:
    block: list[str] = []
    for line in text.splitlines():
        if line.strip():
            block.append(line.strip())
        elif block:
            yield block
            block = []
    if block:
        yield block


def parse_listing(text: str) -> list[ListedRecord]:
    """Parse line-oriented listing text into records.

    Records are blocks of ``Key: Value`` lines separated by blank lines. The
    first colon separates key from value; lines without one (such as
    "Local machine persistence") are ignored. Blocks without a ``Target``
    line, like the listing header, are skipped.

    A ``Target`` value of the form ``LegacyGeneric:target=<name>`` is reduced
    to ``<name>``.
    """
    records = []
    for block in _split_blocks(text):
        fields: dict[str, str] = {}
        for line in block:
            key, sep, value = line.partition(":")
            if sep:
                fields.setdefault(key.strip().lower(), value.strip())

        target = fields.get("target")
        if not target:
            continue

        _, marker, name = target.partition("target=")
        records.append(
            ListedRecord(
                target=name if marker else target,
                type=fields.get("type", ""),
                user=fields.get("user", ""),
            )
        )
    return records


class LegacyAdapter:
    """Vault operations over a single-key text store, with chunking.

    Example:
        >>> adapter = LegacyAdapter(CmdkeyStore())
        >>> adapter.add(CredentialIdentity("site.example.com", "alice"), "x" * 3000)
        >>> # writes site.example.com_alice_Chunk00 .. _Chunk02
    """

    def __init__(self, store: TextKeyStore, max_chunk_size: int = MAX_CHUNK_SIZE) -> None:
        if max_chunk_size < 1:
            raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
        self.store = store
        self.max_chunk_size = max_chunk_size

    def add(self, identity: CredentialIdentity, secret: str) -> None:
        """Store a credential, splitting it into chunks when it is too large.

        Any existing plain entry or chunk set for the identity is removed
        first, so a shorter secret never inherits stale trailing chunks.

        Raises:
            InvalidIdentityError: If the identity is incomplete
            PrimitiveFailure: If a write fails; ``chunk_index`` names the
                failing chunk and earlier chunks remain stored
        """
        identity.validate()
        parts = encode(secret, self.max_chunk_size)

        self.remove(identity)

        if not is_chunked(parts):
            self.store.write(entry_name(identity.resource, identity.username), identity.username, parts[0])
            log.info("credential_stored", reference=str(identity), chunks=0)
            return

        for index, part in enumerate(parts):
            name = chunk_name(identity.resource, identity.username, index)
            try:
                self.store.write(name, identity.username, part)
            except BackendNotAvailableError:
                raise
            except PrimitiveFailure as e:
                log.error("chunk_write_failed", reference=str(identity), chunk_index=index, written=index)
                suggestion = None
                if index:
                    suggestion = f"Chunks 00-{index - 1:02d} were left in place; remove the credential and retry"
                raise PrimitiveFailure(
                    f"Failed to write chunk {index:02d} of {len(parts)}: {e.message}",
                    reference=name,
                    suggestion=suggestion,
                    chunk_index=index,
                ) from e

        log.info("credential_stored", reference=str(identity), chunks=len(parts))

    def remove(self, identity: CredentialIdentity) -> bool:
        """Delete the plain entry, or every chunk of a chunk set.

        Chunks are deleted in ascending order until the store reports the
        next index missing. Removing a credential that does not exist is not
        an error.

        Returns:
            True if anything was deleted

        Raises:
            PrimitiveFailure: If a delete fails; ``chunk_index`` names the
                failing chunk
        """
        identity.validate()

        if self.store.delete(entry_name(identity.resource, identity.username)):
            log.info("credential_removed", reference=str(identity), chunks=0)
            return True

        index = 0
        while True:
            name = chunk_name(identity.resource, identity.username, index)
            try:
                deleted = self.store.delete(name)
            except BackendNotAvailableError:
                raise
            except PrimitiveFailure as e:
                raise PrimitiveFailure(
                    f"Failed to delete chunk {index:02d}: {e.message}", reference=name, chunk_index=index
                ) from e
            if not deleted:
                break
            index += 1

        if index:
            log.info("credential_removed", reference=str(identity), chunks=index)
        return index > 0

    def _read_secret(self, identity: CredentialIdentity) -> str | None:
        plain = self.store.read(entry_name(identity.resource, identity.username))
        if plain is not None:
            return plain.secret or ""

        def read_chunk(index: int) -> str | None:
            stored = self.store.read(chunk_name(identity.resource, identity.username, index))
            return None if stored is None else stored.secret or ""

        return reassemble(read_chunk)

    def get(self, identity: CredentialIdentity, as_plaintext: bool = False) -> GetResult:
        """Read a credential, reassembling chunks when necessary.

        Reassembly stops at the first missing chunk index, so a gap
        truncates the returned secret.
        """
        identity.validate()
        secret = self._read_secret(identity)
        if secret is None:
            return NotFound(identity)

        return CredentialEntry(
            resource=identity.resource,
            username=identity.username,
            secret=secret if as_plaintext else to_secret(secret),
        )

    def find(self, resource: str | None = None, username: str | None = None) -> list[CredentialEntry]:
        """Exact lookup of one identity.

        The legacy store can only look up a single entry by its full name,
        so searching by resource alone or username alone is refused.

        Raises:
            CapabilityError: If only one of resource and username is given
            InvalidIdentityError: If neither is given
        """
        if not resource and not username:
            raise InvalidIdentityError(
                "find requires a resource and a username",
                suggestion="Use get() without arguments to enumerate every entry",
            )
        if not resource or not username:
            raise CapabilityError(
                "The legacy credential store only supports lookups by resource and username together",
                reference=resource or username,
                suggestion="Pass both --resource and --username, or list all entries",
            )

        identity = CredentialIdentity(resource, username)
        if isinstance(self.get(identity), NotFound):
            return []
        return [CredentialEntry.placeholder(resource, username)]

    def list_entries(self) -> list[CredentialEntry]:
        """Enumerate generic entries as logical credentials.

        Chunk suffixes are stripped and duplicates collapsed, so a chunked
        secret appears once. Secrets are never read here.
        """
        seen: set[tuple[str, str]] = set()
        entries = []
        for record in parse_listing(self.store.list()):
            if not record.is_generic:
                continue
            key = (split_entry_name(record.target, record.user), record.user)
            if key in seen:
                continue
            seen.add(key)
            entries.append(CredentialEntry.placeholder(*key))
        return entries
