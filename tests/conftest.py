"""Pytest configuration and shared fixtures."""

import pytest

from credvault.exceptions import PrimitiveFailure
from credvault.models import StoredEntry


class FakeStructuredStore:
    """In-memory structured store keyed by (name, username)."""

    def __init__(self, expose_secrets: bool = False) -> None:
        self.entries: dict[tuple[str, str], str] = {}
        self.expose_secrets = expose_secrets

    @property
    def name(self) -> str:
        return "fake-structured"

    @property
    def available(self) -> bool:
        return True

    def write(self, name, username, secret):
        self.entries[(name, username)] = secret

    def read(self, name, username=None):
        for (entry_name, entry_user), secret in self.entries.items():
            if entry_name == name and (username is None or entry_user == username):
                return StoredEntry(name=entry_name, username=entry_user, secret=secret)
        return None

    def delete(self, name, username=None):
        entry = self.read(name, username)
        if entry is None:
            return False
        del self.entries[(entry.name, entry.username)]
        return True

    def list(self):
        return [
            StoredEntry(name=name, username=username, secret=secret if self.expose_secrets else None)
            for (name, username), secret in self.entries.items()
        ]


class FakeTextStore:
    """In-memory single-key store with a cmdkey-style text listing.

    ``fail_writes`` and ``fail_deletes`` hold entry names whose write or
    delete raises PrimitiveFailure. ``extra_listing`` is appended verbatim
    to the listing text.
    """

    def __init__(self) -> None:
        self.entries: dict[str, StoredEntry] = {}
        self.fail_writes: set[str] = set()
        self.fail_deletes: set[str] = set()
        self.extra_listing = ""
        self.writes: list[str] = []
        self.deletes: list[str] = []

    @property
    def name(self) -> str:
        return "fake-text"

    @property
    def available(self) -> bool:
        return True

    def write(self, name, username, secret):
        if name in self.fail_writes:
            raise PrimitiveFailure("Access is denied", reference=name)
        self.writes.append(name)
        self.entries[name] = StoredEntry(name=name, username=username, secret=secret)

    def read(self, name, username=None):
        return self.entries.get(name)

    def delete(self, name, username=None):
        if name in self.fail_deletes:
            raise PrimitiveFailure("Access is denied", reference=name)
        self.deletes.append(name)
        return self.entries.pop(name, None) is not None

    def list(self):
        lines = ["", "Currently stored credentials:", ""]
        for entry in self.entries.values():
            lines += [
                f"    Target: LegacyGeneric:target={entry.name}",
                "    Type: Generic ",
                f"    User: {entry.username}",
                "    Local machine persistence",
                "",
            ]
        return "\n".join(lines) + self.extra_listing


@pytest.fixture
def structured_store() -> FakeStructuredStore:
    """Empty in-memory structured store."""
    return FakeStructuredStore()


@pytest.fixture
def text_store() -> FakeTextStore:
    """Empty in-memory text-listing store."""
    return FakeTextStore()
