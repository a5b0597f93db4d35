"""Tests for the modern (structured) backend adapter."""

import pytest
from pydantic import SecretStr

from credvault.adapters.modern import ModernAdapter
from credvault.exceptions import InvalidIdentityError
from credvault.models import CredentialEntry, CredentialIdentity, NotFound

ALICE = CredentialIdentity("site.example.com", "alice")


@pytest.fixture
def adapter(structured_store):
    """ModernAdapter over an empty in-memory store."""
    return ModernAdapter(structured_store)


class TestModernAdapter:
    """Test ModernAdapter operations."""

    def test_add_writes_single_entry(self, adapter, structured_store):
        """Large secrets are stored whole, without chunking."""
        secret = "x" * 5000

        adapter.add(ALICE, secret)

        assert structured_store.entries == {("site.example.com", "alice"): secret}

    def test_add_overwrites(self, adapter, structured_store):
        """Adding an existing identity replaces its secret."""
        adapter.add(ALICE, "old")
        adapter.add(ALICE, "new")

        assert structured_store.entries == {("site.example.com", "alice"): "new"}

    def test_add_rejects_blank_username(self, adapter):
        """Whitespace-only usernames are invalid."""
        with pytest.raises(InvalidIdentityError, match="missing username"):
            adapter.add(CredentialIdentity("site.example.com", "  "), "x")

    def test_get_returns_opaque_secret(self, adapter):
        """Secrets come back as SecretStr by default."""
        adapter.add(ALICE, "hunter2")

        result = adapter.get(ALICE)

        assert isinstance(result, CredentialEntry)
        assert isinstance(result.secret, SecretStr)
        assert result.secret.get_secret_value() == "hunter2"

    def test_get_plaintext(self, adapter):
        """Plaintext is returned when requested."""
        adapter.add(ALICE, "hunter2")

        assert adapter.get(ALICE, as_plaintext=True).secret == "hunter2"

    def test_get_missing(self, adapter):
        """Missing identities yield NotFound."""
        assert adapter.get(ALICE) == NotFound(ALICE)

    def test_same_resource_different_users(self, adapter):
        """Two accounts on one resource are independent."""
        adapter.add(ALICE, "alice-secret")
        adapter.add(CredentialIdentity("site.example.com", "bob"), "bob-secret")

        assert adapter.get(ALICE, as_plaintext=True).secret == "alice-secret"
        assert adapter.remove(ALICE) is True
        assert adapter.get(CredentialIdentity("site.example.com", "bob"), as_plaintext=True).secret == "bob-secret"

    def test_remove_idempotent(self, adapter):
        """Removing a missing credential returns False without error."""
        assert adapter.remove(ALICE) is False
        assert adapter.remove(ALICE) is False


class TestModernFind:
    """Test filtering by resource and username."""

    @pytest.fixture(autouse=True)
    def populate(self, adapter):
        adapter.add(CredentialIdentity("site.example.com", "alice"), "a1")
        adapter.add(CredentialIdentity("site.example.com", "bob"), "b1")
        adapter.add(CredentialIdentity("github.com", "alice"), "a2")

    def test_find_by_username(self, adapter):
        """Username-only search is supported."""
        found = adapter.find(username="alice")

        assert {(e.resource, e.username) for e in found} == {
            ("site.example.com", "alice"),
            ("github.com", "alice"),
        }

    def test_find_by_resource(self, adapter):
        """Resource-only search is supported."""
        found = adapter.find(resource="site.example.com")

        assert {e.username for e in found} == {"alice", "bob"}

    def test_find_by_both(self, adapter):
        """Both filters narrow to one entry."""
        found = adapter.find(resource="github.com", username="alice")

        assert [(e.resource, e.username) for e in found] == [("github.com", "alice")]

    def test_find_requires_a_filter(self, adapter):
        """Find with no filter is a validation error."""
        with pytest.raises(InvalidIdentityError):
            adapter.find()

    def test_find_hides_secrets_when_store_does(self, adapter):
        """Entries are placeholders when the listing withholds secrets."""
        found = adapter.find(username="bob")

        assert found[0].is_placeholder

    def test_find_exposes_secrets_when_store_does(self, adapter, structured_store):
        """Secrets exposed by the store's listing are passed through opaquely."""
        structured_store.expose_secrets = True

        found = adapter.find(username="bob")

        assert not found[0].is_placeholder
        assert found[0].secret.get_secret_value() == "b1"

    def test_list_entries_never_exposes_secrets(self, adapter, structured_store):
        """Enumeration withholds secrets even when the store exposes them."""
        structured_store.expose_secrets = True

        entries = adapter.list_entries()

        assert len(entries) == 3
        assert all(e.is_placeholder and e.secret.get_secret_value() == "" for e in entries)
