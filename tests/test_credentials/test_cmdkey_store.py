"""Tests for the cmdkey-driven legacy store."""

import subprocess
from unittest.mock import patch

import pytest
from keyring.credentials import SimpleCredential
from keyring.errors import KeyringError

from credvault.exceptions import BackendNotAvailableError, PrimitiveFailure
from credvault.primitives.cmdkey_store import CmdkeyStore

LISTING = """
Currently stored credentials:

    Target: LegacyGeneric:target=site.example.com_alice
    Type: Generic
    User: alice
    Local machine persistence
"""


def completed(returncode=0, stdout="", stderr=""):
    """Build a finished cmdkey process result."""
    return subprocess.CompletedProcess(args=["cmdkey"], returncode=returncode, stdout=stdout, stderr=stderr)


@pytest.fixture
def store():
    """CmdkeyStore with a short timeout."""
    return CmdkeyStore(timeout=5)


@pytest.fixture
def mock_run():
    """Patch subprocess.run inside the store module."""
    with patch("credvault.primitives.cmdkey_store.subprocess.run") as mock:
        mock.return_value = completed(stdout="CMDKEY: Credential added successfully.")
        yield mock


class TestCmdkeyStoreAvailability:
    """Test availability and process errors."""

    def test_store_name(self, store):
        """Test store name property."""
        assert store.name == "cmdkey"

    @patch("credvault.primitives.cmdkey_store.shutil.which", return_value="C:\\Windows\\System32\\cmdkey.exe")
    def test_available_when_on_path(self, mock_which, store):
        """Test store reports available when cmdkey is found."""
        assert store.available is True
        mock_which.assert_called_once_with("cmdkey")

    @patch("credvault.primitives.cmdkey_store.shutil.which", return_value=None)
    def test_unavailable_when_missing(self, mock_which, store):
        """Test store reports unavailable when cmdkey is not found."""
        assert store.available is False

    def test_missing_executable(self, mock_run, store):
        """Test a missing executable raises BackendNotAvailableError."""
        mock_run.side_effect = FileNotFoundError("cmdkey")

        with pytest.raises(BackendNotAvailableError) as exc_info:
            store.write("site_alice", "alice", "hunter2")

        assert exc_info.value.suggestion is not None

    def test_timeout(self, mock_run, store):
        """Test a hung process raises PrimitiveFailure."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="cmdkey", timeout=5)

        with pytest.raises(PrimitiveFailure, match="timed out"):
            store.delete("site_alice")


class TestCmdkeyStoreOperations:
    """Test write, read, delete and list."""

    def test_write_arguments(self, mock_run, store):
        """Test write invokes cmdkey /generic with user and password."""
        store.write("site.example.com_alice", "alice", "hunter2")

        mock_run.assert_called_once_with(
            ["cmdkey", "/generic:site.example.com_alice", "/user:alice", "/pass:hunter2"],
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )

    def test_write_rejects_oversized_secret(self, mock_run, store):
        """Test secrets over the entry limit are refused before running cmdkey."""
        with pytest.raises(PrimitiveFailure, match="exceeds"):
            store.write("site_alice", "alice", "x" * 1201)

        mock_run.assert_not_called()

    def test_write_limit_counts_utf16_units(self, mock_run, store):
        """Test characters outside the BMP count double against the limit."""
        with pytest.raises(PrimitiveFailure, match="UTF-16"):
            store.write("site_alice", "alice", "\U0001f600" * 700)

        mock_run.assert_not_called()

    def test_write_failure(self, mock_run, store):
        """Test a non-zero exit raises PrimitiveFailure with cmdkey's output."""
        mock_run.return_value = completed(returncode=1, stderr="Access is denied.")

        with pytest.raises(PrimitiveFailure, match="Access is denied") as exc_info:
            store.write("site_alice", "alice", "hunter2")

        assert exc_info.value.reference == "site_alice"

    @patch("credvault.primitives.cmdkey_store.keyring")
    def test_read(self, mock_keyring, store):
        """Test read resolves the bare target through keyring."""
        mock_keyring.get_credential.return_value = SimpleCredential("alice", "hunter2")

        entry = store.read("site_alice")

        assert entry.name == "site_alice"
        assert entry.username == "alice"
        assert entry.secret == "hunter2"
        mock_keyring.get_credential.assert_called_once_with("site_alice", None)

    @patch("credvault.primitives.cmdkey_store.keyring")
    def test_read_missing(self, mock_keyring, store):
        """Test a missing target returns None."""
        mock_keyring.get_credential.return_value = None

        assert store.read("site_alice") is None

    @patch("credvault.primitives.cmdkey_store.keyring")
    def test_read_failure(self, mock_keyring, store):
        """Test keyring failures become PrimitiveFailure."""
        mock_keyring.get_credential.side_effect = KeyringError("boom")

        with pytest.raises(PrimitiveFailure, match="Failed to read credential"):
            store.read("site_alice")

    def test_delete_existing(self, mock_run, store):
        """Test a successful delete returns True."""
        mock_run.return_value = completed(stdout="CMDKEY: Credential deleted successfully.")

        assert store.delete("site_alice") is True
        assert mock_run.call_args.args[0] == ["cmdkey", "/delete:site_alice"]

    def test_delete_missing(self, mock_run, store):
        """Test cmdkey's not-found message maps to False."""
        mock_run.return_value = completed(returncode=1, stdout="CMDKEY: Element not found.")

        assert store.delete("site_alice") is False

    def test_delete_missing_with_zero_exit(self, mock_run, store):
        """Test not-found is detected even when cmdkey exits 0."""
        mock_run.return_value = completed(returncode=0, stdout="CMDKEY: Element not found.")

        assert store.delete("site_alice") is False

    def test_delete_failure(self, mock_run, store):
        """Test other failures raise PrimitiveFailure."""
        mock_run.return_value = completed(returncode=5, stderr="Access is denied.")

        with pytest.raises(PrimitiveFailure, match="failed to delete"):
            store.delete("site_alice")

    def test_list(self, mock_run, store):
        """Test list returns the raw listing text."""
        mock_run.return_value = completed(stdout=LISTING)

        assert store.list() == LISTING
        assert mock_run.call_args.args[0] == ["cmdkey", "/list"]

    def test_list_failure(self, mock_run, store):
        """Test a failed listing raises PrimitiveFailure."""
        mock_run.return_value = completed(returncode=1, stderr="Access is denied.")

        with pytest.raises(PrimitiveFailure, match="failed to list"):
            store.list()
