"""Legacy key store driven through the Windows ``cmdkey`` tool.

Each operation spawns one ``cmdkey`` process and waits for it. ``cmdkey``
can add, delete and list generic credentials but cannot print a stored
password, so single-entry reads go through the Windows Credential Manager
keyring backend, which resolves a bare target name.

Entries are keyed by target name alone; the ``username`` argument accepted
by ``read`` and ``delete`` is ignored.
"""

from __future__ import annotations

import shutil
import subprocess  # nosec B404

import keyring
import structlog
from keyring.errors import KeyringError

from credvault.chunking import MAX_CHUNK_SIZE, utf16_length
from credvault.exceptions import BackendNotAvailableError, PrimitiveFailure
from credvault.models import StoredEntry

log = structlog.get_logger(__name__)

# cmdkey reports a missing target with this message on /delete
NOT_FOUND_MARKERS = ("element not found", "cannot find", "not found")


class CmdkeyStore:
    """Generic credentials in the Windows Credential Manager via ``cmdkey``.

    Example:
        >>> store = CmdkeyStore()
        >>> store.write("site.example.com_alice", "alice", "hunter2")
        >>> store.delete("site.example.com_alice")
        True
    """

    def __init__(
        self,
        executable: str = "cmdkey",
        timeout: float | None = None,
        max_entry_size: int = MAX_CHUNK_SIZE,
    ) -> None:
        """Initialize the store.

        Args:
            executable: Path or name of the cmdkey executable
            timeout: Seconds to wait for each cmdkey process; None waits
                indefinitely
            max_entry_size: Largest secret a single entry may hold, in UTF-16
                code units
        """
        self.executable = executable
        self.timeout = timeout
        self.max_entry_size = max_entry_size

    @property
    def name(self) -> str:
        return "cmdkey"

    @property
    def available(self) -> bool:
        """Check if the cmdkey executable can be found."""
        return shutil.which(self.executable) is not None

    def _run(self, *args: str, reference: str) -> subprocess.CompletedProcess[str]:
        """Run cmdkey with ``args`` and return the completed process.

        Raises:
            BackendNotAvailableError: If the executable does not exist
            PrimitiveFailure: If the process cannot be run or times out
        """
        try:
            return subprocess.run(  # nosec B603
                [self.executable, *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise BackendNotAvailableError(
                f"{self.executable} command not found on this system",
                reference=reference,
                suggestion="The legacy backend requires Windows; use the modern backend elsewhere",
            ) from e
        except subprocess.TimeoutExpired as e:
            raise PrimitiveFailure(
                f"{self.executable} timed out after {self.timeout} seconds", reference=reference
            ) from e
        except OSError as e:
            raise PrimitiveFailure(f"Failed to run {self.executable}: {e}", reference=reference) from e

    @staticmethod
    def _output(result: subprocess.CompletedProcess[str]) -> str:
        return "\n".join(part.strip() for part in (result.stdout or "", result.stderr or "") if part.strip())

    def write(self, name: str, username: str, secret: str) -> None:
        """Add or replace a generic credential.

        Raises:
            PrimitiveFailure: If the secret is too large or cmdkey fails
        """
        size = utf16_length(secret)
        if size > self.max_entry_size:
            raise PrimitiveFailure(
                f"Secret of {size} UTF-16 code units exceeds the {self.max_entry_size}-unit entry limit",
                reference=name,
            )

        result = self._run(f"/generic:{name}", f"/user:{username}", f"/pass:{secret}", reference=name)
        if result.returncode != 0:
            raise PrimitiveFailure(
                f"{self.executable} failed to store credential: {self._output(result)}", reference=name
            )

        log.debug("cmdkey_entry_stored", name=name)

    def read(self, name: str, username: str | None = None) -> StoredEntry | None:
        """Read one generic credential by target name.

        Raises:
            PrimitiveFailure: If the credential store cannot be read
        """
        try:
            credential = keyring.get_credential(name, None)
        except KeyringError as e:
            raise PrimitiveFailure(f"Failed to read credential: {e}", reference=name) from e

        if credential is None:
            return None

        return StoredEntry(name=name, username=credential.username, secret=credential.password)

    def delete(self, name: str, username: str | None = None) -> bool:
        """Delete a generic credential.

        Returns:
            True if deleted, False if cmdkey reports the target missing

        Raises:
            PrimitiveFailure: If cmdkey fails for any other reason
        """
        result = self._run(f"/delete:{name}", reference=name)
        output = self._output(result)

        # cmdkey may exit 0 even when the target is missing
        if any(marker in output.lower() for marker in NOT_FOUND_MARKERS):
            return False

        if result.returncode != 0:
            raise PrimitiveFailure(f"{self.executable} failed to delete credential: {output}", reference=name)

        log.debug("cmdkey_entry_deleted", name=name)
        return True

    def list(self) -> str:
        """Return the raw ``cmdkey /list`` output.

        Raises:
            PrimitiveFailure: If cmdkey fails
        """
        result = self._run("/list", reference="/list")
        if result.returncode != 0:
            raise PrimitiveFailure(f"{self.executable} failed to list credentials: {self._output(result)}")
        return result.stdout
