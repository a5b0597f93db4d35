"""
Configuration for credvault using Pydantic settings.

Settings come from (highest priority first) explicit keyword arguments,
``CREDVAULT_*`` environment variables, a YAML file passed to
``VaultSettings.from_yaml``, and the field defaults.

Example YAML::

    backend: legacy
    max_chunk_size: 1200
    command_timeout: ${CREDVAULT_TIMEOUT:-30}
"""

from __future__ import annotations

import os
import re
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Literal

import structlog
import yaml
from pydantic import Field
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from credvault.chunking import MAX_CHUNK_SIZE
from credvault.exceptions import BackendNotAvailableError, ConfigurationError
from credvault.models import BackendCapability
from credvault.primitives.cmdkey_store import CmdkeyStore
from credvault.primitives.keyring_store import KeyringStore

log = structlog.get_logger(__name__)

# Values parsed by ``VaultSettings.from_yaml`` for the settings being built
_yaml_values: ContextVar[dict[str, Any] | None] = ContextVar("credvault_yaml_values", default=None)


def detect_capability(namespace: str = "credvault", cmdkey_path: str = "cmdkey") -> BackendCapability:
    """Pick the backend for a platform.

    Both backends read entries through keyring, so a usable keyring backend
    is required either way. On Windows keyring writes to the Credential
    Manager, which has the same per-entry ceiling as ``cmdkey``; there the
    chunking legacy backend is chosen whenever ``cmdkey`` can be found.

    Raises:
        BackendNotAvailableError: If keyring has no usable backend
    """
    keyring_store = KeyringStore(namespace)
    if not keyring_store.available:
        raise BackendNotAvailableError(
            "No usable keyring backend; credentials cannot be read on this system",
            suggestion="Install a keyring backend (e.g. keyrings.alt, or pywin32-ctypes on Windows)",
        )

    if sys.platform == "win32" and keyring_store.uses_credential_manager and CmdkeyStore(cmdkey_path).available:
        return BackendCapability.LEGACY
    return BackendCapability.MODERN


class YamlValuesSource(PydanticBaseSettingsSource):
    """Settings source for values loaded by ``VaultSettings.from_yaml``.

    Placed below the environment source, so ``CREDVAULT_*`` variables
    override the file.
    """

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        return (_yaml_values.get() or {}).get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(_yaml_values.get() or {})


class VaultSettings(BaseSettings):
    """credvault settings."""

    model_config = SettingsConfigDict(
        env_prefix="CREDVAULT_",
        case_sensitive=False,
        frozen=True,
    )

    backend: BackendCapability | Literal["auto"] = Field(
        default="auto", description="Backend adapter to use: modern, legacy, or auto-detect"
    )
    namespace: str = Field(default="credvault", min_length=1, description="Keyring service prefix")
    max_chunk_size: int = Field(
        default=MAX_CHUNK_SIZE,
        ge=1,
        le=MAX_CHUNK_SIZE,
        description="UTF-16 code units per legacy store entry",
    )
    cmdkey_path: str = Field(default="cmdkey", description="Path to the cmdkey executable")
    command_timeout: float | None = Field(
        default=None, gt=0, description="Seconds to wait for each cmdkey call (None waits indefinitely)"
    )
    log_level: str = Field(default="INFO", description="Minimum log level")
    json_logs: bool = Field(default=True, description="Render logs as JSON lines rather than console text")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, YamlValuesSource(settings_cls), dotenv_settings, file_secret_settings)

    def capability(self) -> BackendCapability:
        """Resolve ``backend`` to a concrete capability.

        Raises:
            BackendNotAvailableError: If ``auto`` finds no usable backend
        """
        if isinstance(self.backend, BackendCapability):
            return self.backend

        detected = detect_capability(self.namespace, self.cmdkey_path)
        log.debug("backend_detected", backend=str(detected))
        return detected

    @classmethod
    def from_yaml(cls, config_path: str) -> VaultSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.

        Raises:
            ConfigurationError: If config file is invalid or missing
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        token = _yaml_values.set(config_dict)
        try:
            return cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e
        finally:
            _yaml_values.reset(token)

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        YAML comment lines are left unchanged.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))
