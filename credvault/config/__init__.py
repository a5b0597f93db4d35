"""Configuration for credvault.

Example:
    >>> from credvault.config import VaultSettings
    >>> settings = VaultSettings.from_yaml("credvault.yaml")
    >>> settings.capability()
    <BackendCapability.MODERN: 'modern'>
"""

from credvault.config.settings import VaultSettings, detect_capability

__all__ = ["VaultSettings", "detect_capability"]
