"""Backend adapters presenting one credential model over each store."""

from credvault.adapters.legacy import LegacyAdapter, ListedRecord, parse_listing
from credvault.adapters.modern import ModernAdapter

__all__ = ["LegacyAdapter", "ListedRecord", "ModernAdapter", "parse_listing"]
