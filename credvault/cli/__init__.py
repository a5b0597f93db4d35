"""Command-line interface commands."""

from credvault.cli.credentials import (
    add_credential,
    find_credentials,
    get_credential,
    remove_credential,
    show_backends,
)

__all__ = [
    "add_credential",
    "find_credentials",
    "get_credential",
    "remove_credential",
    "show_backends",
]
