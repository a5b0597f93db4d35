"""CLI commands for credential management.

Commands:
    - add: Store a credential (prompts for the secret when not given)
    - get: Show one credential (masked by default) or list all of them
    - remove: Delete a credential
    - find: Search by resource and/or username
    - backends: Report the active backend and whether its store is usable

Example:
    Store and retrieve a credential::

        $ credvault add site.example.com alice
        $ credvault get site.example.com alice --show-value
        $ credvault remove site.example.com alice --yes
"""

import sys

import click
from pydantic import SecretStr

from credvault.config.settings import VaultSettings
from credvault.exceptions import CredentialError
from credvault.models import CredentialEntry, NotFound
from credvault.secure import to_plaintext
from credvault.vault import Vault, create_store, create_vault


def _get_vault(ctx: click.Context) -> Vault:
    """Build the vault on first use and keep it on the context."""
    if ctx.obj.get("vault") is None:
        ctx.obj["vault"] = create_vault(ctx.obj["settings"])
    vault: Vault = ctx.obj["vault"]
    return vault


def _report_error(e: CredentialError) -> None:
    click.echo(click.style(f"Error: {e.message}", fg="red"), err=True)
    if e.suggestion:
        click.echo(click.style(f"Suggestion: {e.suggestion}", fg="yellow"), err=True)
    sys.exit(1)


def _mask(value: str) -> str:
    if len(value) > 8:
        return value[:4] + "*" * (len(value) - 8) + value[-4:]
    return "*" * len(value)


def _echo_entries(entries: list[CredentialEntry]) -> None:
    if not entries:
        click.echo(click.style("No credentials found", fg="yellow"))
        return
    for entry in entries:
        click.echo(f"{entry.resource}\t{entry.username}")


@click.command(name="add")
@click.argument("resource")
@click.argument("username")
@click.option(
    "--secret",
    prompt=True,
    hide_input=True,
    confirmation_prompt=True,
    help="Secret value (will prompt if not provided)",
)
@click.pass_context
def add_credential(ctx: click.Context, resource: str, username: str, secret: str) -> None:
    """Store a credential for RESOURCE and USERNAME.

    An existing credential for the same pair is replaced.

    Examples:

        credvault add site.example.com alice

        credvault add github.com alice --secret "$TOKEN"
    """
    try:
        _get_vault(ctx).add(resource, username, SecretStr(secret))
        click.echo(click.style("Credential stored successfully", fg="green"))
    except CredentialError as e:
        _report_error(e)


@click.command(name="get")
@click.argument("resource", required=False)
@click.argument("username", required=False)
@click.option("--show-value", is_flag=True, help="Show full secret value (default: masked)")
@click.pass_context
def get_credential(ctx: click.Context, resource: str | None, username: str | None, show_value: bool) -> None:
    """Show the credential for RESOURCE and USERNAME.

    Without arguments, list every stored credential (secrets are never
    shown in the listing).
    """
    try:
        vault = _get_vault(ctx)
        if resource is None and username is None:
            _echo_entries(vault.list_entries())
            return

        result = vault.get(resource, username)
    except CredentialError as e:
        _report_error(e)
        return

    if isinstance(result, NotFound):
        click.echo(click.style(f"Credential not found: {result.identity}", fg="yellow"), err=True)
        sys.exit(1)

    click.echo(f"Resource: {result.resource}")
    click.echo(f"Username: {result.username}")
    value = to_plaintext(result.secret)
    if show_value:
        click.echo(f"Secret: {value}")
    else:
        click.echo(f"Secret: {_mask(value)}")
        click.echo(click.style("Use --show-value to display full secret", fg="yellow"))


@click.command(name="remove")
@click.argument("resource")
@click.argument("username")
@click.confirmation_option(prompt="Are you sure you want to remove this credential?")
@click.pass_context
def remove_credential(ctx: click.Context, resource: str, username: str) -> None:
    """Remove the credential for RESOURCE and USERNAME."""
    try:
        removed = _get_vault(ctx).remove(resource, username)
    except CredentialError as e:
        _report_error(e)
        return

    if removed:
        click.echo(click.style("Credential removed successfully", fg="green"))
    else:
        click.echo(click.style("Credential not found", fg="yellow"))


@click.command(name="find")
@click.option("--resource", help="Resource to match")
@click.option("--username", help="Username to match")
@click.pass_context
def find_credentials(ctx: click.Context, resource: str | None, username: str | None) -> None:
    """Find credentials by resource, username, or both.

    The legacy backend only supports searching by both together.
    """
    try:
        _echo_entries(_get_vault(ctx).find(resource=resource, username=username))
    except CredentialError as e:
        _report_error(e)


@click.command(name="backends")
@click.pass_context
def show_backends(ctx: click.Context) -> None:
    """Report the configured backend and whether its store is usable."""
    settings: VaultSettings = ctx.obj["settings"]
    try:
        capability = settings.capability()
    except CredentialError as e:
        _report_error(e)
        return
    store = create_store(settings, capability)

    click.echo(f"Backend: {capability} ({store.name})")
    click.echo("Store: ", nl=False)
    if store.available:
        click.echo(click.style("Available", fg="green"))
    else:
        click.echo(click.style("Not available", fg="yellow"))
