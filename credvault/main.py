"""CLI entry point for credvault."""

import sys

import click
from pydantic import ValidationError

from credvault.cli import (
    add_credential,
    find_credentials,
    get_credential,
    remove_credential,
    show_backends,
)
from credvault.config.settings import VaultSettings
from credvault.exceptions import ConfigurationError
from credvault.utils.logging_config import configure_logging, get_logger

log = get_logger(__name__)


@click.group()
@click.option(
    "--config",
    type=click.Path(dir_okay=False),
    envvar="CREDVAULT_CONFIG",
    help="Path to YAML configuration file",
)
@click.option("--log-level", default=None, help="Logging level (overrides configuration)")
@click.pass_context
def cli(ctx: click.Context, config: str | None, log_level: str | None) -> None:
    """credvault: one credential store over modern and legacy backends."""
    try:
        settings = VaultSettings.from_yaml(config) if config else VaultSettings()
    except ConfigurationError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)
    except ValidationError as e:
        click.echo(f"Error: Invalid configuration: {e}", err=True)
        sys.exit(1)

    try:
        configure_logging(log_level or settings.log_level, json_output=settings.json_logs)
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    log.debug("settings_loaded", backend=str(settings.backend), config=config)

    ctx.obj = {"settings": settings, "vault": None}


cli.add_command(add_credential)
cli.add_command(get_credential)
cli.add_command(remove_credential)
cli.add_command(find_credentials)
cli.add_command(show_backends)


if __name__ == "__main__":
    cli()
