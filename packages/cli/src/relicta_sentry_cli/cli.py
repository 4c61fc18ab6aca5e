"""CLI entry point for relicta-sentry.

Commands:
  info      show plugin metadata and supported hooks
  validate  check the plugin configuration (and Sentry credentials)
  run       execute a lifecycle hook against a release event file

The host loads the plugin directly; this CLI exists to try a configuration
by hand or from CI before wiring it into a release.
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from relicta_sentry_cli.commands.info import info_cmd
from relicta_sentry_cli.commands.run import run_cmd
from relicta_sentry_cli.commands.validate import validate_cmd


def _setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("relicta-sentry"),
    prog_name="relicta-sentry",
)
@click.option(
    "--config",
    "config_path",
    default=".sentry-release.yml",
    show_default=True,
    help="Path to the plugin configuration file.",
    envvar="RELICTA_SENTRY_CONFIG",
)
@click.option("--verbose", "-v", is_flag=True, help="Log every Sentry API call.")
@click.pass_context
def main(ctx: click.Context, config_path: str, verbose: bool):
    """Sentry release tracking plugin for Relicta."""
    from relicta_sentry_cli.auth import resolve_auth_token
    from relicta_sentry_core.config import load_config

    _setup_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise click.UsageError(f"Could not load {config_path}: {e}")

    # Resolve token early so all subcommands share the same resolution.
    token = resolve_auth_token(config)
    if token:
        config["auth_token"] = token

    ctx.obj["config"] = config


main.add_command(info_cmd)
main.add_command(validate_cmd)
main.add_command(run_cmd)
