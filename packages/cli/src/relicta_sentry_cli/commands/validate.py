"""validate command: check the plugin configuration."""

from __future__ import annotations

import click
from rich.console import Console
from rich.markup import escape

from relicta_sentry_core.errors import ValidationError
from relicta_sentry_core.plugin import SentryPlugin

console = Console()


@click.command("validate")
@click.option(
    "--offline",
    is_flag=True,
    help="Skip the authenticated request that checks the token against Sentry.",
)
@click.pass_context
def validate_cmd(ctx, offline: bool):
    """Validate the configuration the host would pass to the plugin.

    \b
    Environment variables used when the config file leaves them unset:
      SENTRY_AUTH_TOKEN    Sentry auth token (or use ~/.sentryclirc)
      SENTRY_ORG           Sentry organization slug
      SENTRY_PROJECT       Sentry project slug
      SENTRY_URL           Sentry base URL (self-hosted)
    """
    config = ctx.obj["config"]
    response = SentryPlugin().validate(config, check_remote=not offline)

    try:
        response.raise_for_errors()
    except ValidationError as e:
        console.print(f"[red]{len(e.errors)} configuration error(s):[/red]")
        for error in e.errors:
            console.print(f"  [bold]{error.field}[/bold]: {escape(error.message)}")
        ctx.exit(1)

    console.print("[green]Configuration is valid.[/green]")
