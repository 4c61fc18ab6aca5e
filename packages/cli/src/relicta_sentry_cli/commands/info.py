"""info command: show plugin metadata."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from relicta_sentry_core.plugin import SentryPlugin

console = Console()


@click.command("info")
def info_cmd():
    """Show the plugin's name, version and supported hooks."""
    info = SentryPlugin().get_info()

    table = Table(title="Relicta plugin", show_header=False)
    table.add_column("Field", style="bold cyan")
    table.add_column("Value")
    table.add_row("Name", info.name)
    table.add_row("Version", info.version)
    table.add_row("Description", info.description)
    table.add_row("Author", info.author)
    table.add_row("Hooks", ", ".join(h.value for h in info.hooks))

    console.print(table)
