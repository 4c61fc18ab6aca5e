"""run command: execute a lifecycle hook against a release event file."""

from __future__ import annotations

import json

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from relicta_sentry_core.events import ReleaseContext
from relicta_sentry_core.plugin import ExecuteRequest, Hook, SentryPlugin
from relicta_sentry_core.utils.cancel import CallContext

console = Console()


def _load_event(path: str) -> ReleaseContext:
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise click.UsageError(f"Could not read release event {path}: {e}")
    if not isinstance(data, dict):
        raise click.UsageError(f"Release event {path} must be a JSON object.")
    return ReleaseContext.from_dict(data)


@click.command("run")
@click.option(
    "--hook",
    required=True,
    type=click.Choice([h.value for h in Hook]),
    help="Lifecycle hook to execute.",
)
@click.option(
    "--event",
    "event_path",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file describing the release (version, tag_name, commit_sha, changes).",
)
@click.option("--dry-run", is_flag=True, help="Describe the Sentry calls without making them.")
@click.option(
    "--timeout",
    type=float,
    default=None,
    help="Overall deadline in seconds for all Sentry calls of this run.",
)
@click.pass_context
def run_cmd(ctx, hook: str, event_path: str, dry_run: bool, timeout: float | None):
    """Run one plugin hook the way the host would."""
    release = _load_event(event_path)
    request = ExecuteRequest(hook=hook, config=ctx.obj["config"], context=release, dry_run=dry_run)
    call_ctx = CallContext.with_timeout(timeout) if timeout else CallContext()

    response = SentryPlugin().execute(request, context=call_ctx)

    if response.success:
        console.print(f"[green]{escape(response.message)}[/green]")
    else:
        console.print(f"[red]{escape(response.error or response.message)}[/red]")

    if response.outputs:
        table = Table(title="Outputs", show_header=True, header_style="bold cyan")
        table.add_column("Name", style="bold")
        table.add_column("Value")
        for name, value in response.outputs.items():
            table.add_row(name, escape(value if isinstance(value, str) else json.dumps(value)))
        console.print(table)

    if not response.success:
        ctx.exit(1)
