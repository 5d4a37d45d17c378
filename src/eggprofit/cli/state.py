"""CLI: eggprofit state show|reset, deeplink, cookies show"""

import click
from rich.console import Console
from rich.table import Table

from eggprofit.storage import CookieStore, LaunchStateStore

console = Console()


def _run(coro):
    from eggprofit.cli.main import _run
    return _run(coro)


@click.group()
def state():
    """Persisted launch state."""


@state.command("show")
@click.option("--json-output", "--json", is_flag=True)
@click.pass_context
def state_show(ctx: click.Context, json_output: bool):
    """Show the persisted launch state."""
    current = LaunchStateStore.in_dir(ctx.obj["settings"].state_dir).state
    if json_output:
        click.echo(current.model_dump_json(indent=2))
        return
    table = Table(title="Launch state")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in current.model_dump(mode="json").items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


@state.command("reset")
@click.confirmation_option(prompt="Clear the persisted launch state?")
@click.pass_context
def state_reset(ctx: click.Context):
    """Forget the launch mode, saved address and notification flags."""
    store = LaunchStateStore.in_dir(ctx.obj["settings"].state_dir)
    _run(store.reset())
    console.print("[green]Launch state cleared.[/green]")


@click.command("deeplink")
@click.argument("url")
@click.pass_context
def deeplink_cmd(ctx: click.Context, url: str):
    """Store a deep link; the next launch opens it."""
    store = LaunchStateStore.in_dir(ctx.obj["settings"].state_dir)
    _run(store.update(pending_deep_link=url))
    console.print(f"[green]Deep link stored: {url}[/green]")


@click.group()
def cookies():
    """Persisted browsing cookies."""


@cookies.command("show")
@click.pass_context
def cookies_show(ctx: click.Context):
    """Print the cookie snapshot grouped by domain."""
    snapshot = CookieStore.in_dir(ctx.obj["settings"].state_dir).load()
    if not snapshot:
        console.print("[yellow]No cookies stored.[/yellow]")
        return
    table = Table(title="Cookies")
    table.add_column("Domain", style="bold")
    table.add_column("Name")
    table.add_column("Value")
    table.add_column("Path")
    for domain, by_name in sorted(snapshot.items()):
        for name, attrs in sorted(by_name.items()):
            table.add_row(domain, name, str(attrs.get("value", "")), str(attrs.get("path", "/")))
    console.print(table)
