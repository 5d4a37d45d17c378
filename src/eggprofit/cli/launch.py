"""CLI: eggprofit launch"""

import asyncio
import json
from typing import Optional

import click
from rich.console import Console
from rich.status import Status
from rich.table import Table

from eggprofit.attribution import StaticAttributionCollector
from eggprofit.client import EggProfitLauncher
from eggprofit.models.launch import LaunchPhase
from eggprofit.storage import get_or_create_install_id

console = Console()


def _run(coro):
    from eggprofit.cli.main import _run
    return _run(coro)


class ConsolePrompter:
    """Notification prompt answered on the terminal.

    Pauses ``status`` (a rich spinner) while waiting for the answer so the
    question is not drawn over.
    """

    def __init__(self, status: Optional[Status] = None):
        self._status = status

    async def _confirm(self, question: str, default: bool) -> bool:
        if self._status is not None:
            self._status.stop()
        try:
            return await asyncio.to_thread(click.confirm, question, default=default)
        finally:
            if self._status is not None:
                self._status.start()

    async def ask(self) -> bool:
        return await self._confirm("Allow notifications about bonuses and promos?", False)

    async def request_permission(self) -> bool:
        return await self._confirm("System: grant notification permission?", True)


@click.command("launch")
@click.option("--attribution", "attribution_json", default=None,
              help="Conversion payload as a JSON object (omit to simulate attribution failure)")
@click.option("--install-id", default=None, help="Override the stored install id")
@click.option("--timeout", default=60.0, type=float, show_default=True, help="Seconds to wait for a phase")
@click.pass_context
def launch_cmd(ctx: click.Context, attribution_json: Optional[str], install_id: Optional[str], timeout: float):
    """Run one launch resolution and print the resulting phase."""
    settings = ctx.obj["settings"]
    payload = None
    if attribution_json is not None:
        try:
            payload = json.loads(attribution_json)
        except json.JSONDecodeError as e:
            raise click.BadParameter(f"not JSON: {e}", param_hint="--attribution")
        if not isinstance(payload, dict):
            raise click.BadParameter("must be a JSON object", param_hint="--attribution")

    async def _launch():
        collector = StaticAttributionCollector(
            get_or_create_install_id(settings.state_dir, install_id), payload=payload,
        )
        status = console.status("Resolving launch phase...")
        launcher = EggProfitLauncher(settings, collector, ConsolePrompter(status))
        try:
            with status:
                phase = await asyncio.wait_for(launcher.launch(), timeout=timeout)
        finally:
            await launcher.close()

        table = Table(title="Launch")
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("phase", phase.value)
        table.add_row("address", launcher.remote_address or "")
        table.add_row("path", " -> ".join(p.value for p in launcher.resolver.history))
        if launcher.resolver.last_error is not None:
            table.add_row("last error", str(launcher.resolver.last_error))
        console.print(table)
        if phase == LaunchPhase.CONNECTIVITY_FAILURE:
            raise SystemExit(2)

    _run(_launch())
