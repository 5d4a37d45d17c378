"""
eggprofit CLI — `eggprofit` command.

Commands:
  eggprofit launch            Run one launch resolution and print the phase
  eggprofit state show|reset  Inspect or clear the persisted launch state
  eggprofit deeplink <url>    Store a deep link for the next launch
  eggprofit cookies show      Print the persisted cookie snapshot
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional

try:
    import click
    from rich.console import Console
    from rich.logging import RichHandler
except ImportError:
    raise SystemExit("CLI requires extras: pip install eggprofit[cli]")

from eggprofit.config import Settings, load_settings

console = Console()


def _run(coro):
    return asyncio.run(coro)


def _settings(ctx: click.Context) -> Settings:
    return ctx.obj["settings"]


@click.group()
@click.version_option("0.1.0")
@click.option("--config", "config_path", type=click.Path(path_type=Path), default=None,
              help="Settings file (default ~/.eggprofit/config.json)")
@click.option("-v", "--verbose", is_flag=True, help="Log resolver activity")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[Path], verbose: bool):
    """EggProfit launch tooling — resolve the launch phase, inspect state."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    try:
        settings = load_settings(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


# Register subcommands from separate modules
from eggprofit.cli.launch import launch_cmd
from eggprofit.cli.state import state, deeplink_cmd, cookies

main.add_command(launch_cmd)
main.add_command(state)
main.add_command(deeplink_cmd)
main.add_command(cookies)


if __name__ == "__main__":
    main()
