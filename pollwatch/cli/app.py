"""Main Typer application — imports and registers all CLI commands.

Entry point: ``pollwatch`` (configured via pyproject.toml scripts).

Commands: resync, tasks, policy-scan, config.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from pollwatch import __version__
from pollwatch.cli.commands.policy_scan import policy_scan_cmd
from pollwatch.cli.commands.resync import resync_cmd
from pollwatch.cli.commands.tasks import tasks_cmd

app = typer.Typer(
    name="pollwatch",
    help="Pollwatch: watch long-running cloud and vSphere operations to completion.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)

# Register subcommands
app.command(name="resync", help="Monitor a vSAN object resync.")(resync_cmd)
app.command(name="tasks", help="Monitor outstanding vSphere tasks.")(tasks_cmd)
app.command(name="policy-scan", help="Run and monitor an Azure Policy compliance scan.")(
    policy_scan_cmd
)


@app.command(name="config", help="Show the effective configuration.")
def config_cmd() -> None:
    """Print every setting after .env and POLLWATCH_* overrides, secrets masked."""
    from pollwatch.cli.commands._runner import load_or_exit

    console = Console()
    config = load_or_exit()

    table = Table(title=f"Pollwatch v{__version__} configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in config.masked().items():
        table.add_row(key, "[dim]unset[/dim]" if value is None else str(value))
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
