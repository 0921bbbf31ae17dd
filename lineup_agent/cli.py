"""CLI entrypoint (Typer + Rich).

Usage:
- `lineup run "Alice, Bob, Carl, ..."`   names as an argument
- `lineup run --file roster.txt`          names from a file
- `echo "..." | lineup run -`             names from stdin
- `lineup positions`                      list assignable positions
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from lineup_agent.agent.workflow import run_lineup
from lineup_agent.config import get_settings
from lineup_agent.errors import ConfigurationError
from lineup_agent.schemas import Lineup, LineupRunResult, Position, RunStatus

app = typer.Typer(help="Lineup Agent CLI: assign baseball positions with an LLM.")
console = Console()


def _configure_logging(verbose: bool) -> None:
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _read_players(players: Optional[str], file: Optional[Path]) -> str:
    if file is not None:
        return file.read_text(encoding="utf-8")
    if players == "-":
        return sys.stdin.read()
    if players:
        return players
    raise typer.BadParameter("Provide player names, '-' for stdin, or --file.")


def _lineup_table(lineup: Lineup) -> Table:
    table = Table(title="Lineup")
    table.add_column("#", justify="right")
    table.add_column("Player")
    table.add_column("Position")
    for i, player in enumerate(lineup.players, 1):
        position = player.position.value if player.position else "UNASSIGNED"
        table.add_row(str(i), player.name, position)
    return table


def _print_result(result: LineupRunResult, markdown: bool) -> None:
    if result.status == RunStatus.COMPLETED and result.lineup is not None:
        if markdown:
            typer.echo(result.lineup.to_markdown())
        else:
            console.print(_lineup_table(result.lineup))
        console.print(f"[green]Completed[/green] after {result.llm_calls} LLM call(s)")
        return

    console.print(f"[red]{result.stuck.message if result.stuck else 'No lineup produced'}[/red]")
    for error in result.errors:
        console.print(f"[yellow]- {error}[/yellow]")


@app.command()
def run(
    players: Optional[str] = typer.Argument(None, help="Player names, or '-' to read stdin"),
    file: Optional[Path] = typer.Option(
        None, "--file", "-f", exists=True, dir_okay=False, readable=True,
        help="Read player names from a file",
    ),
    run_id: Optional[str] = typer.Option(None, "--run-id", help="Identifier for this run"),
    markdown: bool = typer.Option(False, "--markdown", help="Print the lineup as markdown"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Generate a lineup from a list of player names."""
    _configure_logging(verbose)
    user_input = _read_players(players, file)

    try:
        result = asyncio.run(run_lineup(user_input, run_id=run_id))
    except ConfigurationError as e:
        console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(code=2)

    _print_result(result, markdown)
    if result.status != RunStatus.COMPLETED:
        raise typer.Exit(code=1)


@app.command()
def positions():
    """List the positions the model may assign."""
    for position in Position:
        typer.echo(position.value)


if __name__ == "__main__":
    app()
