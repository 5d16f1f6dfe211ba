"""CLI commands for cardterm."""

from __future__ import annotations

import sys
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from cardterm import __version__
from cardterm.clock import VirtualClock
from cardterm.errors import GitHubError
from cardterm.github import GitHub
from cardterm.session import TerminalController
from cardterm.surface import ScreenSurface
from cardterm.types import SessionContext, keys_for

app = typer.Typer(
    name="cardterm",
    help="cardterm - simulated project terminals for portfolio cards",
    no_args_is_help=True,
)
console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"cardterm v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Log session and HTTP activity to stderr.",
    ),
) -> None:
    """cardterm entrypoint."""
    del version
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@app.command()
def demo(
    name: str = typer.Option("demo", "--name", help="Project name."),
    language: str = typer.Option("Python", "--language", help="Project language."),
    topic: Optional[List[str]] = typer.Option(
        None, "--topic", help="Project topic (repeatable)."
    ),
    typed: Optional[List[str]] = typer.Option(
        None, "--type", help="A line to type once the session is ready (repeatable)."
    ),
) -> None:
    """Run a terminal session for a made-up project."""
    clock = VirtualClock()
    surfaces: list[ScreenSurface] = []
    terminal = TerminalController(_surface_recorder(surfaces), clock)
    terminal.open(SessionContext(name, language, tuple(topic or ())))
    _drive(terminal, clock, typed or [])
    _show(surfaces[-1], f"{name} Terminal", terminal.state)


@app.command()
def repo(
    slug: str = typer.Argument(..., help="Repository as OWNER/NAME."),
    typed: Optional[List[str]] = typer.Option(
        None, "--type", help="A line to type once the session is ready (repeatable)."
    ),
    token: Optional[str] = typer.Option(
        None, "--token", help="GitHub token (defaults to GITHUB_TOKEN)."
    ),
) -> None:
    """Run the terminal a GitHub repository's project card would show."""
    owner, _, name = slug.partition("/")
    if not owner or not name:
        raise typer.BadParameter("expected OWNER/NAME", param_hint="SLUG")

    clock = VirtualClock()
    surfaces: list[ScreenSurface] = []
    terminal = TerminalController(_surface_recorder(surfaces), clock)

    try:
        with GitHub(token=token) as gh:
            card = gh.card(owner, name, terminal)
    except GitHubError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc

    if card.live_url:
        console.print(f"[green]Live demo:[/green] {card.live_url}")
        return
    if not card.can_run:
        console.print(f"[yellow]{name} has no detected language to run.[/yellow]")
        raise typer.Exit(1)

    card.run_code()
    _drive(terminal, clock, typed or [])
    _show(surfaces[-1], card.terminal_title, terminal.state)


def _surface_recorder(surfaces: list[ScreenSurface]):
    def factory() -> ScreenSurface:
        surface = ScreenSurface()
        surfaces.append(surface)
        return surface

    return factory


def _drive(terminal: TerminalController, clock: VirtualClock, lines: list[str]) -> None:
    clock.run_until_idle()
    for line in lines:
        if terminal.state != "interactive":
            break
        for event in keys_for(line):
            terminal.handle_key(event)
        clock.run_until_idle()


def _show(surface: ScreenSurface, title: str, state: str) -> None:
    console.print(Panel(Text(surface.text()), title=title, expand=False))
    console.print(f"session: {state}")
