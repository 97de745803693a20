"""Rich console shared by the build and query commands (stdout only; serve never prints)."""

import sys

from rich.console import Console
from rich.theme import Theme

FLEETINDEX_THEME = Theme({
    "error": "bold red",
    "success": "bold green",
    "cmd": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

console = Console(theme=FLEETINDEX_THEME, force_terminal=sys.stdout.isatty())


def print_header(title: str) -> None:
    console.rule(f"[bold]{title}[/bold]")


def print_error(msg: str) -> None:
    console.print(f"[error]ERROR:[/error] {msg}")


def print_success(msg: str) -> None:
    console.print(f"[success]OK:[/success] {msg}")
