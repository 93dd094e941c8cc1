"""
Console output helpers for the show-package CLI.
"""

from rich.console import Console
from rich.markup import escape

console = Console()


def print_header(title: str, subtitle: str = ""):
    """Prints a styled header."""
    console.rule(f"[bold blue]{title}")
    if subtitle:
        console.print(f"[dim]{subtitle}[/dim]", justify="center")
    console.print()


def print_error(message: str) -> None:
    console.print(f"[bold red][ERR][/bold red] {escape(message)}", highlight=False, soft_wrap=True)
