"""Shared console output utilities."""

from rich.console import Console

# CLI messages outside the TUI go to stderr so stdout stays clean
console = Console(stderr=True)


def print_error(message: str) -> None:
    console.print(f"[red]Error: {message}[/red]")
