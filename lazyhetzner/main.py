#!/usr/bin/env python3
"""
Main CLI entry point for lazyhetzner
"""

from pathlib import Path
from typing import Optional

import typer

from lazyhetzner import __version__
from lazyhetzner.config.settings import get_config_path, get_env_var, validate_all_env_vars
from lazyhetzner.exceptions import LazyHetznerError
from lazyhetzner.utils.logging_utils import level_from_name, setup_tui_logging
from lazyhetzner.utils.output import print_error

app = typer.Typer(
    name="lazyhetzner",
    help="Terminal dashboard for browsing Hetzner Cloud resources",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    if value:
        typer.echo(f"lazyhetzner version {__version__}")
        raise typer.Exit()


@app.command()
def main(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Project config file (default: ~/.config/lazyhetzner/config.json)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output and key events"),
    version: bool = typer.Option(
        False, "--version", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
):
    """
    lazyhetzner - browse servers, networks, load balancers, floating IPs,
    firewalls and volumes of a Hetzner Cloud project.

    [bold]Keys:[/bold]

    Projects: [cyan]enter[/cyan] select, [cyan]a[/cyan] add, [cyan]d[/cyan] delete, [cyan]t[/cyan] one-time token

    Resources: [cyan]tab[/cyan]/[cyan]←→[/cyan] switch, [cyan]enter[/cyan] actions, [cyan]r[/cyan] reload, [cyan]q[/cyan] back
    """
    errors = validate_all_env_vars()
    if errors:
        for error in errors:
            print_error(error)
        raise typer.Exit(1)

    level = level_from_name(get_env_var("LAZYHETZNER_LOG_LEVEL"), verbose=verbose)
    logger, _ = setup_tui_logging(level)
    config_path = get_config_path(config)
    logger.info(f"lazyhetzner {__version__} starting (config: {config_path})")

    # Imported here so --help and --version stay fast
    from lazyhetzner.ui.app import LazyHetznerApp

    try:
        LazyHetznerApp(config_path=config_path).run()
    except LazyHetznerError as e:
        logger.error(f"Fatal error: {e}")
        print_error(str(e))
        raise typer.Exit(1)


def run():
    """Console script entry point."""
    app()


if __name__ == "__main__":
    run()
