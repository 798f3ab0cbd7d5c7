"""
Main CLI entry point for streamscout.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel

from streamscout import __version__
from streamscout.cli.commands.live import live_command
from streamscout.cli.commands.serve import serve_command
from streamscout.cli.commands.viewers import viewers_command
from streamscout.config.settings import settings

console = Console()

app = typer.Typer(
    name="streamscout",
    help="Live stream and concurrent viewer lookup for YouTube channels",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="viewers")(viewers_command)
app.command(name="live")(live_command)
app.command(name="serve")(serve_command)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_log_handler: Optional[logging.Handler] = None


def configure_logging(verbose: bool = False) -> None:
    """
    Send ``streamscout`` log records to stderr.

    Parameters
    ----------
    verbose : bool, optional
        Log at DEBUG instead of the configured ``log_level`` (default False).
    """
    global _log_handler

    log_level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    package_logger = logging.getLogger("streamscout")

    # Repeated invocations in one process replace the handler
    if _log_handler is not None:
        package_logger.removeHandler(_log_handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
    _log_handler = handler


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]streamscout[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False, "--version", "-v", help="Show version and exit"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-V", help="Enable debug logging on stderr"
    ),
) -> None:
    """
    streamscout - live stream lookup for YouTube channels.

    Resolve the live broadcast of a channel, read its concurrent viewer
    count, and serve the results through a small metadata API.
    """
    if version:
        console.print(f"streamscout v{__version__}")
        raise typer.Exit(code=0)

    configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        console.print(
            "[yellow]Use 'streamscout --help' for available commands[/yellow]"
        )
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
