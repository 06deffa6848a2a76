"""Command line interface.

Commands:
- spaceconvert init
- spaceconvert run
- spaceconvert alias <group_id>
- spaceconvert status
"""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from spaceconvert import __logo__, __version__
from spaceconvert.config.loader import get_config_path, load_config, save_config
from spaceconvert.config.schema import Config
from spaceconvert.utils.ids import server_of, space_alias_for

app = typer.Typer(help=f"{__logo__} spaceconvert - turn Matrix communities into spaces")
console = Console()

SECRET_FIELDS = {"access_token", "password"}


def _mask(value: str) -> str:
    if not value:
        return "[dim]unset[/dim]"
    return value[:4] + "…" if len(value) > 8 else "****"


def version_callback(value: bool):
    if value:
        console.print(f"{__logo__} spaceconvert v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None, "--version", "-v", callback=version_callback, is_eager=True
    ),
):
    """spaceconvert - Matrix community to space conversion bot."""
    pass


@app.command()
def init(
    homeserver: str = typer.Option("https://matrix.org", "--homeserver", help="Homeserver URL"),
    user_id: str = typer.Option("", "--user-id", help="Bot user id, e.g. @bot:example.org"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
):
    """Write a default configuration file."""
    path = config_path or get_config_path()
    if path.exists() and not force:
        console.print(f"[yellow]⚠️ Config already exists at {path}[/yellow]")
        console.print("[dim]Use --force to overwrite it[/dim]")
        raise typer.Exit(1)

    config = Config()
    config.matrix.homeserver = homeserver
    config.matrix.user_id = user_id
    save_config(config, path)
    console.print(f"[green]✅ Wrote config to {path}[/green]")
    console.print("[dim]Add an accessToken (or password) under \"matrix\" before running[/dim]")


@app.command()
def run(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", help="Debug logging on the console"),
):
    """Connect to Matrix and listen for conversion commands."""
    from spaceconvert.utils.logging import configure_logging

    config = load_config(config_path)
    configure_logging(level=config.logging.level, log_file=config.logging.file_path, verbose=verbose)

    console.print(f"{__logo__} Starting spaceconvert on {config.matrix.homeserver}...")
    try:
        asyncio.run(_serve(config))
    except KeyboardInterrupt:
        console.print("\nGoodbye!")
    except Exception as e:
        console.print(f"[red]❌ {e}[/red]")
        logger.exception("spaceconvert stopped with an error")
        raise typer.Exit(1)


async def _serve(config: Config) -> None:
    from spaceconvert.agent.loop import CommandLoop
    from spaceconvert.bus.queue import MessageBus
    from spaceconvert.channels.matrix import MatrixChannel
    from spaceconvert.convert.orchestrator import ConversionOrchestrator

    bus = MessageBus()
    channel = MatrixChannel(config.matrix, bus, config.bot)
    identity = await channel.connect()

    orchestrator = ConversionOrchestrator(channel.transport, identity, config.bot)
    loop = CommandLoop(bus, orchestrator)

    console.print(f"[green]✓[/green] Listening as {identity.user_id}")
    try:
        await asyncio.gather(loop.run(), channel.start())
    finally:
        await loop.stop()
        await channel.stop()


@app.command()
def alias(
    group_id: str = typer.Argument(..., help="Community id, e.g. +example:example.org"),
    server: Optional[str] = typer.Option(None, "--server", "-s", help="Bot server (default: from config)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Print the space alias a community converts to."""
    config = load_config(config_path)
    if not server:
        if not config.matrix.user_id:
            console.print("[red]❌ No --server given and no matrix.userId configured[/red]")
            raise typer.Exit(1)
        server = server_of(config.matrix.user_id)
    console.print(space_alias_for(group_id, server, config.bot.alias_prefix))


@app.command()
def status(
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Show the effective configuration."""
    path = config_path or get_config_path()
    config = load_config(config_path)

    console.print(f"{__logo__} spaceconvert status\n")
    console.print(f"Config: {path} {'[green]✓[/green]' if path.exists() else '[red]✗ (defaults)[/red]'}")

    table = Table(title="Configuration")
    table.add_column("Section", style="cyan")
    table.add_column("Key", style="green")
    table.add_column("Value")
    for section, model in (("matrix", config.matrix), ("bot", config.bot), ("logging", config.logging)):
        for key, value in model.model_dump().items():
            shown = _mask(value) if key in SECRET_FIELDS else str(value)
            table.add_row(section, key, shown)
    console.print(table)


if __name__ == "__main__":
    app()
