"""Main CLI entry point and application setup."""

import logging
import sys
from dataclasses import dataclass
from pathlib import Path

import click
from click.exceptions import Exit
from rich.console import Console
from rich.markup import escape

from confstore import __version__
from confstore.cli.commands import archive, records
from confstore.cli.config import Config, build_connections, default_storage, load_config
from confstore.storage import BaseBackend, ConnectionManager, get_backend


@dataclass
class Context:
    """CLI context that holds shared resources."""

    backend: BaseBackend
    connections: ConnectionManager
    console: Console
    config: dict | None = None
    debug: bool = False


def setup_logging(
    verbose: bool = False, quiet: bool = False, debug: bool = False
) -> None:
    """Configure logging based on CLI flags."""
    if quiet:
        level = logging.WARNING
    elif verbose or debug:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s"
        if not debug
        else "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def create_console(no_color: bool = False, width: int | None = None) -> Console:
    """Create Rich console with appropriate settings."""
    return Console(
        no_color=no_color,
        width=width or 120,
        highlight=not no_color,
        color_system=None if no_color else "auto",
    )


class ConfStoreGroup(click.Group):
    """Custom group that handles KeyboardInterrupt and storage errors."""

    def invoke(self, ctx):
        try:
            return super().invoke(ctx)
        except KeyboardInterrupt:
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print("[yellow]Interrupted[/yellow]")
            ctx.exit(130)
        except (click.ClickException, click.Abort, Exit, SystemExit):
            raise
        except Exception as e:
            debug = getattr(ctx.obj, "debug", False) if ctx.obj else False
            if debug:
                raise
            console = getattr(ctx.obj, "console", None) if ctx.obj else None
            if console:
                console.print(f"[red]Error:[/red] {escape(str(e))}")
            else:
                click.echo(f"Error: {e}", err=True)
            ctx.exit(1)


@click.group(cls=ConfStoreGroup)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
@click.option("--debug", is_flag=True, help="Enable debug mode with full tracebacks")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to configuration file",
)
@click.option(
    "--storage",
    "-s",
    help="Storage specifier, e.g. file:/path/to/dir or db:/default/config",
)
@click.version_option(
    version=__version__, prog_name="confstore", message="confstore version %(version)s"
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    no_color: bool,
    debug: bool,
    config: Path | None,
    storage: str | None,
) -> None:
    """Configuration record storage tool.

    Stores named JSON configuration records in a directory or a SQLite
    table, and moves them between the two through tar archives.
    """
    setup_logging(verbose=verbose, quiet=quiet, debug=debug)

    console = create_console(no_color=no_color)

    try:
        config_data = load_config()
        if config:
            config_data = Config.merge_configs(config_data, Config.from_file(config))
    except ValueError as e:
        if debug:
            raise
        click.echo(f"Error loading config file: {e}", err=True)
        ctx.exit(1)

    try:
        connections = build_connections(config_data)
        specifier = storage or config_data.get("storage") or default_storage()
        backend = get_backend(str(specifier), connections)
    except Exception as e:
        if debug:
            raise
        console.print(f"[red]Error initializing storage:[/red] {escape(str(e))}")
        ctx.exit(1)

    ctx.call_on_close(connections.close)
    ctx.obj = Context(
        backend=backend,
        connections=connections,
        console=console,
        config=config_data,
        debug=debug,
    )


# Command: init
@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the storage directory or table."""
    backend = ctx.obj.backend
    console = ctx.obj.console

    if backend.is_initialized():
        console.print(f"[yellow]Storage already initialized:[/yellow] {backend.specifier}")
        return

    backend.initialize_storage()
    console.print(f"[green]✓[/green] Initialized storage at {backend.specifier}")


# Command: status
@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show storage location and record count."""
    backend = ctx.obj.backend
    console = ctx.obj.console

    console.print("\n[bold]Storage Status[/bold]\n")
    console.print(f"Specifier: {backend.specifier}")
    console.print(f"Backend: {backend.url_prefix()}")

    if not backend.is_initialized():
        console.print("Initialized: [red]no[/red]")
        return

    console.print("Initialized: [green]yes[/green]")
    console.print(f"Records: {len(backend.list_all())}")


cli.add_command(records.list_cmd, name="list")
cli.add_command(records.get)
cli.add_command(records.set_cmd, name="set")
cli.add_command(records.delete)
cli.add_command(records.delete_all, name="delete-all")
cli.add_command(records.rename)
cli.add_command(records.mtime)
cli.add_command(archive.export_command, name="export")
cli.add_command(archive.import_command, name="import")


def main() -> None:
    """Main entry point for the CLI application."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
