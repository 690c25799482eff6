"""Record management CLI commands."""

from datetime import datetime
from pathlib import Path

import click
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from confstore.storage import decode, validate_name


def get_backend(ctx):
    """Get the storage backend from context."""
    return ctx.obj.backend


def _check_name(name: str) -> str:
    """Validate a name given on the command line."""
    try:
        validate_name(name)
    except ValueError as e:
        raise click.BadParameter(str(e))
    return name


def _format_time(timestamp: float | int | None) -> str:
    if not timestamp:
        return "-"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


# Command: list
@click.command()
@click.argument("prefix", default="")
@click.option("--long", "-l", "long_format", is_flag=True, help="Show timestamps")
@click.pass_context
def list_cmd(ctx: click.Context, prefix: str, long_format: bool) -> None:
    """List configuration names, optionally filtered by PREFIX."""
    backend = get_backend(ctx)
    console = ctx.obj.console

    names = sorted(backend.list_all(prefix))

    if not long_format:
        for name in names:
            click.echo(name)
        return

    if not names:
        console.print("[yellow]No configuration found[/yellow]")
        return

    table = Table(title=f"Configuration ({len(names)})")
    table.add_column("Name", style="cyan")
    table.add_column("Time", style="dim")
    for name in names:
        table.add_row(escape(name), _format_time(backend.get_modified_time(name)))
    console.print(table)


# Command: get
@click.command()
@click.argument("name")
@click.pass_context
def get(ctx: click.Context, name: str) -> None:
    """Show a configuration record as JSON."""
    backend = get_backend(ctx)
    console = ctx.obj.console

    data = backend.read(_check_name(name))
    if data is None:
        console.print(f"[red]Configuration not found:[/red] {escape(name)}")
        ctx.exit(1)

    console.print_json(data=data, indent=4)


# Command: set
@click.command()
@click.argument("name")
@click.option("--value", help="Record as a JSON object")
@click.option(
    "--file",
    "source",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read the record from a JSON file",
)
@click.pass_context
def set_cmd(ctx: click.Context, name: str, value: str | None, source: Path | None) -> None:
    """Write a configuration record."""
    backend = get_backend(ctx)
    console = ctx.obj.console

    _check_name(name)
    if (value is None) == (source is None):
        raise click.UsageError("Provide exactly one of --value or --file")

    text = value if value is not None else source.read_text(encoding="utf-8")
    try:
        data = decode(text)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="record")

    backend.write(name, data)
    console.print(f"[green]✓[/green] Saved {escape(name)}")


# Command: delete
@click.command()
@click.argument("name")
@click.pass_context
def delete(ctx: click.Context, name: str) -> None:
    """Delete a configuration record."""
    backend = get_backend(ctx)
    console = ctx.obj.console

    if not backend.delete(_check_name(name)):
        console.print(f"[red]Configuration not found:[/red] {escape(name)}")
        ctx.exit(1)

    console.print(f"[green]✓[/green] Deleted {escape(name)}")


# Command: delete-all
@click.command()
@click.argument("prefix", default="")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_all(ctx: click.Context, prefix: str, yes: bool) -> None:
    """Delete every configuration record starting with PREFIX."""
    backend = get_backend(ctx)
    console = ctx.obj.console

    names = backend.list_all(prefix)
    if not names:
        console.print("[yellow]No configuration found[/yellow]")
        return

    if not yes and not Confirm.ask(
        f"Delete {len(names)} configuration records?", console=console
    ):
        console.print("[yellow]Cancelled[/yellow]")
        return

    if backend.delete_all(prefix):
        console.print(f"[green]✓[/green] Deleted {len(names)} records")
    else:
        console.print("[red]Some records could not be deleted[/red]")
        ctx.exit(1)


# Command: rename
@click.command()
@click.argument("name")
@click.argument("new_name")
@click.pass_context
def rename(ctx: click.Context, name: str, new_name: str) -> None:
    """Rename a configuration record."""
    backend = get_backend(ctx)
    console = ctx.obj.console

    backend.rename(_check_name(name), _check_name(new_name))
    console.print(f"[green]✓[/green] Renamed {escape(name)} to {escape(new_name)}")


# Command: mtime
@click.command()
@click.argument("name")
@click.pass_context
def mtime(ctx: click.Context, name: str) -> None:
    """Show the timestamp tracked for a record.

    File storage reports the last change; database storage reports when
    the record was first created.
    """
    backend = get_backend(ctx)
    console = ctx.obj.console

    timestamp = backend.get_modified_time(_check_name(name))
    if timestamp is None:
        console.print(f"[red]Configuration not found:[/red] {escape(name)}")
        ctx.exit(1)

    console.print(f"{int(timestamp)} ({_format_time(timestamp)})")
