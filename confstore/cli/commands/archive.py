"""Archive export and import commands.

Archives are tar files (gzip-compressed for ``.tar.gz`` / ``.tgz``) with
one ``<name>.json`` member per record, readable by either backend.
"""

from pathlib import Path

import click
from rich.progress import Progress, SpinnerColumn, TextColumn

from confstore.storage.archive import list_archive


def get_backend(ctx):
    """Get the storage backend from context."""
    return ctx.obj.backend


@click.command("export")
@click.argument("destination", type=click.Path(dir_okay=False, path_type=Path))
@click.pass_context
def export_command(ctx: click.Context, destination: Path) -> None:
    """Export every record to a tar archive."""
    backend = get_backend(ctx)
    console = ctx.obj.console

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"Exporting {backend.specifier}...", total=None)
        archive = backend.export_archive(destination)

    count = len(list_archive(archive))
    console.print(f"[green]✓[/green] Exported {count} records to {archive}")


@click.command("import")
@click.argument(
    "source", type=click.Path(exists=True, dir_okay=False, path_type=Path)
)
@click.pass_context
def import_command(ctx: click.Context, source: Path) -> None:
    """Import every record from a tar archive, overwriting existing ones."""
    backend = get_backend(ctx)
    console = ctx.obj.console

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"Importing {source}...", total=None)
        names = backend.import_archive(source)

    console.print(f"[green]✓[/green] Imported {len(names)} records into {backend.specifier}")
