"""CLI application for wikifs using Rich and Typer."""

import asyncio
import logging
import sys
from collections.abc import Awaitable
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from wikifs.core.config import WIKI_ROOT_SUBDIR, WORKSPACES_FILE, setup_logging
from wikifs.core.errors import WikiFsError
from wikifs.core.router import WikiFileSystem
from wikifs.core.types import EntryKind, VirtualUri, WorkspaceFolder
from wikifs.core.workspaces import WorkspaceConfigError, WorkspacesFile

T = TypeVar("T")

app = typer.Typer(
    name="wikifs",
    help="wikifs - browse and edit Markdown wikis by extension-less paths",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

KIND_LABELS = {
    EntryKind.DIRECTORY: "[bold blue]dir[/bold blue]",
    EntryKind.FILE: "file",
    EntryKind.SYMBOLIC_LINK: "[cyan]link[/cyan]",
    EntryKind.UNKNOWN: "[dim]?[/dim]",
}


def _build_filesystem(config: Optional[str]) -> WikiFileSystem:
    """Build the filesystem from a workspaces file or the current directory."""
    config_path = Path(config) if config else Path(WORKSPACES_FILE)
    if config or config_path.exists():
        workspaces = WorkspacesFile(config_path)
        loaded = workspaces.load()
        return WikiFileSystem(workspaces.folders(), root_subdir=loaded.root_subdir)

    cwd = Path.cwd()
    return WikiFileSystem(
        [WorkspaceFolder(name=cwd.name, path=str(cwd))],
        root_subdir=WIKI_ROOT_SUBDIR,
    )


def _filesystem(ctx: typer.Context) -> WikiFileSystem:
    try:
        return _build_filesystem(ctx.obj.get("config"))
    except WorkspaceConfigError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)


def _run(coro: Awaitable[T]) -> T:
    """Run a filesystem call, turning wiki errors into exit code 1."""

    async def _main() -> T:
        return await coro

    try:
        return asyncio.run(_main())
    except WikiFsError as e:
        err_console.print(f"[red]{e.code}:[/red] {e}")
        raise typer.Exit(1)


def _format_time(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime(
        "%Y-%m-%d %H:%M:%S"
    )


@app.command("ls")
def list_directory(
    ctx: typer.Context,
    uri: str = typer.Argument("/", help="Directory to list"),
):
    """List a wiki directory."""
    fs = _filesystem(ctx)
    entries = _run(fs.read_directory(VirtualUri.parse(uri)))

    if not entries:
        console.print("[dim]Empty directory.[/dim]")
        return

    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Kind")
    table.add_column("Name")
    for entry in entries:
        table.add_row(KIND_LABELS[entry.kind], entry.name)
    console.print(table)


@app.command()
def cat(
    ctx: typer.Context,
    uri: str = typer.Argument(..., help="Document to print"),
):
    """Print a document."""
    fs = _filesystem(ctx)
    content = _run(fs.read_file(VirtualUri.parse(uri)))
    typer.echo(content.decode("utf-8", errors="replace"), nl=False)


@app.command()
def write(
    ctx: typer.Context,
    uri: str = typer.Argument(..., help="Document to write"),
    source: Optional[Path] = typer.Option(
        None,
        "--file",
        "-f",
        help="Read content from this file instead of stdin",
    ),
    create: bool = typer.Option(True, help="Create the document if missing"),
    overwrite: bool = typer.Option(True, help="Replace an existing document"),
):
    """Write a document from a file or stdin."""
    fs = _filesystem(ctx)
    content = source.read_bytes() if source else sys.stdin.read().encode("utf-8")
    _run(
        fs.write_file(
            VirtualUri.parse(uri), content, create=create, overwrite=overwrite
        )
    )
    console.print(f"[green]Wrote {len(content)} bytes to {uri}[/green]")


@app.command()
def mkdir(
    ctx: typer.Context,
    uri: str = typer.Argument(..., help="Directory to create"),
):
    """Create a directory."""
    fs = _filesystem(ctx)
    _run(fs.create_directory(VirtualUri.parse(uri)))
    console.print(f"[green]Created {uri}[/green]")


@app.command()
def rm(
    ctx: typer.Context,
    uri: str = typer.Argument(..., help="Document or directory to delete"),
    recursive: bool = typer.Option(
        False, "--recursive", "-r", help="Delete non-empty directories"
    ),
):
    """Delete a document or directory."""
    fs = _filesystem(ctx)
    _run(fs.delete(VirtualUri.parse(uri), recursive=recursive))
    console.print(f"[green]Deleted {uri}[/green]")


@app.command()
def mv(
    ctx: typer.Context,
    old_uri: str = typer.Argument(..., help="Document or directory to move"),
    new_uri: str = typer.Argument(..., help="New path, inside the same wiki"),
    overwrite: bool = typer.Option(False, help="Replace an existing target"),
):
    """Rename a document or directory."""
    fs = _filesystem(ctx)
    _run(
        fs.rename(
            VirtualUri.parse(old_uri), VirtualUri.parse(new_uri), overwrite=overwrite
        )
    )
    console.print(f"[green]Moved {old_uri} -> {new_uri}[/green]")


@app.command()
def stat(
    ctx: typer.Context,
    uri: str = typer.Argument(..., help="Entry to inspect"),
):
    """Show metadata of an entry."""
    fs = _filesystem(ctx)
    result = _run(fs.stat(VirtualUri.parse(uri)))

    table = Table(title=uri, show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("Kind", result.kind.name.lower())
    table.add_row("Size", str(result.size))
    table.add_row("Created", _format_time(result.ctime))
    table.add_row("Modified", _format_time(result.mtime))
    console.print(table)


@app.callback()
def main(
    ctx: typer.Context,
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help=f"Workspaces file (defaults to ./{WORKSPACES_FILE} if present)",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug logging",
    ),
):
    """wikifs CLI - Markdown wikis as a virtual filesystem."""
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s %(name)s %(levelname)s: %(message)s",
            datefmt="%H:%M:%S",
        )
        console.print("[dim]Debug logging enabled[/dim]")
    else:
        setup_logging()
    ctx.obj = {"config": config}


def run_cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    run_cli()
