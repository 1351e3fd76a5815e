"""Commands for adding, listing, exporting and deleting files."""

import asyncio
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, List, Optional, Sequence

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from file_drive.cli.app import app
from file_drive.cli.commands.auth import EMAIL_OPTION, PASSWORD_OPTION, require_login
from file_drive.config import DriveConfig, get_config
from file_drive.db import DatabaseType
from file_drive.repository import ObjectRepository
from file_drive.schemas import Durability, FileUpload, InMemoryObject
from file_drive.sync import SyncService
from file_drive.utils import display_mime_type, format_file_size

console = Console()

DURABILITY_STYLES = {
    Durability.PENDING: "yellow",
    Durability.PERSISTED: "green",
    Durability.FAILED: "red",
    Durability.EPHEMERAL: "magenta",
}


@asynccontextmanager
async def get_sync_service(
    config: DriveConfig, db_type: DatabaseType = DatabaseType.FILESYSTEM
) -> AsyncGenerator[SyncService, None]:
    """Start a sync service for the configured store and drain it on exit."""
    repository = ObjectRepository.from_config(config, db_type=db_type)
    async with SyncService(repository) as sync_service:
        yield sync_service


def display_files(files: Sequence[InMemoryObject], out: Optional[Console] = None) -> None:
    """Render the file list as a table."""
    out = out or console
    if not files:
        out.print("[bold]No files uploaded yet[/bold]")
        out.print("Use `file-drive upload PATH` to add your files.")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", overflow="fold")
    table.add_column("Size", justify="right")
    table.add_column("Type")
    table.add_column("ID", overflow="fold")
    table.add_column("State")
    for f in files:
        style = DURABILITY_STYLES[f.durability]
        table.add_row(
            f.name,
            format_file_size(f.size),
            display_mime_type(f.mime_type),
            f.id,
            f"[{style}]{f.durability.value}[/{style}]",
        )
    out.print(table)


def display_status(sync_service: SyncService, out: Optional[Console] = None) -> None:
    out = out or console
    state = sync_service.state
    mode = "persistent" if sync_service.is_persistent else "[magenta]memory only[/magenta]"
    out.print(f"Store: {sync_service.repository.db_path} ({mode})")
    out.print(f"Sync status: {sync_service.status.value}")
    if state.error_count:
        out.print(f"[red]{state.error_count} write(s) failed[/red]")
        for outcome in state.failures():
            out.print(f"  [red]{outcome.action.value} {outcome.key}: {outcome.error}[/red]")


async def run_upload(config: DriveConfig, paths: List[Path]) -> List[InMemoryObject]:
    async with get_sync_service(config) as sync_service:
        uploads = [FileUpload.from_path(p) for p in paths]
        added = sync_service.add(uploads)
        await sync_service.wait_for_pending()
        display_files(added)
        display_status(sync_service)
        return added


async def run_list(config: DriveConfig) -> List[InMemoryObject]:
    async with get_sync_service(config) as sync_service:
        files = sync_service.files
        display_files(files)
        return files


async def run_delete(config: DriveConfig, ids: List[str]) -> int:
    async with get_sync_service(config) as sync_service:
        removed = 0
        for object_id in ids:
            if sync_service.delete(object_id):
                console.print(f"Deleted {object_id}")
                removed += 1
            else:
                console.print(f"[yellow]No file with id {object_id}[/yellow]")
        await sync_service.wait_for_pending()
        display_status(sync_service)
        return removed


async def run_download(config: DriveConfig, object_id: str, dest: Path) -> Optional[Path]:
    async with get_sync_service(config) as sync_service:
        if sync_service.get(object_id) is None:
            return None
        return sync_service.export(object_id, dest)


async def run_status(config: DriveConfig) -> SyncService:
    async with get_sync_service(config) as sync_service:
        total = sum(f.size for f in sync_service.files)
        console.print(f"{len(sync_service.files)} file(s), {format_file_size(total)}")
        display_status(sync_service)
        return sync_service


@app.command()
def upload(
    paths: List[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Files to add"
    ),
    email: Optional[str] = EMAIL_OPTION,
    password: Optional[str] = PASSWORD_OPTION,
) -> None:
    """Add files to the drive."""
    require_login(email, password)
    try:
        asyncio.run(run_upload(get_config(), paths))
    except OSError as e:
        logger.error(f"Upload failed: {e}")
        console.print(f"[red]Upload failed: {e}[/red]")
        raise typer.Exit(1)


@app.command("list")
def list_files(
    email: Optional[str] = EMAIL_OPTION,
    password: Optional[str] = PASSWORD_OPTION,
) -> None:
    """List files in the drive."""
    require_login(email, password)
    asyncio.run(run_list(get_config()))


@app.command()
def delete(
    ids: List[str] = typer.Argument(..., help="Ids of the files to delete"),
    email: Optional[str] = EMAIL_OPTION,
    password: Optional[str] = PASSWORD_OPTION,
) -> None:
    """Delete files from the drive."""
    require_login(email, password)
    removed = asyncio.run(run_delete(get_config(), ids))
    if removed < len(ids):
        raise typer.Exit(1)


@app.command()
def download(
    object_id: str = typer.Argument(..., help="Id of the file to save"),
    dest: Optional[Path] = typer.Option(
        None, "--dest", "-d", help="Directory or file path, defaults to the current directory"
    ),
    email: Optional[str] = EMAIL_OPTION,
    password: Optional[str] = PASSWORD_OPTION,
) -> None:
    """Save a file from the drive to local disk."""
    require_login(email, password)
    path = asyncio.run(run_download(get_config(), object_id, dest or Path.cwd()))
    if path is None:
        console.print(f"[red]No file with id {object_id}[/red]")
        raise typer.Exit(1)
    console.print(f"Saved to {path}")


@app.command()
def status(
    email: Optional[str] = EMAIL_OPTION,
    password: Optional[str] = PASSWORD_OPTION,
) -> None:
    """Show the drive's store and sync status."""
    require_login(email, password)
    asyncio.run(run_status(get_config()))
