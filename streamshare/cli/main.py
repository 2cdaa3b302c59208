"""StreamShare CLI - Main commands."""
import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import (
    Progress,
    SpinnerColumn,
    TextColumn,
    BarColumn,
    DownloadColumn,
    TransferSpeedColumn,
    TaskProgressColumn
)

from ..core.api import DEFAULT_HOST, DEFAULT_CHUNK_SIZE

app = typer.Typer(
    name="streamshare",
    help="StreamShare file sharing CLI",
    add_completion=False
)
console = Console()


def run_async(coro):
    """Run async function."""
    return asyncio.run(coro)


def make_client(ctx: typer.Context):
    """Build a client from the global options."""
    from streamshare import StreamShareClient, ClientConfig, InvalidConfigError

    options = ctx.obj or {}
    try:
        config = ClientConfig(
            host=options.get('host', DEFAULT_HOST),
            chunk_size=options.get('chunk_size', DEFAULT_CHUNK_SIZE),
            secure=not options.get('no_tls', False)
        )
    except InvalidConfigError as e:
        console.print(f"[red]Invalid configuration: {e}[/red]")
        raise typer.Exit(2)
    return StreamShareClient(config=config)


@app.callback()
def main_options(
    ctx: typer.Context,
    host: str = typer.Option(DEFAULT_HOST, "--host", envvar="STREAMSHARE_HOST", help="Server host"),
    chunk_size: int = typer.Option(DEFAULT_CHUNK_SIZE, "--chunk-size", "-c", help="Upload chunk size in bytes"),
    no_tls: bool = typer.Option(False, "--no-tls", help="Use http/ws instead of https/wss"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
):
    """Upload, download and delete files on a StreamShare server."""
    if verbose:
        from streamshare import setup_logging
        logging.basicConfig(format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        setup_logging(logging.DEBUG)
    ctx.obj = {'host': host, 'chunk_size': chunk_size, 'no_tls': no_tls}


@app.command()
def upload(
    ctx: typer.Context,
    file_path: Path = typer.Argument(..., help="Local file to upload"),
):
    """Upload a file."""
    from streamshare import StreamShareError

    client = make_client(ctx)

    async def do_upload():
        async with client:
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TaskProgressColumn(),
                DownloadColumn(),
                TransferSpeedColumn(),
                console=console
            ) as progress:
                task = progress.add_task(f"Uploading {file_path.name}", total=None)

                def on_progress(bytes_sent: int, total_bytes: int):
                    progress.update(task, completed=bytes_sent, total=total_bytes)

                session = await client.upload(file_path, progress_callback=on_progress)

            console.print(f"[green]Uploaded:[/green] {file_path.name}")
            console.print(f"File ID: {session.file_identifier}")
            console.print(f"Deletion token: {session.deletion_token}")
            console.print(f"Link: {client.download_url(session.file_identifier)}")

    try:
        run_async(do_upload())
    except StreamShareError as e:
        console.print(f"[red]Upload failed: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def delete(
    ctx: typer.Context,
    file_identifier: str = typer.Argument(..., help="File identifier"),
    deletion_token: str = typer.Argument(..., help="Deletion token"),
):
    """Delete an uploaded file."""
    from streamshare import StreamShareError

    client = make_client(ctx)

    async def do_delete():
        async with client:
            await client.delete(file_identifier, deletion_token)

    try:
        run_async(do_delete())
    except StreamShareError as e:
        console.print(f"[red]Delete failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Deleted:[/green] {file_identifier}")


@app.command()
def download(
    ctx: typer.Context,
    file_identifier: str = typer.Argument(..., help="File identifier"),
    output: Optional[str] = typer.Option(None, "--output", "-o", help="Output file or directory"),
    replace: bool = typer.Option(False, "--replace", "-r", help="Overwrite an existing file"),
):
    """Download a file."""
    from streamshare import StreamShareError

    client = make_client(ctx)

    async def do_download() -> Path:
        async with client:
            with console.status(f"Downloading {file_identifier}..."):
                return await client.download(file_identifier, output or "", replace=replace)

    try:
        path = run_async(do_download())
    except StreamShareError as e:
        console.print(f"[red]Download failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Downloaded:[/green] {path}")


def main():
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
