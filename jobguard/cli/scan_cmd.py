"""jobguard scan / sanitize-name: check uploads and filenames from the shell.

Exit codes for scan: 0 valid, 1 rejected, 2 unreadable.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console

from jobguard.errors import FileReadError
from jobguard.files import (
    LocalUpload,
    UploadKind,
    generate_secure_file_name,
    get_preset,
    sanitize_file_name,
    validate_file,
)

console = Console()


def scan_command(
    file_path: Path = typer.Argument(help="File to validate."),  # noqa: B008
    preset: UploadKind = typer.Option(UploadKind.RESUME, "--preset", "-p", help="Upload preset."),  # noqa: B008
    mime: str | None = typer.Option(
        None, "--mime", "-m", help="Declared MIME type. Guessed from the name if omitted."
    ),  # noqa: B008
) -> None:
    """Run the upload checks for PRESET on a local file."""
    from jobguard.cli.app import load_cli_config

    if not file_path.is_file():
        console.print(f"[red]Not a file: {file_path}[/red]")
        raise typer.Exit(2)

    config = load_cli_config()
    options = get_preset(preset, config.uploads.max_size_overrides)
    upload = LocalUpload(file_path, mime_type=mime)

    try:
        result = asyncio.run(validate_file(upload, options))
    except FileReadError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(2) from exc

    if not result.is_valid:
        console.print(f"[red]Rejected:[/red] {result.error}")
        raise typer.Exit(1)

    console.print(f"[green]Accepted:[/green] {upload.name} ({upload.mime_type or 'unknown type'})")
    for warning in result.warnings:
        console.print(f"  [yellow]warning:[/yellow] {warning}")


def sanitize_name_command(
    name: str = typer.Argument(help="Original filename."),  # noqa: B008
    secure: bool = typer.Option(
        False, "--secure", help="Generate a random storage name that keeps the extension."
    ),  # noqa: B008
) -> None:
    """Print the name an accepted upload would be stored under."""
    console.print(generate_secure_file_name(name) if secure else sanitize_file_name(name), markup=False)
