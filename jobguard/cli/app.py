"""Main CLI application: registers all subcommands and global options."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from jobguard.config import JobGuardConfig, load_config
from jobguard.errors import ConfigError
from jobguard.logging import setup_logging

app = typer.Typer(
    name="jobguard",
    help="jobguard - abuse prevention and upload safety checks.",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)


class _GlobalState:
    """Shared state set by the top-level callback, consumed by subcommands."""

    config_path: Path | None = None
    verbose: bool = False
    quiet: bool = False


state = _GlobalState()
console = Console()


def load_cli_config() -> JobGuardConfig:
    """Load config from the --config path, exiting with code 2 if it is unusable."""
    try:
        return load_config(state.config_path)
    except ConfigError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        console.print(f"[dim]{exc.hint}[/dim]")
        raise typer.Exit(2) from exc


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show DEBUG-level logs."),  # noqa: B008
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress logs below WARNING."),  # noqa: B008
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to config.json."),  # noqa: B008
) -> None:
    """jobguard - abuse prevention and upload safety checks."""
    state.verbose = verbose
    state.quiet = quiet
    state.config_path = config
    setup_logging(verbose=verbose, quiet=quiet)


# Register subcommands; imported at the bottom to avoid circular deps
from jobguard.cli.policies_cmd import policies_command  # noqa: E402
from jobguard.cli.scan_cmd import sanitize_name_command, scan_command  # noqa: E402

app.command(name="scan", help="Validate a local file against an upload preset.")(scan_command)
app.command(name="policies", help="Show the configured rate-limit policies.")(policies_command)
app.command(name="sanitize-name", help="Print a storage-safe version of a filename.")(
    sanitize_name_command
)
