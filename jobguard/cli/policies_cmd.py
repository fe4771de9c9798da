"""jobguard policies: display the configured rate-limit policies."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from jobguard.ratelimit import PolicyRegistry

console = Console()


def policies_command() -> None:
    """Show each policy's attempt budget, window and block duration."""
    from jobguard.cli.app import load_cli_config

    config = load_cli_config()
    registry = PolicyRegistry(config.rate_limits)

    table = Table(title="Rate Limit Policies")
    table.add_column("Policy", style="cyan")
    table.add_column("Max Attempts", justify="right")
    table.add_column("Window", justify="right")
    table.add_column("Block", justify="right")

    for policy, limiter in registry.items():
        cfg = limiter.config
        table.add_row(
            str(policy),
            str(cfg.max_attempts),
            _duration(cfg.window_seconds),
            _duration(cfg.block_duration_seconds),
        )

    console.print(table)
    if config.cleanup.enabled:
        console.print(f"[dim]Cleanup every {_duration(config.cleanup.interval_seconds)}[/dim]")
    else:
        console.print("[dim]Cleanup disabled[/dim]")


def _duration(seconds: float) -> str:
    if seconds >= 3600 and seconds % 3600 == 0:
        return f"{int(seconds // 3600)}h"
    if seconds >= 60 and seconds % 60 == 0:
        return f"{int(seconds // 60)}min"
    return f"{seconds:g}s"
