"""Logging configuration for jobguard using loguru.

Call `setup_logging()` once at startup. Provides:
- Console output with configurable verbosity
- Rotating file log at ~/.jobguard/logs/jobguard.log

Library code only ever calls `logger`; hosts that embed jobguard and
configure loguru themselves can skip `setup_logging()` entirely.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_CONSOLE_FORMAT = "<level>{level:<8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - {message}"


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Configure loguru sinks for console and file output.

    Args:
        verbose: Show DEBUG-level messages on console.
        quiet: Suppress console output below WARNING.
        log_dir: Directory for log files. Defaults to ~/.jobguard/logs.
    """
    logger.remove()

    if quiet:
        console_level = "WARNING"
    elif verbose:
        console_level = "DEBUG"
    else:
        console_level = "INFO"

    logger.add(
        sys.stderr,
        level=console_level,
        format=_CONSOLE_FORMAT,
        colorize=True,
    )

    log_path = log_dir or (Path.home() / ".jobguard" / "logs")
    log_path.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_path / "jobguard.log",
        level="DEBUG",
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | {name}:{function}:{line} - {message}",
        rotation="10 MB",
        retention=5,
        encoding="utf-8",
        enqueue=True,
    )


def mask_key(key: str) -> str:
    """Shorten a rate-limit key (email, user id) for log output."""
    if len(key) <= 3:
        return "***"
    return key[:3] + "***"
