"""
Shared CLI plumbing: console, logging setup, error boundary, formatting.
"""
from __future__ import annotations

import sys
from collections.abc import Generator
from contextlib import contextmanager

import typer
from loguru import logger
from rich import print as rprint
from rich.console import Console

from config import get_settings
from puplearn.core.errors import PupLearnError

console = Console()

STYLES = {
    "correct": "bold green",
    "incorrect": "bold red",
    "info": "bold cyan",
    "warning": "bold yellow",
    "dim": "dim",
}


def configure_logging() -> None:
    """Route loguru to stderr (and optionally a file) at the configured level."""
    settings = get_settings()
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {message}",
    )
    if settings.log_file:
        logger.add(settings.log_file, level="DEBUG", rotation="5 MB", retention=3)


@contextmanager
def cli_errors() -> Generator[None, None, None]:
    """Turn expected service errors into a red message and exit code 1."""
    try:
        yield
    except PupLearnError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


def format_progress_bar(percent: int, width: int = 20) -> str:
    """Format a progress bar."""
    filled = int(percent / 100 * width)
    return "#" * filled + "-" * (width - filled)
