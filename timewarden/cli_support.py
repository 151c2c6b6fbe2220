"""Shared utilities for Timewarden CLI modules."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape

from timewarden.core.config import TimeSyncConfig, load_config
from timewarden.core.system import SystemBackend, mock_from_env

# Default config search paths (ordered by proximity to current run)
CONFIG_PATHS = [
    "./timewarden.yml",
    str(Path.home() / ".timewarden" / "timewarden.yml"),
    "/etc/timewarden/timewarden.yml",
]


def find_config(config_path: Optional[str] = None) -> Optional[str]:
    """Locate the active Timewarden configuration file, if any."""
    if config_path:
        return config_path

    if env_config := os.environ.get("TIMEWARDEN_CONFIG"):
        return env_config

    for path in CONFIG_PATHS:
        if Path(path).exists():
            return path

    return None


def is_mock() -> bool:
    """Return True when CLI runs in mock mode."""
    return mock_from_env()


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for CLI commands.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable verbose logging
    """
    from timewarden.core.logger import setup_file_logging as _setup_file_logging
    _setup_file_logging(log_file=log_file, verbose=verbose)


def load_time_config(config_path: Optional[str] = None, **overrides: Any) -> TimeSyncConfig:
    """Load the effective config and apply CLI flag overrides.

    Raises:
        ConfigValidationError: If the config file or environment is invalid
    """
    config = load_config(find_config(config_path))
    return config.with_overrides(**overrides)


def get_system(mock: Optional[bool] = None) -> SystemBackend:
    """Return a SystemBackend with mock defaults."""
    if mock is None:
        mock = is_mock()
    return SystemBackend(mock=mock)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    console.print(f"[red]Error:[/red] {escape(str(e))}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    console.print(f"[green]{prefix}[/green] {message}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    console.print(f"[red]{prefix}[/red] {message}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    console.print(f"[yellow]{prefix}[/yellow] {message}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    console.print(f"[cyan]{prefix}[/cyan] {message}")
