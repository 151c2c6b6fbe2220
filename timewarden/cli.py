#!/usr/bin/env python3
"""Timewarden CLI - Time sync and host maintenance for home-lab machines."""

import typer
from rich.console import Console

from timewarden.cli_network_commands import register_network_commands
from timewarden.cli_sync_commands import register_sync_commands
from timewarden.cli_utility_commands import register_utility_commands
from timewarden.core.logger import get_logger

app = typer.Typer(
    name="timewarden",
    help="""Timewarden - Time sync for home-lab hosts

Keeps timezone and NTP servers where they belong, and tells you when they drift.

Quick start:
  tw show-config                  # See the expected settings
  tw configure --force-resync     # Apply them (as root)
  tw validate                     # Check the host, exit 1 on drift

More commands: tw --help
""",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

# Attach modular subcommands
register_sync_commands(app, console)
register_network_commands(app, console)
register_utility_commands(app, console)

if __name__ == "__main__":
    app()
