"""Utility CLI commands - maintain, show-config, version."""
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from timewarden.core.maintenance import HostProfile

# Module-level console instance (will be set by register function)
console: Console = Console()

VERSION = "0.1.0"


def maintain(
    profile: HostProfile = typer.Option(HostProfile.K8S, "--profile", "-p", help="Host kind: proxmox, k8s or docker"),
    skip_update: bool = typer.Option(False, "--skip-update", help="Skip the apt package upgrade"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Run the scheduled maintenance job for a home-lab host.

    Prints local addresses, upgrades packages, applies time settings and,
    on Proxmox nodes, forces a resync and brings interfaces up.

    Examples:
        tw maintain --profile proxmox
        tw maintain --profile docker --skip-update
    """
    from timewarden.cli_network_commands import render_interface_results
    from timewarden.cli_support import (
        get_system,
        handle_cli_error,
        load_time_config,
        print_error,
        print_success,
        setup_file_logging,
    )
    from timewarden.cli_sync_commands import _render_configure_report
    from timewarden.core.config import ConfigValidationError, ErrorPolicy
    from timewarden.core.configurator import Configurator
    from timewarden.core.interfaces import InterfaceManager
    from timewarden.core.maintenance import PackageUpdater, local_addresses
    from timewarden.core.safety import PrivilegeError, require_root
    from timewarden.core.system import OSCommandError

    setup_file_logging(log_file=log_file, verbose=verbose)
    try:
        cfg = load_time_config(config)
    except ConfigValidationError as e:
        handle_cli_error(e, console, verbose)

    system = get_system()
    try:
        require_root(system)
    except PrivilegeError as e:
        print_error(console, str(e))
        raise typer.Exit(1)

    console.print("Local IP addresses:")
    console.print(" ".join(local_addresses()) or "[dim]none[/dim]", highlight=False)

    failed = False
    if not skip_update:
        try:
            PackageUpdater(system).update(snap=profile == HostProfile.DOCKER)
        except OSCommandError as e:
            print_error(console, f"Package update failed: {e}")
            if cfg.on_error == ErrorPolicy.HALT:
                raise typer.Exit(1)
            failed = True

    report = Configurator(cfg, system).run(force_resync=profile == HostProfile.PROXMOX)
    _render_configure_report(report)
    if report.exit_code:
        failed = True
        if cfg.on_error == ErrorPolicy.HALT:
            raise typer.Exit(1)

    if profile == HostProfile.K8S:
        console.print("\nTimezone has been updated. Current system time:")
        console.print(system.query_sync_status().raw.rstrip(), markup=False, highlight=False)
        if system.is_daemon_active(cfg.daemon):
            print_success(console, f"{cfg.daemon} is active")
        else:
            print_error(console, "NTP service not active.")
            failed = True

    if profile == HostProfile.PROXMOX:
        results = InterfaceManager(system, cfg.interfaces_file, cfg.interface_prefix).bring_up_all()
        render_interface_results(console, results)
        if any(not result.ok for result in results):
            failed = True

    if failed:
        print_error(console, "System maintenance finished with errors")
        raise typer.Exit(1)
    print_success(console, "System maintenance complete!")


def show_config(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
):
    """Show the effective time sync configuration."""
    from timewarden.cli_support import find_config, handle_cli_error, load_time_config
    from timewarden.core.config import ConfigValidationError

    try:
        cfg = load_time_config(config)
    except ConfigValidationError as e:
        handle_cli_error(e, console)

    source = find_config(config) or "built-in defaults"
    table = Table(title=f"Time sync settings ({source})", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in cfg.as_dict().items():
        if isinstance(value, list):
            value = " ".join(value)
        table.add_row(key, str(value))
    console.print(table)
    console.print(f"Expected line: {cfg.ntp_line}", markup=False, highlight=False, soft_wrap=True)


def version():
    """Show Timewarden version."""
    console.print(f"Timewarden v{VERSION} - time sync for home-lab hosts")


def register_utility_commands(
    app: typer.Typer,
    shared_console: Console,
):
    """Register utility commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(maintain)
    app.command(name="show-config")(show_config)
    app.command()(version)
