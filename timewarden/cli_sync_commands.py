"""Time sync CLI commands - configure, validate, sync."""
from datetime import datetime, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from timewarden.core.config import ErrorPolicy, NtpWriteMode

# Module-level console instance (will be set by register function)
console: Console = Console()


def _render_configure_report(report) -> None:
    from timewarden.cli_support import print_error, print_success, print_warning
    from timewarden.core.configurator import StepStatus

    console.print("\n[bold]Configuration steps[/bold]")
    for step in report.steps:
        if step.status == StepStatus.OK:
            print_success(console, step.name)
        elif step.status == StepStatus.SKIPPED:
            print_warning(console, f"{step.name}: {escape(step.detail)}")
        else:
            print_error(console, f"{step.name}: {escape(step.detail)}")

    if report.exit_code == 0:
        print_success(console, "Time settings applied")
    else:
        print_error(console, f"{len(report.failed)} step(s) failed, {len(report.skipped)} skipped")


def _render_validation(report, config, system) -> None:
    """Print per-check lines, raw status dumps, summary and remediation hints."""
    from timewarden.cli_support import print_error, print_success
    from timewarden.core.validator import remediation_commands

    console.print("[bold]=== NTP Time Synchronization Validation ===[/bold]\n")

    section = None
    number = 0
    for result in report.results:
        if result.title != section:
            if section is not None:
                console.print()
            section = result.title
            number += 1
            console.print(f"{number}. Checking {escape(section)}...")
        if result.passed:
            console.print(f"[green]✓[/green] {escape(result.message)}", soft_wrap=True)
        else:
            console.print(f"[red]✗[/red] {escape(result.message)}", soft_wrap=True)
    console.print()

    number += 1
    console.print(f"{number}. Detailed time synchronization information...")
    console.print("--- timedatectl status ---")
    raw_status = report.status.raw if report.status else ""
    console.print(raw_status.rstrip() or "(no output)", markup=False, highlight=False, soft_wrap=True)
    console.print()
    console.print("--- timedatectl timesync-status ---")
    timesync = system.timesync_status()
    if timesync is not None:
        console.print(timesync.rstrip(), markup=False, highlight=False, soft_wrap=True)
        console.print("Timesync status retrieved successfully")
    else:
        console.print("Timesync-status not available (normal on some systems)")
    console.print()

    number += 1
    console.print(f"{number}. Current system time...")
    console.print(f"Current time: {datetime.now().astimezone():%a %b %d %H:%M:%S %Z %Y}", highlight=False)
    console.print(f"UTC time: {datetime.now(timezone.utc):%a %b %d %H:%M:%S %Z %Y}", highlight=False)
    console.print()

    console.print("[bold]=== SUMMARY ===[/bold]")
    if report.error_count == 0:
        print_success(console, "All time synchronization checks passed!")
        return

    print_error(console, f"{report.error_count} time synchronization issues found")
    console.print("\nTo fix issues, run the following commands as root:")
    for index, command in enumerate(remediation_commands(config), start=1):
        console.print(f"{index}. {command}", markup=False, highlight=False, soft_wrap=True)


def _load_or_exit(config_path, verbose, **overrides):
    from timewarden.cli_support import handle_cli_error, load_time_config
    from timewarden.core.config import ConfigValidationError

    try:
        return load_time_config(config_path, **overrides)
    except ConfigValidationError as e:
        handle_cli_error(e, console, verbose)


def _run_configure(cfg, system, force_resync: bool) -> int:
    from timewarden.cli_support import print_error
    from timewarden.core.configurator import Configurator
    from timewarden.core.safety import PrivilegeError

    try:
        report = Configurator(cfg, system).run(force_resync=force_resync)
    except PrivilegeError as e:
        print_error(console, str(e))
        raise typer.Exit(1)

    _render_configure_report(report)
    return report.exit_code


def _run_validate(cfg, system) -> int:
    from timewarden.core.safety import warn_if_not_root
    from timewarden.core.validator import Validator

    warn_if_not_root(system)
    report = Validator(cfg, system).run()
    _render_validation(report, cfg, system)
    return report.exit_code


def configure(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    force_resync: bool = typer.Option(False, "--force-resync", help="Toggle NTP on, wait, and restart the daemon again"),
    on_error: Optional[ErrorPolicy] = typer.Option(None, "--on-error", help="Continue or halt after a failed step"),
    append: bool = typer.Option(False, "--append", help="Append the NTP= line instead of replacing it"),
    resync_delay: Optional[float] = typer.Option(None, "--resync-delay", min=0, help="Seconds to wait during forced resync"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Set timezone and NTP servers, then restart the time daemon.

    Examples:
        tw configure                    # Apply settings from timewarden.yml
        tw configure --force-resync     # Also force an immediate sync
        tw configure --on-error halt    # Stop at the first failed step
    """
    from timewarden.cli_support import get_system, setup_file_logging

    setup_file_logging(log_file=log_file, verbose=verbose)
    cfg = _load_or_exit(
        config,
        verbose,
        on_error=on_error,
        ntp_write_mode=NtpWriteMode.APPEND if append else None,
        resync_delay=resync_delay,
    )
    raise typer.Exit(_run_configure(cfg, get_system(), force_resync))


def validate(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Check timezone, NTP servers, daemon state and clock sync.

    Exits 0 when every check passes, 1 otherwise.
    """
    from timewarden.cli_support import get_system, setup_file_logging

    setup_file_logging(log_file=log_file, verbose=verbose)
    cfg = _load_or_exit(config, verbose)
    raise typer.Exit(_run_validate(cfg, get_system()))


def sync(
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
    on_error: Optional[ErrorPolicy] = typer.Option(None, "--on-error", help="Continue or halt after a failed step"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
):
    """Configure with a forced resync, then validate the result."""
    from timewarden.cli_support import get_system, setup_file_logging

    setup_file_logging(log_file=log_file, verbose=verbose)
    cfg = _load_or_exit(config, verbose, on_error=on_error)
    system = get_system()

    configure_code = _run_configure(cfg, system, force_resync=True)
    console.print()
    validate_code = _run_validate(cfg, system)
    raise typer.Exit(1 if configure_code or validate_code else 0)


def register_sync_commands(
    app: typer.Typer,
    shared_console: Console,
):
    """Register time sync commands with the main Typer app.

    Args:
        app: Main Typer application
        shared_console: Shared Rich console instance
    """
    global console
    console = shared_console

    app.command()(configure)
    app.command()(validate)
    app.command()(sync)
