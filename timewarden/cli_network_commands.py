"""Network interface CLI commands."""
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

InterfacesTyper = typer.Typer(help="Bring up ifupdown interfaces", add_completion=False)


def render_interface_results(console: Console, results) -> None:
    from timewarden.core.interfaces import InterfaceOutcome

    if not results:
        console.print("[dim]No interfaces to bring up[/dim]")
        return

    colors = {
        InterfaceOutcome.ALREADY_UP: "green",
        InterfaceOutcome.BROUGHT_UP: "cyan",
        InterfaceOutcome.FAILED: "red",
    }
    table = Table(title="Interfaces", show_header=True)
    table.add_column("Interface", style="bold")
    table.add_column("Outcome")
    for result in results:
        color = colors.get(result.outcome, "white")
        table.add_row(result.name, f"[{color}]{result.outcome}[/{color}]")
    console.print(table)


def register_network_commands(root: typer.Typer, console: Console) -> None:
    """Attach interface commands to the main CLI."""

    @InterfacesTyper.command("up")
    def up_command(
        config: Optional[str] = typer.Option(None, "--config", "-c", help="Config file path"),
        prefix: Optional[str] = typer.Option(None, "--prefix", help="Only interfaces starting with this prefix"),
        verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
        log_file: Optional[str] = typer.Option(None, "--log-file", help="Path to log file"),
    ) -> None:
        """Bring up `auto` interfaces from /etc/network/interfaces that are down."""
        from timewarden.cli_support import (
            get_system,
            handle_cli_error,
            load_time_config,
            print_error,
            setup_file_logging,
        )
        from timewarden.core.config import ConfigValidationError
        from timewarden.core.interfaces import InterfaceManager
        from timewarden.core.safety import PrivilegeError, require_root

        setup_file_logging(log_file=log_file, verbose=verbose)
        try:
            cfg = load_time_config(config, interface_prefix=prefix)
        except ConfigValidationError as e:
            handle_cli_error(e, console, verbose)

        system = get_system()
        try:
            require_root(system)
        except PrivilegeError as e:
            print_error(console, str(e))
            raise typer.Exit(1)

        manager = InterfaceManager(system, cfg.interfaces_file, cfg.interface_prefix)
        results = manager.bring_up_all()
        render_interface_results(console, results)

        if any(not result.ok for result in results):
            raise typer.Exit(1)

    root.add_typer(InterfacesTyper, name="interfaces")
