"""Main CLI application."""

from pathlib import Path
from typing import Annotated

import typer
from pydantic import ValidationError

from xcbridgectl.cli.console import (
    console,
    create_table,
    dim,
    error,
    fail,
    info,
    success,
    warning,
)
from xcbridgectl.config.models import DEFAULT_PORT

app = typer.Typer(
    name="xcbridgectl",
    help="Install and manage xcbridge as a macOS LaunchAgent service",
    no_args_is_help=True,
)


def _get_manager():
    """Build the lifecycle manager for the current user."""
    from xcbridgectl.config.paths import InstallationTarget
    from xcbridgectl.service import LifecycleManager

    return LifecycleManager(InstallationTarget.for_home())


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show debug output",
        ),
    ] = False,
) -> None:
    """Install and manage xcbridge as a macOS LaunchAgent service."""
    from xcbridgectl.logging import configure_logging

    configure_logging("DEBUG" if verbose else None)


@app.command()
def install(
    binary_path: Annotated[
        Path | None,
        typer.Argument(
            help="Path to xcbridge binary (auto-detected if omitted)",
            show_default=False,
        ),
    ] = None,
    port: Annotated[
        int,
        typer.Option(
            "--port",
            "-p",
            help="Port to listen on",
        ),
    ] = DEFAULT_PORT,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            "-k",
            help="API key for authentication (optional)",
        ),
    ] = None,
) -> None:
    """Install xcbridge and start it as a LaunchAgent.

    Examples:
        xcbridgectl install                              # Auto-detect binary
        xcbridgectl install -p 8080                      # Use custom port
        xcbridgectl install -k my-secret-key             # Enable API key auth
        xcbridgectl install ./target/release/xcbridge    # Specify binary path
    """
    from xcbridgectl.config.models import Configuration
    from xcbridgectl.errors import XcbridgeError
    from xcbridgectl.logging import get_redactor

    get_redactor().add_secret(api_key)

    try:
        config = Configuration(port=port, api_key=api_key, binary_path=binary_path)
    except ValidationError as e:
        for err in e.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            error(f"Invalid {field}: {err['msg']}")
        raise typer.Exit(1) from None

    info("Installing xcbridge...")
    manager = _get_manager()
    try:
        result = manager.install(config)
    except XcbridgeError as e:
        fail(e)
    except OSError as e:
        error(f"Filesystem error: {e}")
        raise typer.Exit(1) from None

    target = manager.target
    label = result.descriptor.label
    descriptor_path = target.descriptor_path

    console.print()
    success("Installation complete!")
    success(f"xcbridge is running on http://127.0.0.1:{config.port} (PID {result.status.pid})")
    if not config.auth_enabled:
        dim("API key authentication is disabled")
    console.print()
    info("Useful commands:")
    dim(f"  View logs:     tail -f {target.stdout_log_path}")
    dim(f"  Stop service:  launchctl unload {descriptor_path}")
    dim(f"  Start service: launchctl load {descriptor_path}")
    dim(f"  Status:        launchctl list {label}")
    dim("  Uninstall:     xcbridgectl uninstall")


@app.command()
def uninstall(
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Don't prompt for log file removal (removes them)",
        ),
    ] = False,
    keep_logs: Annotated[
        bool,
        typer.Option(
            "--keep-logs",
            "-k",
            help="Don't prompt for log file removal (keeps them)",
        ),
    ] = False,
) -> None:
    """Stop the xcbridge service and remove all related files."""
    from xcbridgectl.cli.console import confirm
    from xcbridgectl.errors import XcbridgeError
    from xcbridgectl.service import LogPurgeMode, StopOutcome

    if force and keep_logs:
        error("--force and --keep-logs cannot be used together")
        raise typer.Exit(1)

    if force:
        mode = LogPurgeMode.FORCE
    elif keep_logs:
        mode = LogPurgeMode.KEEP
    else:
        mode = LogPurgeMode.PROMPT

    info("Uninstalling xcbridge...")
    manager = _get_manager()
    try:
        result = manager.uninstall(log_mode=mode, confirm=confirm)
    except XcbridgeError as e:
        fail(e)
    except OSError as e:
        error(f"Filesystem error: {e}")
        raise typer.Exit(1) from None

    if result.stop_outcome is StopOutcome.ALREADY_ABSENT:
        dim("No service plist found")
    elif result.stop_outcome is StopOutcome.FORCE_KILLED:
        warning("Service was force-killed")

    removal = result.removal
    if not removal.binary_removed:
        dim("Binary not found, nothing to remove")
    if not removal.descriptor_removed:
        dim("Service plist not found, nothing to remove")
    for path in removal.removed_paths:
        dim(f"Removed {path}")
    for path in result.purged_logs:
        dim(f"Removed {path}")

    console.print()
    success("Uninstall complete!")


@app.command()
def status() -> None:
    """Show xcbridge service status."""
    from xcbridgectl.service import ServiceDescriptor, ServiceState

    manager = _get_manager()
    target = manager.target
    service_status = manager.status()

    table = create_table(
        "xcbridge Service Status",
        [
            ("Property", "cyan"),
            ("Value", ""),
        ],
    )

    state_colors = {
        ServiceState.RUNNING: "green",
        ServiceState.STOPPED: "yellow",
        ServiceState.FAILED: "red",
        ServiceState.NOT_REGISTERED: "dim",
    }
    state_color = state_colors.get(service_status.state, "white")
    table.add_row(
        "State", f"[{state_color}]{service_status.state.value}[/{state_color}]"
    )
    if service_status.pid:
        table.add_row("PID", str(service_status.pid))
    if service_status.message:
        table.add_row("Message", service_status.message)

    def _presence(path: Path) -> str:
        return str(path) if path.exists() else f"[dim]{path} (missing)[/dim]"

    table.add_row("Binary", _presence(target.binary_path))
    table.add_row("Descriptor", _presence(target.descriptor_path))
    table.add_row("Log", _presence(target.stdout_log_path))
    table.add_row("Error log", _presence(target.stderr_log_path))

    if target.descriptor_path.exists():
        try:
            descriptor = ServiceDescriptor.read(target.descriptor_path)
        except (OSError, ValueError) as e:
            table.add_row("Arguments", f"[red]unreadable: {e}[/red]")
        else:
            table.add_row("Arguments", _display_arguments(descriptor.arguments))

    console.print(table)


def _display_arguments(arguments: list[str]) -> str:
    """Format service arguments for display, masking the API key."""
    shown = []
    mask_next = False
    for arg in arguments:
        shown.append("***" if mask_next else arg)
        mask_next = arg == "--api-key"
    return " ".join(shown)


if __name__ == "__main__":
    app()
