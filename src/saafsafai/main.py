"""Main entry point for saafsafai."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm
from rich.table import Table

from . import __version__
from .config import CleanupConfig, ConfigError
from .pruner import NODE_MODULES_MAX_AGE_DAYS
from .runner import CleanupRunner


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Args:
        argv: Arguments to parse. Uses ``sys.argv`` if None.

    Returns:
        Parsed arguments.

    """
    parser = argparse.ArgumentParser(
        prog="saafsafai",
        description="Sort Downloads, delete temp files and prune stale node_modules",
        epilog=(
            "Configuration file location: ~/.config/saafsafai/config.yaml\n"
            "Logs location: ~/.local/share/saafsafai/logs/"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s v{__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command (default)
    subparsers.add_parser("run", help="Run cleanup based on configuration")

    # Setup command
    setup_parser = subparsers.add_parser("setup", help="Run interactive setup")
    setup_parser.add_argument(
        "--no-service",
        action="store_true",
        help="Only write the configuration, do not install the systemd unit",
    )

    # Config command
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )

    return parser.parse_args(argv)


def cmd_setup(args: argparse.Namespace, console: Console) -> int:
    """Execute setup command.

    Args:
        args: Parsed arguments.
        console: Console for prompts and output.

    Returns:
        Exit code.

    """
    from .service import SystemdInstaller

    try:
        config = CleanupConfig.load(args.config)
    except ConfigError:
        config = CleanupConfig()

    console.print("[bold]Welcome to saafsafai setup![/bold]\n")

    try:
        config.clean_downloads = Confirm.ask(
            "Do you want to clean the Downloads folder?",
            console=console,
            default=config.clean_downloads,
        )
        config.delete_node_modules = Confirm.ask(
            f"Do you want to delete unused node_modules folders ({NODE_MODULES_MAX_AGE_DAYS}+ days old)?",
            console=console,
            default=config.delete_node_modules,
        )
    except (EOFError, KeyboardInterrupt):
        console.print("\n[red]Setup aborted. Nothing was saved.[/red]")
        return 1

    config_path = config.save(args.config)

    if not args.no_service:
        try:
            result = SystemdInstaller().install()
        except OSError as e:
            console.print(f"[red]Failed to install systemd service: {escape(str(e))}[/red]")
            return 1

        if result.enabled:
            console.print(f"[green]Systemd service installed: {result.unit_path}[/green]")
        else:
            console.print(
                f"[yellow]Unit written to {result.unit_path}, but could not run: "
                f"{escape(', '.join(result.failed_commands))}[/yellow]"
            )

    console.print()
    console.print("[green]Setup complete! saafsafai will run at each login.[/green]")
    console.print(f"Config saved to: {config_path}")
    console.print("To run manually: saafsafai")
    console.print(f"To see logs: ls {config.log_dir}")
    return 0


def cmd_config(config: CleanupConfig, args: argparse.Namespace, console: Console) -> int:
    """Execute config command.

    Args:
        config: Cleanup configuration.
        args: Parsed arguments.
        console: Console for output.

    Returns:
        Exit code.

    """
    if args.show:
        table = Table(title="Current Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Clean downloads", str(config.clean_downloads))
        table.add_row("Delete node_modules", str(config.delete_node_modules))
        table.add_row("Downloads directory", str(config.downloads_dir))
        table.add_row("Scan root", str(config.scan_root))
        table.add_row("Max node_modules age", f"{NODE_MODULES_MAX_AGE_DAYS} days")
        table.add_row("Log directory", str(config.log_dir))
        table.add_row("Log level", config.log_level)

        console.print(table)
        return 0

    console.print("[yellow]Use --show[/yellow]")
    return 1


def cmd_run(config: CleanupConfig, console: Console) -> int:
    """Execute run command.

    Args:
        config: Cleanup configuration.
        console: Console for output.

    Returns:
        Exit code.

    """
    try:
        runner = CleanupRunner(config)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1
    except OSError as e:
        console.print(f"[red]Cannot open log file: {escape(str(e))}[/red]")
        return 1

    try:
        runner.run()
    except OSError as e:
        console.print(f"[red]Failed to write report: {escape(str(e))}[/red]")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code.

    """
    args = parse_args(argv)
    console = Console()

    # Default to run command
    command = args.command or "run"

    if command == "setup":
        return cmd_setup(args, console)

    try:
        config = CleanupConfig.load(args.config)
    except ConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        return 1

    if command == "config":
        return cmd_config(config, args, console)
    elif command == "run":
        return cmd_run(config, console)
    else:
        console.print(f"Unknown command: {command}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
