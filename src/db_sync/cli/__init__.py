"""Command line interface for db-sync.

Usage:
    db-sync --config config.yaml            # same as "run"
    db-sync --config config.yaml run
    db-sync --config config.yaml discover
    db-sync --config config.yaml sources
    db-sync --version

Commands:
    run       - Sync every in-scope relation from source to target
    discover  - List the relations the current filters select
    sources   - List configured datasources
"""

import argparse
import asyncio
import logging
import signal
import sys
from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from db_sync import __version__
from db_sync.config.loader import load_config
from db_sync.config.models import AppConfig
from db_sync.engine.context import SyncContext
from db_sync.engine.runner import synchronize_all
from db_sync.engine.stats import RunStatistics
from db_sync.errors import ConfigurationError, SyncError
from db_sync.factory import connect_datasource
from db_sync.log import setup_logging
from db_sync.schema.resolver import discover

APP_NAME = "db-sync"

console = Console()
logger = logging.getLogger("db_sync.cli")


# ============================================================================
# Helpers
# ============================================================================


def _configure_logging(config: AppConfig) -> None:
    level = "debug" if config.sync.verbose else config.log.level
    setup_logging(level, file=config.log.file, console=config.log.console)


def _install_signal_handlers(ctx: SyncContext) -> list[signal.Signals]:
    """Route SIGINT/SIGTERM to run-level cancellation.

    Returns the signals that were installed so they can be removed again.
    """
    loop = asyncio.get_running_loop()
    installed: list[signal.Signals] = []

    def _on_signal(sig: signal.Signals) -> None:
        logger.warning(f"Received {sig.name}, finishing running batches and stopping...")
        ctx.cancel(f"interrupted by {sig.name}")

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal, sig)
        except (NotImplementedError, RuntimeError):
            # Not supported on this platform / not in main thread
            continue
        installed.append(sig)
    return installed


def _remove_signal_handlers(signals: list[signal.Signals]) -> None:
    loop = asyncio.get_running_loop()
    for sig in signals:
        loop.remove_signal_handler(sig)


def print_statistics(stats: RunStatistics) -> None:
    """Render run statistics as rich tables."""
    table = Table(title="Sync Summary", show_header=False)
    table.add_column("Key", style="dim")
    table.add_column("Value", justify="right")

    table.add_row("Relations", str(stats.total_relations))
    table.add_row("Succeeded", f"[green]{stats.succeeded}[/green]")
    failed_style = "red" if stats.failed else "green"
    table.add_row("Failed", f"[{failed_style}]{stats.failed}[/{failed_style}]")
    if stats.not_attempted:
        table.add_row("Not attempted", f"[yellow]{stats.not_attempted}[/yellow]")
    table.add_row("Rows discovered", str(stats.total_rows))
    table.add_row("Rows transferred", str(stats.rows_transferred))
    table.add_row("Duration", f"{stats.duration:.2f}s")
    if stats.duration > 0:
        table.add_row("Throughput", f"{stats.rows_per_second:.0f} rows/s")

    console.print(table)

    if stats.failures:
        console.print()
        fail_table = Table(
            title="Failed Relations", show_header=True, header_style="bold"
        )
        fail_table.add_column("Relation", style="dim")
        fail_table.add_column("Error", style="red")
        for failure in stats.failures:
            fail_table.add_row(failure.name, failure.error)
        console.print(fail_table)


# ============================================================================
# Async command implementations
# ============================================================================


async def _async_run(config: AppConfig) -> int:
    """Async implementation for the run command.

    Returns:
        0 if every relation synced, 1 otherwise.
    """
    source_ds = config.source_config()
    target_ds = config.target_config()

    try:
        source = await connect_datasource(source_ds)
    except ConnectionError as e:
        logger.error(str(e))
        return 1

    try:
        try:
            target = await connect_datasource(target_ds)
        except ConnectionError as e:
            logger.error(str(e))
            return 1

        try:
            logger.info(f"Source: {source_ds.display_name()}")
            logger.info(f"Target: {target_ds.display_name()}")

            names = await discover(
                source, config.sync.include_tables, config.sync.exclude_tables
            )
            if not names:
                logger.warning("No relations to sync")
                return 0

            ctx = SyncContext()
            installed = _install_signal_handlers(ctx)
            try:
                stats = await synchronize_all(source, target, names, config.sync, ctx)
            finally:
                _remove_signal_handlers(installed)
        finally:
            await target.close()
    except SyncError as e:
        logger.error(f"Sync aborted: {e}")
        return 1
    finally:
        await source.close()

    console.print()
    print_statistics(stats)

    if stats.failed > 0:
        logger.error(f"{stats.failed} relations failed to sync")
        return 1
    return 0


async def _async_discover(config: AppConfig) -> int:
    """Async implementation for the discover command."""
    try:
        source = await connect_datasource(config.source_config())
    except ConnectionError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1

    try:
        names = await discover(
            source, config.sync.include_tables, config.sync.exclude_tables
        )
    except SyncError as e:
        console.print(f"[bold red]x[/bold red] {e}")
        return 1
    finally:
        await source.close()

    table = Table(
        title=f"Relations in scope ({config.sync.source})",
        show_header=True,
        header_style="bold",
    )
    table.add_column("#", justify="right", style="dim")
    table.add_column("Relation")
    for i, name in enumerate(names, start=1):
        table.add_row(str(i), name)

    console.print(table)
    if not names:
        console.print("[yellow]No relations match the configured filters.[/yellow]")
    return 0


# ============================================================================
# Command wrappers
# ============================================================================


def cmd_run(args: argparse.Namespace, config: AppConfig) -> int:
    """Sync all in-scope relations.

    Wraps the async implementation with ``asyncio.run()``.
    """
    _configure_logging(config)
    logger.info(f"{APP_NAME} v{__version__}")
    code = asyncio.run(_async_run(config))
    logger.info("Exiting")
    return code


def cmd_discover(args: argparse.Namespace, config: AppConfig) -> int:
    """List relations selected by the configured filters.

    Wraps the async implementation with ``asyncio.run()``.
    """
    _configure_logging(config)
    return asyncio.run(_async_discover(config))


def cmd_sources(args: argparse.Namespace, config: AppConfig) -> int:
    """List configured datasources.

    Reads only the local config file -- no database calls.
    """
    table = Table(title="Datasources", show_header=True, header_style="bold")
    table.add_column("Alias")
    table.add_column("Role")
    table.add_column("URL")
    table.add_column("Username")

    for alias, ds in config.datasources.items():
        roles = []
        if alias == config.sync.source:
            roles.append("[bold cyan]source[/bold cyan]")
        if alias == config.sync.target:
            roles.append("[bold green]target[/bold green]")
        table.add_row(alias, ", ".join(roles), ds.url, ds.username)

    console.print(table)
    return 0


# ============================================================================
# Main entry point
# ============================================================================


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Copy MySQL tables and views from one database to another",
    )
    parser.add_argument(
        "--config",
        "-c",
        default="config.yaml",
        help="Path to the YAML config file (default: config.yaml)",
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    subparsers = parser.add_subparsers(dest="command")

    p_run = subparsers.add_parser(
        "run",
        help="Sync every in-scope relation from source to target",
    )
    p_run.set_defaults(func=cmd_run)

    p_discover = subparsers.add_parser(
        "discover",
        help="List the relations the configured filters select",
    )
    p_discover.set_defaults(func=cmd_discover)

    p_sources = subparsers.add_parser(
        "sources",
        help="List configured datasources",
    )
    p_sources.set_defaults(func=cmd_sources)

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        console.print(f"{APP_NAME} v{__version__}")
        return 0

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1

    func = getattr(args, "func", cmd_run)
    return func(args, config)


if __name__ == "__main__":
    sys.exit(main())
