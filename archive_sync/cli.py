"""
CLI commands for archive-sync.

Provides the `archive-sync` command-line interface for watching archives,
synchronizing a receiver from a transmitter, and inspecting event logs.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from archive_sync import __version__
from archive_sync.logging_setup import configure_logging
from config.loader import ConfigurationLoader
from core.models.config import ArchiveSyncConfig
from core.sync import Archive, ArchiveSynchronizer, ArchiveSyncError, SyncReport

console = Console()

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

archive_path_argument = click.Path(file_okay=False, path_type=Path)


@click.group()
@click.version_option(version=__version__, prog_name="archive-sync")
@click.option(
    '--config', 'config_file',
    type=click.Path(dir_okay=False, path_type=Path),
    help='JSON configuration file (default: ~/.archive-sync/config.json)'
)
@click.option(
    '--log-level',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help='Override the configured log level'
)
@click.pass_context
def main(ctx: click.Context, config_file: Optional[Path], log_level: Optional[str]):
    """
    Archive Sync CLI.

    Keep a receiver directory in line with a transmitter directory, replaying
    recorded renames instead of deleting and copying renamed entries.
    """
    config = ConfigurationLoader().load(config_file)
    if log_level:
        config.logging.level = log_level
    configure_logging(config.logging)
    ctx.obj = config


@main.command()
@click.argument('transmitter', type=archive_path_argument)
@click.argument('receiver', type=archive_path_argument, required=False)
@click.pass_obj
def watch(config: ArchiveSyncConfig, transmitter: Path, receiver: Optional[Path]):
    """Record renames under TRANSMITTER until Enter is pressed, then optionally sync RECEIVER."""
    try:
        transmitter_archive = Archive(transmitter, watcher_config=config.watcher)
    except ArchiveSyncError as e:
        _fail(str(e))

    with transmitter_archive:
        transmitter_archive.start()
        console.print(f"[blue]👀 Watching renames under {transmitter_archive.root_path}[/blue]")
        console.print('Press "Enter" key to stop the watching process.')
        try:
            console.input()
        except EOFError:
            pass
        transmitter_archive.stop()

        last_event = transmitter_archive.last_event()
        console.print(f"[dim]Last recorded event id: {last_event.event_id}[/dim]")

        if receiver is not None:
            _run_sync(config, transmitter_archive, receiver, quiet=False)

    console.print("Exiting...")


@main.command()
@click.argument('transmitter', type=archive_path_argument)
@click.argument('receiver', type=archive_path_argument)
@click.option(
    '--quiet', '-q',
    is_flag=True,
    help='Do not print each rename, delete and copy'
)
@click.pass_obj
def sync(config: ArchiveSyncConfig, transmitter: Path, receiver: Path, quiet: bool):
    """Synchronize RECEIVER so that it matches TRANSMITTER."""
    try:
        transmitter_archive = Archive(transmitter, watcher_config=config.watcher)
    except ArchiveSyncError as e:
        _fail(str(e))

    with transmitter_archive:
        _run_sync(config, transmitter_archive, receiver, quiet=quiet)


@main.command()
@click.argument('archive', type=archive_path_argument)
@click.option(
    '--limit', '-n',
    type=click.IntRange(min=1),
    default=20,
    show_default=True,
    help='Number of most recent events to show'
)
def log(archive: Path, limit: int):
    """Show the most recent rename events recorded for ARCHIVE."""
    try:
        archive_handle = Archive(archive)
    except ArchiveSyncError as e:
        _fail(str(e))

    with archive_handle:
        last_id = archive_handle.last_event().event_id
        if last_id == 0:
            console.print(f"[yellow]⚠️  No rename events recorded for {archive_handle.root_path}[/yellow]")
            return

        table = Table(title=f"Rename events of {archive_handle.root_path.name}")
        table.add_column("Id", style="cyan", justify="right", no_wrap=True)
        table.add_column("Source", style="white")
        table.add_column("Destination", style="green")

        for event in archive_handle.event_log.iter_events(start_id=max(1, last_id - limit + 1)):
            table.add_row(str(event.event_id), event.source_relative_path, event.destination_relative_path)

        console.print(table)
        console.print(f"[dim]Event log: {archive_handle.event_log.store_path}[/dim]")


@main.command()
@click.argument('transmitter', type=archive_path_argument)
@click.argument('receiver', type=archive_path_argument)
def status(transmitter: Path, receiver: Path):
    """Check whether RECEIVER can be synchronized from TRANSMITTER."""
    try:
        transmitter_archive = Archive(transmitter)
        receiver_archive = Archive(receiver)
    except ArchiveSyncError as e:
        _fail(str(e))

    with transmitter_archive, receiver_archive:
        transmitter_last = transmitter_archive.last_event()
        receiver_last = receiver_archive.last_event()
        compatible = ArchiveSynchronizer().is_compatible(transmitter_archive, receiver_archive)
        behind = receiver_archive.event_log.is_same_or_predecessor(transmitter_archive.event_log)

        table = Table(title="Archive Sync Status")
        table.add_column("Component", style="cyan", no_wrap=True)
        table.add_column("Status", style="white")
        table.add_column("Details", style="dim")

        table.add_row("Transmitter", f"[yellow]#{transmitter_last.event_id}[/yellow]", str(transmitter_archive.root_path))
        table.add_row("Receiver", f"[yellow]#{receiver_last.event_id}[/yellow]", str(receiver_archive.root_path))
        table.add_row(
            "Event ids",
            "[green]✅ Not ahead[/green]" if behind else "[red]❌ Ahead of transmitter[/red]",
            "Receiver's last id compared to transmitter's"
        )
        table.add_row(
            "History",
            "[green]✅ Predecessor[/green]" if compatible else "[red]❌ Diverged[/red]",
            f"{receiver_archive.root_path.name} can be synchronized"
            if compatible else "Synchronization would fail"
        )
        console.print(table)

    if not compatible:
        sys.exit(1)


def _run_sync(config: ArchiveSyncConfig, transmitter_archive: Archive, receiver: Path, quiet: bool) -> None:
    """Synchronize receiver from an already opened transmitter archive."""
    try:
        receiver_archive = Archive(receiver, watcher_config=config.watcher)
    except ArchiveSyncError as e:
        _fail(str(e))

    progress_hook = None if quiet else (lambda message: console.print(f"[dim]{message}[/dim]"))

    console.print(f"[blue]🔄 Synchronizing {receiver_archive.root_path} from {transmitter_archive.root_path}[/blue]")
    with receiver_archive:
        try:
            report = ArchiveSynchronizer(config.sync).synchronize(
                transmitter_archive,
                receiver_archive,
                progress_hook=progress_hook
            )
        except ArchiveSyncError as e:
            _fail(f"Synchronization failed: {e}")

    _print_report(report)


def _print_report(report: SyncReport) -> None:
    """Print the outcome of a synchronization."""
    if report.is_noop:
        console.print("[green]✅ Receiver already up to date[/green]")
        return

    table = Table(title="Synchronization Summary")
    table.add_column("Action", style="cyan", no_wrap=True)
    table.add_column("Count", style="white", justify="right")

    table.add_row("Replayed events", str(len(report.replayed_event_ids)))
    table.add_row("Renamed", str(len(report.renamed)))
    table.add_row("Deleted", str(len(report.deleted)))
    table.add_row("Copied", str(len(report.copied)))
    if report.skipped:
        table.add_row("Skipped", f"[yellow]{len(report.skipped)}[/yellow]")

    console.print(table)
    console.print("[green]🎉 Synchronization complete![/green]")


def _fail(message: str) -> None:
    """Print an error and exit with status 1."""
    console.print(f"[red]❌ {message}[/red]")
    sys.exit(1)


if __name__ == "__main__":
    main()
