"""CLI interface for diskinsight."""

import json
import logging
import sys
from concurrent.futures import Future
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

import diskinsight.config as settings_store
from diskinsight import __version__
from diskinsight.aggregator import InsightAggregator, group_by_location
from diskinsight.analyzers import InsightAnalyzer, build_analyzers
from diskinsight.cancellation import CancellationToken, OperationCancelled
from diskinsight.config import Settings, load_settings, save_settings
from diskinsight.display import (
    console,
    show_analyzers,
    show_folder_sizes,
    show_insights,
    show_scanning_progress,
    show_settings,
    show_status,
)
from diskinsight.models import AnalysisProgress, AnalysisResult
from diskinsight.paths import UserDirs
from diskinsight.scanner import expand_path, get_disk_usage, get_folder_info, get_subdirectories

EXIT_CANCELLED = 130

app = typer.Typer(
    name="diskinsight",
    help="Find reclaimable disk space: container data, caches, build artifacts and cold files",
    add_completion=False,
    no_args_is_help=True,
)


def setup_logging(verbose: bool) -> None:
    """Route diskinsight logs through rich on stderr."""
    logger = logging.getLogger("diskinsight")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if logger.handlers:
        logger.handlers.clear()

    handler = RichHandler(
        console=Console(stderr=True),
        show_time=True,
        show_path=False,
    )
    logger.addHandler(handler)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"diskinsight version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """diskinsight - find what is using your disk and what to do about it."""


def _resolve_dirs(home: Optional[Path]) -> UserDirs:
    if home is None:
        return UserDirs.detect()
    return UserDirs.for_home(
        expand_path(str(home)),
        windows=sys.platform == "win32",
        darwin=sys.platform == "darwin",
    )


def _select(analyzers: list[InsightAnalyzer], only: Optional[list[str]]) -> list[InsightAnalyzer]:
    """Keep only the named analyzers (case-insensitive); exit on unknown names."""
    if not only:
        return analyzers

    by_name = {a.name.lower(): a for a in analyzers}
    unknown = [name for name in only if name.lower() not in by_name]
    if unknown:
        console.print(f"[red]Unknown analyzer: {', '.join(unknown)}[/red]")
        console.print("\nAvailable analyzers:")
        for analyzer in analyzers:
            console.print(f"  • {analyzer.name}")
        raise typer.Exit(1)

    wanted = {name.lower() for name in only}
    return [a for a in analyzers if a.name.lower() in wanted]


def _wait(future: "Future[AnalysisResult]", token: CancellationToken) -> AnalysisResult:
    """Block on a background run; Ctrl-C cancels it."""
    try:
        return future.result()
    except KeyboardInterrupt:
        token.cancel()
        raise OperationCancelled("Interrupted") from None


def _to_json(result: AnalysisResult) -> str:
    grouped = group_by_location(result.all_insights)
    payload = {
        "insights": [i.model_dump(mode="json") for i in result.all_insights],
        "by_location": {
            location: [i.path for i in insights] for location, insights in grouped.items()
        },
        "errors": result.errors,
        "total_reclaimable_bytes": result.total_reclaimable_bytes,
        "total_insight_count": result.total_insight_count,
    }
    return json.dumps(payload, indent=2)


@app.command()
def analyze(
    json_output: bool = typer.Option(False, "--json", help="Print findings as JSON"),
    only: Optional[list[str]] = typer.Option(
        None, "--only", help="Run only the named analyzer (repeatable)"
    ),
    days: Optional[int] = typer.Option(
        None, "--days", min=0, help="Days since last access before a download counts as old"
    ),
    large_file_mb: Optional[int] = typer.Option(
        None, "--large-file-mb", min=1, help="Flag single files larger than this many MB"
    ),
    workers: Optional[int] = typer.Option(
        None, "--workers", min=1, help="Run up to this many analyzers at once"
    ),
    home: Optional[Path] = typer.Option(
        None, "--home", help="Analyze this directory as the user's home"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging"),
) -> None:
    """Analyze disk usage and show cleanup and archive opportunities."""
    setup_logging(verbose)

    overrides = {
        "days_until_old": days,
        "large_file_mb": large_file_mb,
        "max_workers": workers,
    }
    settings = load_settings().model_copy(
        update={k: v for k, v in overrides.items() if v is not None}
    )

    analyzers = _select(build_analyzers(settings, _resolve_dirs(home)), only)
    aggregator = InsightAggregator(analyzers, max_workers=settings.max_workers)
    token = CancellationToken()

    try:
        if json_output:
            result = _wait(aggregator.start(token=token), token)
            typer.echo(_to_json(result))
            return

        console.print("[bold blue]Analyzing disk usage...[/bold blue]\n")
        with show_scanning_progress() as progress:
            task = progress.add_task("Starting...", total=len(analyzers))

            def update_progress(p: AnalysisProgress) -> None:
                progress.update(
                    task,
                    total=p.total_count,
                    completed=p.completed_count,
                    description=f"Analyzing {p.current_analyzer}...",
                )

            result = _wait(aggregator.start(update_progress, token), token)
    except OperationCancelled:
        console.print("[yellow]Scan cancelled[/yellow]")
        raise typer.Exit(EXIT_CANCELLED)

    show_insights(result)

    if any(i.cleanup_command for i in result.all_insights):
        console.print()
        console.print("[dim]Suggested commands are shown for reference and are never run by diskinsight[/dim]")


@app.command(name="analyzers")
def list_analyzers() -> None:
    """List analyzers and whether each can run on this machine."""
    setup_logging(False)
    settings = load_settings()
    disabled = set(settings.disabled_analyzers)

    # Disabled analyzers are listed but never probed
    registry = build_analyzers(settings.model_copy(update={"disabled_analyzers": []}))
    aggregator = InsightAggregator([a for a in registry if a.name not in disabled])
    available = {a.name for a in aggregator.available_analyzers()}
    show_analyzers([(a.name, a.name in available, a.name in disabled) for a in registry])


@app.command()
def sizes(
    path: Path = typer.Argument(..., help="Directory to measure"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of subfolders to show"),
) -> None:
    """Show a folder's size and its largest subfolders."""
    setup_logging(False)
    target = expand_path(str(path))
    try:
        info = get_folder_info(target)
        subfolders = get_subdirectories(target)
    except FileNotFoundError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    show_folder_sizes(info, subfolders, limit=limit)


@app.command()
def status() -> None:
    """Show current disk usage summary."""
    disk_usage = get_disk_usage()
    show_status(disk_usage)


@app.command()
def config(
    init: bool = typer.Option(False, "--init", help="Write a default config file if none exists"),
) -> None:
    """Show effective configuration."""
    setup_logging(False)
    config_file = settings_store.CONFIG_FILE

    if init:
        if config_file.exists():
            console.print(f"[yellow]Config already exists: {config_file}[/yellow]")
        elif save_settings(Settings(), config_file):
            console.print(f"[green]Wrote default config to {config_file}[/green]")
        else:
            console.print(f"[red]Could not write {config_file}[/red]")
            raise typer.Exit(1)

    source = str(config_file) if config_file.exists() else "defaults"
    show_settings(load_settings(config_file), source)


if __name__ == "__main__":
    app()
