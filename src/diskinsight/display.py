"""Rich terminal display for diskinsight."""

from rich.console import Console
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table

from diskinsight.aggregator import group_by_location
from diskinsight.config import Settings
from diskinsight.models import AnalysisResult, DiskUsage, FolderInfo, RecommendedAction
from diskinsight.sizes import format_size

console = Console()


def action_icon(action: RecommendedAction) -> str:
    """Get icon for a recommended action."""
    icons = {
        RecommendedAction.CLEAN: "[green]✓[/green]",
        RecommendedAction.ARCHIVE: "[cyan]↗[/cyan]",
        RecommendedAction.REVIEW: "[yellow]![/yellow]",
    }
    return icons.get(action, "?")


def action_label(action: RecommendedAction) -> str:
    """Get styled label for a recommended action."""
    labels = {
        RecommendedAction.CLEAN: "[green]Clean[/green]",
        RecommendedAction.ARCHIVE: "[cyan]Archive[/cyan]",
        RecommendedAction.REVIEW: "[yellow]Review[/yellow]",
    }
    return labels.get(action, "Unknown")


def show_insights(result: AnalysisResult, show_commands: bool = True) -> None:
    """Display findings grouped by location, then totals per action."""
    if not result.all_insights:
        console.print("[green]No cleanup opportunities found.[/green]")
    else:
        grouped = group_by_location(result.all_insights)
        ordered = sorted(
            grouped.items(),
            key=lambda kv: sum(i.size_in_bytes for i in kv[1]),
            reverse=True,
        )

        for location, insights in ordered:
            location_total = sum(i.size_in_bytes for i in insights)
            table = Table(
                title=f"{location} ({format_size(location_total)})",
                title_justify="left",
                show_header=True,
                header_style="bold",
            )
            table.add_column("", width=3)
            table.add_column("Finding")
            table.add_column("Size", justify="right")
            table.add_column("Action")
            if show_commands:
                table.add_column("Command", style="dim")

            for insight in insights:
                row = [
                    action_icon(insight.action),
                    insight.description,
                    insight.size_human,
                    action_label(insight.action),
                ]
                if show_commands:
                    row.append(insight.cleanup_command or "")
                table.add_row(*row)

            console.print(table)
            console.print()

    show_errors(result.errors)
    show_summary(result)


def show_summary(result: AnalysisResult) -> None:
    """Display the per-action totals panel."""
    console.print(
        Panel(
            f"[bold]Total identified:[/bold] {format_size(result.total_reclaimable_bytes)}"
            f" in {result.total_insight_count} findings\n"
            f"  Clean:   {format_size(result.bytes_for_action(RecommendedAction.CLEAN))}"
            f" ({len(result.clean_items)})\n"
            f"  Archive: {format_size(result.bytes_for_action(RecommendedAction.ARCHIVE))}"
            f" ({len(result.archive_items)})\n"
            f"  Review:  {format_size(result.bytes_for_action(RecommendedAction.REVIEW))}"
            f" ({len(result.review_items)})",
            title="Summary",
            border_style="blue",
        )
    )


def show_errors(errors: list[str]) -> None:
    """Display analyzer failures, if any."""
    if not errors:
        return
    console.print("[bold red]Some analyzers failed:[/bold red]")
    for error in errors:
        console.print(f"  [red]✗[/red] {error}")
    console.print()


def show_analyzers(rows: list[tuple[str, bool, bool]]) -> None:
    """Display registered analyzers as (name, available, disabled) rows."""
    table = Table(title="Analyzers", show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Available", justify="center")

    for name, available, disabled in rows:
        if disabled:
            state = "[yellow]disabled[/yellow]"
        elif available:
            state = "[green]yes[/green]"
        else:
            state = "[dim]no[/dim]"
        table.add_row(name, state)

    console.print(table)


def show_folder_sizes(info: FolderInfo, subfolders: list[FolderInfo], limit: int = 20) -> None:
    """Display a folder's total and its largest subfolders."""
    console.print(
        f"[bold]{info.path}[/bold]: {info.size_human} "
        f"({info.file_count} files, {info.folder_count} folders)"
    )
    if not subfolders:
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Folder")
    table.add_column("Size", justify="right")
    table.add_column("Files", justify="right")
    table.add_column("Share", justify="right")

    for folder in subfolders[:limit]:
        share = (folder.size_in_bytes / info.size_in_bytes * 100) if info.size_in_bytes else 0
        table.add_row(folder.name, folder.size_human, str(folder.file_count), f"{share:.0f}%")

    console.print(table)
    if len(subfolders) > limit:
        console.print(f"[dim]... and {len(subfolders) - limit} more[/dim]")


def show_settings(settings: Settings, source: str) -> None:
    """Display effective settings."""
    table = Table(title=f"Settings ({source})", show_header=True, header_style="bold")
    table.add_column("Key", style="bold")
    table.add_column("Value")

    for key, value in settings.model_dump().items():
        table.add_row(key, str(value))

    console.print(table)


def show_status(disk_usage: DiskUsage) -> None:
    """Display quick status."""
    used_percent = disk_usage.used_percent

    if used_percent >= 90:
        status = "[red]CRITICAL[/red]"
    elif used_percent >= 75:
        status = "[yellow]WARNING[/yellow]"
    else:
        status = "[green]OK[/green]"

    console.print(f"Disk Status: {status}")
    console.print(f"  Total: {format_size(disk_usage.total_bytes)}")
    console.print(f"  Used:  {format_size(disk_usage.used_bytes)} ({used_percent:.0f}%)")
    console.print(f"  Free:  {format_size(disk_usage.free_bytes)}")


def show_scanning_progress() -> Progress:
    """Create progress bar for running analyzers."""
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
