"""Terminal output helpers built on rich."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.table import Table

if TYPE_CHECKING:
    from prodready.models import Gap

out = Console(highlight=False)
err = Console(stderr=True, highlight=False)

SEVERITY_STYLES = {
    "critical": "bold red",
    "high": "red",
    "medium": "yellow",
    "low": "cyan",
}

STATUS_STYLES = {
    "ship": "bold green",
    "needs-review": "bold yellow",
    "no-ship": "bold red",
}


def info(message: str) -> None:
    out.print(message, soft_wrap=True)


def success(message: str) -> None:
    out.print(f"[green]✓[/] {message}")


def warning(message: str) -> None:
    err.print(f"[yellow]warning:[/] {message}", soft_wrap=True)


def error(message: str) -> None:
    err.print(f"[bold red]error:[/] {message}", soft_wrap=True)


def header(title: str) -> None:
    out.print(f"\n[bold]{title}[/]")
    out.print("─" * len(title))


def key_value(key: str, value: Any, indent: int = 0) -> None:
    out.print(f"{' ' * indent}[dim]{key}:[/] {value}")


def ship_status(status: str) -> None:
    style = STATUS_STYLES.get(status, "bold")
    out.print(f"ship status: [{style}]{status}[/]")


def gaps_table(gaps: Iterable[Gap], limit: int = 25) -> None:
    """Print the unsuppressed gaps, most severe first."""
    rank = {"critical": 0, "high": 1, "medium": 2, "low": 3}
    active = sorted(
        (g for g in gaps if not g.suppressed),
        key=lambda g: rank.get(g.severity, 4),
    )
    if not active:
        success("no open findings")
        return

    table = Table(title=f"Open findings ({len(active)})")
    table.add_column("Severity")
    table.add_column("Rule", style="magenta")
    table.add_column("Location", style="blue", overflow="fold")
    table.add_column("Message", overflow="fold")
    for gap in active[:limit]:
        style = SEVERITY_STYLES.get(gap.severity, "")
        location = gap.file_path or "-"
        if gap.line is not None:
            location = f"{location}:{gap.line}"
        table.add_row(
            f"[{style}]{gap.severity}[/]",
            gap.rule_id or gap.id,
            location,
            gap.message,
        )
    out.print(table)
    if len(active) > limit:
        out.print(f"[dim]... {len(active) - limit} more in the report[/]")
