"""Rich rendering for the scriptfsm CLI.

CLI commands print through these helpers, never through rich directly.
"""

from __future__ import annotations

from typing import Optional, Sequence

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.theme import Theme

from scriptfsm.resolver.protocol import ProbeResult

THEME = Theme(
    {
        "error": "bold red",
        "success": "green",
        "state": "cyan",
        "dim": "dim",
    }
)

console = Console(theme=THEME, highlight=False)

_MAX_WIDTH = 80


def _width() -> int:
    return min(console.width, _MAX_WIDTH)


def success(msg: str) -> None:
    """Green checkmark + message."""
    console.print(f"  [green]✓[/] {msg}")


def error(msg: str, hint: Optional[str] = None) -> None:
    """Red X + message (escaped), optional dim hint."""
    console.print(f"  [red]✗[/] {escape(msg)}", style="bold red")
    if hint:
        console.print(f"    [dim]{escape(hint)}[/]")


def version_line(name: str, version: str) -> None:
    console.print(Text.assemble((name, "bold"), (f" v{version}", "dim")))


def _arity_cell(result: ProbeResult) -> str:
    if result.arity is not None:
        return str(result.arity)
    # *args callables pass without a fixed arity
    return "*" if result.ok else "-"


def probe_table(title: str, results: Sequence[ProbeResult]) -> None:
    """Print one row per probed export."""
    table = Table(
        title=title,
        title_style="bold",
        header_style="bold dim",
        border_style="dim",
        width=_width(),
        padding=(0, 1),
    )
    for col in ("Name", "Status", "Arity"):
        table.add_column(col)
    for r in results:
        status = "[green]ok[/]" if r.ok else f"[red]{r.status.value}[/]"
        table.add_row(escape(r.name), status, _arity_cell(r))
    console.print()
    console.print(table)


def run_summary(path: Sequence[str], value: str) -> None:
    """Panel with the visited states and the final value."""
    route = " → ".join(f"[state]{escape(s)}[/]" for s in path)
    body = "\n".join(
        [
            f"[bold]Path:[/] {route}",
            f"[bold]Transitions:[/] {len(path) - 1}",
            f"[bold]Value:[/] {escape(value)}",
        ]
    )
    console.print()
    console.print(
        Panel(
            body,
            title="Result",
            title_align="left",
            border_style="dim",
            width=_width(),
            padding=(0, 1),
        )
    )
