"""Render propagation results to the terminal using rich."""

from collections.abc import Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hncsel.application.propagation_check_service import (
    VERDICT_PROPAGATE,
    VERDICT_REJECTED,
    VERDICT_SKIP,
    CheckResult,
    DirectiveSummary,
    MatrixRow,
    verdict_counts,
)

_MAX_PREVIEW_ROWS = 200

_VERDICT_STYLES = {
    VERDICT_PROPAGATE: "green",
    VERDICT_REJECTED: "red",
}


def _styled(verdict: str) -> str:
    style = _VERDICT_STYLES.get(verdict, "yellow")
    return f"[{style}]{verdict}[/{style}]"


def render_check_result(console: Console, result: CheckResult) -> None:
    """Print a single propagation decision."""
    verdict = VERDICT_PROPAGATE if result.decision.verdict else VERDICT_SKIP
    target = result.namespace or "(literal labels)"
    body = "\n".join(
        [
            f"object:          {result.object_ref}",
            f"namespace:       {target}",
            f"selector exists: {result.selector_exists}",
            f"verdict:         {_styled(verdict)}",
            f"decided by:      {result.decision.step}",
            f"reason:          {result.decision.reason}",
        ]
    )
    console.print(Panel(body, title="Propagation Check", border_style="blue"))


def render_directive_summaries(
    console: Console, summaries: Sequence[DirectiveSummary]
) -> None:
    """Print parsed directives, one row per object."""
    table = Table(title="Propagation Directives", expand=True, box=box.SIMPLE_HEAVY)
    for header in ("object", "select", "treeSelect", "none", "all", "any selector"):
        table.add_column(header, overflow="fold")
    for item in summaries:
        table.add_row(
            item.object_ref,
            item.selector or "[dim]-[/dim]",
            item.tree_selector or "[dim]-[/dim]",
            str(item.none_selector),
            str(item.all_selector),
            str(item.selector_exists),
        )
    console.print(table)


def render_matrix(console: Console, rows: Sequence[MatrixRow]) -> None:
    """Print the object x namespace matrix and verdict totals."""
    if not rows:
        console.print("[dim]No objects or namespaces to evaluate.[/dim]")
        return
    table = Table(title="Propagation Matrix", expand=True, box=box.SIMPLE_HEAVY)
    for header in ("object", "namespace", "verdict", "step", "reason"):
        table.add_column(header, overflow="fold")
    for row in rows[:_MAX_PREVIEW_ROWS]:
        table.add_row(row.object_ref, row.namespace, _styled(row.verdict), row.step, row.reason)
    console.print(table)
    if len(rows) > _MAX_PREVIEW_ROWS:
        console.print(f"[dim]Showing first {_MAX_PREVIEW_ROWS} of {len(rows)} rows.[/dim]")
    totals = ", ".join(f"{name}: {count}" for name, count in verdict_counts(rows).items())
    console.print(f"[bold]Totals[/bold] {totals}")
