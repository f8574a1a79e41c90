"""Rich tables for the command line."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.table import Table

from adaptlab._compute import ComputeDemand
from adaptlab._viz._report import format_ms

if TYPE_CHECKING:
    from adaptlab._catalog import Lab
    from adaptlab._models import LabResults


def _format_valid(results: LabResults) -> str:
    if all(s.output_valid is None for s in results.samples):
        return "[dim]-[/dim]"
    if results.all_valid:
        return "[green]✓ PASS[/green]"
    batches = ", ".join(str(b) for b in results.invalid_batches)
    return f"[red]✗ FAIL[/red] [dim](batches {batches})[/dim]"


def catalog_table(labs: list[Lab]) -> Table:
    """Table of catalog entries: name, computation and whether it takes a demand."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Lab", style="bold")
    table.add_column("Computation")
    table.add_column("Demand-driven", justify="center")
    for i, lab in enumerate(labs):
        computer = getattr(lab, "computer", None)
        table.add_row(
            str(i),
            lab.name().text,
            type(computer).__name__ if computer is not None else "-",
            "yes" if isinstance(computer, ComputeDemand) else "",
        )
    return table


def summary_table(labs: list[Lab], results: list[LabResults]) -> Table:
    """Table comparing total naive and incremental time per lab."""
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("Lab", style="bold")
    table.add_column("Rounds", justify="right")
    table.add_column("Naive (ms)", justify="right", style="yellow")
    table.add_column("Incremental (ms)", justify="right", style="yellow")
    table.add_column("Speedup", justify="right", style="magenta")
    table.add_column("Validation")
    for lab, res in zip(labs, results, strict=True):
        naive_ns = res.total_time_ns(incremental=False)
        dcg_ns = res.total_time_ns(incremental=True)
        table.add_row(
            lab.name().text,
            str(len(res.samples)),
            format_ms(naive_ns),
            format_ms(dcg_ns),
            f"{naive_ns / dcg_ns:.2f}×" if dcg_ns else "-",
            _format_valid(res),
        )
    return table
