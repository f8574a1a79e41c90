import logging
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from adaptlab._catalog import Lab, all_labs, find_lab
from adaptlab._models import LabParams, LabResults, default_lab_params
from adaptlab._sampling import run_with_stack
from adaptlab._viz import write_report
from adaptlab._workload import NominalStrategy

from .config import ConfigError, dump_lab_params, get_config, load_lab_params
from .render import catalog_table, summary_table

app = typer.Typer()

logger = logging.getLogger(__name__)
# Console for stderr (info/errors)
err_console = Console(stderr=True)
# Console for stdout (results)
out_console = Console()

DEFAULT_OUTPUT = Path("lab-results")


@app.callback()
def callback(
    *,
    verbose: bool = typer.Option(default=False, help="Enable verbose output"),
) -> None:
    """Adaptlab CLI."""
    log_level = logging.DEBUG if verbose else logging.INFO

    # Configure rich logging handler to output to stderr
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=err_console,
                show_time=False,
                show_path=verbose,
                rich_tracebacks=True,
            ),
        ],
    )


@app.command("list")
def list_labs() -> None:
    """List the labs in the catalog."""
    out_console.print(catalog_table(all_labs()))


def _override_params(base: LabParams, overrides: dict[str, Any], generate_overrides: dict[str, Any]) -> LabParams:
    """Apply command-line overrides on top of loaded parameters, validating the result."""
    data = base.model_dump()
    data["sample_params"]["generate_params"].update({k: v for k, v in generate_overrides.items() if v is not None})
    loopc = overrides.pop("change_batch_loopc", None)
    if loopc is not None:
        data["change_batch_loopc"] = loopc
    data["sample_params"].update({k: v for k, v in overrides.items() if v is not None})
    return LabParams.model_validate(data)


def _select_labs(names: list[str] | None) -> list[Lab]:
    if not names:
        return all_labs()
    try:
        return [find_lab(name) for name in names]
    except KeyError as e:
        err_console.print(f"[red]Error:[/red] {e.args[0]}")
        raise typer.Exit(code=1) from None


def _run_labs(labs: list[Lab], params: LabParams) -> list[LabResults]:
    return [lab.run(params) for lab in labs]


@app.command()
def run(  # noqa: PLR0913
    *,
    config: Annotated[
        Path | None,
        typer.Option("-c", "--config", help="Path to a TOML run file (defaults to [tool.adaptlab].params)"),
    ] = None,
    labs: Annotated[
        list[str] | None,
        typer.Option("-l", "--lab", help="Lab to run (repeatable; defaults to all labs)"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("-o", "--output", help="Report directory (defaults to [tool.adaptlab].output or lab-results)"),
    ] = None,
    report: Annotated[
        bool,
        typer.Option("--report/--no-report", help="Write the HTML report"),
    ] = True,
    size: Annotated[int | None, typer.Option("--size", help="Size of the generated input")] = None,
    gauge: Annotated[int | None, typer.Option("--gauge", help="Interval between named boundaries")] = None,
    nominal: Annotated[
        NominalStrategy | None,
        typer.Option("--nominal", help="How boundaries are named"),
    ] = None,
    loops: Annotated[int | None, typer.Option("--loops", help="Number of change batches after the first round")] = None,
    batch: Annotated[int | None, typer.Option("--batch", help="Edits per change batch")] = None,
    seeds: Annotated[list[int] | None, typer.Option("--seed", help="RNG seed (repeatable)")] = None,
    demand: Annotated[int | None, typer.Option("--demand", help="Output items to demand from lazy labs")] = None,
    validate: Annotated[
        bool | None,
        typer.Option(
            "--validate/--no-validate",
            help="Compare naive and incremental outputs (defaults to the run file)",
        ),
    ] = None,
) -> None:
    """Run labs on both engines and report timings and validation."""
    cfg = get_config()
    params_path = config or cfg.params

    try:
        base = load_lab_params(params_path) if params_path else default_lab_params()
        params = _override_params(
            base,
            {
                "change_batch_loopc": loops,
                "change_batch_size": batch,
                "input_seeds": tuple(seeds) if seeds else None,
                "demand": demand,
                "validate_output": validate,
                # Only an explicit --no-report turns reflection off.
                "reflect": None if report else False,
            },
            {"size": size, "gauge": gauge, "nominal_strategy": nominal},
        )
    except ConfigError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1) from None
    except ValidationError as e:
        err_console.print(f"[red]Invalid parameters:[/red]\n{e}")
        raise typer.Exit(code=1) from None

    selected = _select_labs(labs)
    gen = params.sample_params.generate_params
    err_console.print(
        f"[cyan]Running {len(selected)} lab(s)[/cyan] "
        f"[dim](size={gen.size}, gauge={gen.gauge}, rounds={params.change_batch_loopc + 1})[/dim]",
    )

    results = run_with_stack(_run_labs, selected, params)

    out_console.print(Panel(summary_table(selected, results), title="[bold]Results[/bold]", border_style="cyan"))

    if report:
        output_dir = output or cfg.output or DEFAULT_OUTPUT
        written = run_with_stack(write_report, selected, results, output_dir)
        err_console.print(f"[cyan]Report written to:[/cyan] {written[0]}")

    if not all(res.all_valid for res in results):
        err_console.print("[red]✗ Naive and incremental outputs differ[/red]")
        raise typer.Exit(code=1)
    err_console.print("[green]✓ Done[/green]")


@app.command()
def init(
    *,
    output: Annotated[
        Path,
        typer.Option("-o", "--output", help="Path to output TOML file"),
    ],
) -> None:
    """Generate a run file with default parameters."""
    err_console.print(f"[cyan]Writing default parameters to:[/cyan] {output}")
    dump_lab_params(default_lab_params(), output)
    err_console.print("[green]✓ Run file generated[/green]")


def main() -> None:
    app()
