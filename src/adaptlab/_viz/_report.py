"""Report pages: an index of all labs and one traces page per lab."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from htpy import Element, Node, a, div, h2, hr, main, section, span, table, tbody, td, th, thead, tr

from adaptlab._engine import Effect

from ._div import div_of_edge_trees, div_of_trace, div_of_value_tree
from ._html import html_of_div, html_of_divs
from ._layout import base_page

if TYPE_CHECKING:
    from pathlib import Path

    from adaptlab._catalog import Lab
    from adaptlab._models import EngineMetrics, LabResults, Sample

logger = logging.getLogger(__name__)

_NS_PER_MS = 1_000_000


def url_for_lab(lab: Lab) -> str:
    """Index-relative URL of a lab's traces page."""
    return f"{lab.name().text}/traces.html"


def format_ms(time_ns: int) -> str:
    return f"{time_ns / _NS_PER_MS:.2f}"


def status_badge(valid: bool | None) -> Element:  # noqa: FBT001
    """Render the validation verdict of one sample or one run."""
    if valid is None:
        return span(".status.skipped")["not validated"]
    if valid:
        return span(".status.pass")["✓ PASS"]
    return span(".status.fail")["✗ FAIL"]


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


def render_index_page(labs: list[Lab], results: list[LabResults]) -> str:
    """Render the landing page: one row per lab, linking to its traces page."""
    if len(labs) != len(results):
        msg = f"Got {len(labs)} labs but {len(results)} results"
        raise ValueError(msg)
    return base_page(
        page_title="adaptlab results",
        heading="Lab results",
        content=main(".content")[
            table(".summary-table")[
                thead[
                    tr[
                        th["Lab"],
                        th["Rounds"],
                        th["Naive (ms)"],
                        th["Incremental (ms)"],
                        th["Speedup"],
                        th["Validation"],
                    ],
                ],
                tbody[[_summary_row(lab, res) for lab, res in zip(labs, results, strict=True)]],
            ],
        ],
    )


def _summary_row(lab: Lab, results: LabResults) -> Element:
    naive_ns = results.total_time_ns(incremental=False)
    dcg_ns = results.total_time_ns(incremental=True)
    speedup = f"{naive_ns / dcg_ns:.2f}×" if dcg_ns else "-"
    validated = any(s.output_valid is not None for s in results.samples)
    return tr[
        td(".lab-name")[a(href=url_for_lab(lab))[lab.name().text]],
        td[str(len(results.samples))],
        td[format_ms(naive_ns)],
        td[format_ms(dcg_ns)],
        td[speedup],
        td[status_badge(results.all_valid if validated else None)],
    ]


# ---------------------------------------------------------------------------
# Lab traces page
# ---------------------------------------------------------------------------


def render_lab_page(lab: Lab, results: LabResults) -> str:
    """Render one lab's page: per round, the input, the four graph fragments, timings and traces."""
    name = lab.name().text
    link = lab.url()
    prev: Sample | None = None
    sections: list[Element] = []
    for sample in results.samples:
        sections.append(_sample_section(prev, sample))
        prev = sample
    return base_page(
        page_title=f"{name} - adaptlab traces",
        heading=a(href=link)[name] if link else name,
        content=main(".content")[
            div(".column-heads")[
                div(".batch-name")["step"],
                div(".editor")["Editor"],
                div(".archivist")["Archivist"],
                div(".naive")["Naive"],
            ],
            sections,
        ],
        index_href="../index.html",
    )


def _sample_section(prev: Sample | None, sample: Sample) -> Element:
    dcg = sample.dcg_sample
    return section(".sample", id=f"batch-{sample.batch_name}")[
        hr,
        div(".batch-name-lab")["batch name", div(".batch-name")[str(sample.batch_name)]],
        div(".validation")[status_badge(sample.output_valid)],
        hr,
        div(".sample-input")[html_of_div(div_of_value_tree(dcg.input_val)) if dcg.input_val is not None else None],
        hr,
        _sample_dcg(prev, sample),
        hr,
        div(".editor")[_timings(dcg.process_input, with_ms=False), _traces(dcg.process_input)],
        div(".archivist")[_timings(dcg.compute_output, with_ms=True), _traces(dcg.compute_output)],
        div(".naive")[
            div(".time-ns-lab")["edit (ms): ", div(".time-ms")[format_ms(sample.naive_sample.process_input.time_ns)]],
            div(".time-ns-lab")[
                "compute (ms): ",
                div(".time-ms")[format_ms(sample.naive_sample.compute_output.time_ns)],
            ],
        ],
        hr,
    ]


def _sample_dcg(prev: Sample | None, sample: Sample) -> list[Node]:
    """The four graph fragments bracketing a round.

    Post-edit fragments follow the previous round's compute traces through
    this round's graph as it stood after the edit; post-update fragments
    follow this round's compute traces through the graph after computing.
    Fragments without a graph or traces render as empty containers.
    """
    post_edit = sample.dcg_sample.process_input.reflect_dcg
    post_update = sample.dcg_sample.compute_output.reflect_dcg
    nodes: list[Node] = []
    if post_edit is not None and prev is not None:
        prev_traces = prev.dcg_sample.compute_output.reflect_traces
        nodes += [
            div(".archivist-alloc-tree-post-edit")[html_of_divs(div_of_edge_trees(post_edit, prev_traces, Effect.ALLOC))],
            div(".archivist-force-tree-post-edit")[html_of_divs(div_of_edge_trees(post_edit, prev_traces, Effect.FORCE))],
        ]
    else:
        nodes += [
            div(".archivist-alloc-tree-post-edit.placeholder"),
            div(".archivist-force-tree-post-edit.placeholder"),
        ]
    nodes.append(div(".archivist-update-sep"))
    if post_update is not None:
        traces = sample.dcg_sample.compute_output.reflect_traces
        nodes += [
            div(".archivist-alloc-tree-post-update")[html_of_divs(div_of_edge_trees(post_update, traces, Effect.ALLOC))],
            div(".archivist-force-tree-post-update")[html_of_divs(div_of_edge_trees(post_update, traces, Effect.FORCE))],
        ]
    else:
        nodes += [
            div(".archivist-alloc-tree-post-update.placeholder"),
            div(".archivist-force-tree-post-update.placeholder"),
        ]
    return nodes


def _timings(metrics: EngineMetrics, *, with_ms: bool) -> list[Element]:
    out = [div(".time-ns-lab")["time (ns): ", div(".time-ns")[str(metrics.time_ns)]]]
    if with_ms:
        out.append(div(".time-ms-lab")["time (ms): ", div(".time-ms")[format_ms(metrics.time_ns)]])
    return out


def _traces(metrics: EngineMetrics) -> list[Element]:
    return [
        div(".traces-lab")["Traces"],
        div(".traces")[[html_of_div(div_of_trace(entry)) for entry in metrics.reflect_traces]],
    ]


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def write_report(labs: list[Lab], results: list[LabResults], output_dir: Path) -> list[Path]:
    """Write ``index.html`` and one ``<lab>/traces.html`` per lab.

    Returns:
        The paths of the files written.

    Raises:
        OSError: If the output directory or a file cannot be written.

    """
    index = output_dir / "index.html"
    _write_file(index, render_index_page(labs, results))
    written = [index]
    for lab, res in zip(labs, results, strict=True):
        path = output_dir / url_for_lab(lab)
        _write_file(path, render_lab_page(lab, res))
        written.append(path)
    logger.debug("Wrote %d report files to %s", len(written), output_dir)
    return written


def _write_file(path: Path, content: str) -> None:
    """Write content to a file, creating parent directories as needed."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
