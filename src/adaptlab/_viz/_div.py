"""Reflection-to-tree rendering.

A `Div` is a restricted ``<div>``: a distinguished `tag` class naming what was
reflected into it, further `classes` used only for styling, an optional
`text` and nested children in `extent`. The builders here never touch the
live engine; they read only reflected snapshots.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from adaptlab._engine import (
    AllocKind,
    Effect,
    ValArt,
    ValConst,
    ValConstr,
    ValOpaque,
    ValTuple,
    ValVec,
    succs_of_node,
)

if TYPE_CHECKING:
    from adaptlab._engine import Graph, Loc, Name, Succ, TraceEdge, TraceEntry, Val

_CSS_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")

_ALLOC_SYMBOLS = {
    AllocKind.REF_CELL: "▣",
    AllocKind.THUNK: "◯",
}


@dataclass(slots=True)
class Div:
    tag: str
    classes: list[str] = field(default_factory=list)
    extent: list[Div] = field(default_factory=list)
    text: str | None = None

    @property
    def class_attr(self) -> str:
        return " ".join([self.tag, *self.classes])


def css_ident(text: str) -> str:
    """Turn arbitrary text into something usable as a CSS class."""
    return _CSS_UNSAFE.sub("_", text)


def div_of_name(n: Name) -> Div:
    return Div("name", [f"name-{css_ident(n.text)}"], text=n.text)


def div_of_path(path: tuple[Name, ...]) -> Div:
    return Div("path", extent=[div_of_name(n) for n in path])


def div_of_loc(loc: Loc) -> Div:
    return Div("loc", extent=[div_of_path(loc.path), div_of_name(loc.name)])


def div_of_oploc(loc: Loc | None) -> Div:
    """Render an optional location; the outermost edge of a trace has none."""
    return Div("oploc", extent=[] if loc is None else [div_of_loc(loc)])


def div_of_succ(succ: Succ) -> Div:
    return Div(
        "succ",
        [
            "succ-alloc" if succ.effect == Effect.ALLOC else "succ-force",
            "succ-dirty" if succ.dirty else "succ-not-dirty",
        ],
        [div_of_loc(succ.loc)],
    )


def div_of_edge(edge: TraceEdge) -> Div:
    return Div("edge", extent=[div_of_oploc(edge.loc), div_of_succ(edge.succ)])


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


def _value_div(val: Val) -> tuple[Div, tuple[Val, ...]]:
    """Build the div of one value node and return it with the children still to render."""
    match val:
        case ValConstr(name, fields):
            return Div("val-constr", [f"constr-{css_ident(name)}"], text=name), fields
        case ValConst(value):
            text = str(value) if isinstance(value, int) else repr(value)
            return Div("val-const", [f"const-{css_ident(str(value))}"], text=text), ()
        case ValTuple(vals):
            return Div("val-tuple", [f"tuple-{len(vals)}"]), vals
        case ValVec(vals):
            return Div("val-vec", [f"vec-{len(vals)}"]), vals
        case ValArt(loc):
            # A reference: the target is shown by identity only.
            return Div("val-art", text=str(loc), extent=[div_of_loc(loc)]), ()
        case ValOpaque(text):
            return Div("val-opaque", text=text), ()


def div_of_value_tree(val: Val) -> Div:
    """Mirror the shape of a reflected value, one div per sub-value.

    References to other graph locations are rendered as `val-art` leaves and
    are not expanded.
    """
    root, children = _value_div(val)
    stack = [(root, children)]
    while stack:
        div, pending = stack.pop()
        for child in pending:
            child_div, grandchildren = _value_div(child)
            div.extent.append(child_div)
            stack.append((child_div, grandchildren))
    return root


# ---------------------------------------------------------------------------
# Dependency graph
# ---------------------------------------------------------------------------


def _div_of_edge_tree(graph: Graph, loc: Loc, effect: Effect, tag: str, visited: set[Loc]) -> Div:
    """Follow only the `effect` edges from `loc`, visiting each location once.

    A location reached a second time is rendered as a `visited` stub instead
    of being expanded again.

    Raises:
        EngineConsistencyError: If an edge leads to a location missing from the graph.

    """
    root = Div(tag, extent=[div_of_loc(loc)])
    visited.add(loc)
    stack = [(loc, root)]
    while stack:
        current, div = stack.pop()
        succs = succs_of_node(graph.node(current)) or ()
        matching = [s for s in succs if s.effect == effect]
        if not matching:
            div.classes.append("no-extent")
            continue
        for succ in matching:
            if succ.loc in visited:
                div.extent.append(Div(tag, ["visited", "no-extent"], [div_of_loc(succ.loc)]))
                continue
            visited.add(succ.loc)
            child = Div(tag, extent=[div_of_loc(succ.loc)])
            div.extent.append(child)
            stack.append((succ.loc, child))
    return root


def div_of_alloc_tree(graph: Graph, loc: Loc, visited: set[Loc] | None = None) -> Div:
    """Render the allocation tree rooted at `loc`."""
    return _div_of_edge_tree(graph, loc, Effect.ALLOC, "alloc-tree", set() if visited is None else visited)


def div_of_force_tree(graph: Graph, loc: Loc, visited: set[Loc] | None = None) -> Div:
    """Render the force tree rooted at `loc`."""
    return _div_of_edge_tree(graph, loc, Effect.FORCE, "force-tree", set() if visited is None else visited)


def div_of_edge_trees(graph: Graph, traces: tuple[TraceEntry, ...], effect: Effect) -> list[Div]:
    """One tree per outermost trace entry whose edge has the given effect."""
    render = div_of_alloc_tree if effect == Effect.ALLOC else div_of_force_tree
    return [render(graph, entry.edge.succ.loc) for entry in traces if entry.edge.succ.effect == effect]


# ---------------------------------------------------------------------------
# Traces
# ---------------------------------------------------------------------------


def _trace_div(entry: TraceEntry) -> Div:
    effect = entry.effect
    classes = [effect.css_class]
    if effect.alloc_kind is not None:
        classes.append(f"alloc-kind-{effect.alloc_kind}")
    classes.append("has-extent" if entry.extent else "no-extent")
    symbol = _ALLOC_SYMBOLS.get(effect.alloc_kind) if effect.alloc_kind is not None else None
    return Div(
        "trace",
        classes,
        [
            Div("tr-effect", text=effect.label),
            Div("tr-symbols", text=symbol),
            div_of_edge(entry.edge),
        ],
    )


def div_of_trace(entry: TraceEntry) -> Div:
    """Render one trace entry, with the entries it triggered nested under `tr-extent`."""
    root = _trace_div(entry)
    stack = [(root, entry)]
    while stack:
        div, current = stack.pop()
        if not current.extent:
            continue
        extent = Div("tr-extent")
        div.extent.append(extent)
        for sub in current.extent:
            sub_div = _trace_div(sub)
            extent.extent.append(sub_div)
            stack.append((sub_div, sub))
    return root
