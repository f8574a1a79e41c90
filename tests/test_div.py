"""Tests for rendering reflections as div trees."""

from __future__ import annotations

import pytest

from adaptlab._engine import (
    AllocCase,
    AllocKind,
    Effect,
    EngineConsistencyError,
    ForceCase,
    Graph,
    Loc,
    Name,
    NodeKind,
    NodeReflection,
    Succ,
    TraceEdge,
    TraceEffect,
    TraceEntry,
    ValArt,
    ValConst,
    ValConstr,
    ValTuple,
)
from adaptlab._viz import (
    Div,
    css_ident,
    div_of_alloc_tree,
    div_of_edge_trees,
    div_of_force_tree,
    div_of_oploc,
    div_of_succ,
    div_of_trace,
    div_of_value_tree,
    html_of_div,
)


def _loc(name: str, *path: str) -> Loc:
    return Loc(tuple(Name(p) for p in path), Name(name))


def _thunk(*succs: Succ) -> NodeReflection:
    return NodeReflection(kind=NodeKind.THUNK, value=None, succs=succs)


def _ref() -> NodeReflection:
    return NodeReflection(kind=NodeKind.REF, value=ValConst(1), succs=())


def _walk(div: Div) -> list[Div]:
    """Every div of the tree in pre-order."""
    out: list[Div] = []
    stack = [div]
    while stack:
        d = stack.pop()
        out.append(d)
        stack.extend(reversed(d.extent))
    return out


def _locs_of(div: Div, tag: str) -> list[str]:
    """Names of the locations of every `tag` div, in pre-order."""
    return [d.extent[0].extent[1].text for d in _walk(div) if d.tag == tag]


A, B, C, D = (_loc(n) for n in "abcd")


class TestEdgeTrees:
    def test_force_tree_follows_only_force_edges(self) -> None:
        graph = Graph(
            table={
                A: _thunk(Succ(B, Effect.FORCE), Succ(C, Effect.ALLOC)),
                B: _ref(),
                C: _ref(),
            },
        )
        tree = div_of_force_tree(graph, A)
        assert tree.tag == "force-tree"
        assert _locs_of(tree, "force-tree") == ["a", "b"]

        alloc = div_of_alloc_tree(graph, A)
        assert _locs_of(alloc, "alloc-tree") == ["a", "c"]

    def test_leaves_have_no_extent(self) -> None:
        graph = Graph(table={A: _thunk(Succ(B, Effect.FORCE)), B: _ref()})
        tree = div_of_force_tree(graph, A)
        (leaf,) = [d for d in tree.extent if d.tag == "force-tree"]
        assert "no-extent" in leaf.classes
        assert "no-extent" not in tree.classes

    def test_shared_node_is_expanded_once(self) -> None:
        graph = Graph(
            table={
                A: _thunk(Succ(B, Effect.FORCE), Succ(C, Effect.FORCE)),
                B: _thunk(Succ(D, Effect.FORCE)),
                C: _thunk(Succ(D, Effect.FORCE)),
                D: _ref(),
            },
        )
        tree = div_of_force_tree(graph, A)
        nodes = [d for d in _walk(tree) if d.tag == "force-tree"]
        stubs = [d for d in nodes if "visited" in d.classes]
        assert len(stubs) == 1
        assert "no-extent" in stubs[0].classes
        assert sorted(_locs_of(tree, "force-tree")) == ["a", "b", "c", "d", "d"]

    def test_cycle_terminates(self) -> None:
        graph = Graph(table={A: _thunk(Succ(B, Effect.FORCE)), B: _thunk(Succ(A, Effect.FORCE))})
        tree = div_of_force_tree(graph, A)
        assert _locs_of(tree, "force-tree") == ["a", "b", "a"]

    def test_visited_set_is_shared(self) -> None:
        graph = Graph(table={A: _thunk(Succ(B, Effect.FORCE)), B: _ref()})
        visited: set[Loc] = set()
        div_of_force_tree(graph, A, visited)
        assert visited == {A, B}

    def test_dangling_location_raises(self) -> None:
        graph = Graph(table={A: _thunk(Succ(B, Effect.FORCE))})
        with pytest.raises(EngineConsistencyError):
            div_of_force_tree(graph, A)

    def test_edge_trees_of_outermost_entries(self) -> None:
        graph = Graph(table={A: _thunk(), B: _ref()})
        traces = (
            TraceEntry(
                TraceEffect.alloc(AllocCase.LOC_FRESH, AllocKind.REF_CELL),
                TraceEdge(None, Succ(B, Effect.ALLOC)),
            ),
            TraceEntry(TraceEffect.force(ForceCase.COMP_CACHE_MISS), TraceEdge(None, Succ(A, Effect.FORCE))),
        )
        (alloc,) = div_of_edge_trees(graph, traces, Effect.ALLOC)
        (force,) = div_of_edge_trees(graph, traces, Effect.FORCE)
        assert alloc.tag == "alloc-tree"
        assert force.tag == "force-tree"
        assert _locs_of(force, "force-tree") == ["a"]


class TestValues:
    def test_structure_is_mirrored(self) -> None:
        val = ValConstr("Cons", (ValConst(3), ValTuple((ValConst("x"), ValConst(4)))))
        tree = div_of_value_tree(val)
        assert [d.tag for d in _walk(tree)] == ["val-constr", "val-const", "val-tuple", "val-const", "val-const"]
        assert tree.text == "Cons"
        assert tree.extent[0].text == "3"
        assert tree.extent[1].extent[0].text == "'x'"

    def test_references_are_not_expanded(self) -> None:
        tree = div_of_value_tree(ValConstr("Named", (ValConst("7"), ValArt(_loc("7", "compute")))))
        art = tree.extent[1]
        assert art.tag == "val-art"
        assert art.text == "compute/7"
        assert [d.tag for d in art.extent] == ["loc"]


class TestTraces:
    def _entry(self) -> TraceEntry:
        inner = TraceEntry(
            TraceEffect.alloc(AllocCase.LOC_EXISTS, AllocKind.THUNK),
            TraceEdge(A, Succ(B, Effect.ALLOC)),
        )
        return TraceEntry(
            TraceEffect.force(ForceCase.COMP_CACHE_MISS),
            TraceEdge(None, Succ(A, Effect.FORCE)),
            (inner,),
        )

    def test_classes(self) -> None:
        tree = div_of_trace(self._entry())
        assert tree.classes == ["tr-force-compcache-miss", "has-extent"]
        (extent,) = [d for d in tree.extent if d.tag == "tr-extent"]
        (inner,) = extent.extent
        assert inner.classes == ["tr-alloc-loc-exists", "alloc-kind-thunk", "no-extent"]
        assert [d.text for d in inner.extent if d.tag == "tr-symbols"] == ["◯"]

    def test_labels(self) -> None:
        tree = div_of_trace(self._entry())
        labels = [d.text for d in _walk(tree) if d.tag == "tr-effect"]
        assert labels == ["Force(CompCacheMiss)", "Alloc(LocExists)"]

    def test_outermost_edge_has_no_source(self) -> None:
        assert div_of_oploc(None).extent == []
        tree = div_of_trace(self._entry())
        (edge,) = [d for d in tree.extent if d.tag == "edge"]
        assert edge.extent[0].tag == "oploc"
        assert edge.extent[0].extent == []

    def test_succ_classes(self) -> None:
        div = div_of_succ(Succ(A, Effect.FORCE, dirty=True))
        assert div.class_attr == "succ succ-force succ-dirty"


class TestHtml:
    def test_text_is_escaped(self) -> None:
        html = str(html_of_div(Div("val-opaque", text="<script>")))
        assert "&lt;script&gt;" in html
        assert "<script>" not in html

    def test_nesting(self) -> None:
        html = str(html_of_div(Div("loc", ["x"], [Div("name", text="n")])))
        assert html == '<div class="loc x"><div class="name">n</div></div>'

    def test_css_ident(self) -> None:
        assert css_ident("(3,#ab).L") == "_3__ab__L"
