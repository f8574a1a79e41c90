"""Tests for the execution context and both engines."""

from __future__ import annotations

from typing import Any

import pytest

from adaptlab._engine import (
    DCG,
    AllocCase,
    Art,
    Effect,
    EffectKind,
    EngineConsistencyError,
    ExecutionContext,
    ForceCase,
    Loc,
    Mode,
    Name,
    NodeKind,
    TraceEntry,
    name_fork,
    name_level,
    name_of_hash,
    name_of_str,
    name_of_usize,
    name_pair,
)


def _incremental() -> ExecutionContext:
    ctx = ExecutionContext()
    ctx.set_mode(Mode.INCREMENTAL)
    return ctx


def _walk(traces: tuple[TraceEntry, ...]) -> list[TraceEntry]:
    """Trace entries depth-first, outermost first."""
    out: list[TraceEntry] = []
    stack = list(reversed(traces))
    while stack:
        entry = stack.pop()
        out.append(entry)
        stack.extend(reversed(entry.extent))
    return out


class TestNames:
    def test_constructors(self) -> None:
        assert str(name_of_usize(3)) == "3"
        assert str(name_of_str("compute")) == "compute"
        assert name_pair(Name("a"), Name("b")) == Name("(a,b)")
        assert name_fork(Name("7")) == (Name("7.L"), Name("7.R"))

    def test_name_of_hash_is_content_derived(self) -> None:
        assert name_of_hash((1, 2)) == name_of_hash((1, 2))
        assert name_of_hash((1, 2)) != name_of_hash((2, 1))
        assert name_of_hash("x").text.startswith("#")

    def test_name_level_is_deterministic_and_bounded(self) -> None:
        levels = [name_level(name_of_usize(i)) for i in range(200)]
        assert levels == [name_level(name_of_usize(i)) for i in range(200)]
        assert all(0 <= lev <= 30 for lev in levels)
        # Roughly half of all names have level 0.
        assert 50 < levels.count(0) < 150

    def test_loc_str(self) -> None:
        loc = Loc((Name("compute"), Name("tree_of_list")), Name("3.L"))
        assert str(loc) == "compute.tree_of_list/3.L"


class TestModeSwitching:
    def test_starts_naive(self) -> None:
        ctx = ExecutionContext()
        assert ctx.mode == Mode.NAIVE
        assert ctx.reflect_graph() is None

    def test_set_mode_returns_previous(self) -> None:
        ctx = ExecutionContext()
        assert ctx.set_mode(Mode.INCREMENTAL) == Mode.NAIVE
        assert ctx.set_mode(Mode.NAIVE) == Mode.INCREMENTAL
        assert ctx.mode == Mode.NAIVE

    def test_use_engine_swaps_handles(self) -> None:
        ctx = ExecutionContext()
        dcg = DCG()
        assert ctx.use_engine(dcg) is None
        ctx.cell(Name("a"), 1)
        assert ctx.use_engine(None) is dcg
        assert len(dcg) == 1

    def test_switching_during_evaluation_is_rejected(self) -> None:
        ctx = _incremental()

        def body(c: ExecutionContext) -> None:
            c.use_engine(None)

        with pytest.raises(EngineConsistencyError):
            ctx.memo(Name("t"), body)


class TestNaiveEngine:
    def test_thunks_reevaluate_on_every_force(self) -> None:
        ctx = ExecutionContext()
        calls: list[int] = []

        def body(c: ExecutionContext, x: int) -> int:
            calls.append(x)
            return x + 1

        art = ctx.thunk(Name("t"), body, 1)
        assert ctx.force(art) == 2
        assert ctx.force(art) == 2
        assert calls == [1, 1]

    def test_cells_hold_values(self) -> None:
        ctx = ExecutionContext()
        art = ctx.cell(Name("c"), "v")
        assert art.loc is None
        assert ctx.force(art) == "v"

    def test_no_trace(self) -> None:
        ctx = ExecutionContext()
        _, measurement = ctx.run_timed_counted(lambda: ctx.cell(Name("c"), 1))
        assert ctx.reflect_trace() == ()
        assert measurement.counts.alloc_fresh == 1
        assert measurement.time_ns >= 0


class TestIncrementalEngine:
    def test_memo_hit(self) -> None:
        ctx = _incremental()
        calls: list[int] = []

        def body(c: ExecutionContext, x: int) -> int:
            calls.append(x)
            return x * 2

        art = ctx.thunk(Name("t"), body, 4)
        assert ctx.force(art) == 8
        assert ctx.force(art) == 8
        assert calls == [4]
        assert ctx.counts().eval == 1
        assert ctx.counts().force_hit == 1

    def test_reallocation_with_equal_content_is_reuse(self) -> None:
        ctx = _incremental()
        first = ctx.cell(Name("c"), 1)
        second = ctx.cell(Name("c"), 1)
        assert first == second
        assert ctx.counts().alloc_fresh == 1
        assert ctx.counts().alloc_nonfresh == 1
        assert ctx.counts().dirty == 0

    def test_changed_cell_dirties_and_recomputes(self) -> None:
        ctx = _incremental()
        calls: list[str] = []

        def read(c: ExecutionContext, a: Art) -> int:
            calls.append("read")
            return c.force(a) * 10

        cell = ctx.cell(Name("c"), 1)
        thunk = ctx.thunk(Name("t"), read, cell)
        assert ctx.force(thunk) == 10

        ctx.cell(Name("c"), 2)
        assert ctx.counts().dirty == 1
        assert ctx.force(thunk) == 20
        assert calls == ["read", "read"]

        ctx.cell(Name("c"), 2)
        assert ctx.force(thunk) == 20
        assert calls == ["read", "read"]

    def test_cleaning_stops_at_unchanged_values(self) -> None:
        ctx = _incremental()
        calls: list[str] = []

        def parity(c: ExecutionContext, a: Art) -> int:
            calls.append("parity")
            return c.force(a) % 2

        def outer(c: ExecutionContext, p: Art) -> int:
            calls.append("outer")
            return c.force(p) + 100

        cell = ctx.cell(Name("c"), 1)
        p = ctx.thunk(Name("p"), parity, cell)
        o = ctx.thunk(Name("o"), outer, p)
        assert ctx.force(o) == 101
        assert calls == ["outer", "parity"]

        ctx.cell(Name("c"), 3)
        result, measurement = ctx.run_timed_counted(lambda: ctx.force(o))
        assert result == 101
        assert calls == ["outer", "parity", "parity"]
        assert measurement.counts.clean == 1

        (top,) = ctx.reflect_trace()
        assert top.effect.force_case == ForceCase.COMP_CACHE_HIT
        kinds = [entry.effect.kind for entry in _walk(top.extent)]
        assert EffectKind.CLEAN_EVAL in kinds
        assert EffectKind.CLEAN_EDGE in kinds
        assert EffectKind.CLEAN_REC in kinds

    def test_changed_thunk_arguments_reevaluate(self) -> None:
        ctx = _incremental()

        def double(c: ExecutionContext, x: int) -> int:
            return x * 2

        assert ctx.memo(Name("t"), double, 1) == 2
        assert ctx.memo(Name("t"), double, 5) == 10
        assert ctx.counts().eval == 2

    def test_force_of_unknown_location(self) -> None:
        ctx = _incremental()
        with pytest.raises(EngineConsistencyError):
            ctx.force(Art(loc=Loc((), Name("missing"))))

    def test_ns_extends_the_path(self) -> None:
        ctx = _incremental()
        art = ctx.ns(name_of_str("compute"), ctx.cell, Name("c"), 1)
        assert art.loc == Loc((Name("compute"),), Name("c"))

    def test_thunks_evaluate_under_their_own_path(self) -> None:
        ctx = _incremental()

        def inner(c: ExecutionContext) -> Any:
            return c.cell(Name("x"), 0)

        thunk = ctx.ns(name_of_str("a"), ctx.thunk, Name("t"), inner)
        art = ctx.ns(name_of_str("b"), ctx.force, thunk)
        assert art.loc == Loc((Name("a"),), Name("x"))


class TestReflection:
    def test_graph_snapshot(self) -> None:
        ctx = _incremental()

        def read(c: ExecutionContext, a: Art) -> int:
            return c.force(a) + 1

        cell = ctx.cell(Name("c"), 1)
        ctx.memo(Name("t"), read, cell)
        graph = ctx.reflect_graph()
        assert graph is not None
        assert len(graph) == 2

        node = graph.node(Loc((), Name("t")))
        assert node.kind == NodeKind.THUNK
        assert [(s.loc.name.text, s.effect) for s in node.succs] == [("c", Effect.FORCE)]
        assert graph.node(Loc((), Name("c"))).kind == NodeKind.REF

    def test_snapshot_does_not_follow_later_changes(self) -> None:
        ctx = _incremental()
        ctx.cell(Name("c"), 1)
        graph = ctx.reflect_graph()
        ctx.cell(Name("d"), 2)
        assert graph is not None
        assert Loc((), Name("d")) not in graph

    def test_dangling_location(self) -> None:
        ctx = _incremental()
        graph = ctx.reflect_graph()
        assert graph is not None
        with pytest.raises(EngineConsistencyError, match="dangling"):
            graph.node(Loc((), Name("nowhere")))

    def test_trace_of_allocation(self) -> None:
        ctx = _incremental()
        ctx.run_timed_counted(lambda: ctx.cell(Name("a"), 1))
        (entry,) = ctx.reflect_trace()
        assert entry.effect.alloc_case == AllocCase.LOC_FRESH
        assert entry.effect.label == "Alloc(LocFresh)"
        assert entry.effect.css_class == "tr-alloc-loc-fresh"
        assert entry.edge.loc is None
        assert entry.edge.succ.loc == Loc((), Name("a"))

    def test_force_miss_nests_its_effects(self) -> None:
        ctx = _incremental()

        def body(c: ExecutionContext) -> int:
            return c.force(c.cell(Name("inner"), 3))

        ctx.run_timed_counted(lambda: ctx.memo(Name("t"), body))
        alloc, force = ctx.reflect_trace()
        assert alloc.effect.kind == EffectKind.ALLOC
        assert force.effect.label == "Force(CompCacheMiss)"
        labels = [e.effect.label for e in force.extent]
        assert labels == ["Alloc(LocFresh)", "Force(RefGet)"]
        assert all(e.edge.loc == Loc((), Name("t")) for e in force.extent)
