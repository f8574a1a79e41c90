"""Execution context: the single evaluation context shared by both engines.

The context is an explicit object rather than process-wide state. It is in
naive mode when no incremental engine handle (`DCG`) is attached, and in
incremental mode otherwise. The harness swaps handles in and out around each
pass with `use_engine`.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from contextlib import contextmanager
from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from ._art import _UNSET, Art
from ._names import Loc, Name
from ._reflect import (
    AllocCase,
    AllocKind,
    Effect,
    EffectKind,
    EngineConsistencyError,
    ForceCase,
    Graph,
    NodeKind,
    NodeReflection,
    Succ,
    TraceEdge,
    TraceEffect,
    TraceEntry,
    reflect_value,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger(__name__)


class Mode(StrEnum):
    """Execution mode of the context."""

    NAIVE = "naive"
    INCREMENTAL = "incremental"


@dataclass(frozen=True, slots=True)
class Counts:
    """Engine-internal work counters."""

    alloc_fresh: int = 0
    alloc_nonfresh: int = 0
    eval: int = 0
    force_hit: int = 0
    dirty: int = 0
    clean: int = 0

    def __sub__(self, other: Counts) -> Counts:
        return Counts(*(getattr(self, f.name) - getattr(other, f.name) for f in fields(self)))


@dataclass(frozen=True, slots=True)
class Measurement:
    """Wall-clock time and engine counters of one measured thunk."""

    time_ns: int
    counts: Counts = field(default_factory=Counts)


@dataclass(slots=True)
class _Edge:
    loc: Loc
    effect: Effect
    dirty: bool = False
    observed: Any = _UNSET


@dataclass(slots=True)
class _Node:
    kind: NodeKind
    value: Any = _UNSET
    fn: Callable[..., Any] | None = None
    args: tuple[Any, ...] = ()
    succs: list[_Edge] = field(default_factory=list)
    # Ordered set of locations with an edge into this node.
    preds: dict[Loc, None] = field(default_factory=dict)


@dataclass(slots=True)
class _Frame:
    loc: Loc
    succs: list[_Edge] = field(default_factory=list)


class DCG:
    """The incremental engine's private state: its memo table.

    A DCG is an opaque handle from the harness's point of view. It is attached
    to an `ExecutionContext` with `use_engine` and detached again afterwards,
    carrying its memoized results from one round to the next.
    """

    def __init__(self) -> None:
        self.table: dict[Loc, _Node] = {}

    def __len__(self) -> int:
        return len(self.table)

    def reflect(self) -> Graph:
        """Snapshot the table as an immutable `Graph`."""
        return Graph(
            table={
                loc: NodeReflection(
                    kind=node.kind,
                    value=None if node.value is _UNSET else reflect_value(node.value),
                    succs=tuple(Succ(e.loc, e.effect, e.dirty) for e in node.succs),
                )
                for loc, node in self.table.items()
            },
        )


class ExecutionContext:
    """The evaluation context in which workloads generate, edit and compute.

    Thunk bodies passed to `thunk` and `memo` are called as ``fn(ctx, *args)``.

    Args:
        record_traces: Record a trace of low-level effects during
            `run_timed_counted` under the incremental engine.

    """

    def __init__(self, *, record_traces: bool = True) -> None:
        self._dcg: DCG | None = None
        self._record_traces = record_traces
        self._path: tuple[Name, ...] = ()
        self._frames: list[_Frame] = []
        self._traces: list[list[TraceEntry]] | None = None
        self._last_trace: tuple[TraceEntry, ...] = ()
        self._counts: Counter[str] = Counter()

    # ------------------------------------------------------------------
    # Mode switching
    # ------------------------------------------------------------------

    @property
    def mode(self) -> Mode:
        return Mode.NAIVE if self._dcg is None else Mode.INCREMENTAL

    def set_mode(self, mode: Mode) -> Mode:
        """Switch mode and return the previous one.

        Switching to incremental mode attaches a fresh `DCG` when none is
        attached; switching to naive mode drops the attached one. Use
        `use_engine` to keep a handle across switches.
        """
        previous = self.mode
        if mode == Mode.NAIVE:
            self.use_engine(None)
        elif self._dcg is None:
            self.use_engine(DCG())
        return previous

    def use_engine(self, dcg: DCG | None) -> DCG | None:
        """Attach an incremental engine handle (or None for naive) and return the previous one."""
        if self._frames:
            msg = "cannot switch engines while a thunk is being evaluated"
            raise EngineConsistencyError(msg)
        previous, self._dcg = self._dcg, dcg
        return previous

    # ------------------------------------------------------------------
    # Measurement and reflection
    # ------------------------------------------------------------------

    def counts(self) -> Counts:
        """Cumulative engine counters of this context."""
        return Counts(**{f.name: self._counts[f.name] for f in fields(Counts)})

    def run_timed_counted[T](self, thunk: Callable[[], T]) -> tuple[T, Measurement]:
        """Run a thunk and measure its wall-clock time and engine counters.

        Under the incremental engine the effects it performs are recorded and
        available afterwards from `reflect_trace`.
        """
        outer = self._traces
        recording = self._record_traces and self._dcg is not None
        self._traces = [[]] if recording else None
        before = self.counts()
        start = time.perf_counter_ns()
        try:
            result = thunk()
        finally:
            elapsed = time.perf_counter_ns() - start
            collected = self._traces
            self._traces = outer
        self._last_trace = tuple(collected[0]) if collected else ()
        if outer is not None:
            outer[-1].extend(self._last_trace)
        return result, Measurement(time_ns=elapsed, counts=self.counts() - before)

    def reflect_trace(self) -> tuple[TraceEntry, ...]:
        """Effects recorded by the last `run_timed_counted` call."""
        return self._last_trace

    def reflect_graph(self) -> Graph | None:
        """Snapshot of the attached engine's dependency graph, or None when naive."""
        if self._dcg is None:
            return None
        return self._dcg.reflect()

    # ------------------------------------------------------------------
    # Allocation and forcing
    # ------------------------------------------------------------------

    def ns[T](self, name: Name, fn: Callable[..., T], *args: Any) -> T:
        """Call ``fn(*args)`` with `name` appended to the namespace path."""
        saved = self._path
        self._path = (*saved, name)
        try:
            return fn(*args)
        finally:
            self._path = saved

    def cell(self, name: Name, value: Any) -> Art:
        """Allocate a named cell holding `value`."""
        if self._dcg is None:
            self._counts["alloc_fresh"] += 1
            return Art(value=value)
        table = self._dcg.table
        loc = Loc(self._path, name)
        node = table.get(loc)
        with self._collect() as extent:
            if node is None:
                table[loc] = _Node(NodeKind.REF, value=value)
                case = AllocCase.LOC_FRESH
                self._counts["alloc_fresh"] += 1
            else:
                case = AllocCase.LOC_EXISTS
                self._counts["alloc_nonfresh"] += 1
                if node.kind != NodeKind.REF or node.value != value:
                    self._remove_succs(loc, node)
                    node.kind, node.value, node.fn, node.args = NodeKind.REF, value, None, ()
                    self._dirty_observers(loc)
        self._record_edge(loc, Effect.ALLOC)
        self._trace(TraceEffect.alloc(case, AllocKind.REF_CELL), Succ(loc, Effect.ALLOC), extent)
        return Art(loc=loc)

    def thunk(self, name: Name, fn: Callable[..., Any], *args: Any) -> Art:
        """Allocate a named, suspended computation ``fn(ctx, *args)``."""
        if self._dcg is None:
            return Art(fn=fn, args=args)
        table = self._dcg.table
        loc = Loc(self._path, name)
        node = table.get(loc)
        with self._collect() as extent:
            if node is None:
                table[loc] = _Node(NodeKind.THUNK, fn=fn, args=args)
                case = AllocCase.LOC_FRESH
                self._counts["alloc_fresh"] += 1
            else:
                case = AllocCase.LOC_EXISTS
                self._counts["alloc_nonfresh"] += 1
                if node.kind != NodeKind.THUNK or node.fn is not fn or node.args != args:
                    self._remove_succs(loc, node)
                    node.kind, node.value, node.fn, node.args = NodeKind.THUNK, _UNSET, fn, args
                    self._dirty_observers(loc)
        self._record_edge(loc, Effect.ALLOC)
        self._trace(TraceEffect.alloc(case, AllocKind.THUNK), Succ(loc, Effect.ALLOC), extent)
        return Art(loc=loc)

    def force(self, art: Art) -> Any:
        """Return the value of a cell or the (possibly cached) result of a thunk."""
        if art.loc is None:
            if art.fn is not None:
                self._counts["eval"] += 1
                return art.fn(self, *art.args)
            return art.value
        dcg = self._require_dcg()
        node = dcg.table.get(art.loc)
        if node is None:
            msg = f"force of unknown location {art.loc}"
            raise EngineConsistencyError(msg)
        if node.kind == NodeKind.REF:
            self._record_edge(art.loc, Effect.FORCE, node.value)
            self._trace(TraceEffect.force(ForceCase.REF_GET), Succ(art.loc, Effect.FORCE))
            return node.value
        with self._collect() as extent:
            case = self._bring_up_to_date(art.loc, node)
        self._record_edge(art.loc, Effect.FORCE, node.value)
        self._trace(TraceEffect.force(case), Succ(art.loc, Effect.FORCE), extent)
        return node.value

    def memo(self, name: Name, fn: Callable[..., Any], *args: Any) -> Any:
        """Allocate a named thunk and force it."""
        return self.force(self.thunk(name, fn, *args))

    # ------------------------------------------------------------------
    # Change propagation
    # ------------------------------------------------------------------

    def _require_dcg(self) -> DCG:
        if self._dcg is None:
            msg = "incremental operation without an attached engine"
            raise EngineConsistencyError(msg)
        return self._dcg

    def _bring_up_to_date(self, loc: Loc, node: _Node) -> ForceCase:
        if node.value is _UNSET:
            self._evaluate(loc, node)
            return ForceCase.COMP_CACHE_MISS
        if any(e.dirty for e in node.succs) and not self._clean(loc, node):
            return ForceCase.COMP_CACHE_MISS
        self._counts["force_hit"] += 1
        return ForceCase.COMP_CACHE_HIT

    def _clean(self, loc: Loc, node: _Node) -> bool:
        """Clean the dirty edges of a thunk; return False if it had to re-evaluate."""
        table = self._require_dcg().table
        for edge in list(node.succs):
            if not edge.dirty:
                continue
            if edge.effect == Effect.FORCE:
                target = table[edge.loc]
                if target.kind == NodeKind.THUNK:
                    self._bring_up_to_date(edge.loc, target)
                if target.value != edge.observed:
                    with self._collect() as extent:
                        self._evaluate(loc, node)
                    self._trace(
                        TraceEffect(EffectKind.CLEAN_EVAL),
                        Succ(loc, Effect.FORCE, dirty=True),
                        extent,
                        src=loc,
                    )
                    return False
                self._trace(TraceEffect(EffectKind.CLEAN_EDGE), Succ(edge.loc, edge.effect), src=loc)
            edge.dirty = False
            self._counts["clean"] += 1
        self._trace(TraceEffect(EffectKind.CLEAN_REC), Succ(loc, Effect.FORCE), src=loc)
        return True

    def _evaluate(self, loc: Loc, node: _Node) -> None:
        if node.fn is None:
            msg = f"thunk at {loc} has no body"
            raise EngineConsistencyError(msg)
        self._remove_succs(loc, node)
        self._counts["eval"] += 1
        logger.debug("Evaluating %s", loc)
        frame = _Frame(loc)
        saved_path = self._path
        self._frames.append(frame)
        self._path = loc.path
        try:
            result = node.fn(self, *node.args)
        finally:
            self._frames.pop()
            self._path = saved_path
        node.succs = frame.succs
        node.value = result

    def _remove_succs(self, loc: Loc, node: _Node) -> None:
        table = self._require_dcg().table
        for edge in node.succs:
            target = table.get(edge.loc)
            if target is not None:
                target.preds.pop(loc, None)
            self._trace(TraceEffect(EffectKind.REMOVE), Succ(edge.loc, edge.effect, edge.dirty), src=loc)
        node.succs = []

    def _dirty_observers(self, loc: Loc) -> None:
        """Mark every force edge that transitively observes `loc` as dirty."""
        table = self._require_dcg().table
        stack = [loc]
        while stack:
            target = stack.pop()
            for pred in list(table[target].preds):
                pred_node = table.get(pred)
                if pred_node is None:
                    continue
                for edge in pred_node.succs:
                    if edge.loc == target and edge.effect == Effect.FORCE and not edge.dirty:
                        edge.dirty = True
                        self._counts["dirty"] += 1
                        self._trace(TraceEffect(EffectKind.DIRTY), Succ(target, Effect.FORCE, dirty=True), src=pred)
                        stack.append(pred)

    def _record_edge(self, loc: Loc, effect: Effect, observed: Any = _UNSET) -> None:
        if not self._frames:
            return
        frame = self._frames[-1]
        frame.succs.append(_Edge(loc, effect, observed=observed))
        self._require_dcg().table[loc].preds[frame.loc] = None

    # ------------------------------------------------------------------
    # Tracing
    # ------------------------------------------------------------------

    @contextmanager
    def _collect(self) -> Iterator[list[TraceEntry]]:
        """Collect the trace entries recorded inside the block."""
        if self._traces is None:
            yield []
            return
        entries: list[TraceEntry] = []
        self._traces.append(entries)
        try:
            yield entries
        finally:
            self._traces.pop()

    def _trace(
        self,
        effect: TraceEffect,
        succ: Succ,
        extent: list[TraceEntry] | None = None,
        *,
        src: Loc | None = None,
    ) -> None:
        if self._traces is None:
            return
        if src is None and self._frames:
            src = self._frames[-1].loc
        self._traces[-1].append(TraceEntry(effect, TraceEdge(src, succ), tuple(extent or ())))
