"""Reflected snapshots of the engine's dependency graph and effect traces.

These are plain immutable values. They are captured at sampling time so that
rendering later reads exactly the state the engine had then, not whatever the
live engine holds by the time a report is written.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from ._art import Art
from ._names import Loc, Name

if TYPE_CHECKING:
    from collections.abc import Mapping


class EngineConsistencyError(RuntimeError):
    """The engine's reflected state violates its own contract.

    Raised, for example, when an edge refers to a location that is absent from
    the graph table.
    """


class Effect(StrEnum):
    """The kind of a dependency-graph edge."""

    ALLOC = "alloc"
    FORCE = "force"


class NodeKind(StrEnum):
    """The kind of a node in the dependency graph."""

    REF = "ref"
    THUNK = "thunk"


# ---------------------------------------------------------------------------
# Values
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ValConstr:
    """A tagged variant (dataclass instance) with positional fields."""

    name: str
    fields: tuple[Val, ...] = ()


@dataclass(frozen=True, slots=True)
class ValConst:
    value: int | str


@dataclass(frozen=True, slots=True)
class ValTuple:
    vals: tuple[Val, ...] = ()


@dataclass(frozen=True, slots=True)
class ValVec:
    vals: tuple[Val, ...] = ()


@dataclass(frozen=True, slots=True)
class ValArt:
    """A reference to another graph location; never expanded in place."""

    loc: Loc


@dataclass(frozen=True, slots=True)
class ValOpaque:
    """A value with no structural reflection (functions, naive arts, ...)."""

    text: str


type Val = ValConstr | ValConst | ValTuple | ValVec | ValArt | ValOpaque


def reflect_value(obj: Any) -> Val:  # noqa: PLR0911
    """Reflect a Python value into a `Val` tree.

    Art handles in incremental mode reflect as `ValArt` references, so the
    reflection of a structure stops at its cacheable boundaries.
    """
    if isinstance(obj, Art):
        if obj.loc is not None:
            return ValArt(obj.loc)
        return ValOpaque("art")
    if isinstance(obj, Name):
        return ValConst(obj.text)
    if isinstance(obj, bool):
        return ValConst(str(obj))
    if isinstance(obj, int | str):
        return ValConst(obj)
    if isinstance(obj, tuple):
        return ValTuple(tuple(reflect_value(v) for v in obj))
    if isinstance(obj, list):
        return ValVec(tuple(reflect_value(v) for v in obj))
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return ValConstr(
            type(obj).__name__,
            tuple(reflect_value(getattr(obj, f.name)) for f in dataclasses.fields(obj)),
        )
    return ValOpaque(getattr(obj, "__name__", type(obj).__name__))


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Succ:
    """An outgoing edge of a node: the target location and how it was reached."""

    loc: Loc
    effect: Effect
    dirty: bool = False


@dataclass(frozen=True, slots=True)
class NodeReflection:
    """A snapshot of one node: its kind, its value and its outgoing edges."""

    kind: NodeKind
    value: Val | None = None
    succs: tuple[Succ, ...] = ()


def succs_of_node(node: NodeReflection) -> tuple[Succ, ...] | None:
    """Return the successor edges of a node, or None for ref cells."""
    if node.kind == NodeKind.REF:
        return None
    return node.succs


@dataclass(frozen=True, slots=True)
class Graph:
    """Reflected dependency graph: a table from location to node snapshot."""

    table: Mapping[Loc, NodeReflection] = field(default_factory=dict)

    def node(self, loc: Loc) -> NodeReflection:
        """Look up a location.

        Raises:
            EngineConsistencyError: If the location is not in the table.

        """
        try:
            return self.table[loc]
        except KeyError:
            msg = f"dangling location in reflected graph: {loc}"
            raise EngineConsistencyError(msg) from None

    def __len__(self) -> int:
        return len(self.table)

    def __contains__(self, loc: object) -> bool:
        return loc in self.table


# ---------------------------------------------------------------------------
# Traces
# ---------------------------------------------------------------------------


class EffectKind(StrEnum):
    CLEAN_REC = "clean-rec"
    CLEAN_EVAL = "clean-eval"
    CLEAN_EDGE = "clean-edge"
    DIRTY = "dirty"
    REMOVE = "remove"
    ALLOC = "alloc"
    FORCE = "force"


class AllocCase(StrEnum):
    LOC_FRESH = "loc-fresh"
    LOC_EXISTS = "loc-exists"


class AllocKind(StrEnum):
    REF_CELL = "refcell"
    THUNK = "thunk"


class ForceCase(StrEnum):
    COMP_CACHE_MISS = "compcache-miss"
    COMP_CACHE_HIT = "compcache-hit"
    REF_GET = "refget"


_LABELS = {
    EffectKind.CLEAN_REC: "CleanRec",
    EffectKind.CLEAN_EVAL: "CleanEval",
    EffectKind.CLEAN_EDGE: "CleanEdge",
    EffectKind.DIRTY: "Dirty",
    EffectKind.REMOVE: "Remove",
    AllocCase.LOC_FRESH: "LocFresh",
    AllocCase.LOC_EXISTS: "LocExists",
    ForceCase.COMP_CACHE_MISS: "CompCacheMiss",
    ForceCase.COMP_CACHE_HIT: "CompCacheHit",
    ForceCase.REF_GET: "RefGet",
}


@dataclass(frozen=True, slots=True)
class TraceEffect:
    """One low-level engine effect, with its sub-case where it has one."""

    kind: EffectKind
    alloc_case: AllocCase | None = None
    alloc_kind: AllocKind | None = None
    force_case: ForceCase | None = None

    @classmethod
    def alloc(cls, case: AllocCase, kind: AllocKind) -> TraceEffect:
        return cls(EffectKind.ALLOC, alloc_case=case, alloc_kind=kind)

    @classmethod
    def force(cls, case: ForceCase) -> TraceEffect:
        return cls(EffectKind.FORCE, force_case=case)

    @property
    def css_class(self) -> str:
        """Classification label, e.g. ``tr-force-compcache-hit``."""
        if self.kind == EffectKind.ALLOC:
            return f"tr-alloc-{self.alloc_case}"
        if self.kind == EffectKind.FORCE:
            return f"tr-force-{self.force_case}"
        return f"tr-{self.kind}"

    @property
    def label(self) -> str:
        """Human-readable label, e.g. ``Force(CompCacheHit)``."""
        if self.kind == EffectKind.ALLOC and self.alloc_case is not None:
            return f"Alloc({_LABELS[self.alloc_case]})"
        if self.kind == EffectKind.FORCE and self.force_case is not None:
            return f"Force({_LABELS[self.force_case]})"
        return _LABELS[self.kind]


@dataclass(frozen=True, slots=True)
class TraceEdge:
    """The edge an effect concerns; ``loc`` is None at the outermost level."""

    loc: Loc | None
    succ: Succ


@dataclass(frozen=True, slots=True)
class TraceEntry:
    """A chronological effect record, with the effects it triggered nested."""

    effect: TraceEffect
    edge: TraceEdge
    extent: tuple[TraceEntry, ...] = ()

