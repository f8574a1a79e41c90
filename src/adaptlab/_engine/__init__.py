"""Evaluation engine boundary: execution context, names and reflection types."""

from ._art import Art
from ._context import DCG, Counts, ExecutionContext, Measurement, Mode
from ._names import (
    Loc,
    Name,
    name_fork,
    name_level,
    name_of_hash,
    name_of_str,
    name_of_usize,
    name_pair,
    string_of_path,
)
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
    Val,
    ValArt,
    ValConst,
    ValConstr,
    ValOpaque,
    ValTuple,
    ValVec,
    reflect_value,
    succs_of_node,
)

__all__ = [
    "DCG",
    "AllocCase",
    "AllocKind",
    "Art",
    "Counts",
    "Effect",
    "EffectKind",
    "EngineConsistencyError",
    "ExecutionContext",
    "ForceCase",
    "Graph",
    "Loc",
    "Measurement",
    "Mode",
    "Name",
    "NodeKind",
    "NodeReflection",
    "Succ",
    "TraceEdge",
    "TraceEffect",
    "TraceEntry",
    "Val",
    "ValArt",
    "ValConst",
    "ValConstr",
    "ValOpaque",
    "ValTuple",
    "ValVec",
    "name_fork",
    "name_level",
    "name_of_hash",
    "name_of_str",
    "name_of_usize",
    "name_pair",
    "reflect_value",
    "string_of_path",
    "succs_of_node",
]
