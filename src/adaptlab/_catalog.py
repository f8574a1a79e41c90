"""The catalog of labs: each pairs an input distribution with a computation."""

from __future__ import annotations

import logging
import operator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol

from ._collections import (
    NIL,
    List,
    list_art,
    list_cons,
    list_demand,
    list_filter_eager,
    list_filter_lazy,
    list_map_eager,
    list_map_lazy,
    list_name,
    list_reverse,
    list_to_tuple,
    mergesort_list_of_tree,
    monoid_of_tree,
    tree_of_list,
    tree_to_data,
)
from ._compute import Compute, ComputeDemand
from ._engine import ExecutionContext, Name, name_of_hash, name_of_str, name_of_usize
from ._sampling import run_samples
from ._workload import NominalStrategy, Workload, draw_element

if TYPE_CHECKING:
    import numpy as np

    from ._compute import Demand
    from ._models import LabParams, LabResults
    from ._workload import GenerateParams

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Input distributions
# ---------------------------------------------------------------------------


class UniformPrepend(Workload[List, int]):
    """Lists of uniformly random elements, edited by prepending one element at a time.

    Every `gauge`-th position is preceded by a named boundary whose rest is
    held in a cell, so it can be shared between runs of the incremental engine.
    """

    def generate(self, ctx: ExecutionContext, rng: np.random.Generator, params: GenerateParams) -> List:
        lst: List = NIL
        for i in range(params.size):
            lst = self._prepend(ctx, lst, i, rng, params)
        return lst

    def edit_init(self, ctx: ExecutionContext, rng: np.random.Generator, params: GenerateParams) -> int:
        return params.size

    def edit(
        self,
        ctx: ExecutionContext,
        inp: List,
        state: int,
        rng: np.random.Generator,
        params: GenerateParams,
    ) -> tuple[List, int]:
        return self._prepend(ctx, inp, state, rng, params), state + 1

    @staticmethod
    def _prepend(ctx: ExecutionContext, lst: List, i: int, rng: np.random.Generator, params: GenerateParams) -> List:
        elm = draw_element(rng, params)
        if i % params.gauge == 0:
            name = _boundary_name(i, elm, params.nominal_strategy)
            lst = list_name(name, list_art(ctx.cell(name, lst)))
        return list_cons(elm, lst)


def _boundary_name(i: int, elm: int, strategy: NominalStrategy) -> Name:
    if strategy == NominalStrategy.BY_CONTENT:
        return name_of_hash((elm, i))
    return name_of_usize(i)


# ---------------------------------------------------------------------------
# Computations
# ---------------------------------------------------------------------------


def _square(x: int) -> int:
    return x * x


def _divisible_by_3(x: int) -> bool:
    return x % 3 == 0


class EagerMap(Compute):
    def compute(self, ctx: ExecutionContext, inp: List) -> tuple[int, ...]:
        return list_to_tuple(ctx, list_map_eager(ctx, inp, _square))


class EagerFilter(Compute):
    def compute(self, ctx: ExecutionContext, inp: List) -> tuple[int, ...]:
        return list_to_tuple(ctx, list_filter_eager(ctx, inp, _divisible_by_3))


class LazyMap(ComputeDemand):
    def compute(self, ctx: ExecutionContext, inp: List, demand: Demand) -> tuple[Any, ...]:
        return list_demand(ctx, list_map_lazy(ctx, inp, _square), demand)


class LazyFilter(ComputeDemand):
    def compute(self, ctx: ExecutionContext, inp: List, demand: Demand) -> tuple[Any, ...]:
        return list_demand(ctx, list_filter_lazy(ctx, inp, _divisible_by_3), demand)


class ListReverse(Compute):
    def compute(self, ctx: ExecutionContext, inp: List) -> tuple[int, ...]:
        return list_to_tuple(ctx, list_reverse(ctx, inp, NIL))


class ListTree(Compute):
    def compute(self, ctx: ExecutionContext, inp: List) -> Any:
        return tree_to_data(ctx, tree_of_list(ctx, inp))


class ListTreeMax(Compute):
    def compute(self, ctx: ExecutionContext, inp: List) -> int:
        tree = ctx.ns(name_of_str("tree_of_list"), tree_of_list, ctx, inp)
        return monoid_of_tree(ctx, tree, 0, max)


class ListTreeSum(Compute):
    def compute(self, ctx: ExecutionContext, inp: List) -> int:
        tree = ctx.ns(name_of_str("tree_of_list"), tree_of_list, ctx, inp)
        return monoid_of_tree(ctx, tree, 0, operator.add)


class EagerMergesort(Compute):
    """Sort, then force the whole sorted list."""

    def compute(self, ctx: ExecutionContext, inp: List) -> tuple[int, ...]:
        tree = ctx.ns(name_of_str("tree_of_list"), tree_of_list, ctx, inp)
        sorted_list = ctx.ns(name_of_str("mergesort"), mergesort_list_of_tree, ctx, tree)
        return list_to_tuple(ctx, sorted_list)


class LazyMergesort(ComputeDemand):
    """Sort, forcing only the demanded prefix of the sorted list."""

    def compute(self, ctx: ExecutionContext, inp: List, demand: Demand) -> tuple[Any, ...]:
        tree = ctx.ns(name_of_str("tree_of_list"), tree_of_list, ctx, inp)
        return list_demand(ctx, mergesort_list_of_tree(ctx, tree), demand)


# ---------------------------------------------------------------------------
# Labs
# ---------------------------------------------------------------------------


class Lab(Protocol):
    """Type-erased interface of a catalog entry."""

    def name(self) -> Name: ...

    def url(self) -> str | None: ...

    def run(self, params: LabParams, ctx: ExecutionContext | None = None) -> LabResults: ...


@dataclass(frozen=True, slots=True)
class LabDef:
    """A lab: an input distribution `dist` and a computation `computer`."""

    identity: Name
    dist: Workload[Any, Any]
    computer: Compute | ComputeDemand
    link: str | None = None

    def name(self) -> Name:
        return self.identity

    def url(self) -> str | None:
        return self.link

    def run(self, params: LabParams, ctx: ExecutionContext | None = None) -> LabResults:
        """Run the lab on a fresh execution context unless one is given."""
        if ctx is None:
            ctx = ExecutionContext(record_traces=params.sample_params.reflect)
        logger.info("Running lab %s", self.identity)
        return run_samples(ctx, params, self.dist, self.computer)


def all_labs() -> list[Lab]:
    """Return the master list of labs, in display order."""
    return [
        LabDef(name_of_str("list-lazy-map"), UniformPrepend(), LazyMap()),
        LabDef(name_of_str("list-lazy-filter"), UniformPrepend(), LazyFilter()),
        LabDef(name_of_str("list-tree"), UniformPrepend(), ListTree()),
        LabDef(name_of_str("list-tree-max"), UniformPrepend(), ListTreeMax()),
        LabDef(name_of_str("list-tree-sum"), UniformPrepend(), ListTreeSum()),
        LabDef(name_of_str("list-eager-mergesort"), UniformPrepend(), EagerMergesort()),
        LabDef(name_of_str("list-lazy-mergesort"), UniformPrepend(), LazyMergesort()),
        LabDef(name_of_str("list-eager-map"), UniformPrepend(), EagerMap()),
        LabDef(name_of_str("list-eager-filter"), UniformPrepend(), EagerFilter()),
        LabDef(name_of_str("list-reverse"), UniformPrepend(), ListReverse()),
    ]


def find_lab(name: str) -> Lab:
    """Look up a lab by name.

    Raises:
        KeyError: If no lab has that name; the message lists the known names.

    """
    labs = all_labs()
    for lab in labs:
        if lab.name().text == name:
            return lab
    known = ", ".join(lab.name().text for lab in labs)
    msg = f"Unknown lab '{name}'. Known labs: {known}"
    raise KeyError(msg)
