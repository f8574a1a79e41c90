"""Computation protocols and explicit partial outputs."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ._engine import ExecutionContext

type Demand = int | None
"""How many output items a demand-driven computation must produce; None is unbounded."""


@dataclass(frozen=True, slots=True)
class Forced:
    """An output item that has been computed."""

    value: Any


@dataclass(frozen=True, slots=True)
class Pending:
    """The unforced remainder of a partially demanded output."""


PENDING = Pending()


class Compute(ABC):
    """A pure, total computation from an input to an output.

    Outputs must be plain comparable data (tuples, ints), so that the outputs
    of the naive and the incremental engine can be compared with ``==``.
    """

    @abstractmethod
    def compute(self, ctx: ExecutionContext, inp: Any) -> Any: ...


class ComputeDemand(ABC):
    """A computation that is additionally given an amount of output to demand.

    The output of a list computation is a tuple of exactly ``min(demand, len)``
    `Forced` items, followed by one `Pending` when unforced structure remains.
    """

    @abstractmethod
    def compute(self, ctx: ExecutionContext, inp: Any, demand: Demand) -> Any: ...


def run_compute(computer: Compute | ComputeDemand, ctx: ExecutionContext, inp: Any, demand: Demand) -> Any:
    """Run either kind of computation; `demand` is ignored by plain `Compute`."""
    if isinstance(computer, ComputeDemand):
        return computer.compute(ctx, inp, demand)
    return computer.compute(ctx, inp)
