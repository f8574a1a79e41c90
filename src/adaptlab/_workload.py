"""Workload model: how inputs are generated and how they change."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    import numpy as np

    from ._engine import ExecutionContext


class NominalStrategy(StrEnum):
    """How the names of cacheable boundaries are chosen."""

    REGULAR = "regular"
    """Name each boundary after its position."""
    BY_CONTENT = "by-content"
    """Name each boundary after its content."""


class GenerateParams(BaseModel):
    """Parameters of input generation."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    size: int = Field(default=10, ge=0, description="Number of elements of the generated input")
    gauge: int = Field(default=1, ge=1, description="Every gauge-th position is a named boundary")
    nominal_strategy: NominalStrategy = NominalStrategy.REGULAR


class Generate[Input](ABC):
    """Produces a fresh input.

    Implementations are deterministic given the RNG state and draw exactly one
    random value per generated position.
    """

    @abstractmethod
    def generate(self, ctx: ExecutionContext, rng: np.random.Generator, params: GenerateParams) -> Input: ...


class Edit[Input, EditState](ABC):
    """Mutates an input, one change per call."""

    @abstractmethod
    def edit_init(self, ctx: ExecutionContext, rng: np.random.Generator, params: GenerateParams) -> EditState: ...

    @abstractmethod
    def edit(
        self,
        ctx: ExecutionContext,
        inp: Input,
        state: EditState,
        rng: np.random.Generator,
        params: GenerateParams,
    ) -> tuple[Input, EditState]: ...


class Workload[Input, EditState](Generate[Input], Edit[Input, EditState]):
    """An input distribution: generation together with editing."""


def draw_element(rng: np.random.Generator, params: GenerateParams) -> int:
    """Draw one element uniformly from ``[0, size * 100)``."""
    return int(rng.integers(max(params.size * 100, 1)))
