"""Run parameters and the sample/metrics model."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from ._workload import GenerateParams

if TYPE_CHECKING:
    from ._engine import Counts, Graph, TraceEntry, Val


class SampleParams(BaseModel):
    """Parameters of a single experiment run.

    Attributes:
        input_seeds: Seeds of the random number generator.
        generate_params: Parameters of input generation and editing.
        validate_output: Compare the naive and incremental outputs of every round.
        change_batch_size: Number of consecutive edits applied in each round after the first.
        demand: Output items demanded from demand-driven computations; None is unbounded.
        reflect: Capture the dependency graph, traces and input of the incremental engine.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    input_seeds: tuple[int, ...] = (0,)
    generate_params: GenerateParams = Field(default_factory=GenerateParams)
    validate_output: bool = True
    change_batch_size: int = Field(default=1, ge=1)
    demand: int | None = Field(default=None, ge=0)
    reflect: bool = True


class LabParams(BaseModel):
    """Sample parameters plus the number of change batches to run after the initial one."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    sample_params: SampleParams = Field(default_factory=SampleParams)
    change_batch_loopc: int = Field(default=10, ge=0)


def default_lab_params() -> LabParams:
    """Seed 0, size 10, gauge 1, regular naming, validation on, batch 1, 10 loops."""
    return LabParams()


@dataclass(frozen=True, slots=True)
class EngineMetrics:
    """Time, counters and (optionally) reflections of one measured phase."""

    time_ns: int
    engine_cnt: Counts
    reflect_dcg: Graph | None = None
    reflect_traces: tuple[TraceEntry, ...] = ()


@dataclass(frozen=True, slots=True)
class EngineSample:
    """The two phases of one round on one engine."""

    process_input: EngineMetrics
    compute_output: EngineMetrics
    input_val: Val | None = None


@dataclass(frozen=True, slots=True)
class Sample:
    """One round of the experiment.

    `output_valid` is None when validation is disabled.
    """

    params: SampleParams
    batch_name: int
    dcg_sample: EngineSample
    naive_sample: EngineSample
    output_valid: bool | None = None


@dataclass(frozen=True, slots=True)
class LabResults:
    samples: tuple[Sample, ...] = ()

    @property
    def invalid_batches(self) -> tuple[int, ...]:
        """Batch names of the rounds whose outputs differed between engines."""
        return tuple(s.batch_name for s in self.samples if s.output_valid is False)

    @property
    def all_valid(self) -> bool:
        return not self.invalid_batches

    def total_time_ns(self, *, incremental: bool) -> int:
        """Sum of editing and computing time over all rounds of one engine."""
        return sum(
            e.process_input.time_ns + e.compute_output.time_ns
            for e in (s.dcg_sample if incremental else s.naive_sample for s in self.samples)
        )
