"""Dual-engine sampling loop.

Each round feeds the same pseudo-random edit script to the naive and to the
incremental engine, one after the other on a single execution context, and
records a `Sample` of both.
"""

from __future__ import annotations

import copy
import logging
import sys
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import numpy as np

from ._compute import run_compute
from ._engine import DCG, Mode, name_of_str, reflect_value
from ._models import EngineMetrics, EngineSample, LabParams, LabResults, Sample, SampleParams

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._compute import Compute, ComputeDemand
    from ._engine import ExecutionContext
    from ._workload import Workload

logger = logging.getLogger(__name__)

STACK_SIZE = 64 * 1024 * 1024
RECURSION_LIMIT = 100_000


@dataclass(slots=True)
class TestEngineState:
    """Private continuation of one engine slot between rounds."""

    __test__ = False

    engine: DCG | None = None
    input: tuple[Any, Any] | None = None


@dataclass(slots=True)
class TestState:
    """State of one experiment run."""

    __test__ = False

    params: LabParams
    rng: np.random.Generator
    change_batch_num: int = 0
    dcg_state: TestEngineState = field(default_factory=TestEngineState)
    naive_state: TestEngineState = field(default_factory=TestEngineState)
    samples: list[Sample] = field(default_factory=list)

    @classmethod
    def init(cls, ctx: ExecutionContext, params: LabParams) -> TestState:
        """Seed the RNG, switch the context to naive mode and prepare an empty incremental engine."""
        seeds = list(params.sample_params.input_seeds)
        logger.debug("Initializing run with seeds %s", seeds)
        ctx.set_mode(Mode.NAIVE)
        return cls(
            params=params,
            rng=np.random.default_rng(seeds),
            dcg_state=TestEngineState(engine=DCG()),
        )

    @property
    def done(self) -> bool:
        return self.change_batch_num > self.params.change_batch_loopc

    def sample(
        self,
        ctx: ExecutionContext,
        workload: Workload[Any, Any],
        computer: Compute | ComputeDemand,
    ) -> Sample | None:
        """Run one round on both engines, or return None when the run is done."""
        if self.done:
            return None
        sample_params = self.params.sample_params

        ctx.use_engine(None)
        naive_rng = copy.deepcopy(self.rng)
        naive_sample, self.naive_state.input, naive_output = get_engine_sample(
            ctx,
            workload,
            computer,
            self.naive_state.input,
            naive_rng,
            sample_params,
        )

        dcg_rng = copy.deepcopy(self.rng)
        if self.dcg_state.engine is None:
            self.dcg_state.engine = DCG()
        ctx.use_engine(self.dcg_state.engine)
        try:
            dcg_sample, self.dcg_state.input, dcg_output = get_engine_sample(
                ctx,
                workload,
                computer,
                self.dcg_state.input,
                dcg_rng,
                sample_params,
            )
        finally:
            self.dcg_state.engine = ctx.use_engine(None)
        self.rng = dcg_rng

        output_valid: bool | None = None
        if sample_params.validate_output:
            output_valid = naive_output == dcg_output
            if not output_valid:
                logger.warning(
                    "Output mismatch in batch %d: naive=%r incremental=%r",
                    self.change_batch_num,
                    naive_output,
                    dcg_output,
                )

        sample = Sample(
            params=sample_params,
            batch_name=self.change_batch_num,
            dcg_sample=dcg_sample,
            naive_sample=naive_sample,
            output_valid=output_valid,
        )
        self.samples.append(sample)
        self.change_batch_num += 1
        return sample


def get_engine_metrics[T](
    ctx: ExecutionContext,
    thunk: Callable[[], T],
    *,
    reflect: bool,
) -> tuple[T, EngineMetrics]:
    """Time a thunk and capture the engine's graph and traces right after it."""
    result, measurement = ctx.run_timed_counted(thunk)
    metrics = EngineMetrics(
        time_ns=measurement.time_ns,
        engine_cnt=measurement.counts,
        reflect_dcg=ctx.reflect_graph() if reflect else None,
        reflect_traces=ctx.reflect_trace() if reflect else (),
    )
    return result, metrics


def get_engine_sample(  # noqa: PLR0913
    ctx: ExecutionContext,
    workload: Workload[Any, Any],
    computer: Compute | ComputeDemand,
    state_input: tuple[Any, Any] | None,
    rng: np.random.Generator,
    params: SampleParams,
) -> tuple[EngineSample, tuple[Any, Any], Any]:
    """Edit (or generate) the input and recompute the output on the current engine.

    Returns:
        The engine sample, the new ``(input, edit_state)`` pair and the output.

    """
    gen_params = params.generate_params

    def process_input() -> tuple[Any, Any]:
        if state_input is None:
            inp = workload.generate(ctx, rng, gen_params)
            return inp, workload.edit_init(ctx, rng, gen_params)
        inp, edit_state = state_input
        for _ in range(params.change_batch_size):
            inp, edit_state = workload.edit(ctx, inp, edit_state, rng, gen_params)
        return inp, edit_state

    (inp, edit_state), process_metrics = get_engine_metrics(ctx, process_input, reflect=params.reflect)
    output, compute_metrics = ctx.ns(
        name_of_str("compute"),
        lambda: get_engine_metrics(
            ctx,
            lambda: run_compute(computer, ctx, inp, params.demand),
            reflect=params.reflect,
        ),
    )
    input_val = reflect_value(inp) if params.reflect and ctx.mode == Mode.INCREMENTAL else None
    engine_sample = EngineSample(
        process_input=process_metrics,
        compute_output=compute_metrics,
        input_val=input_val,
    )
    return engine_sample, (inp, edit_state), output


def run_samples(
    ctx: ExecutionContext,
    params: LabParams,
    workload: Workload[Any, Any],
    computer: Compute | ComputeDemand,
) -> LabResults:
    """Run all ``change_batch_loopc + 1`` rounds and collect their samples."""
    state = TestState.init(ctx, params)
    while state.sample(ctx, workload, computer) is not None:
        logger.debug("Finished batch %d", state.change_batch_num - 1)
    return LabResults(samples=tuple(state.samples))


def run_with_stack[T](
    fn: Callable[..., T],
    *args: Any,
    stack_size: int = STACK_SIZE,
    recursion_limit: int = RECURSION_LIMIT,
) -> T:
    """Run ``fn(*args)`` on a worker thread with a large stack and wait for it.

    An exception raised by `fn` is re-raised in the calling thread.
    """
    outcome: dict[str, Any] = {}

    def worker() -> None:
        try:
            outcome["result"] = fn(*args)
        except BaseException as exc:  # noqa: BLE001
            outcome["error"] = exc

    previous_limit = sys.getrecursionlimit()
    sys.setrecursionlimit(max(previous_limit, recursion_limit))
    try:
        previous_stack = threading.stack_size(stack_size)
        try:
            thread = threading.Thread(target=worker, name="adaptlab-run")
            thread.start()
        finally:
            threading.stack_size(previous_stack)
        thread.join()
    finally:
        sys.setrecursionlimit(previous_limit)
    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]
