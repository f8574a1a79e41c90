"""Tests for the example lab script and run file."""

from __future__ import annotations

import importlib.util
from pathlib import Path
from types import ModuleType

import numpy as np

from adaptlab._cli.config import load_lab_params
from adaptlab._engine import ExecutionContext
from adaptlab._sampling import run_with_stack

EXAMPLES = Path(__file__).parent.parent / "examples"


def _load_example(name: str) -> ModuleType:
    script_path = EXAMPLES / f"{name}.py"
    spec = importlib.util.spec_from_file_location(f"examples_{name}", script_path)
    assert spec is not None
    assert spec.loader is not None
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_custom_lab_agrees_across_engines() -> None:
    module = _load_example("custom_lab")
    params = load_lab_params(EXAMPLES / "small_run.toml")

    results = run_with_stack(module.lab.run, params)

    assert len(results.samples) == 6
    assert results.all_valid


def test_custom_lab_counts_elements() -> None:
    module = _load_example("custom_lab")
    gen_params = load_lab_params(EXAMPLES / "small_run.toml").sample_params.generate_params
    ctx = ExecutionContext()

    inp = module.lab.dist.generate(ctx, np.random.default_rng([0]), gen_params)

    assert module.ListLength().compute(ctx, inp) == 20


def test_custom_lab_writes_report(tmp_path: Path) -> None:
    module = _load_example("custom_lab")

    run_with_stack(module.main, tmp_path)

    assert (tmp_path / "list-length" / "traces.html").is_file()
