"""Experiment harness comparing naive and incremental evaluation."""

__all__ = [
    "DCG",
    "Compute",
    "ComputeDemand",
    "Counts",
    "Demand",
    "Div",
    "Edit",
    "EngineConsistencyError",
    "EngineMetrics",
    "EngineSample",
    "ExecutionContext",
    "Forced",
    "Generate",
    "GenerateParams",
    "Graph",
    "Lab",
    "LabDef",
    "LabParams",
    "LabResults",
    "Mode",
    "Name",
    "NominalStrategy",
    "Pending",
    "Sample",
    "SampleParams",
    "UniformPrepend",
    "Workload",
    "all_labs",
    "default_lab_params",
    "find_lab",
    "render_index_page",
    "render_lab_page",
    "run_samples",
    "run_with_stack",
    "write_report",
]

from ._catalog import Lab, LabDef, UniformPrepend, all_labs, find_lab
from ._compute import Compute, ComputeDemand, Demand, Forced, Pending
from ._engine import DCG, Counts, EngineConsistencyError, ExecutionContext, Graph, Mode, Name
from ._models import EngineMetrics, EngineSample, LabParams, LabResults, Sample, SampleParams, default_lab_params
from ._sampling import run_samples, run_with_stack
from ._viz import Div, render_index_page, render_lab_page, write_report
from ._workload import Edit, Generate, GenerateParams, NominalStrategy, Workload
