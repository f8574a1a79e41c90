"""Custom lab example for adaptlab.

This example defines a lab outside the built-in catalog:
- A computation that counts the elements of a list, memoized per boundary
- A `LabDef` pairing it with the built-in `UniformPrepend` distribution
- Running it on both engines and writing the HTML report

Run it with:
    python examples/custom_lab.py [OUTPUT_DIR]
"""

import sys
from pathlib import Path

from adaptlab import LabDef, UniformPrepend, default_lab_params, run_with_stack, write_report
from adaptlab._collections import ArtList, Cons, List, Named, Nil
from adaptlab._compute import Compute
from adaptlab._engine import ExecutionContext, name_fork, name_of_str

# -----------------------------------------------------------------------------
# Computation
# -----------------------------------------------------------------------------


def list_length(ctx: ExecutionContext, lst: List) -> int:
    """Count the elements of a list; the count below each boundary is memoized."""
    match lst:
        case Nil():
            return 0
        case Cons(_, tail):
            return 1 + list_length(ctx, tail)
        case Named(name, tail):
            nm, _ = name_fork(name)
            return ctx.memo(nm, list_length, tail)
        case ArtList(art):
            return list_length(ctx, ctx.force(art))


class ListLength(Compute):
    def compute(self, ctx: ExecutionContext, inp: List) -> int:
        return list_length(ctx, inp)


lab = LabDef(name_of_str("list-length"), UniformPrepend(), ListLength())


# -----------------------------------------------------------------------------
# Running
# -----------------------------------------------------------------------------


def main(output_dir: Path) -> None:
    results = run_with_stack(lab.run, default_lab_params())
    for sample in results.samples:
        print(f"batch {sample.batch_name}: valid={sample.output_valid}")  # noqa: T201
    write_report([lab], [results], output_dir)


if __name__ == "__main__":
    main(Path(sys.argv[1]) if len(sys.argv) > 1 else Path("lab-results"))
