#!/usr/bin/env python3
from __future__ import annotations

import numpy as np

from chargefield import Charge, TraceOptions, trace_from_charges


def main() -> None:
    source = Charge(1.0, (-2.0, 0.0, 0.0))
    sink = Charge(-1.0, (2.0, 0.0, 0.0))
    trace = trace_from_charges(source, sink, options=TraceOptions(n_seeds=16, ds=0.05, n_steps=600), verbose=True)

    ends = np.stack([trace.line(i)[-1] for i in range(trace.trajectories.shape[0])])
    at_sink = np.linalg.norm(ends - sink.position_array, axis=1) < 0.35
    print(f"{int(at_sink.sum())} of {len(ends)} lines end at the opposite charge")


if __name__ == "__main__":
    main()
