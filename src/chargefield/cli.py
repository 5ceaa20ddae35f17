from __future__ import annotations

import argparse
import json
from pathlib import Path

from chargefield.charges import Charge
from chargefield.io import save_field, save_trace_npz
from chargefield.pipeline import run_pipeline
from chargefield.service import FieldOptions, calculate_field
from chargefield.tracing import TraceOptions, trace_from_charges
from chargefield.validation import field_summary, validate_field_batch


def main(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="ChargeField CLI: sample the field of two point charges.")
    p.add_argument("--config", default=None, help="TOML pipeline config; other options are ignored.")
    p.add_argument("--q1", type=float, default=1.0, help="Strength of charge 1.")
    p.add_argument("--q2", type=float, default=-1.0, help="Strength of charge 2.")
    p.add_argument("--pos1", type=float, nargs=3, default=[-2.0, 0.0, 0.0], metavar=("X", "Y", "Z"))
    p.add_argument("--pos2", type=float, nargs=3, default=[2.0, 0.0, 0.0], metavar=("X", "Y", "Z"))
    p.add_argument("--density", type=float, default=5, help="Samples per axis (2-10).")
    p.add_argument("--k", type=float, default=1.0, help="Coulomb constant (display scale).")
    p.add_argument("--exclusion-radius", type=float, default=0.3)
    p.add_argument("--half-width", type=float, default=5.0)
    p.add_argument("--backend", choices=["numpy", "jax"], default="numpy")
    p.add_argument("--format", choices=["json", "csv"], default=None, help="Output format (default: from suffix).")
    p.add_argument("--output", default=None, help="Write samples here; only a summary is printed otherwise.")
    p.add_argument("--validate", action="store_true", help="Check output invariants; exit 1 on violations.")
    p.add_argument("--trace", action="store_true", help="Trace field lines and save them next to --output.")
    p.add_argument("--verbose", action="store_true")
    args = p.parse_args(argv)

    if args.config is not None:
        result = run_pipeline(args.config)
        print(json.dumps(result.stats, indent=2))
        violations = result.stats.get("violations", [])
        if violations:
            _fail(violations)
        print(f"[OK] Pipeline complete: samples={len(result.batch)}, outputs={result.outputs['summary']}")
        return

    options = FieldOptions(
        coulomb_constant=args.k,
        exclusion_radius=args.exclusion_radius,
        half_width=args.half_width,
        backend=args.backend,
        verbose=args.verbose,
    )
    batch = calculate_field(args.q1, args.q2, args.pos1, args.pos2, args.density, options=options)
    charges = [Charge(args.q1, args.pos1), Charge(args.q2, args.pos2)]

    if args.output:
        out = save_field(batch, args.output, format=args.format)
        if args.verbose:
            print(f"[IO] Wrote {len(batch)} samples to {out}")

    if args.trace:
        trace = trace_from_charges(
            *charges,
            options=TraceOptions(),
            coulomb_constant=options.coulomb_constant,
            stop_radius=options.exclusion_radius,
            half_width=options.half_width,
            verbose=args.verbose,
        )
        stem = Path(args.output).with_suffix("") if args.output else Path("field")
        out = save_trace_npz(trace, stem.with_name(stem.name + "_lines"))
        if args.verbose:
            print(f"[IO] Wrote {trace.trajectories.shape[0]} field lines to {out}")

    print(json.dumps(field_summary(batch), indent=2))

    if args.validate:
        violations = validate_field_batch(
            batch,
            charges,
            exclusion_radius=options.exclusion_radius,
        )
        if violations:
            _fail(violations)

    print(f"[OK] Field complete: samples={len(batch)}, density={batch.metadata['density']}")


def _fail(violations: list[str]) -> None:
    print("[FAIL] Field validation failed:")
    for err in violations:
        print(" -", err)
    raise SystemExit(1)


if __name__ == "__main__":
    main()
