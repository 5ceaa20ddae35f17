#!/usr/bin/env python3
from __future__ import annotations

import argparse
from pathlib import Path

import numpy as np

from chargefield.io import load_field_csv, load_field_json


def _load(path: Path):
    if path.suffix == ".csv":
        return load_field_csv(path)
    return load_field_json(path)


def main() -> None:
    p = argparse.ArgumentParser(description="Compare a field output against a baseline field file.")
    p.add_argument("--baseline", required=True, type=Path)
    p.add_argument("--current", required=True, type=Path)
    p.add_argument("--rtol", type=float, default=1e-9)
    p.add_argument("--atol", type=float, default=1e-12)
    args = p.parse_args()

    baseline = _load(args.baseline)
    current = _load(args.current)

    errors: list[str] = []
    if len(baseline) != len(current):
        errors.append(f"Sample count differs: baseline={len(baseline)}, current={len(current)}.")
    else:
        if not np.allclose(baseline.positions, current.positions, rtol=0.0, atol=args.atol):
            errors.append("Sample positions differ.")
        if not np.allclose(baseline.directions, current.directions, rtol=args.rtol, atol=args.atol):
            err = float(np.max(np.abs(baseline.directions - current.directions)))
            errors.append(f"Direction drift: max abs diff={err:.3e}")
        if not np.allclose(baseline.magnitudes, current.magnitudes, rtol=args.rtol, atol=args.atol):
            err = float(np.max(np.abs(baseline.magnitudes - current.magnitudes)))
            errors.append(f"Magnitude drift: max abs diff={err:.3e}")
        flips = int(np.sum(np.sign(baseline.magnitudes) != np.sign(current.magnitudes)))
        if flips:
            errors.append(f"{flips} samples changed sign.")

    if errors:
        print("[FAIL] Field baseline comparison failed:")
        for err in errors:
            print(" -", err)
        raise SystemExit(1)

    print("[OK] Field baseline comparison passed.")


if __name__ == "__main__":
    main()
