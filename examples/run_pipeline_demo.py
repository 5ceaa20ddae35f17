#!/usr/bin/env python3
from __future__ import annotations

from pathlib import Path

from chargefield import run_pipeline


def main() -> None:
    result = run_pipeline(Path(__file__).with_name("dipole.toml"))
    print(result.stats)
    for name, path in result.outputs.items():
        print(f"{name}: {path}")


if __name__ == "__main__":
    main()
