#!/usr/bin/env python3
from __future__ import annotations

from chargefield import FieldSession
from chargefield.validation import field_summary


def main() -> None:
    session = FieldSession()
    session.subscribe(lambda gen, batch: print(f"gen={gen}: {field_summary(batch)['count']} samples"))

    # Simulated slider drag: each change recomputes once.
    for x in (-2.0, -1.5, -1.0, -0.5):
        session.update(charge1_position=(x, 0.0, 0.0))
    session.update(field_density=8)


if __name__ == "__main__":
    main()
