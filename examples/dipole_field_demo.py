#!/usr/bin/env python3
from __future__ import annotations

import numpy as np

from chargefield import calculate_field
from chargefield.validation import field_summary, nearest_sample


def main() -> None:
    batch = calculate_field(1.0, -1.0, [-2.0, 0.0, 0.0], [2.0, 0.0, 0.0], 5)
    print(field_summary(batch))

    mid = batch[nearest_sample(batch, [0.0, 0.0, 0.0])]
    print(f"midpoint {mid.position}: direction={np.round(mid.direction, 6)}, magnitude={mid.magnitude:.4f}")


if __name__ == "__main__":
    main()
