from __future__ import annotations

import math

import numpy as np

from chargefield.errors import InvalidInput

DEFAULT_HALF_WIDTH = 5.0  # matches the charge-position slider range

__all__ = ["DEFAULT_HALF_WIDTH", "axis_coordinates", "generate_sample_positions"]


def axis_coordinates(density: int, *, half_width: float = DEFAULT_HALF_WIDTH) -> np.ndarray:
    """Return the ``density`` coordinates of one grid axis on ``[-h, h]``.

    A density of one collapses the axis to its centre.
    """
    if not math.isfinite(half_width) or half_width <= 0.0:
        raise InvalidInput(f"half_width must be positive and finite; got {half_width}")
    try:
        finite = math.isfinite(density)
    except TypeError as exc:
        raise InvalidInput(f"density must be a number; got {density!r}") from exc
    if not finite:
        raise InvalidInput(f"density must be finite; got {density}")
    n = int(density)
    if n < 1:
        raise InvalidInput(f"density must be at least 1; got {density}")
    if n == 1:
        return np.zeros(1)
    return np.linspace(-half_width, half_width, n)


def generate_sample_positions(density: int, *, half_width: float = DEFAULT_HALF_WIDTH) -> np.ndarray:
    """Enumerate the regular ``density**3`` sample grid.

    Points are ordered lexicographically by ``(ix, iy, iz)`` index, so ``z``
    varies fastest. Densities outside the documented 2..10 range are accepted
    without clamping.

    Returns
    -------
    numpy.ndarray
        Array of shape ``(density**3, 3)``.
    """
    axis = axis_coordinates(density, half_width=half_width)
    X, Y, Z = np.meshgrid(axis, axis, axis, indexing="ij")
    return np.stack([X, Y, Z], axis=-1).reshape(-1, 3)
