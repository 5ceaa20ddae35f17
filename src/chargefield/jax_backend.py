from __future__ import annotations

from typing import Any

import jax
import jax.numpy as jnp
import numpy as np
from jax import jit, vmap

from chargefield.charges import Charge
from chargefield.evaluator import DEFAULT_COULOMB_CONSTANT, DEFAULT_EXCLUSION_RADIUS, Evaluation

Array = Any

__all__ = ["evaluate_points_jax"]


@jit
def _evaluate_one(x, positions, strengths, k, eps):
    r = x[None, :] - positions  # (2,3)
    dist = jnp.linalg.norm(r, axis=1)
    safe = jnp.where(dist > 0.0, dist, 1.0)
    contrib = (k * strengths)[:, None] * r / (safe**3)[:, None]
    E = contrib[0] + contrib[1]
    norm = jnp.linalg.norm(E)

    keep = jnp.all(dist >= eps) & jnp.all(dist > 0.0) & jnp.all(jnp.isfinite(E)) & jnp.isfinite(norm)
    E = jnp.where(keep, E, 0.0)
    norm = jnp.where(keep, norm, 0.0)

    nonzero = norm > 0.0
    direction = jnp.where(nonzero, E / jnp.where(nonzero, norm, 1.0), 0.0)

    parts = jnp.linalg.norm(contrib, axis=1)
    polarity = jnp.where(parts[0] >= parts[1], jnp.sign(k * strengths[0]), jnp.sign(k * strengths[1]))
    magnitude = jnp.where(nonzero, polarity * norm, 0.0)
    return E, direction, magnitude, keep


_evaluate_batch = jit(vmap(_evaluate_one, in_axes=(0, None, None, None, None)))


def evaluate_points_jax(
    points: Array,
    charge_a: Charge,
    charge_b: Charge,
    *,
    coulomb_constant: float = DEFAULT_COULOMB_CONSTANT,
    exclusion_radius: float = DEFAULT_EXCLUSION_RADIUS,
    verbose: bool = False,
) -> Evaluation:
    """JAX counterpart of :func:`chargefield.evaluator.evaluate_points`.

    Every point is evaluated independently by a ``vmap``-ed kernel; the
    returned arrays are NumPy and keep the input order. JAX 64-bit mode is
    required so results match the NumPy backend.
    """
    if not jax.config.jax_enable_x64:
        raise RuntimeError(
            "ChargeField JAX backend requires JAX 64-bit mode. "
            "Set `JAX_ENABLE_X64=1` in your environment (recommended) or call "
            "`jax.config.update('jax_enable_x64', True)` before evaluating."
        )
    if verbose:
        print(f"[JAX] Evaluating on {jax.default_backend()} with vmap.")
    X = jnp.asarray(points, dtype=jnp.float64)
    if X.ndim == 1:
        X = X[None, :]
    if X.ndim != 2 or X.shape[1] != 3:
        raise ValueError(f"Expected points shape (N,3); got {X.shape}")
    positions = jnp.asarray([charge_a.position, charge_b.position], dtype=jnp.float64)
    strengths = jnp.asarray([charge_a.strength, charge_b.strength], dtype=jnp.float64)

    E, direction, magnitude, keep = _evaluate_batch(
        X,
        positions,
        strengths,
        float(coulomb_constant),
        float(exclusion_radius),
    )
    return Evaluation(
        field=np.asarray(E, dtype=float),
        direction=np.asarray(direction, dtype=float),
        magnitude=np.asarray(magnitude, dtype=float),
        keep=np.asarray(keep, dtype=bool),
    )
