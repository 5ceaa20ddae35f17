from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

import numpy as np

from chargefield.charges import Charge
from chargefield.field import EXCLUDED, FieldSample

DEFAULT_COULOMB_CONSTANT = 1.0  # dimensionless display units
DEFAULT_EXCLUSION_RADIUS = 0.3  # charge sphere radius in the scene

__all__ = [
    "DEFAULT_COULOMB_CONSTANT",
    "DEFAULT_EXCLUSION_RADIUS",
    "Evaluation",
    "evaluate_at",
    "evaluate_points",
    "field_vectors",
]


@dataclass(frozen=True)
class Evaluation:
    """Batch evaluation of the two-charge field.

    ``field``, ``direction`` and ``magnitude`` are zero wherever ``keep`` is
    False.
    """

    field: np.ndarray  # (n,3) superposed E
    direction: np.ndarray  # (n,3)
    magnitude: np.ndarray  # (n,) signed
    keep: np.ndarray  # (n,) bool


def _as_points(points: Any) -> np.ndarray:
    X = np.asarray(points, dtype=float)
    if X.ndim == 1:
        X = X[None, :]
    if X.ndim != 2 or X.shape[1] != 3:
        raise ValueError(f"Expected points shape (N,3); got {X.shape}")
    return X


def _contribution(X: np.ndarray, charge: Charge, k: float) -> tuple[np.ndarray, np.ndarray]:
    r = X - charge.position_array[None, :]
    dist = np.linalg.norm(r, axis=1)
    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        E = (k * charge.strength) * r / (dist**3)[:, None]
    return E, dist


def field_vectors(
    points: Any,
    charges: Iterable[Charge],
    *,
    coulomb_constant: float = DEFAULT_COULOMB_CONSTANT,
) -> np.ndarray:
    """Superposed Coulomb field ``sum_i k q_i r_i / |r_i|^3`` at ``points``.

    No exclusion is applied; a point sitting on a charge yields NaN.
    """
    X = _as_points(points)
    E = np.zeros_like(X)
    for charge in charges:
        E_i, _ = _contribution(X, charge, coulomb_constant)
        with np.errstate(invalid="ignore"):
            E = E + E_i
    return E


def evaluate_points(
    points: Any,
    charge_a: Charge,
    charge_b: Charge,
    *,
    coulomb_constant: float = DEFAULT_COULOMB_CONSTANT,
    exclusion_radius: float = DEFAULT_EXCLUSION_RADIUS,
) -> Evaluation:
    """Evaluate the two-charge field, direction and signed magnitude at many points.

    A point is dropped (``keep=False``) when it lies strictly closer than
    ``exclusion_radius`` to either charge, or when any part of its evaluation
    is non-finite.

    The sign of ``magnitude`` follows the dominant charge: the one whose own
    contribution ``|k q| / r^2`` is larger at that point (ties go to
    ``charge_a``). A dominant source gives ``+|E|``, a dominant sink ``-|E|``;
    source or sink is decided by the sign of ``k q``.
    """
    X = _as_points(points)
    E_a, dist_a = _contribution(X, charge_a, coulomb_constant)
    E_b, dist_b = _contribution(X, charge_b, coulomb_constant)
    with np.errstate(invalid="ignore", over="ignore"):
        E = E_a + E_b
        norm = np.linalg.norm(E, axis=1)
        a_dominates = np.linalg.norm(E_a, axis=1) >= np.linalg.norm(E_b, axis=1)

    keep = (dist_a >= exclusion_radius) & (dist_b >= exclusion_radius)
    keep &= np.all(np.isfinite(E), axis=1) & np.isfinite(norm)

    E = np.where(keep[:, None], E, 0.0)
    norm = np.where(keep, norm, 0.0)

    nonzero = norm > 0.0
    direction = np.zeros_like(E)
    np.divide(E, norm[:, None], out=direction, where=nonzero[:, None])

    k = coulomb_constant
    polarity = np.where(a_dominates, np.sign(k * charge_a.strength), np.sign(k * charge_b.strength))
    magnitude = np.where(nonzero, polarity * norm, 0.0)

    return Evaluation(field=E, direction=direction, magnitude=magnitude, keep=keep)


def evaluate_at(
    point: Any,
    charge_a: Charge,
    charge_b: Charge,
    *,
    coulomb_constant: float = DEFAULT_COULOMB_CONSTANT,
    exclusion_radius: float = DEFAULT_EXCLUSION_RADIUS,
) -> FieldSample | Any:
    """Evaluate a single point; returns :data:`EXCLUDED` inside the exclusion radius."""
    X = _as_points(point)
    if X.shape[0] != 1:
        raise ValueError(f"evaluate_at expects a single point; got {X.shape[0]}")
    ev = evaluate_points(
        X,
        charge_a,
        charge_b,
        coulomb_constant=coulomb_constant,
        exclusion_radius=exclusion_radius,
    )
    if not ev.keep[0]:
        return EXCLUDED
    p, d = X[0], ev.direction[0]
    return FieldSample(
        position=(float(p[0]), float(p[1]), float(p[2])),
        direction=(float(d[0]), float(d[1]), float(d[2])),
        magnitude=float(ev.magnitude[0]),
    )
