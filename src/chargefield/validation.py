from __future__ import annotations

from typing import Any, Callable, Iterable

import numpy as np
from scipy.spatial import cKDTree

from chargefield.charges import Charge
from chargefield.field import FieldBatch


def summary_stats(values: np.ndarray) -> dict[str, float]:
    """Compute summary statistics for a scalar field."""
    vals = np.asarray(values, dtype=float).ravel()
    if vals.size == 0:
        raise ValueError("summary_stats needs at least one value")
    return {
        "min": float(np.min(vals)),
        "median": float(np.median(vals)),
        "mean": float(np.mean(vals)),
        "p95": float(np.percentile(vals, 95.0)),
        "max": float(np.max(vals)),
        "rms": float(np.sqrt(np.mean(vals**2))),
    }


def direction_norm_error(batch: FieldBatch) -> np.ndarray:
    """Return ``| |d| - 1 |`` for every sample with a nonzero magnitude."""
    nonzero = batch.magnitudes != 0.0
    norms = np.linalg.norm(batch.directions[nonzero], axis=1)
    return np.abs(norms - 1.0)


def duplicate_positions(positions: np.ndarray, *, tol: float = 1e-12) -> list[tuple[int, int]]:
    """Index pairs of positions closer than ``tol`` to each other."""
    P = np.asarray(positions, dtype=float)
    if P.shape[0] < 2:
        return []
    tree = cKDTree(P)
    return sorted(tree.query_pairs(r=tol))


def nearest_sample(batch: FieldBatch, point: Any) -> int:
    """Index of the sample closest to ``point``."""
    if len(batch) == 0:
        raise ValueError("Cannot query an empty field batch")
    tree = cKDTree(batch.positions)
    _, idx = tree.query(np.asarray(point, dtype=float))
    return int(idx)


def divergence_on_grid(
    E: Callable[[Any], Any],
    xs: np.ndarray,
    ys: np.ndarray,
    zs: np.ndarray,
) -> np.ndarray:
    """Compute div(E) on a Cartesian grid using finite differences."""
    X, Y, Z = np.meshgrid(xs, ys, zs, indexing="ij")
    pts = np.stack([X, Y, Z], axis=-1).reshape(-1, 3)
    Ev = np.asarray(E(pts))
    if Ev.shape == (3,):
        Ev = Ev[None, :]
    Ev = Ev.reshape(X.shape + (3,))

    dEx_dx = np.gradient(Ev[..., 0], xs, axis=0, edge_order=2)
    dEy_dy = np.gradient(Ev[..., 1], ys, axis=1, edge_order=2)
    dEz_dz = np.gradient(Ev[..., 2], zs, axis=2, edge_order=2)
    return dEx_dx + dEy_dy + dEz_dz


def validate_field_batch(
    batch: FieldBatch,
    charges: Iterable[Charge],
    *,
    exclusion_radius: float,
    tol: float = 1e-6,
) -> list[str]:
    """Check a batch against the output invariants; returns violation messages."""
    errors: list[str] = []
    n = len(batch)

    finite = (
        np.all(np.isfinite(batch.positions))
        and np.all(np.isfinite(batch.directions))
        and np.all(np.isfinite(batch.magnitudes))
    )
    if not finite:
        errors.append("Batch contains non-finite values.")

    if n:
        err = direction_norm_error(batch)
        if err.size and float(np.max(err)) > tol:
            errors.append(f"Direction not unit length: max | |d|-1 | = {float(np.max(err)):.3e}")
        zero = batch.magnitudes == 0.0
        if np.any(np.abs(batch.directions[zero]) > 0.0):
            errors.append(f"{int(np.sum(zero))} zero-magnitude samples carry a nonzero direction.")

    for i, charge in enumerate(charges, start=1):
        if not n:
            break
        dist = np.linalg.norm(batch.positions - charge.position_array[None, :], axis=1)
        inside = int(np.sum(dist < exclusion_radius))
        if inside:
            errors.append(f"{inside} samples lie inside the exclusion radius of charge {i}.")

    dups = duplicate_positions(batch.positions)
    if dups:
        errors.append(f"{len(dups)} duplicate sample positions.")
    return errors


def field_summary(batch: FieldBatch) -> dict[str, Any]:
    """Counts and magnitude statistics for a batch (JSON-serializable)."""
    out: dict[str, Any] = {
        "count": len(batch),
        "sources": int(np.sum(batch.magnitudes > 0.0)),
        "sinks": int(np.sum(batch.magnitudes < 0.0)),
        "zero": int(np.sum(batch.magnitudes == 0.0)),
    }
    if len(batch):
        out["abs_magnitude"] = summary_stats(np.abs(batch.magnitudes))
    return out


__all__ = [
    "direction_norm_error",
    "divergence_on_grid",
    "duplicate_positions",
    "field_summary",
    "nearest_sample",
    "summary_stats",
    "validate_field_batch",
]
