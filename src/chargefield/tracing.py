from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np

from chargefield.charges import Charge
from chargefield.evaluator import DEFAULT_COULOMB_CONSTANT, DEFAULT_EXCLUSION_RADIUS, field_vectors
from chargefield.sampler import DEFAULT_HALF_WIDTH

Array = Any

__all__ = ["FieldLineTrace", "TraceOptions", "seed_points", "trace_field_lines", "trace_from_charges"]


@dataclass(frozen=True)
class FieldLineTrace:
    """Container for field-line traces.

    A line that stops early repeats its last point up to ``n_step+1``;
    ``lengths[i]`` counts the valid points of line ``i``.
    """

    trajectories: np.ndarray  # (n_seed, n_step+1, 3)
    lengths: np.ndarray  # (n_seed,)
    directions: np.ndarray  # (n_seed,) +1 along E, -1 against E
    step: float

    def line(self, i: int) -> np.ndarray:
        return self.trajectories[i, : int(self.lengths[i])]


@dataclass(frozen=True)
class TraceOptions:
    n_seeds: int = 12
    seed_radius: float = 0.4
    ds: float = 0.05
    n_steps: int = 400

    def __post_init__(self) -> None:
        if self.n_seeds < 1:
            raise ValueError(f"n_seeds must be >= 1; got {self.n_seeds}")
        if self.ds <= 0.0 or not math.isfinite(self.ds):
            raise ValueError(f"ds must be positive; got {self.ds}")
        if self.n_steps < 1:
            raise ValueError(f"n_steps must be >= 1; got {self.n_steps}")


def seed_points(center: Array, *, n: int = 12, radius: float = 0.4) -> np.ndarray:
    """Quasi-uniform seeds on a sphere around ``center`` (Fibonacci lattice)."""
    c = np.asarray(center, dtype=float).reshape(3)
    i = np.arange(n, dtype=float) + 0.5
    cos_t = 1.0 - 2.0 * i / n
    sin_t = np.sqrt(np.maximum(0.0, 1.0 - cos_t**2))
    phi = np.pi * (1.0 + np.sqrt(5.0)) * i
    dirs = np.stack([sin_t * np.cos(phi), sin_t * np.sin(phi), cos_t], axis=1)
    return c[None, :] + radius * dirs


def trace_field_lines(
    charges: Sequence[Charge],
    seeds: Array,
    *,
    ds: float,
    n_steps: int,
    directions: Array | int = 1,
    coulomb_constant: float = DEFAULT_COULOMB_CONSTANT,
    stop_radius: float = DEFAULT_EXCLUSION_RADIUS,
    half_width: float = DEFAULT_HALF_WIDTH,
) -> FieldLineTrace:
    """Trace field lines with a fixed-step RK4 integrator.

    Solves ``x'(s) = sign * E(x)/|E(x)|``. A line stops once it comes within
    ``stop_radius`` of a charge, leaves the ``[-h, h]^3`` domain, or reaches a
    point where the field vanishes.
    """
    seeds = np.asarray(seeds, dtype=float)
    if seeds.ndim == 1:
        seeds = seeds[None, :]
    if seeds.shape[1] != 3:
        raise ValueError(f"Expected seeds shape (N,3); got {seeds.shape}")
    n_seed = seeds.shape[0]
    sign = np.broadcast_to(np.asarray(directions, dtype=float), (n_seed,)).copy()
    if not np.all(np.isin(sign, (-1.0, 1.0))):
        raise ValueError("directions must be +1 or -1")

    centers = np.asarray([c.position for c in charges], dtype=float).reshape(-1, 3)

    def rhs(points: np.ndarray) -> np.ndarray:
        E = field_vectors(points, charges, coulomb_constant=coulomb_constant)
        E = np.nan_to_num(E, nan=0.0, posinf=0.0, neginf=0.0)
        nrm = np.linalg.norm(E, axis=1, keepdims=True)
        return sign[:, None] * E / np.maximum(1e-30, nrm)

    def still_valid(points: np.ndarray) -> np.ndarray:
        inside = np.all(np.abs(points) <= half_width, axis=1)
        if centers.size:
            d = np.linalg.norm(points[:, None, :] - centers[None, :, :], axis=-1)
            inside &= np.all(d >= stop_radius, axis=1)
        moving = np.linalg.norm(rhs(points), axis=1) > 0.5
        return inside & moving & np.all(np.isfinite(points), axis=1)

    traj = np.empty((n_seed, n_steps + 1, 3), dtype=float)
    traj[:, 0, :] = seeds
    lengths = np.ones(n_seed, dtype=int)

    x = seeds.copy()
    active = still_valid(x)
    for k in range(n_steps):
        if not np.any(active):
            traj[:, k + 1 :, :] = x[:, None, :]
            break
        k1 = rhs(x)
        k2 = rhs(x + 0.5 * ds * k1)
        k3 = rhs(x + 0.5 * ds * k2)
        k4 = rhs(x + ds * k3)
        x_next = x + (ds / 6.0) * (k1 + 2 * k2 + 2 * k3 + k4)
        x = np.where(active[:, None], x_next, x)
        traj[:, k + 1, :] = x
        lengths[active] += 1
        active &= still_valid(x)

    return FieldLineTrace(
        trajectories=traj,
        lengths=lengths,
        directions=sign.astype(int),
        step=float(ds),
    )


def trace_from_charges(
    charge_a: Charge,
    charge_b: Charge,
    *,
    options: TraceOptions | None = None,
    coulomb_constant: float = DEFAULT_COULOMB_CONSTANT,
    stop_radius: float = DEFAULT_EXCLUSION_RADIUS,
    half_width: float = DEFAULT_HALF_WIDTH,
    verbose: bool = False,
) -> FieldLineTrace:
    """Trace lines leaving every source and entering every sink.

    Seeds around a source (``k q > 0``) are integrated along E, seeds around a
    sink against it. Neutral charges get no seeds.
    """
    if options is None:
        options = TraceOptions()
    if options.seed_radius <= stop_radius:
        raise ValueError(
            f"seed_radius ({options.seed_radius}) must exceed stop_radius ({stop_radius})"
        )
    charges = [charge_a, charge_b]
    seeds: list[np.ndarray] = []
    signs: list[np.ndarray] = []
    for charge in charges:
        polarity = int(np.sign(coulomb_constant * charge.strength))
        if polarity == 0:
            continue
        s = seed_points(charge.position, n=options.n_seeds, radius=options.seed_radius)
        seeds.append(s)
        signs.append(np.full(s.shape[0], polarity, dtype=float))

    if not seeds:
        if verbose:
            print("[TRACE] Both charges are neutral; no field lines.")
        return FieldLineTrace(
            trajectories=np.empty((0, options.n_steps + 1, 3)),
            lengths=np.empty((0,), dtype=int),
            directions=np.empty((0,), dtype=int),
            step=float(options.ds),
        )

    trace = trace_field_lines(
        charges,
        np.concatenate(seeds, axis=0),
        ds=options.ds,
        n_steps=options.n_steps,
        directions=np.concatenate(signs),
        coulomb_constant=coulomb_constant,
        stop_radius=stop_radius,
        half_width=half_width,
    )
    if verbose:
        print(
            f"[TRACE] {trace.trajectories.shape[0]} lines, ds={options.ds}, "
            f"median length={float(np.median(trace.lengths)):.0f} points"
        )
    return trace
