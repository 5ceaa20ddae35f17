from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from chargefield.errors import InvalidInput

Vector3 = tuple[float, float, float]

__all__ = ["Charge", "Vector3", "as_strength", "as_vector3"]


def as_vector3(value: Any, *, name: str = "position") -> Vector3:
    """Coerce ``value`` to a finite ``(x, y, z)`` tuple of floats."""
    try:
        arr = np.asarray(value, dtype=float).reshape(-1)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a numeric triple; got {value!r}") from exc
    if arr.shape != (3,):
        raise InvalidInput(f"{name} must have exactly 3 components; got {arr.size}")
    if not np.all(np.isfinite(arr)):
        raise InvalidInput(f"{name} must be finite; got {arr.tolist()}")
    return (float(arr[0]), float(arr[1]), float(arr[2]))


def as_strength(value: Any, *, name: str = "strength") -> float:
    """Coerce ``value`` to a finite float charge strength."""
    try:
        q = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"{name} must be a number; got {value!r}") from exc
    if not math.isfinite(q):
        raise InvalidInput(f"{name} must be finite; got {q}")
    return q


@dataclass(frozen=True)
class Charge:
    """Point charge with a signed strength and a 3-D position.

    Both fields are validated on construction, so a ``Charge`` in hand is
    always finite.
    """

    strength: float
    position: Vector3

    def __post_init__(self) -> None:
        object.__setattr__(self, "strength", as_strength(self.strength))
        object.__setattr__(self, "position", as_vector3(self.position))

    @property
    def position_array(self) -> np.ndarray:
        return np.asarray(self.position, dtype=float)
