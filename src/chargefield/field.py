from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, Mapping

import numpy as np

from chargefield.charges import Vector3

__all__ = ["EXCLUDED", "FieldBatch", "FieldSample"]


class _Excluded:
    """Marker returned by the evaluator for points inside the exclusion radius."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "EXCLUDED"

    def __bool__(self) -> bool:
        return False


EXCLUDED = _Excluded()


@dataclass(frozen=True)
class FieldSample:
    """One evaluated point of the discretized field.

    Parameters
    ----------
    position:
        Sample location.
    direction:
        Unit field direction, or ``(0, 0, 0)`` where the field vanishes.
    magnitude:
        Signed ``|E|``: positive where a source dominates, negative where a
        sink dominates.
    """

    position: Vector3
    direction: Vector3
    magnitude: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "position": [float(v) for v in self.position],
            "direction": [float(v) for v in self.direction],
            "magnitude": float(self.magnitude),
        }


def _frozen(arr: Any, shape_tail: tuple[int, ...], name: str) -> np.ndarray:
    out = np.array(arr, dtype=float)
    if out.size == 0:
        out = out.reshape((0,) + shape_tail)
    if out.shape[1:] != shape_tail:
        raise ValueError(f"{name} must have shape (n,{','.join(map(str, shape_tail))}); got {out.shape}")
    out.setflags(write=False)
    return out


@dataclass(frozen=True, eq=False)
class FieldBatch:
    """Ordered, columnar sequence of field samples.

    Arrays are copied and made read-only on construction; iterating yields
    :class:`FieldSample` values in grid order.
    """

    positions: np.ndarray  # (n,3)
    directions: np.ndarray  # (n,3)
    magnitudes: np.ndarray  # (n,)
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "positions", _frozen(self.positions, (3,), "positions"))
        object.__setattr__(self, "directions", _frozen(self.directions, (3,), "directions"))
        object.__setattr__(self, "magnitudes", _frozen(self.magnitudes, (), "magnitudes"))
        n = self.positions.shape[0]
        if self.directions.shape[0] != n or self.magnitudes.shape[0] != n:
            raise ValueError(
                f"Column lengths differ: positions={n}, directions={self.directions.shape[0]}, "
                f"magnitudes={self.magnitudes.shape[0]}"
            )

    @classmethod
    def empty(cls, metadata: Mapping[str, Any] | None = None) -> "FieldBatch":
        return cls(
            positions=np.empty((0, 3)),
            directions=np.empty((0, 3)),
            magnitudes=np.empty((0,)),
            metadata=metadata or {},
        )

    @classmethod
    def from_samples(
        cls,
        samples: Iterable[FieldSample],
        metadata: Mapping[str, Any] | None = None,
    ) -> "FieldBatch":
        samples = list(samples)
        if not samples:
            return cls.empty(metadata)
        return cls(
            positions=[s.position for s in samples],
            directions=[s.direction for s in samples],
            magnitudes=[s.magnitude for s in samples],
            metadata=metadata or {},
        )

    def __len__(self) -> int:
        return int(self.positions.shape[0])

    def __getitem__(self, i: int) -> FieldSample:
        p = self.positions[i]
        d = self.directions[i]
        return FieldSample(
            position=(float(p[0]), float(p[1]), float(p[2])),
            direction=(float(d[0]), float(d[1]), float(d[2])),
            magnitude=float(self.magnitudes[i]),
        )

    def __iter__(self) -> Iterator[FieldSample]:
        for i in range(len(self)):
            yield self[i]
