from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from typing import Any, Literal, Mapping

from chargefield.charges import Charge, Vector3, as_strength, as_vector3
from chargefield.errors import InvalidInput
from chargefield.evaluator import DEFAULT_COULOMB_CONSTANT, DEFAULT_EXCLUSION_RADIUS, evaluate_points
from chargefield.field import FieldBatch
from chargefield.sampler import DEFAULT_HALF_WIDTH, generate_sample_positions

__all__ = [
    "FieldConfig",
    "FieldOptions",
    "as_density",
    "calculate_field",
    "calculate_field_for",
]


@dataclass(frozen=True)
class FieldOptions:
    """Numeric constants of the field model.

    ``coulomb_constant`` only scales magnitudes; ``exclusion_radius`` is the
    distance below which a sample next to a charge is dropped.
    """

    coulomb_constant: float = DEFAULT_COULOMB_CONSTANT
    exclusion_radius: float = DEFAULT_EXCLUSION_RADIUS
    half_width: float = DEFAULT_HALF_WIDTH
    backend: Literal["numpy", "jax"] = "numpy"
    verbose: bool = False

    def __post_init__(self) -> None:
        if not math.isfinite(self.coulomb_constant):
            raise InvalidInput(f"coulomb_constant must be finite; got {self.coulomb_constant}")
        if not math.isfinite(self.exclusion_radius) or self.exclusion_radius < 0.0:
            raise InvalidInput(f"exclusion_radius must be finite and >= 0; got {self.exclusion_radius}")
        if not math.isfinite(self.half_width) or self.half_width <= 0.0:
            raise InvalidInput(f"half_width must be finite and > 0; got {self.half_width}")
        if self.backend not in ("numpy", "jax"):
            raise InvalidInput(f"Unknown backend: {self.backend}")


def as_density(value: Any) -> int:
    """Validate a wire density (a float) and return the integer grid size."""
    try:
        d = float(value)
    except (TypeError, ValueError) as exc:
        raise InvalidInput(f"field_density must be a number; got {value!r}") from exc
    if not math.isfinite(d):
        raise InvalidInput(f"field_density must be finite; got {d}")
    if d <= 0.0:
        raise InvalidInput(f"field_density must be positive; got {d}")
    n = int(round(d))
    if n < 1:
        raise InvalidInput(f"field_density rounds to {n}; at least 1 is required")
    return n


@dataclass(frozen=True)
class FieldConfig:
    """Caller-owned parameter set for one field request.

    Defaults reproduce the initial dipole of the viewer: ``+1`` at
    ``(-2, 0, 0)`` and ``-1`` at ``(2, 0, 0)`` sampled at density 5.
    """

    charge1_strength: float = 1.0
    charge2_strength: float = -1.0
    charge1_position: Vector3 = (-2.0, 0.0, 0.0)
    charge2_position: Vector3 = (2.0, 0.0, 0.0)
    field_density: float = 5

    def __post_init__(self) -> None:
        object.__setattr__(self, "charge1_strength", as_strength(self.charge1_strength, name="charge1_strength"))
        object.__setattr__(self, "charge2_strength", as_strength(self.charge2_strength, name="charge2_strength"))
        object.__setattr__(self, "charge1_position", as_vector3(self.charge1_position, name="charge1_position"))
        object.__setattr__(self, "charge2_position", as_vector3(self.charge2_position, name="charge2_position"))
        object.__setattr__(self, "field_density", as_density(self.field_density))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FieldConfig":
        known = set(cls.__dataclass_fields__)
        unknown = set(data) - known
        if unknown:
            raise InvalidInput(f"Unknown field config keys: {sorted(unknown)}")
        return cls(**dict(data))

    def replace(self, **changes: Any) -> "FieldConfig":
        return replace(self, **changes)

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        out["charge1_position"] = list(self.charge1_position)
        out["charge2_position"] = list(self.charge2_position)
        return out

    @property
    def charges(self) -> tuple[Charge, Charge]:
        return (
            Charge(self.charge1_strength, self.charge1_position),
            Charge(self.charge2_strength, self.charge2_position),
        )


def calculate_field(
    charge1_strength: float,
    charge2_strength: float,
    charge1_position: Any,
    charge2_position: Any,
    field_density: float,
    *,
    options: FieldOptions | None = None,
) -> FieldBatch:
    """Sample the field of two point charges on the regular grid.

    Parameters
    ----------
    charge1_strength, charge2_strength:
        Signed charge strengths.
    charge1_position, charge2_position:
        Charge positions as numeric triples.
    field_density:
        Samples per axis; integral on the wire, rounded otherwise.
    options:
        Model constants and backend choice.

    Returns
    -------
    FieldBatch
        Samples in grid order with excluded points removed.

    Raises
    ------
    InvalidInput
        If any argument is non-finite, a position is not a triple, or
        ``field_density <= 0``.
    """
    config = FieldConfig(
        charge1_strength=charge1_strength,
        charge2_strength=charge2_strength,
        charge1_position=charge1_position,
        charge2_position=charge2_position,
        field_density=field_density,
    )
    return calculate_field_for(config, options=options)


def calculate_field_for(config: FieldConfig, *, options: FieldOptions | None = None) -> FieldBatch:
    """Sample the field described by ``config``; see :func:`calculate_field`."""
    if options is None:
        options = FieldOptions()
    charge_a, charge_b = config.charges
    density = int(config.field_density)

    positions = generate_sample_positions(density, half_width=options.half_width)
    if options.backend == "jax":
        try:
            from chargefield.jax_backend import evaluate_points_jax
        except Exception as exc:  # pragma: no cover
            raise ImportError("JAX is required for the JAX evaluation backend.") from exc
        ev = evaluate_points_jax(
            positions,
            charge_a,
            charge_b,
            coulomb_constant=options.coulomb_constant,
            exclusion_radius=options.exclusion_radius,
            verbose=options.verbose,
        )
    else:
        ev = evaluate_points(
            positions,
            charge_a,
            charge_b,
            coulomb_constant=options.coulomb_constant,
            exclusion_radius=options.exclusion_radius,
        )

    keep = ev.keep
    n_kept = int(keep.sum())
    if options.verbose:
        print(
            f"[FIELD] density={density}, grid={positions.shape[0]}, kept={n_kept}, "
            f"excluded={positions.shape[0] - n_kept}, backend={options.backend}"
        )

    metadata = {
        "density": density,
        "grid_size": int(positions.shape[0]),
        "excluded": int(positions.shape[0] - n_kept),
        "coulomb_constant": float(options.coulomb_constant),
        "exclusion_radius": float(options.exclusion_radius),
        "half_width": float(options.half_width),
        "backend": options.backend,
    }
    return FieldBatch(
        positions=positions[keep],
        directions=ev.direction[keep],
        magnitudes=ev.magnitude[keep],
        metadata=metadata,
    )
