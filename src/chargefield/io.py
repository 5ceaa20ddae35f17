from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, Mapping

import numpy as np

from chargefield.field import FieldBatch

__all__ = [
    "from_wire",
    "load_field_csv",
    "load_field_json",
    "save_field",
    "save_field_csv",
    "save_field_json",
    "save_trace_npz",
    "to_wire",
]

CSV_HEADER = "x,y,z,dx,dy,dz,magnitude"


def to_wire(batch: FieldBatch) -> list[dict[str, Any]]:
    """Return the ``calculateField`` response records for ``batch``."""
    return [sample.to_dict() for sample in batch]


def from_wire(records: Iterable[Mapping[str, Any]], metadata: Mapping[str, Any] | None = None) -> FieldBatch:
    """Rebuild a batch from ``{position, direction, magnitude}`` records."""
    records = list(records)
    if not records:
        return FieldBatch.empty(metadata)
    try:
        positions = [r["position"] for r in records]
        directions = [r["direction"] for r in records]
        magnitudes = [r["magnitude"] for r in records]
    except KeyError as exc:
        raise ValueError(f"Field record is missing key {exc}") from exc
    return FieldBatch(
        positions=positions,
        directions=directions,
        magnitudes=magnitudes,
        metadata=metadata or {},
    )


def save_field_json(batch: FieldBatch, path: str | Path) -> Path:
    path = Path(path)
    payload = {"metadata": dict(batch.metadata), "samples": to_wire(batch)}
    with path.open("w") as f:
        json.dump(payload, f, indent=2)
    return path


def load_field_json(path: str | Path) -> FieldBatch:
    """Load a batch written by :func:`save_field_json` (or a bare record list)."""
    with Path(path).open("r") as f:
        payload = json.load(f)
    if isinstance(payload, list):
        return from_wire(payload)
    return from_wire(payload.get("samples", []), metadata=payload.get("metadata"))


def save_field_csv(batch: FieldBatch, path: str | Path) -> Path:
    path = Path(path)
    table = np.column_stack([batch.positions, batch.directions, batch.magnitudes])
    np.savetxt(path, table, delimiter=",", header=CSV_HEADER, comments="")
    return path


def load_field_csv(path: str | Path) -> FieldBatch:
    table = np.loadtxt(path, delimiter=",", skiprows=1, ndmin=2)
    if table.size == 0:
        return FieldBatch.empty({"source": "csv"})
    if table.shape[1] != 7:
        raise ValueError(f"Expected 7 columns in field CSV, got shape {table.shape}")
    return FieldBatch(
        positions=table[:, 0:3],
        directions=table[:, 3:6],
        magnitudes=table[:, 6],
        metadata={"source": "csv"},
    )


def save_field(batch: FieldBatch, path: str | Path, *, format: str | None = None) -> Path:
    """Save ``batch`` as JSON or CSV; the format defaults to the file suffix."""
    path = Path(path)
    fmt = (format or path.suffix.lstrip(".") or "json").lower()
    if fmt == "json":
        return save_field_json(batch, path)
    if fmt == "csv":
        return save_field_csv(batch, path)
    raise ValueError(f"Unsupported field format: {fmt}")


def save_trace_npz(trace: Any, path: str | Path) -> Path:
    """Save a :class:`~chargefield.tracing.FieldLineTrace` as ``.npz``."""
    path = Path(path).with_suffix(".npz")
    np.savez(
        path,
        trajectories=np.asarray(trace.trajectories),
        lengths=np.asarray(trace.lengths),
        directions=np.asarray(trace.directions),
        step=np.asarray(trace.step),
    )
    return path
