from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from chargefield.field import FieldBatch
from chargefield.io import save_field, save_trace_npz
from chargefield.service import FieldConfig, FieldOptions, calculate_field_for
from chargefield.tracing import TraceOptions, trace_from_charges
from chargefield.validation import field_summary, validate_field_batch


@dataclass(frozen=True)
class PipelineResult:
    batch: FieldBatch
    stats: dict[str, Any]
    metadata: dict[str, Any]
    outputs: dict[str, str]


__all__ = ["PipelineResult", "run_pipeline"]


def _load_config(path: str | Path) -> dict[str, Any]:
    try:
        import tomllib
    except Exception as exc:  # pragma: no cover
        raise ImportError("Python 3.11+ is required for TOML configs.") from exc
    with open(path, "rb") as f:
        return tomllib.load(f)


def run_pipeline(config_path: str | Path) -> PipelineResult:
    """Compute, validate and write the field described by a TOML file.

    Sections: ``[charges]`` (FieldConfig keys except density),
    ``[sampling]`` (``density``), ``[options]``, ``[trace]``, ``[validate]``,
    ``[output]``.
    """
    cfg = _load_config(config_path)
    charges_cfg = cfg.get("charges", {})
    sampling_cfg = cfg.get("sampling", {})
    options_cfg = cfg.get("options", {})
    trace_cfg = cfg.get("trace", {})
    validate_cfg = cfg.get("validate", {})
    output_cfg = cfg.get("output", {})

    config = FieldConfig.from_mapping({**charges_cfg, "field_density": sampling_cfg.get("density", 5)})
    options = FieldOptions(
        coulomb_constant=float(options_cfg.get("coulomb_constant", 1.0)),
        exclusion_radius=float(options_cfg.get("exclusion_radius", 0.3)),
        half_width=float(options_cfg.get("half_width", 5.0)),
        backend=str(options_cfg.get("backend", "numpy")),
        verbose=bool(options_cfg.get("verbose", False)),
    )

    batch = calculate_field_for(config, options=options)
    stats = field_summary(batch)
    if bool(validate_cfg.get("enabled", True)):
        stats["violations"] = validate_field_batch(
            batch,
            config.charges,
            exclusion_radius=options.exclusion_radius,
            tol=float(validate_cfg.get("tol", 1e-6)),
        )

    outdir = Path(output_cfg.get("dir", "outputs/pipeline"))
    outdir.mkdir(parents=True, exist_ok=True)
    fmt = str(output_cfg.get("format", "json"))
    outputs = {"field": str(save_field(batch, outdir / f"field.{fmt}", format=fmt))}

    if bool(trace_cfg.get("enabled", False)):
        trace_options = TraceOptions(
            n_seeds=int(trace_cfg.get("n_seeds", 12)),
            seed_radius=float(trace_cfg.get("seed_radius", 0.4)),
            ds=float(trace_cfg.get("ds", 0.05)),
            n_steps=int(trace_cfg.get("n_steps", 400)),
        )
        trace = trace_from_charges(
            *config.charges,
            options=trace_options,
            coulomb_constant=options.coulomb_constant,
            stop_radius=options.exclusion_radius,
            half_width=options.half_width,
            verbose=options.verbose,
        )
        outputs["field_lines"] = str(save_trace_npz(trace, outdir / "field_lines.npz"))
        stats["field_lines"] = int(trace.trajectories.shape[0])

    summary_path = outdir / "summary.json"
    with summary_path.open("w") as f:
        json.dump(stats, f, indent=2)
    outputs["summary"] = str(summary_path)

    metadata = {
        "config": config.to_dict(),
        "backend": options.backend,
        "source": str(config_path),
    }
    return PipelineResult(batch=batch, stats=stats, metadata=metadata, outputs=outputs)
