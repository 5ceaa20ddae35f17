"""ChargeField: sampled electrostatic field of two point charges.

Primary user-facing API is :func:`calculate_field`.
"""

from __future__ import annotations

from ._version import __version__
from .charges import Charge
from .errors import InvalidInput
from .evaluator import evaluate_at, evaluate_points, field_vectors
from .field import EXCLUDED, FieldBatch, FieldSample
from .sampler import generate_sample_positions
from .service import FieldConfig, FieldOptions, calculate_field, calculate_field_for
from .session import FieldSession
from .tracing import FieldLineTrace, TraceOptions, trace_field_lines, trace_from_charges
from .pipeline import run_pipeline, PipelineResult

__all__ = [
    "__version__",
    "Charge",
    "InvalidInput",
    "EXCLUDED",
    "FieldBatch",
    "FieldSample",
    "generate_sample_positions",
    "evaluate_at",
    "evaluate_points",
    "field_vectors",
    "FieldConfig",
    "FieldOptions",
    "calculate_field",
    "calculate_field_for",
    "FieldSession",
    "FieldLineTrace",
    "TraceOptions",
    "trace_field_lines",
    "trace_from_charges",
    "run_pipeline",
    "PipelineResult",
]
