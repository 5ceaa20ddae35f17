import numpy as np
import pytest

from chargefield import Charge
from chargefield.tracing import TraceOptions, seed_points, trace_field_lines, trace_from_charges


def test_radial_line_leaves_domain():
    charges = [Charge(1.0, (0.0, 0.0, 0.0)), Charge(0.0, (50.0, 50.0, 50.0))]
    trace = trace_field_lines(charges, [[0.5, 0.0, 0.0]], ds=0.1, n_steps=100)
    n = int(trace.lengths[0])
    assert n < 101
    line = trace.line(0)
    assert line.shape == (n, 3)
    assert 5.0 < line[-1, 0] <= 5.1 + 1e-9
    assert np.allclose(line[:, 1:], 0.0)
    # stopped lines repeat their last point
    assert np.allclose(trace.trajectories[0, n:], line[-1])


def test_reverse_direction_runs_into_source():
    charges = [Charge(1.0, (0.0, 0.0, 0.0)), Charge(0.0, (50.0, 50.0, 50.0))]
    trace = trace_field_lines(charges, [[0.0, 2.0, 0.0]], ds=0.05, n_steps=100, directions=-1)
    end = trace.line(0)[-1]
    assert np.linalg.norm(end) < 0.3
    assert np.linalg.norm(end) > 0.3 - 0.05 - 1e-9


def test_dipole_axis_line_ends_at_sink():
    charges = [Charge(1.0, (-2.0, 0.0, 0.0)), Charge(-1.0, (2.0, 0.0, 0.0))]
    trace = trace_field_lines(charges, [[-1.6, 0.0, 0.0]], ds=0.05, n_steps=200)
    end = trace.line(0)[-1]
    assert trace.lengths[0] < 201
    assert np.linalg.norm(end - np.array([2.0, 0.0, 0.0])) < 0.3


def test_seed_points_lie_on_sphere():
    S = seed_points([1.0, -1.0, 2.0], n=20, radius=0.5)
    assert S.shape == (20, 3)
    assert np.allclose(np.linalg.norm(S - np.array([1.0, -1.0, 2.0]), axis=1), 0.5)


def test_trace_from_charges_seeds_sources_and_sinks():
    a = Charge(1.0, (-2.0, 0.0, 0.0))
    b = Charge(-1.0, (2.0, 0.0, 0.0))
    opts = TraceOptions(n_seeds=6, ds=0.1, n_steps=50)
    trace = trace_from_charges(a, b, options=opts)
    assert trace.trajectories.shape == (12, 51, 3)
    assert trace.directions.tolist() == [1] * 6 + [-1] * 6
    starts = trace.trajectories[:, 0, :]
    assert np.allclose(np.linalg.norm(starts[:6] - a.position_array, axis=1), opts.seed_radius)


def test_trace_from_neutral_charges_is_empty(capsys):
    a = Charge(0.0, (-2.0, 0.0, 0.0))
    b = Charge(0.0, (2.0, 0.0, 0.0))
    trace = trace_from_charges(a, b, verbose=True)
    assert trace.trajectories.shape[0] == 0
    assert "[TRACE]" in capsys.readouterr().out


def test_seed_radius_must_exceed_stop_radius():
    a = Charge(1.0, (0.0, 0.0, 0.0))
    b = Charge(-1.0, (2.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        trace_from_charges(a, b, options=TraceOptions(seed_radius=0.2))
    with pytest.raises(ValueError):
        TraceOptions(ds=0.0)


def test_negative_coulomb_constant_swaps_sources_and_sinks():
    a = Charge(1.0, (-2.0, 0.0, 0.0))
    b = Charge(-1.0, (2.0, 0.0, 0.0))
    opts = TraceOptions(n_seeds=4, ds=0.1, n_steps=20)
    trace = trace_from_charges(a, b, options=opts, coulomb_constant=-1.0)
    assert trace.directions.tolist() == [-1] * 4 + [1] * 4
    first = trace.line(0)
    # lines leave the seed sphere around charge 1 instead of entering it
    assert np.linalg.norm(first[-1] - a.position_array) > opts.seed_radius
