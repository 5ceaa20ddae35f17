import numpy as np
import pytest

from chargefield.errors import InvalidInput
from chargefield.sampler import axis_coordinates, generate_sample_positions


def test_grid_has_density_cubed_points():
    for d in (2, 3, 5, 10):
        P = generate_sample_positions(d)
        assert P.shape == (d**3, 3)


def test_grid_spans_domain_with_uniform_spacing():
    axis = axis_coordinates(5)
    assert np.allclose(axis, [-5.0, -2.5, 0.0, 2.5, 5.0])
    axis = axis_coordinates(4, half_width=3.0)
    assert np.allclose(np.diff(axis), 6.0 / 3)


def test_grid_order_is_lexicographic_by_index():
    P = generate_sample_positions(3)
    assert np.allclose(P[0], [-5.0, -5.0, -5.0])
    assert np.allclose(P[1], [-5.0, -5.0, 0.0])
    assert np.allclose(P[3], [-5.0, 0.0, -5.0])
    assert np.allclose(P[9], [0.0, -5.0, -5.0])
    assert np.allclose(P[-1], [5.0, 5.0, 5.0])
    keys = [tuple(p) for p in P]
    assert keys == sorted(keys)


def test_grid_has_no_duplicates():
    P = generate_sample_positions(6)
    assert np.unique(P, axis=0).shape[0] == P.shape[0]


def test_density_one_is_the_centre():
    P = generate_sample_positions(1)
    assert P.shape == (1, 3)
    assert np.allclose(P, 0.0)


def test_out_of_range_density_is_not_clamped():
    assert generate_sample_positions(12).shape == (12**3, 3)


def test_density_below_one_rejected():
    with pytest.raises(InvalidInput):
        generate_sample_positions(0)
    with pytest.raises(InvalidInput):
        axis_coordinates(3, half_width=0.0)


def test_non_finite_density_rejected():
    for bad in (float("nan"), float("inf"), -float("inf")):
        with pytest.raises(InvalidInput):
            generate_sample_positions(bad)
    with pytest.raises(InvalidInput):
        axis_coordinates(None)
