from dataclasses import replace

import numpy as np
import pytest

from shaderzoom import DEFAULT_CONFIG, escape_gradient, escape_iterations, evaluate_grid, gradient_grid


@pytest.mark.parametrize("c", [(3.0, 0.0), (0.0, -2.5), (2.0, 2.0), (-2.1, 0.0)])
def test_points_outside_radius_two_escape_immediately(c):
    assert escape_iterations(*c) == 0
    assert escape_gradient(*c) == 0.0


@pytest.mark.parametrize("c", [(0.0, 0.0), (-1.0, 0.0), (0.0, 1.0), (-0.1, 0.1)])
def test_bounded_points_reach_the_cap(c):
    assert escape_iterations(*c) == 300


def test_origin_gradient_is_exactly_one():
    assert escape_gradient(0.0, 0.0) == 1.0


def test_boundary_magnitude_keeps_iterating():
    # z sticks at 2 with |z|^2 == 4 forever
    assert escape_iterations(-2.0, 0.0) == 300
    # |z1|^2 == 4 continues, z2 == 6 escapes
    assert escape_iterations(2.0, 0.0) == 1


def test_known_escape_count():
    # 0.5, 0.75, 1.0625, 1.6289..., then 3.15... escapes
    assert escape_iterations(0.5, 0.0) == 4


def test_imaginary_update_uses_previous_real_part():
    def reference(cx, cy):
        z = 0j
        c = complex(cx, cy)
        for i in range(300):
            z = z * z + c
            if z.real * z.real + z.imag * z.imag > 4.0:
                return i
        return 300

    for c in [(0.3, 0.5), (-0.75, 0.1), (0.26, 0.0015), (-1.25, 0.2)]:
        assert escape_iterations(*c) == reference(*c)


def test_iteration_cap_follows_config():
    config = replace(DEFAULT_CONFIG, max_iterations=17)
    assert escape_iterations(0.0, 0.0, config) == 17
    assert escape_gradient(0.0, 0.0, config) == 1.0


def test_scalar_evaluation_is_repeatable():
    results = {escape_iterations(-0.5501, 0.5499) for _ in range(5)}
    assert len(results) == 1


def test_grid_matches_scalar_on_well_separated_points():
    cx = np.array([[3.0, 0.0, -1.0], [0.5, -2.0, 2.0]])
    cy = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0]])
    iterations = evaluate_grid(cx, cy)
    np.testing.assert_array_equal(iterations, [[0, 300, 300], [4, 300, 1]])


def test_grid_agrees_with_scalar_reference():
    xs = np.linspace(-2.0, 0.6, 24)
    ys = np.linspace(-1.2, 1.2, 20)
    cx, cy = np.meshgrid(xs, ys)
    iterations = evaluate_grid(cx, cy)
    expected = np.vectorize(escape_iterations)(cx, cy)
    assert iterations.shape == cx.shape
    assert np.mean(iterations != expected) < 0.01


def test_grid_never_exceeds_cap():
    cx, cy = np.meshgrid(np.linspace(-0.552, -0.548, 16), np.linspace(0.548, 0.552, 16))
    iterations, gradient = gradient_grid(cx, cy)
    assert iterations.max() <= 300
    assert iterations.min() >= 0
    assert np.all(gradient <= 1.0)
    np.testing.assert_allclose(gradient, iterations / 300.0)


def test_grid_is_repeatable():
    cx, cy = np.meshgrid(np.linspace(-0.6, -0.5, 12), np.linspace(0.5, 0.6, 12))
    np.testing.assert_array_equal(evaluate_grid(cx, cy), evaluate_grid(cx, cy))


def test_grid_shape_mismatch():
    with pytest.raises(ValueError):
        evaluate_grid(np.zeros((2, 2)), np.zeros((2, 3)))


def test_empty_grid():
    assert evaluate_grid(np.zeros((0, 4)), np.zeros((0, 4))).shape == (0, 4)
