from dataclasses import replace

import numpy as np
import pytest

from shaderzoom import DEFAULT_CONFIG, QUAD_POSITIONS, map_vertex, map_vertices, vertex_corner, viewport_for, zoom_radius


def test_zoom_radius_bottoms_out_at_theta_one():
    assert zoom_radius(1.0) == 0.001


@pytest.mark.parametrize("theta", [-3.0, 0.0, 0.5, 0.999, 1.0, 1.25, 2.0, 7.5])
def test_zoom_radius_is_strictly_positive(theta):
    assert zoom_radius(theta) > 0.0
    assert zoom_radius(theta) >= 0.001


@pytest.mark.parametrize("offset", [0.25, 0.5, 0.75, 1.0, 3.0])
def test_zoom_radius_is_symmetric(offset):
    assert zoom_radius(1.0 + offset) == zoom_radius(1.0 - offset)


def test_zoom_radius_formula():
    assert zoom_radius(0.0) == pytest.approx(0.101)
    assert zoom_radius(3.0) == pytest.approx(0.1 * 4.0 + 0.001)


def test_corners_at_deepest_zoom():
    assert vertex_corner(1.0, 0) == pytest.approx((-0.551, 0.549))
    assert vertex_corner(1.0, 1) == pytest.approx((-0.549, 0.549))
    assert vertex_corner(1.0, 2) == pytest.approx((-0.551, 0.551))
    assert vertex_corner(1.0, 3) == pytest.approx((-0.549, 0.551))


@pytest.mark.parametrize("index", [-1, 4])
def test_vertex_index_out_of_range(index):
    with pytest.raises(IndexError):
        vertex_corner(1.0, index)


def test_map_vertex_passes_position_through():
    out = map_vertex(0.5, 2, (-1.0, 1.0))
    assert out.position == (-1.0, 1.0)
    zoom = zoom_radius(0.5)
    assert out.coordinate == pytest.approx((-0.55 - zoom, 0.55 + zoom))


def test_map_vertices_uses_fixed_quad():
    outputs = map_vertices(0.0)
    assert len(outputs) == 4
    np.testing.assert_array_equal([o.position for o in outputs], QUAD_POSITIONS)
    coords = np.array([o.coordinate for o in outputs])
    np.testing.assert_allclose(coords.mean(axis=0), DEFAULT_CONFIG.center)


def test_viewport_rectangle_is_square_around_center():
    viewport = viewport_for(1.5)
    re_min, re_max = viewport.real_bounds
    im_min, im_max = viewport.imag_bounds
    assert re_max - re_min == pytest.approx(im_max - im_min)
    assert re_max - re_min == pytest.approx(2 * zoom_radius(1.5))
    np.testing.assert_allclose(viewport.corners(), [o.coordinate for o in map_vertices(1.5)])


def test_custom_center():
    config = replace(DEFAULT_CONFIG, center=(0.0, 0.0))
    assert vertex_corner(1.0, 3, config) == pytest.approx((0.001, 0.001))
