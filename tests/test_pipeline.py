import numpy as np
import pytest

from shaderzoom import render_frame, zoom_radius


def test_frame_shapes_and_ranges():
    result = render_frame(1.0, 12, 8)
    assert result.iterations.shape == (8, 12)
    assert result.gradient.shape == (8, 12)
    assert result.rgba.shape == (8, 12, 4)
    assert result.iterations.max() <= 300
    assert np.all((result.gradient >= 0.0) & (result.gradient <= 1.0))
    np.testing.assert_array_equal(result.rgba[..., 3], 1.0)


def test_frame_reports_viewport():
    result = render_frame(0.25, 4, 4)
    assert result.theta == 0.25
    assert result.viewport.radius == pytest.approx(zoom_radius(0.25))
    assert result.viewport.center == (-0.55, 0.55)


def test_wide_viewport_corners_are_black():
    # zoom radius 10.001 puts every corner pixel far outside |c| = 2
    result = render_frame(11.0, 8, 8)
    for row, col in [(0, 0), (0, -1), (-1, 0), (-1, -1)]:
        assert result.iterations[row, col] == 0
        np.testing.assert_allclose(result.rgba[row, col], (0.0, 0.0, 0.0, 1.0))


def test_to_uint8():
    pixels = render_frame(1.0, 6, 6).to_uint8()
    assert pixels.dtype == np.uint8
    assert pixels.shape == (6, 6, 4)
    np.testing.assert_array_equal(pixels[..., 3], 255)


def test_rendering_is_repeatable():
    first = render_frame(0.9, 10, 10)
    second = render_frame(0.9, 10, 10)
    np.testing.assert_array_equal(first.iterations, second.iterations)
    np.testing.assert_array_equal(first.rgba, second.rgba)
