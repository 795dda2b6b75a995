import numpy as np

from shaderzoom import theta_schedule


def test_schedule_advances_by_frame_time_times_speed():
    thetas = theta_schedule(5, 0.1, speed=0.1)
    np.testing.assert_allclose(thetas, [0.0, 0.01, 0.02, 0.03, 0.04])


def test_schedule_wraps_at_two():
    thetas = theta_schedule(3, 10.0, speed=0.1, start=1.5)
    np.testing.assert_allclose(thetas, [1.5, 0.5, 1.5])
    assert np.all(thetas < 2.0)


def test_start_beyond_period_is_wrapped():
    np.testing.assert_allclose(theta_schedule(1, 0.1, start=2.25), [0.25])


def test_empty_schedule():
    assert theta_schedule(0, 0.1).size == 0
