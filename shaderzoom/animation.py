"""Host-side driver for the animation parameter."""

from __future__ import annotations

import numpy as np

THETA_PERIOD = 2.0
DEFAULT_SPEED = 0.1


def theta_schedule(
    frames: int,
    frame_time: float,
    *,
    speed: float = DEFAULT_SPEED,
    start: float = 0.0,
    period: float = THETA_PERIOD,
) -> np.ndarray:
    """Theta for each of ``frames`` frames spaced ``frame_time`` seconds apart.

    The first frame uses ``start`` as is; every later frame adds one
    ``frame_time * speed`` step and wraps at ``period``.
    """

    if frames <= 0:
        return np.array([], dtype=np.float64)
    steps = np.arange(frames, dtype=np.float64) * np.float64(frame_time) * np.float64(speed)
    return np.mod(np.float64(start) + steps, np.float64(period))
