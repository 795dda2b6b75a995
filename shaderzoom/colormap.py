"""Piecewise-linear colormap over the fixed color stop table."""

from __future__ import annotations

import math

import numpy as np
from matplotlib import colormaps
from matplotlib.colors import Colormap, ListedColormap

from .config import DEFAULT_CONFIG, RGB, PipelineConfig


def colormap(n: float, config: PipelineConfig = DEFAULT_CONFIG) -> RGB:
    """Resolve a gradient value in ``[0, 1)`` to an RGB triple.

    ``i0 = floor(steps * n)`` selects the lower stop and the fractional part
    blends toward the next one. Gradients outside ``[0, 1]`` are clamped and
    the upper index is pinned to the last stop, so ``n == 1.0`` (a pixel that
    reached the iteration cap) resolves to the final stop instead of reading
    past the table.
    """

    if not math.isfinite(n):
        raise ValueError(f"gradient must be finite, got {n!r}")

    stops = config.color_stops
    last = len(stops) - 1
    scaled = config.color_steps * min(max(float(n), 0.0), 1.0)
    i0 = min(int(math.floor(scaled)), last)
    i1 = min(i0 + 1, last)
    t = scaled - i0
    return tuple((1.0 - t) * stops[i0][k] + t * stops[i1][k] for k in range(3))


def apply_colormap(gradient: np.ndarray, config: PipelineConfig = DEFAULT_CONFIG) -> np.ndarray:
    """Vectorized :func:`colormap`; returns an array of shape ``gradient.shape + (3,)``."""

    gradient = np.asarray(gradient, dtype=np.float64)
    if not np.all(np.isfinite(gradient)):
        raise ValueError("gradient must contain only finite values")

    stops = np.asarray(config.color_stops, dtype=np.float64)
    last = stops.shape[0] - 1
    scaled = np.float64(config.color_steps) * np.clip(gradient, 0.0, 1.0)
    i0 = np.minimum(np.floor(scaled).astype(np.int64), last)
    i1 = np.minimum(i0 + 1, last)
    t = (scaled - i0)[..., np.newaxis]
    return (1.0 - t) * stops[i0] + t * stops[i1]


def to_rgba(rgb: np.ndarray) -> np.ndarray:
    """Append an opaque alpha channel to an RGB array."""

    alpha = np.ones(rgb.shape[:-1] + (1,), dtype=rgb.dtype)
    return np.concatenate((rgb, alpha), axis=-1)


def as_matplotlib_colormap(config: PipelineConfig = DEFAULT_CONFIG, samples: int = 256) -> ListedColormap:
    """Sample the stop table into a matplotlib colormap, e.g. for ``imshow``."""

    positions = np.linspace(0.0, 1.0, samples, endpoint=False)
    return ListedColormap(apply_colormap(positions, config), name="shaderzoom_stops")


def get_colormap(name: str | None, config: PipelineConfig = DEFAULT_CONFIG) -> Colormap:
    if name is None:
        return as_matplotlib_colormap(config)
    return colormaps[name]
