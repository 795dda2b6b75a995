"""Render one frame of the zoom: theta in, RGBA pixels out."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from .colormap import apply_colormap, to_rgba
from .config import DEFAULT_CONFIG, PipelineConfig
from .evaluator import gradient_grid
from .raster import interpolate_quad
from .viewport import ViewportRectangle, map_vertices, viewport_for


@dataclass(frozen=True)
class FrameResult:
    """Container for everything produced while rendering one frame."""

    theta: float
    viewport: ViewportRectangle
    iterations: np.ndarray
    gradient: np.ndarray
    rgba: np.ndarray

    def to_uint8(self) -> np.ndarray:
        return np.uint8(np.clip(np.rint(self.rgba * 255.0), 0, 255))


def render_frame(
    theta: float,
    width: int,
    height: int,
    config: PipelineConfig = DEFAULT_CONFIG,
    *,
    device: Optional[str] = None,
) -> FrameResult:
    """Run both stages for a ``width`` x ``height`` surface.

    All four vertices are mapped and interpolated before any pixel is
    evaluated. Pixel row 0 sits at normalized device ``y = -1``, which is the
    lower imaginary edge of the viewport.
    """

    vertices = map_vertices(theta, config)
    cx, cy = interpolate_quad(vertices, width, height)
    iterations, gradient = gradient_grid(cx, cy, config, device=device)
    rgba = to_rgba(apply_colormap(gradient, config))
    return FrameResult(
        theta=float(theta),
        viewport=viewport_for(theta, config),
        iterations=iterations,
        gradient=gradient,
        rgba=rgba,
    )
