"""Process-wide constants shared by the viewport and escape-time stages."""

from __future__ import annotations

from dataclasses import dataclass

RGB = tuple[float, float, float]


@dataclass(frozen=True)
class PipelineConfig:
    """Read-only constants for the zoom pipeline.

    A single instance is created at import time (``DEFAULT_CONFIG``). Variants
    are made with :func:`dataclasses.replace`, never by mutation.
    """

    max_iterations: int = 300
    center: tuple[float, float] = (-0.55, 0.55)
    zoom_scale: float = 0.1
    zoom_pivot: float = 1.0
    zoom_floor: float = 0.001
    escape_bound: float = 4.0
    color_stops: tuple[RGB, ...] = (
        (0.0, 0.0, 0.0),
        (0.0, 0.0, 1.0),
        (0.8, 0.8, 1.0),
    )
    # Just under the stop count so floor(steps * n) stays a valid lower index
    # for every n < 1.
    color_steps: float = 2.999

    def __post_init__(self) -> None:
        if self.max_iterations <= 0:
            raise ValueError("max_iterations must be positive.")
        if self.zoom_scale < 0:
            raise ValueError("zoom_scale must not be negative.")
        if self.zoom_floor <= 0:
            raise ValueError("zoom_floor must be strictly positive.")
        if len(self.color_stops) < 2:
            raise ValueError("color_stops needs at least two colors.")


DEFAULT_CONFIG = PipelineConfig()
