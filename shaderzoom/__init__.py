"""Public API for the animated Mandelbrot zoom pipeline."""

from .animation import theta_schedule
from .colormap import apply_colormap, as_matplotlib_colormap, colormap, get_colormap, to_rgba
from .config import DEFAULT_CONFIG, PipelineConfig
from .evaluator import escape_gradient, escape_iterations, evaluate_grid, gradient_grid
from .pipeline import FrameResult, render_frame
from .raster import interpolate_quad, pixel_centers
from .viewport import (
    QUAD_INDICES,
    QUAD_POSITIONS,
    VertexOutput,
    ViewportRectangle,
    map_vertex,
    map_vertices,
    vertex_corner,
    viewport_for,
    zoom_radius,
)

__all__ = [
    "DEFAULT_CONFIG",
    "FrameResult",
    "PipelineConfig",
    "QUAD_INDICES",
    "QUAD_POSITIONS",
    "VertexOutput",
    "ViewportRectangle",
    "apply_colormap",
    "as_matplotlib_colormap",
    "colormap",
    "escape_gradient",
    "escape_iterations",
    "evaluate_grid",
    "get_colormap",
    "gradient_grid",
    "interpolate_quad",
    "map_vertex",
    "map_vertices",
    "pixel_centers",
    "render_frame",
    "theta_schedule",
    "to_rgba",
    "vertex_corner",
    "viewport_for",
    "zoom_radius",
]
