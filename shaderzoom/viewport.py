"""Map the animation parameter onto the sampled region of the complex plane."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .config import DEFAULT_CONFIG, PipelineConfig

# Full-screen quad in normalized device coordinates, drawn as two triangles.
QUAD_POSITIONS = np.array(
    [
        [-1.0, -1.0],
        [1.0, -1.0],
        [-1.0, 1.0],
        [1.0, 1.0],
    ],
    dtype=np.float64,
)
QUAD_INDICES = np.array([0, 1, 2, 1, 3, 2], dtype=np.int64)

# Corner sign per vertex index: 0 -> (-,-), 1 -> (+,-), 2 -> (-,+), 3 -> (+,+).
CORNER_SIGNS = ((-1.0, -1.0), (1.0, -1.0), (-1.0, 1.0), (1.0, 1.0))


@dataclass(frozen=True)
class VertexOutput:
    """What the mapper emits for one vertex."""

    position: tuple[float, float]
    coordinate: tuple[float, float]


@dataclass(frozen=True)
class ViewportRectangle:
    """Axis-aligned square of the complex plane sampled for one frame."""

    center: tuple[float, float]
    radius: float

    @property
    def real_bounds(self) -> tuple[float, float]:
        return self.center[0] - self.radius, self.center[0] + self.radius

    @property
    def imag_bounds(self) -> tuple[float, float]:
        return self.center[1] - self.radius, self.center[1] + self.radius

    def corners(self) -> np.ndarray:
        """Return the four corner coordinates ordered by vertex index."""

        signs = np.asarray(CORNER_SIGNS, dtype=np.float64)
        return np.asarray(self.center, dtype=np.float64) + signs * np.float64(self.radius)


def zoom_radius(theta: float, config: PipelineConfig = DEFAULT_CONFIG) -> float:
    """Half-width of the viewport: ``0.1 * (theta - 1)^2 + 0.001``.

    Symmetric about ``theta == 1`` where it bottoms out at the floor term, so
    the viewport shrinks and grows again without clamping.
    """

    offset = np.float64(theta) - np.float64(config.zoom_pivot)
    return float(np.float64(config.zoom_scale) * offset * offset + np.float64(config.zoom_floor))


def viewport_for(theta: float, config: PipelineConfig = DEFAULT_CONFIG) -> ViewportRectangle:
    return ViewportRectangle(center=tuple(config.center), radius=zoom_radius(theta, config))


def vertex_corner(theta: float, index: int, config: PipelineConfig = DEFAULT_CONFIG) -> tuple[float, float]:
    """Complex coordinate of the corner that vertex ``index`` carries."""

    if not 0 <= index < len(CORNER_SIGNS):
        raise IndexError(f"vertex index must be in 0..{len(CORNER_SIGNS) - 1}, got {index}")
    zoom = zoom_radius(theta, config)
    sign_x, sign_y = CORNER_SIGNS[index]
    return config.center[0] + sign_x * zoom, config.center[1] + sign_y * zoom


def map_vertex(
    theta: float,
    index: int,
    position: tuple[float, float],
    config: PipelineConfig = DEFAULT_CONFIG,
) -> VertexOutput:
    """Emit the pass-through position and the complex corner for one vertex."""

    return VertexOutput(
        position=(float(position[0]), float(position[1])),
        coordinate=vertex_corner(theta, index, config),
    )


def map_vertices(theta: float, config: PipelineConfig = DEFAULT_CONFIG) -> list[VertexOutput]:
    """Run the mapper once for each vertex of the fixed quad."""

    return [map_vertex(theta, index, QUAD_POSITIONS[index], config) for index in range(len(QUAD_POSITIONS))]
