"""Interpolate per-vertex complex coordinates across the screen quad."""

from __future__ import annotations

from typing import Sequence

import numpy as np

from .viewport import QUAD_INDICES, VertexOutput

_EDGE_EPS = 1e-12


def pixel_centers(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """Normalized device coordinates of every pixel center, shaped ``(height, width)``."""

    if width <= 0 or height <= 0:
        raise ValueError(f"resolution must be positive, got {width}x{height}")
    xs = -1.0 + (2.0 * np.arange(width, dtype=np.float64) + 1.0) / np.float64(width)
    ys = -1.0 + (2.0 * np.arange(height, dtype=np.float64) + 1.0) / np.float64(height)
    return np.meshgrid(xs, ys)


def _barycentric(triangle: np.ndarray, X: np.ndarray, Y: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    (ax, ay), (bx, by), (cx, cy) = triangle
    denom = (by - cy) * (ax - cx) + (cx - bx) * (ay - cy)
    if denom == 0.0:
        raise ValueError("degenerate triangle in quad")
    w0 = ((by - cy) * (X - cx) + (cx - bx) * (Y - cy)) / denom
    w1 = ((cy - ay) * (X - cx) + (ax - cx) * (Y - cy)) / denom
    w2 = 1.0 - w0 - w1
    weights = np.stack((w0, w1, w2), axis=-1)
    inside = np.all(weights >= -_EDGE_EPS, axis=-1)
    return weights, inside


def interpolate_quad(
    vertices: Sequence[VertexOutput],
    width: int,
    height: int,
    indices: np.ndarray = QUAD_INDICES,
) -> tuple[np.ndarray, np.ndarray]:
    """Rasterize the indexed quad and return per-pixel ``(cx, cy)`` grids.

    Each pixel center takes the barycentric blend of the coordinates carried
    by the triangle that covers it. A pixel on the shared diagonal goes to the
    first triangle in index order.
    """

    positions = np.asarray([v.position for v in vertices], dtype=np.float64)
    attributes = np.asarray([v.coordinate for v in vertices], dtype=np.float64)
    X, Y = pixel_centers(width, height)

    coords = np.zeros((height, width, 2), dtype=np.float64)
    covered = np.zeros((height, width), dtype=bool)
    for triangle in np.asarray(indices).reshape(-1, 3):
        weights, inside = _barycentric(positions[triangle], X, Y)
        take = inside & ~covered
        blended = np.einsum("hwk,kc->hwc", weights, attributes[triangle])
        coords[take] = blended[take]
        covered |= take

    if not np.all(covered):
        raise ValueError("vertices do not cover the full output surface")
    return coords[..., 0], coords[..., 1]
