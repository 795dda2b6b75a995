"""Escape-time evaluation of the quadratic map ``z <- z^2 + c``."""

from __future__ import annotations

from typing import Optional

import numpy as np
import tensorflow as tf

from .config import DEFAULT_CONFIG, PipelineConfig


def escape_iterations(cx: float, cy: float, config: PipelineConfig = DEFAULT_CONFIG) -> int:
    """Count iterates of ``z^2 + c`` that stay within the escape bound.

    ``z`` starts at the origin. Each step squares and offsets it, then stops
    as soon as ``|z|^2`` exceeds the bound; a point sitting exactly on the
    bound keeps iterating. The count never exceeds ``config.max_iterations``.
    """

    zx = 0.0
    zy = 0.0
    bound = config.escape_bound
    i = 0
    # Step first, then count: c = 3 yields 0 and c = 0 yields the full cap.
    while i < config.max_iterations:
        old_zx = zx
        zx = old_zx * old_zx - zy * zy + cx
        zy = 2.0 * old_zx * zy + cy
        if zx * zx + zy * zy > bound:
            break
        i += 1
    return i


def escape_gradient(cx: float, cy: float, config: PipelineConfig = DEFAULT_CONFIG) -> float:
    return escape_iterations(cx, cy, config) / float(config.max_iterations)


@tf.function
def _escape_step(
    zx: tf.Tensor,
    zy: tf.Tensor,
    cx: tf.Tensor,
    cy: tf.Tensor,
    ns: tf.Tensor,
    active: tf.Tensor,
    bound: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Advance every still-bounded pixel by one iteration."""

    new_zx = zx * zx - zy * zy + cx
    new_zy = 2.0 * zx * zy + cy
    zx = tf.where(active, new_zx, zx)
    zy = tf.where(active, new_zy, zy)
    bounded = zx * zx + zy * zy <= bound
    active = tf.logical_and(active, bounded)
    ns = ns + tf.cast(active, tf.int32)
    return zx, zy, ns, active


@tf.function
def _escape_run(
    cx: tf.Tensor,
    cy: tf.Tensor,
    max_iterations: tf.Tensor,
    bound: tf.Tensor,
) -> tuple[tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor, tf.Tensor]:
    """Iterate the whole grid with a TensorFlow while loop."""

    max_iterations = tf.cast(max_iterations, tf.int32)
    i = tf.constant(0, dtype=tf.int32)
    zx = tf.zeros_like(cx)
    zy = tf.zeros_like(cy)
    ns = tf.zeros(tf.shape(cx), tf.int32)
    active = tf.ones(tf.shape(cx), tf.bool)

    def cond(i, zx, zy, ns, active):
        return tf.logical_and(tf.less(i, max_iterations), tf.reduce_any(active))

    def body(i, zx, zy, ns, active):
        zx, zy, ns, active = _escape_step(zx, zy, cx, cy, ns, active, bound)
        return i + 1, zx, zy, ns, active

    return tf.while_loop(cond, body, (i, zx, zy, ns, active))


def evaluate_grid(
    cx: np.ndarray,
    cy: np.ndarray,
    config: PipelineConfig = DEFAULT_CONFIG,
    *,
    device: Optional[str] = None,
) -> np.ndarray:
    """Escape counts for every coordinate pair in ``(cx, cy)``.

    Pixels are independent; the grid is evaluated in one data-parallel pass
    on ``device`` (``/CPU:0`` when not given).
    """

    cx = np.asarray(cx, dtype=np.float64)
    cy = np.asarray(cy, dtype=np.float64)
    if cx.shape != cy.shape:
        raise ValueError(f"cx and cy must share a shape, got {cx.shape} and {cy.shape}")
    if cx.size == 0:
        return np.zeros(cx.shape, dtype=np.int32)

    with tf.device(device if device is not None else "/CPU:0"):
        cx_tf = tf.convert_to_tensor(cx, dtype=tf.float64)
        cy_tf = tf.convert_to_tensor(cy, dtype=tf.float64)
        max_iterations = tf.constant(config.max_iterations, dtype=tf.int32)
        bound = tf.constant(config.escape_bound, dtype=tf.float64)
        _, _, _, ns, _ = _escape_run(cx_tf, cy_tf, max_iterations, bound)

    return ns.numpy()


def gradient_grid(
    cx: np.ndarray,
    cy: np.ndarray,
    config: PipelineConfig = DEFAULT_CONFIG,
    *,
    device: Optional[str] = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Return ``(iterations, iterations / max_iterations)`` for the grid."""

    iterations = evaluate_grid(cx, cy, config, device=device)
    gradient = iterations.astype(np.float64) / np.float64(config.max_iterations)
    return iterations, gradient
