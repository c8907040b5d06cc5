"""Projective mapping between the unit square and a quadrilateral.

Matrices use the row-vector convention: a point ``(x, y)`` maps to
``[x, y, 1] @ M``, followed by division by the third component.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

_EPS = 1e-10


class SingularQuadError(ValueError):
    """Raised when a quadrilateral gives a matrix that cannot be inverted."""


def _is_zero(value: float) -> bool:
    return -_EPS < value < _EPS


def _forward_matrix(quad: np.ndarray) -> np.ndarray:
    (x0, y0), (x1, y1), (x2, y2), (x3, y3) = quad
    px = x0 - x1 + x2 - x3
    py = y0 - y1 + y2 - y3
    sq = np.zeros((3, 3), dtype=np.float64)

    if _is_zero(px) and _is_zero(py):
        # Parallelogram: the mapping is affine.
        sq[0] = (x1 - x0, y1 - y0, 0.0)
        sq[1] = (x2 - x1, y2 - y1, 0.0)
        sq[2] = (x0, y0, 1.0)
        return sq

    dx1 = x1 - x2
    dx2 = x3 - x2
    dy1 = y1 - y2
    dy2 = y3 - y2
    det = dx1 * dy2 - dx2 * dy1
    if _is_zero(det):
        raise SingularQuadError("quadrilateral is degenerate")

    g = (px * py - py * dx2) / det
    h = (py * dx1 - px * dy1) / det
    sq[0] = (x1 - x0 + g * x1, y1 - y0 + g * y1, g)
    sq[1] = (x3 - x0 + h * x3, y3 - y0 + h * y3, h)
    sq[2] = (x0, y0, 1.0)
    return sq


def _invert(sq: np.ndarray) -> np.ndarray:
    det = (
        sq[0, 0] * (sq[1, 1] * sq[2, 2] - sq[1, 2] * sq[2, 1])
        - sq[0, 1] * (sq[2, 2] * sq[1, 0] - sq[1, 2] * sq[2, 0])
        + sq[0, 2] * (sq[1, 0] * sq[2, 1] - sq[1, 1] * sq[2, 0])
    )
    if _is_zero(det):
        raise SingularQuadError("unit-square matrix is not invertible")

    inv = np.empty((3, 3), dtype=np.float64)
    inv[0, 0] = sq[1, 1] * sq[2, 2] - sq[1, 2] * sq[2, 1]
    inv[1, 0] = sq[1, 2] * sq[2, 0] - sq[1, 0] * sq[2, 2]
    inv[2, 0] = sq[1, 0] * sq[2, 1] - sq[1, 1] * sq[2, 0]
    inv[0, 1] = sq[0, 2] * sq[2, 1] - sq[0, 1] * sq[2, 2]
    inv[1, 1] = sq[0, 0] * sq[2, 2] - sq[0, 2] * sq[2, 0]
    inv[2, 1] = sq[2, 0] * sq[0, 1] - sq[0, 0] * sq[2, 1]
    inv[0, 2] = sq[0, 1] * sq[1, 2] - sq[0, 2] * sq[1, 1]
    inv[1, 2] = sq[0, 2] * sq[1, 0] - sq[0, 0] * sq[1, 2]
    inv[2, 2] = sq[0, 0] * sq[1, 1] - sq[0, 1] * sq[1, 0]
    return inv / det


def unit_square_to_quad(quad) -> Tuple[np.ndarray, np.ndarray]:
    """Build the 3x3 unit-square-to-quad matrix and its inverse.

    ``quad`` holds four ``(x, y)`` corners, in order, that the unit square
    corners (0,0), (1,0), (1,1), (0,1) map to. Raises SingularQuadError when
    the quadrilateral is degenerate.
    """
    corners = np.asarray(quad, dtype=np.float64)
    if corners.shape != (4, 2):
        raise ValueError(f"quad must have shape (4, 2), got {corners.shape}")
    forward = _forward_matrix(corners)
    return forward, _invert(forward)


def map_point(matrix, x: float, y: float) -> Tuple[float, float]:
    """Apply a projective matrix to the point (x, y)."""
    m = np.asarray(matrix, dtype=np.float64)
    if m.shape != (3, 3):
        raise ValueError(f"matrix must have shape (3, 3), got {m.shape}")
    u, v, w = np.array([x, y, 1.0]) @ m
    if w == 0:
        raise ValueError("point maps to infinity")
    return float(u / w), float(v / w)