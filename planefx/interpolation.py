"""Interpolation coefficient tables and sampling helpers for 2-D planes.

Coefficient tables are arrays of shape ``(quantiles + 1, span)``: row ``q``
holds the weights applied to ``span`` consecutive samples for the
fractional position ``q / quantiles``.
"""

from __future__ import annotations

import math
from typing import Optional, Tuple

import numpy as np


def clamp(value, low, high):
    """Restrict value to the closed range [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value


def sinc(f: float) -> float:
    """Normalised sinc: sin(pi f) / (pi f), with sinc(0) == 1."""
    f = abs(f) * math.pi
    return math.sin(f) / f if f != 0 else 1.0


def linear_coefficients(quantiles: int) -> np.ndarray:
    """Bilinear weights for each quantile, shape (quantiles + 1, 2)."""
    q = np.arange(quantiles + 1, dtype=np.float64) / quantiles
    return np.stack([1.0 - q, q], axis=1).astype(np.float32)


def cubic_coefficients(quantiles: int) -> np.ndarray:
    """Normalised cubic weights for p(-1), p0, p1, p2; shape (quantiles + 1, 4)."""
    x = np.arange(quantiles + 1, dtype=np.float64) / quantiles
    xsq = x * x
    xcube = xsq * x
    table = np.stack(
        [
            -x + 2 * xsq - xcube,
            2 - 5 * xsq + 3 * xcube,
            x + 4 * xsq - 3 * xcube,
            -xsq + xcube,
        ],
        axis=1,
    )
    table /= table.sum(axis=1, keepdims=True)
    return table.astype(np.float32)


def lanczos_coefficients(span: int, quantiles: int) -> np.ndarray:
    """Normalised Lanczos weights, shape (quantiles + 1, span).

    The first and last rows pick the nearest sample exactly.
    """
    half = span // 2
    table = np.zeros((quantiles + 1, span), dtype=np.float64)
    table[0, half - 1] = 1.0
    table[quantiles, half] = 1.0
    for row in range(1, quantiles):
        frac = row / quantiles
        weights = [
            sinc(half - 1 - i + frac) * sinc((half - 1 - i + frac) / half)
            for i in range(span)
        ]
        total = sum(weights)
        table[row] = [w / total for w in weights]
    return table.astype(np.float32)


def interpolation_scheme(method: int, quantiles: int) -> Tuple[int, Optional[np.ndarray]]:
    """Return (span, coefficients) for a method number.

    1: nearest point / nine-point (no table), 2: bilinear, 3: cubic,
    4: 6x6 Lanczos. Any other number yields span 1 and no table.
    """
    if method == 1:
        return 2, None
    if method == 2:
        return 2, linear_coefficients(quantiles)
    if method == 3:
        return 4, cubic_coefficients(quantiles)
    if method == 4:
        return 6, lanczos_coefficients(6, quantiles)
    return 1, None


def _sample(plane, row: int, col: int):
    if row < 0 or col < 0:
        raise IndexError(f"sample ({row}, {col}) lies outside the plane")
    return plane[row, col]


def _is_integer_plane(plane) -> bool:
    return np.issubdtype(np.asarray(plane).dtype, np.integer)


def best_of_nine(plane, x: int, y: int, index: int, step: int = 1):
    """Pick or average samples around (x, y) according to a nine-way index.

    Columns are addressed as ``x * step``; integer planes average with
    integer division.
    """
    c0 = x * step
    c1 = (x + 1) * step

    def s(r, c):
        return _sample(plane, r, c)

    if index in (0, 3):
        return s(y, c0)
    if index == 2:
        return s(y, c1)
    if index == 6:
        return s(y + 1, c0)
    if index == 8:
        return s(y + 1, c1)

    if index == 1:
        values, count = (s(y, c0), s(y, c1)), 2
    elif index == 4:
        values, count = (s(y, c0), s(y, c1), s(y, c0), s(y + 1, c0)), 4
    elif index == 5:
        values, count = (s(y, c1), s(y + 1, c1)), 2
    elif index == 7:
        values, count = (s(y + 1, c0), s(y + 1, c1)), 2
    else:
        raise ValueError(f"best-of-nine index must be 0..8, got {index}")

    if _is_integer_plane(plane):
        return sum(int(v) for v in values) // count
    return sum(float(v) for v in values) / count


def best_of_nine_index(qx: int, qy: int, quantiles: int) -> int:
    """Nine-way index from integer quantiles; quantiles should be a multiple of 4."""
    if qx < quantiles // 4:
        index = 0
    elif qx < (3 * quantiles) // 4:
        index = 1
    else:
        index = 2
    return index + (3 if qy < (3 * quantiles) // 4 else 6)


def best_of_nine_index_fraction(remx: float, remy: float) -> int:
    """Nine-way index from fractional offsets in [0, 1)."""
    if remx < 0.25:
        index = 0
    elif remx < 0.75:
        index = 1
    else:
        index = 2
    return index + (3 if remy < 0.75 else 6)


def lanczos_quantile(
    plane, row: int, col: int, span: int, qx: int, qy: int, coeffs, step: int = 1
) -> float:
    """Separable span x span interpolation around the sample at (row, col).

    With span 0 the sample itself is returned.
    """
    if span == 0:
        return float(_sample(plane, row, col))
    half = span // 2
    xweights = coeffs[qx]
    yweights = coeffs[qy]
    total = 0.0
    for h in range(span):
        r = row + h - half + 1
        line = sum(
            float(_sample(plane, r, col + (w - half + 1) * step)) * float(xweights[w])
            for w in range(span)
        )
        total += line * float(yweights[h])
    return total


def need_not_interpolate(plane, row: int, col: int, step: int = 1) -> bool:
    """True when the 2x2 neighbourhood at (row, col) holds one value."""
    v = _sample(plane, row, col)
    return bool(
        v == _sample(plane, row, col + step)
        and v == _sample(plane, row + 1, col)
        and v == _sample(plane, row + 1, col + step)
    )


def along_line_interpolate(line, center: int, step: int, span: int, quant: int, coeffs) -> float:
    """One-dimensional interpolation along a line of samples around center."""
    weights = coeffs[quant]
    total = 0.0
    for i in range(span):
        pos = center + (i + 1 - span // 2) * step
        if pos < 0:
            raise IndexError(f"sample {pos} lies outside the line")
        total += float(weights[i]) * float(line[pos])
    return total