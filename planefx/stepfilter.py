"""Flatten regular additive or multiplicative banding in video planes.

Line averages are pulled towards a frame (or vertical segment) average,
optionally using a sliding horizontal segment for local correction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .videoinfo import ColorFamily, SampleType, VideoFormat


def line_average(line) -> float:
    """Mean of a line of samples."""
    arr = np.asarray(line, dtype=np.float64).ravel()
    if arr.size == 0:
        raise ValueError("cannot average an empty line")
    return float(arr.sum() / arr.size)


def frame_average(rows, boost: float) -> float:
    """Mean of the line averages of ``rows``, scaled by ``boost``."""
    arr = np.asarray(rows, dtype=np.float64)
    if arr.ndim != 2 or arr.size == 0:
        raise ValueError("rows must be a non-empty 2-D array")
    return float(boost * arr.mean(axis=1).sum() / arr.shape[0])


def _divide(num, den):
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.divide(np.float64(num), np.asarray(den, dtype=np.float64))


def _apply(values, corr, low, high, add: bool, limit: bool) -> np.ndarray:
    """Add or multiply per-sample corrections, clamp and cast back."""
    vals = np.asarray(values)
    corrs = np.broadcast_to(np.asarray(corr, dtype=np.float64), vals.shape)
    data = vals.astype(np.float64)
    with np.errstate(invalid="ignore", over="ignore"):
        new = data + corrs if add else data * corrs
        new = np.where(new < low, low, np.where(new > high, high, new))
        new = np.where(np.isnan(new), low, new)
    if np.issubdtype(vals.dtype, np.integer):
        result = np.trunc(new).astype(vals.dtype)
    else:
        result = new.astype(vals.dtype)
    if limit:
        result = np.where(corrs < 0, vals, result)
    return result


def correct_line(line, corr: float, low, high, add: bool, limit: bool) -> np.ndarray:
    """Return the line with ``corr`` added (or multiplied) and clamped.

    With ``limit`` set, a negative correction leaves the line unchanged.
    """
    arr = np.asarray(line)
    if limit and corr < 0:
        return arr.copy()
    return _apply(arr, corr, low, high, add, limit)


@dataclass
class StepFilter:
    """Banding corrector.

    ``segmenthor`` and ``segmentvert`` are the horizontal and vertical
    segment sizes; zero means the whole line or the whole frame.
    """

    add: bool = True
    boost: float = 1.0
    segmenthor: int = 60
    segmentvert: int = 60
    limit: bool = False

    def __post_init__(self) -> None:
        if not 0.5 <= self.boost <= 5.0:
            raise ValueError("StepFilter: boost must have a value between 0.5 and 5.0")

    def validate(self, width: int, height: int) -> None:
        """Check the segment sizes against a frame size."""
        if self.segmenthor != 0 and self.segmenthor < 16 and self.segmenthor >= width // 2:
            raise ValueError(
                "StepFilter: segmenthor must be either zero or have a value "
                "between 16 and frame width / 2"
            )
        if self.segmentvert != 0 and self.segmentvert < 16 and self.segmentvert >= height // 2:
            raise ValueError(
                "StepFilter: segmentvert must be either zero or have a value "
                "between 16 and frame height / 2"
            )

    def _factor(self, target: float, average: float) -> float:
        return float(target - average if self.add else _divide(target, average))

    def _correct_row(self, row: np.ndarray, row_data: np.ndarray, corr: float, low, high):
        seg = self.segmenthor
        if seg == 0:
            avg = line_average(row_data)
            line_corr = corr - avg if self.add else float(_divide(corr, avg))
            return correct_line(row, line_corr, low, high, self.add, self.limit)

        wd = row.shape[0]
        half = seg // 2
        result = row.copy()
        target = corr * self.boost

        left = self._factor(target, line_average(row_data[:seg]))
        result[:half] = correct_line(row[:half], left, low, high, self.add, self.limit)

        if wd > seg:
            sums = np.concatenate(([0.0], np.cumsum(row_data)))
            averages = (sums[seg:wd] - sums[: wd - seg]) / seg
            corrs = corr - averages if self.add else _divide(corr, averages)
            span = slice(half, half + wd - seg)
            result[span] = _apply(row[span], corrs, low, high, self.add, self.limit)

        right = self._factor(target, line_average(row_data[wd - seg:]))
        result[wd - half:] = correct_line(
            row[wd - half:], right, low, high, self.add, self.limit
        )
        return result

    def process_plane(self, plane, low, high) -> np.ndarray:
        """Return a corrected copy of one plane with samples clamped to [low, high]."""
        src = np.asarray(plane)
        if src.ndim != 2 or src.size == 0:
            raise ValueError("plane must be a non-empty 2-D array")
        ht, wd = src.shape
        if self.segmenthor < 0 or self.segmentvert < 0:
            raise ValueError("segment sizes must not be negative")
        if self.segmenthor > wd or self.segmentvert > ht:
            raise ValueError("segment sizes must not exceed the plane size")

        out = src.copy()
        data = src.astype(np.float64)
        if self.segmentvert == 0:
            corr = frame_average(data, self.boost)
            for r in range(ht):
                out[r] = self._correct_row(src[r], data[r], corr, low, high)
        else:
            seg = self.segmentvert
            for h in range(ht - seg):
                corr = frame_average(data[h:h + seg], self.boost)
                r = h + seg // 2
                out[r] = self._correct_row(src[r], data[r], corr, low, high)
        return out

    @staticmethod
    def _bounds(fmt: VideoFormat) -> Optional[Tuple[float, float]]:
        if fmt.sample_type is SampleType.FLOAT:
            return 0.0, 1.0
        yuv = fmt.color_family is ColorFamily.YUV
        if fmt.bytes_per_sample == 1:
            return (16, 235) if yuv else (0, 255)
        if fmt.bytes_per_sample == 2:
            shift = fmt.bits_per_sample - 8
            return (16 << shift, 235 << shift) if yuv else (0, 255 << shift)
        return None

    def process(self, planes: Sequence, fmt: VideoFormat) -> List[np.ndarray]:
        """Correct a frame given as a list of planes.

        All three planes of RGB are corrected; only the first plane of YUV
        and Gray. Other planes are returned as copies.
        """
        if fmt.color_family not in (ColorFamily.RGB, ColorFamily.YUV, ColorFamily.GRAY):
            raise ValueError("StepFilter: RGB, YUV and Gray color formats only for input allowed")
        if fmt.sample_type is SampleType.FLOAT and fmt.bits_per_sample == 16:
            raise ValueError("StepFilter: Half float formats not allowed")
        arrays = [np.asarray(p) for p in planes]
        if not arrays:
            raise ValueError("a frame needs at least one plane")
        height, width = arrays[0].shape
        self.validate(width, height)

        out = [a.copy() for a in arrays]
        bounds = self._bounds(fmt)
        if bounds is None:
            return out
        count = 3 if fmt.color_family is ColorFamily.RGB else 1
        for i in range(min(count, len(arrays))):
            out[i] = self.process_plane(arrays[i], *bounds)
        return out