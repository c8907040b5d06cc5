"""Separable Gaussian blur of video planes.

The kernel is applied in place, first along every row and then along every
column. Each result is written back at once, so later windows see the
values already blurred. Samples near the right and bottom borders, and the
first ``ksize // 2`` rows and columns, are left as they are.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .videoinfo import ColorFamily, SampleType, VideoFormat

_E = 2.71828
_TWO_PI = 6.2831853


def _gauss(offset: float, sd: float) -> float:
    return _E ** (-(0.5 * offset * offset) / (sd * sd)) / (sd * math.sqrt(_TWO_PI))


def _store(values: np.ndarray, dtype) -> np.ndarray:
    """Convert computed samples to the plane's sample type."""
    if np.issubdtype(dtype, np.integer):
        info = np.iinfo(dtype)
        return np.trunc(np.clip(values, info.min, info.max)).astype(dtype)
    return values.astype(dtype)


def gaussian_kernel(ksize: int, sd: float) -> np.ndarray:
    """Normalised Gaussian weights of length ``ksize`` centred on ``ksize // 2``."""
    if ksize < 1:
        raise ValueError("ksize must be at least 1")
    if sd <= 0:
        raise ValueError("sd must be positive")
    centre = ksize // 2
    weights = np.array([_gauss(i - centre, sd) for i in range(ksize)], dtype=np.float64)
    return (weights / weights.sum()).astype(np.float32)


def effective_ksize(ksize: int, sd: float, bits: int) -> int:
    """Largest kernel size, not above ``ksize``, whose outer weight still matters.

    The size shrinks by two until the outermost unnormalised weight, scaled
    by the largest sample value of ``bits``-bit samples, reaches one.
    """
    if sd <= 0:
        raise ValueError("sd must be positive")
    maxval = (1 << bits) - 1
    while ksize > 1:
        if maxval * _gauss(ksize // 2, sd) >= 1:
            break
        ksize -= 2
    return ksize


def blur_plane(plane, kernel) -> np.ndarray:
    """Return a blurred copy of a 2-D plane using a 1-D separable kernel."""
    src = np.asarray(plane)
    if src.ndim != 2 or src.size == 0:
        raise ValueError("plane must be a non-empty 2-D array")
    weights = np.asarray(kernel, dtype=np.float64).ravel()
    ksize = weights.size
    if ksize == 0:
        raise ValueError("kernel must not be empty")

    out = src.copy()
    ht, wd = out.shape
    half = ksize // 2

    for w in range(wd - ksize):
        sums = out[:, w:w + ksize].astype(np.float64) @ weights
        out[:, w + half] = _store(sums, out.dtype)

    for h in range(ht - ksize):
        sums = weights @ out[h:h + ksize, :].astype(np.float64)
        out[h + half, :] = _store(sums, out.dtype)

    return out


@dataclass
class GBlur:
    """Gaussian blur filter.

    ``ksize`` is an odd kernel size from 3 to 11 and ``sd`` the standard
    deviation. When ``clip_format`` is given and holds integer samples, a
    kernel too wide to make any difference is rejected.
    """

    ksize: int = 5
    sd: float = 1.5
    clip_format: Optional[VideoFormat] = None

    def __post_init__(self) -> None:
        if self.ksize < 3 or self.ksize > 11 or self.ksize % 2 == 0:
            raise ValueError("gBlur: ksize need to be an odd number between 3 and 11")
        if self.sd < 0.01:
            raise ValueError("gBlur: sd must have a value above 0.01")
        fmt = self.clip_format
        if fmt is None:
            return
        if fmt.color_family is ColorFamily.COMPAT:
            raise ValueError("gBlur: compat format input is not supported")
        if fmt.sample_type is SampleType.INTEGER:
            if effective_ksize(self.ksize, self.sd, fmt.bits_per_sample) < self.ksize:
                raise ValueError("gBlur: either decrease ksize or increase sd to be effective")

    @staticmethod
    def _wanted(index: int, fmt: VideoFormat) -> bool:
        if index >= fmt.num_planes:
            return False
        if index == 0 or fmt.color_family is ColorFamily.RGB:
            return True
        return (
            fmt.color_family is ColorFamily.YUV
            and fmt.sub_sampling_h == 0
            and fmt.sub_sampling_w == 0
        )

    def process(self, planes: Sequence, fmt: VideoFormat) -> List[np.ndarray]:
        """Blur a frame given as a list of planes.

        The first plane is always blurred, all planes of RGB and of
        unsubsampled YUV too. Integer frames use a kernel reduced to the size
        that still has an effect; if that is below 3 the frame is returned
        unchanged.
        """
        if fmt.color_family is ColorFamily.COMPAT:
            raise ValueError("gBlur: compat format input is not supported")
        arrays = [np.asarray(p) for p in planes]
        if not arrays:
            raise ValueError("a frame needs at least one plane")

        if fmt.sample_type is SampleType.INTEGER:
            ksize = effective_ksize(self.ksize, self.sd, fmt.bits_per_sample)
            if ksize < 3:
                return [a.copy() for a in arrays]
        else:
            ksize = self.ksize
        kernel = gaussian_kernel(ksize, self.sd)

        return [
            blur_plane(a, kernel) if self._wanted(i, fmt) else a.copy()
            for i, a in enumerate(arrays)
        ]