"""Segment-guided smoothing and sharpening of video planes.

A plane (or a separate guide plane) is split into basins by watershed
segmentation. Samples are then smoothed using only neighbours from the same
basin, and samples on the watershed lines are scaled to sharpen edges.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .videoinfo import ColorFamily, SampleType, VideoFormat
from .watershed import watershed


def _check_2d(arr: np.ndarray, name: str) -> None:
    if arr.ndim != 2 or arr.size == 0:
        raise ValueError(f"{name} must be a non-empty 2-D array")


def _cast_like(values: np.ndarray, like: np.ndarray) -> np.ndarray:
    if np.issubdtype(like.dtype, np.integer):
        return np.trunc(values).astype(like.dtype)
    return values.astype(like.dtype)


def segment_smooth(values, tags, weight: int) -> np.ndarray:
    """Smooth each sample with its 3x3 neighbours that share its basin tag.

    The sample itself counts ``weight + 2`` times, the other four close
    neighbours twice and the corner neighbours once.
    """
    vals = np.asarray(values)
    tg = np.asarray(tags)
    _check_2d(vals, "values")
    if tg.shape != vals.shape:
        raise ValueError("tags must have the same shape as values")
    if weight < 0:
        raise ValueError("weight must not be negative")

    ht, wd = vals.shape
    data = vals.astype(np.float64)
    total = data * weight
    count = np.full(vals.shape, float(weight))

    padded_vals = np.pad(data, 1)
    padded_tags = np.pad(tg, 1)
    inside = np.pad(np.ones(vals.shape, dtype=bool), 1)

    for dh in (-1, 0, 1):
        for dw in (-1, 0, 1):
            window = (slice(1 + dh, 1 + dh + ht), slice(1 + dw, 1 + dw + wd))
            match = inside[window] & (padded_tags[window] == tg)
            factor = 2 if dh == 0 or dw == 0 else 1
            total += np.where(match, padded_vals[window] * factor, 0.0)
            count += match * factor

    return _cast_like(total / count, vals)


def segment_sharp(dst, src, watershed_mask, sharpness: int, low, high) -> np.ndarray:
    """Scale samples on watershed lines by (100 + sharpness) percent.

    Returns a copy of ``dst`` where masked samples are replaced by the
    scaled ``src`` samples clamped to [low, high].
    """
    out = np.array(dst, copy=True)
    source = np.asarray(src)
    mask = np.asarray(watershed_mask, dtype=bool)
    _check_2d(out, "dst")
    if source.shape != out.shape or mask.shape != out.shape:
        raise ValueError("dst, src and watershed_mask must share one shape")

    if np.issubdtype(source.dtype, np.integer):
        scaled = source.astype(np.int64) * (100 + sharpness) / 100.0
    else:
        scaled = source.astype(np.float64) * (100 + sharpness) / 100.0
    clipped = np.where(scaled > high, high, np.where(scaled < low, low, scaled))
    out[mask] = _cast_like(clipped, out)[mask]
    return out


def _expand(values: Sequence[int], name: str) -> Tuple[int, int, int]:
    items = [int(v) for v in values]
    if not items or len(items) > 3:
        raise ValueError(
            f"Amp: {name} array must specify not more than 3 and at least first "
            "of 3 values corresponding to 3 planes"
        )
    while len(items) < 3:
        items.append(items[-1])
    return items[0], items[1], items[2]


@dataclass
class Amplitude:
    """Watershed-guided amplitude modifier.

    ``sh`` gives per-plane sharpening (-5..5) and ``sm`` per-plane smoothing
    (0..10); missing trailing entries repeat the last one given. With
    ``connect4`` False, diagonal neighbours are connected in segmentation.
    """

    sh: Sequence[int] = field(default_factory=lambda: (0,))
    sm: Sequence[int] = field(default_factory=lambda: (0,))
    connect4: bool = True

    def __post_init__(self) -> None:
        self.sh = _expand(self.sh, "sh")
        if any(v < -5 or v > 5 for v in self.sh):
            raise ValueError(
                "Amp: sh values must be between - 5 and 5. If 0 no sharpening will be done"
            )
        self.sm = _expand(self.sm, "sm")
        if any(v < 0 or v > 10 for v in self.sm):
            raise ValueError(
                "Amp: sm values must be between 0 and 10. If 0 no smoothening will be done"
            )
        if sum(abs(v) + self.sm[0] for v in self.sh) == 0:
            raise ValueError("Amp: all sh and sm values are zero so no processing is opted")
        self.connect4 = bool(self.connect4)

    def process_plane(self, plane, segment_plane, index: int, low, high) -> np.ndarray:
        """Process one plane using the settings for plane ``index``.

        ``segment_plane`` guides the segmentation; None uses the plane itself.
        """
        src = np.asarray(plane)
        _check_2d(src, "plane")
        smooth = self.sm[index]
        sharp = self.sh[index]
        if smooth == 0 and sharp == 0:
            return src.copy()

        guide = src if segment_plane is None else np.asarray(segment_plane)
        if guide.shape != src.shape:
            raise ValueError("segment plane must have the same shape as the plane")

        tags, mask = watershed(guide, self.connect4)
        out = src.copy()
        if smooth > 0:
            out = segment_smooth(src, tags, 10 - smooth)
        if sharp != 0:
            out = segment_sharp(out, src, mask, sharp, low, high)
        return out

    @staticmethod
    def _bounds(fmt: VideoFormat, index: int):
        if fmt.sample_type is SampleType.INTEGER:
            return 0, (1 << fmt.bits_per_sample) - 1
        if index == 0 or fmt.color_family is ColorFamily.RGB:
            return 0.0, 1.0
        return -0.5, 0.5

    def process(
        self, planes: Sequence, fmt: VideoFormat, segment_planes: Optional[Sequence] = None
    ) -> List[np.ndarray]:
        """Process a frame given as a list of planes.

        ``segment_planes``, when given, is a frame of the same format whose
        planes guide the segmentation.
        """
        if fmt.color_family not in (ColorFamily.RGB, ColorFamily.YUV, ColorFamily.GRAY):
            raise ValueError("Amp: RGB, YUV and Gray color formats only for input allowed")
        if fmt.sample_type is SampleType.FLOAT and fmt.bits_per_sample == 16:
            raise ValueError("Amp: Half float formats not allowed")

        arrays = [np.asarray(p) for p in planes]
        if not arrays:
            raise ValueError("a frame needs at least one plane")
        guides: List[Optional[np.ndarray]] = [None] * len(arrays)
        if segment_planes is not None:
            guide_arrays = [np.asarray(p) for p in segment_planes]
            if len(guide_arrays) != len(arrays) or any(
                g.shape != a.shape or g.dtype != a.dtype
                for g, a in zip(guide_arrays, arrays)
            ):
                raise ValueError(
                    "Amp: for use clip option both clips must have constant and "
                    "identical formats"
                )
            guides = list(guide_arrays)

        out = []
        for index, (plane, guide) in enumerate(zip(arrays, guides)):
            if index >= 3:
                out.append(plane.copy())
                continue
            low, high = self._bounds(fmt, index)
            out.append(self.process_plane(plane, guide, index, low, high))
        return out