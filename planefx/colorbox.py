"""Synthetic test-pattern source made of coloured boxes.

The luma plane is split into a grid of boxes, each filled with a flat
brightness slightly below the requested level. The chroma planes get box
colours that step from box to box. The middle row and middle column of
boxes also carry gradients inside the box.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from .videoinfo import ColorFamily, SampleType, VideoFormat, VideoInfo

_WIDTH = 640
_HEIGHT = 480
_FPS_NUM = 24
_FPS_DEN = 1
_DTYPES = {1: np.uint8, 2: np.uint16, 4: np.float32}

Frame = Tuple[List[np.ndarray], Dict[str, int]]


def fill_plane(plane, value, width: int, height: int) -> np.ndarray:
    """Return a copy of ``plane`` with its top-left ``height`` x ``width`` area set to ``value``."""
    out = np.array(plane, copy=True)
    if out.ndim != 2:
        raise ValueError("plane must be a 2-D array")
    if width < 0 or height < 0:
        raise ValueError("width and height must not be negative")
    if height > out.shape[0] or width > out.shape[1]:
        raise ValueError("area to fill exceeds the plane")
    out[:height, :width] = value
    return out


def paint_box(plane, color, winc, hinc, bits: int) -> np.ndarray:
    """Return an array shaped like ``plane`` painted with a colour gradient.

    Each row starts at ``color`` advanced by ``hinc`` per row; along the row
    the value advances by ``winc`` and wraps at ``bits`` bits. Integer
    samples of up to 8 bits live in a byte, up to 16 bits in a 16-bit word.
    Wider ``bits`` paint float samples from a byte-sized gradient centred on
    zero, with ``color``, ``winc`` and ``hinc`` given as fractions of 255.
    """
    arr = np.asarray(plane)
    if arr.ndim != 2:
        raise ValueError("plane must be a 2-D array")
    ht, wd = arr.shape
    rows_idx = np.arange(ht, dtype=np.int64)
    cols_idx = np.arange(wd, dtype=np.int64)

    if bits <= 16:
        type_mod = 256 if bits == 8 else 65536
        mask = (1 << bits) - 1
        start = int(color) % type_mod
        step_w = int(winc) % type_mod
        step_h = int(hinc) % type_mod
        rows = (start + rows_idx * step_h) % type_mod
        vals = (rows[:, None] + cols_idx[None, :] * step_w) & mask
        if wd:
            # The first sample of a row is stored before any wrapping mask.
            vals[:, 0] = rows
        return vals.astype(arr.dtype)

    scale = np.float32(255)
    col8 = int(scale * np.float32(color)) & 0xFF
    winc8 = int(scale * np.float32(winc)) & 0xFF
    hinc8 = int(scale * np.float32(hinc)) & 0xFF
    rows = (col8 + rows_idx * hinc8) % 256
    vals = (rows[:, None] + cols_idx[None, :] * winc8) & 0xFF
    return ((vals - 128) / 255.0).astype(arr.dtype)


def _box_sizes(total: int, count: int) -> List[int]:
    base = total // count
    return [base] * (count - 1) + [base + total % count]


@dataclass
class ColorBox:
    """Colour-box pattern generator producing 640x480 frames at 24 fps.

    ``luma`` is the brightness percentage (1..99), ``nbw`` and ``nbh`` the
    number of boxes across and down (2..12). Only YUV formats with integer
    or single-precision float samples are accepted.
    """

    fmt: VideoFormat = field(
        default_factory=lambda: VideoFormat(ColorFamily.YUV, SampleType.INTEGER, 8)
    )
    luma: int = 40
    nbw: int = 6
    nbh: int = 4
    rng: random.Random = field(default_factory=random.Random, repr=False)
    _cached: Optional[Frame] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.luma > 99 or self.luma < 1:
            raise ValueError("ColorBox: Luma percentage must be between 1 & 99")
        if self.nbw > 12 or self.nbw < 2:
            raise ValueError("ColorBox: nbw must be between 2 and 12")
        if self.nbh > 12 or self.nbh < 2:
            raise ValueError("ColorBox: nbh must be between 2 and 12")
        fmt = self.fmt
        if fmt.color_family is not ColorFamily.YUV or (
            fmt.sample_type is SampleType.FLOAT and fmt.bits_per_sample != 32
        ):
            raise ValueError("ColorBox: YUV integer and single float formats only allowed")
        if fmt.bytes_per_sample not in _DTYPES:
            raise ValueError("ColorBox: invalid format")

    @property
    def video_info(self) -> VideoInfo:
        """Clip properties of the generated pattern."""
        return VideoInfo(
            format=self.fmt,
            width=_WIDTH,
            height=_HEIGHT,
            fps_num=_FPS_NUM,
            fps_den=_FPS_DEN,
            num_frames=(_FPS_NUM * 100) // _FPS_DEN,
        )

    def _luma_plane(self, dtype) -> np.ndarray:
        fmt = self.fmt
        bits = fmt.bits_per_sample
        is_float = fmt.sample_type is SampleType.FLOAT
        plane = np.zeros((_HEIGHT, _WIDTH), dtype=dtype)
        brightness = np.float32(self.luma) / np.float32(100)
        spread = self.luma // 4
        type_mask = (1 << (8 * fmt.bytes_per_sample)) - 1

        r0 = 0
        for nht in _box_sizes(_HEIGHT, self.nbh):
            c0 = 0
            for nwd in _box_sizes(_WIDTH, self.nbw):
                dip = self.rng.randrange(spread) if spread > 0 else 0
                bright = brightness - np.float32(dip) / np.float32(100)
                if is_float:
                    value = bright
                else:
                    value = int(bright * np.float32(1 << bits)) & type_mask
                plane[r0:r0 + nht, c0:c0 + nwd] = value
                c0 += nwd
            r0 += nht
        return plane

    def _chroma_plane(self, index: int, dtype) -> np.ndarray:
        fmt = self.fmt
        bits = fmt.bits_per_sample
        sub_w, sub_h = fmt.sub_sampling_w, fmt.sub_sampling_h
        ht, wd = _HEIGHT >> sub_h, _WIDTH >> sub_w
        plane = np.zeros((ht, wd), dtype=dtype)

        w_box = (29 if index == 1 else 79) << sub_w
        h_box = (117 if index == 1 else 47) << sub_h
        w_inc = 4 << sub_w
        h_inc = 4 << sub_h

        if fmt.sample_type is SampleType.FLOAT:
            scale = np.float32(255)
            col = np.float32(96) / scale
            win = np.float32(w_inc) / scale
            hin = np.float32(h_inc) / scale
            w_step = np.float32(w_box) / scale
            h_step = np.float32(h_box) / scale
            zero = np.float32(0)

            def advance(value, step):
                return np.float32(value + step)
        else:
            type_mod = 256 if fmt.bytes_per_sample == 1 else 65536
            shift = bits - 8
            col = (96 << shift) % type_mod
            win = (w_inc << shift) % type_mod
            hin = (h_inc << shift) % type_mod
            w_step = (w_box << shift) % type_mod
            h_step = (h_box << shift) % type_mod
            zero = 0

            def advance(value, step):
                return (value + step) % type_mod

        box_ht = ht // self.nbh
        box_wd = wd // self.nbw
        heights = _box_sizes(ht, self.nbh)
        widths = _box_sizes(wd, self.nbw)

        for nh, nht in enumerate(heights):
            r0 = nh * box_ht
            hinc = hin if nh == self.nbh // 2 else zero
            for nw, nwd in enumerate(widths):
                c0 = nw * box_wd
                winc = win if nw == self.nbw // 2 else zero
                region = plane[r0:r0 + nht, c0:c0 + nwd]
                plane[r0:r0 + nht, c0:c0 + nwd] = paint_box(region, col, winc, hinc, bits)
                col = advance(col, w_step)
            col = advance(col, h_step)
        return plane

    def make_frame(self) -> Frame:
        """Build a fresh frame: ``(planes, properties)``."""
        dtype = _DTYPES[self.fmt.bytes_per_sample]
        planes = [self._luma_plane(dtype)]
        planes.extend(
            self._chroma_plane(index, dtype) for index in range(1, self.fmt.num_planes)
        )
        props: Dict[str, int] = {}
        if _FPS_NUM > 0:
            props["_DurationNum"] = _FPS_DEN
            props["_DurationDen"] = _FPS_NUM
        return planes, props

    def get_frame(self, n: int) -> Frame:
        """Return frame ``n``; every frame is the same read-only pattern."""
        if not 0 <= n < self.video_info.num_frames:
            raise IndexError(f"frame {n} is outside the clip")
        if self._cached is None:
            planes, props = self.make_frame()
            for plane in planes:
                plane.setflags(write=False)
            self._cached = (planes, props)
        planes, props = self._cached
        return planes, dict(props)