"""Video format descriptions and small rational-number helpers."""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass
from typing import Optional, Tuple

INT_MAX = 2**31 - 1
INT_MIN = -(2**31)


class ColorFamily(enum.Enum):
    """Colour family of a video format."""

    GRAY = "gray"
    RGB = "rgb"
    YUV = "yuv"
    COMPAT = "compat"


class SampleType(enum.Enum):
    """Whether samples are stored as integers or floats."""

    INTEGER = "integer"
    FLOAT = "float"


@dataclass(frozen=True)
class VideoFormat:
    """Description of a planar video format."""

    color_family: ColorFamily
    sample_type: SampleType
    bits_per_sample: int
    sub_sampling_w: int = 0
    sub_sampling_h: int = 0

    @property
    def bytes_per_sample(self) -> int:
        return (self.bits_per_sample + 7) // 8

    @property
    def num_planes(self) -> int:
        return 1 if self.color_family is ColorFamily.GRAY else 3

    def is_valid_dimensions(self, width: int, height: int) -> bool:
        """True when the frame size is divisible by the subsampling factors."""
        return not (
            width % (1 << self.sub_sampling_w) or height % (1 << self.sub_sampling_h)
        )


@dataclass
class VideoInfo:
    """Clip-wide properties: format, size, frame rate and length."""

    format: Optional[VideoFormat] = None
    width: int = 0
    height: int = 0
    fps_num: int = 0
    fps_den: int = 0
    num_frames: int = 0

    def is_constant_format(self) -> bool:
        """True when size and format never change between frames."""
        return self.height > 0 and self.width > 0 and self.format is not None

    def is_same_format(self, other: "VideoInfo") -> bool:
        """True when both clips share dimensions and format."""
        return (
            self.height == other.height
            and self.width == other.width
            and self.format == other.format
        )


def int64_to_int(value: int) -> int:
    """Saturate an integer to the 32-bit signed range."""
    if value > INT_MAX:
        return INT_MAX
    if value < INT_MIN:
        return INT_MIN
    return int(value)


def muldiv_rational(num: int, den: int, mul: int, div: int) -> Tuple[int, int]:
    """Multiply num/den by mul/div and reduce the result.

    An invalid rational (zero denominator) is returned unchanged.
    """
    if not den:
        return num, den
    if not div:
        raise ValueError("divisor must not be zero")
    num *= mul
    den *= div
    divisor = math.gcd(num, den)
    return num // divisor, den // divisor


def normalize_rational(num: int, den: int) -> Tuple[int, int]:
    """Reduce a rational number."""
    return muldiv_rational(num, den, 1, 1)


def add_rational(num: int, den: int, addnum: int, addden: int) -> Tuple[int, int]:
    """Add addnum/addden to num/den.

    Equal denominators are added directly without reduction; otherwise the
    sum is reduced. An invalid rational (zero denominator) is returned unchanged.
    """
    if not den:
        return num, den
    if not addden:
        raise ValueError("denominator of the addend must not be zero")
    if den == addden:
        return num + addnum, den
    total_num = num * addden + addnum * den
    total_den = den * addden
    return normalize_rational(total_num, total_den)