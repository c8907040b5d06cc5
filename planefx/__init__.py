"""Plane-level video filters and helpers on numpy arrays."""

__version__ = "0.1.0"

__all__ = [
    "videoinfo",
    "interpolation",
    "quad",
    "watershed",
    "stepfilter",
    "amplitude",
    "gblur",
    "colorbox",
]