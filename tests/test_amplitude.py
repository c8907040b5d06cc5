import numpy as np
import pytest

from planefx.amplitude import Amplitude, segment_sharp, segment_smooth
from planefx.videoinfo import ColorFamily, SampleType, VideoFormat
from planefx.watershed import watershed

GRAY8 = VideoFormat(ColorFamily.GRAY, SampleType.INTEGER, 8)
YUV8 = VideoFormat(ColorFamily.YUV, SampleType.INTEGER, 8)
HALF = VideoFormat(ColorFamily.GRAY, SampleType.FLOAT, 16)
COMPAT = VideoFormat(ColorFamily.COMPAT, SampleType.INTEGER, 8)


def _ramp(ht=8, wd=10):
    rows = np.arange(ht)[:, None]
    cols = np.arange(wd)[None, :]
    return ((rows * 7 + cols * 13) % 200 + 20).astype(np.uint8)


def test_smooth_constant_plane_unchanged():
    vals = np.full((5, 6), 77, dtype=np.uint8)
    tags = np.ones((5, 6), dtype=np.int32)
    out = segment_smooth(vals, tags, 3)
    assert np.array_equal(out, vals)
    assert out.dtype == np.uint8


def test_smooth_isolated_basins_unchanged():
    vals = np.arange(12, dtype=np.uint16).reshape(3, 4) * 10
    tags = np.arange(1, 13, dtype=np.int32).reshape(3, 4)
    out = segment_smooth(vals, tags, 0)
    assert np.array_equal(out, vals)


def test_smooth_pair_in_same_basin():
    vals = np.array([[0, 10]], dtype=np.uint8)
    tags = np.array([[1, 1]], dtype=np.int32)
    out = segment_smooth(vals, tags, 0)
    assert out.tolist() == [[5, 5]]


def test_smooth_stays_within_value_range():
    vals = _ramp()
    tags = np.ones(vals.shape, dtype=np.int32)
    out = segment_smooth(vals, tags, 2)
    assert out.min() >= vals.min()
    assert out.max() <= vals.max()


def test_smooth_rejects_bad_shapes_and_weight():
    vals = np.zeros((3, 3), dtype=np.uint8)
    with pytest.raises(ValueError):
        segment_smooth(vals, np.zeros((2, 3), dtype=np.int32), 1)
    with pytest.raises(ValueError):
        segment_smooth(vals, np.zeros((3, 3), dtype=np.int32), -1)


def test_sharp_only_changes_masked_samples():
    src = np.full((3, 3), 200, dtype=np.uint8)
    dst = np.full((3, 3), 100, dtype=np.uint8)
    mask = np.zeros((3, 3), dtype=bool)
    mask[1, 1] = True
    out = segment_sharp(dst, src, mask, 5, 0, 255)
    assert out[1, 1] == 210
    assert np.array_equal(out[~mask], dst[~mask])


def test_sharp_clamps_to_bounds():
    src = np.array([[250, 10]], dtype=np.uint8)
    mask = np.ones((1, 2), dtype=bool)
    high = segment_sharp(src, src, mask, 5, 0, 255)
    assert high[0, 0] == 255
    low = segment_sharp(src, src, mask, -5, 16, 235)
    assert low[0, 1] == 16


def test_sharp_float_plane():
    src = np.array([[0.5, 0.5]], dtype=np.float32)
    mask = np.array([[True, False]])
    out = segment_sharp(src, src, mask, 4, 0.0, 1.0)
    assert out[0, 0] == pytest.approx(0.52, rel=1e-6)
    assert out[0, 1] == pytest.approx(0.5)


def test_settings_expand_last_value():
    amp = Amplitude(sh=[2], sm=[3, 1])
    assert amp.sh == (2, 2, 2)
    assert amp.sm == (3, 1, 1)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"sh": [6], "sm": [0]},
        {"sh": [0], "sm": [11]},
        {"sh": [1, 1, 1, 1], "sm": [0]},
        {"sh": [], "sm": [1]},
        {"sh": [0], "sm": [0]},
    ],
)
def test_invalid_settings_raise(kwargs):
    with pytest.raises(ValueError):
        Amplitude(**kwargs)


def test_all_zero_check_uses_first_smoothing_value():
    with pytest.raises(ValueError, match="all sh and sm values are zero"):
        Amplitude(sh=[0], sm=[0, 5])


def test_constant_plane_unchanged_by_smoothing():
    plane = np.full((6, 6), 90, dtype=np.uint8)
    out = Amplitude(sh=[0], sm=[5]).process([plane], GRAY8)
    assert np.array_equal(out[0], plane)


def test_sharpen_only_touches_watershed_pixels():
    plane = _ramp()
    amp = Amplitude(sh=[3], sm=[0])
    out = amp.process([plane], GRAY8)[0]
    _, mask = watershed(plane, True)
    assert np.array_equal(out[~mask], plane[~mask])
    assert np.all(out[mask] >= plane[mask])


def test_smoothing_output_within_input_range():
    plane = _ramp()
    out = Amplitude(sh=[0], sm=[8], connect4=False).process([plane], GRAY8)[0]
    assert out.shape == plane.shape
    assert out.min() >= plane.min()
    assert out.max() <= plane.max()


def test_unselected_planes_are_copied():
    y = _ramp()
    u = _ramp()[::-1].copy()
    v = _ramp()[:, ::-1].copy()
    amp = Amplitude(sh=[2, 0, 0], sm=[4, 0, 0])
    out = amp.process([y, u, v], YUV8)
    assert np.array_equal(out[1], u)
    assert np.array_equal(out[2], v)


def test_segment_plane_guides_segmentation():
    plane = _ramp()
    guide = np.full(plane.shape, 50, dtype=np.uint8)
    out = Amplitude(sh=[0], sm=[10]).process([plane], GRAY8, [guide])[0]
    tags, _ = watershed(guide, True)
    assert np.array_equal(out, segment_smooth(plane, tags, 0))


def test_segment_planes_must_match():
    plane = _ramp()
    with pytest.raises(ValueError):
        Amplitude(sh=[1]).process([plane], GRAY8, [plane[:4]])


@pytest.mark.parametrize("fmt", [HALF, COMPAT])
def test_unsupported_formats_raise(fmt):
    plane = np.zeros((4, 4), dtype=np.uint8)
    with pytest.raises(ValueError):
        Amplitude(sh=[1]).process([plane], fmt)