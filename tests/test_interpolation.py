import numpy as np
import pytest

from planefx.interpolation import (
    along_line_interpolate,
    best_of_nine,
    best_of_nine_index,
    best_of_nine_index_fraction,
    clamp,
    cubic_coefficients,
    interpolation_scheme,
    lanczos_coefficients,
    lanczos_quantile,
    linear_coefficients,
    need_not_interpolate,
    sinc,
)


@pytest.fixture
def ramp():
    return np.arange(100, dtype=np.float32).reshape(10, 10)


def test_clamp():
    assert clamp(5, 0, 10) == 5
    assert clamp(-3, 0, 10) == 0
    assert clamp(12.5, 0.0, 10.0) == 10.0


def test_sinc_values():
    assert sinc(0.0) == 1.0
    for k in (1, 2, 3):
        assert sinc(float(k)) == pytest.approx(0.0, abs=1e-12)
    assert sinc(-0.3) == pytest.approx(sinc(0.3))


def test_linear_coefficients_rows():
    table = linear_coefficients(8)
    assert table.shape == (9, 2)
    np.testing.assert_allclose(table.sum(axis=1), 1.0, rtol=1e-6)
    assert np.all(np.diff(table[:, 0]) < 0)
    assert table[0, 1] == 0.0


def test_cubic_coefficients_normalised():
    table = cubic_coefficients(16)
    assert table.shape == (17, 4)
    np.testing.assert_allclose(table.sum(axis=1), 1.0, rtol=1e-6)
    assert table[0, 1] == pytest.approx(1.0)
    assert table[16, 2] == pytest.approx(1.0)


@pytest.mark.parametrize("span", [4, 6])
def test_lanczos_coefficients(span):
    table = lanczos_coefficients(span, 10)
    assert table.shape == (11, span)
    np.testing.assert_allclose(table.sum(axis=1), 1.0, rtol=1e-5)
    assert table[0, span // 2 - 1] == 1.0
    assert table[0].sum() == 1.0
    assert table[10, span // 2] == 1.0


def test_interpolation_scheme():
    assert interpolation_scheme(1, 8) == (2, None)
    span, table = interpolation_scheme(2, 8)
    assert span == 2 and table.shape == (9, 2)
    span, table = interpolation_scheme(3, 8)
    assert span == 4 and table.shape == (9, 4)
    span, table = interpolation_scheme(4, 8)
    assert span == 6 and table.shape == (9, 6)
    assert interpolation_scheme(9, 8) == (1, None)


def test_best_of_nine_corners(ramp):
    assert best_of_nine(ramp, 3, 4, 0) == ramp[4, 3]
    assert best_of_nine(ramp, 3, 4, 2) == ramp[4, 4]
    assert best_of_nine(ramp, 3, 4, 6) == ramp[5, 3]
    assert best_of_nine(ramp, 3, 4, 8) == ramp[5, 4]
    assert best_of_nine(ramp, 3, 4, 3) == best_of_nine(ramp, 3, 4, 0)


def test_best_of_nine_averages_lie_between(ramp):
    for index in (1, 4, 5, 7):
        value = best_of_nine(ramp, 3, 4, index)
        assert ramp[4, 3] <= value <= ramp[5, 4]


def test_best_of_nine_integer_plane_stays_integer():
    plane = np.array([[1, 2], [3, 4]], dtype=np.uint8)
    assert isinstance(best_of_nine(plane, 0, 0, 1), int)
    assert best_of_nine(plane, 0, 0, 1) == plane[0, 0]


def test_best_of_nine_bad_index(ramp):
    with pytest.raises(ValueError):
        best_of_nine(ramp, 1, 1, 9)


def test_best_of_nine_index_quirk_and_consistency():
    assert best_of_nine_index(0, 0, 16) == 3
    for qx in range(16):
        for qy in range(16):
            idx = best_of_nine_index(qx, qy, 16)
            assert 3 <= idx <= 8
            assert idx == best_of_nine_index_fraction(qx / 16, qy / 16)


def test_lanczos_quantile_on_constant_plane():
    plane = np.full((12, 12), 7.0, dtype=np.float32)
    table = lanczos_coefficients(6, 8)
    for qx, qy in [(0, 0), (3, 5), (7, 1)]:
        assert lanczos_quantile(plane, 6, 6, 6, qx, qy, table) == pytest.approx(7.0, rel=1e-5)


def test_lanczos_quantile_zero_quantile_hits_sample(ramp):
    table = lanczos_coefficients(6, 8)
    assert lanczos_quantile(ramp, 5, 5, 6, 0, 0, table) == pytest.approx(float(ramp[5, 5]))
    assert lanczos_quantile(ramp, 5, 5, 0, 3, 3, table) == float(ramp[5, 5])


def test_lanczos_quantile_with_linear_table(ramp):
    table = linear_coefficients(4)
    value = lanczos_quantile(ramp, 4, 4, 2, 2, 2, table)
    assert ramp[4, 4] < value < ramp[5, 5]


def test_need_not_interpolate():
    flat = np.ones((3, 3), dtype=np.uint16)
    assert need_not_interpolate(flat, 0, 0)
    flat[1, 1] = 2
    assert not need_not_interpolate(flat, 0, 0)


def test_along_line_interpolate():
    line = np.arange(20, dtype=np.float32)
    table = cubic_coefficients(8)
    assert along_line_interpolate(line, 10, 1, 4, 0, table) == pytest.approx(line[10])
    const = np.full(20, 3.0)
    assert along_line_interpolate(const, 10, 1, 4, 5, table) == pytest.approx(3.0)
    mid = along_line_interpolate(line, 10, 1, 4, 4, table)
    assert line[10] < mid < line[11]