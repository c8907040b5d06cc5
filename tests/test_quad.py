import numpy as np
import pytest

from planefx.quad import SingularQuadError, map_point, unit_square_to_quad

UNIT = [(0, 0), (1, 0), (1, 1), (0, 1)]
PARALLELOGRAM = [(10, 5), (30, 5), (40, 25), (20, 25)]
TRAPEZOID = [(0, 0), (100, 10), (80, 90), (10, 70)]


def test_unit_square_gives_identity():
    forward, inverse = unit_square_to_quad(UNIT)
    assert np.allclose(forward, np.eye(3))
    assert np.allclose(inverse, np.eye(3))


@pytest.mark.parametrize("quad", [UNIT, PARALLELOGRAM, TRAPEZOID])
def test_inverse_is_matrix_inverse(quad):
    forward, inverse = unit_square_to_quad(quad)
    assert np.allclose(forward @ inverse, np.eye(3))


def test_parallelogram_corners_map_exactly():
    forward, _ = unit_square_to_quad(PARALLELOGRAM)
    for (sx, sy), expected in zip(UNIT, PARALLELOGRAM):
        assert map_point(forward, sx, sy) == pytest.approx(expected)


def test_parallelogram_is_affine():
    forward, _ = unit_square_to_quad(PARALLELOGRAM)
    assert np.allclose(forward[:, 2], [0.0, 0.0, 1.0])


def test_projective_corners_origin_and_edges():
    forward, _ = unit_square_to_quad(TRAPEZOID)
    assert map_point(forward, 0, 0) == pytest.approx(TRAPEZOID[0])
    assert map_point(forward, 1, 0) == pytest.approx(TRAPEZOID[1])
    assert map_point(forward, 0, 1) == pytest.approx(TRAPEZOID[3])


@pytest.mark.parametrize("point", [(0.25, 0.5), (0.7, 0.1), (0.5, 0.5), (0.9, 0.9)])
def test_round_trip_through_inverse(point):
    forward, inverse = unit_square_to_quad(TRAPEZOID)
    mapped = map_point(forward, *point)
    assert map_point(inverse, *mapped) == pytest.approx(point)


def test_collapsed_quad_raises():
    with pytest.raises(SingularQuadError):
        unit_square_to_quad([(3, 3)] * 4)


def test_collinear_quad_raises():
    with pytest.raises(SingularQuadError):
        unit_square_to_quad([(0, 0), (1, 0), (2, 0), (3, 0)])


def test_bad_shape_raises():
    with pytest.raises(ValueError):
        unit_square_to_quad([(0, 0), (1, 0), (1, 1)])


def test_map_point_at_infinity_raises():
    matrix = np.eye(3)
    matrix[0, 2] = -1.0
    with pytest.raises(ValueError):
        map_point(matrix, 1.0, 0.0)