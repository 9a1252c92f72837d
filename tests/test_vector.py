"""Tests for vector and matrix primitives."""

from __future__ import annotations

import math

import numpy as np
import pytest

from satcore.core.vector import (
    Axis,
    angle_between,
    cholesky,
    components,
    cross,
    distance,
    dot,
    hypotenuse,
    magnitude,
    matrix_scale,
    matrix_vector,
    normalize,
    quaternion_conjugate,
    quaternion_product,
    rotate,
    rotate_about,
    rotation_matrix,
)
from satcore.exceptions import DegenerateVectorError, NotPositiveDefiniteError, SatcoreError


class TestAlgebra:
    def test_dot_and_cross(self) -> None:
        assert dot([1, 2, 3], [4, 5, 6]) == 32.0
        np.testing.assert_array_equal(cross([1, 0, 0], [0, 1, 0]), [0, 0, 1])

    def test_magnitude(self) -> None:
        assert magnitude([3, 4, 12]) == pytest.approx(13.0)

    def test_normalize(self) -> None:
        np.testing.assert_allclose(normalize([0, 0, 5]), [0, 0, 1])

    def test_normalize_zero_raises(self) -> None:
        with pytest.raises(DegenerateVectorError):
            normalize([0, 0, 0])

    def test_hypotenuse(self) -> None:
        assert hypotenuse([3, 0, 0], [0, 4, 0]) == pytest.approx(5.0)

    def test_distance(self) -> None:
        assert distance([1, 1, 1], [1, 1, 4]) == pytest.approx(3.0)

    def test_as_vector_rejects_matrix(self) -> None:
        with pytest.raises(ValueError, match="1-D"):
            magnitude(np.eye(3))


class TestAngleBetween:
    def test_perpendicular(self) -> None:
        theta, complement = angle_between([1, 0, 0], [0, 1, 0])
        assert theta == pytest.approx(90.0)
        assert complement == pytest.approx(270.0)

    def test_parallel_clips_rounding(self) -> None:
        theta, _ = angle_between([1e-3, 1e-3, 1e-3], [2.0, 2.0, 2.0])
        assert theta == pytest.approx(0.0, abs=1e-5)

    def test_zero_vector_raises(self) -> None:
        with pytest.raises(DegenerateVectorError):
            angle_between([0, 0, 0], [1, 0, 0])


class TestComponents:
    def test_planar(self) -> None:
        x, y = components(2.0, 30.0)
        assert x == pytest.approx(math.sqrt(3.0))
        assert y == pytest.approx(1.0)

    def test_spherical_magnitude_preserved(self) -> None:
        parts = components(5.0, 40.0, 75.0)
        assert len(parts) == 3
        assert math.sqrt(sum(p * p for p in parts)) == pytest.approx(5.0)


class TestRotation:
    def test_rotate_z_quarter_turn(self) -> None:
        np.testing.assert_allclose(rotate([1, 0, 0], Axis.Z, 90.0), [0, 1, 0], atol=1e-12)

    def test_rotate_x_quarter_turn(self) -> None:
        np.testing.assert_allclose(rotate([0, 1, 0], Axis.X, 90.0), [0, 0, 1], atol=1e-12)

    def test_rotate_y_quarter_turn(self) -> None:
        np.testing.assert_allclose(rotate([0, 0, 1], Axis.Y, 90.0), [1, 0, 0], atol=1e-12)

    def test_rotation_matrix_is_orthonormal(self) -> None:
        m = rotation_matrix(Axis.Y, 37.0)
        np.testing.assert_allclose(m @ m.T, np.eye(3), atol=1e-12)
        assert np.linalg.det(m) == pytest.approx(1.0)

    def test_rotate_about_matches_axis_rotation(self) -> None:
        v = [1.0, 2.0, 3.0]
        np.testing.assert_allclose(rotate_about(v, [0, 0, 2], 33.0), rotate(v, Axis.Z, 33.0), atol=1e-12)

    def test_rotate_about_zero_axis_raises(self) -> None:
        with pytest.raises(DegenerateVectorError):
            rotate_about([1, 0, 0], [0, 0, 0], 10.0)

    def test_quaternion_rotation_matches_rotate_about(self) -> None:
        axis = normalize([1.0, -2.0, 0.5])
        half = math.radians(40.0) / 2.0
        q = np.concatenate(([math.cos(half)], math.sin(half) * axis))
        v = [3.0, 1.0, -2.0]
        rotated = quaternion_product(quaternion_product(q, [0.0, *v]), quaternion_conjugate(q))
        assert rotated[0] == pytest.approx(0.0, abs=1e-12)
        np.testing.assert_allclose(rotated[1:], rotate_about(v, axis, 40.0), atol=1e-12)

    def test_quaternion_product_basis(self) -> None:
        i, j, k = [0, 1, 0, 0], [0, 0, 1, 0], [0, 0, 0, 1]
        np.testing.assert_allclose(quaternion_product(i, j), k)
        np.testing.assert_allclose(quaternion_product(j, i), [0, 0, 0, -1])
        np.testing.assert_allclose(quaternion_product(i, i), [-1, 0, 0, 0])

    def test_quaternion_conjugate(self) -> None:
        np.testing.assert_allclose(quaternion_conjugate([1, 2, 3, 4]), [1, -2, -3, -4])
        with pytest.raises(ValueError, match="shape"):
            quaternion_conjugate([1, 2, 3])


class TestCholesky:
    def test_factor_reconstructs(self) -> None:
        m = np.array([[4.0, 2.0, 0.4], [2.0, 5.0, 1.0], [0.4, 1.0, 3.0]])
        lower = cholesky(m)
        np.testing.assert_allclose(lower @ lower.T, m)
        assert np.allclose(lower, np.tril(lower))

    def test_not_positive_definite_raises(self) -> None:
        with pytest.raises(NotPositiveDefiniteError):
            cholesky([[1.0, 2.0], [2.0, 1.0]])

    def test_asymmetric_raises(self) -> None:
        with pytest.raises(NotPositiveDefiniteError):
            cholesky([[1.0, 0.5], [0.0, 1.0]])

    def test_error_is_catchable_as_value_error(self) -> None:
        with pytest.raises(ValueError):
            cholesky(-np.eye(3))
        with pytest.raises(SatcoreError):
            cholesky(-np.eye(3))

    def test_non_square_raises(self) -> None:
        with pytest.raises(ValueError, match="square"):
            cholesky(np.ones((2, 3)))


def test_matrix_helpers() -> None:
    np.testing.assert_allclose(matrix_scale(np.eye(3), 2.5), 2.5 * np.eye(3))
    np.testing.assert_allclose(matrix_vector(2 * np.eye(3), [1, 2, 3]), [2, 4, 6])
