"""Vector and matrix primitives.

3-vector algebra, axis rotations and Cholesky decomposition on numpy arrays.
Angles at this API are in degrees.
"""

from __future__ import annotations

import logging
import math
from enum import Enum

import numpy as np
from numpy.typing import ArrayLike, NDArray

from satcore.exceptions import DegenerateVectorError, NotPositiveDefiniteError

logger = logging.getLogger(__name__)

Vector3 = NDArray[np.float64]


class Axis(Enum):
    """Cartesian rotation axes."""

    X = 0
    Y = 1
    Z = 2


def as_vector(v: ArrayLike) -> NDArray[np.float64]:
    """Coerce a sequence into a 1-D float64 array."""
    arr = np.asarray(v, dtype=np.float64)
    if arr.ndim != 1:
        raise ValueError(f"Expected a 1-D vector, got shape {arr.shape}")
    return arr


def dot(a: ArrayLike, b: ArrayLike) -> float:
    return float(np.dot(as_vector(a), as_vector(b)))


def cross(a: ArrayLike, b: ArrayLike) -> Vector3:
    return np.cross(as_vector(a), as_vector(b))


def magnitude(v: ArrayLike) -> float:
    return float(np.linalg.norm(as_vector(v)))


def normalize(v: ArrayLike) -> NDArray[np.float64]:
    """Return the unit vector along ``v``.

    Raises:
        DegenerateVectorError: If ``v`` has zero magnitude.
    """
    arr = as_vector(v)
    mag = np.linalg.norm(arr)
    if mag == 0.0:
        raise DegenerateVectorError("Cannot normalize a zero-magnitude vector")
    return arr / mag


def hypotenuse(a: ArrayLike, b: ArrayLike) -> float:
    """Length of the hypotenuse formed by the magnitudes of two vectors."""
    return math.hypot(magnitude(a), magnitude(b))


def distance(a: ArrayLike, b: ArrayLike) -> float:
    return float(np.linalg.norm(as_vector(a) - as_vector(b)))


def angle_between(a: ArrayLike, b: ArrayLike) -> tuple[float, float]:
    """Angle between two vectors and its 360° complement, in degrees.

    ``arccos`` cannot tell direction, so both candidates are returned and the
    caller resolves the sign with geometry it knows about.

    Raises:
        DegenerateVectorError: If either vector has zero magnitude.
    """
    cos_theta = float(np.dot(normalize(a), normalize(b)))
    theta = math.degrees(math.acos(min(1.0, max(-1.0, cos_theta))))
    return theta, 360.0 - theta


def components(r: float, theta_deg: float, alpha_deg: float | None = None) -> tuple[float, ...]:
    """Axis components of a vector of length ``r``.

    With two arguments returns planar ``(x, y)`` for angle ``theta``. With a
    fundamental-plane angle ``alpha`` returns ``(x, y, z)``, where ``theta`` is
    measured from the fundamental plane.
    """
    theta = math.radians(theta_deg)
    if alpha_deg is None:
        return r * math.cos(theta), r * math.sin(theta)
    alpha = math.radians(alpha_deg)
    r_prime = r * math.cos(theta)
    return r * math.sin(theta), r_prime * math.sin(alpha), r_prime * math.cos(alpha)


def rotation_matrix(axis: Axis, angle_deg: float) -> NDArray[np.float64]:
    """Active right-handed rotation matrix about a coordinate axis."""
    angle = math.radians(angle_deg)
    c, s = math.cos(angle), math.sin(angle)
    if axis is Axis.X:
        return np.array([[1.0, 0.0, 0.0], [0.0, c, -s], [0.0, s, c]])
    if axis is Axis.Y:
        return np.array([[c, 0.0, s], [0.0, 1.0, 0.0], [-s, 0.0, c]])
    if axis is Axis.Z:
        return np.array([[c, -s, 0.0], [s, c, 0.0], [0.0, 0.0, 1.0]])
    raise ValueError(f"Unknown axis: {axis}")


def rotate(v: ArrayLike, axis: Axis, angle_deg: float) -> Vector3:
    """Rotate ``v`` about a coordinate axis by a signed angle in degrees."""
    return rotation_matrix(axis, angle_deg) @ as_vector(v)


def rotate_about(v: ArrayLike, axis: ArrayLike, angle_deg: float) -> Vector3:
    """Rotate ``v`` about an arbitrary axis (Rodrigues' formula).

    Raises:
        DegenerateVectorError: If ``axis`` has zero magnitude.
    """
    k = normalize(axis)
    vec = as_vector(v)
    angle = math.radians(angle_deg)
    c, s = math.cos(angle), math.sin(angle)
    return vec * c + np.cross(k, vec) * s + k * np.dot(k, vec) * (1.0 - c)


def quaternion_product(p: ArrayLike, q: ArrayLike) -> NDArray[np.float64]:
    """Hamilton product of two scalar-first quaternions ``[w, x, y, z]``."""
    p, q = as_vector(p), as_vector(q)
    if p.shape != (4,) or q.shape != (4,):
        raise ValueError(f"Quaternions must have shape (4,), got {p.shape} and {q.shape}")
    w = p[0] * q[0] - np.dot(p[1:], q[1:])
    xyz = p[0] * q[1:] + q[0] * p[1:] + np.cross(p[1:], q[1:])
    return np.concatenate(([w], xyz))


def quaternion_conjugate(q: ArrayLike) -> NDArray[np.float64]:
    """Conjugate of a scalar-first quaternion: the vector part negated."""
    q = as_vector(q)
    if q.shape != (4,):
        raise ValueError(f"Quaternions must have shape (4,), got {q.shape}")
    return np.concatenate(([q[0]], -q[1:]))


def cholesky(m: ArrayLike) -> NDArray[np.float64]:
    """Lower-triangular Cholesky factor ``L`` with ``L @ L.T == m``.

    Args:
        m: Symmetric positive-definite square matrix.

    Returns:
        The lower-triangular factor.

    Raises:
        ValueError: If ``m`` is not square.
        NotPositiveDefiniteError: If ``m`` is not symmetric or a pivot is
            non-positive.
    """
    mat = np.asarray(m, dtype=np.float64)
    if mat.ndim != 2 or mat.shape[0] != mat.shape[1]:
        raise ValueError(f"Cholesky requires a square matrix, got shape {mat.shape}")
    if not np.all(np.isfinite(mat)) or not np.allclose(mat, mat.T):
        logger.error("Cholesky input is not a finite symmetric matrix")
        raise NotPositiveDefiniteError("Matrix is not finite and symmetric")
    try:
        return np.linalg.cholesky(mat)
    except np.linalg.LinAlgError as e:
        logger.error("Cholesky decomposition failed: %s", e)
        raise NotPositiveDefiniteError(f"Matrix is not positive definite: {e}") from e


def matrix_scale(m: ArrayLike, scalar: float) -> NDArray[np.float64]:
    return np.asarray(m, dtype=np.float64) * scalar


def matrix_vector(m: ArrayLike, v: ArrayLike) -> NDArray[np.float64]:
    return np.asarray(m, dtype=np.float64) @ as_vector(v)
