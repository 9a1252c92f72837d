"""Classical orbital elements and their conversion to/from state vectors.

Angles are in degrees, distances in km, velocities in km/s. Degenerate
orbits redefine which angle carries the position along the orbit:

* circular (e ≈ 0): argument of perigee is 0 and the true anomaly slot holds
  the argument of latitude, measured from the ascending node;
* circular and equatorial: RAAN and argument of perigee are 0 and the true
  anomaly slot holds the true longitude, measured from the X axis;
* elliptical and equatorial: RAAN is 0 and the argument of perigee is the
  longitude of perigee, ``atan2(e_y, e_x)``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime

import numpy as np
from numpy.typing import ArrayLike, NDArray

from satcore.core.state import Frame, StateVector
from satcore.core.vector import Axis, as_vector, cross, dot, magnitude, normalize, rotate
from satcore.exceptions import DegenerateVectorError, OrbitDomainError
from satcore.utils.constants import (
    CIRCULAR_ECCENTRICITY_TOL,
    EARTH_MU_KM3_S2,
    EQUATORIAL_INCLINATION_TOL_DEG,
)
from satcore.utils.timeutils import ensure_utc

logger = logging.getLogger(__name__)

_Z_HAT = np.array([0.0, 0.0, 1.0])


@dataclass(frozen=True)
class KeplerianElements:
    """Classical orbital elements at an epoch.

    Attributes:
        epoch: Time the elements refer to (UTC).
        semi_major_axis_km: Semi-major axis in km, > 0.
        eccentricity: Eccentricity in [0, 1).
        inclination_deg: Inclination in [0, 180].
        raan_deg: Right ascension of the ascending node in [0, 360).
        arg_perigee_deg: Argument of perigee in [0, 360).
        true_anomaly_deg: True anomaly in [0, 360).

    Raises:
        OrbitDomainError: If a scalar element lies outside its domain.
    """

    epoch: datetime
    semi_major_axis_km: float
    eccentricity: float
    inclination_deg: float
    raan_deg: float
    arg_perigee_deg: float
    true_anomaly_deg: float

    def __post_init__(self) -> None:
        if not math.isfinite(self.semi_major_axis_km) or self.semi_major_axis_km <= 0.0:
            logger.error("Invalid semi-major axis: %r", self.semi_major_axis_km)
            raise OrbitDomainError(
                f"Semi-major axis must be positive, got {self.semi_major_axis_km}"
            )
        if not 0.0 <= self.eccentricity < 1.0:
            logger.error("Invalid eccentricity: %r", self.eccentricity)
            raise OrbitDomainError(
                f"Eccentricity must be within [0, 1), got {self.eccentricity}"
            )
        if not 0.0 <= self.inclination_deg <= 180.0:
            logger.error("Invalid inclination: %r", self.inclination_deg)
            raise OrbitDomainError(
                f"Inclination must be within [0, 180], got {self.inclination_deg}"
            )
        object.__setattr__(self, "epoch", ensure_utc(self.epoch))
        for name in ("raan_deg", "arg_perigee_deg", "true_anomaly_deg"):
            object.__setattr__(self, name, _wrap_degrees(getattr(self, name)))

    @property
    def is_circular(self) -> bool:
        return self.eccentricity < CIRCULAR_ECCENTRICITY_TOL

    @property
    def is_equatorial(self) -> bool:
        return _is_equatorial(self.inclination_deg)

    @property
    def perigee_radius_km(self) -> float:
        return self.semi_major_axis_km * (1.0 - self.eccentricity)

    @property
    def apogee_radius_km(self) -> float:
        return self.semi_major_axis_km * (1.0 + self.eccentricity)

    @property
    def eccentric_anomaly_deg(self) -> float:
        return eccentric_from_true(self.eccentricity, self.true_anomaly_deg)

    @property
    def mean_anomaly_deg(self) -> float:
        return mean_from_true(self.eccentricity, self.true_anomaly_deg)


def _wrap_degrees(angle: float) -> float:
    wrapped = angle % 360.0
    # -1e-20 % 360.0 rounds to 360.0
    return 0.0 if wrapped >= 360.0 else wrapped


def _acos_deg(x: float) -> float:
    return math.degrees(math.acos(min(1.0, max(-1.0, x))))


def _is_equatorial(inclination_deg: float) -> bool:
    return (inclination_deg < EQUATORIAL_INCLINATION_TOL_DEG
            or inclination_deg > 180.0 - EQUATORIAL_INCLINATION_TOL_DEG)


# --- Anomaly conversions ---

def eccentric_from_true(eccentricity: float, true_anomaly_deg: float) -> float:
    """Eccentric anomaly in [0, 360) for a true anomaly, both in degrees.

    Uses ``tan E = sqrt(1-e²) sin ν / (e + cos ν)`` with the quadrant taken from
    the numerator and denominator signs.
    """
    e = eccentricity
    nu = math.radians(true_anomaly_deg)
    big_e = math.atan2(math.sqrt(1.0 - e * e) * math.sin(nu), e + math.cos(nu))
    return _wrap_degrees(math.degrees(big_e))


def true_from_eccentric(eccentricity: float, eccentric_anomaly_deg: float) -> float:
    """True anomaly in [0, 360) for an eccentric anomaly, both in degrees."""
    e = eccentricity
    half = math.radians(eccentric_anomaly_deg) / 2.0
    nu = 2.0 * math.atan2(math.sqrt(1.0 + e) * math.sin(half), math.sqrt(1.0 - e) * math.cos(half))
    return _wrap_degrees(math.degrees(nu))


def mean_from_eccentric(eccentricity: float, eccentric_anomaly_deg: float) -> float:
    """Kepler's equation, ``M = E - e sin E``, in degrees."""
    big_e = math.radians(eccentric_anomaly_deg)
    return _wrap_degrees(math.degrees(big_e - eccentricity * math.sin(big_e)))


def mean_from_true(eccentricity: float, true_anomaly_deg: float) -> float:
    return mean_from_eccentric(eccentricity, eccentric_from_true(eccentricity, true_anomaly_deg))


# --- State vector to elements ---

def specific_energy(r: ArrayLike, v: ArrayLike, mu: float = EARTH_MU_KM3_S2) -> float:
    """Specific mechanical energy, ``v²/2 - μ/|r|``, in km²/s²."""
    return magnitude(v) ** 2 / 2.0 - mu / magnitude(r)


def semi_major_axis(r: ArrayLike, v: ArrayLike, mu: float = EARTH_MU_KM3_S2) -> float:
    energy = specific_energy(r, v, mu)
    if energy >= 0.0:
        logger.error("Unbound trajectory (specific energy %.6g km²/s²)", energy)
        raise OrbitDomainError(
            f"State is not on a closed orbit (specific energy {energy:.6g} km²/s²)"
        )
    return -mu / (2.0 * energy)


def eccentricity_vector(r: ArrayLike, v: ArrayLike, mu: float = EARTH_MU_KM3_S2) -> NDArray[np.float64]:
    """Eccentricity vector, pointing at perigee with magnitude ``e``."""
    r = as_vector(r)
    v = as_vector(v)
    v_sq = float(np.dot(v, v))
    r_mag = float(np.linalg.norm(r))
    return (v_sq / mu - 1.0 / r_mag) * r - (float(np.dot(r, v)) / mu) * v


def angular_momentum(r: ArrayLike, v: ArrayLike) -> NDArray[np.float64]:
    return cross(r, v)


def node_vector(r: ArrayLike, v: ArrayLike) -> NDArray[np.float64]:
    """Vector pointing at the ascending node, ``ẑ × h``."""
    return np.cross(_Z_HAT, angular_momentum(r, v))


def inclination(r: ArrayLike, v: ArrayLike) -> float:
    """Inclination in degrees.

    Raises:
        DegenerateVectorError: If ``r`` and ``v`` are parallel (no orbit plane).
    """
    try:
        h_hat = normalize(angular_momentum(r, v))
    except DegenerateVectorError as e:
        raise DegenerateVectorError("Angular momentum is zero; orbit plane undefined") from e
    return _acos_deg(h_hat[2])


def right_ascension(r: ArrayLike, v: ArrayLike) -> float:
    """RAAN in degrees; 0 for equatorial orbits."""
    if _is_equatorial(inclination(r, v)):
        return 0.0
    n = node_vector(r, v)
    raan = _acos_deg(n[0] / np.linalg.norm(n))
    return 360.0 - raan if n[1] < 0.0 else raan


def argument_of_perigee(r: ArrayLike, v: ArrayLike, mu: float = EARTH_MU_KM3_S2) -> float:
    """Argument of perigee in degrees.

    0 for circular orbits; longitude of perigee for equatorial orbits.
    """
    e_vec = eccentricity_vector(r, v, mu)
    e = float(np.linalg.norm(e_vec))
    if e < CIRCULAR_ECCENTRICITY_TOL:
        return 0.0
    if _is_equatorial(inclination(r, v)):
        return _wrap_degrees(math.degrees(math.atan2(e_vec[1], e_vec[0])))
    n = node_vector(r, v)
    aop = _acos_deg(float(np.dot(n, e_vec)) / (float(np.linalg.norm(n)) * e))
    return 360.0 - aop if e_vec[2] < 0.0 else aop


def argument_of_latitude(r: ArrayLike, v: ArrayLike) -> float:
    """Angle of ``r`` from the ascending node, in degrees."""
    n = node_vector(r, v)
    aol = _acos_deg(dot(n, r) / (float(np.linalg.norm(n)) * magnitude(r)))
    return 360.0 - aol if dot(n, v) > 0.0 else aol


def true_longitude(r: ArrayLike, v: ArrayLike) -> float:
    """Angle of ``r`` from the X axis, in degrees."""
    r = as_vector(r)
    v = as_vector(v)
    tl = _acos_deg(r[0] / float(np.linalg.norm(r)))
    return 360.0 - tl if v[0] > 0.0 else tl


def true_anomaly(r: ArrayLike, v: ArrayLike, mu: float = EARTH_MU_KM3_S2) -> float:
    """True anomaly in degrees, with circular-orbit fallbacks."""
    e_vec = eccentricity_vector(r, v, mu)
    e = float(np.linalg.norm(e_vec))
    if e < CIRCULAR_ECCENTRICITY_TOL:
        if _is_equatorial(inclination(r, v)):
            return true_longitude(r, v)
        return argument_of_latitude(r, v)
    ta = _acos_deg(float(np.dot(e_vec, as_vector(r))) / (e * magnitude(r)))
    return 360.0 - ta if dot(r, v) < 0.0 else ta


def rv_to_kepler(
    position_km: ArrayLike,
    velocity_km_s: ArrayLike,
    epoch: datetime,
    mu: float = EARTH_MU_KM3_S2,
) -> KeplerianElements:
    """Derive classical elements from an inertial position and velocity.

    Args:
        position_km: ECI position in km.
        velocity_km_s: ECI velocity in km/s.
        epoch: Time of the state.
        mu: Gravitational parameter in km³/s².

    Returns:
        Elements at ``epoch``.

    Raises:
        OrbitDomainError: If the state is not on a closed orbit.
        DegenerateVectorError: If position and velocity are parallel.
    """
    r = as_vector(position_km)
    v = as_vector(velocity_km_s)
    elements = KeplerianElements(
        epoch=epoch,
        semi_major_axis_km=semi_major_axis(r, v, mu),
        eccentricity=float(np.linalg.norm(eccentricity_vector(r, v, mu))),
        inclination_deg=inclination(r, v),
        raan_deg=right_ascension(r, v),
        arg_perigee_deg=argument_of_perigee(r, v, mu),
        true_anomaly_deg=true_anomaly(r, v, mu),
    )
    logger.debug("Derived elements a=%.3f km e=%.6f i=%.4f deg",
                 elements.semi_major_axis_km, elements.eccentricity, elements.inclination_deg)
    return elements


def state_to_elements(state: StateVector, mu: float = EARTH_MU_KM3_S2) -> KeplerianElements:
    """Elements from an ECI state vector.

    Raises:
        FrameMismatchError: If ``state`` is not tagged ECI.
    """
    state.require(Frame.ECI)
    return rv_to_kepler(state.position_km, state.velocity_km_s, state.epoch, mu)


# --- Elements to state vector ---

def perifocal_state(
    elements: KeplerianElements, mu: float = EARTH_MU_KM3_S2
) -> tuple[NDArray[np.float64], NDArray[np.float64]]:
    """Position and velocity in the perifocal (PQW) frame."""
    a = elements.semi_major_axis_km
    e = elements.eccentricity
    big_e = math.radians(elements.eccentric_anomaly_deg)
    cos_e, sin_e = math.cos(big_e), math.sin(big_e)
    root = math.sqrt(1.0 - e * e)
    radius = a * (1.0 - e * cos_e)
    position = np.array([a * (cos_e - e), a * root * sin_e, 0.0])
    speed_factor = math.sqrt(mu * a) / radius
    velocity = np.array([-speed_factor * sin_e, speed_factor * root * cos_e, 0.0])
    return position, velocity


def _perifocal_to_inertial(v: NDArray[np.float64], elements: KeplerianElements) -> NDArray[np.float64]:
    # 3-1-3 sequence: Z by ω, X by i, Z by Ω
    v = rotate(v, Axis.Z, elements.arg_perigee_deg)
    v = rotate(v, Axis.X, elements.inclination_deg)
    return rotate(v, Axis.Z, elements.raan_deg)


def kepler_to_rv(elements: KeplerianElements, mu: float = EARTH_MU_KM3_S2) -> StateVector:
    """Inertial state vector for a set of elements.

    Args:
        elements: Classical elements.
        mu: Gravitational parameter in km³/s².

    Returns:
        An ECI :class:`StateVector` at the elements' epoch.
    """
    position, velocity = perifocal_state(elements, mu)
    return StateVector(
        frame=Frame.ECI,
        position_km=_perifocal_to_inertial(position, elements),
        velocity_km_s=_perifocal_to_inertial(velocity, elements),
        epoch=elements.epoch,
    )
