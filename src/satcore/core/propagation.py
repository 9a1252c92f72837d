"""Analytic orbit propagation: two-body and J2 secular drift.

Both models are pure functions ``elements × target_time → elements``. For
SGP4-accuracy propagation of TLEs see :mod:`satcore.core.ephemeris`.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum

from satcore.core.kepler import (
    KeplerianElements,
    kepler_to_rv,
    state_to_elements,
    true_from_eccentric,
)
from satcore.core.state import StateVector
from satcore.exceptions import NonConvergenceError, OrbitDomainError
from satcore.utils.constants import (
    EARTH_MU_KM3_S2,
    J2_ANOMALY_ITERATIONS,
    J2_PERIGEE_RATE_COEFF,
    J2_RAAN_RATE_COEFF,
    KEPLER_MAX_ITERATIONS,
    KEPLER_TOLERANCE_RAD,
    SECONDS_PER_DAY,
)
from satcore.utils.timeutils import delta_seconds

logger = logging.getLogger(__name__)

_TWO_PI = 2.0 * math.pi


class PropagationModel(Enum):
    """Analytic propagation models."""

    TWO_BODY = "two_body"
    J2 = "j2"


@dataclass(frozen=True)
class SecularRates:
    """Secular element drift rates.

    Attributes:
        semi_major_axis_km_per_day: Decay from the mean-motion derivative.
        eccentricity_per_day: Decay from the mean-motion derivative.
        raan_deg_per_day: Nodal regression from J2.
        arg_perigee_deg_per_day: Apsidal rotation from J2.
    """

    semi_major_axis_km_per_day: float
    eccentricity_per_day: float
    raan_deg_per_day: float
    arg_perigee_deg_per_day: float


def mean_motion(semi_major_axis_km: float, mu: float = EARTH_MU_KM3_S2) -> float:
    """Mean motion ``sqrt(μ/a³)`` in rad/s."""
    a = semi_major_axis_km
    return math.sqrt(mu / (a * a * a))


def orbital_period_s(semi_major_axis_km: float, mu: float = EARTH_MU_KM3_S2) -> float:
    return _TWO_PI / mean_motion(semi_major_axis_km, mu)


def revolutions_per_day(semi_major_axis_km: float, mu: float = EARTH_MU_KM3_S2) -> float:
    return SECONDS_PER_DAY / orbital_period_s(semi_major_axis_km, mu)


def _check_eccentricity(eccentricity: float) -> None:
    if not 0.0 <= eccentricity < 1.0:
        logger.error("Eccentricity %r outside elliptical domain", eccentricity)
        raise OrbitDomainError(
            f"Kepler's equation needs 0 <= e < 1, got e={eccentricity}"
        )


def solve_kepler(
    mean_anomaly_rad: float,
    eccentricity: float,
    tolerance: float = KEPLER_TOLERANCE_RAD,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> float:
    """Solve ``M = E - e sin E`` for the eccentric anomaly.

    Fixed-point iteration ``E ← M + e sin E``, which contracts by a factor of
    at most ``e`` per step.

    Args:
        mean_anomaly_rad: Mean anomaly in radians.
        eccentricity: Eccentricity in [0, 1).
        tolerance: Stop when successive iterates differ by less than this.
        max_iterations: Iteration cap.

    Returns:
        Eccentric anomaly in radians.

    Raises:
        OrbitDomainError: If ``eccentricity`` is outside [0, 1).
        NonConvergenceError: If the cap is reached before the tolerance.
    """
    _check_eccentricity(eccentricity)
    e_k = mean_anomaly_rad
    step = math.inf
    for _ in range(max_iterations):
        e_next = mean_anomaly_rad + eccentricity * math.sin(e_k)
        step = abs(e_next - e_k)
        e_k = e_next
        if step < tolerance:
            return e_k
    logger.error("Kepler solver did not converge: e=%.6f, M=%.6f rad, step=%.3e",
                 eccentricity, mean_anomaly_rad, step)
    raise NonConvergenceError(
        f"Kepler's equation did not converge within {max_iterations} iterations "
        f"(e={eccentricity}, last step {step:.3e})",
        iterations=max_iterations,
        residual=step,
    )


def propagate_two_body(
    elements: KeplerianElements,
    target_time: datetime,
    mu: float = EARTH_MU_KM3_S2,
    tolerance: float = KEPLER_TOLERANCE_RAD,
    max_iterations: int = KEPLER_MAX_ITERATIONS,
) -> KeplerianElements:
    """Advance elements under unperturbed two-body motion.

    Only the true anomaly and epoch change.

    Args:
        elements: Elements at their epoch.
        target_time: Time to propagate to (may precede the epoch).
        mu: Gravitational parameter in km³/s².
        tolerance: Kepler solver tolerance in radians.
        max_iterations: Kepler solver iteration cap.

    Returns:
        Elements at ``target_time``.
    """
    _check_eccentricity(elements.eccentricity)
    dt = delta_seconds(elements.epoch, target_time)
    n = mean_motion(elements.semi_major_axis_km, mu)
    m0 = math.radians(elements.mean_anomaly_deg)
    m = (m0 + n * dt) % _TWO_PI
    big_e = solve_kepler(m, elements.eccentricity, tolerance, max_iterations)
    nu = true_from_eccentric(elements.eccentricity, math.degrees(big_e))
    logger.debug("Two-body propagation over %.1f s: nu %.4f -> %.4f deg",
                 dt, elements.true_anomaly_deg, nu)
    return replace(elements, epoch=target_time, true_anomaly_deg=nu)


def j2_raan_rate(semi_major_axis_km: float, eccentricity: float, inclination_deg: float) -> float:
    """Nodal regression due to J2 in deg/day."""
    return (J2_RAAN_RATE_COEFF * semi_major_axis_km ** -3.5
            * (1.0 - eccentricity ** 2) ** -2
            * math.cos(math.radians(inclination_deg)))


def j2_perigee_rate(semi_major_axis_km: float, eccentricity: float, inclination_deg: float) -> float:
    """Apsidal rotation due to J2 in deg/day."""
    sin_i = math.sin(math.radians(inclination_deg))
    return (J2_PERIGEE_RATE_COEFF * semi_major_axis_km ** -3.5
            * (1.0 - eccentricity ** 2) ** -2
            * (4.0 - 5.0 * sin_i * sin_i))


def secular_rates(
    elements: KeplerianElements,
    mean_motion_dot: float = 0.0,
    mu: float = EARTH_MU_KM3_S2,
) -> SecularRates:
    """Secular drift rates for the J2 model.

    Args:
        elements: Elements at their epoch.
        mean_motion_dot: Time derivative of mean motion in rev/day²
            (twice the first-derivative field of a TLE).
        mu: Gravitational parameter in km³/s².
    """
    a = elements.semi_major_axis_km
    e = elements.eccentricity
    i = elements.inclination_deg
    n_rev_day = revolutions_per_day(a, mu)
    return SecularRates(
        semi_major_axis_km_per_day=-2.0 * a * mean_motion_dot / (3.0 * n_rev_day),
        eccentricity_per_day=-2.0 * (1.0 - e) * mean_motion_dot / (3.0 * n_rev_day),
        raan_deg_per_day=j2_raan_rate(a, e, i),
        arg_perigee_deg_per_day=j2_perigee_rate(a, e, i),
    )


def propagate_j2(
    elements: KeplerianElements,
    target_time: datetime,
    mean_motion_dot: float = 0.0,
    mu: float = EARTH_MU_KM3_S2,
    anomaly_iterations: int = J2_ANOMALY_ITERATIONS,
) -> KeplerianElements:
    """Advance elements with J2 secular drift and mean-motion decay.

    The mean anomaly gains ``n·Δt + ½·ṅ·Δt²`` revolutions. The quadratic term
    is only meaningful while ``ṅ·Δt²`` stays small; this is not a long-term
    propagator. The eccentric anomaly comes from a fixed number of
    fixed-point iterations with no convergence check.

    Args:
        elements: Elements at their epoch.
        target_time: Time to propagate to.
        mean_motion_dot: Mean-motion derivative in rev/day².
        mu: Gravitational parameter in km³/s².
        anomaly_iterations: Fixed-point iterations for the eccentric anomaly.

    Returns:
        Elements at ``target_time``.

    Raises:
        OrbitDomainError: If drift leaves the elliptical domain.
    """
    _check_eccentricity(elements.eccentricity)
    dt_days = delta_seconds(elements.epoch, target_time) / SECONDS_PER_DAY
    rates = secular_rates(elements, mean_motion_dot, mu)
    n_rev_day = revolutions_per_day(elements.semi_major_axis_km, mu)

    a = elements.semi_major_axis_km + rates.semi_major_axis_km_per_day * dt_days
    e = max(0.0, elements.eccentricity + rates.eccentricity_per_day * dt_days)
    _check_eccentricity(e)

    m_rev = (elements.mean_anomaly_deg / 360.0 + n_rev_day * dt_days
             + 0.5 * mean_motion_dot * dt_days * dt_days)
    m = (m_rev % 1.0) * _TWO_PI

    big_e = m
    for _ in range(anomaly_iterations):
        big_e = m + e * math.sin(big_e)

    cos_nu = (math.cos(big_e) - e) / (1.0 - e * math.cos(big_e))
    nu = math.degrees(math.acos(min(1.0, max(-1.0, cos_nu))))
    if math.degrees(big_e) > 180.0:
        nu = 360.0 - nu

    propagated = KeplerianElements(
        epoch=target_time,
        semi_major_axis_km=a,
        eccentricity=e,
        inclination_deg=elements.inclination_deg,
        raan_deg=elements.raan_deg + rates.raan_deg_per_day * dt_days,
        arg_perigee_deg=elements.arg_perigee_deg + rates.arg_perigee_deg_per_day * dt_days,
        true_anomaly_deg=nu,
    )
    logger.debug("J2 propagation over %.4f days: raan %+.4f deg, argp %+.4f deg",
                 dt_days, rates.raan_deg_per_day * dt_days, rates.arg_perigee_deg_per_day * dt_days)
    return propagated


def propagate(
    elements: KeplerianElements,
    target_time: datetime,
    model: PropagationModel = PropagationModel.TWO_BODY,
    mean_motion_dot: float = 0.0,
    mu: float = EARTH_MU_KM3_S2,
) -> KeplerianElements:
    """Propagate elements with the selected model.

    Raises:
        ValueError: If ``model`` is not a known :class:`PropagationModel`.
    """
    if model == PropagationModel.TWO_BODY:
        return propagate_two_body(elements, target_time, mu=mu)
    elif model == PropagationModel.J2:
        return propagate_j2(elements, target_time, mean_motion_dot=mean_motion_dot, mu=mu)
    else:
        raise ValueError(f"Unknown model: {model}")


def propagate_state(
    state: StateVector,
    target_time: datetime,
    model: PropagationModel = PropagationModel.TWO_BODY,
    mean_motion_dot: float = 0.0,
    mu: float = EARTH_MU_KM3_S2,
) -> StateVector:
    """Propagate an ECI state vector by round-tripping through elements."""
    elements = state_to_elements(state, mu)
    return kepler_to_rv(propagate(elements, target_time, model, mean_motion_dot, mu), mu)


def ephemeris(
    elements: KeplerianElements,
    times: list[datetime],
    model: PropagationModel = PropagationModel.TWO_BODY,
    mean_motion_dot: float = 0.0,
) -> list[KeplerianElements]:
    """Propagate one set of elements to multiple times.

    Args:
        elements: Elements at their epoch.
        times: Target times.
        model: Propagation model.
        mean_motion_dot: Mean-motion derivative in rev/day² (J2 model only).

    Returns:
        One set of elements per requested time.
    """
    result = [propagate(elements, t, model, mean_motion_dot) for t in times]
    logger.debug("Propagated elements to %d times with %s", len(times), model.value)
    return result
