"""Impulsive maneuver planning for circular, coplanar orbits.

Radii are measured from the Earth's center in km; speeds are in km/s.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from satcore.utils.constants import EARTH_MU_KM3_S2, STANDARD_GRAVITY_M_S2

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HohmannTransfer:
    """Two-burn Hohmann transfer between circular orbits.

    Attributes:
        burn_1_km_s: Signed speed change at the departure orbit.
        burn_2_km_s: Signed speed change at the arrival orbit.
        total_delta_v_km_s: Sum of burn magnitudes.
        time_of_flight_s: Half the transfer-ellipse period.
    """

    burn_1_km_s: float
    burn_2_km_s: float
    total_delta_v_km_s: float
    time_of_flight_s: float


def max_delta_v(isp_s: float, wet_mass: float, dry_mass: float) -> float:
    """Ideal rocket equation ``Isp · g0 · ln(m_wet / m_dry)`` in km/s.

    Raises:
        ValueError: If either mass is not positive.
    """
    if wet_mass <= 0 or dry_mass <= 0:
        raise ValueError(f"Masses must be positive, got wet={wet_mass}, dry={dry_mass}")
    return isp_s * STANDARD_GRAVITY_M_S2 * math.log(wet_mass / dry_mass) / 1000.0


def transfer_axis(r1_km: float, r2_km: float) -> float:
    """Semi-major axis of the transfer ellipse touching both radii."""
    return (r1_km + r2_km) / 2.0


def vis_viva_speed(radius_km: float, semi_major_axis_km: float, mu: float = EARTH_MU_KM3_S2) -> float:
    """Orbital speed at ``radius_km`` on an orbit of semi-major axis ``semi_major_axis_km``."""
    return math.sqrt(mu * (2.0 / radius_km - 1.0 / semi_major_axis_km))


def angular_velocity(radius_km: float, mu: float = EARTH_MU_KM3_S2) -> float:
    """Angular rate of a circular orbit in rad/s."""
    return math.sqrt(mu / radius_km ** 3)


def hohmann_time_of_flight(transfer_axis_km: float, mu: float = EARTH_MU_KM3_S2) -> float:
    return math.pi * math.sqrt(transfer_axis_km ** 3 / mu)


def hohmann_transfer(r1_km: float, r2_km: float, mu: float = EARTH_MU_KM3_S2) -> HohmannTransfer:
    """Plan a Hohmann transfer from a circular orbit at ``r1_km`` to one at ``r2_km``.

    Both burns are positive when raising the orbit and negative when lowering it.

    Example::

        hohmann_transfer(6678.0, 42164.0).total_delta_v_km_s  # ~3.89
    """
    a_t = transfer_axis(r1_km, r2_km)
    dv_1 = vis_viva_speed(r1_km, a_t, mu) - vis_viva_speed(r1_km, r1_km, mu)
    dv_2 = vis_viva_speed(r2_km, r2_km, mu) - vis_viva_speed(r2_km, a_t, mu)
    transfer = HohmannTransfer(
        burn_1_km_s=dv_1,
        burn_2_km_s=dv_2,
        total_delta_v_km_s=abs(dv_1) + abs(dv_2),
        time_of_flight_s=hohmann_time_of_flight(a_t, mu),
    )
    logger.debug("Hohmann %.1f -> %.1f km: dv=%.4f km/s, tof=%.1f s",
                 r1_km, r2_km, transfer.total_delta_v_km_s, transfer.time_of_flight_s)
    return transfer


def plane_change_delta_v(
    radius_km: float,
    semi_major_axis_km: float,
    inclination_1_deg: float,
    inclination_2_deg: float,
    mu: float = EARTH_MU_KM3_S2,
) -> float:
    """Speed change for a pure inclination change at ``radius_km``."""
    v = vis_viva_speed(radius_km, semi_major_axis_km, mu)
    theta = math.radians(abs(inclination_2_deg - inclination_1_deg))
    return 2.0 * v * math.sin(theta / 2.0)


def coorbital_wait_time(r1_km: float, r2_km: float, phase_deg: float, mu: float = EARTH_MU_KM3_S2) -> float:
    """Wait before a Hohmann transfer to rendezvous with a target.

    Args:
        r1_km: Interceptor orbit radius.
        r2_km: Target orbit radius.
        phase_deg: Current angle by which the target leads the interceptor.
        mu: Gravitational parameter in km³/s².

    Returns:
        Seconds until the transfer burn. Negative means the window has passed
        in the current synodic period.
    """
    tof = hohmann_time_of_flight(transfer_axis(r1_km, r2_km), mu)
    w_interceptor = angular_velocity(r1_km, mu)
    w_target = angular_velocity(r2_km, mu)
    phase_final = math.pi - w_target * tof
    return (phase_final - math.radians(phase_deg)) / (w_target - w_interceptor)
