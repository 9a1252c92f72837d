"""TLE ephemerides via SGP4.

SGP4 output is in the TEME frame, which is treated as ECI here. The residual
difference (precession/nutation of the equinox) is well below TLE accuracy.
"""
from __future__ import annotations

import logging
from datetime import datetime

import numpy as np
from numpy.typing import NDArray
from sgp4.api import SatrecArray, jday

from satcore.core.frames import ecef_to_geodetic, eci_to_ecef
from satcore.core.state import Frame, GeodeticCoordinate, StateVector
from satcore.core.tle import TLE
from satcore.utils.timeutils import ensure_utc

logger = logging.getLogger(__name__)


def _julian(t: datetime) -> tuple[float, float]:
    t = ensure_utc(t)
    return jday(t.year, t.month, t.day, t.hour, t.minute, t.second + t.microsecond / 1e6)


def sgp4_state(tle: TLE, t: datetime) -> StateVector:
    """ECI state of a TLE object at one time.

    Raises:
        ValueError: If SGP4 propagation fails (error code != 0).
    """
    t = ensure_utc(t)
    jd, fr = _julian(t)
    error_code, pos, vel = tle.satrec.sgp4(jd, fr)

    if error_code != 0:
        logger.warning("SGP4 propagation failed for NORAD %d at %s: error code %d",
                       tle.norad_id, t, error_code)
        raise ValueError(
            f"SGP4 propagation failed for NORAD {tle.norad_id} at {t}: error code {error_code}"
        )
    return StateVector(Frame.ECI, pos, vel, t)


def sgp4_states(tle: TLE, times: list[datetime]) -> list[StateVector]:
    """Propagate a single TLE to multiple times using SGP4.

    Args:
        tle: A parsed TLE object.
        times: UTC datetimes to propagate to.

    Returns:
        One ECI StateVector per requested time.

    Raises:
        ValueError: If SGP4 propagation fails at any time.
    """
    result = [sgp4_state(tle, t) for t in times]
    logger.debug("Propagated NORAD %d to %d times", tle.norad_id, len(times))
    return result


def sgp4_geodetic(tle: TLE, t: datetime) -> GeodeticCoordinate:
    """Sub-satellite point and altitude of a TLE object at ``t``."""
    state = sgp4_state(tle, t)
    return ecef_to_geodetic(eci_to_ecef(state.position_km, state.epoch))


def sgp4_batch(tles: list[TLE], t: datetime) -> tuple[NDArray[np.float64], NDArray[np.bool_]]:
    """Propagate many TLEs to a single time using vectorized SGP4.

    Returns:
        Tuple of:
            - positions_velocities: Array of shape (n, 6) with [x,y,z,vx,vy,vz] in km, km/s
            - valid_mask: Boolean array of shape (n,), False where SGP4 reported an error
    """
    if not tles:
        return np.empty((0, 6), dtype=np.float64), np.empty(0, dtype=np.bool_)

    jd, fr = _julian(t)
    errors, positions, velocities = SatrecArray([tle.satrec for tle in tles]).sgp4(
        np.array([jd]), np.array([fr])
    )

    result = np.empty((len(tles), 6), dtype=np.float64)
    result[:, 0:3] = positions[:, 0, :]
    result[:, 3:6] = velocities[:, 0, :]
    valid_mask = errors[:, 0] == 0
    if not valid_mask.all():
        logger.warning("SGP4 failed for %d of %d objects", int((~valid_mask).sum()), len(tles))
    return result, valid_mask
