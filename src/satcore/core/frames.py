"""Reference frame conversions.

Geodetic ⇄ ECEF is fixed to the WGS-84 ellipsoid (or any
:class:`~satcore.utils.constants.Ellipsoid`). ECEF ⇄ ECI is a rotation about
Z by Greenwich Mean Sidereal Time, so it needs an epoch.

Tagged values (:class:`~satcore.core.state.FrameValue`) move between frames
through a fixed edge table; non-adjacent frames are reached by composing
edges along the shortest path::

    KEPLER -> RV -> ECI -> ECEF -> GEODETIC
"""

from __future__ import annotations

import logging
import math
from collections import deque
from datetime import datetime
from functools import lru_cache
from typing import Callable

import numpy as np
from numpy.typing import ArrayLike, NDArray

from satcore.core.kepler import KeplerianElements, kepler_to_rv, state_to_elements
from satcore.core.state import Frame, FrameValue, GeodeticCoordinate, StateVector
from satcore.core.vector import Axis, as_vector, rotation_matrix
from satcore.exceptions import FrameMismatchError
from satcore.utils.constants import (
    EARTH_MU_KM3_S2,
    EARTH_ROTATION_RAD_S,
    GEODETIC_ITERATIONS,
    WGS84,
    Ellipsoid,
)
from satcore.utils.timeutils import gmst_rad, utc_now

logger = logging.getLogger(__name__)

_OMEGA_EARTH = np.array([0.0, 0.0, EARTH_ROTATION_RAD_S])

# Below this distance from the spin axis (km) latitude is taken as ±90°.
_POLAR_AXIS_KM = 1e-9


def geo_radius(latitude_deg: float, ellipsoid: Ellipsoid = WGS84) -> float:
    """Distance from the Earth's center to the ellipsoid surface at a latitude.

    Example::

        geo_radius(0.0)   # 6378.137
        geo_radius(90.0)  # 6356.752314245179
    """
    phi = math.radians(latitude_deg)
    a = ellipsoid.semi_major_axis_km
    b = ellipsoid.semi_minor_axis_km
    cos_phi, sin_phi = math.cos(phi), math.sin(phi)
    num = (a * a * cos_phi) ** 2 + (b * b * sin_phi) ** 2
    den = (a * cos_phi) ** 2 + (b * sin_phi) ** 2
    return math.sqrt(num / den)


def _prime_vertical_radius(phi: float, ellipsoid: Ellipsoid) -> float:
    sin_phi = math.sin(phi)
    return ellipsoid.semi_major_axis_km / math.sqrt(1.0 - ellipsoid.eccentricity_sq * sin_phi * sin_phi)


def geodetic_to_ecef(coord: GeodeticCoordinate, ellipsoid: Ellipsoid = WGS84) -> NDArray[np.float64]:
    """ECEF position (km) of a geodetic coordinate.

    Example::

        geodetic_to_ecef(GeodeticCoordinate(10, 20, 2))
        # [5904.880375850656, 2149.2006937122637, 1100.5958440906952]
    """
    phi = math.radians(coord.latitude_deg)
    lam = math.radians(coord.longitude_deg)
    e2 = ellipsoid.eccentricity_sq
    n = _prime_vertical_radius(phi, ellipsoid)
    h = coord.altitude_km
    return np.array([
        (n + h) * math.cos(phi) * math.cos(lam),
        (n + h) * math.cos(phi) * math.sin(lam),
        (n * (1.0 - e2) + h) * math.sin(phi),
    ])


def ecef_to_geodetic(
    position_km: ArrayLike,
    ellipsoid: Ellipsoid = WGS84,
    iterations: int = GEODETIC_ITERATIONS,
) -> GeodeticCoordinate:
    """Geodetic coordinate of an ECEF position.

    Latitude is refined by a Bowring-style fixed point for a fixed number of
    iterations; the default reproduces the reference numeric behavior and
    converges to machine precision for near-Earth altitudes.

    Args:
        position_km: ECEF position in km.
        ellipsoid: Reference ellipsoid.
        iterations: Number of latitude refinements.

    Returns:
        The geodetic coordinate.
    """
    x, y, z = as_vector(position_km)
    a = ellipsoid.semi_major_axis_km
    e2 = ellipsoid.eccentricity_sq
    lon = math.degrees(math.atan2(y, x))
    p = math.hypot(x, y)

    if p < _POLAR_AXIS_KM:
        lat = 90.0 if z >= 0.0 else -90.0
        return GeodeticCoordinate(lat, lon, abs(z) - ellipsoid.semi_minor_axis_km)

    phi = math.atan2(z, p * (1.0 - e2))
    for _ in range(iterations):
        n = _prime_vertical_radius(phi, ellipsoid)
        h = p / math.cos(phi) - n
        phi = math.atan2(z, p * (1.0 - e2 * n / (n + h)))

    n = _prime_vertical_radius(phi, ellipsoid)
    if abs(phi) < math.pi / 4.0:
        h = p / math.cos(phi) - n
    else:
        h = z / math.sin(phi) - n * (1.0 - e2)
    return GeodeticCoordinate(math.degrees(phi), lon, h)


def _earth_rotation(epoch: datetime) -> NDArray[np.float64]:
    return rotation_matrix(Axis.Z, math.degrees(gmst_rad(epoch)))


def ecef_to_eci(position_km: ArrayLike, epoch: datetime) -> NDArray[np.float64]:
    """Rotate an ECEF position into ECI at ``epoch``.

    Example::

        ecef_to_eci([6378.137, 0, 0], datetime(2006, 9, 26, tzinfo=timezone.utc))
        # [6354.52258010092, 548.33782448099, 0.0]
    """
    return _earth_rotation(epoch) @ as_vector(position_km)


def eci_to_ecef(position_km: ArrayLike, epoch: datetime) -> NDArray[np.float64]:
    """Rotate an ECI position into ECEF at ``epoch`` (inverse of :func:`ecef_to_eci`)."""
    return _earth_rotation(epoch).T @ as_vector(position_km)


def state_ecef_to_eci(state: StateVector) -> StateVector:
    """ECEF state to ECI, including the Earth-rotation velocity term.

    Raises:
        FrameMismatchError: If ``state`` is not tagged ECEF.
    """
    state.require(Frame.ECEF)
    rot = _earth_rotation(state.epoch)
    r_eci = rot @ state.position_km
    v_eci = rot @ state.velocity_km_s + np.cross(_OMEGA_EARTH, r_eci)
    return StateVector(Frame.ECI, r_eci, v_eci, state.epoch)


def state_eci_to_ecef(state: StateVector) -> StateVector:
    """ECI state to ECEF, removing the Earth-rotation velocity term.

    Raises:
        FrameMismatchError: If ``state`` is not tagged ECI.
    """
    state.require(Frame.ECI)
    rot_t = _earth_rotation(state.epoch).T
    r_eci = state.position_km
    v_rel = state.velocity_km_s - np.cross(_OMEGA_EARTH, r_eci)
    return StateVector(Frame.ECEF, rot_t @ r_eci, rot_t @ v_rel, state.epoch)


# --- Tagged conversion graph ---

def _require(value: FrameValue, frame: Frame) -> None:
    if value.frame is not frame:
        logger.error("Frame mismatch: expected %s, got %s", frame.name, value.frame.name)
        raise FrameMismatchError(f"Expected a {frame.name} value, got {value.frame.name}")


def _require_epoch(value: FrameValue) -> datetime:
    if value.epoch is None:
        logger.error("Missing epoch for %s conversion", value.frame.name)
        raise ValueError(f"An epoch is required to convert a {value.frame.name} value across ECEF/ECI")
    return value.epoch


def _geodetic_to_ecef(value: FrameValue) -> FrameValue:
    _require(value, Frame.GEODETIC)
    return FrameValue(Frame.ECEF, geodetic_to_ecef(value.payload), value.epoch)


def _ecef_to_geodetic(value: FrameValue) -> FrameValue:
    _require(value, Frame.ECEF)
    return FrameValue(Frame.GEODETIC, ecef_to_geodetic(value.payload), value.epoch)


def _ecef_to_eci(value: FrameValue) -> FrameValue:
    _require(value, Frame.ECEF)
    epoch = _require_epoch(value)
    return FrameValue(Frame.ECI, ecef_to_eci(value.payload, epoch), epoch)


def _eci_to_ecef(value: FrameValue) -> FrameValue:
    _require(value, Frame.ECI)
    epoch = _require_epoch(value)
    return FrameValue(Frame.ECEF, eci_to_ecef(value.payload, epoch), epoch)


def _rv_to_eci(value: FrameValue) -> FrameValue:
    _require(value, Frame.RV)
    state: StateVector = value.payload.require(Frame.ECI)
    return FrameValue(Frame.ECI, state.position_km, state.epoch)


def _rv_to_kepler(value: FrameValue) -> FrameValue:
    _require(value, Frame.RV)
    elements = state_to_elements(value.payload, EARTH_MU_KM3_S2)
    return FrameValue(Frame.KEPLER, elements, elements.epoch)


def _kepler_to_rv(value: FrameValue) -> FrameValue:
    _require(value, Frame.KEPLER)
    elements: KeplerianElements = value.payload
    state = kepler_to_rv(elements, EARTH_MU_KM3_S2)
    return FrameValue(Frame.RV, state, state.epoch)


_EDGES: dict[tuple[Frame, Frame], Callable[[FrameValue], FrameValue]] = {
    (Frame.GEODETIC, Frame.ECEF): _geodetic_to_ecef,
    (Frame.ECEF, Frame.GEODETIC): _ecef_to_geodetic,
    (Frame.ECEF, Frame.ECI): _ecef_to_eci,
    (Frame.ECI, Frame.ECEF): _eci_to_ecef,
    (Frame.RV, Frame.ECI): _rv_to_eci,
    (Frame.RV, Frame.KEPLER): _rv_to_kepler,
    (Frame.KEPLER, Frame.RV): _kepler_to_rv,
}


@lru_cache(maxsize=None)
def conversion_path(source: Frame, target: Frame) -> tuple[Frame, ...]:
    """Shortest sequence of frames from ``source`` to ``target`` (inclusive).

    Raises:
        FrameMismatchError: If ``target`` is unreachable from ``source``.
    """
    previous: dict[Frame, Frame | None] = {source: None}
    queue = deque([source])
    while queue:
        frame = queue.popleft()
        if frame is target:
            path = [frame]
            while previous[path[-1]] is not None:
                path.append(previous[path[-1]])
            return tuple(reversed(path))
        for (start, end) in _EDGES:
            if start is frame and end not in previous:
                previous[end] = frame
                queue.append(end)
    raise FrameMismatchError(f"No conversion path from {source.name} to {target.name}")


def convert(value: FrameValue, target: Frame) -> FrameValue:
    """Convert a tagged value into ``target``.

    Args:
        value: Tagged source value.
        target: Desired frame.

    Returns:
        The value expressed in ``target``.

    Raises:
        FrameMismatchError: If no conversion path exists.
        ValueError: If the path crosses ECEF/ECI and no epoch is known.
    """
    path = conversion_path(value.frame, target)
    for start, end in zip(path, path[1:]):
        value = _EDGES[(start, end)](value)
    logger.debug("Converted via %s", " -> ".join(f.name for f in path))
    return value


def convert_now(value: FrameValue, target: Frame) -> FrameValue:
    """Like :func:`convert`, defaulting a missing epoch to the current UTC time."""
    if value.epoch is None:
        value = FrameValue(value.frame, value.payload, utc_now())
    return convert(value, target)
