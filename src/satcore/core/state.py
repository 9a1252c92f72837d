"""Frame tags and the value objects that carry satellite state."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray

from satcore.exceptions import FrameMismatchError
from satcore.utils.timeutils import ensure_utc

logger = logging.getLogger(__name__)


class Frame(Enum):
    """Closed set of representations a satellite state can take."""

    GEODETIC = "geodetic"
    ECEF = "ecef"
    ECI = "eci"
    RV = "rv"
    KEPLER = "kepler"


def wrap_longitude(longitude_deg: float) -> float:
    """Normalize a longitude into (-180°, 180°].

    Example::

        wrap_longitude(270.0)  # -90.0
    """
    wrapped = math.fmod(longitude_deg + 180.0, 360.0)
    if wrapped <= 0.0:
        wrapped += 360.0
    return wrapped - 180.0


def _frozen_vector(v: ArrayLike, name: str) -> NDArray[np.float64]:
    arr = np.array(v, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have shape (3,), got {arr.shape}")
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class GeodeticCoordinate:
    """A point relative to the reference ellipsoid.

    Attributes:
        latitude_deg: Geodetic latitude in [-90, 90].
        longitude_deg: Longitude, normalized into (-180, 180].
        altitude_km: Height above the ellipsoid in km.
    """

    latitude_deg: float
    longitude_deg: float
    altitude_km: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude_deg <= 90.0:
            logger.error("Latitude out of range: %r", self.latitude_deg)
            raise ValueError(f"Latitude must be within [-90, 90], got {self.latitude_deg}")
        object.__setattr__(self, "longitude_deg", wrap_longitude(self.longitude_deg))


@dataclass(frozen=True)
class StateVector:
    """Position and velocity in a Cartesian Earth-centered frame.

    Attributes:
        frame: ``Frame.ECEF`` or ``Frame.ECI``.
        position_km: [x, y, z] position in km.
        velocity_km_s: [vx, vy, vz] velocity in km/s.
        epoch: Time of this state vector (UTC).
    """

    frame: Frame
    position_km: NDArray[np.float64]  # shape (3,)
    velocity_km_s: NDArray[np.float64]  # shape (3,)
    epoch: datetime

    def __post_init__(self) -> None:
        if self.frame not in (Frame.ECEF, Frame.ECI):
            raise FrameMismatchError(
                f"State vectors are ECEF or ECI, got {self.frame.name}"
            )
        object.__setattr__(self, "position_km", _frozen_vector(self.position_km, "position_km"))
        object.__setattr__(self, "velocity_km_s", _frozen_vector(self.velocity_km_s, "velocity_km_s"))
        object.__setattr__(self, "epoch", ensure_utc(self.epoch))

    def require(self, frame: Frame) -> StateVector:
        """Return self if tagged ``frame``, else raise ``FrameMismatchError``."""
        if self.frame is not frame:
            raise FrameMismatchError(f"Expected {frame.name} state, got {self.frame.name}")
        return self


def _payload_type(frame: Frame) -> type:
    # kepler imports this module
    from satcore.core.kepler import KeplerianElements

    return {
        Frame.GEODETIC: GeodeticCoordinate,
        Frame.RV: StateVector,
        Frame.KEPLER: KeplerianElements,
    }[frame]


@dataclass(frozen=True)
class FrameValue:
    """A payload tagged with the frame it is expressed in.

    Payload types by frame:

    * ``GEODETIC``: :class:`GeodeticCoordinate`
    * ``ECEF`` / ``ECI``: position array, shape (3,), km
    * ``RV``: ECI :class:`StateVector`
    * ``KEPLER``: :class:`~satcore.core.kepler.KeplerianElements`

    Attributes:
        frame: Frame tag.
        payload: Frame-specific value.
        epoch: Instant the value refers to; required whenever a conversion
            crosses between ECEF and ECI.
    """

    frame: Frame
    payload: Any
    epoch: datetime | None = None

    def __post_init__(self) -> None:
        if self.frame in (Frame.ECEF, Frame.ECI):
            object.__setattr__(self, "payload", _frozen_vector(self.payload, "payload"))
        else:
            expected = _payload_type(self.frame)
            if not isinstance(self.payload, expected):
                logger.error("%s value holds a %s payload", self.frame.name, type(self.payload).__name__)
                raise FrameMismatchError(
                    f"{self.frame.name} payload must be {expected.__name__}, "
                    f"got {type(self.payload).__name__}"
                )
            if self.frame is Frame.RV:
                self.payload.require(Frame.ECI)
        if self.epoch is not None:
            object.__setattr__(self, "epoch", ensure_utc(self.epoch))
