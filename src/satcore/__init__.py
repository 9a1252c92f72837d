"""
satcore: Satellite state, orbit and collision-risk toolkit for Python.

Converts satellite positions between geodetic, Earth-fixed, inertial and
orbital-element representations, propagates orbits analytically or with
SGP4, and estimates collision probability from position covariances.
"""

from __future__ import annotations

__version__ = "0.1.0-dev"

from satcore.exceptions import (
    SatcoreError,
    FrameMismatchError,
    DegenerateVectorError,
    NotPositiveDefiniteError,
    OrbitDomainError,
    NonConvergenceError,
)
from satcore.core.state import Frame, FrameValue, GeodeticCoordinate, StateVector
from satcore.core.frames import convert, geodetic_to_ecef, ecef_to_geodetic, ecef_to_eci, eci_to_ecef
from satcore.core.kepler import KeplerianElements, rv_to_kepler, kepler_to_rv
from satcore.core.propagation import PropagationModel, propagate, propagate_state, solve_kepler
from satcore.core.probability import CollisionQuery, PcMethod, PcResult, collision_probability
from satcore.core.tle import TLE, parse_tle
from satcore.core.ephemeris import sgp4_state, sgp4_states, sgp4_geodetic
from satcore.data.cdm import CDM, CDMObject

__all__ = [
    "__version__",
    "SatcoreError",
    "FrameMismatchError",
    "DegenerateVectorError",
    "NotPositiveDefiniteError",
    "OrbitDomainError",
    "NonConvergenceError",
    "Frame",
    "FrameValue",
    "GeodeticCoordinate",
    "StateVector",
    "convert",
    "geodetic_to_ecef",
    "ecef_to_geodetic",
    "ecef_to_eci",
    "eci_to_ecef",
    "KeplerianElements",
    "rv_to_kepler",
    "kepler_to_rv",
    "PropagationModel",
    "propagate",
    "propagate_state",
    "solve_kepler",
    "CollisionQuery",
    "PcMethod",
    "PcResult",
    "collision_probability",
    "TLE",
    "parse_tle",
    "sgp4_state",
    "sgp4_states",
    "sgp4_geodetic",
    "CDM",
    "CDMObject",
]
