"""Geometry on and above the Earth's surface.

Points are :class:`~satcore.core.state.GeodeticCoordinate` values. Angular
results are in degrees.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum

from satcore.core.frames import geo_radius, geodetic_to_ecef
from satcore.core.state import GeodeticCoordinate, wrap_longitude
from satcore.core.vector import distance
from satcore.utils.constants import WGS84, Ellipsoid

logger = logging.getLogger(__name__)


class AngularDistanceMethod(Enum):
    """Great-circle angle formulas, slowest and most robust first."""

    HAVERSINE = "haversine"
    COSINE = "cosine"
    EQUIRECT = "equirect"


class AngularDiameterShape(Enum):
    SPHERE = "sphere"
    DISC = "disc"


@dataclass(frozen=True)
class LookAngle:
    """Pointing from a ground station to a satellite.

    Attributes:
        azimuth_deg: Clockwise from north, in [0, 360).
        elevation_deg: Above the local horizon.
        range_km: Straight-line distance.
        visible: True when the satellite is above the horizon.
    """

    azimuth_deg: float
    elevation_deg: float
    range_km: float
    visible: bool


def _haversine(p1: float, l1: float, p2: float, l2: float) -> float:
    a = math.sin((p2 - p1) / 2.0) ** 2 + math.cos(p1) * math.cos(p2) * math.sin((l2 - l1) / 2.0) ** 2
    return 2.0 * math.atan2(math.sqrt(a), math.sqrt(1.0 - a))


def _cosine(p1: float, l1: float, p2: float, l2: float) -> float:
    c = math.sin(p1) * math.sin(p2) + math.cos(p1) * math.cos(p2) * math.cos(l2 - l1)
    return math.acos(min(1.0, max(-1.0, c)))


def _equirect(p1: float, l1: float, p2: float, l2: float) -> float:
    x = (l2 - l1) * math.cos((p1 + p2) / 2.0)
    y = p2 - p1
    return math.hypot(x, y)


_ANGULAR_DISTANCE = {
    AngularDistanceMethod.HAVERSINE: _haversine,
    AngularDistanceMethod.COSINE: _cosine,
    AngularDistanceMethod.EQUIRECT: _equirect,
}


def angular_distance(
    start: GeodeticCoordinate,
    end: GeodeticCoordinate,
    method: AngularDistanceMethod = AngularDistanceMethod.HAVERSINE,
) -> float:
    """Central angle between two surface points in degrees.

    Example::

        angular_distance(GeodeticCoordinate(0, 0, 0), GeodeticCoordinate(0, 90, 0))  # 90.0
    """
    fn = _ANGULAR_DISTANCE[method]
    return math.degrees(fn(
        math.radians(start.latitude_deg), math.radians(start.longitude_deg),
        math.radians(end.latitude_deg), math.radians(end.longitude_deg),
    ))


def distance_to_horizon(altitude_km: float, ellipsoid: Ellipsoid = WGS84) -> float:
    """Central angle from the sub-observer point to its horizon, in degrees."""
    r = ellipsoid.mean_radius_km
    return math.degrees(math.acos(r / (r + altitude_km)))


def surface_visible(
    observer: GeodeticCoordinate,
    ground: GeodeticCoordinate,
    method: AngularDistanceMethod = AngularDistanceMethod.HAVERSINE,
) -> bool:
    """True if ``ground`` lies within the horizon circle of ``observer``."""
    return angular_distance(observer, ground, method) <= distance_to_horizon(observer.altitude_km)


def angular_diameter(
    distance_to_center: float,
    diameter: float,
    shape: AngularDiameterShape = AngularDiameterShape.SPHERE,
) -> float:
    """Apparent size of an object seen from ``distance_to_center`` (same units as ``diameter``).

    Raises:
        ValueError: If a sphere is viewed from inside its own radius.
    """
    ratio = diameter / (2.0 * distance_to_center)
    if shape == AngularDiameterShape.SPHERE:
        if ratio > 1.0:
            raise ValueError("Observer is inside the sphere")
        return math.degrees(2.0 * math.asin(ratio))
    elif shape == AngularDiameterShape.DISC:
        return math.degrees(2.0 * math.atan(ratio))
    else:
        raise ValueError(f"Unknown shape: {shape}")


def azimuth(station: GeodeticCoordinate, satellite: GeodeticCoordinate) -> float:
    """Initial great-circle bearing from ``station`` to the sub-satellite point."""
    lat_e = math.radians(station.latitude_deg)
    lat_s = math.radians(satellite.latitude_deg)
    d_lon = math.radians(satellite.longitude_deg - station.longitude_deg)
    y = math.sin(d_lon) * math.cos(lat_s)
    x = math.cos(lat_e) * math.sin(lat_s) - math.sin(lat_e) * math.cos(lat_s) * math.cos(d_lon)
    return math.degrees(math.atan2(y, x)) % 360.0


def elevation(station: GeodeticCoordinate, satellite: GeodeticCoordinate) -> float:
    """Angle of ``satellite`` above the local horizon of ``station``.

    Uses the central angle γ between the two points and the ratio K of their
    geocentric radii: ``el = atan((cos γ - 1/K) / sin γ)``.
    """
    lat_e = math.radians(station.latitude_deg)
    lat_s = math.radians(satellite.latitude_deg)
    d_lon = math.radians(wrap_longitude(station.longitude_deg - satellite.longitude_deg))
    gamma = _cosine(lat_e, 0.0, lat_s, d_lon)
    if gamma == 0.0:
        return 90.0
    k = ((geo_radius(satellite.latitude_deg) + satellite.altitude_km)
         / (geo_radius(station.latitude_deg) + station.altitude_km))
    return math.degrees(math.atan((math.cos(gamma) - 1.0 / k) / math.sin(gamma)))


def slant_range(station: GeodeticCoordinate, satellite: GeodeticCoordinate) -> float:
    """Straight-line distance between the two points in km."""
    return distance(geodetic_to_ecef(station), geodetic_to_ecef(satellite))


def look_angle(station: GeodeticCoordinate, satellite: GeodeticCoordinate) -> LookAngle:
    el = elevation(station, satellite)
    result = LookAngle(
        azimuth_deg=azimuth(station, satellite),
        elevation_deg=el,
        range_km=slant_range(station, satellite),
        visible=el > 0.0,
    )
    logger.debug("Look angle: az=%.3f el=%.3f rng=%.1f km",
                 result.azimuth_deg, result.elevation_deg, result.range_km)
    return result
