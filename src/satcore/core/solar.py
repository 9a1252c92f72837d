"""Approximate position of the Sun relative to the Earth.

A low-precision model driven only by the day of year: the declination is a
sinusoid peaking at the June solstice, the sub-solar longitude follows the
UTC time of day corrected by an empirical equation of time, and the distance
varies with the eccentricity of the Earth's orbit.
"""

from __future__ import annotations

import math
from datetime import datetime

from satcore.core.state import GeodeticCoordinate, wrap_longitude
from satcore.utils.constants import (
    EARTH_ORBIT_ECCENTRICITY,
    EARTH_ORBITAL_PERIOD_DAYS,
    SOLAR_MAX_DECLINATION_DEG,
    SOLAR_MEAN_DISTANCE_KM,
)
from satcore.utils.timeutils import day_of_year

# Days from the perihelion-relative origin of the model to the March equinox.
_EQUINOX_OFFSET_DAYS = EARTH_ORBITAL_PERIOD_DAYS / 4.0 - 10.0


def solar_latitude(t: datetime) -> float:
    """Sub-solar latitude (declination) in degrees."""
    d = day_of_year(t) + EARTH_ORBITAL_PERIOD_DAYS * 0.75 + 10.0
    return SOLAR_MAX_DECLINATION_DEG * math.sin(2.0 * math.pi / EARTH_ORBITAL_PERIOD_DAYS * d)


def solar_longitude(t: datetime) -> float:
    """Sub-solar longitude in degrees, in (-180, 180]."""
    d = day_of_year(t)
    whole_day = math.floor(d)
    b = 2.0 * math.pi * (whole_day - _EQUINOX_OFFSET_DAYS) / EARTH_ORBITAL_PERIOD_DAYS
    equation_of_time_min = 9.87 * math.sin(2.0 * b) - 7.53 * math.cos(b) - 1.5 * math.sin(b)
    fraction = d - whole_day + equation_of_time_min / 1440.0
    return wrap_longitude(360.0 - (fraction * 360.0) % 360.0 + 180.0)


def solar_distance_km(t: datetime) -> float:
    """Earth-Sun distance in km."""
    phase = 2.0 * math.pi * (day_of_year(t) - _EQUINOX_OFFSET_DAYS) / EARTH_ORBITAL_PERIOD_DAYS
    return SOLAR_MEAN_DISTANCE_KM * (1.0 + EARTH_ORBIT_ECCENTRICITY * math.sin(phase))


def solar_position(t: datetime) -> GeodeticCoordinate:
    """Sub-solar point, with the Earth-Sun distance as the altitude."""
    return GeodeticCoordinate(solar_latitude(t), solar_longitude(t), solar_distance_km(t))
