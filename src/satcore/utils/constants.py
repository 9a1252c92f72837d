"""Physical constants, solver bounds and default thresholds.

Distances in km, times in seconds, angles in degrees unless otherwise noted.
Solver bounds reproduce established numeric behavior; changing them changes
results at the margins.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


@dataclass(frozen=True)
class Ellipsoid:
    """Oblate-spheroid Earth model.

    Attributes:
        semi_major_axis_km: Equatorial radius in km.
        inverse_flattening: 1/f.
        mu_km3_s2: Gravitational parameter (GM) in km³/s².
    """

    semi_major_axis_km: float
    inverse_flattening: float
    mu_km3_s2: float

    @property
    def flattening(self) -> float:
        return 1.0 / self.inverse_flattening

    @property
    def semi_minor_axis_km(self) -> float:
        return self.semi_major_axis_km * (1.0 - self.flattening)

    @property
    def eccentricity_sq(self) -> float:
        """First eccentricity squared, 1 - (b/a)²."""
        ratio = self.semi_minor_axis_km / self.semi_major_axis_km
        return 1.0 - ratio * ratio

    @property
    def mean_radius_km(self) -> float:
        return (2.0 * self.semi_major_axis_km + self.semi_minor_axis_km) / 3.0


# --- Earth parameters (WGS-84) ---
WGS84: Ellipsoid = Ellipsoid(
    semi_major_axis_km=6378.137,
    inverse_flattening=298.257223563,
    mu_km3_s2=398600.4418,
)
"""WGS-84 reference ellipsoid."""

EARTH_RADIUS_KM: float = WGS84.semi_major_axis_km
"""Equatorial radius of Earth in km."""

EARTH_MU_KM3_S2: float = WGS84.mu_km3_s2
"""Earth gravitational parameter (GM) in km³/s²."""

EARTH_ROTATION_RAD_S: float = 7.2921150e-5
"""Earth rotation rate in rad/s."""

STANDARD_GRAVITY_M_S2: float = 9.80665
"""Standard gravitational acceleration in m/s²."""

SECONDS_PER_DAY: float = 86400.0

# --- Sidereal time ---
J2000_EPOCH: datetime = datetime(2000, 1, 1, 11, 58, 55, tzinfo=timezone.utc)
"""Reference epoch for GMST (2000-001 11:58:55 UTC)."""

GMST_HOURS_AT_J2000: float = 18.697374558
"""GMST in hours at the reference epoch."""

GMST_HOURS_PER_DAY: float = 24.06570982441908
"""Sidereal hours elapsed per solar day."""

# --- J2 secular drift (a in km, result in deg/day) ---
J2_RAAN_RATE_COEFF: float = -2.064734896e14
"""Coefficient of a^-3.5 (1-e²)^-2 cos(i) for nodal regression."""

J2_PERIGEE_RATE_COEFF: float = 1.032367448e14
"""Coefficient of a^-3.5 (1-e²)^-2 (4 - 5 sin²(i)) for apsidal rotation."""

# --- Solver bounds ---
GEODETIC_ITERATIONS: int = 10
"""Fixed iteration count for ECEF to geodetic latitude refinement."""

KEPLER_TOLERANCE_RAD: float = 1e-10
"""Convergence tolerance on eccentric anomaly for the two-body solver."""

KEPLER_MAX_ITERATIONS: int = 500
"""Iteration cap for the two-body Kepler solver."""

J2_ANOMALY_ITERATIONS: int = 50
"""Fixed iteration count for the J2 model's eccentric anomaly."""

# --- Degenerate orbit thresholds ---
CIRCULAR_ECCENTRICITY_TOL: float = 1e-10
"""Eccentricity below which an orbit is treated as circular."""

EQUATORIAL_INCLINATION_TOL_DEG: float = 1e-10
"""Inclination distance from 0° or 180° below which an orbit is equatorial."""

# --- Collision probability ---
DEFAULT_MC_SEED: int = 0
"""Default Monte-Carlo seed."""

DEFAULT_MC_SAMPLES: int = 100_000
"""Default number of Monte-Carlo trials."""

MC_BATCH_SIZE: int = 100_000
"""Trials drawn per vectorized batch."""

# --- Sun (relative to Earth) ---
SOLAR_MEAN_DISTANCE_KM: float = 149598261.0
"""Mean Earth-Sun distance in km."""

EARTH_ORBIT_ECCENTRICITY: float = 0.01671123
"""Eccentricity of the Earth's orbit around the Sun."""

EARTH_ORBITAL_PERIOD_DAYS: float = 365.256363004
"""Sidereal year in days."""

SOLAR_MAX_DECLINATION_DEG: float = 23.439281
"""Solar declination at solstice in degrees."""
