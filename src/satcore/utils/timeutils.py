"""Time helpers: UTC normalization, elapsed time, sidereal time."""

from __future__ import annotations

import math
from datetime import datetime, timezone

from satcore.utils.constants import (
    GMST_HOURS_AT_J2000,
    GMST_HOURS_PER_DAY,
    J2000_EPOCH,
    SECONDS_PER_DAY,
)


def ensure_utc(t: datetime) -> datetime:
    """Return ``t`` as an aware UTC datetime. Naive values are taken as UTC."""
    if t.tzinfo is None:
        return t.replace(tzinfo=timezone.utc)
    return t.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def delta_seconds(start: datetime, end: datetime) -> float:
    """Signed seconds from ``start`` to ``end``."""
    return (ensure_utc(end) - ensure_utc(start)).total_seconds()


def delta_days(start: datetime, end: datetime) -> float:
    return delta_seconds(start, end) / SECONDS_PER_DAY


def j2000_days(t: datetime) -> float:
    """Fractional days elapsed since the GMST reference epoch."""
    return delta_days(J2000_EPOCH, t)


def gmst_rad(t: datetime) -> float:
    """Greenwich Mean Sidereal Time at ``t`` as an angle in [0, 2π).

    Args:
        t: Instant (naive values are taken as UTC).

    Returns:
        Rotation angle between the ECEF and ECI frames in radians.
    """
    hours = (GMST_HOURS_AT_J2000 + GMST_HOURS_PER_DAY * j2000_days(t)) % 24.0
    return 2.0 * math.pi * hours / 24.0


def day_of_year(t: datetime) -> float:
    """Day of year (January 1st = 1) plus the elapsed fraction of the day."""
    t = ensure_utc(t)
    seconds = t.hour * 3600 + t.minute * 60 + t.second + t.microsecond / 1e6
    return t.timetuple().tm_yday + seconds / SECONDS_PER_DAY
