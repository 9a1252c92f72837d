"""Conjunction Data Message (CDM) parser.

CCSDS 508.0-B-1 messages describe one close approach between two objects.
Only the KVN (Key-Value Notation) encoding is read. Quantities are converted
to km, km/s and km² using their bracketed units, or the CCSDS defaults when
absent.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone

import numpy as np
from numpy.typing import NDArray

from satcore.core.probability import CollisionQuery
from satcore.utils.constants import DEFAULT_MC_SAMPLES

logger = logging.getLogger(__name__)

_VALUE_UNIT = re.compile(r"^(?P<value>.*?)\s*(?:\[(?P<unit>[^\]]*)\])?\s*$")

# Scale factors to km-based units. Values without a unit use the CCSDS
# defaults (m, m/s, m**2).
_TO_KM = {
    "m": 1e-3, "km": 1.0,
    "m/s": 1e-3, "km/s": 1.0,
    "m**2": 1e-6, "km**2": 1.0,
}

# Lower-triangular position block of the RTN covariance: (row, col, key).
_POSITION_COVARIANCE_KEYS = [
    (0, 0, "CR_R"),
    (1, 0, "CT_R"), (1, 1, "CT_T"),
    (2, 0, "CN_R"), (2, 1, "CN_T"), (2, 2, "CN_N"),
]


@dataclass
class CDMObject:
    """One object's data within a CDM.

    Attributes:
        designator: NORAD catalog number as text.
        name: Object name.
        international_designator: COSPAR identifier.
        maneuverable: ``YES``/``NO``/``N/A`` as reported.
        position_km: State position in the message's reference frame.
        velocity_km_s: State velocity in the message's reference frame.
        covariance_km2: 3x3 RTN position covariance, None if not provided.
    """

    designator: str
    name: str
    international_designator: str
    maneuverable: str
    position_km: NDArray[np.float64]
    velocity_km_s: NDArray[np.float64]
    covariance_km2: NDArray[np.float64] | None


@dataclass
class CDM:
    """Header, geometry and both objects of one conjunction message."""

    ccsds_cdm_vers: str
    creation_date: datetime
    originator: str
    message_id: str
    tca: datetime
    miss_distance_km: float
    relative_speed_km_s: float
    relative_position_rtn_km: NDArray[np.float64] | None
    collision_probability: float | None
    object1: CDMObject
    object2: CDMObject

    @classmethod
    def from_kvn(cls, text: str) -> CDM:
        """Parse a CDM from KVN format.

        Args:
            text: Message in KVN (one KEY = value per line).

        Returns:
            A parsed CDM object.

        Raises:
            ValueError: If a required header field, an OBJECT section or a unit
                is missing or unusable.
        """
        header, objects = _split_kvn(text)

        try:
            creation_date = _parse_datetime(header["CREATION_DATE"])
            originator = header["ORIGINATOR"]
            message_id = header["MESSAGE_ID"]
            tca = _parse_datetime(header["TCA"])
            miss_distance_km = _to_km(header["MISS_DISTANCE"], "m")
            relative_speed_km_s = _to_km(header["RELATIVE_SPEED"], "m/s")
        except (KeyError, ValueError) as e:
            logger.error("Missing or invalid required CDM header field: %s", e)
            raise ValueError(f"Missing or invalid required CDM header field: {e}") from e

        relative_position = None
        if all(k in header for k in ("RELATIVE_POSITION_R", "RELATIVE_POSITION_T", "RELATIVE_POSITION_N")):
            relative_position = np.array([
                _to_km(header["RELATIVE_POSITION_R"], "m"),
                _to_km(header["RELATIVE_POSITION_T"], "m"),
                _to_km(header["RELATIVE_POSITION_N"], "m"),
            ])

        collision_probability = None
        if "COLLISION_PROBABILITY" in header:
            try:
                collision_probability = float(header["COLLISION_PROBABILITY"])
            except ValueError:
                logger.warning("Ignoring unparseable COLLISION_PROBABILITY %r",
                               header["COLLISION_PROBABILITY"])

        if "OBJECT1" not in objects or "OBJECT2" not in objects:
            logger.error("CDM %s is missing an OBJECT section", message_id)
            raise ValueError("CDM must contain OBJECT1 and OBJECT2 sections")

        try:
            object1 = _parse_cdm_object(objects["OBJECT1"])
            object2 = _parse_cdm_object(objects["OBJECT2"])
        except (KeyError, ValueError) as e:
            raise ValueError(f"Error parsing CDM object: {e}") from e

        logger.debug("Parsed CDM %s: %s vs %s at %s", message_id,
                     object1.designator, object2.designator, tca.isoformat())
        return cls(
            ccsds_cdm_vers=header.get("CCSDS_CDM_VERS", "1.0"),
            creation_date=creation_date,
            originator=originator,
            message_id=message_id,
            tca=tca,
            miss_distance_km=miss_distance_km,
            relative_speed_km_s=relative_speed_km_s,
            relative_position_rtn_km=relative_position,
            collision_probability=collision_probability,
            object1=object1,
            object2=object2,
        )

    def to_collision_query(
        self,
        hard_body_radius_km: float,
        sigma_scale: float = 1.0,
        sample_count: int = DEFAULT_MC_SAMPLES,
    ) -> CollisionQuery:
        """Build a collision probability query from this message.

        Raises:
            ValueError: If the relative position or either covariance is missing.
        """
        if self.relative_position_rtn_km is None:
            raise ValueError(f"CDM {self.message_id} has no RELATIVE_POSITION_R/T/N")
        for obj in (self.object1, self.object2):
            if obj.covariance_km2 is None:
                raise ValueError(f"CDM {self.message_id} has no covariance for {obj.designator}")
        return CollisionQuery(
            relative_position_km=self.relative_position_rtn_km,
            covariance_a=self.object1.covariance_km2,
            covariance_b=self.object2.covariance_km2,
            hard_body_radius_km=hard_body_radius_km,
            sigma_scale=sigma_scale,
            sample_count=sample_count,
        )


def _split_kvn(text: str) -> tuple[dict[str, str], dict[str, dict[str, str]]]:
    """Split KVN text into header keys and per-object keys."""
    header: dict[str, str] = {}
    objects: dict[str, dict[str, str]] = {}
    current: dict[str, str] = header

    for line in text.strip().splitlines():
        line = line.strip()
        if not line or line.startswith("COMMENT") or "=" not in line:
            continue
        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()
        if key == "OBJECT":
            current = objects.setdefault(value, {})
            continue
        current[key] = value
    return header, objects


def _parse_datetime(dt_str: str) -> datetime:
    """CCSDS timestamp (ISO 8601 without zone) as an aware UTC datetime."""
    dt_str = dt_str.strip()
    for fmt in ["%Y-%m-%dT%H:%M:%S.%f", "%Y-%m-%dT%H:%M:%S"]:
        try:
            return datetime.strptime(dt_str, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    raise ValueError(f"Invalid datetime format: {dt_str}")


def _parse_cdm_object(data: dict[str, str]) -> CDMObject:
    position = [_to_km(data.get(k, "0"), "m") for k in ("X", "Y", "Z")]
    velocity = [_to_km(data.get(k, "0"), "m/s") for k in ("X_DOT", "Y_DOT", "Z_DOT")]
    return CDMObject(
        designator=data.get("OBJECT_DESIGNATOR", ""),
        name=data.get("OBJECT_NAME", ""),
        international_designator=data.get("INTERNATIONAL_DESIGNATOR", ""),
        maneuverable=data.get("MANEUVERABLE", ""),
        position_km=np.array(position),
        velocity_km_s=np.array(velocity),
        covariance_km2=_parse_position_covariance(data),
    )


def _parse_position_covariance(data: dict[str, str]) -> NDArray[np.float64] | None:
    """Symmetric 3x3 RTN position covariance in km², from lower-triangular m² terms."""
    if "CR_R" not in data:
        return None

    cov = np.zeros((3, 3), dtype=np.float64)
    for row, col, key in _POSITION_COVARIANCE_KEYS:
        if key in data:
            value = _to_km(data[key], "m**2")
            cov[row, col] = value
            cov[col, row] = value
    return cov


def _to_km(raw: str, default_unit: str) -> float:
    """Numeric value of ``raw`` scaled from its bracketed unit into km-based units."""
    match = _VALUE_UNIT.match(raw.strip())
    unit = (match.group("unit") or default_unit).strip().lower()
    if unit not in _TO_KM:
        raise ValueError(f"Unsupported unit [{unit}] in {raw!r}")
    return float(match.group("value")) * _TO_KM[unit]
