"""Two-line element sets.

Element lines are checked for length, line number and checksum before the
``sgp4`` library builds its satellite record from them.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from sgp4.api import WGS72, Satrec

from satcore.core.kepler import KeplerianElements, true_from_eccentric
from satcore.core.propagation import solve_kepler
from satcore.utils.constants import EARTH_MU_KM3_S2, SECONDS_PER_DAY

logger = logging.getLogger(__name__)

TLE_LINE_LENGTH = 69

# Two-digit epoch years at or above this pivot belong to the 1900s.
_EPOCH_YEAR_PIVOT = 57


def tle_checksum(line: str) -> int:
    """Checksum of a TLE line: digit sum mod 10 over all but the last column.

    Minus signs count as 1; every other non-digit counts as 0.
    """
    total = 0
    for char in line.rstrip()[:-1]:
        if char.isdigit():
            total += int(char)
        elif char == "-":
            total += 1
    return total % 10


def verify_checksum(line: str) -> bool:
    """True if the last column of ``line`` matches its computed checksum."""
    line = line.rstrip()
    return bool(line) and line[-1].isdigit() and int(line[-1]) == tle_checksum(line)


def is_valid_tle(name: str, line1: str, line2: str) -> bool:
    """True if all three lines are non-blank and both element lines pass checksum."""
    if not (name.strip() and line1.strip() and line2.strip()):
        return False
    return verify_checksum(line1) and verify_checksum(line2)


def _check_line(number: int, line: str) -> None:
    if len(line) != TLE_LINE_LENGTH or not line.startswith(str(number)):
        logger.error("Invalid TLE line %d: %r", number, line)
        raise ValueError(f"Invalid TLE line {number}: {line!r}")
    if not verify_checksum(line):
        logger.error("Checksum mismatch on TLE line %d: %r", number, line)
        raise ValueError(
            f"Checksum mismatch on TLE line {number}: expected {tle_checksum(line)}, "
            f"found {line[-1]!r}"
        )


def _epoch(line1: str) -> datetime:
    """Epoch from columns 19-32 of line 1 (``YYDDD.DDDDDDDD``)."""
    yy = int(line1[18:20])
    century = 1900 if yy >= _EPOCH_YEAR_PIVOT else 2000
    start_of_year = datetime(century + yy, 1, 1, tzinfo=timezone.utc)
    return start_of_year + timedelta(days=float(line1[20:32]) - 1.0)


@dataclass(frozen=True)
class TLE:
    """One element set, with the fields satcore reads from it.

    Angles are in degrees and come from the sgp4 record, so they match what
    SGP4 itself propagates.

    Attributes:
        name: Title line, empty for bare two-line sets.
        line1: First element line as given.
        line2: Second element line as given.
        norad_id: Satellite catalog number.
        epoch: Element epoch (UTC).
        mean_motion_rev_per_day: Kozai mean motion.
        mean_motion_dot: Mean-motion derivative in rev/day² (twice the
            line 1 first-derivative field).
        bstar: Drag term in inverse Earth radii.
        satrec: sgp4 record used by :mod:`satcore.core.ephemeris`.
    """

    name: str
    line1: str
    line2: str
    norad_id: int
    epoch: datetime
    inclination_deg: float
    raan_deg: float
    eccentricity: float
    arg_perigee_deg: float
    mean_anomaly_deg: float
    mean_motion_rev_per_day: float
    mean_motion_dot: float
    bstar: float
    satrec: Satrec = field(repr=False, compare=False)

    @classmethod
    def from_lines(cls, line1: str, line2: str, name: str = "") -> TLE:
        """Validate two element lines and build a :class:`TLE`.

        Raises:
            ValueError: If a line has the wrong length or line number, or
                fails its checksum.
        """
        line1, line2 = line1.strip(), line2.strip()
        _check_line(1, line1)
        _check_line(2, line2)

        record = Satrec.twoline2rv(line1, line2, WGS72)
        tle = cls(
            name=name.strip(),
            line1=line1,
            line2=line2,
            norad_id=record.satnum,
            epoch=_epoch(line1),
            inclination_deg=math.degrees(record.inclo),
            raan_deg=math.degrees(record.nodeo),
            eccentricity=record.ecco,
            arg_perigee_deg=math.degrees(record.argpo),
            mean_anomaly_deg=math.degrees(record.mo),
            mean_motion_rev_per_day=record.no_kozai * 1440.0 / (2.0 * math.pi),
            mean_motion_dot=2.0 * float(line1[33:43]),
            bstar=record.bstar,
            satrec=record,
        )
        logger.debug("Read element set for NORAD %d at %s", tle.norad_id, tle.epoch.isoformat())
        return tle

    def to_elements(self, mu: float = EARTH_MU_KM3_S2) -> KeplerianElements:
        """Osculating-style elements from the TLE's mean elements.

        The semi-major axis follows from the mean motion and the true anomaly
        from the mean anomaly; suitable as input to the analytic propagators.
        """
        n_rad_s = self.mean_motion_rev_per_day * 2 * math.pi / SECONDS_PER_DAY
        a = (mu / (n_rad_s ** 2)) ** (1.0 / 3.0)
        big_e = solve_kepler(math.radians(self.mean_anomaly_deg), self.eccentricity)
        return KeplerianElements(
            epoch=self.epoch,
            semi_major_axis_km=a,
            eccentricity=self.eccentricity,
            inclination_deg=self.inclination_deg,
            raan_deg=self.raan_deg,
            arg_perigee_deg=self.arg_perigee_deg,
            true_anomaly_deg=true_from_eccentric(self.eccentricity, math.degrees(big_e)),
        )

    def __str__(self) -> str:
        lines = [self.line1, self.line2]
        if self.name:
            lines.insert(0, f"0 {self.name}")
        return "\n".join(lines)


def _element_sets(lines: list[str]):
    """Yield ``(name, line1, line2)`` groups; stray lines are dropped."""
    pending_name = ""
    idx = 0
    while idx < len(lines):
        line = lines[idx]
        is_pair = line.startswith("1 ") and idx + 1 < len(lines) and lines[idx + 1].startswith("2 ")
        if is_pair:
            yield pending_name, line, lines[idx + 1]
            pending_name = ""
            idx += 2
            continue
        # A title only counts when an element pair follows it directly
        if line[:2] in ("1 ", "2 "):
            pending_name = ""
        else:
            pending_name = line[2:].strip() if line.startswith("0 ") else line
        idx += 1


def parse_tle(text: str, skip_invalid: bool = False) -> list[TLE]:
    """Read every element set in ``text``, with or without title lines.

    Args:
        text: Element sets separated by newlines. Blank lines are ignored.
        skip_invalid: Log and drop sets that fail validation instead of
            raising.

    Raises:
        ValueError: On the first invalid set, unless ``skip_invalid`` is set.
    """
    lines = [raw.rstrip() for raw in text.splitlines() if raw.strip()]
    tles: list[TLE] = []
    for name, line1, line2 in _element_sets(lines):
        try:
            tles.append(TLE.from_lines(line1, line2, name=name))
        except ValueError:
            if not skip_invalid:
                raise
            logger.warning("Skipping invalid TLE %r", name or line1[:7])
    logger.debug("Read %d element sets", len(tles))
    return tles
