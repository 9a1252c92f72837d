"""Tests for the low-precision solar position model."""

from datetime import datetime, timezone

import pytest

from satcore.core.solar import solar_distance_km, solar_latitude, solar_longitude, solar_position
from satcore.utils.constants import EARTH_ORBIT_ECCENTRICITY, SOLAR_MEAN_DISTANCE_KM


def _utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestDeclination:
    def test_june_solstice(self):
        assert solar_latitude(_utc(2024, 6, 21, 12)) == pytest.approx(23.44, abs=0.1)

    def test_december_solstice(self):
        assert solar_latitude(_utc(2024, 12, 21, 12)) == pytest.approx(-23.44, abs=0.1)

    def test_march_equinox(self):
        assert solar_latitude(_utc(2024, 3, 20, 12)) == pytest.approx(0.0, abs=1.5)

    def test_bounded(self):
        for month in range(1, 13):
            assert abs(solar_latitude(_utc(2023, month, 1))) <= 23.439281


class TestSubSolarLongitude:
    def test_noon_utc_near_greenwich(self):
        for month in range(1, 13):
            assert abs(solar_longitude(_utc(2023, month, 15, 12))) < 5.0

    def test_midnight_utc_near_antimeridian(self):
        lon = solar_longitude(_utc(2023, 4, 15, 0))
        assert abs(abs(lon) - 180.0) < 5.0

    def test_morning_utc_east(self):
        assert solar_longitude(_utc(2023, 4, 15, 6)) == pytest.approx(90.0, abs=5.0)

    def test_moves_west(self):
        early = solar_longitude(_utc(2023, 4, 15, 10))
        late = solar_longitude(_utc(2023, 4, 15, 11))
        assert early - late == pytest.approx(15.0, abs=0.1)


class TestDistance:
    def test_perihelion_closer_than_aphelion(self):
        assert solar_distance_km(_utc(2024, 1, 3)) < solar_distance_km(_utc(2024, 7, 4))

    def test_bounds(self):
        low = SOLAR_MEAN_DISTANCE_KM * (1.0 - EARTH_ORBIT_ECCENTRICITY)
        high = SOLAR_MEAN_DISTANCE_KM * (1.0 + EARTH_ORBIT_ECCENTRICITY)
        for month in range(1, 13):
            assert low <= solar_distance_km(_utc(2023, month, 1)) <= high


def test_solar_position():
    t = _utc(2024, 6, 21, 12)
    position = solar_position(t)
    assert position.latitude_deg == pytest.approx(solar_latitude(t))
    assert position.longitude_deg == pytest.approx(solar_longitude(t))
    assert position.altitude_km == pytest.approx(solar_distance_km(t))
