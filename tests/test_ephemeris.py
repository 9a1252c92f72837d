"""Tests for SGP4 ephemerides."""
from __future__ import annotations

from datetime import timedelta

import numpy as np
import pytest

from satcore.core.ephemeris import sgp4_batch, sgp4_geodetic, sgp4_state, sgp4_states
from satcore.core.state import Frame
from satcore.core.tle import TLE

ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"


@pytest.fixture
def iss_tle() -> TLE:
    return TLE.from_lines(ISS_LINE1, ISS_LINE2)


def test_state_at_epoch(iss_tle: TLE):
    """State at epoch is an ECI state in low Earth orbit."""
    state = sgp4_state(iss_tle, iss_tle.epoch)
    assert state.frame is Frame.ECI
    assert state.epoch == iss_tle.epoch
    assert 6500 < np.linalg.norm(state.position_km) < 7000
    assert 7.4 < np.linalg.norm(state.velocity_km_s) < 7.9


def test_states_one_per_time(iss_tle: TLE):
    times = [iss_tle.epoch + timedelta(minutes=m) for m in range(0, 90, 15)]
    states = sgp4_states(iss_tle, times)
    assert [s.epoch for s in states] == times
    assert not np.allclose(states[0].position_km, states[1].position_km)


def test_naive_time_is_utc(iss_tle: TLE):
    naive = iss_tle.epoch.replace(tzinfo=None)
    np.testing.assert_allclose(
        sgp4_state(iss_tle, naive).position_km,
        sgp4_state(iss_tle, iss_tle.epoch).position_km,
    )


def test_geodetic(iss_tle: TLE):
    """Sub-satellite point stays inside the inclination band at ISS altitude."""
    for minutes in (0, 20, 40):
        coord = sgp4_geodetic(iss_tle, iss_tle.epoch + timedelta(minutes=minutes))
        assert abs(coord.latitude_deg) <= 51.7
        assert 250 < coord.altitude_km < 450


def test_stale_tle(iss_tle: TLE):
    """Propagation far beyond epoch either succeeds or raises ValueError."""
    far_future = iss_tle.epoch + timedelta(days=365 * 10)
    try:
        states = sgp4_states(iss_tle, [far_future])
        assert len(states) == 1
    except ValueError:
        pass


def test_batch(iss_tle: TLE):
    states, valid = sgp4_batch([iss_tle, iss_tle], iss_tle.epoch)
    assert states.shape == (2, 6)
    assert np.all(valid)
    np.testing.assert_allclose(states[0, :3], sgp4_state(iss_tle, iss_tle.epoch).position_km)


def test_batch_empty(iss_tle: TLE):
    states, valid = sgp4_batch([], iss_tle.epoch)
    assert states.shape == (0, 6)
    assert valid.shape == (0,)
