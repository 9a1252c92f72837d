"""Tests for orbital elements and the rv ⇄ Kepler conversions."""

from __future__ import annotations

from datetime import datetime, timezone

import numpy as np
import pytest

from satcore.core.kepler import (
    KeplerianElements,
    eccentric_from_true,
    kepler_to_rv,
    mean_from_true,
    rv_to_kepler,
    state_to_elements,
    true_from_eccentric,
)
from satcore.core.state import Frame, StateVector
from satcore.exceptions import DegenerateVectorError, FrameMismatchError, OrbitDomainError

EPOCH = datetime(1999, 9, 9, 15, 30, tzinfo=timezone.utc)


def _elements(a=8000.0, e=0.1, i=45.0, raan=10.0, argp=20.0, nu=30.0) -> KeplerianElements:
    return KeplerianElements(EPOCH, a, e, i, raan, argp, nu)


class TestElementValidation:
    def test_angles_wrapped(self) -> None:
        el = _elements(raan=-10.0, argp=725.0, nu=360.0)
        assert el.raan_deg == pytest.approx(350.0)
        assert el.arg_perigee_deg == pytest.approx(5.0)
        assert el.true_anomaly_deg == 0.0

    @pytest.mark.parametrize("e", [1.0, 1.5, -0.1])
    def test_eccentricity_outside_ellipse(self, e: float) -> None:
        with pytest.raises(OrbitDomainError):
            _elements(e=e)

    def test_semi_major_axis_must_be_positive(self) -> None:
        with pytest.raises(OrbitDomainError):
            _elements(a=-7000.0)

    def test_inclination_range(self) -> None:
        with pytest.raises(OrbitDomainError):
            _elements(i=190.0)

    def test_domain_error_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            _elements(e=2.0)

    def test_apsides(self) -> None:
        el = _elements(a=10000.0, e=0.2)
        assert el.perigee_radius_km == pytest.approx(8000.0)
        assert el.apogee_radius_km == pytest.approx(12000.0)
        assert not el.is_circular
        assert not el.is_equatorial


class TestAnomalies:
    @pytest.mark.parametrize("nu", [0.0, 45.0, 135.0, 180.0, 225.0, 359.0])
    def test_true_eccentric_round_trip(self, nu: float) -> None:
        e = 0.3
        assert true_from_eccentric(e, eccentric_from_true(e, nu)) == pytest.approx(nu, abs=1e-9)

    def test_eccentric_anomaly_keeps_quadrant(self) -> None:
        assert 180.0 < eccentric_from_true(0.5, 250.0) < 360.0
        assert 90.0 < eccentric_from_true(0.5, 170.0) < 180.0

    def test_circular_anomalies_coincide(self) -> None:
        assert mean_from_true(0.0, 123.0) == pytest.approx(123.0)


class TestRvToKepler:
    def test_reference_state(self) -> None:
        el = rv_to_kepler([8228.0, 389.0, 6888.0], [-0.7, 6.6, -0.6], EPOCH)
        assert el.semi_major_axis_km == pytest.approx(13360.64, abs=0.01)
        assert el.eccentricity == pytest.approx(0.2205, abs=1e-4)
        assert el.inclination_deg == pytest.approx(39.94, abs=0.01)
        assert el.epoch == EPOCH

    def test_unbound_raises(self) -> None:
        with pytest.raises(OrbitDomainError):
            rv_to_kepler([7000.0, 0.0, 0.0], [0.0, 12.0, 0.0], EPOCH)

    def test_radial_trajectory_raises(self) -> None:
        with pytest.raises(DegenerateVectorError):
            rv_to_kepler([7000.0, 0.0, 0.0], [1.0, 0.0, 0.0], EPOCH)

    def test_state_to_elements_requires_eci(self) -> None:
        state = StateVector(Frame.ECEF, [7000, 0, 0], [0, 7.5, 0], EPOCH)
        with pytest.raises(FrameMismatchError):
            state_to_elements(state)


class TestRoundTrip:
    @pytest.mark.parametrize("a, e, i, raan, argp, nu", [
        (7000.0, 0.001, 51.6, 30.0, 40.0, 50.0),
        (8000.0, 0.1, 45.0, 10.0, 20.0, 30.0),
        (26560.0, 0.7, 63.4, 250.0, 270.0, 200.0),
        (42164.0, 0.05, 120.0, 359.0, 180.0, 300.0),
        (13360.0, 0.22, 98.0, 181.0, 359.5, 179.0),
    ])
    def test_kepler_rv_kepler(self, a, e, i, raan, argp, nu) -> None:
        el = rv_to_kepler(*_rv(_elements(a, e, i, raan, argp, nu)), EPOCH)
        assert el.semi_major_axis_km == pytest.approx(a, rel=1e-9)
        assert el.eccentricity == pytest.approx(e, abs=1e-9)
        assert el.inclination_deg == pytest.approx(i, abs=1e-7)
        assert el.raan_deg == pytest.approx(raan, abs=1e-6)
        assert el.arg_perigee_deg == pytest.approx(argp, abs=1e-6)
        assert el.true_anomaly_deg == pytest.approx(nu, abs=1e-6)

    def test_rv_kepler_rv(self) -> None:
        r = np.array([8228.0, 389.0, 6888.0])
        v = np.array([-0.7, 6.6, -0.6])
        state = kepler_to_rv(rv_to_kepler(r, v, EPOCH))
        np.testing.assert_allclose(state.position_km, r, rtol=1e-6)
        np.testing.assert_allclose(state.velocity_km_s, v, rtol=1e-6)
        assert state.frame is Frame.ECI

    @pytest.mark.parametrize("u", [60.0, 300.0])
    def test_circular_inclined_uses_argument_of_latitude(self, u: float) -> None:
        el = rv_to_kepler(*_rv(_elements(a=7000.0, e=0.0, i=30.0, raan=40.0, argp=0.0, nu=u)), EPOCH)
        assert el.arg_perigee_deg == 0.0
        assert el.raan_deg == pytest.approx(40.0, abs=1e-6)
        assert el.true_anomaly_deg == pytest.approx(u, abs=1e-6)

    @pytest.mark.parametrize("longitude", [60.0, 290.0])
    def test_circular_equatorial_uses_true_longitude(self, longitude: float) -> None:
        el = rv_to_kepler(*_rv(_elements(a=7000.0, e=0.0, i=0.0, raan=0.0, argp=0.0, nu=longitude)), EPOCH)
        assert el.raan_deg == 0.0
        assert el.arg_perigee_deg == 0.0
        assert el.true_anomaly_deg == pytest.approx(longitude, abs=1e-6)

    def test_elliptic_equatorial_uses_longitude_of_perigee(self) -> None:
        el = rv_to_kepler(*_rv(_elements(a=9000.0, e=0.1, i=0.0, raan=0.0, argp=45.0, nu=30.0)), EPOCH)
        assert el.raan_deg == 0.0
        assert el.arg_perigee_deg == pytest.approx(45.0, abs=1e-6)
        assert el.true_anomaly_deg == pytest.approx(30.0, abs=1e-6)

    def test_degenerate_orbit_preserves_state(self) -> None:
        original = kepler_to_rv(_elements(a=7000.0, e=0.0, i=0.0, raan=0.0, argp=0.0, nu=123.0))
        state = kepler_to_rv(state_to_elements(original))
        np.testing.assert_allclose(state.position_km, original.position_km, rtol=1e-9, atol=1e-6)


def _rv(elements: KeplerianElements) -> tuple[np.ndarray, np.ndarray]:
    state = kepler_to_rv(elements)
    return state.position_km, state.velocity_km_s
