"""satcore quickstart: frames, orbital elements and propagation."""

from datetime import datetime, timedelta, timezone

from satcore import (
    Frame,
    FrameValue,
    GeodeticCoordinate,
    KeplerianElements,
    PropagationModel,
    convert,
    kepler_to_rv,
    parse_tle,
    propagate,
    rv_to_kepler,
    sgp4_geodetic,
    sgp4_state,
)

epoch = datetime(2024, 2, 14, 12, tzinfo=timezone.utc)

# A ground station, expressed in the Earth-fixed and inertial frames
station = FrameValue(Frame.GEODETIC, GeodeticCoordinate(51.4779, -0.0015, 0.046), epoch)
print("ECEF:", convert(station, Frame.ECEF).payload)
print("ECI: ", convert(station, Frame.ECI).payload)

# Orbital elements to a state vector and back
elements = KeplerianElements(epoch, 7000.0, 0.01, 51.6, 30.0, 40.0, 100.0)
state = kepler_to_rv(elements)
print(f"r = {state.position_km} km, v = {state.velocity_km_s} km/s")
print(f"a = {rv_to_kepler(state.position_km, state.velocity_km_s, epoch).semi_major_axis_km:.3f} km")

# One day of J2 drift
later = propagate(elements, epoch + timedelta(days=1), PropagationModel.J2)
print(f"RAAN {elements.raan_deg:.3f} -> {later.raan_deg:.3f} deg")

# SGP4 from a two-line element set
tle_text = """
ISS (ZARYA)
1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927
2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537
""".strip()
iss = parse_tle(tle_text)[0]
print(f"{iss.name} ({iss.norad_id}) epoch {iss.epoch:%Y-%m-%d %H:%M:%S}")
print(f"Period: {1440 / iss.mean_motion_rev_per_day:.1f} min")
print("ECI at epoch:", sgp4_state(iss, iss.epoch).position_km)
print("Sub-satellite point:", sgp4_geodetic(iss, iss.epoch + timedelta(minutes=30)))
