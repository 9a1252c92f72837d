"""Tests for TLE parsing and validation."""

from datetime import timezone

import pytest

from satcore.core.tle import TLE, is_valid_tle, parse_tle, tle_checksum, verify_checksum

# ISS (ZARYA), 2008-09-20, a reference set with valid checksums
ISS_NAME = "ISS (ZARYA)"
ISS_LINE1 = "1 25544U 98067A   08264.51782528 -.00002182  00000-0 -11606-4 0  2927"
ISS_LINE2 = "2 25544  51.6416 247.4627 0006703 130.5360 325.0288 15.72125391563537"


def _corrupt(line: str) -> str:
    last = int(line[-1])
    return line[:-1] + str((last + 1) % 10)


class TestChecksum:
    def test_reference_lines(self) -> None:
        assert tle_checksum(ISS_LINE1) == 7
        assert tle_checksum(ISS_LINE2) == 7
        assert verify_checksum(ISS_LINE1)
        assert verify_checksum(ISS_LINE2)

    def test_minus_counts_as_one(self) -> None:
        assert tle_checksum("1-2-0") == 5

    def test_corrupted_line(self) -> None:
        assert not verify_checksum(_corrupt(ISS_LINE1))

    def test_non_digit_check_column(self) -> None:
        assert not verify_checksum(ISS_LINE1[:-1] + "X")

    def test_is_valid_tle(self) -> None:
        assert is_valid_tle(ISS_NAME, ISS_LINE1, ISS_LINE2)
        assert not is_valid_tle("", ISS_LINE1, ISS_LINE2)
        assert not is_valid_tle(ISS_NAME, ISS_LINE1, _corrupt(ISS_LINE2))


class TestTLEFromLines:
    def test_parse_basic(self) -> None:
        tle = TLE.from_lines(ISS_LINE1, ISS_LINE2, name=ISS_NAME)
        assert tle.norad_id == 25544
        assert tle.name == ISS_NAME

    def test_orbital_elements_reasonable(self) -> None:
        tle = TLE.from_lines(ISS_LINE1, ISS_LINE2)
        assert tle.inclination_deg == pytest.approx(51.6416, abs=1e-9)
        assert tle.eccentricity == pytest.approx(0.0006703)
        assert tle.mean_motion_rev_per_day == pytest.approx(15.72125391, rel=1e-8)

    def test_epoch_parsed(self) -> None:
        tle = TLE.from_lines(ISS_LINE1, ISS_LINE2)
        assert tle.epoch.tzinfo == timezone.utc
        assert (tle.epoch.year, tle.epoch.month, tle.epoch.day) == (2008, 9, 20)

    def test_mean_motion_derivative(self) -> None:
        tle = TLE.from_lines(ISS_LINE1, ISS_LINE2)
        assert tle.mean_motion_dot == pytest.approx(-4.364e-5)

    def test_bstar(self) -> None:
        tle = TLE.from_lines(ISS_LINE1, ISS_LINE2)
        assert tle.bstar == pytest.approx(-1.1606e-5)

    def test_str_roundtrip(self) -> None:
        tle = TLE.from_lines(ISS_LINE1, ISS_LINE2, name=ISS_NAME)
        text = str(tle)
        assert ISS_LINE1 in text
        assert ISS_LINE2 in text
        assert ISS_NAME in text

    def test_invalid_line1_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid TLE line 1"):
            TLE.from_lines("garbage", ISS_LINE2)

    def test_invalid_line2_raises(self) -> None:
        with pytest.raises(ValueError, match="Invalid TLE line 2"):
            TLE.from_lines(ISS_LINE1, "garbage")

    def test_checksum_mismatch_raises(self) -> None:
        with pytest.raises(ValueError, match="Checksum mismatch on TLE line 2"):
            TLE.from_lines(ISS_LINE1, _corrupt(ISS_LINE2))

    def test_to_elements(self) -> None:
        el = TLE.from_lines(ISS_LINE1, ISS_LINE2).to_elements()
        assert 6700.0 < el.semi_major_axis_km < 6760.0
        assert el.eccentricity == pytest.approx(0.0006703)
        assert el.raan_deg == pytest.approx(247.4627)
        # Near-circular: true anomaly stays close to the mean anomaly
        assert el.true_anomaly_deg == pytest.approx(325.0288, abs=0.1)
        assert el.mean_anomaly_deg == pytest.approx(325.0288, abs=1e-6)


class TestParseTLE:
    def test_two_line_format(self) -> None:
        tles = parse_tle(f"{ISS_LINE1}\n{ISS_LINE2}")
        assert len(tles) == 1
        assert tles[0].norad_id == 25544

    def test_three_line_format(self) -> None:
        tles = parse_tle(f"{ISS_NAME}\n{ISS_LINE1}\n{ISS_LINE2}")
        assert len(tles) == 1
        assert tles[0].name == ISS_NAME

    def test_multiple_tles(self) -> None:
        text = f"{ISS_NAME}\n{ISS_LINE1}\n{ISS_LINE2}\n{ISS_LINE1}\n{ISS_LINE2}"
        assert len(parse_tle(text)) == 2

    def test_blank_lines_and_noise_skipped(self) -> None:
        text = f"\n\nsome header\n\n{ISS_LINE1}\n\n{ISS_LINE2}\n\n"
        assert len(parse_tle(text)) == 1

    def test_bad_checksum_raises_by_default(self) -> None:
        with pytest.raises(ValueError, match="Checksum"):
            parse_tle(f"{ISS_LINE1}\n{_corrupt(ISS_LINE2)}")

    def test_skip_invalid(self) -> None:
        text = f"BAD\n{ISS_LINE1}\n{_corrupt(ISS_LINE2)}\n{ISS_NAME}\n{ISS_LINE1}\n{ISS_LINE2}"
        tles = parse_tle(text, skip_invalid=True)
        assert [t.name for t in tles] == [ISS_NAME]

    def test_empty_text(self) -> None:
        assert parse_tle("") == []

    def test_three_line_zero_prefix(self) -> None:
        tle = parse_tle(f"0 {ISS_NAME}\n{ISS_LINE1}\n{ISS_LINE2}")[0]
        assert tle.name == ISS_NAME
        assert parse_tle(str(tle))[0].name == ISS_NAME
